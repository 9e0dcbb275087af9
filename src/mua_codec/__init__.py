"""mua-codec - message codec for a personal mail user agent.

This package encodes and decodes a constrained dialect of internet email:
addresses, the From/To/Subject/Date/Content-Type headers and
multipart/alternative bodies, with a byte-exact render/parse round trip.
"""

__version__ = "0.1.0"
__author__ = "Trickl"

from mua_codec.config import Settings, get_settings
from mua_codec.exceptions import FormatError, MuaCodecError, NullInputError, ValidationError
from mua_codec.models import (
    Address,
    Charset,
    ContentKind,
    ContentTypeHeader,
    DateHeader,
    FromHeader,
    Header,
    HeaderType,
    Message,
    Part,
    RecipientsHeader,
    SubjectHeader,
)

__all__ = [
    "Address",
    "Charset",
    "ContentKind",
    "ContentTypeHeader",
    "DateHeader",
    "FormatError",
    "FromHeader",
    "Header",
    "HeaderType",
    "Message",
    "MuaCodecError",
    "NullInputError",
    "Part",
    "RecipientsHeader",
    "Settings",
    "SubjectHeader",
    "ValidationError",
    "get_settings",
    "__version__",
    "__author__",
]

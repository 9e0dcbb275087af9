"""Low-level text codecs.

These modules are pure functions over strings: ASCII validation, Base64 and
RFC 2047 transport, address lists, RFC 1123 dates and message framing.
"""

from mua_codec.encoding import address, date, entry, transfer
from mua_codec.encoding.ascii import is_ascii

__all__ = ["address", "date", "entry", "is_ascii", "transfer"]

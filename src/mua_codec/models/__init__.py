"""Codec value objects: addresses, headers, parts and messages."""

from mua_codec.models.address import Address
from mua_codec.models.headers import (
    Charset,
    ContentKind,
    ContentTypeHeader,
    DateHeader,
    FromHeader,
    Header,
    HeaderType,
    RecipientsHeader,
    SubjectHeader,
    header_from_raw,
    render_header,
)
from mua_codec.models.message import Message, Part
from mua_codec.models.summary import AddressSummary, MessageSummary, PartSummary

__all__ = [
    "Address",
    "AddressSummary",
    "Charset",
    "ContentKind",
    "ContentTypeHeader",
    "DateHeader",
    "FromHeader",
    "Header",
    "HeaderType",
    "Message",
    "MessageSummary",
    "Part",
    "PartSummary",
    "RecipientsHeader",
    "SubjectHeader",
    "header_from_raw",
    "render_header",
]

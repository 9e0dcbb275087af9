"""Message and part headers.

The header family is closed: ``Header`` is the union of the five header
classes below, and code that needs to tell them apart matches on the class.
Every header exposes its ``type``, a display ``value`` and ``render()``,
which gives the canonical wire lines.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from functools import total_ordering
from typing import ClassVar

from mua_codec.encoding import date as date_codec
from mua_codec.encoding import entry, transfer
from mua_codec.encoding.ascii import is_ascii
from mua_codec.exceptions import FormatError, ValidationError, require
from mua_codec.models.address import Address


class HeaderType(str, Enum):
    """Header names, in the order they appear on the wire."""

    FROM = "From"
    TO = "To"
    SUBJECT = "Subject"
    DATE = "Date"
    CONTENT_TYPE = "Content-Type"


class ContentKind(str, Enum):
    """Supported MIME types."""

    MULTIPART_ALTERNATIVE = "multipart/alternative"
    TEXT_PLAIN = "text/plain"
    TEXT_HTML = "text/html"


class Charset(str, Enum):
    """Supported charsets; ``NONE`` is only valid for multipart/alternative."""

    NONE = ""
    US_ASCII = "us-ascii"
    UTF_8 = "utf-8"


@dataclass(frozen=True, order=True)
class FromHeader:
    """The sender of a message."""

    type: ClassVar[HeaderType] = HeaderType.FROM

    sender: Address

    def __post_init__(self) -> None:
        if not isinstance(require(self.sender, "sender"), Address):
            raise ValidationError(f"From expects an Address, got {type(self.sender).__name__}")

    @classmethod
    def parse(cls, text: str) -> FromHeader:
        return cls(Address.parse(text))

    @classmethod
    def of(cls, parts: Sequence[str]) -> FromHeader:
        """Build the header from ``(display_name, local, domain)``."""
        return cls(Address.of(parts))

    @property
    def value(self) -> str:
        return self.sender.render()

    def render(self) -> str:
        return render_header(self)


@dataclass(frozen=True, order=True)
class RecipientsHeader:
    """The non-empty, ordered list of recipients of a message.

    Headers compare lexicographically by address; when one list is a prefix
    of the other the shorter one sorts first.
    """

    type: ClassVar[HeaderType] = HeaderType.TO

    recipients: tuple[Address, ...]

    def __post_init__(self) -> None:
        recipients = tuple(require(self.recipients, "recipients"))
        if not recipients:
            raise ValidationError("At least one recipient is required")
        for recipient in recipients:
            if not isinstance(recipient, Address):
                raise ValidationError(
                    f"To expects Address items, got {type(recipient).__name__}"
                )
        object.__setattr__(self, "recipients", recipients)

    @classmethod
    def parse(cls, text: str) -> RecipientsHeader:
        return cls(tuple(Address.parse_many(text)))

    @classmethod
    def of(cls, parts_list: Sequence[Sequence[str]]) -> RecipientsHeader:
        """Build the header from a list of ``(display_name, local, domain)``."""
        return cls(tuple(Address.of(parts) for parts in require(parts_list, "parts_list")))

    @property
    def value(self) -> str:
        return "\n".join(recipient.render() for recipient in self.recipients)

    def render(self) -> str:
        return render_header(self)

    def __iter__(self) -> Iterator[Address]:
        return iter(self.recipients)

    def __len__(self) -> int:
        return len(self.recipients)


@dataclass(frozen=True, order=True)
class SubjectHeader:
    """The subject, stored decoded.

    Non-ASCII subjects travel as an RFC 2047 encoded word.
    """

    type: ClassVar[HeaderType] = HeaderType.SUBJECT

    subject: str

    def __post_init__(self) -> None:
        if not isinstance(require(self.subject, "subject"), str):
            raise ValidationError("Subject must be a string")
        if not self.subject.strip():
            raise ValidationError("Subject cannot be empty")
        if "\n" in self.subject or "\r" in self.subject:
            raise ValidationError("Subject cannot span several lines")
        object.__setattr__(self, "subject", self.subject.strip())

    @classmethod
    def parse(cls, text: str) -> SubjectHeader:
        """Build the header from its wire value, decoding an encoded word."""
        return cls(transfer.decode_word(require(text, "text").strip()))

    @property
    def encoded(self) -> str:
        """The 7-bit wire form of the subject."""
        # A literal encoded word is re-encoded so that parsing gives it back unchanged.
        if is_ascii(self.subject) and not transfer.is_encoded_word(self.subject):
            return self.subject
        return transfer.encode_word(self.subject)

    @property
    def value(self) -> str:
        return self.subject

    def render(self) -> str:
        return render_header(self)


@total_ordering
@dataclass(frozen=True, eq=False)
class DateHeader:
    """The date of a message.

    Two headers are equal when they denote the same instant with the same UTC
    offset; ordering is chronological. Sub-second precision is dropped since
    the wire form cannot carry it.
    """

    type: ClassVar[HeaderType] = HeaderType.DATE

    date: datetime

    def __post_init__(self) -> None:
        if not isinstance(require(self.date, "date"), datetime):
            raise ValidationError(f"Date expects a datetime, got {type(self.date).__name__}")
        date_codec.check_offset(self.date.utcoffset())
        object.__setattr__(self, "date", self.date.replace(microsecond=0))

    @classmethod
    def parse(cls, text: str) -> DateHeader:
        return cls(date_codec.decode(text))

    @property
    def value(self) -> str:
        return self.date.isoformat()

    def render(self) -> str:
        return render_header(self)

    def _key(self) -> tuple[datetime, object]:
        return self.date.astimezone(timezone.utc), self.date.utcoffset()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DateHeader):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, DateHeader):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())


@dataclass(frozen=True)
class ContentTypeHeader:
    """The MIME type and charset of a part.

    The charset is empty if and only if the kind is multipart/alternative.
    """

    type: ClassVar[HeaderType] = HeaderType.CONTENT_TYPE

    kind: ContentKind
    charset: Charset = Charset.NONE

    def __post_init__(self) -> None:
        try:
            kind = ContentKind(require(self.kind, "kind"))
        except ValueError as e:
            raise ValidationError(f"Unsupported content type: {self.kind!r}") from e
        try:
            charset = Charset(require(self.charset, "charset"))
        except ValueError as e:
            raise ValidationError(f"Unsupported charset: {self.charset!r}") from e

        if (kind is ContentKind.MULTIPART_ALTERNATIVE) != (charset is Charset.NONE):
            raise ValidationError(
                f"Charset {charset.value!r} is not valid for content type {kind.value!r}"
            )
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "charset", charset)

    @classmethod
    def parse(cls, text: str) -> ContentTypeHeader:
        """Build the header from its wire value.

        Raises:
            FormatError: If the kind, charset or boundary is not supported.
        """
        kind_text, parameters = entry.parse_content_type(text)
        try:
            kind = ContentKind(kind_text)
        except ValueError as e:
            raise FormatError(f"Unsupported content type: {kind_text!r}") from e

        if kind is ContentKind.MULTIPART_ALTERNATIVE:
            boundary = parameters.get("boundary")
            if boundary != entry.BOUNDARY:
                raise FormatError(f"Unsupported multipart boundary: {boundary!r}")
            return cls(kind, Charset.NONE)

        charset_text = parameters.get("charset", Charset.US_ASCII.value).lower()
        try:
            charset = Charset(charset_text)
        except ValueError as e:
            raise FormatError(f"Unsupported charset: {charset_text!r}") from e
        if charset is Charset.NONE:
            raise FormatError(f"Missing charset for {kind.value!r}")
        return cls(kind, charset)

    @property
    def is_multipart(self) -> bool:
        return self.kind is ContentKind.MULTIPART_ALTERNATIVE

    @property
    def transfer_encoded(self) -> bool:
        """Whether bodies of this type travel Base64 encoded."""
        return self.charset is Charset.UTF_8 or self.kind is ContentKind.TEXT_HTML

    @property
    def value(self) -> str:
        if self.is_multipart:
            return self.kind.value
        return f"{self.kind.value} {self.charset.value}"

    def render(self) -> str:
        return render_header(self)


Header = FromHeader | RecipientsHeader | SubjectHeader | DateHeader | ContentTypeHeader


def render_header(header: Header) -> str:
    """Render the canonical wire lines of any header."""
    match header:
        case FromHeader(sender=sender):
            return f"From: {sender.render()}"
        case RecipientsHeader(recipients=recipients):
            return "To: " + ", ".join(recipient.render() for recipient in recipients)
        case SubjectHeader():
            return f"Subject: {header.encoded}"
        case DateHeader(date=date):
            return f"Date: {date_codec.encode(date)}"
        case ContentTypeHeader(kind=ContentKind.MULTIPART_ALTERNATIVE):
            return (
                "MIME-Version: 1.0\n"
                f"Content-Type: {ContentKind.MULTIPART_ALTERNATIVE.value}; "
                f"boundary={entry.BOUNDARY}"
            )
        case ContentTypeHeader(kind=kind, charset=charset):
            rendered = f'Content-Type: {kind.value}; charset="{charset.value}"'
            if charset is not Charset.US_ASCII:
                rendered += "\nContent-Transfer-Encoding: base64"
            return rendered
    raise ValidationError(f"Not a header: {header!r}")


def header_from_raw(name: str, value: str) -> Header | None:
    """Build the header matching a raw ``(name, value)`` pair.

    Names are matched case-insensitively; unknown names give None.
    """
    match require(name, "name").lower():
        case "from":
            return FromHeader.parse(value)
        case "to":
            return RecipientsHeader.parse(value)
        case "subject":
            return SubjectHeader.parse(value)
        case "date":
            return DateHeader.parse(value)
        case "content-type":
            return ContentTypeHeader.parse(value)
    return None

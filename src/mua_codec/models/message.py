"""Message and Part aggregates.

A message carries exactly one From, To, Subject and Date header and an
ordered, non-empty list of parts. It is either a single text/plain part, or
a multipart/alternative envelope followed by a text/plain and a text/html
part.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime

import structlog

from mua_codec.encoding import entry, transfer
from mua_codec.encoding.ascii import is_ascii
from mua_codec.encoding.entry import Fragment
from mua_codec.exceptions import FormatError, ValidationError, require
from mua_codec.models.address import Address
from mua_codec.models.headers import (
    Charset,
    ContentKind,
    ContentTypeHeader,
    DateHeader,
    FromHeader,
    Header,
    RecipientsHeader,
    SubjectHeader,
    header_from_raw,
)
from mua_codec.models.summary import AddressSummary, MessageSummary, PartSummary

logger = structlog.get_logger()

_ALTERNATIVE_LAYOUT = (
    ContentKind.MULTIPART_ALTERNATIVE,
    ContentKind.TEXT_PLAIN,
    ContentKind.TEXT_HTML,
)


@dataclass(frozen=True)
class Part:
    """One body part: its Content-Type header and its decoded body."""

    content_type: ContentTypeHeader
    body: str

    def __post_init__(self) -> None:
        if not isinstance(require(self.content_type, "content_type"), ContentTypeHeader):
            raise ValidationError("A part requires a Content-Type header")
        if not isinstance(require(self.body, "body"), str):
            raise ValidationError("A part body must be a string")
        if not self.content_type.transfer_encoded and not is_ascii(self.body):
            raise ValidationError(
                f"A {self.content_type.value!r} part cannot carry a non-ASCII body"
            )
        # Raw bodies are framed on "\n"; a carriage return would not survive parsing.
        if not self.content_type.transfer_encoded and "\r" in self.body:
            raise ValidationError(
                f"A {self.content_type.value!r} part cannot carry a carriage return"
            )

    @classmethod
    def from_fragment(cls, fragment: Fragment) -> Part:
        """Build a part from a framed fragment, decoding a Base64 body.

        Raises:
            FormatError: If the fragment has no usable Content-Type or its
                body cannot be decoded.
        """
        raw = fragment.header("content-type")
        if raw is None:
            raise FormatError("Every part requires a Content-Type header")
        content_type = ContentTypeHeader.parse(raw)
        body = fragment.raw_body
        if content_type.transfer_encoded:
            body = transfer.decode(body)
        return cls(content_type, body)

    @property
    def headers(self) -> tuple[ContentTypeHeader, ...]:
        return (self.content_type,)

    @property
    def kind(self) -> ContentKind:
        return self.content_type.kind

    @property
    def wire_body(self) -> str:
        """The body as written on the wire (Base64 for encoded types)."""
        if self.content_type.transfer_encoded or not is_ascii(self.body):
            return transfer.encode(self.body)
        return self.body

    def render(self) -> str:
        return f"{self.content_type.render()}\n\n{self.wire_body}"

    def summary(self) -> PartSummary:
        return PartSummary(
            content_type=self.kind.value,
            charset=self.content_type.charset.value,
            body=self.body,
        )


def _text_part(body: str) -> Part:
    charset = Charset.US_ASCII if is_ascii(body) else Charset.UTF_8
    return Part(ContentTypeHeader(ContentKind.TEXT_PLAIN, charset), body)


def _has_boundary_line(body: str) -> bool:
    return any(
        line in (entry.DELIMITER, entry.CLOSE_DELIMITER) for line in body.split("\n")
    )


@dataclass(frozen=True)
class Message:
    """A mail message: the four essential headers and its ordered parts."""

    sender: FromHeader
    recipients: RecipientsHeader
    subject: SubjectHeader
    date: DateHeader
    parts: tuple[Part, ...]

    def __post_init__(self) -> None:
        for name, expected in (
            ("sender", FromHeader),
            ("recipients", RecipientsHeader),
            ("subject", SubjectHeader),
            ("date", DateHeader),
        ):
            value = require(getattr(self, name), name)
            if not isinstance(value, expected):
                raise ValidationError(
                    f"{name} must be a {expected.__name__}, got {type(value).__name__}"
                )

        parts = tuple(require(self.parts, "parts"))
        if not parts:
            raise ValidationError("A message requires at least one part")
        for part in parts:
            if not isinstance(part, Part):
                raise ValidationError(f"Parts must be Part objects, got {type(part).__name__}")

        kinds = tuple(part.kind for part in parts)
        if len(parts) == 1:
            if kinds[0] is not ContentKind.TEXT_PLAIN:
                raise ValidationError(
                    f"A single part message must be text/plain, got {kinds[0].value}"
                )
        else:
            if kinds != _ALTERNATIVE_LAYOUT:
                raise ValidationError(
                    "A multipart message must be a multipart/alternative envelope "
                    "followed by a text/plain and a text/html part"
                )
            for part in parts:
                if not part.content_type.transfer_encoded and _has_boundary_line(part.body):
                    raise ValidationError("A part body cannot contain a boundary line")
        object.__setattr__(self, "parts", parts)

    @classmethod
    def compose(
        cls,
        sender: FromHeader | Address,
        recipients: RecipientsHeader | Sequence[Address],
        subject: SubjectHeader | str,
        date: DateHeader | datetime,
        text: str,
        html: str = "",
    ) -> Message:
        """Compose a message from user-supplied values.

        The text part is us-ascii when its body is ASCII and utf-8 otherwise.
        When an HTML body is given, the message becomes a multipart/alternative
        envelope followed by the text part and a utf-8 HTML part.

        Raises:
            ValidationError: If a value is invalid, or an HTML body is given
                without a text body.
        """
        require(text, "text")
        if html is None:
            html = ""
        if not isinstance(sender, FromHeader):
            sender = FromHeader(sender)
        if not isinstance(recipients, RecipientsHeader):
            recipients = RecipientsHeader(tuple(require(recipients, "recipients")))
        if not isinstance(subject, SubjectHeader):
            subject = SubjectHeader(subject)
        if not isinstance(date, DateHeader):
            date = DateHeader(date)

        if not html:
            parts: tuple[Part, ...] = (_text_part(text),)
        elif not text:
            raise ValidationError("An HTML body requires a text body as well")
        else:
            parts = (
                Part(
                    ContentTypeHeader(ContentKind.MULTIPART_ALTERNATIVE),
                    entry.MULTIPART_PLACEHOLDER,
                ),
                _text_part(text),
                Part(ContentTypeHeader(ContentKind.TEXT_HTML, Charset.UTF_8), html),
            )
        return cls(sender, recipients, subject, date, parts)

    @classmethod
    def from_headers(cls, headers: Iterable[Header], parts: Sequence[Part]) -> Message:
        """Build a message from headers given in any order.

        Raises:
            ValidationError: If an essential header is missing or repeated,
                or a header is not a message header.
        """
        found: dict[type, Header] = {}
        for header in require(headers, "headers"):
            match header:
                case FromHeader() | RecipientsHeader() | SubjectHeader() | DateHeader():
                    if type(header) in found:
                        raise ValidationError(f"Duplicate {header.type.value} header")
                    found[type(header)] = header
                case _:
                    raise ValidationError(f"Not a message header: {header!r}")

        missing = [
            kind.type.value
            for kind in (FromHeader, RecipientsHeader, SubjectHeader, DateHeader)
            if kind not in found
        ]
        if missing:
            raise ValidationError(f"Missing essential headers: {', '.join(missing)}")
        return cls(
            found[FromHeader],
            found[RecipientsHeader],
            found[SubjectHeader],
            found[DateHeader],
            tuple(require(parts, "parts")),
        )

    @classmethod
    def parse(cls, text: str) -> Message:
        """Rebuild a message from its rendered text.

        Raises:
            FormatError: If the framing, a header or a body is malformed, or an
                essential header is missing or repeated.
            ValidationError: If the decoded values break a message rule.
        """
        fragments = entry.decode(text)

        found: dict[type, Header] = {}
        parts = []
        for fragment in fragments:
            for name, value in fragment.raw_headers:
                header = header_from_raw(name, value)
                if header is None or isinstance(header, ContentTypeHeader):
                    continue
                if type(header) in found:
                    raise FormatError(f"Duplicate {header.type.value} header")
                found[type(header)] = header
            parts.append(Part.from_fragment(fragment))

        missing = [
            kind.type.value
            for kind in (FromHeader, RecipientsHeader, SubjectHeader, DateHeader)
            if kind not in found
        ]
        if missing:
            raise FormatError(f"Missing essential headers: {', '.join(missing)}")

        message = cls.from_headers(found.values(), parts)
        logger.debug("message_parsed", parts=len(message.parts))
        return message

    @property
    def headers(self) -> tuple[Header, ...]:
        """The essential headers in wire order."""
        return self.sender, self.recipients, self.subject, self.date

    @property
    def is_multipart(self) -> bool:
        return len(self.parts) > 1

    @property
    def text_body(self) -> str:
        for part in self.parts:
            if part.kind is ContentKind.TEXT_PLAIN:
                return part.body
        return ""

    @property
    def html_body(self) -> str:
        for part in self.parts:
            if part.kind is ContentKind.TEXT_HTML:
                return part.body
        return ""

    def render(self) -> str:
        return entry.encode(
            (header.render() for header in self.headers),
            [part.render() for part in self.parts],
        )

    def to_sequence(self) -> str:
        """The rendered text, checked to be 7-bit clean."""
        rendered = self.render()
        if not is_ascii(rendered):
            raise ValidationError("Rendered message is not 7-bit clean")
        return rendered

    def fragments(self) -> list[Fragment]:
        return entry.decode(self.render())

    def summary(self) -> MessageSummary:
        """A serialisable snapshot for presentation layers."""
        return MessageSummary(
            sender=AddressSummary.from_address(self.sender.sender),
            recipients=[AddressSummary.from_address(a) for a in self.recipients],
            subject=self.subject.subject,
            date=self.date.date,
            parts=[part.summary() for part in self.parts],
        )

    def __str__(self) -> str:
        return self.render()

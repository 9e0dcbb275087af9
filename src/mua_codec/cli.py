"""Command-line interface for the mua codec.

Every subcommand reads its input from stdin and writes the result to stdout,
so the codec can be exercised from shell pipelines and fixture files.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable
from datetime import datetime

import structlog

from mua_codec import __version__
from mua_codec.config import Settings, get_settings
from mua_codec.encoding import date as date_codec
from mua_codec.exceptions import FormatError
from mua_codec.models import Address, DateHeader, Message, RecipientsHeader, SubjectHeader
from mua_codec.outcome import attempt

logger = structlog.get_logger()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mua-codec", description="Mail message codec")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("address-decode", help="Split one address into its three parts")
    subparsers.add_parser(
        "address-encode",
        help="Render an address from three lines: display name, local part, domain",
    )
    subparsers.add_parser(
        "recipients-decode",
        help="Split a To header (or a bare address list) into 'display, local, domain' lines",
    )
    subparsers.add_parser(
        "recipients-encode",
        help="Render a To header from 'display, local, domain' lines",
    )
    subparsers.add_parser("subject-encode", help="Render the wire form of a subject")
    subparsers.add_parser("subject-decode", help="Decode a subject wire value")
    subparsers.add_parser("date-decode", help="Print the day of week of an RFC 1123 date")
    subparsers.add_parser(
        "date-encode",
        help="Render 'YYYY M D' as an RFC 1123 date at midnight in the configured time zone",
    )

    encode_parser = subparsers.add_parser(
        "message-encode",
        help=(
            "Compose a message from lines: sender display/local/domain, recipient "
            "triples, subject, text body, html body (may be empty)"
        ),
    )
    encode_parser.add_argument(
        "--date",
        default=None,
        help="RFC 1123 date to stamp (default: now in the configured time zone)",
    )

    decode_parser = subparsers.add_parser("message-decode", help="Parse a rendered message")
    decode_parser.add_argument("--json", action="store_true", help="Print the summary as JSON")

    return parser


def _single_line(text: str) -> str:
    return " ".join(line.strip() for line in text.splitlines() if line.strip())


def _cmd_address_decode(args: argparse.Namespace, text: str, settings: Settings) -> str:
    address = Address.parse(_single_line(text))
    return "\n".join(address.parts())


def _cmd_address_encode(args: argparse.Namespace, text: str, settings: Settings) -> str:
    return Address.of(text.splitlines()).render()


def _cmd_recipients_decode(args: argparse.Namespace, text: str, settings: Settings) -> str:
    line = _single_line(text)
    name, colon, value = line.partition(":")
    if colon and name.strip().lower() == "to":
        line = value
    header = RecipientsHeader.parse(line)
    return "\n".join(", ".join(address.parts()) for address in header)


def _cmd_recipients_encode(args: argparse.Namespace, text: str, settings: Settings) -> str:
    triples = [line.rsplit(", ", 2) for line in text.splitlines() if line.strip()]
    return RecipientsHeader.of(triples).render()


def _cmd_subject_encode(args: argparse.Namespace, text: str, settings: Settings) -> str:
    return SubjectHeader(text.rstrip("\n")).encoded


def _cmd_subject_decode(args: argparse.Namespace, text: str, settings: Settings) -> str:
    return SubjectHeader.parse(_single_line(text)).subject


def _cmd_date_decode(args: argparse.Namespace, text: str, settings: Settings) -> str:
    header = DateHeader.parse(_single_line(text))
    return date_codec.WEEKDAY_NAMES[header.date.weekday()].upper()


def _cmd_date_encode(args: argparse.Namespace, text: str, settings: Settings) -> str:
    fields = _single_line(text).split()
    try:
        year, month, day = (int(field) for field in fields)
        value = datetime(year, month, day, tzinfo=settings.timezone)
    except ValueError as e:
        raise FormatError(f"Expected 'YYYY M D', got {text.strip()!r}") from e
    return date_codec.encode(DateHeader(value).date)


def _cmd_message_encode(args: argparse.Namespace, text: str, settings: Settings) -> str:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    recipient_lines = lines[3:-3]
    if len(lines) < 9 or len(recipient_lines) % 3:
        raise FormatError(
            "Expected 3 sender lines, recipient triples, a subject, a text body and an html body"
        )

    if args.date:
        date = DateHeader.parse(args.date)
    else:
        date = DateHeader(datetime.now(settings.timezone))

    message = Message.compose(
        sender=Address.of(lines[:3]),
        recipients=[
            Address.of(recipient_lines[i : i + 3]) for i in range(0, len(recipient_lines), 3)
        ],
        subject=lines[-3],
        date=date,
        text=lines[-2],
        html=lines[-1],
    )
    logger.info("message_composed", parts=len(message.parts))
    return message.render()


def _cmd_message_decode(args: argparse.Namespace, text: str, settings: Settings) -> str:
    message = Message.parse(text[:-1] if text.endswith("\n") else text)
    summary = message.summary()
    if args.json:
        return summary.model_dump_json(indent=2)

    lines = [
        f"From: {summary.sender.rendered}",
        "To: " + ", ".join(recipient.rendered for recipient in summary.recipients),
        f"Subject: {summary.subject}",
        f"Date: {summary.date.isoformat()}",
    ]
    for index, part in enumerate(summary.parts, start=1):
        charset = f"; charset={part.charset}" if part.charset else ""
        lines.append(f"\n[{index}] {part.content_type}{charset}\n{part.body}")
    return "\n".join(lines)


_COMMANDS: dict[str, Callable[[argparse.Namespace, str, Settings], str]] = {
    "address-decode": _cmd_address_decode,
    "address-encode": _cmd_address_encode,
    "recipients-decode": _cmd_recipients_decode,
    "recipients-encode": _cmd_recipients_encode,
    "subject-encode": _cmd_subject_encode,
    "subject-decode": _cmd_subject_decode,
    "date-decode": _cmd_date_decode,
    "date-encode": _cmd_date_encode,
    "message-encode": _cmd_message_encode,
    "message-decode": _cmd_message_decode,
}


def _configure_logging(settings: Settings) -> None:
    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if settings.debug else getattr(logging, settings.log_level)
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def main(args: list[str] | None = None) -> int:
    """Main entry point for the mua codec CLI.

    Args:
        args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, 1 for codec errors, 2 for usage errors).
    """
    if args is None:
        args = sys.argv[1:]

    settings = get_settings()
    _configure_logging(settings)

    parser = _build_parser()
    parsed = parser.parse_args(args)
    logger.debug("mua_codec_started", version=__version__, command=parsed.command)

    handler = _COMMANDS.get(parsed.command)
    if handler is None:
        logger.error("unknown_command", command=parsed.command)
        return 2

    outcome = attempt(handler, parsed, sys.stdin.read(), settings)
    if not outcome.ok:
        logger.error(
            "codec_error",
            command=parsed.command,
            error_type=type(outcome.error).__name__,
            error=str(outcome.error),
        )
        return 1

    print(outcome.unwrap())
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Address list codec.

An address is rendered as ``local@domain`` when it has no display name,
otherwise as ``display <local@domain>``. Multi-word display names are wrapped
in double quotes.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from mua_codec.encoding.ascii import is_ascii
from mua_codec.exceptions import FormatError, require

TOKEN_PATTERN = re.compile(r"[A-Za-z0-9.!$%&'*+/=?^_`{|}~-]+")

AddressParts = tuple[str, str, str]


def is_valid_address_part(part: str | None) -> bool:
    """Check a local or domain part against the token grammar."""
    if not part or not is_ascii(part):
        return False
    return TOKEN_PATTERN.fullmatch(part) is not None


def needs_quoting(display_name: str) -> bool:
    """Tell whether a display name is rendered between double quotes.

    A name is quoted when it has at least two single-space word separations
    (a space followed by a non-space). A trailing space never counts. Names
    containing a comma are always quoted, otherwise they would split the
    address list when decoded.
    """
    last = len(display_name) - 1
    separations = sum(
        1
        for i, char in enumerate(display_name)
        if char == " " and i != last and display_name[i + 1] != " "
    )
    return separations >= 2 or "," in display_name


def encode(display_name: str, local: str, domain: str) -> str:
    """Render a single address."""
    if not display_name:
        return f"{local}@{domain}"
    if needs_quoting(display_name):
        return f'"{display_name}" <{local}@{domain}>'
    return f"{display_name} <{local}@{domain}>"


def encode_all(addresses: Iterable[AddressParts]) -> str:
    """Render an address list separated by ``", "``."""
    return ", ".join(encode(*parts) for parts in addresses)


def _split(text: str) -> list[str]:
    # Commas inside quotes or angle brackets do not separate addresses.
    items: list[str] = []
    current: list[str] = []
    quoted = False
    bracketed = False
    for char in text:
        if char == '"' and not bracketed:
            quoted = not quoted
        elif char == "<" and not quoted:
            if bracketed:
                raise FormatError(f"Nested '<' in address list: {text!r}")
            bracketed = True
        elif char == ">" and not quoted:
            if not bracketed:
                raise FormatError(f"Unbalanced '>' in address list: {text!r}")
            bracketed = False
        elif char == "," and not quoted and not bracketed:
            items.append("".join(current))
            current = []
            continue
        current.append(char)
    if quoted or bracketed:
        raise FormatError(f"Unterminated quote or bracket in address list: {text!r}")
    items.append("".join(current))
    return items


def _split_addr_spec(spec: str) -> tuple[str, str]:
    local, at, domain = spec.partition("@")
    if not at:
        raise FormatError(f"Missing '@' in address: {spec!r}")
    if not is_valid_address_part(local):
        raise FormatError(f"Invalid local part: {local!r}")
    if not is_valid_address_part(domain):
        raise FormatError(f"Invalid domain: {domain!r}")
    return local, domain


def _decode_one(item: str) -> AddressParts:
    item = item.strip()
    if not item:
        raise FormatError("Empty address in list")

    open_at = item.rfind("<")
    if open_at == -1:
        if '"' in item:
            raise FormatError(f"Quoted display name without address: {item!r}")
        return ("", *_split_addr_spec(item))

    if not item.endswith(">"):
        raise FormatError(f"Trailing text after address: {item!r}")

    display_name = item[:open_at].strip()
    if display_name.startswith('"'):
        if len(display_name) < 2 or not display_name.endswith('"'):
            raise FormatError(f"Malformed quoted display name: {display_name!r}")
        display_name = display_name[1:-1]
        if '"' in display_name:
            raise FormatError(f"Malformed quoted display name: {display_name!r}")
    elif '"' in display_name:
        raise FormatError(f"Malformed display name: {display_name!r}")

    return (display_name, *_split_addr_spec(item[open_at + 1 : -1]))


def decode(text: str) -> list[AddressParts]:
    """Parse a comma separated address list.

    Returns:
        A list of ``(display_name, local, domain)`` triples, in order. The
        display name is empty when absent.

    Raises:
        FormatError: If the text is empty, not ASCII, or any address is
            malformed.
    """
    if not is_ascii(require(text, "text")):
        raise FormatError(f"Address text must be ASCII: {text!r}")
    if not text.strip():
        raise FormatError("Empty address text")
    return [_decode_one(item) for item in _split(text)]

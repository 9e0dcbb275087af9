"""Email address value object."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from functools import total_ordering

from mua_codec.encoding import address as address_codec
from mua_codec.encoding.ascii import is_ascii
from mua_codec.exceptions import FormatError, ValidationError, require

_FORBIDDEN_IN_DISPLAY = frozenset('"<>\r\n')


@total_ordering
@dataclass(frozen=True, eq=False)
class Address:
    """An email address made of a display name, a local part and a domain.

    The display name may be empty. Local part and domain must be non-empty
    ASCII tokens. Equality, hashing and ordering only consider the local
    part and the domain.
    """

    display_name: str
    local: str
    domain: str

    def __post_init__(self) -> None:
        require(self.display_name, "display_name")
        require(self.local, "local")
        require(self.domain, "domain")
        if not address_codec.is_valid_address_part(self.local):
            raise ValidationError(f"Invalid local part: {self.local!r}")
        if not address_codec.is_valid_address_part(self.domain):
            raise ValidationError(f"Invalid domain: {self.domain!r}")
        if not is_ascii(self.display_name):
            raise ValidationError(f"Display name must be ASCII: {self.display_name!r}")
        if _FORBIDDEN_IN_DISPLAY.intersection(self.display_name):
            raise ValidationError(
                f"Display name cannot contain quotes, angle brackets or line breaks: "
                f"{self.display_name!r}"
            )
        object.__setattr__(self, "display_name", self.display_name.strip())

    @classmethod
    def of(cls, parts: Sequence[str]) -> Address:
        """Build an address from ``(display_name, local, domain)``."""
        if len(require(parts, "parts")) != 3:
            raise ValidationError("An address is made of exactly three parts")
        return cls(*parts)

    @classmethod
    def parse(cls, text: str) -> Address:
        """Parse exactly one rendered address.

        Raises:
            FormatError: If the text is malformed or holds more than one address.
        """
        addresses = cls.parse_many(text)
        if len(addresses) != 1:
            raise FormatError(f"Expected a single address, found {len(addresses)}")
        return addresses[0]

    @classmethod
    def parse_many(cls, text: str) -> list[Address]:
        try:
            return [cls(*parts) for parts in address_codec.decode(text)]
        except ValidationError as e:
            raise FormatError(str(e)) from e

    @property
    def addr_spec(self) -> str:
        """The bare ``local@domain`` form."""
        return f"{self.local}@{self.domain}"

    def parts(self) -> tuple[str, str, str]:
        return self.display_name, self.local, self.domain

    def render(self) -> str:
        return address_codec.encode(*self.parts())

    def _key(self) -> tuple[str, str]:
        return self.local, self.domain

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return self.render()

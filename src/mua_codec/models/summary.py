"""Read-only message snapshots for presentation layers.

These Pydantic models carry plain values (no codec types) so that a terminal
view, a mailbox listing or a JSON export can consume a message without
knowing how it is encoded.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from mua_codec.models.address import Address


class AddressSummary(BaseModel):
    """A single address split into its parts."""

    model_config = ConfigDict(frozen=True)

    display_name: str = Field(default="", description="Display name, empty when absent")
    local: str = Field(description="Local part, before the @")
    domain: str = Field(description="Domain, after the @")
    rendered: str = Field(description="Address as written in a header")

    @classmethod
    def from_address(cls, address: Address) -> AddressSummary:
        return cls(
            display_name=address.display_name,
            local=address.local,
            domain=address.domain,
            rendered=address.render(),
        )


class PartSummary(BaseModel):
    """One decoded body part."""

    model_config = ConfigDict(frozen=True)

    content_type: str = Field(description="MIME type of the part")
    charset: str = Field(default="", description="Charset, empty for the multipart envelope")
    body: str = Field(description="Decoded body text")


class MessageSummary(BaseModel):
    """Decoded headers and parts of a message."""

    model_config = ConfigDict(frozen=True)

    sender: AddressSummary = Field(description="From header")
    recipients: list[AddressSummary] = Field(description="To header, in order")
    subject: str = Field(description="Decoded subject")
    date: datetime = Field(description="Date header with its own UTC offset")
    parts: list[PartSummary] = Field(default_factory=list, description="Parts, in order")

    @property
    def text_body(self) -> str:
        for part in self.parts:
            if part.content_type == "text/plain":
                return part.body
        return ""

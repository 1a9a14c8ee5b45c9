"""Nostr event record as defined by NIP-01.

Events are content addressed: ``id`` is the SHA-256 of the canonical
serialization of the remaining fields, so two events with the same id are
byte-identical. The cache never mutates an event, it only stores or expires
whole entries.
"""

from __future__ import annotations

import hashlib
from enum import IntEnum
from typing import Annotated

from pydantic import Field

from nostrcache.core.canonicalize import canonical_bytes, loads
from nostrcache.core.model import StrictModel

HexId = Annotated[str, Field(pattern=r"^[0-9a-f]{64}$")]
HexSig = Annotated[str, Field(pattern=r"^[0-9a-f]{128}$")]
Tag = list[str]

# Marker of relay entries inside a relay list event (NIP-65)
RELAY_TAG = "r"


class EventKind(IntEnum):
    """Event kinds the cache has special knowledge of."""

    METADATA = 0
    TEXT_NOTE = 1
    CONTACTS = 3
    RELAY_LIST = 10002


class NostrEvent(StrictModel):
    """Signed, immutable protocol event."""

    model_config = {"frozen": True}

    id: HexId
    pubkey: HexId
    created_at: int = Field(ge=0)
    kind: int = Field(ge=0, le=65535)
    tags: list[Tag] = Field(default_factory=list)
    content: str = ""
    sig: HexSig

    def serialize_for_id(self) -> bytes:
        """Return the byte string the event id and signature are computed over."""
        return canonical_bytes(
            [0, self.pubkey, self.created_at, self.kind, self.tags, self.content]
        )

    def compute_id(self) -> str:
        """Recompute the content-derived identifier."""
        return hashlib.sha256(self.serialize_for_id()).hexdigest()

    def has_valid_id(self) -> bool:
        """Check that ``id`` matches the event contents."""
        return self.compute_id() == self.id

    def get_matching_tags(self, name: str) -> list[Tag]:
        """Return all tags whose first element is ``name``."""
        return [tag for tag in self.tags if tag and tag[0] == name]

    def to_json_bytes(self) -> bytes:
        """Serialize to the canonical wire form."""
        return canonical_bytes(self.model_dump())

    @classmethod
    def from_json_bytes(cls, data: bytes | str) -> NostrEvent:
        """Parse the canonical wire form.

        Raises:
            MalformedPayloadError: If ``data`` is not valid JSON.
            pydantic.ValidationError: If the JSON is not a valid event.
        """
        return cls.model_validate(loads(data))

"""Subscription filter (NIP-01 ``REQ`` filter).

The cache only narrows by author and kind. The remaining NIP-01 fields are
parsed so that filters round-trip, but they are never evaluated here. Fields
from other NIPs, such as NIP-50 ``search``, are dropped.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import Field, model_validator

from nostrcache.core.model import StrictModel

_TAG_FILTER_KEY = re.compile(r"^#[A-Za-z]$")


class SubscriptionFilter(StrictModel):
    """Query description: sets of ids, authors, kinds, tags and time bounds."""

    model_config = {"extra": "ignore"}

    ids: list[str] | None = None
    authors: list[str] | None = None
    kinds: list[int] | None = None
    since: int | None = None
    until: int | None = None
    limit: int | None = Field(default=None, ge=0)
    # Single-letter tag filters keyed by letter, e.g. {"e": [...]} for "#e"
    tags: dict[str, list[str]] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _collect_tag_filters(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        tags = dict(data.pop("tags", None) or {})
        for key in [k for k in data if isinstance(k, str) and k.startswith("#")]:
            if not _TAG_FILTER_KEY.match(key):
                raise ValueError(f"invalid tag filter key: {key!r}")
            tags[key[1:]] = data.pop(key)
        data["tags"] = tags
        return data

    @property
    def is_author_kind_query(self) -> bool:
        """True when both the author set and the kind set are present."""
        return self.authors is not None and self.kinds is not None

    def author_kind_pairs(self) -> list[tuple[str, int]]:
        """Cross product of authors and kinds, duplicates removed, order kept.

        Empty when either set is absent.
        """
        if self.authors is None or self.kinds is None:
            return []
        authors = list(dict.fromkeys(self.authors))
        kinds = list(dict.fromkeys(self.kinds))
        return [(author, kind) for author in authors for kind in kinds]

    def to_nostr(self) -> dict[str, Any]:
        """Render back to the wire shape with ``#x`` tag keys."""
        payload = self.model_dump(exclude_none=True, exclude={"tags"})
        for letter, values in self.tags.items():
            payload[f"#{letter}"] = values
        return payload

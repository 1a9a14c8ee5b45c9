"""Nostr protocol models consumed by the cache.

Only the parts of the event and filter objects the cache needs are modelled
here. Signing and full filter matching live elsewhere.
"""

from pydantic import BaseModel


class StrictModel(BaseModel):
    """Base model for protocol objects.

    Unknown fields are rejected so that a malformed cache payload fails
    validation instead of silently round-tripping.
    """

    model_config = {
        "extra": "forbid",
        "populate_by_name": True,
        "validate_default": True,
    }


# StrictModel must be defined before the submodules import it
# ruff: noqa: E402
from nostrcache.core.model.event import RELAY_TAG, EventKind, NostrEvent, Tag
from nostrcache.core.model.filter import SubscriptionFilter

__all__ = [
    "StrictModel",
    "EventKind",
    "NostrEvent",
    "RELAY_TAG",
    "SubscriptionFilter",
    "Tag",
]

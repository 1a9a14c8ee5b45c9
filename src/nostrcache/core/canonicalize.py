from __future__ import annotations

from typing import Any

import orjson
from pydantic import BaseModel

from nostrcache.errors import MalformedPayloadError

ORJSON_OPTIONS = orjson.OPT_NON_STR_KEYS


def canonical_bytes(data: Any) -> bytes:
    """Return compact canonical JSON bytes for already-validated data."""
    return orjson.dumps(data, option=ORJSON_OPTIONS)


def canonical_bytes_from_model(model: BaseModel) -> bytes:
    """Dump a Pydantic model and serialize it to canonical JSON bytes."""
    payload = model.model_dump(by_alias=True, exclude_none=True)
    return canonical_bytes(payload)


def loads(data: bytes | str) -> Any:
    """Decode JSON, raising MalformedPayloadError on garbage input."""
    try:
        return orjson.loads(data)
    except orjson.JSONDecodeError as exc:
        raise MalformedPayloadError(f"invalid JSON payload: {exc}") from exc

"""JSON wire codec for cache batches.

Identifiers and entries go out as a compact JSON array using the short field
names ``c`` (cache name), ``k`` (key) and ``v`` (value). Fetch results come
back with an extra ``f`` (found) flag.
"""

from collections.abc import Iterable
from functools import lru_cache
from logging import getLogger
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import TypeAdapter
from pydantic import ValidationError
from pydantic_core import from_json

from .exceptions import SerializationError
from .types import FIELD_CACHE_NAME
from .types import FIELD_FOUND
from .types import FIELD_KEY
from .types import FIELD_VALUE
from .types import CacheEntry
from .types import CacheEntryResult
from .types import CacheIdentifier
from .types import EntryLike
from .types import IdentifierLike

logger = getLogger(__name__)

# Non-finite floats are written as bare NaN/Infinity so _dump can reject them
_payload_adapter: TypeAdapter[list[dict[str, Any]]] = TypeAdapter(
    list[dict[str, Any]], config=ConfigDict(ser_json_inf_nan="constants")
)


class _WireResult(BaseModel):
    """One element of a fetch response, before the value is typed."""

    model_config = ConfigDict(extra="ignore")

    cache_name: str = Field(alias=FIELD_CACHE_NAME)
    key: str = Field(alias=FIELD_KEY)
    value: Any = Field(default=None, alias=FIELD_VALUE)
    found: bool = Field(alias=FIELD_FOUND, strict=True)


_results_adapter: TypeAdapter[list[_WireResult]] = TypeAdapter(list[_WireResult])


@lru_cache(maxsize=128)
def _value_adapter(value_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(value_type)


def as_identifier(item: IdentifierLike) -> CacheIdentifier:
    """Coerce a ``(cache_name, key)`` pair into a CacheIdentifier."""
    if isinstance(item, CacheIdentifier):
        return item
    if isinstance(item, str):
        msg = f"Cannot use {item!r} as a cache identifier"
        raise SerializationError(msg)
    try:
        cache_name, key = item
    except (TypeError, ValueError) as e:
        msg = f"Cannot use {item!r} as a cache identifier"
        raise SerializationError(msg) from e
    return CacheIdentifier(cache_name, key)


def as_entry(item: EntryLike[Any]) -> CacheEntry[Any]:
    """Coerce a ``(cache_name, key, value)`` triple into a CacheEntry."""
    if isinstance(item, CacheEntry):
        return item
    try:
        cache_name, key, value = item
    except (TypeError, ValueError) as e:
        msg = f"Cannot use {item!r} as a cache entry"
        raise SerializationError(msg) from e
    return CacheEntry(cache_name, key, value)


def _dump(payload: list[dict[str, Any]]) -> bytes:
    try:
        body = _payload_adapter.dump_json(payload)
    except ValueError as e:
        # PydanticSerializationError and circular references both land here
        msg = f"Unable to serialize batch: {e}"
        raise SerializationError(msg) from e

    try:
        from_json(body, allow_inf_nan=False)
    except ValueError as e:
        msg = f"Unable to serialize batch, NaN and Infinity are not JSON: {e}"
        raise SerializationError(msg) from e
    return body


def encode_identifiers(ids: Iterable[IdentifierLike]) -> bytes:
    """Encode identifiers as ``[{"c": ..., "k": ...}, ...]``."""
    payload = []
    for item in ids:
        identifier = as_identifier(item)
        payload.append(
            {FIELD_CACHE_NAME: identifier.cache_name, FIELD_KEY: identifier.key}
        )
    return _dump(payload)


def encode_entries(entries: Iterable[EntryLike[Any]]) -> bytes:
    """Encode entries as ``[{"c": ..., "k": ..., "v": ...}, ...]``.

    Values may be anything pydantic can serialize to JSON: builtins,
    dataclasses, pydantic models, datetimes and so on. Values within one
    batch do not need to share a type.
    """
    payload = []
    for item in entries:
        entry = as_entry(item)
        payload.append(
            {
                FIELD_CACHE_NAME: entry.cache_name,
                FIELD_KEY: entry.key,
                FIELD_VALUE: entry.value,
            }
        )
    return _dump(payload)


def decode_results(data: bytes, value_type: Any = Any) -> list[CacheEntryResult[Any]]:
    """Decode a fetch response into typed results.

    Args:
        data: Raw response body
        value_type: Type that found values are validated into; ``Any`` keeps
            the plain JSON values

    Returns:
        The results in the order the service sent them. Entries that were
        not found carry ``None`` as their value.

    Raises:
        SerializationError: If the body is not valid JSON, does not match the
            result schema, or a found value does not match ``value_type``
    """
    try:
        wire_results = _results_adapter.validate_json(data)
    except ValidationError as e:
        msg = f"Malformed fetch response: {e}"
        raise SerializationError(msg) from e

    adapter = None if value_type is Any else _value_adapter(value_type)
    results: list[CacheEntryResult[Any]] = []
    for wire in wire_results:
        value = None
        if wire.found:
            value = wire.value
            if adapter is not None:
                try:
                    value = adapter.validate_python(value)
                except ValidationError as e:
                    msg = (
                        f"Value for {wire.cache_name!r}/{wire.key!r} "
                        f"does not match {value_type!r}: {e}"
                    )
                    raise SerializationError(msg) from e
        results.append(CacheEntryResult(wire.cache_name, wire.key, value, wire.found))

    logger.debug("Decoded %d fetch results", len(results))
    return results

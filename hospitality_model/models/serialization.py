"""JSON round-trip for model inputs.

The config dataclasses carry a pydantic config (``INPUT_CONFIG``) so a
``TypeAdapter`` can validate and dump them directly. Input keys may be
camelCase or snake_case, ``"type"`` is accepted for the tranche, covenant
and tier kinds, and operations are decoded through the ``operation_type``
tag. Output is camelCase. Floats are dumped at full precision so a round
trip is exact.

Example:
    >>> text = dumps_model_input(model_input)
    >>> loads_model_input(text) == model_input
    True
"""

import hashlib
import json
import logging
from functools import lru_cache
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import TypeAdapter

from .model import FullModelInput

logger = logging.getLogger(__name__)

T = TypeVar("T")


@lru_cache(maxsize=None)
def type_adapter(tp: Any) -> TypeAdapter:
    """Cached ``TypeAdapter`` for a config type."""
    logger.debug("Building type adapter for %r", tp)
    return TypeAdapter(tp)


def to_dict(value: Any) -> Any:
    """Convert a config (or any nested value) into camelCase JSON primitives."""
    return type_adapter(type(value)).dump_python(value, mode="json", by_alias=True)


def from_dict(tp: Type[T], data: Dict[str, Any]) -> T:
    """Validate a mapping into ``tp``; unknown keys are ignored."""
    return type_adapter(tp).validate_python(data)


def dumps_model_input(model_input: FullModelInput, indent: Optional[int] = None) -> str:
    """Serialize a ``FullModelInput`` to camelCase JSON text."""
    return type_adapter(FullModelInput).dump_json(model_input, by_alias=True, indent=indent).decode("utf-8")


def loads_model_input(text: str) -> FullModelInput:
    """Parse JSON text produced by ``dumps_model_input`` (or snake_case JSON)."""
    return type_adapter(FullModelInput).validate_json(text)


def stable_hash(value: Any) -> str:
    """Order-independent structural hash: SHA-256 of the sorted-key JSON dump."""
    dumped = json.loads(type_adapter(type(value)).dump_json(value, by_alias=True))
    payload = json.dumps(dumped, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()

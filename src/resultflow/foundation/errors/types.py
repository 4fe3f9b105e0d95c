"""Type aliases for Outcome metadata and diagnostic payloads.

Metadata is a recursive bag of JSON-like values: mappings, sequences,
strings, numbers, booleans and None. The sanitizer walks exactly these shapes
and passes anything else through untouched.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeAlias, Union

# JSON type aliases - using Any for recursive slots to keep pydantic happy
JsonPrimitive = Union[str, int, float, bool, None]
JsonValue = Union[JsonPrimitive, list[Any], tuple[Any, ...], dict[Any, Any]]
JsonDict = dict[str, Any]
JsonMapping = Mapping[str, Any]

# Metadata carried by every Outcome
Meta: TypeAlias = dict[str, Any]
MetaInput: TypeAlias = "Mapping[str, Any] | None"

# Empty dict singleton for default metadata (never mutated)
EMPTY_META: Meta = {}

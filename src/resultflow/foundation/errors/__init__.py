"""Error types and metadata aliases for resultflow.

- ResultFlowError: base exception
- InvalidStepError: pipeline step has no recognized invocation capability
- UnwrapError: unwrap of a failure carrying a non-exception payload
- JsonValue/JsonDict/Meta: metadata type aliases
"""

from .errors import InvalidStepError, ResultFlowError, UnwrapError
from .types import EMPTY_META, JsonDict, JsonMapping, JsonPrimitive, JsonValue, Meta, MetaInput

__all__ = [
    # Exceptions
    "ResultFlowError", "InvalidStepError", "UnwrapError",
    # Type aliases
    "JsonPrimitive", "JsonValue", "JsonDict", "JsonMapping", "Meta", "MetaInput", "EMPTY_META",
]

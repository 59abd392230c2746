"""
Pydantic adapter - accept BaseModel classes wherever a JSON Schema is expected.

Pydantic emits nested models under `$defs` with `#/$defs/<Model>` references
and optional fields as `anyOf` with `{"type": "null"}`; both compile without
further rewriting.
"""

import logging
from typing import Any, Dict

from pydantic import BaseModel

logger = logging.getLogger(__name__)


def is_pydantic_model(obj: Any) -> bool:
    """Return True if `obj` is a Pydantic BaseModel subclass (not an instance)."""
    return isinstance(obj, type) and issubclass(obj, BaseModel)


def pydantic_to_schema(model: type) -> Dict[str, Any]:
    """
    Convert a Pydantic model class to a JSON Schema dict.

    Args:
        model: BaseModel subclass

    Returns:
        Dict[str, Any]: JSON Schema of the model in validation mode

    Raises:
        ValueError: If `model` is not a Pydantic model class

    Example:
        ```python
        class User(BaseModel):
            name: str
            age: int

        pydantic_to_schema(User)["required"]  # ['name', 'age']
        ```
    """
    if not is_pydantic_model(model):
        raise ValueError(f"Expected a Pydantic BaseModel subclass, got {model!r}")

    schema = model.model_json_schema()
    logger.debug(f"Converted Pydantic model {model.__name__} to JSON Schema")
    return schema

"""
Schema document check against the JSON Schema metaschema.

Compilation trusts its input; with `check_schema` enabled the schema document
is first validated against the metaschema named by its `$schema` keyword
(Draft 7 when absent) so malformed keywords are reported up front instead of
producing a surprising grammar. Only the schema itself is validated, never an
instance.

Usage:
    ```python
    from schema_gbnf.validation import check_schema

    issues = check_schema({"type": "object", "properties": {"age": {"type": "int"}}})
    for issue in issues:
        print(f"{issue.path}: {issue.message}")
    # .properties.age.type: 'int' is not valid under any of the given schemas
    ```
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from jsonschema import Draft7Validator
from jsonschema.validators import validator_for

logger = logging.getLogger(__name__)


@dataclass
class SchemaIssue:
    """
    A single metaschema violation in a schema document.

    Attributes:
        path: Location of the offending keyword (e.g. ".properties.age.type")
        message: Human-readable message from jsonschema
        validator: Metaschema keyword that failed (e.g. "type", "anyOf")
        value: The offending schema fragment
    """

    path: str
    message: str
    validator: str
    value: Any

    def __str__(self) -> str:
        return f"At {self.path}: {self.message}"


def check_schema(schema: Dict[str, Any]) -> List[SchemaIssue]:
    """
    Validate a schema document against its metaschema.

    Args:
        schema: JSON Schema dictionary

    Returns:
        List[SchemaIssue]: Every violation found (empty if the schema is valid)

    Example:
        ```python
        assert check_schema({"type": "string", "minLength": 2}) == []
        assert check_schema({"type": "string", "minLength": -1})
        ```
    """
    validator_cls = validator_for(schema, default=Draft7Validator)
    meta_validator = validator_cls(validator_cls.META_SCHEMA)

    issues = [
        _convert_jsonschema_error(error)
        for error in sorted(meta_validator.iter_errors(schema), key=lambda e: [str(p) for p in e.path])
    ]
    if issues:
        logger.warning(f"Schema failed {validator_cls.__name__} metaschema with {len(issues)} issue(s)")
    return issues


def _convert_jsonschema_error(error: Any) -> SchemaIssue:
    path = "." + ".".join(str(p) for p in error.path) if error.path else "root"
    return SchemaIssue(
        path=path,
        message=error.message,
        validator=str(error.validator),
        value=error.instance,
    )

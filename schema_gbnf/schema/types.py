"""
Schema shape classification and compiler options.

A schema node can satisfy several JSON Schema shapes at once (an object with
an `enum`, a string with both `pattern` and `format`, ...). classify_schema()
applies a fixed precedence list once and returns a single SchemaShape, so the
converter dispatches on mutually exclusive cases.

Precedence (first match wins):
    REF             `$ref` present
    UNION           `oneOf` / `anyOf` present
    TYPE_UNION      `type` is a list of type names
    CONST           `const` present
    ENUM            `enum` present
    OBJECT          object-like with `properties` or non-true `additionalProperties`
    ALL_OF          `allOf` in an object or string context
    TUPLE           `prefixItems`, or a list-valued `items`
    ARRAY           schema-valued `items`
    PATTERN         `pattern` in a string context
    UUID            `format` uuid, uuid1 ... uuid5
    FORMAT_STRING   `format` with a built-in grammar (date, time, date-time)
    BOUNDED_STRING  string with `minLength` / `maxLength`
    INT_RANGE       integer with any of the four numeric bounds
    GENERIC_OBJECT  bare `"object"` type, or the empty schema
    PRIMITIVE       string, number, integer, boolean, null, array
    UNRECOGNIZED    anything else
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

from schema_gbnf.schema.primitives import PRIMITIVE_TYPES, STRING_FORMAT_RULES

UUID_FORMAT_RE = re.compile(r"uuid[1-5]?")

INT_BOUND_KEYS = ("minimum", "exclusiveMinimum", "maximum", "exclusiveMaximum")


class SchemaShape(Enum):
    """Grammar-construction strategy selected for a schema node."""

    REF = "ref"
    UNION = "union"
    TYPE_UNION = "type_union"
    CONST = "const"
    ENUM = "enum"
    OBJECT = "object"
    ALL_OF = "all_of"
    TUPLE = "tuple"
    ARRAY = "array"
    PATTERN = "pattern"
    UUID = "uuid"
    FORMAT_STRING = "format_string"
    BOUNDED_STRING = "bounded_string"
    INT_RANGE = "int_range"
    GENERIC_OBJECT = "generic_object"
    PRIMITIVE = "primitive"
    UNRECOGNIZED = "unrecognized"


@dataclass
class CompilerOptions:
    """
    Options controlling grammar generation.

    Attributes:
        prop_order: Property name -> priority; lower priorities are emitted first,
            unlisted properties keep declaration order after the listed ones
        dotall: Let `.` in patterns match line terminators too
        max_int_digits: Digit ceiling for integer ranges with an open side
        check_schema: Validate the schema document against its metaschema first
    """

    prop_order: Dict[str, int] = field(default_factory=dict)
    dotall: bool = False
    max_int_digits: int = 16
    check_schema: bool = False

    def __post_init__(self):
        if self.max_int_digits < 1:
            raise ValueError(f"max_int_digits must be at least 1, got {self.max_int_digits}")


def classify_schema(schema: Dict[str, Any]) -> SchemaShape:
    """
    Select the grammar-construction strategy for one schema node.

    Args:
        schema: Schema node (a dict)

    Returns:
        SchemaShape: The first matching shape in precedence order
    """
    schema_type = schema.get("type")
    schema_format = schema.get("format")
    stringish = schema_type is None or schema_type == "string"

    if "$ref" in schema:
        return SchemaShape.REF
    if schema.get("oneOf") is not None or schema.get("anyOf") is not None:
        return SchemaShape.UNION
    if isinstance(schema_type, list):
        return SchemaShape.TYPE_UNION
    if "const" in schema:
        return SchemaShape.CONST
    if "enum" in schema:
        return SchemaShape.ENUM
    if (schema_type is None or schema_type == "object") and (
        "properties" in schema
        or ("additionalProperties" in schema and schema["additionalProperties"] is not True)
    ):
        return SchemaShape.OBJECT
    if schema_type in (None, "object", "string") and "allOf" in schema:
        return SchemaShape.ALL_OF
    if schema_type in (None, "array"):
        if isinstance(schema.get("prefixItems"), list) or isinstance(schema.get("items"), list):
            return SchemaShape.TUPLE
        if "items" in schema:
            return SchemaShape.ARRAY
    if stringish and "pattern" in schema:
        return SchemaShape.PATTERN
    if stringish and isinstance(schema_format, str):
        if UUID_FORMAT_RE.fullmatch(schema_format):
            return SchemaShape.UUID
        if f"{schema_format}-string" in STRING_FORMAT_RULES:
            return SchemaShape.FORMAT_STRING
    if schema_type == "string" and ("minLength" in schema or "maxLength" in schema):
        return SchemaShape.BOUNDED_STRING
    if schema_type == "integer" and any(key in schema for key in INT_BOUND_KEYS):
        return SchemaShape.INT_RANGE
    if schema_type == "object" or len(schema) == 0:
        return SchemaShape.GENERIC_OBJECT
    if isinstance(schema_type, str) and schema_type in PRIMITIVE_TYPES:
        return SchemaShape.PRIMITIVE
    return SchemaShape.UNRECOGNIZED

"""
Schema-to-grammar compilation internals.

This package turns a JSON Schema document into GBNF rules.

Components:
    - types: SchemaShape classification and CompilerOptions
    - rules: RuleTable, literal quoting and the repetition builder
    - primitives: Built-in rules for JSON values and string formats
    - refs: Local `$ref` resolution
    - regex_compiler: `pattern` to grammar translation
    - int_range: Grammar for bounded integer ranges
    - exclusion: Grammar for "any string except these"
    - converter: SchemaConverter, the visitor tying the above together
    - pydantic_adapter: Convert Pydantic models to JSON Schema
    - errors: Exception hierarchy

Example:
    ```python
    from schema_gbnf.schema import SchemaConverter

    schema = {"type": "object", "properties": {"name": {"type": "string"}}}
    converter = SchemaConverter()
    converter.resolve_refs(schema)
    converter.visit(schema, "")
    print(converter.format_grammar())
    ```
"""

from schema_gbnf.schema.converter import SchemaConverter
from schema_gbnf.schema.errors import (
    BrokenRefError,
    CatalogError,
    GrammarCompileError,
    InvalidSchemaError,
    PatternSyntaxError,
    UnbalancedPatternError,
    UnrecognizedSchemaError,
    UnsupportedRefError,
)
from schema_gbnf.schema.pydantic_adapter import is_pydantic_model, pydantic_to_schema
from schema_gbnf.schema.rules import RuleTable
from schema_gbnf.schema.types import CompilerOptions, SchemaShape, classify_schema

__all__ = [
    "SchemaConverter",
    "RuleTable",
    "CompilerOptions",
    "SchemaShape",
    "classify_schema",
    "is_pydantic_model",
    "pydantic_to_schema",
    "GrammarCompileError",
    "UnsupportedRefError",
    "BrokenRefError",
    "PatternSyntaxError",
    "UnbalancedPatternError",
    "UnrecognizedSchemaError",
    "InvalidSchemaError",
    "CatalogError",
]

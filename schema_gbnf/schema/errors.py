"""
Exception hierarchy for grammar compilation.

Every error raised while compiling a schema is a GrammarCompileError. They are
all configuration/input errors: nothing is retried and no partial grammar is
returned.

Hierarchy:
    GrammarCompileError (ValueError)
    ├── UnsupportedRefError: remote or non-pointer $ref
    ├── BrokenRefError: local $ref path segment missing
    ├── PatternSyntaxError: regex outside the supported subset
    │   └── UnbalancedPatternError: unterminated (, [ or {
    ├── UnrecognizedSchemaError: schema matches no grammar strategy
    ├── InvalidSchemaError: schema document fails its metaschema
    └── CatalogError: built-in rule references an unknown dependency
"""

from typing import Any, List, Optional

from schema_gbnf.utils.json_utils import to_json


class GrammarCompileError(ValueError):
    """Base class for all schema-to-grammar compilation errors."""


class UnsupportedRefError(GrammarCompileError):
    """A $ref that is remote or not a local JSON pointer."""

    def __init__(self, message: str, ref: str):
        super().__init__(message)
        self.ref = ref


class BrokenRefError(GrammarCompileError):
    """A local $ref whose path does not exist in the schema."""

    def __init__(self, ref: str, segment: str, target: Any):
        super().__init__(f"Error resolving ref {ref}: {segment} not in {to_json(target)}")
        self.ref = ref
        self.segment = segment


class PatternSyntaxError(GrammarCompileError):
    """A `pattern` using regex syntax the translator does not support."""

    def __init__(self, message: str, pattern: str, index: Optional[int] = None):
        super().__init__(message)
        self.pattern = pattern
        self.index = index


class UnbalancedPatternError(PatternSyntaxError):
    """A `pattern` with an unterminated group, class or quantifier."""


class UnrecognizedSchemaError(GrammarCompileError):
    """A schema node that no grammar-construction strategy applies to."""

    def __init__(self, schema: Any, reason: Optional[str] = None):
        message = reason or f"Unrecognized schema: {to_json(schema)}"
        super().__init__(message)
        self.schema = schema


class InvalidSchemaError(GrammarCompileError):
    """The schema document itself is not valid against its metaschema."""

    def __init__(self, issues: List[Any]):
        lines = [f"Schema failed metaschema validation with {len(issues)} issue(s):"]
        lines.extend(f"  - {issue}" for issue in issues)
        super().__init__("\n".join(lines))
        self.issues = issues


class CatalogError(GrammarCompileError):
    """A built-in rule depends on a rule that is not in the catalog."""

"""
Validation layer module.

This module checks schemas before compilation and grammars after it.

Components:
    - schema_check: Validate a schema document against its metaschema (jsonschema)
    - grammar_parser: Parse GBNF text into rule trees
    - matcher: Decide whether a text is in a grammar's language
    - error_formatter: Convert compile errors to human-readable messages

Example:
    ```python
    from schema_gbnf import compile_grammar
    from schema_gbnf.validation import check_sample

    schema = {"type": "object", "properties": {"age": {"type": "integer"}}}
    grammar = compile_grammar(schema)

    result = check_sample(grammar, '{"age":"not a number"}')
    if not result.accepted:
        print(f"Rejected near offset {result.furthest_offset}: {result.context}")
    ```
"""

from schema_gbnf.validation.schema_check import check_schema, SchemaIssue
from schema_gbnf.validation.grammar_parser import parse_grammar, GrammarSyntaxError
from schema_gbnf.validation.matcher import GrammarMatcher, SampleCheckResult, check_sample
from schema_gbnf.validation.error_formatter import format_compile_error, suggest_fix

__all__ = [
    "check_schema",
    "SchemaIssue",
    "parse_grammar",
    "GrammarSyntaxError",
    "GrammarMatcher",
    "SampleCheckResult",
    "check_sample",
    "format_compile_error",
    "suggest_fix",
]

"""
schema-gbnf: JSON Schema to GBNF grammar compiler

schema-gbnf translates a JSON Schema document into a GBNF grammar, the
BNF-like notation grammar-constrained decoding engines (llama.cpp and its
bindings) use to restrict a model's output to JSON that follows the schema.

Key Features:
    - Objects with required/optional properties, custom key order and
      additionalProperties
    - Arrays and tuples with minItems/maxItems
    - enum, const, oneOf/anyOf/allOf and local $ref (including cycles)
    - Regex `pattern`s, integer ranges, string lengths and common formats
    - JSON Schema dicts or Pydantic models as input
    - A grammar recogniser to check samples against a compiled grammar

Quick Start:
    ```python
    from schema_gbnf import compile_grammar
    from pydantic import BaseModel

    class User(BaseModel):
        name: str
        age: int

    grammar = compile_grammar(User)
    print(grammar)
    ```

Architecture:
    1. Ref Resolver: pre-resolve local `$ref` pointers
    2. Schema Visitor: classify each node and emit named rules
    3. Generators: regex patterns, integer ranges, key exclusion
    4. Rule Table: deduplicate and serialise rules, sorted by name
"""

__version__ = "0.1.0"

# Main API exports - these are the primary user-facing names
from schema_gbnf.api import (  # noqa: F401
    CompilationResult,
    CompilerOptions,
    GrammarCompiler,
    GrammarMatcher,
    SampleCheckResult,
    check_sample,
    compile_grammar,
)
from schema_gbnf.schema.errors import GrammarCompileError  # noqa: F401

__all__ = [
    "compile_grammar",
    "GrammarCompiler",
    "CompilationResult",
    "CompilerOptions",
    "GrammarCompileError",
    "GrammarMatcher",
    "SampleCheckResult",
    "check_sample",
]

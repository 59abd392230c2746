"""
High-level Python API for schema-gbnf.

This module provides the main user-facing API for turning schemas into
grammars and checking samples against them.
"""

from schema_gbnf.compiler import CompilationResult, GrammarCompiler, compile_grammar
from schema_gbnf.schema.types import CompilerOptions
from schema_gbnf.validation.matcher import GrammarMatcher, SampleCheckResult, check_sample

# Re-export for convenience
__all__ = [
    "compile_grammar",
    "GrammarCompiler",
    "CompilationResult",
    "CompilerOptions",
    "GrammarMatcher",
    "SampleCheckResult",
    "check_sample",
]

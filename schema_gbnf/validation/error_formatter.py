"""
Error formatter - convert compile errors to user-friendly messages.

This module provides utilities for presenting GrammarCompileError instances
in a way that helps users understand what went wrong and how to fix it.
"""

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


def format_compile_error(error: GrammarCompileError) -> str:
    """
    Format a compile error with its context.

    Args:
        error: Compile error

    Returns:
        str: Formatted error with context
    """
    lines = [f"❌ {type(error).__name__}", f"   Problem: {error}"]

    if isinstance(error, PatternSyntaxError):
        prefix = "   Pattern: /"
        lines.append(f"{prefix}{error.pattern}/")
        if error.index is not None:
            # caret under the offending character
            lines.append(" " * (len(prefix) + error.index) + "^")
    elif isinstance(error, (UnsupportedRefError, BrokenRefError)):
        lines.append(f"   Ref: {error.ref}")

    return "\n".join(lines)


def suggest_fix(error: Exception) -> str:
    """
    Suggest how to fix a compile error.

    Args:
        error: Error raised while compiling

    Returns:
        str: Suggested fix
    """
    if isinstance(error, UnsupportedRefError):
        if error.ref.startswith(("http://", "https://")):
            return "Inline the remote schema under $defs and reference it as #/$defs/<name>"
        return "Use a local JSON pointer such as #/$defs/<name>"

    elif isinstance(error, BrokenRefError):
        return f"Define '{error.segment}' in the schema or fix the $ref path"

    elif isinstance(error, UnbalancedPatternError):
        return "Close every (, [ and { in the pattern"

    elif isinstance(error, PatternSyntaxError):
        return "Anchor the pattern with ^...$ and avoid lookarounds, backreferences and \\b"

    elif isinstance(error, UnrecognizedSchemaError):
        return "Give the schema a supported type: string, number, integer, boolean, null, array or object"

    elif isinstance(error, InvalidSchemaError):
        return "Fix the listed keywords, or compile without --check-schema"

    elif isinstance(error, CatalogError):
        return "This is a bug in the built-in rule catalog; please report it"

    else:
        return "Check the schema requirements"

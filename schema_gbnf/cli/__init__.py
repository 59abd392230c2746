"""
Command-line interface module.

This module provides a rich terminal interface for schema-gbnf using Typer and Rich.

Commands:
    - compile: Compile a JSON schema to a GBNF grammar
    - check: Check JSON samples against the grammar compiled from a schema

Features:
    - Grammar on stdout for piping, or saved with --output
    - Syntax-highlighted schema and grammar output
    - Colored error messages with a fix suggestion
    - Statistics table (rules, grammar size, compile time)

Example Usage:
    ```bash
    # Print the grammar
    schema-gbnf compile --schema schema.json

    # With options
    schema-gbnf compile \\
        --schema user.json \\
        --prop-order id --prop-order name \\
        --dotall \\
        --check-schema \\
        --output user.gbnf

    # Check samples
    schema-gbnf check \\
        --schema user.json \\
        --json alice.json \\
        --json bob.json
    ```
"""

from .main import app

__all__ = ["app"]

"""
Main CLI entry point using Typer.

This module defines the command-line interface for schema-gbnf using Typer.
It provides two commands: compile and check.
"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.markup import escape
from typing_extensions import Annotated

from schema_gbnf.utils.logging import setup_logging

from .commands import build_options, check_command, compile_command
from .display import print_error


# Create Typer app
app = typer.Typer(
    name="schema-gbnf",
    help="schema-gbnf - Compile JSON Schema to GBNF grammars",
    add_completion=False,
    rich_markup_mode="rich"
)

SchemaOption = Annotated[
    Path,
    typer.Option("--schema", "-s", help="Path to JSON schema file", exists=True, file_okay=True, dir_okay=False)
]
PropOrderOption = Annotated[
    Optional[List[str]],
    typer.Option("--prop-order", help="Emit this property first (repeat to order several)")
]
DotallOption = Annotated[
    bool,
    typer.Option("--dotall", help="Let '.' in patterns match newlines")
]
MaxIntDigitsOption = Annotated[
    int,
    typer.Option("--max-int-digits", min=1, help="Digit ceiling for integer ranges with an open side")
]
CheckSchemaOption = Annotated[
    bool,
    typer.Option("--check-schema", help="Validate the schema against its metaschema first")
]
ShowSchemaOption = Annotated[
    bool,
    typer.Option("--show-schema", help="Display the schema before compiling")
]


@app.command("compile")
def compile_(
    schema: SchemaOption,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Path to save the grammar (default: stdout)")
    ] = None,
    prop_order: PropOrderOption = None,
    dotall: DotallOption = False,
    max_int_digits: MaxIntDigitsOption = 16,
    check_schema: CheckSchemaOption = False,
    show_schema: ShowSchemaOption = False,
    show_rules: Annotated[
        bool,
        typer.Option("--show-rules", help="Display a table of generated rules")
    ] = False,
) -> None:
    """
    Compile a JSON schema to a GBNF grammar.

    Example:
        schema-gbnf compile \\
            --schema person.json \\
            --prop-order name --prop-order age \\
            --output person.gbnf
    """
    try:
        options = build_options(prop_order, dotall, max_int_digits, check_schema)
        compile_command(
            schema_path=schema,
            output_path=output,
            options=options,
            show_schema=show_schema,
            show_rules=show_rules
        )
    except Exception as e:
        print_error(f"Command failed: {escape(str(e))}")
        raise typer.Exit(code=1)


@app.command("check")
def check(
    schema: SchemaOption,
    samples: Annotated[
        List[Path],
        typer.Option("--json", "-j", help="JSON file to check (can be used multiple times)", exists=True, file_okay=True, dir_okay=False)
    ],
    prop_order: PropOrderOption = None,
    dotall: DotallOption = False,
    max_int_digits: MaxIntDigitsOption = 16,
    check_schema: CheckSchemaOption = False,
    show_schema: ShowSchemaOption = False,
) -> None:
    """
    Check whether the grammar compiled from a schema accepts JSON samples.

    Example:
        schema-gbnf check \\
            --schema person.json \\
            --json alice.json \\
            --json bob.json
    """
    try:
        options = build_options(prop_order, dotall, max_int_digits, check_schema)
        check_command(
            schema_path=schema,
            sample_paths=samples,
            options=options,
            show_schema=show_schema
        )
    except Exception as e:
        print_error(f"Command failed: {escape(str(e))}")
        raise typer.Exit(code=1)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option("--version", help="Show version and exit")
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log compilation details to stderr")
    ] = False,
) -> None:
    """
    schema-gbnf - Compile JSON Schema to GBNF grammars.

    The grammars constrain grammar-aware decoders (such as llama.cpp) to emit
    JSON that follows the schema.
    """
    if version:
        from schema_gbnf import __version__
        typer.echo(f"schema-gbnf version {__version__}")
        raise typer.Exit()

    if verbose:
        setup_logging("DEBUG")

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def cli() -> None:
    """CLI entry point for the console script."""
    app()


if __name__ == "__main__":
    cli()

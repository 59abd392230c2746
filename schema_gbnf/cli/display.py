"""
Rich terminal display utilities for CLI.

Provides formatted output using the Rich library for:
- Syntax-highlighted schemas and grammars
- Error messages with a fix suggestion
- Statistics and rule tables
- Per-sample check results
"""

import json
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from schema_gbnf.compiler import CompilationResult
from schema_gbnf.validation.matcher import SampleCheckResult

console = Console()
# Diagnostics shown alongside a grammar written to stdout
err_console = Console(stderr=True)


def print_header(title: str) -> None:
    """Print a formatted header."""
    console.print()
    console.print(f"[bold cyan]{title}[/bold cyan]")
    console.print("=" * len(title))
    console.print()


def print_success(message: str) -> None:
    """Print a success message with checkmark."""
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str) -> None:
    """Print an error message with X mark."""
    console.print(f"[red]✗[/red] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]⚠[/yellow] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]ℹ[/blue] {message}")


def print_json(data: Any, title: Optional[str] = None, stderr: bool = False) -> None:
    """
    Print JSON data with syntax highlighting.

    Args:
        data: JSON-serializable data or JSON string
        title: Optional title for the panel
        stderr: Print to stderr instead of stdout
    """
    out = err_console if stderr else console
    if isinstance(data, str):
        json_str = data
    else:
        json_str = json.dumps(data, indent=2, ensure_ascii=False)

    syntax = Syntax(json_str, "json", theme="monokai", line_numbers=False)

    if title:
        panel = Panel(syntax, title=f"[bold]{title}[/bold]", border_style="cyan")
        out.print(panel)
    else:
        out.print(syntax)


def print_schema(schema: Dict, title: str = "Schema", stderr: bool = False) -> None:
    """Print a schema with syntax highlighting."""
    print_json(schema, title, stderr=stderr)


def print_grammar(grammar: str) -> None:
    """
    Print grammar text.

    On a terminal the grammar is highlighted; otherwise it is written
    verbatim so it can be piped into a file or another tool.
    """
    if console.is_terminal:
        console.print(Syntax(grammar, "ebnf", theme="monokai", word_wrap=True))
    else:
        console.out(grammar, highlight=False, end="")


def print_compile_error(error: Exception, details: str, suggestion: str) -> None:
    """
    Print a compile error with context and a suggested fix.

    Args:
        error: The exception raised
        details: Formatted description (see format_compile_error)
        suggestion: Suggested fix (see suggest_fix)
    """
    console.print()
    console.print(Panel(escape(details), title="[bold red]Compilation Failed[/bold red]", border_style="red"))
    print_info(f"Suggestion: {escape(suggestion)}")
    console.print()


def print_compile_stats(result: CompilationResult, source: str) -> None:
    """
    Print compilation statistics in a table.

    Args:
        result: Compilation result
        source: Where the schema came from
    """
    table = Table(title="Compilation Statistics", show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="cyan", width=20)
    table.add_column("Value", style="white", width=40)

    table.add_row("Schema", escape(source))
    table.add_row("Rules", str(result.rule_count))
    table.add_row("Grammar Size", f"{len(result.grammar)} chars")
    table.add_row("Compile Time", f"{result.elapsed_ms:.1f} ms")

    console.print()
    console.print(table)
    console.print()


def print_rule_table(grammar: str, stderr: bool = False) -> None:
    """
    Print every rule of a grammar as a two-column table.

    Args:
        grammar: Grammar text, one `name ::= body` per line
        stderr: Print to stderr instead of stdout
    """
    out = err_console if stderr else console
    table = Table(title="Rules", show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Rule", style="cyan")
    table.add_column("Body", style="white", overflow="fold")

    for i, line in enumerate(grammar.splitlines(), 1):
        name, _, body = line.partition(" ::= ")
        table.add_row(str(i), escape(name), Text(body))

    out.print()
    out.print(table)
    out.print()


def print_sample_results(results: List[Dict[str, Any]]) -> None:
    """
    Print sample check results in a formatted table.

    Args:
        results: List of dictionaries with keys:
            - sample: Sample file name
            - result: SampleCheckResult
    """
    table = Table(title="Sample Check Results", show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Sample", style="cyan", width=30)
    table.add_column("Accepted", justify="center", width=10)
    table.add_column("Stopped At", justify="right", width=10)
    table.add_column("Context", style="white")

    for i, entry in enumerate(results, 1):
        check: SampleCheckResult = entry["result"]
        accepted_icon = "[green]✓[/green]" if check.accepted else "[red]✗[/red]"
        table.add_row(
            str(i),
            escape(entry["sample"]),
            accepted_icon,
            "" if check.accepted else str(check.furthest_offset),
            "" if check.accepted else Text(check.context),
        )

    console.print()
    console.print(table)

    accepted = sum(1 for entry in results if entry["result"].accepted)
    console.print(f"[bold]{accepted}/{len(results)}[/bold] sample(s) accepted")
    console.print()


def print_separator() -> None:
    """Print a visual separator line."""
    console.print("[dim]" + "─" * 70 + "[/dim]")

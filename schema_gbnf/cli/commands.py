"""
CLI command implementations.

This module contains the business logic for each CLI command:
- compile: Compile a schema to a GBNF grammar
- check: Compile a schema and check sample JSON files against the grammar
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.markup import escape

from schema_gbnf.compiler import CompilationResult, GrammarCompiler
from schema_gbnf.schema.errors import GrammarCompileError
from schema_gbnf.schema.types import CompilerOptions
from schema_gbnf.utils.json_utils import to_json
from schema_gbnf.validation.error_formatter import format_compile_error, suggest_fix
from schema_gbnf.validation.matcher import GrammarMatcher

from .display import (
    print_compile_error,
    print_compile_stats,
    print_error,
    print_grammar,
    print_header,
    print_rule_table,
    print_sample_results,
    print_schema,
    print_separator,
    print_success,
    print_warning,
)


def load_schema_file(schema_path: Path) -> Dict:
    """
    Load and parse a JSON schema file.

    Args:
        schema_path: Path to schema JSON file

    Returns:
        Parsed schema dictionary

    Raises:
        ValueError: If file doesn't exist or isn't valid JSON
    """
    if not schema_path.exists():
        raise ValueError(f"Schema file not found: {schema_path}")

    try:
        with open(schema_path, encoding="utf-8") as f:
            schema = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in schema file: {e}")

    if not isinstance(schema, dict):
        raise ValueError(f"Schema must be a JSON object, got {type(schema).__name__}")
    return schema


def load_sample_file(sample_path: Path) -> str:
    """
    Load a JSON sample and return its compact serialisation.

    Args:
        sample_path: Path to a JSON file

    Returns:
        str: Compact JSON text, the form a model would be steered to emit

    Raises:
        ValueError: If file doesn't exist or isn't valid JSON
    """
    if not sample_path.exists():
        raise ValueError(f"Sample file not found: {sample_path}")

    try:
        with open(sample_path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in sample file {sample_path}: {e}")
    return to_json(data)


def build_options(
    prop_order: Optional[List[str]],
    dotall: bool,
    max_int_digits: int,
    check_schema: bool,
) -> CompilerOptions:
    """
    Collect CLI flags into CompilerOptions.

    Args:
        prop_order: Property names in the order they should be emitted
        dotall: Whether `.` in patterns matches newlines
        max_int_digits: Digit ceiling for open integer ranges
        check_schema: Whether to validate the schema document first

    Returns:
        CompilerOptions
    """
    return CompilerOptions(
        prop_order={name: i for i, name in enumerate(prop_order or [])},
        dotall=dotall,
        max_int_digits=max_int_digits,
        check_schema=check_schema,
    )


def _compile_or_exit(schema: Dict[str, Any], options: CompilerOptions) -> CompilationResult:
    try:
        return GrammarCompiler(options).compile(schema)
    except GrammarCompileError as e:
        print_compile_error(e, format_compile_error(e), suggest_fix(e))
        raise SystemExit(1)


def compile_command(
    schema_path: Path,
    output_path: Optional[Path],
    options: CompilerOptions,
    show_schema: bool,
    show_rules: bool,
) -> None:
    """
    Execute the compile command.

    Without an output path the grammar is the only thing written to stdout;
    the schema and rule table, when requested, go to stderr so the command
    can be piped.

    Args:
        schema_path: Path to JSON schema file
        output_path: Optional path to save the grammar
        options: Compiler options
        show_schema: Whether to display the schema
        show_rules: Whether to display a table of rules
    """
    try:
        schema = load_schema_file(schema_path)
    except Exception as e:
        print_error(f"Failed to load schema: {escape(str(e))}")
        raise SystemExit(1)

    if output_path is None:
        if show_schema:
            print_schema(schema, stderr=True)
        result = _compile_or_exit(schema, options)
        if show_rules:
            print_rule_table(result.grammar, stderr=True)
        print_grammar(result.grammar)
        return

    print_header("schema-gbnf - Compile")
    print_success(f"Loaded schema from: {escape(str(schema_path))}")

    if show_schema:
        print_schema(schema)

    result = _compile_or_exit(schema, options)
    print_success(f"Compiled {result.rule_count} rules")

    if show_rules:
        print_rule_table(result.grammar)

    print_compile_stats(result, str(schema_path))

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(result.grammar, encoding="utf-8")
    except OSError as e:
        print_error(f"Failed to save grammar: {escape(str(e))}")
        raise SystemExit(1)
    print_success(f"Grammar saved to: {escape(str(output_path))}")


def check_command(
    schema_path: Path,
    sample_paths: List[Path],
    options: CompilerOptions,
    show_schema: bool,
) -> None:
    """
    Execute the check command.

    Args:
        schema_path: Path to JSON schema file
        sample_paths: JSON files to check against the grammar
        options: Compiler options
        show_schema: Whether to display the schema
    """
    print_header("schema-gbnf - Check Samples")

    try:
        schema = load_schema_file(schema_path)
        print_success(f"Loaded schema from: {escape(str(schema_path))}")
    except Exception as e:
        print_error(f"Failed to load schema: {escape(str(e))}")
        raise SystemExit(1)

    if show_schema:
        print_schema(schema)

    result = _compile_or_exit(schema, options)
    print_success(f"Compiled {result.rule_count} rules in {result.elapsed_ms:.1f} ms")
    print_separator()

    matcher = GrammarMatcher(result.grammar)
    results: List[Dict[str, Any]] = []
    for sample_path in sample_paths:
        try:
            text = load_sample_file(sample_path)
        except ValueError as e:
            print_warning(escape(str(e)))
            raise SystemExit(1)
        results.append({"sample": sample_path.name, "result": matcher.check(text)})

    print_sample_results(results)

    rejected = [entry["sample"] for entry in results if not entry["result"].accepted]
    if rejected:
        print_error(f"Rejected by grammar: {escape(', '.join(rejected))}")
        raise SystemExit(1)
    print_success("All samples accepted")

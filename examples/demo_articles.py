#!/usr/bin/env python3
"""
Demo: List of articles.

This demonstrates compiling a bounded array of objects with:
- String length limits on title and author
- A date-time timestamp
- An optional list of tags

and writing the grammar to a file for use with llama.cpp (`--grammar-file`).
"""

import json
import sys
import tempfile
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from schema_gbnf import GrammarCompileError, compile_grammar
from schema_gbnf.validation import GrammarMatcher, format_compile_error, suggest_fix


def main():
    print("=" * 60)
    print("schema-gbnf Demo: List of Articles")
    print("=" * 60)

    # Define schema
    schema = {
        "type": "array",
        "items": {
            "type": "object",
            "properties": {
                "title": {
                    "type": "string",
                    "minLength": 5,
                    "maxLength": 200
                },
                "author": {
                    "type": "string",
                    "minLength": 2,
                    "maxLength": 100
                },
                "timestamp": {
                    "type": "string",
                    "format": "date-time"
                },
                "tags": {
                    "type": "array",
                    "items": {"type": "string"}
                }
            },
            "required": ["title", "author", "timestamp"]
        },
        "minItems": 1,
        "maxItems": 10
    }

    print("\nSchema:")
    print(json.dumps(schema, indent=2))

    grammar = compile_grammar(schema)
    output_path = Path(tempfile.gettempdir()) / "articles.gbnf"
    output_path.write_text(grammar, encoding="utf-8")
    print(f"\n✓ Grammar saved to: {output_path}")

    articles = [
        {"title": "Grammar-constrained decoding", "author": "Ada", "timestamp": "2024-05-01T09:30:00Z", "tags": ["llm"]},
        {"title": "Schemas everywhere", "author": "Grace", "timestamp": "2024-05-02T17:00:00+02:00"},
    ]
    matcher = GrammarMatcher(grammar)
    print(f"\nTwo articles accepted: {matcher.accepts(json.dumps(articles, indent=2))}")
    print(f"Empty list accepted: {matcher.accepts('[]')}")

    # An unsupported pattern is reported with a suggestion
    print("\n" + "=" * 60)
    print("Error Reporting")
    print("=" * 60)
    broken = {"type": "string", "pattern": "^(?=x)x$"}
    try:
        compile_grammar(broken)
    except GrammarCompileError as e:
        print(format_compile_error(e))
        print(f"   Fix: {suggest_fix(e)}")

    print("\n" + "=" * 60)
    print("Demo complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
Demo: Person record with nested fields.

This demonstrates compiling a person profile schema with:
- Required fields: name, age
- Nested object: address with city (required)
- Array: hobbies
- Constraints: minLength, maxLength, minimum, maximum, pattern

and checking a few candidate outputs against the grammar.
"""

import json
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from schema_gbnf import GrammarCompiler
from schema_gbnf.validation import GrammarMatcher


def main():
    print("=" * 60)
    print("schema-gbnf Demo: Person Record with Nested Fields")
    print("=" * 60)

    # Define schema
    schema = {
        "type": "object",
        "properties": {
            "name": {
                "type": "string",
                "minLength": 2,
                "maxLength": 50
            },
            "age": {
                "type": "integer",
                "minimum": 0,
                "maximum": 150
            },
            "address": {
                "type": "object",
                "properties": {
                    "street": {"type": "string"},
                    "city": {"type": "string"},
                    "zipcode": {
                        "type": "string",
                        "pattern": "^[0-9]{5}(-[0-9]{4})?$"
                    }
                },
                "required": ["city"]
            },
            "hobbies": {
                "type": "array",
                "items": {"type": "string"},
                "maxItems": 10
            }
        },
        "required": ["name", "age"]
    }

    print("\nSchema:")
    print(json.dumps(schema, indent=2))

    # Compile
    print("\n" + "=" * 60)
    print("Compiling Grammar...")
    print("=" * 60)

    result = GrammarCompiler().compile(schema)

    print(f"✓ Compiled {result.rule_count} rules in {result.elapsed_ms:.1f}ms")
    print()
    print(result.grammar)

    # Candidate outputs
    candidates = [
        {"name": "Alice", "age": 28, "address": {"city": "NYC", "zipcode": "10001"}, "hobbies": ["reading", "hiking"]},
        {"name": "Bob Smith", "age": 35, "address": {"city": "San Francisco"}},
        {"name": "Charlie", "age": 42},
        {"name": "C", "age": 42},
        {"name": "Methuselah", "age": 969},
        {"age": 42, "name": "Charlie"},
    ]

    matcher = GrammarMatcher(result.grammar)

    print("=" * 60)
    print("Checking Candidates")
    print("=" * 60)
    for i, candidate in enumerate(candidates, 1):
        text = json.dumps(candidate)
        check = matcher.check(text)
        mark = "✓" if check.accepted else "✗"
        print(f"{i}. {mark} {text}")
        if not check.accepted:
            print(f"     rejected near offset {check.furthest_offset}: {check.context!r}")

    print("\n" + "=" * 60)
    print("Demo complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()

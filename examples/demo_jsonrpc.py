#!/usr/bin/env python3
"""
Demo: JSON-RPC function call.

This demonstrates compiling a JSON-RPC request schema with:
- A const protocol version ("2.0")
- A non-empty method name
- A free-form params object
- An integer id

and shows how prop_order changes the emitted key order.
"""

import json
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from schema_gbnf import compile_grammar
from schema_gbnf.validation import check_sample


def main():
    print("=" * 60)
    print("schema-gbnf Demo: JSON-RPC Function Call")
    print("=" * 60)

    # Define schema
    schema = {
        "type": "object",
        "properties": {
            "jsonrpc": {
                "type": "string",
                "const": "2.0"  # Must be exactly "2.0"
            },
            "method": {
                "type": "string",
                "minLength": 1
            },
            "params": {
                "type": "object"
            },
            "id": {
                "type": "integer"
            }
        },
        "required": ["jsonrpc", "method", "id"]
    }

    print("\nSchema:")
    print(json.dumps(schema, indent=2))

    # Default order: required keys first, in declaration order
    grammar = compile_grammar(schema)
    root = next(line for line in grammar.splitlines() if line.startswith("root ::="))
    print("\nDefault order:")
    print(f"  {root}")

    # Put id first
    ordered = compile_grammar(schema, prop_order={"id": 0})
    root = next(line for line in ordered.splitlines() if line.startswith("root ::="))
    print("\nWith prop_order={'id': 0}:")
    print(f"  {root}")

    requests = [
        '{"jsonrpc":"2.0","method":"getUserProfile","id":1,"params":{"userId":42}}',
        '{"jsonrpc":"2.0","method":"updateSettings","id":2}',
        '{"jsonrpc":"1.0","method":"getData","id":123}',
        '{"jsonrpc":"2.0","method":"","id":3}',
    ]

    print("\n" + "=" * 60)
    print("Checking Requests")
    print("=" * 60)
    for text in requests:
        result = check_sample(grammar, text)
        print(f"{'✓' if result.accepted else '✗'} {text}")

    print("\n" + "=" * 60)
    print("Demo complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()

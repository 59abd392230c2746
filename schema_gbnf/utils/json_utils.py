"""JSON helpers shared by the compiler and the CLI."""

import json
from typing import Any


def to_json(value: Any) -> str:
    """
    Serialise a value the way it appears in compact JSON text.

    No whitespace after separators and non-ASCII characters kept as-is, so the
    result is exactly the token sequence a model emits for the value.
    """
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))

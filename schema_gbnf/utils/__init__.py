"""
Utility functions and helpers.

Components:
    - json_utils: compact JSON serialisation used for grammar literals
    - logging: logging configuration with Rich

Example:
    ```python
    from schema_gbnf.utils import setup_logging, to_json

    setup_logging(level="DEBUG")
    to_json({"a": [1, "é"]})  # '{"a":[1,"é"]}'
    ```
"""

from schema_gbnf.utils.json_utils import to_json
from schema_gbnf.utils.logging import setup_logging

__all__ = ["to_json", "setup_logging"]

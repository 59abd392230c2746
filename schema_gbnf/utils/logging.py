"""
Logging configuration.

The library itself only creates module loggers; handlers are installed by the
application. The CLI calls setup_logging() when --verbose is given.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: Union[int, str] = "INFO", log_file: Optional[Path] = None) -> None:
    """
    Configure the `schema_gbnf` logger.

    Records go to stderr so grammar text written to stdout stays clean.

    Args:
        level: Logging level name or number
        log_file: Optional file that receives the same records in plain text
    """
    logger = logging.getLogger("schema_gbnf")
    logger.setLevel(level)
    logger.handlers.clear()

    handler = RichHandler(console=Console(stderr=True), show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

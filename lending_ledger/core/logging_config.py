"""Central logging configuration for the lending ledger."""

import logging
from typing import Union


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LEDGER_LOGGER_NAME = "lending_ledger"


def resolve_level(level: Union[int, str]) -> int:
    """Map a level name such as ``"debug"`` to its numeric value, defaulting to INFO."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    """Configure the root logger once and set the ledger package level."""
    numeric_level = resolve_level(level)
    logging.getLogger(LEDGER_LOGGER_NAME).setLevel(numeric_level)
    if logging.getLogger().handlers:
        return
    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)


def get_logger(name: str) -> logging.Logger:
    """Create or retrieve a module logger."""
    return logging.getLogger(name)

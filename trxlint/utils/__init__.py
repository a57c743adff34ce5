"""trxlint utilities package."""

from .constants import (
    DEFAULT_EXCLUDE_PATTERNS,
    ERROR_LOG_FILE,
    MAX_FIX_PASSES,
    STATE_DIR,
)
from .error_handler import handle_exceptions
from .exit_codes import ExitCodes
from .logging import logger

__all__ = [
    "STATE_DIR",
    "ERROR_LOG_FILE",
    "DEFAULT_EXCLUDE_PATTERNS",
    "MAX_FIX_PASSES",
    "handle_exceptions",
    "ExitCodes",
    "logger",
]

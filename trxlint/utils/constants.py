"""Centralized constants for trxlint.

Single source of truth for paths, file filters and environment variable
names used across the package.
"""

from pathlib import Path

# ============================================================================
# OUTPUT DIRECTORIES
# ============================================================================

# Working directory for trxlint artifacts (error log, optional file logs)
STATE_DIR = Path("./.trxlint")

ERROR_LOG_FILE = STATE_DIR / "error.log"

# ============================================================================
# CONFIG FILES
# ============================================================================

JSON_CONFIG_FILE = ".trxlint.json"
PYPROJECT_FILE = "pyproject.toml"
PYPROJECT_TOOL_KEY = "trxlint"

# ============================================================================
# FILE SELECTION
# ============================================================================

JS_EXTENSIONS = (".js", ".mjs", ".cjs", ".jsx")
TS_EXTENSIONS = (".ts", ".mts", ".cts")
TSX_EXTENSIONS = (".tsx",)

DEFAULT_EXCLUDE_PATTERNS = (
    "node_modules/",
    "dist/",
    "build/",
    "coverage/",
    ".git/",
    ".next/",
)

# Maximum file size to analyze (default: 2MB)
DEFAULT_MAX_FILE_SIZE = 2 * 1024 * 1024

# ============================================================================
# FIXER
# ============================================================================

# Re-lint and re-apply fixes at most this many times per file
MAX_FIX_PASSES = 10

# ============================================================================
# ENVIRONMENT VARIABLES
# ============================================================================

ENV_PREFIX = "TRXLINT_"
ENV_DEBUG = "TRXLINT_DEBUG"

"""Custom exceptions for trxlint.

Contains exception classes for failure modes of the host layer (parsing and
configuration). The rule engine itself never raises: unsupported syntax
simply produces no finding.
"""


class TrxLintError(Exception):
    """Base class for all trxlint errors."""


class JSParseError(TrxLintError):
    """Raised when a source file does not parse cleanly.

    Attributes:
        file_path: File that failed to parse (may be "<text>")
        line: 1-based line of the first syntax error
        column: 0-based column of the first syntax error
    """

    def __init__(self, message: str, file_path: str = "<text>", line: int = 0, column: int = 0):
        super().__init__(message)
        self.file_path = file_path
        self.line = line
        self.column = column


class ConfigError(TrxLintError):
    """Raised when a configuration file or preset is invalid.

    Attributes:
        message: Human-readable error description
        details: Dict with the offending source and values
    """

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}

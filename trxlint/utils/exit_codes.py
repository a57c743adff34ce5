"""Centralized exit codes for the trxlint CLI."""


class ExitCodes:
    """Standard exit codes for trxlint CLI commands."""

    SUCCESS = 0

    LINT_ERRORS = 1
    FATAL_PARSE_ERRORS = 2

    TASK_INCOMPLETE = 3

    @classmethod
    def get_description(cls, code: int) -> str:
        """Get human-readable description for an exit code."""
        descriptions = {
            cls.SUCCESS: "Success - No issues found",
            cls.LINT_ERRORS: "Error-level findings detected",
            cls.FATAL_PARSE_ERRORS: "One or more files could not be parsed",
            cls.TASK_INCOMPLETE: "Task could not be completed (no lintable files)",
        }
        return descriptions.get(code, f"Unknown exit code: {code}")

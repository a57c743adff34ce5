"""Base contracts for rule standardization."""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from trxlint.fixer import Fix
from trxlint.utils.logging import logger


class Severity(Enum):
    """Standardized severity levels, named after config levels."""

    ERROR = "error"
    WARNING = "warn"

    @classmethod
    def from_level(cls, level: str) -> "Severity | None":
        """Map a config level ("error" | "warn" | "off") to a severity."""
        if level == "off":
            return None
        return cls(level)


@dataclass
class StandardRuleContext:
    """Universal immutable context for all standardized rules."""

    file_path: Path
    content: str
    language: str
    project_path: Path

    ast_wrapper: dict[str, Any] | None = None

    extra: dict[str, Any] = field(default_factory=dict)

    def get_ast(self, expected_type: str = None) -> Any | None:
        """Safely extract AST with optional type checking."""
        if not self.ast_wrapper:
            return None

        ast_type = self.ast_wrapper.get("type")

        if expected_type and ast_type != expected_type:
            logger.debug("AST type mismatch: wanted {want}, got {got}", want=expected_type, got=ast_type)
            return None

        return self.ast_wrapper.get("tree")

    def get_lines(self) -> list[str]:
        """Get file content as list of lines."""
        return self.content.splitlines() if self.content else []

    def get_snippet(self, line_num: int, context_lines: int = 0) -> str:
        """Extract code snippet around a line number."""
        lines = self.get_lines()
        if not lines or line_num < 1 or line_num > len(lines):
            return ""

        start = max(1, line_num - context_lines)
        end = min(len(lines), line_num + context_lines)

        if start == end:
            return lines[line_num - 1].strip()

        snippet_lines = []
        for i in range(start, end + 1):
            prefix = ">> " if i == line_num else "   "
            snippet_lines.append(f"{i:4d}{prefix}{lines[i - 1]}")

        return "\n".join(snippet_lines)


@dataclass
class StandardFinding:
    """Standardized output from all rules."""

    rule_name: str
    message: str
    file_path: str
    line: int

    column: int = 0
    end_line: int = 0
    end_column: int = 0
    message_id: str = ""
    severity: Severity | str = Severity.ERROR
    category: str = "correctness"
    snippet: str = ""

    fix: Fix | None = None
    additional_info: dict[str, Any] | None = None

    @property
    def fixable(self) -> bool:
        return self.fix is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            "rule": self.rule_name,
            "message_id": self.message_id,
            "message": self.message,
            "file": self.file_path,
            "line": self.line,
            "column": self.column,
            "end_line": self.end_line,
            "end_column": self.end_column,
            "severity": self.severity.value
            if isinstance(self.severity, Severity)
            else self.severity,
            "category": self.category,
            "code_snippet": self.snippet,
        }

        if self.fix is not None:
            result["fix"] = self.fix.to_dict()
        if self.additional_info:
            result["details"] = self.additional_info

        return result


RuleFunction = Callable[[StandardRuleContext], list[StandardFinding]]


def validate_rule_signature(func: Callable) -> bool:
    """Check if a function follows the standard rule signature."""
    import inspect

    sig = inspect.signature(func)
    params = list(sig.parameters.keys())

    return len(params) == 1 and params[0] == "context"


@dataclass
class RuleMetadata:
    """Metadata describing a rule for registration and orchestrator filtering."""

    name: str
    category: str
    description: str = ""

    target_extensions: list[str] | None = None
    exclude_patterns: list[str] | None = None

    fixable: bool = False
    messages: dict[str, str] = field(default_factory=dict)

    # Level the rule gets in the "recommended" preset; None keeps it out
    recommended: str | None = None

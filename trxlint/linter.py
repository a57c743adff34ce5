"""Lint driver: parse, run rules, apply fixes."""

import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from trxlint.exceptions import JSParseError
from trxlint.fixer import apply_fixes
from trxlint.js_parser import JSParser, detect_language
from trxlint.rules.base import Severity, StandardFinding, StandardRuleContext
from trxlint.rules.orchestrator import RulesOrchestrator
from trxlint.utils.constants import DEFAULT_EXCLUDE_PATTERNS, DEFAULT_MAX_FILE_SIZE, MAX_FIX_PASSES
from trxlint.utils.file_filters import is_excluded
from trxlint.utils.logging import logger


@dataclass
class LintResult:
    """Outcome of linting one file."""

    file_path: str
    findings: list[StandardFinding] = field(default_factory=list)
    parse_error: JSParseError | None = None
    output: str | None = None
    fixes_applied: int = 0

    @property
    def error_count(self) -> int:
        return sum(1 for f in self.findings if f.severity == Severity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for f in self.findings if f.severity == Severity.WARNING)

    @property
    def fixable_count(self) -> int:
        return sum(1 for f in self.findings if f.fixable)

    @property
    def changed(self) -> bool:
        return self.fixes_applied > 0

    def to_dict(self) -> dict[str, Any]:
        result = {
            "file": self.file_path,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "fixable_count": self.fixable_count,
            "fixes_applied": self.fixes_applied,
            "findings": [f.to_dict() for f in self.findings],
        }
        if self.changed:
            result["output"] = self.output
        if self.parse_error is not None:
            result["fatal"] = {
                "message": str(self.parse_error),
                "line": self.parse_error.line,
                "column": self.parse_error.column,
            }
        return result


class Linter:
    """Runs enabled rules over JS/TS sources."""

    def __init__(
        self,
        project_path: Path | str = ".",
        rule_levels: dict[str, str] | None = None,
        extensions: Iterable[str] | None = None,
        exclude_patterns: Iterable[str] | None = None,
    ):
        self.project_path = Path(project_path)
        self.parser = JSParser()
        self.orchestrator = RulesOrchestrator(self.project_path, rule_levels)
        self.extensions = tuple(e.lower() for e in extensions) if extensions else None
        self.exclude_patterns = (
            tuple(exclude_patterns) if exclude_patterns is not None else DEFAULT_EXCLUDE_PATTERNS
        )

    def _run(self, content: str, file_path: Path, language: str) -> list[StandardFinding]:
        ast_wrapper = self.parser.parse_content(content, language, str(file_path))
        context = StandardRuleContext(
            file_path=file_path,
            content=content,
            language=language,
            project_path=self.project_path,
            ast_wrapper=ast_wrapper,
        )
        return self.orchestrator.run_rules_for_file(context)

    def lint_text(self, content: str, file_path: Path | str = "<text>.js", language: str | None = None) -> LintResult:
        """Lint in-memory source. Parse errors become a fatal result, not an exception."""
        file_path = Path(file_path)
        language = language or detect_language(file_path) or "javascript"
        result = LintResult(file_path=str(file_path))
        try:
            result.findings = self._run(content, file_path, language)
        except JSParseError as e:
            logger.warning("{file}: {err}", file=str(file_path), err=str(e))
            result.parse_error = e
        return result

    def fix_text(self, content: str, file_path: Path | str = "<text>.js", language: str | None = None) -> LintResult:
        """Lint and fix repeatedly until stable, like ``eslint --fix``.

        ``result.output`` holds the fixed source and ``result.findings`` the
        findings remaining in it.
        """
        file_path = Path(file_path)
        language = language or detect_language(file_path) or "javascript"
        result = LintResult(file_path=str(file_path), output=content)

        for _ in range(MAX_FIX_PASSES):
            try:
                findings = self._run(result.output, file_path, language)
            except JSParseError as e:
                result.parse_error = e
                result.findings = []
                return result

            result.findings = findings
            fixes = [f.fix for f in findings if f.fix is not None]
            if not fixes:
                break

            fixed, applied = apply_fixes(result.output, fixes)
            if not applied:
                break
            result.output = fixed
            result.fixes_applied += applied
            logger.debug("{file}: applied {n} fixes", file=str(file_path), n=applied)
        else:
            # Last pass applied fixes; report what is left in the final output
            result.findings = self._run(result.output, file_path, language)

        return result

    def lint_file(self, file_path: Path | str, fix: bool = False) -> LintResult:
        """Lint one file; with ``fix`` the fixed source is in ``result.output``."""
        file_path = Path(file_path)
        content = file_path.read_text(encoding="utf-8", errors="replace")
        if fix:
            return self.fix_text(content, file_path)
        return self.lint_text(content, file_path)

    def _accepts(self, path: Path) -> bool:
        if detect_language(path) is None:
            return False
        return self.extensions is None or path.suffix.lower() in self.extensions

    def iter_files(self, paths: Iterable[Path | str]) -> Iterator[Path]:
        """Expand files and directories into lintable files, sorted per directory."""
        for raw in paths:
            path = Path(raw)
            if path.is_file():
                # Explicitly named files are linted even if excluded by pattern
                if self._accepts(path):
                    yield path
                else:
                    logger.debug("Skipping {path}: not a JS/TS file", path=str(path))
                continue
            if not path.is_dir():
                logger.warning("No such file or directory: {path}", path=str(path))
                continue

            for dirpath, dirnames, filenames in os.walk(path):
                current = Path(dirpath)
                relative = current.relative_to(path)
                dirnames[:] = sorted(
                    d for d in dirnames if not is_excluded(relative / d, self.exclude_patterns, is_dir=True)
                )
                for name in sorted(filenames):
                    candidate = current / name
                    if not self._accepts(candidate) or is_excluded(relative / name, self.exclude_patterns):
                        continue
                    if candidate.stat().st_size > DEFAULT_MAX_FILE_SIZE:
                        logger.warning("Skipping {path}: file too large", path=str(candidate))
                        continue
                    yield candidate

    def lint_paths(self, paths: Iterable[Path | str], fix: bool = False) -> list[LintResult]:
        """Lint every file under ``paths``. Fixed output is not written here."""
        return [self.lint_file(path, fix=fix) for path in self.iter_files(paths)]

"""Rule discovery and execution.

This module provides a central orchestrator that:
1. Dynamically discovers ALL rules in the /rules directory
2. Applies configured levels (error / warn / off) to them
3. Executes enabled rules on a parsed file, with METADATA filtering
"""

import importlib
import inspect
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

from trxlint.exceptions import ConfigError
from trxlint.rules.base import (
    RuleMetadata,
    Severity,
    StandardFinding,
    StandardRuleContext,
    validate_rule_signature,
)
from trxlint.utils.file_filters import is_excluded
from trxlint.utils.logging import logger


@dataclass
class RuleInfo:
    """Metadata about a discovered rule."""

    name: str
    module: str
    function: Callable
    category: str
    metadata: RuleMetadata


@lru_cache(maxsize=1)
def _discover() -> tuple[RuleInfo, ...]:
    import trxlint.rules as rules_package

    rules_dir = Path(rules_package.__file__).parent
    found = []

    for subdir in sorted(rules_dir.iterdir()):
        if not subdir.is_dir() or subdir.name.startswith("__"):
            continue

        category = subdir.name
        for py_file in sorted(subdir.glob("*.py")):
            if py_file.name.startswith("__"):
                continue

            module_name = f"trxlint.rules.{category}.{py_file.stem}"
            module = importlib.import_module(module_name)
            metadata = getattr(module, "METADATA", None)
            if metadata is None:
                continue

            for name, obj in inspect.getmembers(module, inspect.isfunction):
                if not name.startswith("find_") or obj.__module__ != module_name:
                    continue
                if not validate_rule_signature(obj):
                    logger.warning("Skipping {rule}: signature must be (context)", rule=name)
                    continue

                found.append(
                    RuleInfo(
                        name=metadata.name,
                        module=module_name,
                        function=obj,
                        category=category,
                        metadata=metadata,
                    )
                )
                logger.debug("Found rule: {category}/{name}", category=category, name=name)

    return tuple(found)


def discover_rules() -> list[RuleInfo]:
    """Dynamically discover ALL rules in the /rules directory.

    A rule module lives in ``trxlint/rules/<category>/``, exposes a module-level
    ``METADATA`` and one ``find_*`` function taking a single ``context``.
    """
    return list(_discover())


class RulesOrchestrator:
    """Unified orchestrator for rule execution."""

    def __init__(self, project_path: Path | str = ".", rule_levels: dict[str, str] | None = None):
        """Initialize the orchestrator.

        Args:
            project_path: Root path of the project being analyzed
            rule_levels: Rule name -> "error" | "warn" | "off". Rules not listed
                are off. None enables every rule at its recommended level.
        """
        self.project_path = Path(project_path)
        self.rules = {info.name: info for info in discover_rules()}

        if rule_levels is None:
            rule_levels = {
                name: info.metadata.recommended
                for name, info in self.rules.items()
                if info.metadata.recommended
            }

        unknown = sorted(set(rule_levels) - set(self.rules))
        if unknown:
            raise ConfigError(
                f"Definition for rule {unknown[0]!r} was not found",
                details={"unknown_rules": unknown},
            )

        self.enabled: dict[str, Severity] = {}
        for name, level in rule_levels.items():
            severity = Severity.from_level(level)
            if severity is not None:
                self.enabled[name] = severity

        logger.debug(
            "Orchestrator ready: {enabled}/{total} rules enabled",
            enabled=len(self.enabled),
            total=len(self.rules),
        )

    def _should_run_rule_on_file(self, metadata: RuleMetadata, file_path: Path) -> bool:
        """Check if a rule should run on a specific file based on its METADATA."""
        if metadata.exclude_patterns:
            try:
                relative = file_path.resolve().relative_to(self.project_path.resolve())
            except ValueError:
                relative = file_path
            if is_excluded(relative, metadata.exclude_patterns):
                return False

        if metadata.target_extensions:
            if file_path.suffix.lower() not in metadata.target_extensions:
                return False

        return True

    def run_rules_for_file(self, context: StandardRuleContext) -> list[StandardFinding]:
        """Run enabled rules applicable to a specific file.

        Findings are stable-sorted by position, so findings starting at the
        same place keep their traversal order.
        """
        findings = []

        for name, severity in self.enabled.items():
            rule = self.rules[name]
            if not self._should_run_rule_on_file(rule.metadata, context.file_path):
                logger.debug(
                    "Skipping rule '{rule}' on '{file}' due to metadata mismatch",
                    rule=name,
                    file=context.file_path.name,
                )
                continue

            try:
                rule_findings = rule.function(context)
            except Exception:
                logger.opt(exception=True).error(
                    "Rule {rule} failed on {file}", rule=name, file=str(context.file_path)
                )
                continue

            for finding in rule_findings:
                finding.severity = severity
            findings.extend(rule_findings)

        findings.sort(key=lambda f: (f.line, f.column))
        return findings

    def get_rule_stats(self) -> dict[str, Any]:
        """Get statistics about discovered rules."""
        categories = sorted({info.category for info in self.rules.values()})
        return {
            "total_rules": len(self.rules),
            "enabled_rules": len(self.enabled),
            "categories": categories,
            "fixable_rules": sum(1 for info in self.rules.values() if info.metadata.fixable),
        }

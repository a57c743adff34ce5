"""Lint JavaScript/TypeScript files for missing transaction forwarding."""

import json
import sys
from pathlib import Path
from typing import Any

import click
from rich.markup import escape
from rich.table import Table

from trxlint.pipeline.ui import console, print_status_panel, print_success, print_warning
from trxlint.utils.error_handler import handle_exceptions
from trxlint.utils.exit_codes import ExitCodes
from trxlint.utils.logging import logger


def write_results_json(results: list, output_path: str) -> None:
    """Write lint results to a JSON file, sorted for determinism."""
    data = sorted((r.to_dict() for r in results), key=lambda r: r["file"])
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def _render_table(results: list, max_rows: int, quiet: bool) -> int:
    """Print findings as a Rich table. Returns the number of rows shown."""
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2, 0, 0))
    table.add_column("Location", style="path", no_wrap=True)
    table.add_column("Level")
    table.add_column("Message")
    table.add_column("Rule", style="dim")

    rows = []
    for result in results:
        if result.parse_error is not None:
            err = result.parse_error
            rows.append((escape(f"{result.file_path}:{err.line}:{err.column}"), "[error]fatal[/error]", escape(str(err)), ""))
            continue

        for finding in result.findings:
            level = finding.severity.value
            if quiet and level != "error":
                continue
            style = "error" if level == "error" else "warning"
            fix_hint = " [dim](fixable)[/dim]" if finding.fixable else ""
            rows.append((
                escape(f"{finding.file_path}:{finding.line}:{finding.column}"),
                f"[{style}]{level}[/{style}]",
                f"{escape(finding.message)}{fix_hint}",
                f"{finding.rule_name} ({finding.message_id})",
            ))

    shown = rows[:max(max_rows, 0)]
    for row in shown:
        table.add_row(*row)

    if shown:
        console.print(table, highlight=False)
    if len(rows) > len(shown):
        console.print(f"[dim]... {len(rows) - len(shown)} more not shown (--max-rows {max_rows})[/dim]", highlight=False)
    return len(shown)


def _summarize(results: list) -> dict[str, Any]:
    return {
        "files": len(results),
        "errors": sum(r.error_count for r in results),
        "warnings": sum(r.warning_count for r in results),
        "fatal": sum(1 for r in results if r.parse_error is not None),
        "fixable": sum(r.fixable_count for r in results),
        "fixed": sum(r.fixes_applied for r in results),
    }


@click.command("check")
@click.argument("paths", nargs=-1, type=click.Path())
@click.option("--fix", is_flag=True, help="Write safe fixes back to the files")
@click.option("--fix-dry-run", is_flag=True, help="Compute fixes and report what would change")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Report format on stdout",
)
@click.option("--output-json", help="Also write results to this JSON file")
@click.option("--max-rows", type=int, default=None, help="Maximum rows to display in table")
@click.option("--config", "config_path", type=click.Path(), help="Config file (.json or .toml)")
@click.option("--quiet", is_flag=True, help="Report errors only, hide warnings")
@handle_exceptions
def check(paths, fix, fix_dry_run, output_format, output_json, max_rows, config_path, quiet):
    """Report Objection.js queries that do not forward `trx`.

    Walks the given files and directories (default: current directory),
    parses every JS/TS file and runs the enabled rules. Inside a function
    where `trx` is in scope, these calls must forward it:

    \b
      Model.query()              -> Model.query(trx)
      item.$query()              -> item.$query(trx)
      item.$relatedQuery("x")    -> item.$relatedQuery("x", trx)
      item.$fetchGraph(expr)     -> item.$fetchGraph(expr, { transaction: trx })
      Model.query(trx).transacting(trx)   (deprecated, reported only)

    Fixes only fill empty slots; a wrong argument is reported, never replaced.

    \b
    Examples:
      trxlint check src/
      trxlint check src/ --fix
      trxlint check app.js --format json

    \b
    EXIT CODES:
      0 = No error-level findings
      1 = Error-level findings remain
      2 = At least one file failed to parse
      3 = No lintable files found
    """
    from trxlint.config import load_config, resolve_rule_levels
    from trxlint.exceptions import ConfigError
    from trxlint.linter import Linter

    try:
        cfg = load_config(Path.cwd(), config_path)
        linter = Linter(
            Path.cwd(),
            resolve_rule_levels(cfg),
            extensions=cfg["files"]["extensions"],
            exclude_patterns=cfg["files"]["exclude"],
        )
    except ConfigError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e
    if max_rows is None:
        max_rows = cfg["report"]["max_rows"]

    results = linter.lint_paths(paths or ["."], fix=fix or fix_dry_run)

    if not results:
        print_warning("No JavaScript/TypeScript files matched the given paths")
        sys.exit(ExitCodes.TASK_INCOMPLETE)

    summary = _summarize(results)

    if fix and not fix_dry_run:
        written = 0
        for result in results:
            if result.changed:
                Path(result.file_path).write_text(result.output, encoding="utf-8")
                written += 1
        if written and output_format == "table":
            print_success(f"Fixed {summary['fixed']} problems in {written} files")

    if output_json:
        write_results_json(results, output_json)

    if output_format == "json":
        click.echo(json.dumps({"results": [r.to_dict() for r in results], "summary": summary}, indent=2))
    else:
        _render_table(results, max_rows, quiet)
        if fix_dry_run and summary["fixed"]:
            for result in results:
                if result.changed:
                    console.print(f"[info]Would fix[/info] {escape(result.file_path)} ({result.fixes_applied})", highlight=False)

        problems = summary["errors"] + summary["warnings"]
        detail = f"{summary['files']} files, {summary['errors']} errors, {summary['warnings']} warnings"
        if fix or fix_dry_run:
            detail += f", {summary['fixed']} fixed"
        else:
            detail += f", {summary['fixable']} fixable with --fix"
        if summary["fatal"]:
            print_status_panel("FAILED", f"{summary['fatal']} files could not be parsed", detail, "error")
        elif summary["errors"]:
            print_status_panel("PROBLEMS", f"{problems} problems found", detail, "error")
        elif summary["warnings"]:
            print_status_panel("WARNINGS", f"{problems} problems found", detail, "warning")
        else:
            print_status_panel("CLEAN", "No problems found", detail, "success")

    if summary["fatal"]:
        exit_code = ExitCodes.FATAL_PARSE_ERRORS
    elif summary["errors"]:
        exit_code = ExitCodes.LINT_ERRORS
    else:
        exit_code = ExitCodes.SUCCESS

    logger.info("Exit {code}: {desc}", code=exit_code, desc=ExitCodes.get_description(exit_code))
    sys.exit(exit_code)

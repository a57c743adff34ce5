"""Tests for the trxlint command line interface."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from trxlint import __version__
from trxlint.cli import cli

OFFENDING = "async function save(trx) {\n  await Model.query().insert(row);\n}\n"
CLEAN = "async function save(trx) {\n  await Model.query(trx).insert(row);\n}\n"
TRANSACTING = "async function save(trx) {\n  await Model.query(trx).transacting(trx);\n}\n"


@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def workdir(runner, tmp_path, monkeypatch):
    """Isolated working directory without TRXLINT_* config overrides."""
    import os

    for key in list(os.environ):
        if key.startswith("TRXLINT_"):
            monkeypatch.delenv(key)
    with runner.isolated_filesystem(temp_dir=tmp_path) as path:
        yield Path(path)


class TestCliBasics:

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert f"trxlint, version {__version__}" in result.output

    @pytest.mark.parametrize("args", [["--help"], ["check", "--help"], ["rules", "--help"]])
    def test_help_is_ascii(self, runner, args):
        result = runner.invoke(cli, args)

        assert result.exit_code == 0
        try:
            result.output.encode("ascii")
        except UnicodeEncodeError as e:
            pytest.fail(f"Non-ASCII character in trxlint {' '.join(args)}: {e}")

    def test_rules_lists_messages(self, runner):
        result = runner.invoke(cli, ["rules"])

        assert result.exit_code == 0
        assert "objection/require-trx-forwarding" in result.output
        for message_id in ("missingTrxQuery", "missingTrxFetchGraph", "preferTransactionOption"):
            assert message_id in result.output

    def test_rules_without_messages(self, runner):
        result = runner.invoke(cli, ["rules", "--no-messages"])

        assert result.exit_code == 0
        assert "missingTrxQuery" not in result.output


class TestCheckExitCodes:

    def test_clean_project(self, runner, workdir):
        (workdir / "app.js").write_text(CLEAN)

        result = runner.invoke(cli, ["check"])

        assert result.exit_code == 0
        assert "CLEAN" in result.output

    def test_error_findings(self, runner, workdir):
        (workdir / "app.js").write_text(OFFENDING)

        result = runner.invoke(cli, ["check", "app.js"])

        assert result.exit_code == 1
        assert "PROBLEMS" in result.output

    def test_parse_error(self, runner, workdir):
        (workdir / "broken.js").write_text("function (")
        (workdir / "app.js").write_text(OFFENDING)

        result = runner.invoke(cli, ["check", "."])

        assert result.exit_code == 2
        assert "FAILED" in result.output

    def test_no_files(self, runner, workdir):
        (workdir / "README.md").write_text("# docs\n")

        result = runner.invoke(cli, ["check", "."])

        assert result.exit_code == 3

    def test_warn_level_does_not_fail(self, runner, workdir):
        (workdir / "app.js").write_text(OFFENDING)
        (workdir / ".trxlint.json").write_text(json.dumps({"rules": {"objection/require-trx-forwarding": "warn"}}))

        result = runner.invoke(cli, ["check", "app.js"])

        assert result.exit_code == 0
        assert "WARNINGS" in result.output

    def test_rule_disabled_in_pyproject(self, runner, workdir):
        (workdir / "app.js").write_text(OFFENDING)
        (workdir / "pyproject.toml").write_text('[tool.trxlint.rules]\n"objection/require-trx-forwarding" = "off"\n')

        result = runner.invoke(cli, ["check", "app.js"])

        assert result.exit_code == 0

    def test_missing_config_file(self, runner, workdir):
        (workdir / "app.js").write_text(CLEAN)

        result = runner.invoke(cli, ["check", "--config", "missing.json"])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_unknown_rule_in_config(self, runner, workdir):
        (workdir / "app.js").write_text(CLEAN)
        (workdir / ".trxlint.json").write_text(json.dumps({"rules": {"objection/nope": "error"}}))

        result = runner.invoke(cli, ["check"])

        assert result.exit_code == 1
        assert "objection/nope" in result.output


class TestCheckFix:

    def test_fix_writes_files(self, runner, workdir):
        target = workdir / "app.js"
        target.write_text(OFFENDING)

        result = runner.invoke(cli, ["check", "--fix", "app.js"])

        assert result.exit_code == 0
        assert target.read_text() == CLEAN
        assert "Fixed 1 problems in 1 files" in result.output

    def test_fix_keeps_unfixable_findings(self, runner, workdir):
        target = workdir / "app.js"
        target.write_text(TRANSACTING)

        result = runner.invoke(cli, ["check", "--fix", "app.js"])

        assert result.exit_code == 1
        assert target.read_text() == TRANSACTING

    def test_fix_dry_run_leaves_files(self, runner, workdir):
        target = workdir / "app.js"
        target.write_text(OFFENDING)

        result = runner.invoke(cli, ["check", "--fix-dry-run", "app.js"])

        assert result.exit_code == 0
        assert target.read_text() == OFFENDING
        assert "Would fix" in result.output


class TestCheckJson:

    def test_json_format(self, runner, workdir):
        (workdir / "app.js").write_text(OFFENDING)

        result = runner.invoke(cli, ["check", "--format", "json", "app.js"])

        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["summary"]["errors"] == 1
        assert data["summary"]["fixable"] == 1
        finding = data["results"][0]["findings"][0]
        assert finding["message_id"] == "missingTrxQuery"
        assert (finding["line"], finding["column"]) == (2, 9)
        assert finding["severity"] == "error"

    def test_json_fix_dry_run_includes_output(self, runner, workdir):
        (workdir / "app.js").write_text(OFFENDING)

        result = runner.invoke(cli, ["check", "--format", "json", "--fix-dry-run", "app.js"])

        data = json.loads(result.output)
        assert data["results"][0]["output"] == CLEAN
        assert data["summary"]["fixed"] == 1

    def test_output_json_file(self, runner, workdir):
        (workdir / "b.js").write_text(CLEAN)
        (workdir / "a.js").write_text(OFFENDING)

        result = runner.invoke(cli, ["check", "--output-json", "reports/lint.json", "."])

        assert result.exit_code == 1
        data = json.loads((workdir / "reports" / "lint.json").read_text())
        assert [Path(r["file"]).name for r in data] == ["a.js", "b.js"]
        assert data[0]["error_count"] == 1


class TestCheckTable:

    def test_max_rows_caps_parse_error_rows(self, runner, workdir):
        (workdir / "a.js").write_text(OFFENDING)
        (workdir / "b.js").write_text("function (")
        (workdir / "c.js").write_text("function (")

        result = runner.invoke(cli, ["check", "--max-rows", "1", "."])

        assert result.exit_code == 2
        assert result.output.count("fatal") == 0
        assert "2 more not shown" in result.output

    def test_quiet_hides_warnings(self, runner, workdir):
        (workdir / "app.js").write_text(OFFENDING)
        (workdir / ".trxlint.json").write_text(json.dumps({"rules": {"objection/require-trx-forwarding": "warn"}}))

        result = runner.invoke(cli, ["check", "--quiet", "app.js"])

        assert result.exit_code == 0
        assert "missingTrxQuery" not in result.output

    def test_unexpected_error_is_logged(self, runner, workdir, monkeypatch):
        from trxlint.linter import Linter

        def explode(self, paths, fix=False):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(Linter, "lint_paths", explode)
        (workdir / "app.js").write_text(CLEAN)

        result = runner.invoke(cli, ["check", "app.js"])

        assert result.exit_code == 1
        assert "RuntimeError: disk on fire" in result.output
        assert "disk on fire" in (workdir / ".trxlint" / "error.log").read_text()

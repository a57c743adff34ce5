"""Pytest configuration and fixtures."""
import pytest
from tree_sitter_language_pack import get_parser

from trxlint.linter import Linter

RULE = "objection/require-trx-forwarding"


@pytest.fixture
def js_parser():
    """Create a JavaScript tree-sitter parser."""
    return get_parser("javascript")


@pytest.fixture
def ts_parser():
    """Create a TypeScript tree-sitter parser."""
    return get_parser("typescript")


@pytest.fixture
def linter():
    """Linter with only the transaction forwarding rule enabled at error level."""
    return Linter(rule_levels={RULE: "error"})


@pytest.fixture
def sample_project(tmp_path):
    """Small JS project tree with one offending file, one clean file and vendored code."""
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "save.js").write_text(
        "async function save(trx) {\n  await Model.query().insert(row);\n}\n"
    )
    (tmp_path / "src" / "clean.js").write_text(
        "async function save(trx) {\n  await Model.query(trx).insert(row);\n}\n"
    )
    (tmp_path / "src" / "notes.md").write_text("# not code\n")
    (tmp_path / "node_modules" / "dep").mkdir(parents=True)
    (tmp_path / "node_modules" / "dep" / "index.js").write_text(
        "function f(trx) { Model.query(); }\n"
    )
    return tmp_path


def walk(node):
    """Pre-order iteration over a tree-sitter subtree."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def find_node(root, node_type, text=None):
    """First node of ``node_type`` (and exact ``text``, if given) in pre-order."""
    for node in walk(root):
        if node.type != node_type:
            continue
        if text is None or node.text.decode("utf-8") == text:
            return node
    raise AssertionError(f"No {node_type} node matching {text!r}")

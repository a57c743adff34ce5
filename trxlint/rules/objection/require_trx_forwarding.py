"""Require forwarding ``trx`` to Objection.js database calls.

Inside a function that has a ``trx`` binding in scope, every Objection query
must run on that transaction. A forgotten ``trx`` silently executes the query
on a fresh connection, outside the transaction:

    async function save(trx) {
        await Model.query().insert(row);        // runs outside trx
        await Model.query(trx).insert(row);     // correct
    }

Detects:
 - ``.query()`` on a Model class without ``trx`` as first argument
 - ``.$query()`` without ``trx`` as first argument
 - ``.$relatedQuery(rel)`` without ``trx`` as second argument
 - ``.$fetchGraph(expr)`` without ``{ transaction: trx }``
 - ``.transacting(trx)`` on an Objection chain (deprecated, no auto-fix)

Calls that come after ``trx.commit()`` / ``trx.rollback()`` in the same or an
enclosing function are skipped: the transaction is already finalized there.

Only the identifier spelled exactly ``trx`` is tracked; ``tx`` or
``transaction`` are ignored. ``trx`` declared only at module level (globals,
config injection) does not count.
"""

from typing import Any

from trxlint.fixer import Fix, TextEdit
from trxlint.js_nodes import (
    FUNCTION_NODE_TYPES,
    NodeKind,
    call_arguments,
    call_arguments_node,
    kind_of,
    object_members,
    unwrap,
)
from trxlint.rules.base import RuleMetadata, StandardFinding, StandardRuleContext
from trxlint.rules.objection.call_shapes import (
    TRX,
    CallShape,
    classify_call,
    find_transaction_property,
    is_finalization_call,
    is_forwarded,
)
from trxlint.scope import ScopeManager
from trxlint.utils.logging import logger

Node = Any

# ============================================================================
# RULE METADATA
# ============================================================================

MESSAGES = {
    "missingTrxQuery": (
        "`.query()` called without `trx` inside a function that has `trx` available. "
        "Pass `trx` as the first argument."
    ),
    "missingTrxInstanceQuery": (
        "`.$query()` called without `trx` inside a function that has `trx` available. "
        "Pass `trx` as the first argument."
    ),
    "missingTrxRelatedQuery": (
        "`.$relatedQuery()` called without `trx` inside a function that has `trx` available. "
        "Pass `trx` as the second argument."
    ),
    "missingTrxFetchGraph": (
        "`.$fetchGraph()` called without `{ transaction: trx }` inside a function that has "
        "`trx` available. Pass `{ transaction: trx }` as the second argument."
    ),
    "preferTransactionOption": (
        "`.transacting()` is deprecated in Objection.js in favor of passing "
        "`{ transaction: trx }` as an option to the query method."
    ),
}

MESSAGE_IDS = {
    CallShape.QUERY: "missingTrxQuery",
    CallShape.INSTANCE_QUERY: "missingTrxInstanceQuery",
    CallShape.RELATED_QUERY: "missingTrxRelatedQuery",
    CallShape.FETCH_GRAPH: "missingTrxFetchGraph",
    CallShape.TRANSACTING: "preferTransactionOption",
}

METADATA = RuleMetadata(
    name="objection/require-trx-forwarding",
    category="objection",
    description=(
        "Require forwarding `trx` to Objection.js database calls when available. "
        "Only detects the identifier named exactly `trx`."
    ),
    target_extensions=[".js", ".mjs", ".cjs", ".jsx", ".ts", ".mts", ".cts", ".tsx"],
    exclude_patterns=["node_modules/", "dist/", "build/", ".next/", "coverage/"],
    fixable=True,
    messages=MESSAGES,
    recommended="error",
)


# ============================================================================
# SCOPE RESOLUTION
# ============================================================================


def has_trx_in_scope(node: Node, scopes: ScopeManager) -> bool:
    """True when a ``trx`` binding declared before ``node`` is in scope.

    Walks outward from the scope owning ``node`` and stops before the global
    scope, so ambient globals never count. The first scope that binds ``trx``
    decides: at least one declaration must start before ``node`` (``let`` /
    ``const`` declared later in the block are not yet usable).
    """
    for scope in scopes.scope_of(node).ancestors():
        if scope.is_global:
            break
        positions = scope.declarations(TRX)
        if positions is not None:
            return any(position < node.start_byte for position in positions)
    return False


# ============================================================================
# FINALIZATION TRACKING
# ============================================================================


class FinalizationTracker:
    """Stack of per-function positions where ``trx`` was committed or rolled back.

    One frame per function currently being traversed. A call is
    post-finalization when any live frame (not only the innermost) recorded a
    commit/rollback before it: closures share the outer transaction object.
    """

    def __init__(self):
        self._frames: list[list[int]] = []

    def enter_function(self) -> None:
        self._frames.append([])

    def exit_function(self) -> None:
        self._frames.pop()

    def record(self, call: Node) -> bool:
        """Record ``call`` if it is ``trx.commit()`` / ``trx.rollback()``."""
        if not self._frames or not is_finalization_call(call):
            return False
        self._frames[-1].append(call.start_byte)
        return True

    def is_post_finalization(self, node: Node) -> bool:
        return any(
            position < node.start_byte for frame in self._frames for position in frame
        )


# ============================================================================
# FIX SYNTHESIS
# ============================================================================
# Fixes only ever fill an empty slot. An existing argument or `transaction`
# value, even a wrong one, is reported but never overwritten.


def _fix_first_argument(call: Node) -> Fix | None:
    if call_arguments(call):
        return None
    args_node = call_arguments_node(call)
    if args_node is None:
        return None
    return Fix((TextEdit.insert_at(args_node.start_byte + 1, TRX),))


def _fix_second_argument(call: Node) -> Fix | None:
    args = call_arguments(call)
    if len(args) != 1:
        return None
    return Fix((TextEdit.insert_at(args[0].end_byte, f", {TRX}"),))


def _fix_fetch_graph_option(call: Node) -> Fix | None:
    args = call_arguments(call)
    if not args:
        return None
    if len(args) == 1:
        return Fix((TextEdit.insert_at(args[0].end_byte, f", {{ transaction: {TRX} }}"),))

    options = unwrap(args[1])
    if kind_of(options) is not NodeKind.OBJECT:
        return None
    if find_transaction_property(options) is not None:
        return None

    if object_members(options) or options.named_child_count:
        # Prepend so a later spread cannot override the transaction. Comments
        # count as content: `{ /* x */ }` is extended, not replaced.
        return Fix((TextEdit.insert_at(options.start_byte + 1, f" transaction: {TRX},"),))
    return Fix((TextEdit.replace(options.start_byte, options.end_byte, f"{{ transaction: {TRX} }}"),))


def _no_fix(call: Node) -> Fix | None:
    # Rewriting a .transacting() chain into an option needs judgment
    return None


_FIXERS = {
    CallShape.QUERY: _fix_first_argument,
    CallShape.INSTANCE_QUERY: _fix_first_argument,
    CallShape.RELATED_QUERY: _fix_second_argument,
    CallShape.FETCH_GRAPH: _fix_fetch_graph_option,
    CallShape.TRANSACTING: _no_fix,
}


def synthesize_fix(shape: CallShape, call: Node) -> Fix | None:
    """Build the non-destructive edit for a flagged call, if one is safe."""
    return _FIXERS[shape](call)


# ============================================================================
# ANALYZER
# ============================================================================


class TrxForwardingAnalyzer:
    """Single-pass analyzer for one parsed file."""

    def __init__(self, context: StandardRuleContext):
        self.context = context
        self.tree = context.get_ast("tree_sitter")
        self.source: bytes = context.ast_wrapper.get("source") or context.content.encode("utf-8")
        self.scopes = ScopeManager.from_tree(self.tree)
        self.tracker = FinalizationTracker()
        self.findings: list[StandardFinding] = []

    def analyze(self) -> list[StandardFinding]:
        """Depth-first pre-order walk; findings come out in visit order."""
        stack: list[tuple[Node, bool]] = [(self.tree.root_node, False)]

        while stack:
            node, exiting = stack.pop()
            if exiting:
                self.tracker.exit_function()
                continue

            if node.type in FUNCTION_NODE_TYPES:
                self.tracker.enter_function()
                stack.append((node, True))
            elif kind_of(node) is NodeKind.CALL:
                self._visit_call(node)

            stack.extend((child, False) for child in reversed(node.children))

        return self.findings

    def _visit_call(self, call: Node) -> None:
        self.tracker.record(call)

        shape = classify_call(call)
        if shape is None or is_forwarded(shape, call):
            return

        line = call.start_point[0] + 1
        if not has_trx_in_scope(call, self.scopes):
            logger.debug("{shape} at line {line}: no trx in scope", shape=shape.value, line=line)
            return
        if self.tracker.is_post_finalization(call):
            logger.debug("{shape} at line {line}: trx already finalized", shape=shape.value, line=line)
            return

        self.findings.append(self._build_finding(shape, call, synthesize_fix(shape, call)))

    def _char_column(self, point: tuple[int, int]) -> int:
        """Convert a tree-sitter (row, byte column) point to a 1-based character column."""
        row, byte_column = point
        line_start = 0
        for _ in range(row):
            line_start = self.source.index(b"\n", line_start) + 1
        return len(self.source[line_start : line_start + byte_column].decode("utf-8", errors="ignore")) + 1

    def _build_finding(self, shape: CallShape, call: Node, fix: Fix | None) -> StandardFinding:
        message_id = MESSAGE_IDS[shape]
        line = call.start_point[0] + 1

        return StandardFinding(
            rule_name=METADATA.name,
            message_id=message_id,
            message=MESSAGES[message_id],
            file_path=str(self.context.file_path),
            line=line,
            column=self._char_column(call.start_point),
            end_line=call.end_point[0] + 1,
            end_column=self._char_column(call.end_point),
            category=METADATA.category,
            snippet=self.context.get_snippet(line),
            fix=fix,
            additional_info={"shape": shape.value},
        )


def find_missing_trx_forwarding(context: StandardRuleContext) -> list[StandardFinding]:
    """Report Objection.js calls that do not forward an in-scope ``trx``."""
    if context.get_ast("tree_sitter") is None:
        return []
    return TrxForwardingAnalyzer(context).analyze()

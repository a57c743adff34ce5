"""Objection.js call shapes and their transaction-forwarding contracts.

Five call shapes can run a query outside the caller's transaction:

    Model.query()               -> Model.query(trx)
    instance.$query()           -> instance.$query(trx)
    instance.$relatedQuery(r)   -> instance.$relatedQuery(r, trx)
    instance.$fetchGraph(expr)  -> instance.$fetchGraph(expr, { transaction: trx })
    <objection chain>.transacting(trx)   (deprecated binding style)

Each shape has exactly one contract function deciding whether ``trx`` was
forwarded. Only the identifier spelled ``trx`` counts as a transaction.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from trxlint.js_nodes import (
    NodeKind,
    call_arguments,
    call_callee,
    called_method,
    is_identifier_named,
    kind_of,
    member_object,
    node_text,
    object_properties,
    property_key_name,
    property_value,
    unwrap,
)

Node = Any

TRX = "trx"


@dataclass(frozen=True)
class ObjectionPatterns:
    """Immutable method names recognized on Objection.js / Knex objects."""

    QUERY = "query"
    INSTANCE_QUERY = "$query"
    RELATED_QUERY = "$relatedQuery"
    FETCH_GRAPH = "$fetchGraph"
    TRANSACTING = "transacting"

    FINALIZE_METHODS = frozenset(["commit", "rollback"])

    TRANSACTION_OPTION = "transaction"


PATTERNS = ObjectionPatterns()


class CallShape(Enum):
    """Transaction-sensitive call shapes."""

    QUERY = "query"
    INSTANCE_QUERY = "instance_query"
    RELATED_QUERY = "related_query"
    FETCH_GRAPH = "fetch_graph"
    TRANSACTING = "transacting"


# Shapes that start an Objection query; `.transacting()` is only flagged when
# its receiver chain passes through one of these.
QUERY_ENTRY_SHAPES = frozenset(
    [CallShape.QUERY, CallShape.INSTANCE_QUERY, CallShape.RELATED_QUERY, CallShape.FETCH_GRAPH]
)


def is_trx(node: Node | None) -> bool:
    """True when ``node`` is the bare identifier ``trx``."""
    return is_identifier_named(unwrap(node), TRX)


# ============================================================================
# CHAIN ROOT RESOLUTION
# ============================================================================


def resolve_chain_root(node: Node | None) -> Node | None:
    """Walk a receiver leftward to its root identifier or ``this``.

    ``Model.bindKnex(knex).query`` resolves to ``Model``; ``this.query`` to
    ``this``. Anything that is not a call / member / parenthesis chain ending in
    an identifier has no root.
    """
    current = node
    while current is not None:
        kind = kind_of(current)
        if kind in (NodeKind.IDENTIFIER, NodeKind.THIS):
            return current
        if kind is NodeKind.CALL:
            current = call_callee(current)
        elif kind is NodeKind.MEMBER:
            current = member_object(current)
        elif kind is NodeKind.WRAPPER:
            current = unwrap(current)
        else:
            return None
    return None


def looks_like_model_class(receiver: Node | None) -> bool:
    """True when a ``.query()`` receiver originates from a Model class.

    Model classes are PascalCase by convention (``Inventory.query()``), and
    ``this.query()`` inside a static model method refers to the class.
    Lowercase roots (``connection.query()``, ``pool.query()``) belong to raw
    database or HTTP clients and never match.
    """
    root = resolve_chain_root(receiver)
    if root is None:
        return False
    if kind_of(root) is NodeKind.THIS:
        return True
    name = node_text(root)
    return bool(name) and "A" <= name[0] <= "Z"


def looks_like_objection_chain(call: Node) -> bool:
    """True when the chain feeding ``.transacting()`` contains a query entry call.

    Plain Knex builders (``knex('table').where(...).transacting(trx)``) do not
    go through Objection; for them ``.transacting()`` is the only way to bind a
    transaction and must not be flagged.
    """
    method = called_method(call)
    if method is None:
        return False

    current = member_object(method[0])
    while current is not None:
        kind = kind_of(current)
        if kind is NodeKind.WRAPPER:
            current = unwrap(current)
            continue
        inner = called_method(current)
        if inner is None:
            return False
        if classify_call(current) in QUERY_ENTRY_SHAPES:
            return True
        current = member_object(inner[0])
    return False


# ============================================================================
# CLASSIFICATION
# ============================================================================


def classify_call(call: Node) -> CallShape | None:
    """Return the call shape of ``call``, or None when it is not tracked."""
    method = called_method(call)
    if method is None:
        return None
    member, name = method

    if name == PATTERNS.QUERY:
        return CallShape.QUERY if looks_like_model_class(member_object(member)) else None
    if name == PATTERNS.INSTANCE_QUERY:
        return CallShape.INSTANCE_QUERY
    if name == PATTERNS.RELATED_QUERY:
        return CallShape.RELATED_QUERY
    if name == PATTERNS.FETCH_GRAPH:
        return CallShape.FETCH_GRAPH
    if name == PATTERNS.TRANSACTING:
        return CallShape.TRANSACTING if looks_like_objection_chain(call) else None
    return None


def is_finalization_call(call: Node) -> bool:
    """True for ``trx.commit()`` / ``trx.rollback()``."""
    method = called_method(call)
    if method is None:
        return False
    member, name = method
    return name in PATTERNS.FINALIZE_METHODS and is_identifier_named(member_object(member), TRX)


# ============================================================================
# FORWARDING CONTRACTS
# ============================================================================


def find_transaction_property(obj: Node) -> Node | None:
    """First ``transaction`` property of an object literal, whatever its value."""
    for prop in object_properties(obj):
        if property_key_name(prop) == PATTERNS.TRANSACTION_OPTION:
            return prop
    return None


def _first_argument_is_trx(call: Node) -> bool:
    args = call_arguments(call)
    return bool(args) and is_trx(args[0])


def _second_argument_is_trx(call: Node) -> bool:
    args = call_arguments(call)
    return len(args) > 1 and is_trx(args[1])


def _has_transaction_option(call: Node) -> bool:
    args = call_arguments(call)
    if len(args) < 2:
        return False

    options = unwrap(args[1])
    if kind_of(options) is not NodeKind.OBJECT:
        # A variable or call result cannot be inspected statically; assume it
        # carries the transaction rather than report a false positive.
        return True

    return any(
        property_key_name(prop) == PATTERNS.TRANSACTION_OPTION and is_trx(property_value(prop))
        for prop in object_properties(options)
    )


def _never_forwarded(call: Node) -> bool:
    return False


_CONTRACTS = {
    CallShape.QUERY: _first_argument_is_trx,
    CallShape.INSTANCE_QUERY: _first_argument_is_trx,
    CallShape.RELATED_QUERY: _second_argument_is_trx,
    CallShape.FETCH_GRAPH: _has_transaction_option,
    CallShape.TRANSACTING: _never_forwarded,
}


def is_forwarded(shape: CallShape, call: Node) -> bool:
    """Check the forwarding contract of ``shape`` against ``call``."""
    return _CONTRACTS[shape](call)

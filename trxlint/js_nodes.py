"""Typed view over the handful of tree-sitter JS node kinds the rules inspect.

Tree-sitter exposes every node as an untyped ``Node`` with a string ``type``.
Rules never switch on those strings directly; they go through ``kind_of``,
which collapses the grammar into a closed set of kinds. Anything outside that
set is ``NodeKind.UNRECOGNIZED`` and short-circuits classification.

Optional chaining needs no special kind: tree-sitter keeps ``?.`` as a token
inside ``member_expression`` / ``call_expression``, so ``Model?.query()`` is an
ordinary call on an ordinary member access. Parentheses are the only
transparent wrapper.
"""

from enum import Enum
from typing import Any

Node = Any


class NodeKind(Enum):
    """Closed set of syntax shapes the rule engine understands."""

    IDENTIFIER = "identifier"
    THIS = "this"
    CALL = "call"
    MEMBER = "member"
    WRAPPER = "wrapper"
    OBJECT = "object"
    PROPERTY = "property"
    UNRECOGNIZED = "unrecognized"


FUNCTION_NODE_TYPES = frozenset(
    [
        "function_declaration",
        "function_expression",
        "function",  # pre-0.21 grammars
        "generator_function",
        "generator_function_declaration",
        "arrow_function",
        "method_definition",
    ]
)

_PROPERTY_NODE_TYPES = frozenset(["pair", "shorthand_property_identifier", "method_definition"])


def kind_of(node: Node | None) -> NodeKind:
    """Classify a tree-sitter node into a ``NodeKind``."""
    if node is None:
        return NodeKind.UNRECOGNIZED

    node_type = node.type
    if node_type == "identifier":
        return NodeKind.IDENTIFIER
    if node_type == "this":
        return NodeKind.THIS
    if node_type == "call_expression":
        # Tagged templates share the node type but carry a template_string
        args = node.child_by_field_name("arguments")
        if args is not None and args.type == "arguments":
            return NodeKind.CALL
        return NodeKind.UNRECOGNIZED
    if node_type == "member_expression":
        return NodeKind.MEMBER
    if node_type == "parenthesized_expression":
        return NodeKind.WRAPPER
    if node_type == "object":
        return NodeKind.OBJECT
    if node_type in _PROPERTY_NODE_TYPES and node.parent is not None and node.parent.type == "object":
        return NodeKind.PROPERTY
    return NodeKind.UNRECOGNIZED


def node_text(node: Node | None) -> str:
    """Extract text from a tree-sitter node."""
    if node is None:
        return ""
    return node.text.decode("utf-8", errors="ignore")


def _named_non_comment(node: Node) -> list[Node]:
    return [child for child in node.named_children if child.type != "comment"]


def unwrap(node: Node | None) -> Node | None:
    """Strip transparent wrappers (parentheses)."""
    while kind_of(node) is NodeKind.WRAPPER:
        inner = _named_non_comment(node)
        node = inner[0] if inner else None
    return node


def call_callee(call: Node) -> Node | None:
    """Return the callee expression of a call."""
    return call.child_by_field_name("function")


def call_arguments(call: Node) -> list[Node]:
    """Return the argument expressions of a call, comments excluded."""
    args = call.child_by_field_name("arguments")
    if args is None or args.type != "arguments":
        return []
    return _named_non_comment(args)


def call_arguments_node(call: Node) -> Node | None:
    """Return the parenthesized ``arguments`` node of a call."""
    args = call.child_by_field_name("arguments")
    if args is None or args.type != "arguments":
        return None
    return args


def member_object(member: Node) -> Node | None:
    return member.child_by_field_name("object")


def member_property_name(member: Node) -> str | None:
    """Return the accessed property name of a non-computed member access."""
    prop = member.child_by_field_name("property")
    if prop is None:
        return None
    return node_text(prop)


def called_method(call: Node) -> tuple[Node, str] | None:
    """Return ``(member, method_name)`` when a call's callee is ``obj.method``.

    Computed access (``obj[name]()``) and plain function calls yield None.
    """
    if kind_of(call) is not NodeKind.CALL:
        return None
    callee = call_callee(call)
    if kind_of(callee) is not NodeKind.MEMBER:
        return None
    name = member_property_name(callee)
    if not name:
        return None
    return callee, name


def is_identifier_named(node: Node | None, name: str) -> bool:
    """True when ``node`` is a plain identifier reference spelled ``name``."""
    if node is None:
        return False
    if node.type not in ("identifier", "shorthand_property_identifier"):
        return False
    return node_text(node) == name


def object_members(obj: Node) -> list[Node]:
    """All members of an object literal: properties, spreads and methods."""
    return _named_non_comment(obj)


def object_properties(obj: Node) -> list[Node]:
    """Keyed members of an object literal (spreads excluded)."""
    return [member for member in object_members(obj) if kind_of(member) is NodeKind.PROPERTY]


def property_key_name(prop: Node) -> str | None:
    """Static key of an object property, or None for computed keys.

    ``{ transaction: x }`` and ``{ "transaction": x }`` both give "transaction".
    """
    if prop.type == "shorthand_property_identifier":
        return node_text(prop)

    key = prop.child_by_field_name("key") if prop.type == "pair" else prop.child_by_field_name("name")
    if key is None:
        return None
    if key.type in ("property_identifier", "identifier"):
        return node_text(key)
    if key.type == "string":
        return node_text(key)[1:-1]
    if key.type == "number":
        return node_text(key)
    return None


def property_value(prop: Node) -> Node | None:
    """Value expression of an object property (methods have none)."""
    if prop.type == "shorthand_property_identifier":
        return prop
    if prop.type == "pair":
        return prop.child_by_field_name("value")
    return None

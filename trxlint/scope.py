"""Static lexical scope graph for tree-sitter JavaScript/TypeScript trees.

The builder mirrors ES2015+ scoping closely enough for binding lookup:

- parameters live in the function scope and are declared at the function's
  start position;
- ``var`` hoists to the nearest function (or global) scope, ``let``/``const``
  bind in the nearest block-like scope at the declarator's position;
- ``catch (e)`` opens a catch scope, ``for`` / ``switch`` / ``class`` open
  their own scopes;
- a function's body block does not open a second scope.

Only declaration *positions* are recorded; references are not resolved.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from trxlint.js_nodes import FUNCTION_NODE_TYPES, node_text

Node = Any


class ScopeKind(Enum):
    """Kinds of lexical scope."""

    GLOBAL = "global"
    FUNCTION = "function"
    BLOCK = "block"
    CATCH = "catch"
    FOR = "for"
    SWITCH = "switch"
    CLASS = "class"


@dataclass
class Scope:
    """A lexical scope and the names declared directly in it."""

    kind: ScopeKind
    node: Node
    parent: "Scope | None" = None
    bindings: dict[str, list[int]] = field(default_factory=dict)

    @property
    def is_global(self) -> bool:
        return self.kind is ScopeKind.GLOBAL

    def declare(self, name: str, position: int) -> None:
        """Record a declaration of ``name`` starting at byte ``position``."""
        self.bindings.setdefault(name, []).append(position)

    def declarations(self, name: str) -> list[int] | None:
        """Declaration positions of ``name`` in this scope, or None if unbound."""
        return self.bindings.get(name)

    def function_scope(self) -> "Scope":
        """Nearest enclosing scope that receives hoisted ``var`` declarations."""
        scope = self
        while scope.kind not in (ScopeKind.FUNCTION, ScopeKind.GLOBAL) and scope.parent is not None:
            scope = scope.parent
        return scope

    def ancestors(self):
        """Yield this scope and every enclosing scope, innermost first."""
        scope = self
        while scope is not None:
            yield scope
            scope = scope.parent


_BLOCK_SCOPE_TYPES = {
    "statement_block": ScopeKind.BLOCK,
    "class_static_block": ScopeKind.BLOCK,
    "catch_clause": ScopeKind.CATCH,
    "for_statement": ScopeKind.FOR,
    "for_in_statement": ScopeKind.FOR,
    "switch_body": ScopeKind.SWITCH,
    "class_declaration": ScopeKind.CLASS,
    "abstract_class_declaration": ScopeKind.CLASS,
    "class": ScopeKind.CLASS,
}

_NAMED_FUNCTION_DECLARATIONS = frozenset(
    ["function_declaration", "generator_function_declaration"]
)


def pattern_names(pattern: Node | None) -> list[str]:
    """Collect identifiers bound by a parameter or destructuring pattern.

    Handles plain identifiers, defaults (``a = 1``), rest (``...a``), object and
    array destructuring at any depth, and TypeScript typed/optional parameters.
    """
    names = []
    stack = [pattern] if pattern is not None else []

    while stack:
        node = stack.pop()
        node_type = node.type

        if node_type in ("identifier", "shorthand_property_identifier_pattern"):
            names.append(node_text(node))
        elif node_type in ("assignment_pattern", "object_assignment_pattern"):
            left = node.child_by_field_name("left")
            if left is not None:
                stack.append(left)
        elif node_type == "pair_pattern":
            value = node.child_by_field_name("value")
            if value is not None:
                stack.append(value)
        elif node_type in ("required_parameter", "optional_parameter"):
            inner = node.child_by_field_name("pattern")
            if inner is not None:
                stack.append(inner)
        elif node_type in ("rest_pattern", "object_pattern", "array_pattern", "formal_parameters"):
            stack.extend(reversed([c for c in node.named_children if c.type != "comment"]))

    return names


class ScopeManager:
    """Scope graph for one parsed tree.

    Built once per file; ``scope_of`` answers "which scope owns this node" by
    walking up to the nearest scope-creating ancestor.
    """

    def __init__(self, root: Node):
        self.root = root
        self.global_scope = Scope(ScopeKind.GLOBAL, root)
        self._scopes: dict[int, Scope] = {root.id: self.global_scope}
        self._build()

    @classmethod
    def from_tree(cls, tree: Any) -> "ScopeManager":
        return cls(tree.root_node)

    @property
    def scopes(self) -> list[Scope]:
        return list(self._scopes.values())

    def scope_of(self, node: Node) -> Scope:
        """Innermost scope containing ``node``."""
        current = node
        while current is not None:
            scope = self._scopes.get(current.id)
            if scope is not None:
                return scope
            current = current.parent
        return self.global_scope

    # ------------------------------------------------------------------
    # Builder
    # ------------------------------------------------------------------

    def _build(self) -> None:
        stack = [(child, self.global_scope) for child in reversed(self.root.children)]

        while stack:
            node, scope = stack.pop()
            node_type = node.type

            if node_type in FUNCTION_NODE_TYPES:
                inner = self._enter_function(node, scope)
                body = node.child_by_field_name("body")
                for child in reversed(node.children):
                    if body is not None and child.id == body.id and body.type == "statement_block":
                        # Function body shares the function scope
                        stack.extend((c, inner) for c in reversed(body.children))
                    else:
                        stack.append((child, inner))
                continue

            if node_type in _BLOCK_SCOPE_TYPES:
                scope = self._enter_block(node, scope, _BLOCK_SCOPE_TYPES[node_type])
            elif node_type == "lexical_declaration":
                self._declare_variables(node, scope)
            elif node_type == "variable_declaration":
                self._declare_variables(node, scope.function_scope())
            elif node_type == "import_statement":
                self._declare_imports(node)

            stack.extend((child, scope) for child in reversed(node.children))

    def _enter_function(self, node: Node, enclosing: Scope) -> Scope:
        position = node.start_byte
        name_node = node.child_by_field_name("name")

        if node.type in _NAMED_FUNCTION_DECLARATIONS and name_node is not None:
            enclosing.declare(node_text(name_node), position)

        scope = Scope(ScopeKind.FUNCTION, node, enclosing)
        self._scopes[node.id] = scope

        if node.type in ("function_expression", "function", "generator_function") and name_node is not None:
            scope.declare(node_text(name_node), position)

        params = node.child_by_field_name("parameters")
        if params is None:
            # Single unparenthesized arrow parameter: `trx => ...`
            params = node.child_by_field_name("parameter")
        for name in pattern_names(params):
            scope.declare(name, position)

        return scope

    def _enter_block(self, node: Node, enclosing: Scope, kind: ScopeKind) -> Scope:
        scope = Scope(kind, node, enclosing)
        self._scopes[node.id] = scope
        node_type = node.type

        if node_type == "catch_clause":
            for name in pattern_names(node.child_by_field_name("parameter")):
                scope.declare(name, node.start_byte)

        elif node_type == "for_in_statement":
            kind_node = node.child_by_field_name("kind")
            left = node.child_by_field_name("left")
            if kind_node is not None and left is not None:
                target = scope.function_scope() if node_text(kind_node) == "var" else scope
                for name in pattern_names(left):
                    target.declare(name, left.start_byte)

        elif kind is ScopeKind.CLASS:
            name_node = node.child_by_field_name("name")
            if name_node is not None:
                if node_type == "class":
                    scope.declare(node_text(name_node), node.start_byte)
                else:
                    enclosing.declare(node_text(name_node), node.start_byte)

        return scope

    def _declare_variables(self, declaration: Node, target: Scope) -> None:
        for declarator in declaration.named_children:
            if declarator.type != "variable_declarator":
                continue
            for name in pattern_names(declarator.child_by_field_name("name")):
                target.declare(name, declarator.start_byte)

    def _declare_imports(self, statement: Node) -> None:
        for clause in statement.named_children:
            if clause.type != "import_clause":
                continue
            stack = list(clause.named_children)
            while stack:
                node = stack.pop()
                if node.type == "identifier":
                    self.global_scope.declare(node_text(node), statement.start_byte)
                elif node.type == "import_specifier":
                    alias = node.child_by_field_name("alias") or node.child_by_field_name("name")
                    if alias is not None and alias.type == "identifier":
                        self.global_scope.declare(node_text(alias), statement.start_byte)
                else:
                    stack.extend(node.named_children)

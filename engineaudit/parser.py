"""
engineaudit JavaScript Parser — Flatten a tree-sitter syntax tree into observations.

Uses tree-sitter's JavaScript grammar to parse source files and records, for
every syntax node:
  1. Its type and the type of its parent, and the parent field it fills
  2. Its operator token and anonymous keyword tokens (async, await, *)
  3. The text of small literal nodes (identifiers, numbers, regex parts)
  4. The object/property names of static member accesses (Object.entries)

Rule matching happens in the detector; nothing here knows about Node.js
versions.
"""

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional

from tree_sitter import Node, Parser
from tree_sitter_language_pack import get_language

logger = logging.getLogger(__name__)

# Node types whose source text is kept on the observation
_TEXT_NODE_TYPES = frozenset({
    "identifier",
    "number",
    "regex_pattern",
    "regex_flags",
    "meta_property",
})

# Fields whose presence is recorded (for MISSING_FIELD rules)
_TRACKED_FIELDS = ("parameter",)


@dataclass
class SyntaxNode:
    """A single node observed in a JavaScript syntax tree."""
    type: str                      # e.g. "arrow_function"
    parent_type: Optional[str]     # e.g. "arguments"
    lineno: int                    # 1-based
    col_offset: int                # 0-based, in bytes
    field_name: Optional[str] = None  # field of the parent holding this node, e.g. "name"
    text: str = ""                 # only for _TEXT_NODE_TYPES
    operator: Optional[str] = None  # e.g. "??" for binary_expression
    tokens: frozenset[str] = frozenset()  # anonymous children, e.g. {"async", "function"}
    fields: frozenset[str] = frozenset()  # tracked fields present on the node
    object_name: Optional[str] = None     # member_expression: "Object"
    property_name: Optional[str] = None   # member_expression: "entries"


@dataclass
class ParseResult:
    """Complete parse result for a single source file."""
    filepath: str
    nodes: list[SyntaxNode] = field(default_factory=list)
    parse_errors: list[str] = field(default_factory=list)


@lru_cache(maxsize=1)
def get_parser() -> Parser:
    """Get the shared JavaScript parser."""
    parser = Parser(get_language("javascript"))
    logger.debug("Loaded javascript parser")
    return parser


def _node_text(node: Optional[Node]) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def _observe(node: Node, parent: Optional[Node], field_name: Optional[str] = None) -> SyntaxNode:
    """Build the observation for one node."""
    observed = SyntaxNode(
        type=node.type,
        parent_type=parent.type if parent is not None else None,
        field_name=field_name,
        lineno=node.start_point[0] + 1,
        col_offset=node.start_point[1],
    )

    if node.type in _TEXT_NODE_TYPES:
        observed.text = _node_text(node)

    if node.child_count:
        observed.tokens = frozenset(c.type for c in node.children if not c.is_named)
        operator = node.child_by_field_name("operator")
        if operator is not None:
            observed.operator = operator.type
        observed.fields = frozenset(
            name for name in _TRACKED_FIELDS
            if node.child_by_field_name(name) is not None
        )

    if node.type == "member_expression":
        obj = node.child_by_field_name("object")
        prop = node.child_by_field_name("property")
        if obj is not None and obj.type == "identifier":
            observed.object_name = _node_text(obj)
        if prop is not None:
            observed.property_name = _node_text(prop)

    return observed


def _first_error(root: Node) -> Optional[Node]:
    """Find the first ERROR or missing node in source order."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        if node.has_error:
            stack.extend(reversed(node.children))
    return None


def parse_source(source_code: str, filepath: str = "<string>") -> ParseResult:
    """Parse a JavaScript source string and record every syntax node.

    Args:
        source_code: The JavaScript source code to parse.
        filepath: The path to the source file (for error reporting).

    Returns:
        ParseResult with the observed nodes in source order. A source with
        syntax errors yields an entry in parse_errors and no nodes.
    """
    result = ParseResult(filepath=filepath)
    tree = get_parser().parse(source_code.encode("utf-8"))
    root = tree.root_node

    if root.has_error:
        bad = _first_error(root) or root
        line, col = bad.start_point[0] + 1, bad.start_point[1] + 1
        result.parse_errors.append(f"SyntaxError at line {line}, column {col}")
        return result

    # Pre-order walk keeps nodes in source order
    stack: list[tuple[Node, Optional[Node], Optional[str]]] = [(root, None, None)]
    while stack:
        node, parent, field_name = stack.pop()
        result.nodes.append(_observe(node, parent, field_name))
        stack.extend(
            (child, node, node.field_name_for_child(index))
            for index, child in reversed(list(enumerate(node.children)))
        )

    return result
"""
engineaudit Feature Detector — Turn JavaScript source into feature-usage facts.

Ties together the parser and the knowledge base: every observed syntax node
is matched against the feature rules, and each match becomes a FeatureUsage
naming the feature and the minimum Node.js version it needs.

The compatibility engine only depends on the FeatureDetector protocol, so a
different knowledge base or extraction strategy can be plugged in.

Usage:
    from engineaudit.detector import TreeSitterDetector

    usages = TreeSitterDetector().detect("const f = a => a ?? 1", "lib/f.js")
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence

from engineaudit.errors import ExtractionError
from engineaudit.knowledge_base import FEATURE_RULES, FeatureRule, PatternType
from engineaudit.parser import ParseResult, SyntaxNode, parse_source


@dataclass(frozen=True)
class FeatureUsage:
    """One observed use of a version-gated feature in one file."""
    name: str                  # e.g. "optional chaining"
    required_version: str      # e.g. "14.0.0"
    file: str
    lineno: int = 0
    col_offset: int = 0
    rule_id: str = ""


class FeatureDetector(Protocol):
    """Anything that can extract feature usages from source text."""

    def detect(self, source_code: str, filepath: str = "<string>") -> list[FeatureUsage]:
        """Return the usages in source_code.

        Raises ExtractionError when the source cannot be analyzed. The
        scanner also isolates any other exception to the file being scanned.
        """
        ...


def _match_syntax(node: SyntaxNode, rule: FeatureRule) -> bool:
    return not rule.parent_types or node.parent_type in rule.parent_types


def _match_operator(node: SyntaxNode, rule: FeatureRule) -> bool:
    return node.operator == rule.operator


def _match_modifier(node: SyntaxNode, rule: FeatureRule) -> bool:
    return all(token in node.tokens for token in rule.modifiers)


def _match_missing_field(node: SyntaxNode, rule: FeatureRule) -> bool:
    return rule.field not in node.fields


def _match_literal(node: SyntaxNode, rule: FeatureRule) -> bool:
    return bool(rule.text_pattern) and re.search(rule.text_pattern, node.text) is not None


def _match_member(node: SyntaxNode, rule: FeatureRule) -> bool:
    return node.object_name == rule.object_name and node.property_name == rule.symbol


# Identifiers in these positions declare a name instead of reading a global
_BINDING_FIELDS = frozenset({
    ("variable_declarator", "name"),
    ("function_declaration", "name"),
    ("generator_function_declaration", "name"),
    ("function_expression", "name"),
    ("generator_function", "name"),
    ("class_declaration", "name"),
    ("class", "name"),
    ("arrow_function", "parameter"),
    ("catch_clause", "parameter"),
    ("assignment_pattern", "left"),
    ("pair_pattern", "value"),
    ("import_specifier", "name"),
    ("import_specifier", "alias"),
    ("namespace_import", None),
    ("import_clause", None),
})
_BINDING_PARENTS = frozenset({"formal_parameters", "array_pattern", "rest_pattern"})


def _is_binding(node: SyntaxNode) -> bool:
    return (
        node.parent_type in _BINDING_PARENTS
        or (node.parent_type, node.field_name) in _BINDING_FIELDS
    )


def _match_global(node: SyntaxNode, rule: FeatureRule) -> bool:
    return node.text == rule.symbol and not _is_binding(node)


_MATCHERS: dict[PatternType, Callable[[SyntaxNode, FeatureRule], bool]] = {
    PatternType.SYNTAX: _match_syntax,
    PatternType.OPERATOR: _match_operator,
    PatternType.MODIFIER: _match_modifier,
    PatternType.MISSING_FIELD: _match_missing_field,
    PatternType.LITERAL: _match_literal,
    PatternType.MEMBER: _match_member,
    PatternType.GLOBAL: _match_global,
}


def index_rules(rules: Sequence[FeatureRule]) -> dict[str, list[FeatureRule]]:
    """Group rules by the node types they apply to."""
    index: dict[str, list[FeatureRule]] = {}
    for rule in rules:
        for node_type in rule.node_types:
            index.setdefault(node_type, []).append(rule)
    return index


def match_rules(
    parse_result: ParseResult,
    index: dict[str, list[FeatureRule]],
) -> list[FeatureUsage]:
    """Match indexed rules against every node of a parse result.

    Usages come out in source order; a node matching several rules yields
    one usage per rule.
    """
    usages = []
    for node in parse_result.nodes:
        for rule in index.get(node.type, ()):
            if _MATCHERS[rule.pattern_type](node, rule):
                usages.append(FeatureUsage(
                    name=rule.name,
                    required_version=rule.required_version,
                    file=parse_result.filepath,
                    lineno=node.lineno,
                    col_offset=node.col_offset,
                    rule_id=rule.rule_id,
                ))
    return usages


class TreeSitterDetector:
    """Feature detector backed by tree-sitter and a rule list.

    Args:
        rules: Feature rules to match. Defaults to the built-in knowledge base.
    """

    def __init__(self, rules: Optional[Sequence[FeatureRule]] = None):
        self.rules = list(FEATURE_RULES if rules is None else rules)
        self._index = index_rules(self.rules)

    def detect(self, source_code: str, filepath: str = "<string>") -> list[FeatureUsage]:
        """Extract feature usages from JavaScript source.

        Raises:
            ExtractionError: If the source cannot be parsed.
        """
        parse_result = parse_source(source_code, filepath=filepath)
        if parse_result.parse_errors:
            raise ExtractionError(filepath, "; ".join(parse_result.parse_errors))
        return match_rules(parse_result, self._index)

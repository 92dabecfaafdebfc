"""
engineaudit Knowledge Base — Registry of JavaScript features and the Node.js
version that first supports each of them.

Each entry describes one language feature or runtime API, the minimum Node.js
version that ships it without flags, and a pattern for spotting it in a
tree-sitter JavaScript syntax tree.

New entries go through register_feature(), which appends to FEATURE_RULES.
Detectors accept an explicit rule list, so a different knowledge base can be
swapped in without touching the compatibility engine.

Pattern types:
  - "syntax": Matches a node type (e.g. arrow_function), optionally under a parent type
  - "operator": Matches the operator token of an expression (e.g. ** or ??)
  - "modifier": Matches keyword tokens on a node (e.g. async on a function)
  - "missing_field": Matches a node lacking a field (e.g. catch without a binding)
  - "literal": Matches the text of a literal node against a regex (e.g. 1_000)
  - "member": Matches a static member access (e.g. Object.fromEntries)
  - "global": Matches a global identifier (e.g. globalThis)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class PatternType(Enum):
    """How the detector should look for this feature in a syntax tree."""
    SYNTAX = "syntax"
    OPERATOR = "operator"
    MODIFIER = "modifier"
    MISSING_FIELD = "missing_field"
    LITERAL = "literal"
    MEMBER = "member"
    GLOBAL = "global"


@dataclass(frozen=True)
class FeatureRule:
    """A single rule describing a version-gated JavaScript feature.

    Attributes:
        rule_id: Unique identifier for this rule
        name: Human-readable feature name used in reports (e.g. "optional chaining")
        required_version: First Node.js version supporting the feature (e.g. "14.0.0")
        pattern_type: How to detect this in a syntax tree
        node_types: Syntax node types the rule applies to
        parent_types: For SYNTAX: restrict matches to nodes under these parent types
        operator: For OPERATOR: the operator token (e.g. "??")
        modifiers: For MODIFIER: keyword tokens that must all be present
        field: For MISSING_FIELD: the field whose absence triggers the rule
        text_pattern: For LITERAL: regex searched in the node's text
        object_name: For MEMBER: the object being accessed (e.g. "Object")
        symbol: For MEMBER/GLOBAL: the property or identifier name
    """
    rule_id: str
    name: str
    required_version: str
    pattern_type: PatternType
    node_types: tuple[str, ...] = ()
    parent_types: tuple[str, ...] = ()
    operator: Optional[str] = None
    modifiers: tuple[str, ...] = ()
    field: Optional[str] = None
    text_pattern: Optional[str] = None
    object_name: Optional[str] = None
    symbol: Optional[str] = None


# =============================================================================
# KNOWLEDGE BASE — All known version-gated features
# =============================================================================

FEATURE_RULES: list[FeatureRule] = []


def register_feature(rule: FeatureRule) -> None:
    """Register a new feature rule in the knowledge base."""
    FEATURE_RULES.append(rule)


def get_rule(rule_id: str) -> Optional[FeatureRule]:
    for rule in FEATURE_RULES:
        if rule.rule_id == rule_id:
            return rule
    return None


def _member(rule_id: str, name: str, required_version: str, object_name: str, symbol: str) -> None:
    register_feature(FeatureRule(
        rule_id=rule_id,
        name=name,
        required_version=required_version,
        pattern_type=PatternType.MEMBER,
        node_types=("member_expression",),
        object_name=object_name,
        symbol=symbol,
    ))


def _global(rule_id: str, name: str, required_version: str, symbol: str) -> None:
    register_feature(FeatureRule(
        rule_id=rule_id,
        name=name,
        required_version=required_version,
        pattern_type=PatternType.GLOBAL,
        node_types=("identifier",),
        symbol=symbol,
    ))


_FUNCTION_NODES = (
    "function_declaration",
    "function_expression",
    "function",
    "arrow_function",
    "method_definition",
)


# =============================================================================
# ES2015 (Node.js 4 - 6)
# =============================================================================
register_feature(FeatureRule(
    rule_id="arrow-functions",
    name="arrow functions",
    required_version="4.0.0",
    pattern_type=PatternType.SYNTAX,
    node_types=("arrow_function",),
))

register_feature(FeatureRule(
    rule_id="template-literals",
    name="template literals",
    required_version="4.0.0",
    pattern_type=PatternType.SYNTAX,
    node_types=("template_string",),
))

register_feature(FeatureRule(
    rule_id="generators",
    name="generators",
    required_version="4.0.0",
    pattern_type=PatternType.SYNTAX,
    node_types=("generator_function_declaration", "generator_function"),
))

register_feature(FeatureRule(
    rule_id="generator-methods",
    name="generators",
    required_version="4.0.0",
    pattern_type=PatternType.MODIFIER,
    node_types=("method_definition",),
    modifiers=("*",),
))

register_feature(FeatureRule(
    rule_id="shorthand-properties",
    name="shorthand properties",
    required_version="4.0.0",
    pattern_type=PatternType.SYNTAX,
    node_types=("shorthand_property_identifier",),
))

register_feature(FeatureRule(
    rule_id="computed-properties",
    name="computed property names",
    required_version="4.0.0",
    pattern_type=PatternType.SYNTAX,
    node_types=("computed_property_name",),
))

_member("object-assign", "Object.assign", "4.0.0", "Object", "assign")
_member("array-from", "Array.from", "4.0.0", "Array", "from")
_member("array-of", "Array.of", "4.0.0", "Array", "of")
_member("string-raw", "String.raw", "4.0.0", "String", "raw")

register_feature(FeatureRule(
    rule_id="spread-arguments",
    name="spread syntax",
    required_version="5.0.0",
    pattern_type=PatternType.SYNTAX,
    node_types=("spread_element",),
    parent_types=("arguments", "array"),
))

register_feature(FeatureRule(
    rule_id="new-target",
    name="new.target",
    required_version="5.0.0",
    pattern_type=PatternType.LITERAL,
    node_types=("meta_property",),
    text_pattern=r"^new\s*\.\s*target$",
))

register_feature(FeatureRule(
    rule_id="classes",
    name="classes",
    required_version="6.0.0",
    pattern_type=PatternType.SYNTAX,
    node_types=("class_declaration", "class"),
))

register_feature(FeatureRule(
    rule_id="let-const",
    name="let and const declarations",
    required_version="6.0.0",
    pattern_type=PatternType.SYNTAX,
    node_types=("lexical_declaration",),
))

register_feature(FeatureRule(
    rule_id="destructuring",
    name="destructuring",
    required_version="6.0.0",
    pattern_type=PatternType.SYNTAX,
    node_types=("object_pattern", "array_pattern"),
))

register_feature(FeatureRule(
    rule_id="default-parameters",
    name="default parameters",
    required_version="6.0.0",
    pattern_type=PatternType.SYNTAX,
    node_types=("assignment_pattern",),
))

register_feature(FeatureRule(
    rule_id="rest-parameters",
    name="rest parameters",
    required_version="6.0.0",
    pattern_type=PatternType.SYNTAX,
    node_types=("rest_pattern",),
    parent_types=("formal_parameters", "array_pattern"),
))

register_feature(FeatureRule(
    rule_id="regex-sticky-unicode",
    name="regular expression flags u and y",
    required_version="6.0.0",
    pattern_type=PatternType.LITERAL,
    node_types=("regex_flags",),
    text_pattern=r"[uy]",
))

_global("proxy", "Proxy", "6.0.0", "Proxy")
_global("reflect", "Reflect", "6.0.0", "Reflect")


# =============================================================================
# ES2016 / ES2017 (Node.js 7 - 8)
# =============================================================================
register_feature(FeatureRule(
    rule_id="exponent-operator",
    name="the exponentiation operator",
    required_version="7.0.0",
    pattern_type=PatternType.OPERATOR,
    node_types=("binary_expression",),
    operator="**",
))

register_feature(FeatureRule(
    rule_id="exponent-assignment",
    name="the exponentiation operator",
    required_version="7.0.0",
    pattern_type=PatternType.OPERATOR,
    node_types=("augmented_assignment_expression",),
    operator="**=",
))

_member("object-entries", "Object.entries", "7.0.0", "Object", "entries")
_member("object-values", "Object.values", "7.0.0", "Object", "values")
_member(
    "object-get-own-property-descriptors",
    "Object.getOwnPropertyDescriptors",
    "7.0.0",
    "Object",
    "getOwnPropertyDescriptors",
)

register_feature(FeatureRule(
    rule_id="async-functions",
    name="async functions",
    required_version="7.6.0",
    pattern_type=PatternType.MODIFIER,
    node_types=_FUNCTION_NODES,
    modifiers=("async",),
))

register_feature(FeatureRule(
    rule_id="object-spread",
    name="object rest/spread properties",
    required_version="8.3.0",
    pattern_type=PatternType.SYNTAX,
    node_types=("spread_element",),
    parent_types=("object",),
))

register_feature(FeatureRule(
    rule_id="object-rest",
    name="object rest/spread properties",
    required_version="8.3.0",
    pattern_type=PatternType.SYNTAX,
    node_types=("rest_pattern",),
    parent_types=("object_pattern",),
))


# =============================================================================
# ES2018 / ES2019 (Node.js 8.10 - 12)
# =============================================================================
register_feature(FeatureRule(
    rule_id="regex-dotall",
    name="the regular expression s flag",
    required_version="8.10.0",
    pattern_type=PatternType.LITERAL,
    node_types=("regex_flags",),
    text_pattern=r"s",
))

register_feature(FeatureRule(
    rule_id="regex-lookbehind",
    name="regular expression lookbehind assertions",
    required_version="8.10.0",
    pattern_type=PatternType.LITERAL,
    node_types=("regex_pattern",),
    text_pattern=r"\(\?<[=!]",
))

register_feature(FeatureRule(
    rule_id="regex-named-groups",
    name="regular expression named capture groups",
    required_version="10.0.0",
    pattern_type=PatternType.LITERAL,
    node_types=("regex_pattern",),
    text_pattern=r"\(\?<[A-Za-z_$]",
))

register_feature(FeatureRule(
    rule_id="regex-unicode-property-escapes",
    name="regular expression Unicode property escapes",
    required_version="10.0.0",
    pattern_type=PatternType.LITERAL,
    node_types=("regex_pattern",),
    text_pattern=r"\\[pP]\{",
))

register_feature(FeatureRule(
    rule_id="for-await-of",
    name="async iteration",
    required_version="10.0.0",
    pattern_type=PatternType.MODIFIER,
    node_types=("for_in_statement",),
    modifiers=("await",),
))

register_feature(FeatureRule(
    rule_id="async-generators",
    name="async iteration",
    required_version="10.0.0",
    pattern_type=PatternType.MODIFIER,
    node_types=("generator_function_declaration", "generator_function"),
    modifiers=("async",),
))

register_feature(FeatureRule(
    rule_id="async-generator-methods",
    name="async iteration",
    required_version="10.0.0",
    pattern_type=PatternType.MODIFIER,
    node_types=("method_definition",),
    modifiers=("async", "*"),
))

_member("symbol-async-iterator", "async iteration", "10.0.0", "Symbol", "asyncIterator")

register_feature(FeatureRule(
    rule_id="optional-catch-binding",
    name="optional catch binding",
    required_version="10.0.0",
    pattern_type=PatternType.MISSING_FIELD,
    node_types=("catch_clause",),
    field="parameter",
))

register_feature(FeatureRule(
    rule_id="bigint-literals",
    name="BigInt",
    required_version="10.4.0",
    pattern_type=PatternType.LITERAL,
    node_types=("number",),
    text_pattern=r"n$",
))

_global("bigint", "BigInt", "10.4.0", "BigInt")
_global("queue-microtask", "queueMicrotask", "11.0.0", "queueMicrotask")

_member("object-from-entries", "Object.fromEntries", "12.0.0", "Object", "fromEntries")
_global("global-this", "globalThis", "12.0.0", "globalThis")

register_feature(FeatureRule(
    rule_id="class-fields",
    name="class fields",
    required_version="12.0.0",
    pattern_type=PatternType.SYNTAX,
    node_types=("field_definition",),
))

register_feature(FeatureRule(
    rule_id="private-class-fields",
    name="private class fields",
    required_version="12.0.0",
    pattern_type=PatternType.SYNTAX,
    node_types=("private_property_identifier",),
    parent_types=("field_definition", "member_expression"),
))

register_feature(FeatureRule(
    rule_id="numeric-separators",
    name="numeric separators",
    required_version="12.5.0",
    pattern_type=PatternType.LITERAL,
    node_types=("number",),
    text_pattern=r"_",
))

_member("promise-all-settled", "Promise.allSettled", "12.9.0", "Promise", "allSettled")


# =============================================================================
# ES2020+ (Node.js 14 and later)
# =============================================================================
register_feature(FeatureRule(
    rule_id="optional-chaining",
    name="optional chaining",
    required_version="14.0.0",
    pattern_type=PatternType.SYNTAX,
    node_types=("optional_chain",),
))

register_feature(FeatureRule(
    rule_id="nullish-coalescing",
    name="nullish coalescing",
    required_version="14.0.0",
    pattern_type=PatternType.OPERATOR,
    node_types=("binary_expression",),
    operator="??",
))

register_feature(FeatureRule(
    rule_id="private-methods",
    name="private methods",
    required_version="14.6.0",
    pattern_type=PatternType.SYNTAX,
    node_types=("private_property_identifier",),
    parent_types=("method_definition",),
))

_global("weak-ref", "WeakRef", "14.6.0", "WeakRef")
_global("finalization-registry", "FinalizationRegistry", "14.6.0", "FinalizationRegistry")

for _suffix, _operator in (("and", "&&="), ("or", "||="), ("nullish", "??=")):
    register_feature(FeatureRule(
        rule_id=f"logical-assignment-{_suffix}",
        name="logical assignment operators",
        required_version="15.0.0",
        pattern_type=PatternType.OPERATOR,
        node_types=("augmented_assignment_expression",),
        operator=_operator,
    ))

_member("promise-any", "Promise.any", "15.0.0", "Promise", "any")
_global("aggregate-error", "AggregateError", "15.0.0", "AggregateError")
_global("abort-controller", "AbortController", "15.0.0", "AbortController")

register_feature(FeatureRule(
    rule_id="regex-match-indices",
    name="the regular expression d flag",
    required_version="16.0.0",
    pattern_type=PatternType.LITERAL,
    node_types=("regex_flags",),
    text_pattern=r"d",
))

_member("object-has-own", "Object.hasOwn", "16.9.0", "Object", "hasOwn")

register_feature(FeatureRule(
    rule_id="class-static-blocks",
    name="class static blocks",
    required_version="16.11.0",
    pattern_type=PatternType.SYNTAX,
    node_types=("class_static_block",),
))

_global("structured-clone", "structuredClone", "17.0.0", "structuredClone")
_global("fetch", "fetch", "18.0.0", "fetch")

register_feature(FeatureRule(
    rule_id="regex-unicode-sets",
    name="the regular expression v flag",
    required_version="20.0.0",
    pattern_type=PatternType.LITERAL,
    node_types=("regex_flags",),
    text_pattern=r"v",
))

_member("object-group-by", "Object.groupBy", "21.0.0", "Object", "groupBy")
_member("promise-with-resolvers", "Promise.withResolvers", "22.0.0", "Promise", "withResolvers")
_member("array-from-async", "Array.fromAsync", "22.0.0", "Array", "fromAsync")

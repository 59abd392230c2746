"""
Built-in grammar rules for raw JSON values and recognised string formats.

Each BuiltinRule is a grammar body plus the names of the other built-in rules
it refers to. Rules are materialised lazily: RuleTable.add_primitive() adds a
rule the first time it is referenced, then its dependencies, transitively.

Catalog:
    boolean, null, integral-part, decimal-part, number, integer, char, string,
    value, object, array, uuid
    date, time, date-time and their quoted wrappers date-string, time-string,
    date-time-string
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List

from schema_gbnf.schema.errors import CatalogError

# Optional whitespace allowed after every JSON token.
SPACE_RULE = r'| " " | "\n"{1,2} [ \t]{0,20}'


@dataclass(frozen=True)
class BuiltinRule:
    """
    An immutable built-in grammar rule.

    Attributes:
        content: Grammar body
        deps: Names of built-in rules the body references
    """

    content: str
    deps: List[str] = field(default_factory=list)


PRIMITIVE_RULES: Dict[str, BuiltinRule] = {
    "boolean": BuiltinRule('("true" | "false") space'),
    "decimal-part": BuiltinRule("[0-9]{1,16}"),
    "integral-part": BuiltinRule("[0] | [1-9] [0-9]{0,15}"),
    "number": BuiltinRule(
        '("-"? integral-part) ("." decimal-part)? ([eE] [-+]? integral-part)? space',
        ["integral-part", "decimal-part"],
    ),
    "integer": BuiltinRule('("-"? integral-part) space', ["integral-part"]),
    "value": BuiltinRule(
        "object | array | string | number | boolean | null",
        ["object", "array", "string", "number", "boolean", "null"],
    ),
    "object": BuiltinRule(
        '"{" space ( string ":" space value ("," space string ":" space value)* )? "}" space',
        ["string", "value"],
    ),
    "array": BuiltinRule('"[" space ( value ("," space value)* )? "]" space', ["value"]),
    "uuid": BuiltinRule(
        r'"\"" [0-9a-fA-F]{8} "-" [0-9a-fA-F]{4} "-" [0-9a-fA-F]{4} "-" '
        r'[0-9a-fA-F]{4} "-" [0-9a-fA-F]{12} "\"" space'
    ),
    "char": BuiltinRule(r'[^"\\\x7F\x00-\x1F] | [\\] (["\\bfnrt] | "u" [0-9a-fA-F]{4})'),
    "string": BuiltinRule(r'"\"" char* "\"" space', ["char"]),
    "null": BuiltinRule('"null" space'),
}

STRING_FORMAT_RULES: Dict[str, BuiltinRule] = {
    "date": BuiltinRule(
        '[0-9]{4} "-" ( "0" [1-9] | "1" [0-2] ) "-" ( "0" [1-9] | [1-2] [0-9] | "3" [0-1] )'
    ),
    "time": BuiltinRule(
        '([01] [0-9] | "2" [0-3]) ":" [0-5] [0-9] ":" [0-5] [0-9] ( "." [0-9]{3} )? '
        '( "Z" | ( "+" | "-" ) ( [01] [0-9] | "2" [0-3] ) ":" [0-5] [0-9] )'
    ),
    "date-time": BuiltinRule('date "T" time', ["date", "time"]),
    "date-string": BuiltinRule(r'"\"" date "\"" space', ["date"]),
    "time-string": BuiltinRule(r'"\"" time "\"" space', ["time"]),
    "date-time-string": BuiltinRule(r'"\"" date-time "\"" space', ["date-time"]),
}

# Names a schema-derived rule may not take verbatim.
RESERVED_NAMES: FrozenSet[str] = frozenset(
    ["root", *PRIMITIVE_RULES.keys(), *STRING_FORMAT_RULES.keys()]
)

# JSON value kinds a bare {"type": ...} schema may name.
PRIMITIVE_TYPES: FrozenSet[str] = frozenset(
    ["string", "number", "integer", "boolean", "null", "array"]
)


def lookup_builtin(name: str) -> BuiltinRule:
    """
    Look up a built-in rule by name in either catalog.

    Raises:
        CatalogError: If no built-in rule has that name
    """
    rule = PRIMITIVE_RULES.get(name) or STRING_FORMAT_RULES.get(name)
    if rule is None:
        raise CatalogError(f"Rule {name} not known")
    return rule

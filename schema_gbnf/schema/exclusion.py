"""
String-exclusion generator - grammar for any JSON string except given literals.

Used for the keys of `additionalProperties`: an extra key may be any string
that is not exactly one of the declared property names. The excluded strings
are loaded into a trie in their JSON-escaped form; at every trie node the
grammar offers one alternative per outgoing edge plus "none of these" branches
that accept any other well-formed continuation.

A trie edge may fall inside an escape sequence (`\\"`, `\\n`, `\\u00e9`), so
every node knows which part of a JSON character it sits in and its fallback
only offers what may legally follow there.

Example:
    ```python
    not_strings(["a"], rules)
    # [a] followed by at least one more character, or any other first
    # character (raw or escaped) followed by anything
    ```
"""

from typing import Dict, Iterable, List, Optional, Union

from schema_gbnf.schema.primitives import PRIMITIVE_RULES
from schema_gbnf.schema.rules import RuleTable
from schema_gbnf.utils.json_utils import to_json

# Characters that cannot appear verbatim inside a grammar character class.
_CLASS_SPECIAL = set('\\]^-["')

# Raw characters a JSON string may not contain unescaped, as class contents.
_UNESCAPED_EXCLUDED = r'"\\\x7F\x00-\x1F'

# Letters allowed after a backslash, besides "u".
_ESCAPE_LETTERS = '"\\bfnrt'
_HEX_DIGITS = "0123456789abcdefABCDEF"
_HEX = "[0-9a-fA-F]"
_ESCAPE_TAIL = f'(["\\\\bfnrt] | "u" {_HEX}{{4}})'

# Position inside one JSON character: None at a character boundary, "escape"
# right after a backslash, or the number of hex digits still owed by `\uXXXX`.
_State = Optional[Union[str, int]]


class TrieNode:
    """Prefix tree node keyed by single characters."""

    def __init__(self):
        self.children: Dict[str, "TrieNode"] = {}
        self.is_end_of_string = False

    def insert(self, string: str) -> None:
        node = self
        for c in string:
            node = node.children.setdefault(c, TrieNode())
        node.is_end_of_string = True


def class_char(c: str) -> str:
    """Render one character for use inside a `[...]` character class."""
    if c in _CLASS_SPECIAL or ord(c) < 0x20 or ord(c) == 0x7F:
        if ord(c) <= 0xFF:
            return f"\\x{ord(c):02X}"
        return f"\\u{ord(c):04X}"
    return c


def _next_state(state: _State, c: str) -> _State:
    if state is None:
        return "escape" if c == "\\" else None
    if state == "escape":
        return 4 if c == "u" else None
    return state - 1 if state > 1 else None


def _fallbacks(state: _State, edges: List[str], char_rule: str) -> List[str]:
    """Alternatives for a continuation that leaves the trie at this node."""
    if state is None:
        rejects = "".join(class_char(c) for c in edges)
        alternatives = [f"[^{_UNESCAPED_EXCLUDED}{rejects}] {char_rule}*"]
        if "\\" not in edges:
            alternatives.append(f"[\\\\] {_ESCAPE_TAIL} {char_rule}*")
        return alternatives

    if state == "escape":
        alternatives = []
        letters = [c for c in _ESCAPE_LETTERS if c not in edges]
        if letters:
            alternatives.append(f"[{''.join(class_char(c) for c in letters)}] {char_rule}*")
        if "u" not in edges:
            alternatives.append(f'"u" {_HEX}{{4}} {char_rule}*')
        return alternatives

    digits = [c for c in _HEX_DIGITS if c not in edges]
    if not digits:
        return []
    tail = f" {_HEX}{{{state - 1}}}" if state > 1 else ""
    return [f"[{''.join(digits)}]{tail} {char_rule}*"]


def not_strings(strings: Iterable[str], rules: RuleTable) -> str:
    """
    Build a grammar body matching any JSON string value not in `strings`.

    The strings are compared in their JSON-escaped form, which is what appears
    between the quotes of the generated text. Only well-formed JSON string
    contents are accepted.

    Args:
        strings: Literal values to exclude
        rules: Rule table; the `char` primitive is registered in it

    Returns:
        str: Grammar body for a quoted JSON string
    """
    trie = TrieNode()
    for s in strings:
        trie.insert(to_json(s)[1:-1])

    char_rule = rules.add_primitive("char", PRIMITIVE_RULES["char"])
    if not trie.children:
        # Nothing to exclude, or only the empty string.
        return f'["] {char_rule}{"+" if trie.is_end_of_string else "*"} ["] space'

    def visit(node: TrieNode, state: _State) -> str:
        edges = sorted(node.children)
        alternatives = []
        for c in edges:
            child = node.children[c]
            child_state = _next_state(state, c)
            alternative = f"[{class_char(c)}]"
            if child.children:
                # a string may stop after a prefix only at a character boundary
                optional = child_state is None and not child.is_end_of_string
                alternative += f" ({visit(child, child_state)}){'?' if optional else ''}"
            elif child.is_end_of_string:
                alternative += f" {char_rule}+"
            alternatives.append(alternative)
        alternatives.extend(_fallbacks(state, edges, char_rule))
        return " | ".join(alternatives)

    body = visit(trie, None)
    return f'["] ( {body} ){"" if trie.is_end_of_string else "?"} ["] space'

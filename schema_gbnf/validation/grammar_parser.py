"""
GBNF reader - parse grammar text back into rule trees.

Supports the dialect the compiler emits (and llama.cpp reads):

    name ::= alternative | alternative ...
    "literal"          with \\" \\\\ \\n \\r \\t \\xHH \\uHHHH \\UHHHHHHHH escapes
    [a-z0-9_] [^"\\\\]  character classes with ranges and negation
    ( ... )            grouping, newlines allowed inside
    x? x* x+ x{m} x{m,} x{m,n}
    # comment          until end of line

A rule ends at the first newline outside parentheses. Every referenced rule
must be defined.

Usage:
    ```python
    grammar = parse_grammar('root ::= "a" b*\\nb ::= [0-9]\\n')
    grammar["b"]  # CharClass(ranges=[(48, 57)], negated=False)
    ```
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)

NAME_CHARS = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_-")
SIMPLE_ESCAPES = {"n": "\n", "r": "\r", "t": "\t"}
HEX_ESCAPE_WIDTHS = {"x": 2, "u": 4, "U": 8}


class GrammarSyntaxError(ValueError):
    """Grammar text that is not valid GBNF."""

    def __init__(self, message: str, position: Optional[int] = None):
        super().__init__(message if position is None else f"{message} at offset {position}")
        self.position = position


@dataclass
class Literal:
    text: str


@dataclass
class CharClass:
    ranges: List[Tuple[int, int]]
    negated: bool = False

    def matches(self, c: str) -> bool:
        code = ord(c)
        inside = any(lo <= code <= hi for lo, hi in self.ranges)
        return inside != self.negated


@dataclass
class RuleRef:
    name: str


@dataclass
class Sequence:
    items: List["Node"] = field(default_factory=list)


@dataclass
class Alternation:
    alternatives: List["Node"]


@dataclass
class Repeat:
    node: "Node"
    min_times: int
    max_times: Optional[int]


Node = Union[Literal, CharClass, RuleRef, Sequence, Alternation, Repeat]
Grammar = Dict[str, Node]


def parse_grammar(text: str) -> Grammar:
    """
    Parse GBNF text into a mapping of rule name to rule tree.

    Args:
        text: Grammar text

    Returns:
        Grammar: Rule name -> parsed body

    Raises:
        GrammarSyntaxError: On malformed text, duplicate or undefined rules
    """
    parser = _GrammarParser(text)
    rules = parser.parse()
    _check_references(rules)
    logger.debug(f"Parsed grammar with {len(rules)} rules")
    return rules


def _check_references(rules: Grammar) -> None:
    def walk(node: Node) -> None:
        if isinstance(node, RuleRef):
            if node.name not in rules:
                raise GrammarSyntaxError(f"Undefined rule identifier {node.name!r}")
        elif isinstance(node, Sequence):
            for item in node.items:
                walk(item)
        elif isinstance(node, Alternation):
            for alternative in node.alternatives:
                walk(alternative)
        elif isinstance(node, Repeat):
            walk(node.node)

    for body in rules.values():
        walk(body)


class _GrammarParser:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def _peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.text[index] if index < len(self.text) else ""

    def _skip_space(self, newlines: bool) -> None:
        text = self.text
        while self.pos < len(text):
            c = text[self.pos]
            if c == "#":
                while self.pos < len(text) and text[self.pos] not in "\r\n":
                    self.pos += 1
            elif c in " \t" or (newlines and c in "\r\n"):
                self.pos += 1
            else:
                break

    def parse(self) -> Grammar:
        rules: Grammar = {}
        while True:
            self._skip_space(newlines=True)
            if self.pos >= len(self.text):
                break
            start = self.pos
            name = self._name()
            self._skip_space(newlines=False)
            if not self.text.startswith("::=", self.pos):
                raise GrammarSyntaxError("Expected '::='", self.pos)
            self.pos += 3
            if name in rules:
                raise GrammarSyntaxError(f"Duplicate rule {name!r}", start)
            rules[name] = self._alternation(depth=0)
            if self._peek() not in ("", "\n", "\r"):
                raise GrammarSyntaxError(f"Unexpected {self._peek()!r}", self.pos)
        return rules

    def _name(self) -> str:
        start = self.pos
        while self._peek() and self._peek() in NAME_CHARS:
            self.pos += 1
        if self.pos == start:
            raise GrammarSyntaxError("Expected rule name", start)
        return self.text[start:self.pos]

    def _alternation(self, depth: int) -> Node:
        alternatives = [self._sequence(depth)]
        while self._peek() == "|":
            self.pos += 1
            alternatives.append(self._sequence(depth))
        return alternatives[0] if len(alternatives) == 1 else Alternation(alternatives)

    def _sequence(self, depth: int) -> Node:
        items: List[Node] = []
        while True:
            self._skip_space(newlines=depth > 0)
            c = self._peek()
            if c in ("", "|", ")") or c in "\r\n":
                break
            items.append(self._postfix(self._atom(depth)))
        return items[0] if len(items) == 1 else Sequence(items)

    def _atom(self, depth: int) -> Node:
        c = self._peek()
        if c == '"':
            return self._literal()
        if c == "[":
            return self._char_class()
        if c == "(":
            start = self.pos
            self.pos += 1
            node = self._alternation(depth + 1)
            self._skip_space(newlines=True)
            if self._peek() != ")":
                raise GrammarSyntaxError("Expected ')'", start)
            self.pos += 1
            return node
        if c in NAME_CHARS:
            return RuleRef(self._name())
        raise GrammarSyntaxError(f"Unexpected {c!r}", self.pos)

    def _postfix(self, node: Node) -> Node:
        while True:
            c = self._peek()
            if c == "?":
                node = Repeat(node, 0, 1)
            elif c == "*":
                node = Repeat(node, 0, None)
            elif c == "+":
                node = Repeat(node, 1, None)
            elif c == "{":
                node = self._braces(node)
                continue
            else:
                return node
            self.pos += 1

    def _braces(self, node: Node) -> Node:
        start = self.pos
        end = self.text.find("}", start)
        if end < 0:
            raise GrammarSyntaxError("Unterminated '{'", start)
        body = self.text[start + 1:end]
        parts = [part.strip() for part in body.split(",")]
        try:
            if len(parts) == 1:
                min_times = max_times = int(parts[0])
            elif len(parts) == 2:
                min_times = int(parts[0])
                max_times = int(parts[1]) if parts[1] else None
            else:
                raise ValueError(body)
        except ValueError:
            raise GrammarSyntaxError(f"Invalid repetition {{{body}}}", start) from None
        self.pos = end + 1
        return Repeat(node, min_times, max_times)

    def _char(self) -> str:
        """Read one possibly escaped character inside a literal or class."""
        c = self._peek()
        if c == "":
            raise GrammarSyntaxError("Unexpected end of grammar", self.pos)
        if c != "\\":
            self.pos += 1
            return c
        nxt = self._peek(1)
        if nxt in HEX_ESCAPE_WIDTHS:
            width = HEX_ESCAPE_WIDTHS[nxt]
            digits = self.text[self.pos + 2:self.pos + 2 + width]
            try:
                if len(digits) != width:
                    raise ValueError(digits)
                value = chr(int(digits, 16))
            except ValueError:
                raise GrammarSyntaxError(f"Invalid escape \\{nxt}{digits}", self.pos) from None
            self.pos += 2 + width
            return value
        if nxt == "":
            raise GrammarSyntaxError("Dangling escape", self.pos)
        self.pos += 2
        return SIMPLE_ESCAPES.get(nxt, nxt)

    def _literal(self) -> Literal:
        start = self.pos
        self.pos += 1
        chars = []
        while self._peek() != '"':
            if self._peek() == "":
                raise GrammarSyntaxError("Unterminated literal", start)
            chars.append(self._char())
        self.pos += 1
        return Literal("".join(chars))

    def _char_class(self) -> CharClass:
        start = self.pos
        self.pos += 1
        negated = self._peek() == "^"
        if negated:
            self.pos += 1
        ranges: List[Tuple[int, int]] = []
        while self._peek() != "]":
            if self._peek() == "":
                raise GrammarSyntaxError("Unterminated character class", start)
            lo = self._char()
            hi = lo
            if self._peek() == "-" and self._peek(1) not in ("]", ""):
                self.pos += 1
                hi = self._char()
            ranges.append((ord(lo), ord(hi)))
        self.pos += 1
        return CharClass(ranges, negated)

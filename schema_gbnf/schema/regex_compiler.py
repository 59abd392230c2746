"""
Regex compiler - translate a schema `pattern` into a grammar rule.

Supported subset (the pattern must be anchored with ^...$):
    - literal characters and escapes (\\. \\n \\t \\xHH \\uHHHH ...)
    - shorthand classes \\d \\w \\s and their negations \\D \\W \\S
    - `.` (any character but line terminators, or anything with dotall)
    - character classes [...] (copied verbatim)
    - alternation `|` and groups (...) without `(?` extensions
    - quantifiers * + ? {m} {m,} {m,n}

Consecutive literal characters are coalesced into one quoted literal.
Bounded repetitions of a non-literal are hoisted into a named sub-rule first
so large expressions are not duplicated inline.

Usage:
    ```python
    from schema_gbnf.schema.regex_compiler import translate_pattern
    from schema_gbnf.schema.rules import RuleTable

    rules = RuleTable()
    translate_pattern("^[a-z]+-[0-9]{3}$", "code", rules)
    # rules: code ::= "\\"" ([a-z]+ "-" code-1{3,3}) "\\"" space
    #        code-1 ::= [0-9]
    ```
"""

import logging
import string
from itertools import groupby
from typing import Dict, List, Optional, Tuple

from schema_gbnf.schema.errors import PatternSyntaxError, UnbalancedPatternError
from schema_gbnf.schema.rules import RuleTable, build_repetition

logger = logging.getLogger(__name__)

NON_LITERAL_SET = set("|.()[]{}*+?")
QUANTIFIER_CHARS = set("*+?{")
ESCAPED_IN_REGEXPS_BUT_NOT_IN_LITERALS = set("^$.[]()|{}*+?")
# Hex escapes shared by regexes and grammar literals, with their digit counts.
HEX_ESCAPE_WIDTHS = {"x": 2, "u": 4}
SHORTHAND_CLASSES = {
    "d": "[0-9]",
    "D": "[^0-9]",
    "w": "[0-9A-Za-z_]",
    "W": "[^0-9A-Za-z_]",
    "s": r"[ \t\n\r]",
    "S": r"[^ \t\n\r]",
}

_LITERAL_CHAR_ESCAPES = {'"': '\\"', "\n": "\\n", "\r": "\\r"}

DOT_RULE = r"[^\x0A\x0D]"
DOTALL_RULE = r"[\U00000000-\U0010FFFF]"

# (grammar text, is_literal); literal text is unquoted.
Fragment = Tuple[str, bool]


def translate_pattern(pattern: str, name: str, rules: RuleTable, dotall: bool = False) -> str:
    """
    Translate an anchored regex into a rule matching JSON strings of its language.

    Args:
        pattern: Regex, must start with ^ and end with $
        name: Rule name for the result
        rules: Rule table receiving the rule and any sub-rules
        dotall: Whether `.` also matches line terminators

    Returns:
        str: Name of the registered rule

    Raises:
        PatternSyntaxError: If the pattern is unanchored or uses unsupported syntax
        UnbalancedPatternError: If a group, class or quantifier is unterminated
    """
    if not pattern.startswith("^") or not pattern.endswith("$"):
        raise PatternSyntaxError('Pattern must start with "^" and end with "$"', pattern)

    translator = _PatternTranslator(pattern[1:-1], name, rules, dotall)
    body = translator.translate()
    logger.debug(f"Translated pattern {pattern!r} into rule {name!r}")
    return rules.add_rule(name, f'"\\"" ({body}) "\\"" space')


def _to_rule(fragment: Fragment) -> str:
    text, is_literal = fragment
    return f'"{text}"' if is_literal else text


class _PatternTranslator:
    """Recursive-descent translator over one pattern body."""

    def __init__(self, pattern: str, name: str, rules: RuleTable, dotall: bool):
        self.pattern = pattern
        self.name = name
        self.rules = rules
        self.dotall = dotall
        self.i = 0
        self.sub_rule_ids: Dict[str, str] = {}

    def translate(self) -> str:
        return _to_rule(self._transform(in_group=False))

    def _error(self, message: str) -> PatternSyntaxError:
        return PatternSyntaxError(
            f"{message} at index {self.i} of /{self.pattern}/", self.pattern, self.i
        )

    def _unbalanced(self, what: str, start: int) -> UnbalancedPatternError:
        return UnbalancedPatternError(
            f"Unbalanced {what}; start = {start}, i = {self.i}, pattern = {self.pattern}",
            self.pattern,
            self.i,
        )

    def _dot(self) -> str:
        return self.rules.add_rule("dot", DOTALL_RULE if self.dotall else DOT_RULE)

    def _transform(self, in_group: bool) -> Fragment:
        pattern = self.pattern
        length = len(pattern)
        start = self.i
        seq: List[Fragment] = []

        while self.i < length:
            c = pattern[self.i]
            if c == ".":
                seq.append((self._dot(), False))
                self.i += 1
            elif c == "(":
                self.i += 1
                if self.i < length and pattern[self.i] == "?":
                    raise self._error(f'Unsupported pattern syntax "{pattern[self.i]}"')
                seq.append((f"({_to_rule(self._transform(in_group=True))})", False))
            elif c == ")":
                self.i += 1
                if not in_group:
                    raise self._unbalanced("parentheses", start)
                return self._join_seq(seq)
            elif c == "[":
                seq.append((self._char_class(start), False))
            elif c == "|":
                seq.append(("|", False))
                self.i += 1
            elif c in "*+?":
                self._check_repeatable(seq)
                seq[-1] = (_to_rule(seq[-1]) + c, False)
                self.i += 1
            elif c == "{":
                self._check_repeatable(seq)
                min_times, max_times = self._curly_quantifier(start)
                sub, sub_is_literal = seq[-1]
                if not sub_is_literal:
                    sub_id = self.sub_rule_ids.get(sub)
                    if sub_id is None:
                        sub_id = self.rules.add_rule(f"{self.name}-{len(self.sub_rule_ids) + 1}", sub)
                        self.sub_rule_ids[sub] = sub_id
                    sub = sub_id
                seq[-1] = (
                    build_repetition(f'"{sub}"' if sub_is_literal else sub, min_times, max_times),
                    False,
                )
            elif c == "\\" and self.i + 1 < length and pattern[self.i + 1] in SHORTHAND_CLASSES:
                seq.append((SHORTHAND_CLASSES[pattern[self.i + 1]], False))
                self.i += 2
            else:
                literal = self._literal()
                if literal:
                    seq.append((literal, True))

        if in_group:
            raise self._unbalanced("parentheses", start)
        return self._join_seq(seq)

    def _join_seq(self, seq: List[Fragment]) -> Fragment:
        joined: List[Fragment] = []
        for is_literal, group in groupby(seq, key=lambda fragment: fragment[1]):
            if is_literal:
                joined.append(("".join(text for text, _ in group), True))
            else:
                joined.extend(group)
        if len(joined) == 1:
            return joined[0]
        return " ".join(_to_rule(fragment) for fragment in joined), False

    def _check_repeatable(self, seq: List[Fragment]) -> None:
        if not seq or seq[-1] == ("|", False):
            raise self._error("Nothing to repeat")

    def _char_class(self, start: int) -> str:
        pattern = self.pattern
        square_brackets = "["
        self.i += 1
        while self.i < len(pattern) and pattern[self.i] != "]":
            if pattern[self.i] == "\\":
                square_brackets += pattern[self.i:self.i + 2]
                self.i += 2
            else:
                square_brackets += pattern[self.i]
                self.i += 1
        if self.i >= len(pattern):
            raise self._unbalanced("square brackets", start)
        self.i += 1
        return square_brackets + "]"

    def _curly_quantifier(self, start: int) -> Tuple[int, Optional[int]]:
        pattern = self.pattern
        self.i += 1
        body_start = self.i
        while self.i < len(pattern) and pattern[self.i] != "}":
            self.i += 1
        if self.i >= len(pattern):
            raise self._unbalanced("curly brackets", start)
        body = pattern[body_start:self.i]
        self.i += 1

        nums = [s.strip() for s in body.split(",")]
        try:
            if len(nums) == 1:
                min_times = int(nums[0])
                max_times = min_times
            elif len(nums) == 2:
                min_times = int(nums[0]) if nums[0] else 0
                max_times = int(nums[1]) if nums[1] else None
            else:
                raise ValueError(body)
        except ValueError:
            raise self._error(f"Invalid quantifier {{{body}}}") from None
        return min_times, max_times

    def _literal(self) -> str:
        """Consume a run of literal characters, stopping before a quantified one."""
        pattern = self.pattern
        length = len(pattern)
        literal = ""
        while self.i < length:
            c = pattern[self.i]
            if c == "\\":
                if self.i == length - 1:
                    raise self._error("Dangling escape")
                if pattern[self.i + 1] in SHORTHAND_CLASSES:
                    break
                text, consumed = self._escape()
                after = self.i + consumed
                if literal and after < length and pattern[after] in QUANTIFIER_CHARS:
                    break
                literal += text
                self.i = after
            elif c not in NON_LITERAL_SET and (
                self.i == length - 1
                or literal == ""
                or pattern[self.i + 1] == "."
                or pattern[self.i + 1] not in NON_LITERAL_SET
            ):
                literal += _LITERAL_CHAR_ESCAPES.get(c, c)
                self.i += 1
            elif c in "]}" and literal == "":
                # Stray closing bracket, literal as in Python's re.
                literal += c
                self.i += 1
            else:
                break
        return literal

    def _escape(self) -> Tuple[str, int]:
        """Grammar literal text for the escape at self.i and its length in the pattern."""
        nxt = self.pattern[self.i + 1]
        if nxt in ESCAPED_IN_REGEXPS_BUT_NOT_IN_LITERALS:
            return nxt, 2
        if nxt in HEX_ESCAPE_WIDTHS:
            width = HEX_ESCAPE_WIDTHS[nxt]
            digits = self.pattern[self.i + 2:self.i + 2 + width]
            if len(digits) != width or any(d not in string.hexdigits for d in digits):
                raise self._error(f'Invalid escape "\\{nxt}{digits}"')
            return f"\\{nxt}{digits}", 2 + width
        if nxt in "nrt":
            return "\\" + nxt, 2
        if nxt == "\\":
            return "\\\\", 2
        if nxt == '"':
            return '\\"', 2
        if nxt.isalnum():
            raise self._error(f'Unsupported pattern syntax "\\{nxt}"')
        return nxt, 2

"""
Rule table - the named productions of one grammar being compiled.

The table maps rule names to grammar bodies. Names are derived from schema
paths, so the table escapes them, deduplicates identical bodies registered
under the same name and disambiguates different bodies with a numeric suffix:

    table = RuleTable()
    table.add_rule("person-name", '"\\"" char* "\\"" space')   # -> "person-name"
    table.add_rule("person-name", '"\\"" char* "\\"" space')   # -> "person-name" (same body)
    table.add_rule("person-name", "integer")                   # -> "person-name0"

format_grammar() writes one `name ::= body` line per rule, sorted by name.
Rules are never removed once added.
"""

import logging
import re
from typing import Dict, List, Optional, Set

from schema_gbnf.schema.errors import CatalogError
from schema_gbnf.schema.primitives import SPACE_RULE, BuiltinRule, lookup_builtin

logger = logging.getLogger(__name__)

INVALID_RULE_CHARS_RE = re.compile(r"[^\dA-Za-z-]+")
GRAMMAR_LITERAL_ESCAPE_RE = re.compile(r'[\n\r"\\]')
GRAMMAR_LITERAL_ESCAPES = {"\r": "\\r", "\n": "\\n", '"': '\\"', "\\": "\\\\"}


def format_literal(literal: str) -> str:
    """Quote a string as a grammar literal, escaping quotes, backslashes and newlines."""
    escaped = GRAMMAR_LITERAL_ESCAPE_RE.sub(lambda m: GRAMMAR_LITERAL_ESCAPES[m.group(0)], literal)
    return f'"{escaped}"'


def build_repetition(
    item_rule: str,
    min_items: int,
    max_items: Optional[int],
    separator_rule: Optional[str] = None,
) -> str:
    """
    Build a grammar expression repeating `item_rule` between min and max times.

    Args:
        item_rule: Grammar expression for one item (a rule name or literal)
        min_items: Minimum number of items
        max_items: Maximum number of items (None = unbounded)
        separator_rule: Expression required between consecutive items

    Returns:
        str: Grammar expression; empty when max_items is 0

    Raises:
        ValueError: If min_items is greater than max_items

    Example:
        ```python
        build_repetition("item", 1, 3, separator_rule='"," space')
        # 'item ("," space item){0,2}'
        ```
    """
    if max_items is not None and min_items > max_items:
        raise ValueError(f"min_items {min_items} is greater than max_items {max_items}")
    if max_items == 0:
        return ""
    if min_items == 0 and max_items == 1:
        return f"{item_rule}?"

    if not separator_rule:
        if min_items == 1 and max_items is None:
            return f"{item_rule}+"
        if min_items == 0 and max_items is None:
            return f"{item_rule}*"
        return f"{item_rule}{{{min_items},{max_items if max_items is not None else ''}}}"

    rest = build_repetition(
        f"({separator_rule} {item_rule})",
        min_items - 1 if min_items > 0 else 0,
        max_items - 1 if max_items is not None else None,
    )
    result = f"{item_rule} {rest}".rstrip()
    return f"({result})?" if min_items == 0 else result


class RuleTable:
    """
    Named grammar productions for a single compilation.

    The table starts with the shared `space` rule. It is not thread-safe; use
    one table per compilation.
    """

    def __init__(self):
        self._rules: Dict[str, str] = {"space": SPACE_RULE}
        self._reserved: Set[str] = set()

    def __contains__(self, name: str) -> bool:
        return name in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def get(self, name: str) -> Optional[str]:
        return self._rules.get(name)

    def names(self) -> List[str]:
        """Rule names in output order."""
        return sorted(self._rules)

    def add_rule(self, name: str, body: str) -> str:
        """
        Register a rule and return the name it was stored under.

        The name is escaped to [0-9A-Za-z-]. If that name already holds the
        same body it is reused; if it holds a different body, name0, name1, ...
        are probed until a free slot or a slot with the same body is found.

        Args:
            name: Requested rule name
            body: Grammar body

        Returns:
            str: Actual rule name
        """
        esc_name = INVALID_RULE_CHARS_RE.sub("-", name)
        key = esc_name

        if esc_name in self._reserved:
            self._reserved.discard(esc_name)
            self._rules[esc_name] = body
            return esc_name

        if esc_name in self._rules:
            if self._rules[esc_name] == body:
                return key

            i = 0
            while not self._is_free(f"{esc_name}{i}", body):
                i += 1
            key = f"{esc_name}{i}"
            logger.debug(f"Rule name {esc_name!r} taken, using {key!r}")

        self._rules[key] = body
        return key

    def _is_free(self, name: str, body: Optional[str] = None) -> bool:
        if name in self._reserved:
            return False
        return name not in self._rules or self._rules[name] == body

    def reserve(self, name: str) -> str:
        """
        Claim an unused rule name before its body is known.

        The next add_rule() call with exactly the returned name stores its body
        there. Until then no other rule is given the name.

        Args:
            name: Requested rule name

        Returns:
            str: Claimed name, escaped and suffixed like add_rule() names
        """
        esc_name = INVALID_RULE_CHARS_RE.sub("-", name)
        key = esc_name
        i = 0
        while not self._is_free(key):
            key = f"{esc_name}{i}"
            i += 1
        self._reserved.add(key)
        return key

    def release(self, name: str) -> None:
        """Give back a name claimed with reserve() that was never filled."""
        self._reserved.discard(name)

    def add_primitive(self, name: str, rule: BuiltinRule) -> str:
        """
        Register a built-in rule under `name` plus its dependency closure.

        Args:
            name: Name to register the rule body under
            rule: Built-in rule

        Returns:
            str: Actual rule name

        Raises:
            CatalogError: If a dependency is not a known built-in rule, or its
                name is held by a different rule
        """
        actual = self.add_rule(name, rule.content)
        for dep in rule.deps:
            dep_rule = lookup_builtin(dep)
            existing = self._rules.get(dep)
            if existing is None:
                self.add_primitive(dep, dep_rule)
            elif existing != dep_rule.content:
                raise CatalogError(f"Rule {dep} is already defined with a different body")
        return actual

    def format_grammar(self) -> str:
        """Serialise every rule as `name ::= body`, one per line, sorted by name."""
        return "".join(f"{name} ::= {self._rules[name]}\n" for name in self.names())

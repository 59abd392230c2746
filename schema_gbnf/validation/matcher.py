"""
Grammar recogniser - decide whether a text belongs to a grammar's language.

GrammarMatcher evaluates a parsed grammar directly over the input: every node
maps a start offset to the set of offsets where a match of that node can end,
so ambiguity and backtracking come for free. Rule references are memoised per
(rule, offset). This is a development and testing aid for compiled grammars,
not a decoding engine.

Usage:
    ```python
    from schema_gbnf import compile_grammar
    from schema_gbnf.validation import check_sample

    grammar = compile_grammar({"type": "array", "items": {"type": "string"}, "maxItems": 2})
    check_sample(grammar, '["x","y"]').accepted      # True
    check_sample(grammar, '["x","y","z"]').accepted  # False
    ```
"""

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Set, Tuple, Union

from schema_gbnf.validation.grammar_parser import (
    Alternation,
    CharClass,
    Grammar,
    GrammarSyntaxError,
    Literal,
    Node,
    Repeat,
    RuleRef,
    Sequence,
    parse_grammar,
)

logger = logging.getLogger(__name__)

_EMPTY: FrozenSet[int] = frozenset()


@dataclass
class SampleCheckResult:
    """
    Outcome of checking one text against a grammar.

    Attributes:
        accepted: Whether the whole text is in the language of the start rule
        text: The text that was checked
        furthest_offset: Furthest offset any terminal matched up to; for a
            rejected text the error is at or right after this offset
    """

    accepted: bool
    text: str
    furthest_offset: int

    @property
    def context(self) -> str:
        """A short excerpt of the text around furthest_offset."""
        start = max(0, self.furthest_offset - 20)
        return self.text[start:self.furthest_offset + 20]


class GrammarMatcher:
    """
    Recogniser over a parsed GBNF grammar.

    Attributes:
        grammar: Rule name -> rule tree
    """

    def __init__(self, grammar: Union[str, Grammar]):
        self.grammar = parse_grammar(grammar) if isinstance(grammar, str) else grammar
        self._text = ""
        self._memo: Dict[Tuple[str, int], FrozenSet[int]] = {}
        self._furthest = 0

    def accepts(self, text: str, rule: str = "root") -> bool:
        """Return True if `text`, in full, matches `rule`."""
        return self.check(text, rule).accepted

    def check(self, text: str, rule: str = "root") -> SampleCheckResult:
        """
        Match `text` against `rule` and report how far matching got.

        Raises:
            GrammarSyntaxError: If `rule` is not defined
        """
        if rule not in self.grammar:
            raise GrammarSyntaxError(f"Undefined rule identifier {rule!r}")

        self._text = text
        self._memo = {}
        self._furthest = 0
        ends = self._match_rule(rule, 0)
        accepted = len(text) in ends
        logger.debug(f"Rule {rule!r} {'accepted' if accepted else 'rejected'} {len(text)} chars")
        return SampleCheckResult(
            accepted=accepted, text=text, furthest_offset=len(text) if accepted else self._furthest
        )

    def _match_rule(self, name: str, pos: int) -> FrozenSet[int]:
        key = (name, pos)
        if key in self._memo:
            return self._memo[key]
        # Placeholder stops left recursion from looping.
        self._memo[key] = _EMPTY
        result = self._match(self.grammar[name], pos)
        self._memo[key] = result
        return result

    def _terminal(self, pos: int, end: Optional[int]) -> FrozenSet[int]:
        if end is None:
            return _EMPTY
        self._furthest = max(self._furthest, end)
        return frozenset((end,))

    def _match(self, node: Node, pos: int) -> FrozenSet[int]:
        text = self._text
        if isinstance(node, Literal):
            return self._terminal(pos, pos + len(node.text) if text.startswith(node.text, pos) else None)
        if isinstance(node, CharClass):
            return self._terminal(pos, pos + 1 if pos < len(text) and node.matches(text[pos]) else None)
        if isinstance(node, RuleRef):
            return self._match_rule(node.name, pos)
        if isinstance(node, Sequence):
            positions: FrozenSet[int] = frozenset((pos,))
            for item in node.items:
                positions = frozenset().union(*(self._match(item, p) for p in positions))
                if not positions:
                    break
            return positions
        if isinstance(node, Alternation):
            return frozenset().union(*(self._match(alt, pos) for alt in node.alternatives))
        if isinstance(node, Repeat):
            return self._match_repeat(node, pos)
        raise TypeError(f"Unknown grammar node {node!r}")

    def _match_repeat(self, node: Repeat, pos: int) -> FrozenSet[int]:
        results: Set[int] = set()
        seen: Set[int] = set()
        current: Set[int] = {pos}
        if node.min_times == 0:
            results.add(pos)
            seen.add(pos)

        count = 0
        while current and (node.max_times is None or count < node.max_times):
            current = set().union(*(self._match(node.node, p) for p in current))
            count += 1
            if count >= node.min_times:
                # An offset first reached at a lower count dominates later ones.
                current -= seen
                seen |= current
                results |= current
        return frozenset(results)


def check_sample(grammar: Union[str, Grammar], text: str, rule: str = "root") -> SampleCheckResult:
    """
    Check one text against a grammar.

    Args:
        grammar: Grammar text or parsed grammar
        text: Candidate output, e.g. compact JSON
        rule: Start rule

    Returns:
        SampleCheckResult: Acceptance and diagnostics
    """
    return GrammarMatcher(grammar).check(text, rule)

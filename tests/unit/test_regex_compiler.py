"""
Unit tests for the regex pattern translator.
"""

import pytest
from schema_gbnf.schema.errors import PatternSyntaxError, UnbalancedPatternError
from schema_gbnf.schema.regex_compiler import translate_pattern
from schema_gbnf.schema.rules import RuleTable
from schema_gbnf.validation import GrammarMatcher


def pattern_matcher(pattern: str, dotall: bool = False) -> GrammarMatcher:
    rules = RuleTable()
    translate_pattern(pattern, "root", rules, dotall=dotall)
    return GrammarMatcher(rules.format_grammar())


class TestTranslation:
    """Test the generated rules."""

    def test_literal(self):
        """Test that literal runs are coalesced into one quoted string."""
        rules = RuleTable()
        name = translate_pattern("^abc$", "root", rules)

        assert name == "root"
        assert rules.get("root") == '"\\"" ("abc") "\\"" space'

    def test_bounded_repetition_hoists_sub_rule(self):
        """Test that a repeated non-literal becomes a named sub-rule."""
        rules = RuleTable()
        translate_pattern("^[a-z]+-[0-9]{3}$", "code", rules)

        assert rules.get("code") == '"\\"" ([a-z]+ "-" code-1{3,3}) "\\"" space'
        assert rules.get("code-1") == "[0-9]"

    def test_dot_rule(self):
        """Test that `.` excludes line terminators by default."""
        rules = RuleTable()
        translate_pattern("^a.c$", "root", rules)

        assert rules.get("dot") == "[^\\x0A\\x0D]"

    def test_dotall_rule(self):
        """Test that dotall mode lets `.` match any code point."""
        rules = RuleTable()
        translate_pattern("^.*$", "root", rules, dotall=True)

        assert "U00000000" in rules.get("dot")


class TestPatternLanguage:
    """Test which JSON strings a translated pattern accepts."""

    def test_character_classes_and_quantifiers(self):
        matcher = pattern_matcher("^[a-z]+-[0-9]{3}$")

        assert matcher.accepts('"abc-123"')
        assert not matcher.accepts('"abc-12"')
        assert not matcher.accepts('"-123"')
        assert not matcher.accepts("abc-123")

    def test_quantifier_applies_to_last_char(self):
        """Test that `ab*` repeats only the b."""
        matcher = pattern_matcher("^ab*c$")

        assert matcher.accepts('"ac"')
        assert matcher.accepts('"abbbc"')
        assert not matcher.accepts('"ababc"')

    def test_alternation_and_groups(self):
        matcher = pattern_matcher("^(cat|dog)s?$")

        for text in ['"cat"', '"dogs"']:
            assert matcher.accepts(text)
        assert not matcher.accepts('"cow"')
        assert not matcher.accepts('"cats?"')

    def test_curly_quantifier_forms(self):
        exact = pattern_matcher("^x{2}$")
        at_least = pattern_matcher("^x{2,}$")
        between = pattern_matcher("^(ab){1,2}$")

        assert exact.accepts('"xx"') and not exact.accepts('"xxx"')
        assert at_least.accepts('"xxxxx"') and not at_least.accepts('"x"')
        assert between.accepts('"abab"') and not between.accepts('"ababab"')

    def test_shorthand_classes(self):
        matcher = pattern_matcher("^\\d{3}-\\d{4}$")

        assert matcher.accepts('"555-1234"')
        assert not matcher.accepts('"555-12a4"')

        word = pattern_matcher("^\\w+\\s\\W$")
        assert word.accepts('"snake_case !"')
        assert not word.accepts('"snake-case !"')

    def test_escaped_punctuation(self):
        matcher = pattern_matcher("^v\\d+\\.\\d+$")

        assert matcher.accepts('"v1.20"')
        assert not matcher.accepts('"v1x20"')

    def test_hex_escape(self):
        matcher = pattern_matcher("^\\x41+$")

        assert matcher.accepts('"AAA"')
        assert not matcher.accepts('"B"')

    def test_dot(self):
        matcher = pattern_matcher("^a.c$")

        assert matcher.accepts('"abc"')
        assert matcher.accepts('"a c"')
        assert not matcher.accepts('"ac"')

    def test_stray_closing_bracket_is_literal(self):
        matcher = pattern_matcher("^a]$")

        assert matcher.accepts('"a]"')


class TestPatternErrors:
    """Test rejection of unsupported or malformed patterns."""

    @pytest.mark.parametrize("pattern", ["abc", "^abc", "abc$"])
    def test_requires_anchors(self, pattern):
        with pytest.raises(PatternSyntaxError, match='Pattern must start with "\\^" and end with "\\$"'):
            translate_pattern(pattern, "root", RuleTable())

    def test_lookahead_unsupported(self):
        with pytest.raises(PatternSyntaxError, match="Unsupported pattern syntax"):
            translate_pattern("^(?=a)a$", "root", RuleTable())

    def test_word_boundary_unsupported(self):
        with pytest.raises(PatternSyntaxError, match="Unsupported pattern syntax"):
            translate_pattern("^a\\b$", "root", RuleTable())

    def test_nothing_to_repeat(self):
        with pytest.raises(PatternSyntaxError, match="Nothing to repeat"):
            translate_pattern("^*a$", "root", RuleTable())

    def test_dangling_escape(self):
        with pytest.raises(PatternSyntaxError, match="Dangling escape"):
            translate_pattern("^a\\$", "root", RuleTable())

    @pytest.mark.parametrize("pattern", ["^(abc$", "^abc)$", "^[abc$", "^a{2$"])
    def test_unbalanced(self, pattern):
        with pytest.raises(UnbalancedPatternError, match="Unbalanced"):
            translate_pattern(pattern, "root", RuleTable())

    def test_error_carries_pattern_and_index(self):
        with pytest.raises(PatternSyntaxError) as exc_info:
            translate_pattern("^ab(?:c)$", "root", RuleTable())

        assert exc_info.value.pattern == "ab(?:c)"
        assert exc_info.value.index == 3

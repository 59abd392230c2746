"""
Unit tests for the GBNF reader and recogniser.
"""

import pytest
from schema_gbnf import compile_grammar
from schema_gbnf.validation import GrammarMatcher, GrammarSyntaxError, check_sample, parse_grammar
from schema_gbnf.validation.grammar_parser import (
    Alternation,
    CharClass,
    Literal,
    Repeat,
    RuleRef,
    Sequence,
)


class TestParseGrammar:
    """Test parsing of grammar text."""

    def test_rules_and_references(self):
        grammar = parse_grammar('root ::= "a" b*\nb ::= [0-9]\n')

        assert grammar["root"] == Sequence([Literal("a"), Repeat(RuleRef("b"), 0, None)])
        assert grammar["b"] == CharClass([(48, 57)], False)

    def test_escapes(self):
        grammar = parse_grammar(r'root ::= "\x41é\n\"" [^\\\]]')

        assert grammar["root"] == Sequence(
            [Literal('Aé\n"'), CharClass([(92, 92), (93, 93)], True)]
        )

    def test_repetition_forms(self):
        grammar = parse_grammar('root ::= "a"{2,3} "b"{2} "c"{1,} "d"?')

        assert grammar["root"] == Sequence(
            [
                Repeat(Literal("a"), 2, 3),
                Repeat(Literal("b"), 2, 2),
                Repeat(Literal("c"), 1, None),
                Repeat(Literal("d"), 0, 1),
            ]
        )

    def test_group_spans_lines(self):
        grammar = parse_grammar('root ::= (\n  "a"\n  | "b"\n)\n')

        assert grammar["root"] == Alternation([Literal("a"), Literal("b")])

    def test_empty_alternative(self):
        """Test that a leading `|` adds an empty alternative."""
        grammar = parse_grammar('root ::= | "x"\n')

        assert grammar["root"] == Alternation([Sequence([]), Literal("x")])

    def test_comments(self):
        grammar = parse_grammar('# header\nroot ::= "a" # trailing\nb ::= "b"\n')

        assert set(grammar) == {"root", "b"}

    def test_compiled_grammar_parses(self):
        schema = {"type": "object", "properties": {"when": {"type": "string", "format": "date-time"}}}

        grammar = parse_grammar(compile_grammar(schema))

        assert {"root", "space", "date", "time", "date-time"} <= set(grammar)


class TestParseErrors:
    """Test rejection of malformed grammars."""

    @pytest.mark.parametrize(
        "text,message",
        [
            ("root ::= missing\n", "Undefined rule identifier 'missing'"),
            ('a ::= "x"\na ::= "y"\n', "Duplicate rule 'a'"),
            ('root "a"\n', "Expected '::='"),
            ('root ::= "abc', "Unterminated literal"),
            ("root ::= [a-z", "Unterminated character class"),
            ('root ::= "a"{x}', "Invalid repetition"),
            ('root ::= "a"{2', "Unterminated '{'"),
            ('root ::= ("a"', "Expected '\\)'"),
            ('root ::= "\\xZZ"', "Invalid escape"),
        ],
    )
    def test_errors(self, text, message):
        with pytest.raises(GrammarSyntaxError, match=message):
            parse_grammar(text)

    def test_error_position(self):
        with pytest.raises(GrammarSyntaxError) as exc_info:
            parse_grammar('root ::= ("a"')

        assert exc_info.value.position == 9


class TestGrammarMatcher:
    """Test language membership."""

    def test_accepts_whole_text_only(self):
        matcher = GrammarMatcher('root ::= "a"+\n')

        assert matcher.accepts("aaa")
        assert not matcher.accepts("")
        assert not matcher.accepts("aab")

    def test_ambiguous_grammar(self):
        """Test that alternatives are explored without committing early."""
        matcher = GrammarMatcher('root ::= ("a" | "ab") "c"\n')

        assert matcher.accepts("ac")
        assert matcher.accepts("abc")

    def test_bounded_repetition(self):
        matcher = GrammarMatcher('root ::= [a-c]{2,3}\n')

        assert [matcher.accepts(t) for t in ["a", "ab", "abc", "abca"]] == [False, True, True, False]

    def test_negated_class(self):
        matcher = GrammarMatcher('root ::= [^"\\\\]*\n')

        assert matcher.accepts("plain text")
        assert not matcher.accepts('with "quote"')

    def test_recursive_rule(self):
        matcher = GrammarMatcher('root ::= "(" root ")" | "x"\n')

        assert matcher.accepts("((x))")
        assert not matcher.accepts("((x)")

    def test_left_recursion_terminates(self):
        matcher = GrammarMatcher('root ::= root "a" | "b"\n')

        assert matcher.accepts("b")

    def test_parsed_grammar_input(self):
        parsed = parse_grammar('root ::= "ok"\n')

        assert GrammarMatcher(parsed).accepts("ok")

    def test_undefined_start_rule(self):
        with pytest.raises(GrammarSyntaxError, match="Undefined rule identifier 'start'"):
            GrammarMatcher('root ::= "a"\n').check("a", rule="start")


class TestCheckSample:
    """Test diagnostics for rejected samples."""

    PERSON = {
        "type": "object",
        "properties": {"name": {"type": "string"}, "age": {"type": "integer"}},
        "required": ["name", "age"],
    }

    def test_accepted(self):
        text = '{"name":"Ada","age":36}'

        result = check_sample(compile_grammar(self.PERSON), text)

        assert result.accepted
        assert result.furthest_offset == len(text)

    def test_rejected_offset(self):
        """Test that the furthest offset points at the bad value."""
        text = '{"name":"Ada","age":"x"}'

        result = check_sample(compile_grammar(self.PERSON), text)

        assert not result.accepted
        assert result.furthest_offset == text.index('"x"')
        assert '"age":"x"' in result.context

    def test_start_rule(self):
        assert check_sample('root ::= a\na ::= "x"\n', "x", rule="a").accepted

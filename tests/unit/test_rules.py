"""
Unit tests for the rule table and primitive catalog.
"""

import pytest
from schema_gbnf.schema.errors import CatalogError
from schema_gbnf.schema.primitives import (
    PRIMITIVE_RULES,
    RESERVED_NAMES,
    SPACE_RULE,
    BuiltinRule,
    lookup_builtin,
)
from schema_gbnf.schema.rules import RuleTable, build_repetition, format_literal


class TestRuleTable:
    """Test rule registration and serialisation."""

    def test_starts_with_space_rule(self):
        """Test that a new table holds only the space rule."""
        table = RuleTable()

        assert len(table) == 1
        assert table.get("space") == SPACE_RULE

    def test_add_rule_returns_name(self):
        """Test registering a rule under a free name."""
        table = RuleTable()

        assert table.add_rule("person-name", "string") == "person-name"
        assert table.get("person-name") == "string"

    def test_same_body_is_deduplicated(self):
        """Test that re-registering an identical body reuses the name."""
        table = RuleTable()
        table.add_rule("item", '"a" space')

        assert table.add_rule("item", '"a" space') == "item"
        assert len(table) == 2

    def test_different_body_gets_numeric_suffix(self):
        """Test that name collisions probe name0, name1, ..."""
        table = RuleTable()

        assert table.add_rule("item", "string") == "item"
        assert table.add_rule("item", "integer") == "item0"
        assert table.add_rule("item", "boolean") == "item1"
        # Probing stops at a slot holding the same body
        assert table.add_rule("item", "integer") == "item0"

    def test_name_is_escaped(self):
        """Test that invalid characters collapse to a single dash."""
        table = RuleTable()

        assert table.add_rule("user name.first", "string") == "user-name-first"
        assert table.add_rule("a  $b", "string") == "a-b"
        assert table.add_rule("snake_case", "string") == "snake-case"

    def test_reserve_claims_a_free_name(self):
        """Test that a reserved name is filled by the next matching add_rule()."""
        table = RuleTable()
        table.add_rule("ref-defs-x-y", "string")

        name = table.reserve("ref-defs-x_y")

        assert name == "ref-defs-x-y0"
        assert "ref-defs-x-y0" not in table
        # other bodies requested under the base name skip the claimed slot
        assert table.add_rule("ref-defs-x-y", "integer") == "ref-defs-x-y1"
        assert table.add_rule("ref-defs-x-y0", "boolean") == "ref-defs-x-y0"
        assert table.get("ref-defs-x-y0") == "boolean"

    def test_release_frees_a_reserved_name(self):
        table = RuleTable()
        name = table.reserve("ref-defs-flag")

        table.release(name)

        assert table.reserve("ref-defs-flag") == "ref-defs-flag"

    def test_add_primitive_rejects_foreign_dependency(self):
        """Test that a dependency name holding another body is an error."""
        table = RuleTable()
        table.add_rule("integral-part", '"x"')

        with pytest.raises(CatalogError, match="integral-part"):
            table.add_primitive("number", PRIMITIVE_RULES["number"])

    def test_add_primitive_adds_dependencies(self):
        """Test that a primitive pulls in its dependency closure."""
        table = RuleTable()
        name = table.add_primitive("number", PRIMITIVE_RULES["number"])

        assert name == "number"
        assert "integral-part" in table
        assert "decimal-part" in table

    def test_add_primitive_transitive_dependencies(self):
        """Test that dependencies of dependencies are added."""
        table = RuleTable()
        table.add_primitive("value", PRIMITIVE_RULES["value"])

        for name in ["object", "array", "string", "char", "number", "integral-part", "boolean", "null"]:
            assert name in table, f"Missing dependency: {name}"

    def test_add_primitive_under_other_name(self):
        """Test registering a primitive body under a custom name."""
        table = RuleTable()
        name = table.add_primitive("root", PRIMITIVE_RULES["integer"])

        assert name == "root"
        assert table.get("root") == PRIMITIVE_RULES["integer"].content
        assert "integral-part" in table

    def test_unknown_dependency_is_catalog_error(self):
        """Test that a broken catalog entry is reported."""
        table = RuleTable()

        with pytest.raises(CatalogError, match="Rule missing-rule not known"):
            table.add_primitive("broken", BuiltinRule("missing-rule", ["missing-rule"]))

    def test_format_grammar_sorted(self):
        """Test that rules are serialised sorted by name."""
        table = RuleTable()
        table.add_rule("root", "b-rule a-rule")
        table.add_rule("b-rule", '"b"')
        table.add_rule("a-rule", '"a"')

        grammar = table.format_grammar()
        lines = grammar.splitlines()

        assert [line.split(" ::= ")[0] for line in lines] == ["a-rule", "b-rule", "root", "space"]
        assert lines[0] == 'a-rule ::= "a"'
        assert grammar.endswith("\n")


class TestBuildRepetition:
    """Test the bounded repetition builder."""

    def test_optional(self):
        assert build_repetition("item", 0, 1) == "item?"

    def test_one_or_more(self):
        assert build_repetition("item", 1, None) == "item+"

    def test_zero_or_more(self):
        assert build_repetition("item", 0, None) == "item*"

    def test_bounded(self):
        assert build_repetition("item", 2, 5) == "item{2,5}"

    def test_lower_bound_only(self):
        assert build_repetition("item", 3, None) == "item{3,}"

    def test_zero_max(self):
        assert build_repetition("item", 0, 0) == ""

    def test_separator_bounded(self):
        """Test separated repetition with both bounds."""
        assert build_repetition("item", 1, 3, '"," space') == 'item ("," space item){0,2}'

    def test_separator_optional_list(self):
        """Test that a separated list with no minimum is wrapped optionally."""
        assert build_repetition("item", 0, None, '"," space') == '(item ("," space item)*)?'

    def test_min_above_max(self):
        with pytest.raises(ValueError, match="greater than max_items"):
            build_repetition("item", 3, 1)

    def test_separator_exactly_one(self):
        """Test that a single separated item has no trailing group."""
        assert build_repetition("item", 1, 1, '"," space') == "item"


class TestPrimitives:
    """Test the built-in rule catalog."""

    def test_format_literal_escapes(self):
        """Test quoting of grammar literals."""
        assert format_literal('a"b\\c\n') == '"a\\"b\\\\c\\n"'
        assert format_literal("plain") == '"plain"'

    def test_lookup_builtin(self):
        """Test lookup across both catalogs."""
        assert lookup_builtin("boolean") is PRIMITIVE_RULES["boolean"]
        assert lookup_builtin("date-string").deps == ["date"]

        with pytest.raises(CatalogError):
            lookup_builtin("nope")

    def test_reserved_names(self):
        """Test that root, primitives and formats are reserved."""
        for name in ["root", "string", "value", "date-time", "time-string", "uuid"]:
            assert name in RESERVED_NAMES

    def test_catalog_dependencies_resolve(self):
        """Test that every declared dependency exists."""
        for rule in PRIMITIVE_RULES.values():
            for dep in rule.deps:
                lookup_builtin(dep)

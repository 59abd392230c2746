"""
End-to-end test: Person record with nested fields.

Compiles the person fixture and checks realistic model outputs against the
grammar, both compact and pretty-printed.
"""

import json
import pytest
from pathlib import Path

from schema_gbnf import compile_grammar
from schema_gbnf.validation import GrammarMatcher


# Load schema fixture
FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"
with open(FIXTURES_DIR / "schemas" / "person.json") as f:
    PERSON_SCHEMA = json.load(f)


@pytest.mark.e2e
class TestPersonRecord:
    """Test the person record grammar."""

    @pytest.fixture(scope="class")
    def matcher(self):
        """Compile the person schema once."""
        return GrammarMatcher(compile_grammar(PERSON_SCHEMA))

    def test_person_with_all_fields(self, matcher):
        """Test a person with nested address and hobbies."""
        # required keys come first, then optional keys in declaration order
        person = {
            "name": "Alice",
            "age": 28,
            "address": {"city": "NYC", "street": "5th Ave", "zipcode": "10001-1234"},
            "hobbies": ["reading", "hiking"],
        }

        assert matcher.accepts(json.dumps(person, separators=(",", ":")))
        assert matcher.accepts(json.dumps(person, indent=2))

    def test_person_minimal(self, matcher):
        """Test a person with required fields only."""
        assert matcher.accepts('{"name": "Charlie", "age": 42}')

    def test_optional_nested_fields(self, matcher):
        """Test that nested optional fields can be skipped."""
        assert matcher.accepts('{"name":"Bob","age":35,"address":{"city":"SF"}}')
        assert matcher.accepts('{"name":"Bob","age":35,"hobbies":[]}')

    @pytest.mark.parametrize(
        "text,reason",
        [
            ('{"name":"A","age":30}', "name too short (minLength: 2)"),
            ('{"name":"Methuselah","age":969}', "age out of range"),
            ('{"name":"Bob","age":-1}', "age below minimum"),
            ('{"name":"Bob","age":30.5}', "age must be an integer"),
            ('{"age":30,"name":"Bob"}', "properties out of order"),
            ('{"name":"Bob"}', "missing required field: age"),
            ('{"name":"Bob","age":35,"address":{"street":"Main"}}', "missing required field: city"),
            ('{"name":"Bob","age":35,"address":{"city":"SF","zipcode":"9410"}}', "zipcode pattern"),
            ('{"name":"Bob","age":35,"hobbies":[1]}', "hobbies must be strings"),
        ],
    )
    def test_invalid_records(self, matcher, text, reason):
        """Test that invalid records are outside the grammar."""
        assert not matcher.accepts(text), reason

    def test_hobbies_max_items(self, matcher):
        """Test the maxItems limit on hobbies."""
        hobbies = [f"h{i}" for i in range(11)]

        assert matcher.accepts(json.dumps({"name": "Bob", "age": 1, "hobbies": hobbies[:10]}))
        assert not matcher.accepts(json.dumps({"name": "Bob", "age": 1, "hobbies": hobbies}))

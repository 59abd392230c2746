"""
Unit tests for Pydantic model support.
"""

from typing import List, Optional

import pytest
from pydantic import BaseModel
from schema_gbnf import compile_grammar
from schema_gbnf.schema.pydantic_adapter import is_pydantic_model, pydantic_to_schema
from schema_gbnf.validation import GrammarMatcher


class Address(BaseModel):
    city: str


class User(BaseModel):
    name: str
    address: Address
    tags: List[str]
    nickname: Optional[str] = None


class TestPydanticAdapter:
    """Test model detection and conversion."""

    def test_is_pydantic_model(self):
        assert is_pydantic_model(User)
        assert not is_pydantic_model(User(name="a", address=Address(city="b"), tags=[]))
        assert not is_pydantic_model({"type": "object"})
        assert not is_pydantic_model(dict)

    def test_pydantic_to_schema(self):
        schema = pydantic_to_schema(User)

        assert schema["required"] == ["name", "address", "tags"]
        assert schema["properties"]["address"] == {"$ref": "#/$defs/Address"}
        assert "Address" in schema["$defs"]

    def test_rejects_non_model(self):
        with pytest.raises(ValueError, match="Expected a Pydantic BaseModel subclass"):
            pydantic_to_schema(dict)


class TestCompileModel:
    """Test compiling models end to end."""

    def test_nested_and_optional_fields(self):
        matcher = GrammarMatcher(compile_grammar(User))

        assert matcher.accepts('{"name":"Ada","address":{"city":"London"},"tags":[]}')
        assert matcher.accepts('{"name":"Ada","address":{"city":"London"},"tags":["x","y"],"nickname":null}')
        assert matcher.accepts('{"name":"Ada","address":{"city":"London"},"tags":["x"],"nickname":"A"}')
        assert not matcher.accepts('{"name":"Ada","tags":[]}')
        assert not matcher.accepts('{"name":"Ada","address":{},"tags":[]}')

    def test_nested_model_rule_name(self):
        grammar = compile_grammar(User)

        assert "ref-defs-Address ::= " in grammar

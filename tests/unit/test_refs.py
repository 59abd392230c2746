"""
Unit tests for local $ref resolution.
"""

import pytest
from schema_gbnf.schema.errors import BrokenRefError, UnsupportedRefError
from schema_gbnf.schema.refs import RefResolver, unescape_pointer_segment


class TestRefResolver:
    """Test resolution of JSON pointer references."""

    def test_resolves_defs(self):
        """Test resolving a $defs reference."""
        schema = {
            "type": "object",
            "properties": {"user": {"$ref": "#/$defs/user"}},
            "$defs": {"user": {"type": "string"}},
        }
        resolver = RefResolver()
        resolver.resolve_refs(schema)

        assert "#/$defs/user" in resolver
        assert resolver.resolve("#/$defs/user") is schema["$defs"]["user"]

    def test_resolves_root(self):
        """Test that '#' points at the whole document."""
        schema = {"type": "object", "properties": {"child": {"$ref": "#"}}}
        resolver = RefResolver()
        resolver.resolve_refs(schema)

        assert resolver.resolve("#") is schema

    def test_pointer_escapes(self):
        """Test ~1, ~0 and percent-encoded segments."""
        schema = {
            "$defs": {"a/b": {"type": "string"}, "c~d": {"type": "integer"}, "e f": {"type": "null"}},
            "anyOf": [
                {"$ref": "#/$defs/a~1b"},
                {"$ref": "#/$defs/c~0d"},
                {"$ref": "#/$defs/e%20f"},
            ],
        }
        resolver = RefResolver()
        resolver.resolve_refs(schema)

        assert resolver.resolve("#/$defs/a~1b") == {"type": "string"}
        assert resolver.resolve("#/$defs/c~0d") == {"type": "integer"}
        assert resolver.resolve("#/$defs/e%20f") == {"type": "null"}

    def test_array_index(self):
        """Test that numeric segments index into arrays."""
        schema = {
            "prefixItems": [{"type": "string"}, {"type": "integer"}],
            "items": {"$ref": "#/prefixItems/1"},
        }
        resolver = RefResolver()
        resolver.resolve_refs(schema)

        assert resolver.resolve("#/prefixItems/1") == {"type": "integer"}

    def test_nested_refs_are_found(self):
        """Test refs inside lists and next to other refs."""
        schema = {
            "$defs": {
                "a": {"$ref": "#/$defs/b"},
                "b": {"type": "array", "items": [{"$ref": "#/$defs/c"}]},
                "c": {"type": "boolean"},
            },
            "$ref": "#/$defs/a",
        }
        resolver = RefResolver()
        resolver.resolve_refs(schema)

        assert {"#/$defs/a", "#/$defs/b", "#/$defs/c"} <= set(resolver.refs)

    def test_url_prefix_rewrites_refs(self):
        """Test that refs are rewritten to their fully qualified key."""
        schema = {"properties": {"x": {"$ref": "#/$defs/x"}}, "$defs": {"x": {"type": "string"}}}
        resolver = RefResolver()
        resolver.resolve_refs(schema, url="schema.json")

        assert schema["properties"]["x"]["$ref"] == "schema.json#/$defs/x"
        assert resolver.resolve("schema.json#/$defs/x") == {"type": "string"}

    def test_cycles_resolve(self):
        """Test that a self-referential schema resolves in one pass."""
        schema = {
            "$defs": {
                "node": {
                    "type": "object",
                    "properties": {"next": {"$ref": "#/$defs/node"}},
                }
            },
            "$ref": "#/$defs/node",
        }
        resolver = RefResolver()
        resolver.resolve_refs(schema)

        assert resolver.resolve("#/$defs/node") is schema["$defs"]["node"]


class TestRefErrors:
    """Test rejection of unsupported and broken references."""

    @pytest.mark.parametrize("ref", ["https://example.com/schema.json", "http://example.com/s.json#/a"])
    def test_remote_refs_rejected(self, ref):
        with pytest.raises(UnsupportedRefError, match="Fetching remote schemas is not supported"):
            RefResolver().resolve_refs({"$ref": ref})

    @pytest.mark.parametrize("ref", ["other.json#/a", "#foo", "definitions/a"])
    def test_other_forms_rejected(self, ref):
        with pytest.raises(UnsupportedRefError, match="Unsupported ref") as exc_info:
            RefResolver().resolve_refs({"$ref": ref})

        assert exc_info.value.ref == ref

    def test_missing_segment(self):
        """Test that a missing path segment names the segment and the node."""
        schema = {"$defs": {"a": {"type": "string"}}, "$ref": "#/$defs/missing"}

        with pytest.raises(BrokenRefError) as exc_info:
            RefResolver().resolve_refs(schema)

        message = str(exc_info.value)
        assert message.startswith("Error resolving ref #/$defs/missing: missing not in ")
        assert '{"a":{"type":"string"}}' in message
        assert exc_info.value.segment == "missing"

    def test_index_out_of_range(self):
        schema = {"prefixItems": [{"type": "string"}], "items": {"$ref": "#/prefixItems/3"}}

        with pytest.raises(BrokenRefError):
            RefResolver().resolve_refs(schema)

    def test_unresolved_lookup(self):
        with pytest.raises(UnsupportedRefError, match="Unresolved ref"):
            RefResolver().resolve("#/$defs/never")

    def test_unescape_pointer_segment(self):
        assert unescape_pointer_segment("a~1b~0c") == "a/b~c"
        assert unescape_pointer_segment("%24defs") == "$defs"

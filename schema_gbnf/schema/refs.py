"""
Local `$ref` resolution.

RefResolver walks a schema once before it is visited, rewrites every `$ref`
to its fully qualified key (`url + ref`) and records the subtree each key
points at. Only local JSON pointers are supported:

    "#"                  the document root
    "#/$defs/node"       a path through the document
    "#/items/0"          numeric segments index into arrays
    "#/$defs/a~1b"       `~1` -> `/`, `~0` -> `~`, percent-escapes decoded

Remote references (http:// or https://) and any other form are rejected.
Resolution only records targets; it never follows a reference into its
target, so cyclic schemas resolve in one pass.
"""

import logging
from typing import Any, Dict, Set
from urllib.parse import unquote

from schema_gbnf.schema.errors import BrokenRefError, UnsupportedRefError

logger = logging.getLogger(__name__)

REMOTE_PREFIXES = ("http://", "https://")


def unescape_pointer_segment(segment: str) -> str:
    """Decode one JSON pointer segment taken from a URI fragment."""
    return unquote(segment).replace("~1", "/").replace("~0", "~")


class RefResolver:
    """
    Memo of resolved `$ref` targets for one compilation.

    Attributes:
        refs: Fully qualified ref -> target subtree
        rule_names: Fully qualified ref -> name of the rule emitted for it
        being_resolved: Refs whose target is currently being visited; a ref met
            again while in this set closes a reference cycle
    """

    def __init__(self):
        self.refs: Dict[str, Any] = {}
        self.rule_names: Dict[str, str] = {}
        self.being_resolved: Set[str] = set()

    def __contains__(self, ref: str) -> bool:
        return ref in self.refs

    def resolve(self, ref: str) -> Any:
        """
        Return the subtree a resolved ref points at.

        Raises:
            UnsupportedRefError: If the ref was not seen by resolve_refs()
        """
        try:
            return self.refs[ref]
        except KeyError:
            raise UnsupportedRefError(f"Unresolved ref {ref}", ref) from None

    def resolve_refs(self, schema: Any, url: str = "") -> None:
        """
        Resolve every `$ref` in `schema`, rewriting each to its full key in place.

        Args:
            schema: Schema document; must be the same object that is visited later
            url: Base URL prefixed to local refs to build their keys

        Raises:
            UnsupportedRefError: For remote or non-pointer refs
            BrokenRefError: If a pointer segment does not exist
        """
        self._walk(schema, schema, url)
        logger.debug(f"Resolved {len(self.refs)} ref(s)")

    def _walk(self, node: Any, root: Any, url: str) -> None:
        if isinstance(node, list):
            for item in node:
                self._walk(item, root, url)
            return
        if not isinstance(node, dict):
            return

        ref = node.get("$ref")
        if isinstance(ref, str) and ref not in self.refs:
            full_ref = self._resolve_one(ref, root, url)
            node["$ref"] = full_ref

        for key, value in node.items():
            if key != "$ref":
                self._walk(value, root, url)

    def _resolve_one(self, ref: str, root: Any, url: str) -> str:
        if ref.startswith(REMOTE_PREFIXES):
            raise UnsupportedRefError(
                f"Fetching remote schemas is not supported: {ref}", ref
            )
        if ref != "#" and not ref.startswith("#/"):
            raise UnsupportedRefError(f"Unsupported ref {ref}", ref)

        full_ref = f"{url}{ref}"
        if full_ref in self.refs:
            return full_ref

        target = root
        for raw in ref.split("/")[1:]:
            segment = unescape_pointer_segment(raw)
            if isinstance(target, dict) and segment in target:
                target = target[segment]
            elif isinstance(target, list) and segment.isdigit() and int(segment) < len(target):
                target = target[int(segment)]
            else:
                raise BrokenRefError(ref, segment, target)

        self.refs[full_ref] = target
        logger.debug(f"Resolved ref {full_ref}")
        return full_ref

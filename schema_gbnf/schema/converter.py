"""
Schema visitor - turn a resolved JSON Schema into grammar rules.

SchemaConverter owns the state of one compilation: the RuleTable receiving
rules and the RefResolver memo. visit() classifies a schema node with
classify_schema() and dispatches to one builder per SchemaShape; builders
recurse into sub-schemas and register their result under a name derived from
the caller's name hint.

Naming:
    - the top-level node is "root"; a hint whose escaped form is a reserved
      name gets a trailing "-"
    - properties:   <parent>-<prop>, key/value pairs <parent>-<prop>-kv
    - union arms:   <parent>-<i> (alternative-<i> at the top level)
    - array items:  <parent>-item, tuple items <parent>-tuple-<i>
    - ref targets:  ref<fragment with non-alphanumerics replaced by ->, with a
                    numeric suffix when two refs escape to the same name

Example:
    ```python
    converter = SchemaConverter(CompilerOptions(prop_order={"name": 0}))
    converter.resolve_refs(schema)
    converter.visit(schema, "")
    grammar = converter.format_grammar()
    ```
"""

import logging
import math
import re
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from schema_gbnf.schema.errors import UnrecognizedSchemaError
from schema_gbnf.schema.exclusion import not_strings
from schema_gbnf.schema.int_range import generate_int_range
from schema_gbnf.schema.primitives import (
    PRIMITIVE_RULES,
    RESERVED_NAMES,
    STRING_FORMAT_RULES,
)
from schema_gbnf.schema.refs import RefResolver
from schema_gbnf.schema.regex_compiler import translate_pattern
from schema_gbnf.schema.rules import (
    INVALID_RULE_CHARS_RE,
    RuleTable,
    build_repetition,
    format_literal,
)
from schema_gbnf.schema.types import CompilerOptions, SchemaShape, classify_schema
from schema_gbnf.utils.json_utils import to_json

logger = logging.getLogger(__name__)

REF_NAME_RE = re.compile(r"[^a-zA-Z0-9-]+")

# (label used for rest-rule names, key/value rule name, may repeat)
_ObjectEntry = Tuple[str, str, bool]


def _sub_name(name: str, suffix: str) -> str:
    return f"{name}-{suffix}" if name else suffix


def _constant(value: Any) -> str:
    return format_literal(to_json(value))


class SchemaConverter:
    """
    Recursive visitor producing one grammar from one schema.

    A converter is single-use and not thread-safe: create one per schema.

    Attributes:
        options: Compiler options
        rules: Rule table being filled
        resolver: `$ref` memo for this schema
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()
        self.rules = RuleTable()
        self.resolver = RefResolver()
        self._builders: Dict[SchemaShape, Callable[[Dict[str, Any], str, str], str]] = {
            SchemaShape.REF: self._visit_ref,
            SchemaShape.UNION: self._visit_union,
            SchemaShape.TYPE_UNION: self._visit_type_union,
            SchemaShape.CONST: self._visit_const,
            SchemaShape.ENUM: self._visit_enum,
            SchemaShape.OBJECT: self._visit_object,
            SchemaShape.ALL_OF: self._visit_all_of,
            SchemaShape.TUPLE: self._visit_tuple,
            SchemaShape.ARRAY: self._visit_array,
            SchemaShape.PATTERN: self._visit_pattern,
            SchemaShape.UUID: self._visit_uuid,
            SchemaShape.FORMAT_STRING: self._visit_format_string,
            SchemaShape.BOUNDED_STRING: self._visit_bounded_string,
            SchemaShape.INT_RANGE: self._visit_int_range,
            SchemaShape.GENERIC_OBJECT: self._visit_generic_object,
            SchemaShape.PRIMITIVE: self._visit_primitive,
        }

    def resolve_refs(self, schema: Dict[str, Any], url: str = "") -> None:
        """Resolve all `$ref`s in `schema`; call once, before visit()."""
        self.resolver.resolve_refs(schema, url)

    def format_grammar(self) -> str:
        """Serialise the rules collected so far."""
        return self.rules.format_grammar()

    def visit(self, schema: Any, name: str = "") -> str:
        """
        Emit rules for a schema node and return the name of its rule.

        Args:
            schema: Schema node
            name: Rule name hint; "" for the top-level node

        Returns:
            str: Name of the rule matching the node

        Raises:
            UnrecognizedSchemaError: If no strategy applies to the node
        """
        if not isinstance(schema, dict):
            raise UnrecognizedSchemaError(schema)

        # compare the escaped form, which is what the rule table stores
        esc_name = INVALID_RULE_CHARS_RE.sub("-", name)
        if esc_name in RESERVED_NAMES:
            rule_name = f"{esc_name}-"
        else:
            rule_name = name or "root"

        shape = classify_schema(schema)
        logger.debug(f"Visiting {rule_name!r} as {shape.value}")
        builder = self._builders.get(shape)
        if builder is None:
            raise UnrecognizedSchemaError(schema)
        return builder(schema, name, rule_name)

    def _add_primitive(self, name: str, builtin_name: str) -> str:
        return self.rules.add_primitive(name, PRIMITIVE_RULES[builtin_name])

    def _visit_ref(self, schema: Dict[str, Any], name: str, rule_name: str) -> str:
        ref = schema["$ref"]
        resolver = self.resolver
        ref_name = resolver.rule_names.get(ref)
        if ref_name is None:
            target = resolver.resolve(ref)
            # claimed before recursing so cyclic refs can point at it
            ref_name = self.rules.reserve("ref" + REF_NAME_RE.sub("-", ref.split("#")[-1]))
            resolver.rule_names[ref] = ref_name
            resolver.being_resolved.add(ref)
            try:
                target_name = self.visit(target, ref_name)
            finally:
                resolver.being_resolved.discard(ref)
            if target_name != ref_name:
                # the target reused a built-in rule such as `boolean`
                self.rules.release(ref_name)
                resolver.rule_names[ref] = target_name
                ref_name = target_name
        elif ref in resolver.being_resolved:
            logger.debug(f"Cyclic ref {ref} refers to rule {ref_name!r}")
        return self.rules.add_rule(rule_name, ref_name)

    def _repetition(
        self,
        schema: Dict[str, Any],
        item_rule: str,
        min_key: str,
        max_key: str,
        separator_rule: Optional[str] = None,
    ) -> str:
        try:
            return build_repetition(
                item_rule, schema.get(min_key) or 0, schema.get(max_key), separator_rule
            )
        except ValueError as e:
            raise UnrecognizedSchemaError(
                schema, f"Unsatisfiable {min_key}/{max_key} in schema {to_json(schema)}: {e}"
            ) from e

    def _union(self, name: str, alternatives: List[Any]) -> str:
        return " | ".join(
            self.visit(alt, f"{name}-{i}" if name else f"alternative-{i}")
            for i, alt in enumerate(alternatives)
        )

    def _visit_union(self, schema: Dict[str, Any], name: str, rule_name: str) -> str:
        alternatives = schema.get("oneOf")
        if alternatives is None:
            alternatives = schema["anyOf"]
        return self.rules.add_rule(rule_name, self._union(name, alternatives))

    def _visit_type_union(self, schema: Dict[str, Any], name: str, rule_name: str) -> str:
        alternatives = [{**schema, "type": t} for t in schema["type"]]
        return self.rules.add_rule(rule_name, self._union(name, alternatives))

    def _visit_const(self, schema: Dict[str, Any], name: str, rule_name: str) -> str:
        return self.rules.add_rule(rule_name, f"{_constant(schema['const'])} space")

    def _visit_enum(self, schema: Dict[str, Any], name: str, rule_name: str) -> str:
        values = " | ".join(_constant(v) for v in schema["enum"])
        return self.rules.add_rule(rule_name, f"({values}) space")

    def _visit_object(self, schema: Dict[str, Any], name: str, rule_name: str) -> str:
        properties = list((schema.get("properties") or {}).items())
        required = set(schema.get("required") or [])
        body = self._build_object_rule(
            properties, required, name, schema.get("additionalProperties")
        )
        return self.rules.add_rule(rule_name, body)

    def _visit_all_of(self, schema: Dict[str, Any], name: str, rule_name: str) -> str:
        required: Set[str] = set()
        properties: List[Tuple[str, Any]] = []
        enum_sets: List[Dict[str, Any]] = []

        def add_component(component: Dict[str, Any], is_required: bool) -> None:
            if "$ref" in component:
                component = self.resolver.resolve(component["$ref"])
            for prop_name, prop_schema in (component.get("properties") or {}).items():
                properties.append((prop_name, prop_schema))
                if is_required:
                    required.add(prop_name)
            if "enum" in component:
                # keyed by serialisation: enum values may be unhashable
                enum_sets.append({to_json(v): v for v in component["enum"]})

        for branch in schema["allOf"]:
            if "anyOf" in branch:
                for alternative in branch["anyOf"]:
                    add_component(alternative, False)
            else:
                add_component(branch, True)

        if enum_sets:
            common = [key for key in enum_sets[0] if all(key in s for s in enum_sets[1:])]
            if common:
                values = " | ".join(format_literal(key) for key in sorted(common))
                return self.rules.add_rule(rule_name, f"({values}) space")

        return self.rules.add_rule(
            rule_name, self._build_object_rule(properties, required, name, None)
        )

    def _visit_tuple(self, schema: Dict[str, Any], name: str, rule_name: str) -> str:
        items = schema.get("prefixItems")
        if not isinstance(items, list):
            items = schema["items"]
        item_rules = [
            self.visit(item, _sub_name(name, f"tuple-{i}")) for i, item in enumerate(items)
        ]
        return self.rules.add_rule(
            rule_name, '"[" space ' + ' "," space '.join(item_rules) + ' "]" space'
        )

    def _visit_array(self, schema: Dict[str, Any], name: str, rule_name: str) -> str:
        items = schema["items"]
        if items is False:
            return self.rules.add_rule(rule_name, '"[" space "]" space')
        if items is True or items == {}:
            item_rule = self._add_primitive("value", "value")
        else:
            item_rule = self.visit(items, _sub_name(name, "item"))
        repetition = self._repetition(
            schema, item_rule, "minItems", "maxItems", separator_rule='"," space'
        )
        return self.rules.add_rule(rule_name, f'"[" space {repetition} "]" space')

    def _visit_pattern(self, schema: Dict[str, Any], name: str, rule_name: str) -> str:
        return translate_pattern(schema["pattern"], rule_name, self.rules, self.options.dotall)

    def _visit_uuid(self, schema: Dict[str, Any], name: str, rule_name: str) -> str:
        return self._add_primitive("root" if rule_name == "root" else schema["format"], "uuid")

    def _visit_format_string(self, schema: Dict[str, Any], name: str, rule_name: str) -> str:
        prim_name = f"{schema['format']}-string"
        prim = self.rules.add_primitive(prim_name, STRING_FORMAT_RULES[prim_name])
        return self.rules.add_rule(rule_name, prim)

    def _visit_bounded_string(self, schema: Dict[str, Any], name: str, rule_name: str) -> str:
        char_rule = self._add_primitive("char", "char")
        repetition = self._repetition(schema, char_rule, "minLength", "maxLength")
        return self.rules.add_rule(rule_name, f'"\\"" {repetition} "\\"" space')

    def _visit_int_range(self, schema: Dict[str, Any], name: str, rule_name: str) -> str:
        lower: List[int] = []
        upper: List[int] = []
        for key in ("minimum", "exclusiveMinimum", "maximum", "exclusiveMaximum"):
            if key not in schema:
                continue
            value = schema[key]
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise UnrecognizedSchemaError(
                    schema, f"Invalid {key} {to_json(value)} in schema: {to_json(schema)}"
                )
            if key == "minimum":
                lower.append(math.ceil(value))
            elif key == "exclusiveMinimum":
                lower.append(math.floor(value) + 1)
            elif key == "maximum":
                upper.append(math.floor(value))
            else:
                upper.append(math.ceil(value) - 1)

        min_value = max(lower) if lower else None
        max_value = min(upper) if upper else None
        try:
            expression = generate_int_range(min_value, max_value, self.options.max_int_digits)
        except ValueError as e:
            raise UnrecognizedSchemaError(
                schema, f"Unsatisfiable integer bounds in schema {to_json(schema)}: {e}"
            ) from e
        return self.rules.add_rule(rule_name, f"({expression}) space")

    def _visit_generic_object(self, schema: Dict[str, Any], name: str, rule_name: str) -> str:
        return self.rules.add_rule(rule_name, self._add_primitive("object", "object"))

    def _visit_primitive(self, schema: Dict[str, Any], name: str, rule_name: str) -> str:
        schema_type = schema["type"]
        return self._add_primitive("root" if rule_name == "root" else schema_type, schema_type)

    def _build_object_rule(
        self,
        properties: List[Tuple[str, Any]],
        required: Set[str],
        name: str,
        additional_properties: Any,
    ) -> str:
        """
        Build the body of an object rule.

        Required properties form a fixed comma-separated prefix. Optional
        properties follow in order, each one optional; this is expressed with
        one `<key>-rest` rule per optional key matching "any ordered subset of
        the keys after it". Additional properties, when allowed, behave as a
        final optional key that may repeat.

        Args:
            properties: (name, schema) pairs in declaration order
            required: Names of required properties
            name: Name hint of the object
            additional_properties: The `additionalProperties` value, if any

        Returns:
            str: Grammar body
        """
        prop_order = self.options.prop_order
        first_index: Dict[str, int] = {}
        for i, (prop_name, _) in enumerate(properties):
            first_index.setdefault(prop_name, i)
        sorted_props = sorted(
            first_index,
            key=lambda k: (prop_order.get(k, math.inf), first_index[k]),
        )

        kv_rules: Dict[str, str] = {}
        for prop_name, prop_schema in properties:
            prop_rule = self.visit(prop_schema, _sub_name(name, prop_name))
            kv_rules[prop_name] = self.rules.add_rule(
                _sub_name(name, f"{prop_name}-kv"),
                f'{_constant(prop_name)} space ":" space {prop_rule}',
            )

        required_props = [k for k in sorted_props if k in required]
        optional: List[_ObjectEntry] = [
            (k, kv_rules[k], False) for k in sorted_props if k not in required
        ]

        if additional_properties is True or isinstance(additional_properties, dict):
            sub_name = _sub_name(name, "additional")
            if isinstance(additional_properties, dict) and additional_properties:
                value_rule = self.visit(additional_properties, f"{sub_name}-value")
            else:
                value_rule = self._add_primitive("value", "value")
            if sorted_props:
                key_rule = self.rules.add_rule(
                    f"{sub_name}-k", not_strings(sorted_props, self.rules)
                )
            else:
                key_rule = self._add_primitive("string", "string")
            kv_rule = self.rules.add_rule(f"{sub_name}-kv", f'{key_rule} ":" space {value_rule}')
            optional.append(("*", kv_rule, True))

        def recursive_refs(entries: List[_ObjectEntry], first_is_optional: bool) -> str:
            (key, kv_rule, repeatable), rest = entries[0], entries[1:]
            comma_ref = f'( "," space {kv_rule} )'
            if first_is_optional:
                res = comma_ref + ("*" if repeatable else "?")
            else:
                res = kv_rule + (f" {comma_ref}*" if repeatable else "")
            if rest:
                rest_rule = self.rules.add_rule(
                    _sub_name(name, f"{key}-rest"), recursive_refs(rest, True)
                )
                res += f" {rest_rule}"
            return res

        rule = '"{" space '
        rule += ' "," space '.join(kv_rules[k] for k in required_props)
        if optional:
            rule += " ("
            if required_props:
                rule += ' "," space ( '
            rule += " | ".join(recursive_refs(optional[i:], False) for i in range(len(optional)))
            if required_props:
                rule += " )"
            rule += " )?"
        rule += ' "}" space'
        return rule

"""Whole-form validation for formstate.

This module turns a FormSchema (field name -> rule or ordered list of rules)
into a single whole-form validator ``validate(values) -> FormErrors``, and can
derive a FormSchema from a flat JSON Schema definition.

Only fields named in the schema are checked. Each field reports at most one
message: the first failing rule in its declaration order. Fields are visited in
the schema's key order and every field is checked, so a values mapping that
holds only some fields still yields results for all schema fields (absent
values are validated as None).
"""

import logging
from typing import Any, Dict, List, Mapping, Tuple

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError as JSONSchemaError

from formstate import rules
from formstate.errors import SchemaError
from formstate.types import FieldSchema, FormErrors, FormSchema, FormValidator, ValidationRule

logger = logging.getLogger(__name__)


def _field_rules(entry: FieldSchema) -> Tuple[ValidationRule, ...]:
    """Normalize a FieldSchema entry into a tuple of rules.

    Raises:
        TypeError: If the entry is neither a rule nor a list/tuple of rules
    """
    if isinstance(entry, (list, tuple)):
        if not all(callable(rule) for rule in entry):
            raise TypeError("field rule sequence contains a non-callable entry")
        return tuple(entry)
    if callable(entry):
        return (entry,)
    raise TypeError(f"expected a rule or a list of rules, got {type(entry).__name__}")


def create_validator(schema: FormSchema, strict: bool = False) -> FormValidator:
    """Build a whole-form validator from a FormSchema.

    Args:
        schema: Mapping of field name to a rule or an ordered list of rules
        strict: Raise SchemaError for malformed entries instead of ignoring them

    Returns:
        A function mapping form values to a FormErrors dict holding only the
        failing fields

    Raises:
        SchemaError: If ``strict`` is set and an entry is malformed

    Examples:
        >>> from formstate.rules import compose, email, required
        >>> validate = create_validator({"name": required, "email": compose(required, email)})
        >>> validate({"name": "", "email": "x"})
        {'name': 'This field is required', 'email': 'Please enter a valid email address'}
        >>> validate({"name": "Ada", "email": "ada@example.com"})
        {}
    """
    compiled: List[Tuple[str, Tuple[ValidationRule, ...]]] = []
    for name, entry in schema.items():
        try:
            compiled.append((name, _field_rules(entry)))
        except TypeError as exc:
            if strict:
                raise SchemaError(
                    f"Invalid schema entry for field '{name}': {exc}",
                    field=name,
                    entry=entry,
                ) from exc
            logger.warning("Ignoring invalid schema entry for field %r: %s", name, exc)

    def validate(values: Mapping[str, Any]) -> FormErrors:
        errors: FormErrors = {}
        for name, field_rules in compiled:
            value = values.get(name)
            for rule in field_rules:
                error = rule(value)
                if error:
                    errors[name] = error
                    break
        return errors

    return validate


def schema_from_json_schema(json_schema: Mapping[str, Any]) -> FormSchema:
    """Derive a FormSchema from a flat JSON Schema object definition.

    Keywords map to rules in this order: ``required`` -> required,
    ``type`` number/integer -> number, ``format`` email -> email,
    ``format`` date/date-time -> date, ``minLength``/``maxLength`` ->
    min_length/max_length, ``minimum``/``maximum`` -> min_value/max_value,
    ``const`` -> matches. Properties without any mapped keyword are left out;
    required names without a property definition only get ``required``.

    Args:
        json_schema: A Draft 7 JSON Schema with top-level ``properties``

    Returns:
        A FormSchema suitable for ``create_validator``

    Raises:
        SchemaError: If the JSON Schema itself is invalid

    Examples:
        >>> schema = schema_from_json_schema({
        ...     "type": "object",
        ...     "properties": {"email": {"type": "string", "format": "email"}},
        ...     "required": ["email"],
        ... })
        >>> validate = create_validator(schema)
        >>> validate({"email": "nope"})
        {'email': 'Please enter a valid email address'}
    """
    try:
        Draft7Validator.check_schema(json_schema)
    except JSONSchemaError as exc:
        raise SchemaError(f"Invalid JSON Schema: {exc.message}", entry=json_schema) from exc

    required_fields = set(json_schema.get("required", []))
    form_schema: Dict[str, List[ValidationRule]] = {}

    for name, prop in json_schema.get("properties", {}).items():
        # Boolean subschemas carry no keywords; required is added below.
        if not isinstance(prop, Mapping):
            continue
        field_rules: List[ValidationRule] = []
        if name in required_fields:
            field_rules.append(rules.required)

        types = prop.get("type", [])
        if isinstance(types, str):
            types = [types]
        if "number" in types or "integer" in types:
            field_rules.append(rules.number)

        fmt = prop.get("format")
        if fmt == "email":
            field_rules.append(rules.email)
        elif fmt in ("date", "date-time"):
            field_rules.append(rules.date)

        if "minLength" in prop:
            field_rules.append(rules.min_length(prop["minLength"]))
        if "maxLength" in prop:
            field_rules.append(rules.max_length(prop["maxLength"]))
        if "minimum" in prop:
            field_rules.append(rules.min_value(prop["minimum"]))
        if "maximum" in prop:
            field_rules.append(rules.max_value(prop["maximum"]))
        if "const" in prop:
            field_rules.append(rules.matches(prop["const"], repr(prop["const"])))

        if field_rules:
            form_schema[name] = field_rules

    for name in json_schema.get("required", []):
        form_schema.setdefault(name, [rules.required])

    return form_schema


__all__ = [
    "create_validator",
    "schema_from_json_schema",
]

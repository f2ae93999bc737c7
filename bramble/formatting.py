"""Rendering of selection sets and argument values back into query text."""

from __future__ import annotations

import json
import re
from typing import Any, Mapping, Optional, Sequence

from bramble.ast import (
    Argument,
    Definition,
    DefinitionKind,
    Field,
    FragmentSpread,
    InlineFragment,
    Schema,
    Value,
    ValueKind,
)

_INDENT = "    "
_WHITESPACE = re.compile(r"[\t\n\f\r ]+")

_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    "\\": "\\\\",
    '"': '\\"',
}


def _quote(text: str) -> str:
    parts = ['"']
    for char in text:
        if char in _ESCAPES:
            parts.append(_ESCAPES[char])
        elif char.isprintable():
            parts.append(char)
        else:
            code = ord(char)
            if code < 0x80:
                parts.append(f"\\x{code:02x}")
            elif code <= 0xFFFF:
                parts.append(f"\\u{code:04x}")
            else:
                parts.append(f"\\U{code:08x}")
    parts.append('"')
    return "".join(parts)


def _indent(level: int) -> str:
    return _INDENT * (level + 1)


def _format_arguments(
    schema: Optional[Schema], variables: Mapping[str, Any], arguments: Sequence[Argument]
) -> str:
    if not arguments:
        return ""
    rendered = ", ".join(
        f"{arg.name}: {format_argument(schema, arg.value, variables)}" for arg in arguments
    )
    return f"({rendered})"


def _format_nested(
    schema: Optional[Schema], variables: Mapping[str, Any], level: int, selection_set
) -> str:
    return " {" + _format_selections(schema, variables, level + 1, selection_set) + _indent(level) + "}"


def _format_selections(
    schema: Optional[Schema], variables: Mapping[str, Any], level: int, selection_set
) -> str:
    parts = []
    for selection in selection_set or ():
        parts.append(_indent(level))
        if isinstance(selection, Field):
            if selection.alias != selection.name:
                parts.append(f"{selection.alias}: {selection.name}")
            else:
                parts.append(selection.alias)
            parts.append(_format_arguments(schema, variables, selection.arguments))
            for directive in selection.directives:
                parts.append(" @" + directive.name)
                parts.append(_format_arguments(schema, variables, directive.arguments))
            if selection.selection_set:
                parts.append(_format_nested(schema, variables, level, selection.selection_set))
        elif isinstance(selection, InlineFragment):
            parts.append(f"... on {selection.type_condition}")
            parts.append(_format_nested(schema, variables, level, selection.selection_set))
        elif isinstance(selection, FragmentSpread):
            parts.append("..." + selection.name)
    return "".join(parts)


def format_selection_set(
    schema: Optional[Schema], selection_set, variables: Optional[Mapping[str, Any]] = None
) -> str:
    """Render a selection set as query text, with variables expanded inline."""
    variables = variables or {}
    return "{" + _format_selections(schema, variables, 0, selection_set) + "\n}"


def format_selection_set_single_line(
    schema: Optional[Schema], selection_set, variables: Optional[Mapping[str, Any]] = None
) -> str:
    """Render a selection set on one line, collapsing runs of whitespace."""
    return _WHITESPACE.sub(" ", format_selection_set(schema, selection_set, variables))


def format_argument(
    schema: Optional[Schema], value: Optional[Value], variables: Optional[Mapping[str, Any]] = None
) -> str:
    """Render an argument value, substituting the values of variables."""
    if schema is None:
        return str(value)
    if value is None:
        return "<nil>"
    variables = variables or {}
    kind = value.kind
    if kind is ValueKind.VARIABLE:
        type_name = value.expected_type.name() if value.expected_type is not None else ""
        return expand_and_format_variable(schema, schema.types.get(type_name), variables.get(value.raw))
    if kind in (ValueKind.INT, ValueKind.FLOAT, ValueKind.ENUM, ValueKind.BOOLEAN, ValueKind.NULL):
        return value.raw
    if kind in (ValueKind.STRING, ValueKind.BLOCK):
        return _quote(value.raw)
    if kind is ValueKind.LIST:
        items = (format_argument(schema, child.value, variables) for child in value.children)
        return "[" + ",".join(items) + "]"
    if kind is ValueKind.OBJECT:
        items = (
            f"{child.name}:{format_argument(schema, child.value, variables)}" for child in value.children
        )
        return "{" + ",".join(items) + "}"
    raise ValueError(f"unknown value kind {kind!r}")


def expand_and_format_variable(
    schema: Schema, object_type: Optional[Definition], value: Any
) -> str:
    """Render the value of a variable according to its type definition."""
    if value is None:
        return "null"
    if object_type is None:
        raise ValueError("cannot format variable of unknown type")

    kind = object_type.kind
    if kind is DefinitionKind.SCALAR:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    if kind is DefinitionKind.ENUM:
        return str(value)
    if kind not in (
        DefinitionKind.OBJECT,
        DefinitionKind.INPUT_OBJECT,
        DefinitionKind.INTERFACE,
        DefinitionKind.UNION,
    ):
        return ""

    if isinstance(value, Mapping):
        parts = ["{"]
        for index, field_def in enumerate(object_type.fields):
            if index:
                parts.append(" ")
            if field_def.name not in value:
                continue
            field_value = value[field_def.name]
            if field_def.type.elem is not None:
                if not isinstance(field_value, (list, tuple)):
                    raise TypeError("invalid type, expected list")
                elem_type = schema.types.get(field_def.type.elem.name())
                elems = ", ".join(
                    expand_and_format_variable(schema, elem_type, item) for item in field_value
                )
                parts.append(f"{field_def.name}: [{elems}]")
                continue
            rendered = expand_and_format_variable(
                schema, schema.types.get(field_def.type.name()), field_value
            )
            parts.append(f"{field_def.name}: {rendered}")
        parts.append("}")
        return "".join(parts)
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(expand_and_format_variable(schema, object_type, item) for item in value) + "]"
    raise TypeError(f"unknown type {type(value).__name__}")
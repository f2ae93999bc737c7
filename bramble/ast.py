"""A small GraphQL document and schema model used by the gateway."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, TypeVar, Union


class DefinitionKind(str, Enum):
    """Kind of a named type definition, spelled as introspection reports it."""

    SCALAR = "SCALAR"
    OBJECT = "OBJECT"
    INTERFACE = "INTERFACE"
    UNION = "UNION"
    ENUM = "ENUM"
    INPUT_OBJECT = "INPUT_OBJECT"

    def __str__(self) -> str:
        return self.value


class ValueKind(Enum):
    """Kind of a literal or variable value appearing in a query."""

    VARIABLE = "variable"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    BLOCK = "block"
    BOOLEAN = "boolean"
    NULL = "null"
    ENUM = "enum"
    LIST = "list"
    OBJECT = "object"


_Named = TypeVar("_Named")


def find_by_name(items: Optional[Iterable[_Named]], name: str) -> Optional[_Named]:
    """Return the first item whose ``name`` attribute equals ``name``, or None."""
    if not items:
        return None
    return next((item for item in items if getattr(item, "name", None) == name), None)


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


@dataclass
class TypeRef:
    """A type reference: a named type, or a list of ``elem``, optionally non-null."""

    named_type: str = ""
    elem: Optional["TypeRef"] = None
    non_null: bool = False

    def name(self) -> str:
        """The innermost named type."""
        if self.elem is not None:
            return self.elem.name()
        return self.named_type

    def __str__(self) -> str:
        text = f"[{self.elem}]" if self.elem is not None else self.named_type
        return text + "!" if self.non_null else text


@dataclass
class ChildValue:
    """An element of a list value, or a named entry of an object value."""

    value: "Value"
    name: str = ""


@dataclass
class Value:
    """A value written in a query document."""

    kind: ValueKind
    raw: str = ""
    children: list[ChildValue] = field(default_factory=list)
    expected_type: Optional[TypeRef] = None

    def resolve(self, variables: Optional[Mapping[str, Any]]) -> Any:
        """Evaluate the value into plain Python data, substituting variables."""
        variables = variables or {}
        kind = self.kind
        if kind is ValueKind.VARIABLE:
            return variables.get(self.raw)
        if kind is ValueKind.INT:
            try:
                return int(self.raw, 10)
            except ValueError as exc:
                raise ValueError(f"invalid int value {self.raw!r}") from exc
        if kind is ValueKind.FLOAT:
            try:
                return float(self.raw)
            except ValueError as exc:
                raise ValueError(f"invalid float value {self.raw!r}") from exc
        if kind in (ValueKind.STRING, ValueKind.BLOCK, ValueKind.ENUM):
            return self.raw
        if kind is ValueKind.BOOLEAN:
            return self.raw == "true"
        if kind is ValueKind.NULL:
            return None
        if kind is ValueKind.LIST:
            return [child.value.resolve(variables) for child in self.children]
        if kind is ValueKind.OBJECT:
            return {child.name: child.value.resolve(variables) for child in self.children}
        raise ValueError(f"unknown value kind {kind!r}")

    def __str__(self) -> str:
        kind = self.kind
        if kind is ValueKind.VARIABLE:
            return "$" + self.raw
        if kind in (ValueKind.STRING, ValueKind.BLOCK):
            return _quote(self.raw)
        if kind is ValueKind.LIST:
            return "[" + ", ".join(str(c.value) for c in self.children) + "]"
        if kind is ValueKind.OBJECT:
            return "{" + ", ".join(f"{c.name}: {c.value}" for c in self.children) + "}"
        return self.raw


@dataclass
class Argument:
    """An argument passed to a field or directive."""

    name: str
    value: Value


@dataclass
class Directive:
    """A directive applied in a query or schema."""

    name: str
    arguments: list[Argument] = field(default_factory=list)


@dataclass
class ArgumentDefinition:
    """An argument declared on a field or directive definition."""

    name: str
    type: TypeRef
    description: str = ""
    default_value: Optional[Value] = None
    directives: list[Directive] = field(default_factory=list)


@dataclass
class FieldDefinition:
    """A field declared on an object, interface or input type."""

    name: str
    type: TypeRef
    description: str = ""
    arguments: list[ArgumentDefinition] = field(default_factory=list)
    default_value: Optional[Value] = None
    directives: list[Directive] = field(default_factory=list)


@dataclass
class EnumValueDefinition:
    """A value of an enum type."""

    name: str
    description: str = ""
    directives: list[Directive] = field(default_factory=list)


@dataclass
class Definition:
    """A named type definition."""

    kind: DefinitionKind
    name: str
    description: str = ""
    fields: list[FieldDefinition] = field(default_factory=list)
    interfaces: list[str] = field(default_factory=list)
    types: list[str] = field(default_factory=list)
    enum_values: list[EnumValueDefinition] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)

    def field(self, name: str) -> Optional[FieldDefinition]:
        """Return the field definition called ``name``, or None."""
        return find_by_name(self.fields, name)


@dataclass
class DirectiveDefinition:
    """A directive declared by the schema."""

    name: str
    description: str = ""
    arguments: list[ArgumentDefinition] = field(default_factory=list)
    locations: list[str] = field(default_factory=list)
    repeatable: bool = False


@dataclass
class Schema:
    """A collection of type and directive definitions."""

    types: dict[str, Definition] = field(default_factory=dict)
    directives: dict[str, DirectiveDefinition] = field(default_factory=dict)

    @property
    def query(self) -> Optional[Definition]:
        return self.types.get("Query")

    @property
    def mutation(self) -> Optional[Definition]:
        return self.types.get("Mutation")

    @property
    def subscription(self) -> Optional[Definition]:
        return self.types.get("Subscription")


@dataclass
class Field:
    """A field selection; ``alias`` defaults to ``name``."""

    name: str
    alias: str = ""
    arguments: list[Argument] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)
    selection_set: list["Selection"] = field(default_factory=list)
    definition: Optional[FieldDefinition] = field(default=None, repr=False)
    object_definition: Optional[Definition] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not self.alias:
            self.alias = self.name


@dataclass
class InlineFragment:
    """An inline fragment ``... on Type { ... }``."""

    type_condition: str
    selection_set: list["Selection"] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)
    object_definition: Optional[Definition] = field(default=None, repr=False)


@dataclass
class FragmentDefinition:
    """A named fragment declared in a query document."""

    name: str
    type_condition: str
    selection_set: list["Selection"] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)
    definition: Optional[Definition] = field(default=None, repr=False)


@dataclass
class FragmentSpread:
    """A spread of a named fragment ``...Name``."""

    name: str
    definition: Optional[FragmentDefinition] = None
    directives: list[Directive] = field(default_factory=list)
    object_definition: Optional[Definition] = field(default=None, repr=False)


Selection = Union[Field, InlineFragment, FragmentSpread]


@dataclass
class OperationDefinition:
    """A query, mutation or subscription operation."""

    operation: str = "query"
    name: str = ""
    selection_set: list[Selection] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)
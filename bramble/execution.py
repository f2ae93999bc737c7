"""Introspection resolution, result merging and @skip/@include evaluation."""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional, Sequence

from bramble.ast import (
    ArgumentDefinition,
    Definition,
    Directive,
    DirectiveDefinition,
    EnumValueDefinition,
    Field,
    FieldDefinition,
    FragmentDefinition,
    FragmentSpread,
    InlineFragment,
    OperationDefinition,
    Schema,
    TypeRef,
    find_by_name,
)

Variables = Optional[Mapping[str, Any]]


def _is_builtin_name(name: str) -> bool:
    return name.startswith("__")


def selection_set_to_fields(selection_set) -> list[Field]:
    """Flatten a selection set into its fields, expanding fragments."""
    result: list[Field] = []
    for selection in selection_set or ():
        if isinstance(selection, Field):
            result.append(selection)
        elif isinstance(selection, FragmentSpread):
            if selection.definition is not None:
                result.extend(selection_set_to_fields(selection.definition.selection_set))
        elif isinstance(selection, InlineFragment):
            result.extend(selection_set_to_fields(selection.selection_set))
    return result


def has_deprecated_directive(directives: Sequence[Directive]) -> tuple[bool, Optional[str]]:
    """Whether ``@deprecated`` is present, and its reason ("" when not given)."""
    directive = find_by_name(directives, "deprecated")
    if directive is None:
        return False, None
    reason_arg = find_by_name(directive.arguments, "reason")
    return True, reason_arg.value.raw if reason_arg is not None else ""


def _include_deprecated(field: Field, variables: Variables) -> bool:
    argument = find_by_name(field.arguments, "includeDeprecated")
    if argument is None:
        return False
    try:
        value = argument.value.resolve(variables)
    except (ValueError, TypeError):
        return False
    return value if isinstance(value, bool) else False


class Introspector:
    """Answers ``__type`` and ``__schema`` queries from a schema."""

    def __init__(self, schema: Schema) -> None:
        self.schema = schema

    def resolve_fields(self, selection_set, variables: Variables = None) -> dict[str, Any]:
        """Resolve the introspection fields found at the root of a selection set."""
        result: dict[str, Any] = {}
        for f in selection_set_to_fields(selection_set):
            if f.name == "__type":
                name_arg = find_by_name(f.arguments, "name")
                name = name_arg.value.raw if name_arg is not None else ""
                result[f.alias] = self.resolve_type(TypeRef(named_type=name), f.selection_set, variables)
            elif f.name == "__schema":
                result[f.alias] = self.resolve_schema(f.selection_set, variables)
        return result

    def resolve_schema(self, selection_set, variables: Variables = None) -> dict[str, Any]:
        """Resolve the fields of a ``__Schema`` selection."""
        result: dict[str, Any] = {}
        for f in selection_set_to_fields(selection_set):
            if f.name == "types":
                result[f.alias] = [
                    self.resolve_type(TypeRef(named_type=name), f.selection_set, variables)
                    for name in self.schema.types
                ]
            elif f.name == "queryType":
                result[f.alias] = self.resolve_type(TypeRef(named_type="Query"), f.selection_set, variables)
            elif f.name == "mutationType":
                result[f.alias] = self.resolve_type(TypeRef(named_type="Mutation"), f.selection_set, variables)
            elif f.name == "subscriptionType":
                result[f.alias] = self.resolve_type(
                    TypeRef(named_type="Subscription"), f.selection_set, variables
                )
            elif f.name == "directives":
                result[f.alias] = [
                    self.resolve_directive(d, f.selection_set, variables)
                    for d in self.schema.directives.values()
                ]
        return result

    def resolve_type(
        self, type_ref: Optional[TypeRef], selection_set, variables: Variables = None
    ) -> Optional[dict[str, Any]]:
        """Resolve a ``__Type`` selection; wrapping types come before named ones."""
        if type_ref is None:
            return None
        fields = selection_set_to_fields(selection_set)
        result: dict[str, Any] = {}

        if type_ref.non_null:
            for f in fields:
                if f.name == "kind":
                    result[f.alias] = "NON_NULL"
                elif f.name == "ofType":
                    inner = TypeRef(named_type=type_ref.named_type, elem=type_ref.elem, non_null=False)
                    result[f.alias] = self.resolve_type(inner, f.selection_set, variables)
                else:
                    result[f.alias] = None
            return result

        if type_ref.elem is not None:
            for f in fields:
                if f.name == "kind":
                    result[f.alias] = "LIST"
                elif f.name == "ofType":
                    result[f.alias] = self.resolve_type(type_ref.elem, f.selection_set, variables)
                else:
                    result[f.alias] = None
            return result

        named = self.schema.types.get(type_ref.named_type)
        if named is None:
            return None
        for f in fields:
            result[f.alias] = self._named_type_field(named, f, variables)
        return result

    def _named_type_field(self, named: Definition, f: Field, variables: Variables) -> Any:
        if f.name == "kind":
            return named.kind.value
        if f.name == "name":
            return named.name
        if f.name == "description":
            return named.description
        if f.name == "fields":
            include_deprecated = _include_deprecated(f, variables)
            return [
                self.resolve_field(fd, f.selection_set, variables)
                for fd in named.fields
                if not _is_builtin_name(fd.name)
                and (include_deprecated or not has_deprecated_directive(fd.directives)[0])
            ]
        if f.name == "interfaces":
            return [
                self.resolve_type(TypeRef(named_type=name), f.selection_set, variables)
                for name in named.interfaces
            ]
        if f.name == "possibleTypes":
            if not named.types:
                return None
            return [
                self.resolve_type(TypeRef(named_type=name), f.selection_set, variables)
                for name in named.types
            ]
        if f.name == "enumValues":
            include_deprecated = _include_deprecated(f, variables)
            return [
                self.resolve_enum_value(ev, f.selection_set)
                for ev in named.enum_values
                if include_deprecated or not has_deprecated_directive(ev.directives)[0]
            ]
        if f.name == "inputFields":
            return [self.resolve_field(fd, f.selection_set, variables) for fd in named.fields]
        return None

    def resolve_field(
        self, field: FieldDefinition, selection_set, variables: Variables = None
    ) -> dict[str, Any]:
        """Resolve a ``__Field`` (or ``__InputValue``) selection."""
        deprecated, reason = has_deprecated_directive(field.directives)
        result: dict[str, Any] = {}
        for f in selection_set_to_fields(selection_set):
            if f.name == "name":
                result[f.alias] = field.name
            elif f.name == "description":
                result[f.alias] = field.description
            elif f.name == "args":
                result[f.alias] = [
                    self.resolve_input_value(arg, f.selection_set, variables) for arg in field.arguments
                ]
            elif f.name == "type":
                result[f.alias] = self.resolve_type(field.type, f.selection_set, variables)
            elif f.name == "isDeprecated":
                result[f.alias] = deprecated
            elif f.name == "deprecationReason":
                result[f.alias] = reason
        return result

    def resolve_input_value(
        self, argument: ArgumentDefinition, selection_set, variables: Variables = None
    ) -> dict[str, Any]:
        """Resolve an ``__InputValue`` selection for an argument definition."""
        result: dict[str, Any] = {}
        for f in selection_set_to_fields(selection_set):
            if f.name == "name":
                result[f.alias] = argument.name
            elif f.name == "description":
                result[f.alias] = argument.description
            elif f.name == "type":
                result[f.alias] = self.resolve_type(argument.type, f.selection_set, variables)
            elif f.name == "defaultValue":
                default = argument.default_value
                result[f.alias] = str(default) if default is not None else None
        return result

    def resolve_enum_value(self, enum_value: EnumValueDefinition, selection_set) -> dict[str, Any]:
        """Resolve an ``__EnumValue`` selection."""
        deprecated, reason = has_deprecated_directive(enum_value.directives)
        result: dict[str, Any] = {}
        for f in selection_set_to_fields(selection_set):
            if f.name == "name":
                result[f.alias] = enum_value.name
            elif f.name == "description":
                result[f.alias] = enum_value.description
            elif f.name == "isDeprecated":
                result[f.alias] = deprecated
            elif f.name == "deprecationReason":
                result[f.alias] = reason
        return result

    def resolve_directive(
        self, directive: DirectiveDefinition, selection_set, variables: Variables = None
    ) -> dict[str, Any]:
        """Resolve a ``__Directive`` selection."""
        result: dict[str, Any] = {}
        for f in selection_set_to_fields(selection_set):
            if f.name == "name":
                result[f.alias] = directive.name
            elif f.name == "description":
                result[f.alias] = directive.description
            elif f.name == "locations":
                result[f.alias] = list(directive.locations)
            elif f.name == "args":
                result[f.alias] = [
                    self.resolve_input_value(arg, f.selection_set, variables)
                    for arg in directive.arguments
                ]
        return result


def _as_map(value: Any) -> dict:
    if isinstance(value, (bytes, bytearray)):
        parsed = json.loads(value)
        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise ValueError("invalid merge")
        return parsed
    if isinstance(value, dict):
        return value
    raise ValueError("invalid merge")


def merge_maps(dst: dict, src: Mapping) -> None:
    """Merge ``src`` into ``dst`` in place, decoding raw JSON bytes where needed."""
    for key in list(dst):
        if key not in src:
            continue
        a_value = _as_map(dst[key])
        dst[key] = a_value
        merge_maps(a_value, _as_map(src[key]))
    for key, value in src.items():
        if key not in dst:
            dst[key] = value


def remove_skip_and_include(directives: Sequence[Directive]) -> list[Directive]:
    """The directives other than ``@skip`` and ``@include``."""
    return [d for d in directives or () if d.name not in ("include", "skip")]


def resolve_if_argument(directive: Directive, variables: Variables) -> bool:
    """Evaluate the boolean ``if`` argument of ``@skip`` or ``@include``."""
    argument = find_by_name(directive.arguments, "if")
    if argument is None:
        raise ValueError(f"{directive.name}: argument 'if' not defined")
    value = argument.value.resolve(variables)
    if not isinstance(value, bool):
        raise ValueError(f"{directive.name}: argument 'if' is not a boolean")
    return value


def _is_selected(directives: Sequence[Directive], variables: Variables) -> bool:
    skip_directive = find_by_name(directives, "skip")
    include_directive = find_by_name(directives, "include")
    skip = resolve_if_argument(skip_directive, variables) if skip_directive is not None else False
    include = resolve_if_argument(include_directive, variables) if include_directive is not None else True
    return not skip and include


def _evaluate_selection_set(variables: Variables, selection_set) -> list:
    result = []
    for selection in selection_set or ():
        if not _is_selected(selection.directives, variables):
            continue
        if isinstance(selection, Field):
            result.append(
                Field(
                    name=selection.name,
                    alias=selection.alias,
                    arguments=selection.arguments,
                    directives=remove_skip_and_include(selection.directives),
                    selection_set=_evaluate_selection_set(variables, selection.selection_set),
                    definition=selection.definition,
                    object_definition=selection.object_definition,
                )
            )
        elif isinstance(selection, InlineFragment):
            result.append(
                InlineFragment(
                    type_condition=selection.type_condition,
                    selection_set=_evaluate_selection_set(variables, selection.selection_set),
                    directives=remove_skip_and_include(selection.directives),
                    object_definition=selection.object_definition,
                )
            )
        elif isinstance(selection, FragmentSpread):
            fragment = selection.definition
            new_fragment = None
            if fragment is not None:
                new_fragment = FragmentDefinition(
                    name=fragment.name,
                    type_condition=fragment.type_condition,
                    selection_set=_evaluate_selection_set(variables, fragment.selection_set),
                    directives=remove_skip_and_include(fragment.directives),
                    definition=fragment.definition,
                )
            result.append(
                FragmentSpread(
                    name=selection.name,
                    definition=new_fragment,
                    directives=remove_skip_and_include(selection.directives),
                    object_definition=fragment.definition if fragment is not None else None,
                )
            )
    return result


def evaluate_skip_and_include(variables: Variables, operation: OperationDefinition) -> OperationDefinition:
    """A copy of the operation with ``@skip``/``@include`` applied and removed."""
    return OperationDefinition(
        operation=operation.operation,
        name=operation.name,
        selection_set=_evaluate_selection_set(variables, operation.selection_set),
        directives=operation.directives,
    )
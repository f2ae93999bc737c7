# bramble

The building blocks of a federated GraphQL gateway. It uses only the standard
library.

## Modules

### `bramble.ast`

This is a small model of GraphQL schemas and query documents, made of dataclasses:

- Schema side: `Schema` (with `types`, `directives` and the `query`,
  `mutation` and `subscription` properties), `Definition` (with `field(name)`),
  `DefinitionKind`, `FieldDefinition`, `ArgumentDefinition`,
  `EnumValueDefinition`, `DirectiveDefinition` and `TypeRef` (with `name()`,
  which returns the innermost named type).
- Document side: `OperationDefinition`, `Field` (its `alias` defaults to its
  `name`), `InlineFragment`, `FragmentSpread`, `FragmentDefinition`,
  `Directive`, `Argument`, `Value`, `ChildValue` and `ValueKind`.
  `Value.resolve(variables)` turns a value into plain Python data and
  substitutes variables.
- `find_by_name(items, name)` returns the first item with that name, or
  `None` if there is none.

### `bramble.execution`

- `Introspector(schema)` answers `__type` and `__schema` selections from a
  schema. It has `resolve_fields`, `resolve_schema`, `resolve_type`,
  `resolve_field`, `resolve_input_value`, `resolve_enum_value` and
  `resolve_directive`. Deprecated fields and enum values are left out unless
  `includeDeprecated: true` is given. Non-null and list wrappers are reported
  before the named type they wrap.
- `evaluate_skip_and_include(variables, operation)` returns a copy of the
  operation. In the copy, every `@skip` / `@include` has been applied and
  then removed. `resolve_if_argument` raises `ValueError` when the `if`
  argument is missing or is not a boolean.
- `merge_maps(dst, src)` merges one result map into another in place. Nested
  maps are merged recursively. Values given as raw JSON bytes are decoded
  first.
- `selection_set_to_fields`, `has_deprecated_directive` and
  `remove_skip_and_include` are the helpers the functions above use.

### `bramble.formatting`

This module turns a selection set back into query text, with variables
expanded inline:

- `format_selection_set(schema, selection_set, variables)` gives the indented
  form.
- `format_selection_set_single_line(...)` gives the compact form, for example
  `{ gizmo { name weight } }`.
- `format_argument` and `expand_and_format_variable` render single values.

### `bramble.instrumentation`

This module produces one log event per request:

- `start_event(name)` creates an `Event` and makes it current for the running
  context.
- `add_field` and `add_fields` add to the current event. When there is no
  current event, they do nothing.
- `Event.finish()` writes one record to the `bramble.instrumentation` logger.
  The record carries the event's timestamp, its duration and its fields as
  `record.fields`. Later calls to `finish()` do nothing.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

```python
from bramble.ast import (
    Argument, Definition, DefinitionKind, Field, FieldDefinition,
    Schema, TypeRef, Value, ValueKind,
)
from bramble.execution import Introspector

schema = Schema(types={
    "Query": Definition(
        kind=DefinitionKind.OBJECT,
        name="Query",
        fields=[FieldDefinition(name="hello", type=TypeRef(named_type="String"))],
    ),
    "String": Definition(kind=DefinitionKind.SCALAR, name="String"),
})
selection = [
    Field(
        name="__type",
        arguments=[Argument(name="name", value=Value(ValueKind.STRING, raw="Query"))],
        selection_set=[Field(name="kind"), Field(name="name")],
    )
]
Introspector(schema).resolve_fields(selection)
# {"__type": {"kind": "OBJECT", "name": "Query"}}
```

```python
from bramble.instrumentation import start_event, add_field

event = start_event("query")
add_field("operation.name", "GetMovie")
event.finish()
```

## What it does not do

This package is a library. It does not include:

- an HTTP server or a command to run one;
- a parser for GraphQL text, so schemas and documents are built from the
  classes in `bramble.ast`;
- query planning or schema merging;
- requests to downstream services or polling of those services.

A gateway built on this package has to supply those parts itself.
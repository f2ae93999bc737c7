import pytest

from bramble.ast import (
    Argument,
    ChildValue,
    Definition,
    DefinitionKind,
    Directive,
    EnumValueDefinition,
    Field,
    FieldDefinition,
    FragmentSpread,
    InlineFragment,
    Schema,
    TypeRef,
    Value,
    ValueKind,
)
from bramble.formatting import (
    expand_and_format_variable,
    format_argument,
    format_selection_set,
    format_selection_set_single_line,
)


def _named(name, non_null=False):
    return TypeRef(named_type=name, non_null=non_null)


def _list(elem, non_null=False):
    return TypeRef(elem=elem, non_null=non_null)


def _schema(*definitions):
    scalars = [Definition(DefinitionKind.SCALAR, n) for n in ("String", "Int", "Float", "Boolean", "ID")]
    return Schema(types={d.name: d for d in [*scalars, *definitions]})


def _gizmo_schema():
    gizmo = Definition(
        DefinitionKind.OBJECT,
        "Gizmo",
        fields=[
            FieldDefinition("name", _named("String", True)),
            FieldDefinition("weight", _named("Float", True)),
        ],
    )
    query = Definition(DefinitionKind.OBJECT, "Query", fields=[FieldDefinition("gizmo", _named("Gizmo"))])
    return _schema(gizmo, query)


def _genre_enum():
    return Definition(
        DefinitionKind.ENUM,
        "Genre",
        enum_values=[EnumValueDefinition("ACTION"), EnumValueDefinition("COMEDY")],
    )


def _search_input(genre_non_null=True):
    return Definition(
        DefinitionKind.INPUT_OBJECT,
        "SearchInput",
        fields=[FieldDefinition("genre", _named("Genre", genre_non_null))],
    )


def _search_field(value):
    return Field(name="search", arguments=[Argument("input", value)], selection_set=[Field(name="genre")])


def test_format_selection_set_very_simple():
    schema = _gizmo_schema()
    selection = [Field(name="gizmo", selection_set=[Field(name="name"), Field(name="weight")])]
    assert format_selection_set_single_line(schema, selection) == "{ gizmo { name weight } }"


def test_format_selection_set_with_typename():
    schema = _gizmo_schema()
    selection = [
        Field(
            name="gizmo",
            selection_set=[
                Field(name="name"),
                Field(name="weight"),
                Field(name="__typename", definition=FieldDefinition("__typename", _named("String"))),
            ],
        )
    ]
    assert format_selection_set_single_line(schema, selection) == "{ gizmo { name weight __typename } }"


def test_format_selection_set_with_object_variable():
    sub_object = Definition(
        DefinitionKind.INPUT_OBJECT, "SubObject", fields=[FieldDefinition("genre", _named("Genre", True))]
    )
    search_input = Definition(
        DefinitionKind.INPUT_OBJECT,
        "SearchInput",
        fields=[
            FieldDefinition("genre", _named("Genre", True)),
            FieldDefinition("genreList", _list(_named("Genre", True))),
            FieldDefinition("stringList", _list(_named("String", True))),
            FieldDefinition("intList", _list(_named("Int", True))),
            FieldDefinition("subObject", _named("SubObject", True)),
        ],
    )
    schema = _schema(_genre_enum(), sub_object, search_input)
    value = Value(ValueKind.VARIABLE, raw="input", expected_type=_named("SearchInput", True))
    variables = {
        "input": {
            "genre": "ACTION",
            "genreList": ["ACTION", "COMEDY"],
            "stringList": ["abc", "123"],
            "intList": [123],
            "subObject": {"genre": "ACTION"},
        }
    }
    result = format_selection_set_single_line(schema, [_search_field(value)], variables)
    assert result == (
        '{ search(input: {genre: ACTION genreList: [ACTION, COMEDY] stringList: ["abc", "123"] '
        "intList: [123] subObject: {genre: ACTION}}) { genre } }"
    )


def test_format_selection_set_with_list_of_object_variable():
    value_type = Definition(
        DefinitionKind.INPUT_OBJECT,
        "Value",
        fields=[FieldDefinition("name", _named("String", True)), FieldDefinition("value", _named("String", True))],
    )
    schema = _schema(value_type)
    value = Value(ValueKind.VARIABLE, raw="input", expected_type=_list(_named("Value", True), True))
    selection = [Field(name="search", arguments=[Argument("input", value)])]
    variables = {"input": [{"name": "name", "value": "value"}]}
    result = format_selection_set_single_line(schema, selection, variables)
    assert result == '{ search(input: [{name: "name" value: "value"}]) }'


def test_format_selection_set_with_list_containing_variable():
    schema = _schema(Definition(DefinitionKind.OBJECT, "Movie", fields=[FieldDefinition("id", _named("ID", True))]))
    variable = Value(ValueKind.VARIABLE, raw="id", expected_type=_named("Int", True))
    value = Value(ValueKind.LIST, children=[ChildValue(variable)])
    selection = [Field(name="moviesByIds", arguments=[Argument("ids", value)], selection_set=[Field(name="id")])]
    result = format_selection_set_single_line(schema, selection, {"id": 1234})
    assert result == "{ moviesByIds(ids: [1234]) { id } }"


def test_format_selection_set_with_enum():
    schema = _schema(_genre_enum(), _search_input())
    value = Value(ValueKind.OBJECT, children=[ChildValue(Value(ValueKind.ENUM, raw="ACTION"), name="genre")])
    result = format_selection_set_single_line(schema, [_search_field(value)])
    assert result == "{ search(input: {genre:ACTION}) { genre } }"


def test_format_selection_set_with_enum_variable():
    schema = _schema(_genre_enum(), _search_input())
    variable = Value(ValueKind.VARIABLE, raw="genre", expected_type=_named("Genre", True))
    value = Value(ValueKind.OBJECT, children=[ChildValue(variable, name="genre")])
    result = format_selection_set_single_line(schema, [_search_field(value)], {"genre": "ACTION"})
    assert result == "{ search(input: {genre:ACTION}) { genre } }"


def test_format_selection_set_with_null_enum_variable():
    schema = _schema(_genre_enum(), _search_input(genre_non_null=False))
    variable = Value(ValueKind.VARIABLE, raw="genre", expected_type=_named("Genre", True))
    value = Value(ValueKind.OBJECT, children=[ChildValue(variable, name="genre")])
    result = format_selection_set_single_line(schema, [_search_field(value)], {"genre": None})
    assert result == "{ search(input: {genre:null}) { genre } }"


def _read_selection(directives=None):
    return [
        Field(
            name="read",
            directives=directives or [],
            selection_set=[
                InlineFragment(type_condition="Gizmo", selection_set=[Field(name="name"), Field(name="weight")])
            ],
        )
    ]


def test_format_selection_set_inline_fragment():
    schema = _gizmo_schema()
    assert format_selection_set_single_line(schema, _read_selection()) == "{ read { ... on Gizmo { name weight } } }"


def test_format_selection_set_inline_fragment_and_directive():
    schema = _gizmo_schema()
    skip = Directive(
        "skip",
        [Argument("if", Value(ValueKind.BOOLEAN, raw="false", expected_type=_named("Boolean")))],
    )
    result = format_selection_set_single_line(schema, _read_selection([skip]))
    assert result == "{ read @skip(if: false) { ... on Gizmo { name weight } } }"


def test_format_enum():
    language = Definition(
        DefinitionKind.ENUM,
        "Language",
        enum_values=[EnumValueDefinition(n) for n in ("French", "English", "Italian")],
    )
    schema = _schema(language)
    typ = _named("Language")
    variables = {"f": "French", "e": "English"}
    assert format_argument(schema, Value(ValueKind.VARIABLE, raw="f", expected_type=typ), variables) == "French"
    assert format_argument(schema, Value(ValueKind.VARIABLE, raw="e", expected_type=typ), variables) == "English"


def test_alias_and_fragment_spread():
    schema = _gizmo_schema()
    selection = [Field(name="gizmo", alias="g", selection_set=[FragmentSpread(name="GizmoParts")])]
    assert format_selection_set_single_line(schema, selection) == "{ g: gizmo { ...GizmoParts } }"


def test_multi_line_form_ends_with_newline_brace():
    schema = _gizmo_schema()
    result = format_selection_set(schema, [Field(name="gizmo", selection_set=[Field(name="name")])])
    assert result.startswith("{")
    assert result.endswith("\n}")
    assert " ".join(result.split()) == "{ gizmo { name } }"


def test_string_argument_is_quoted():
    schema = _gizmo_schema()
    value = Value(ValueKind.STRING, raw='say "hi"\n')
    assert format_argument(schema, value, {}) == '"say \\"hi\\"\\n"'


def test_argument_without_schema_uses_plain_rendering():
    value = Value(ValueKind.VARIABLE, raw="x")
    assert format_argument(None, value, {"x": 1}) == "$x"


def test_missing_value_renders_nil():
    assert format_argument(_gizmo_schema(), None, {}) == "<nil>"


def test_missing_variable_renders_null():
    schema = _schema()
    value = Value(ValueKind.VARIABLE, raw="absent", expected_type=_named("Int"))
    assert format_argument(schema, value, {}) == "null"


def test_list_field_with_non_list_value_raises():
    definition = Definition(
        DefinitionKind.INPUT_OBJECT, "Filter", fields=[FieldDefinition("tags", _list(_named("String")))]
    )
    schema = _schema(definition)
    with pytest.raises(TypeError):
        expand_and_format_variable(schema, definition, {"tags": "single"})


def test_unsupported_variable_type_raises():
    definition = Definition(DefinitionKind.INPUT_OBJECT, "Filter")
    with pytest.raises(TypeError):
        expand_and_format_variable(_schema(), definition, 42)


def test_scalar_variable_is_json():
    schema = _schema()
    assert expand_and_format_variable(schema, schema.types["String"], "abc") == '"abc"'
    assert expand_and_format_variable(schema, schema.types["Boolean"], True) == "true"
import pytest

from dbmlmigrate.errors import ParserError, SchemaError
from dbmlmigrate.model import (
    Column,
    ColumnEnum,
    EnumItem,
    FieldType,
    KeyValueAttr,
    Relation,
    RelationKind,
    SingleAttr,
    Table,
)
from dbmlmigrate.schema import load_schema
from dbmlmigrate.validator import (
    duplicate_names,
    validate_enums,
    validate_relations,
    validate_structure,
    validate_tables,
)

SCHEMA_TOML = """
[table]
allow_type = ["INTEGER", "VARCHAR", "BOOL", "BIGSERIAL"]
allow_name = "^[a-zA-Z_][a-zA-Z0-9_]*$"
allow_column_name = "^[a-zA-Z_][a-zA-Z0-9_]*$"
allow_column_attr = ["pk", "not null", "default", "note"]

[enum]
allow_name = "^[a-zA-Z_][a-zA-Z0-9_]*$"
allow_column_name = "^[a-zA-Z_][a-zA-Z0-9_]*$"

[relation]
allow_name = "^[a-zA-Z_][a-zA-Z0-9_]*$"
"""

SCHEMA = load_schema(SCHEMA_TOML)


@pytest.fixture
def schema_path(tmp_path):
    path = tmp_path / "schema_config.toml"
    path.write_text(SCHEMA_TOML, encoding="utf-8")
    return path


def users_table():
    return Table(
        name="users",
        columns=[
            Column("id", FieldType("BIGSERIAL"), [SingleAttr("pk")]),
            Column("name", FieldType("varchar", "255"), [SingleAttr("not null")]),
        ],
    )


def posts_table(user_type=FieldType("BIGSERIAL")):
    return Table(
        name="posts",
        columns=[
            Column("id", FieldType("BIGSERIAL"), [SingleAttr("pk")]),
            Column("user_id", user_type),
        ],
    )


def posts_to_users(**changes):
    values = dict(
        from_schema=None,
        from_table="posts",
        from_column="user_id",
        to_schema=None,
        to_table="users",
        to_column="id",
        kind=RelationKind.MANY_TO_ONE,
    )
    values.update(changes)
    return Relation(**values)


def column_map(*tables):
    return {table.name: table.columns for table in tables}


def test_duplicate_names_keeps_first_order():
    assert duplicate_names(["b", "a", "b", "c", "a", "b"]) == ["b", "a"]


def test_duplicate_names_none():
    assert duplicate_names(["a", "b", "c"]) == []


def test_table_unknown_type():
    table = Table("users", [Column("id", FieldType("float"))])
    with pytest.raises(SchemaError) as info:
        validate_tables([table], SCHEMA.table, [])
    assert str(info.value) == str(SchemaError.not_contained("Column type on id,by FLOAT"))


def test_table_enum_type_depends_on_enum_names():
    table = Table("users", [Column("gender", FieldType("user_gender"))])
    validate_tables([table], SCHEMA.table, ["user_gender"])
    with pytest.raises(SchemaError):
        validate_tables([table], SCHEMA.table, [])


def test_table_bad_attribute():
    table = Table("users", [Column("id", FieldType("integer"), [SingleAttr("unique")])])
    with pytest.raises(SchemaError) as info:
        validate_tables([table], SCHEMA.table, [])
    assert str(info.value) == str(SchemaError.not_contained("Table column attr unique"))


def test_table_bad_key_value_attribute():
    table = Table(
        "users", [Column("id", FieldType("integer"), [KeyValueAttr("ref", "x")])]
    )
    with pytest.raises(SchemaError) as info:
        validate_tables([table], SCHEMA.table, [])
    assert str(info.value) == str(SchemaError.not_contained("Table column attr ref"))


def test_table_bad_names():
    with pytest.raises(SchemaError) as info:
        validate_tables([Table("9users", users_table().columns)], SCHEMA.table, [])
    assert str(info.value) == str(SchemaError.field_invalid("9users", "table name"))
    table = Table("users", [Column("bad-name", FieldType("integer"))])
    with pytest.raises(SchemaError) as info:
        validate_tables([table], SCHEMA.table, [])
    assert str(info.value) == str(SchemaError.field_invalid("bad-name", "Table column name"))


def test_enum_bad_names():
    with pytest.raises(SchemaError) as info:
        validate_enums([ColumnEnum("1gender", [EnumItem("male")])], SCHEMA.column_enum)
    assert str(info.value) == str(SchemaError.field_invalid("1gender", "column enum name"))
    with pytest.raises(SchemaError) as info:
        validate_enums([ColumnEnum("gender", [EnumItem("9x")])], SCHEMA.column_enum)
    assert str(info.value) == str(SchemaError.field_invalid("9x", "enum variant name"))


def test_relation_schema_mismatch():
    users, posts = users_table(), posts_table()
    relation = posts_to_users(from_schema="public")
    with pytest.raises(SchemaError) as info:
        validate_relations(
            [relation], SCHEMA.relation, ["users", "posts"], column_map(users, posts)
        )
    assert str(info.value) == str(SchemaError.relation_schema_mismatch("public", "None"))


def test_relation_unknown_table():
    users = users_table()
    with pytest.raises(SchemaError) as info:
        validate_relations(
            [posts_to_users()], SCHEMA.relation, ["users"], column_map(users)
        )
    assert str(info.value) == str(SchemaError.not_contained("relation with table name"))


def test_relation_unknown_column():
    users, posts = users_table(), posts_table()
    relation = posts_to_users(to_column="uuid")
    with pytest.raises(SchemaError) as info:
        validate_relations(
            [relation], SCHEMA.relation, ["users", "posts"], column_map(users, posts)
        )
    assert str(info.value) == str(
        SchemaError.not_contained("relation with table column name")
    )


def test_relation_type_mismatch():
    users, posts = users_table(), posts_table(FieldType("integer"))
    with pytest.raises(SchemaError) as info:
        validate_relations(
            [posts_to_users()],
            SCHEMA.relation,
            ["users", "posts"],
            column_map(users, posts),
        )
    assert str(info.value) == str(SchemaError.relation_column_mismatch("user_id", "id"))


def test_relation_bad_name():
    users, posts = users_table(), posts_table()
    relation = posts_to_users(from_table="9posts")
    with pytest.raises(SchemaError) as info:
        validate_relations(
            [relation], SCHEMA.relation, ["users", "posts"], column_map(users, posts)
        )
    assert str(info.value) == str(
        SchemaError.field_invalid("9posts_with_user_id", "relation name")
    )


def test_structure_duplicate_table_and_enum(schema_path):
    definitions = [
        users_table(),
        users_table(),
        ColumnEnum("gender", [EnumItem("male")]),
        ColumnEnum("gender", [EnumItem("female")]),
    ]
    with pytest.raises(ParserError) as info:
        validate_structure(definitions, schema_path)
    assert str(info.value) == str(
        ParserError.name_duplicated("table_name:users; enum_name:gender")
    )


def test_structure_duplicate_column(schema_path):
    table = Table(
        "users", [Column("id", FieldType("integer")), Column("id", FieldType("integer"))]
    )
    with pytest.raises(ParserError) as info:
        validate_structure([table], schema_path)
    assert str(info.value) == str(
        ParserError.name_duplicated("Column field id is duplicated")
    )


def test_structure_checks_relations(schema_path):
    definitions = [users_table(), posts_table(), posts_to_users()]
    validate_structure(definitions, schema_path)
    bad = [users_table(), posts_table(FieldType("integer")), posts_to_users()]
    with pytest.raises(SchemaError) as info:
        validate_structure(bad, schema_path)
    assert str(info.value) == str(SchemaError.relation_column_mismatch("user_id", "id"))


def test_structure_missing_schema(tmp_path):
    with pytest.raises(ParserError) as info:
        validate_structure([users_table()], tmp_path / "missing.toml")
    assert str(info.value) == str(ParserError.read_failed())
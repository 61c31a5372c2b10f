"""Checks a parsed document against the schema rules."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from os import PathLike

from .errors import ParserError, SchemaError
from .model import (
    Attr,
    Column,
    ColumnEnum,
    Definition,
    KeyValueAttr,
    Relation,
    SingleAttr,
    Table,
)
from .schema import EnumRules, RelationRules, TableRules, check_pattern, read_schema


def duplicate_names(names: Iterable[str]) -> list[str]:
    """Return the names that occur more than once, in order of first appearance."""
    return [name for name, count in Counter(names).items() if count > 1]


def _duplicate_message(names: Iterable[str], category: str) -> str | None:
    duplicates = duplicate_names(names)
    if not duplicates:
        return None
    return f"{category}:{','.join(duplicates)}"


def _check_unique_columns(columns: Sequence[Column]) -> None:
    seen: set[str] = set()
    for column in columns:
        if column.name in seen:
            raise ParserError.name_duplicated(
                f"Column field {column.name} is duplicated"
            )
        seen.add(column.name)


def _column_map(tables: Sequence[Table]) -> dict[str, list[Column]]:
    columns: dict[str, list[Column]] = {}
    for table in tables:
        _check_unique_columns(table.columns)
        columns.setdefault(table.name, table.columns)
    return columns


# --- tables -----------------------------------------------------------------


def _check_attr(attr: Attr, allowed: frozenset[str]) -> None:
    match attr:
        case SingleAttr(name=name):
            key = name
        case KeyValueAttr(key=key):
            pass
    if key not in allowed:
        raise SchemaError.not_contained(f"Table column attr {key}")


def _check_column(column: Column, rules: TableRules, enum_names: Sequence[str]) -> None:
    check_pattern(rules.allow_column_name, column.name, "Table column name")
    type_name = column.field_type.name.upper()
    if type_name not in rules.allow_type and column.field_type.name not in enum_names:
        raise SchemaError.not_contained(f"Column type on {column.name},by {type_name}")
    for attr in column.attrs or ():
        _check_attr(attr, rules.allow_column_attr)


def validate_tables(
    tables: Iterable[Table], rules: TableRules, enum_names: Sequence[str]
) -> None:
    """Raise SchemaError for the first table or column that breaks ``rules``."""
    for table in tables:
        check_pattern(rules.allow_name, table.name, "table name")
        for column in table.columns:
            _check_column(column, rules, enum_names)


# --- enums ------------------------------------------------------------------


def validate_enums(enums: Iterable[ColumnEnum], rules: EnumRules) -> None:
    """Raise SchemaError for the first enum or variant name that breaks ``rules``."""
    for column_enum in enums:
        check_pattern(rules.allow_name, column_enum.name, "column enum name")
        for item in column_enum.items:
            check_pattern(rules.allow_column_name, item.name, "enum variant name")


# --- relations --------------------------------------------------------------


def _find_column(columns: Sequence[Column], name: str) -> Column:
    for column in columns:
        if column.name == name:
            return column
    raise SchemaError.not_contained("relation with table column name")


def _check_relation(
    relation: Relation,
    rules: RelationRules,
    table_names: Sequence[str],
    column_map: Mapping[str, Sequence[Column]],
) -> None:
    check_pattern(
        rules.allow_name,
        f"{relation.from_table}_with_{relation.from_column}",
        "relation name",
    )
    if relation.from_schema != relation.to_schema:
        raise SchemaError.relation_schema_mismatch(
            relation.from_schema or "None", relation.to_schema or "None"
        )
    for table in (relation.from_table, relation.to_table):
        if table not in table_names:
            raise SchemaError.not_contained("relation with table name")
    try:
        from_columns = column_map[relation.from_table]
        to_columns = column_map[relation.to_table]
    except KeyError:
        raise SchemaError.not_contained("relation with table name") from None
    from_column = _find_column(from_columns, relation.from_column)
    to_column = _find_column(to_columns, relation.to_column)
    if from_column.field_type != to_column.field_type:
        raise SchemaError.relation_column_mismatch(from_column.name, to_column.name)


def validate_relations(
    relations: Iterable[Relation],
    rules: RelationRules,
    table_names: Sequence[str],
    column_map: Mapping[str, Sequence[Column]],
) -> None:
    """Raise SchemaError for the first relation that is not consistent."""
    for relation in relations:
        _check_relation(relation, rules, table_names, column_map)


# --- whole documents --------------------------------------------------------


def validate_structure(
    definitions: Iterable[Definition], schema_path: str | PathLike[str]
) -> None:
    """Validate every definition against the schema file at ``schema_path``."""
    schema = read_schema(schema_path)

    tables: list[Table] = []
    enums: list[ColumnEnum] = []
    relations: list[Relation] = []
    for item in definitions:
        match item:
            case Table():
                tables.append(item)
            case ColumnEnum():
                enums.append(item)
            case Relation():
                relations.append(item)

    column_map = _column_map(tables)

    table_names = [table.name for table in tables]
    enum_names = [column_enum.name for column_enum in enums]

    messages = [
        message
        for message in (
            _duplicate_message(table_names, "table_name"),
            _duplicate_message(enum_names, "enum_name"),
        )
        if message is not None
    ]
    if messages:
        raise ParserError.name_duplicated("; ".join(messages))

    validate_tables(tables, schema.table, enum_names)
    validate_enums(enums, schema.column_enum)
    validate_relations(relations, schema.relation, table_names, column_map)
"""Turns parsed definitions into SQL migrations and writes them as files."""

from __future__ import annotations

import logging
import time
import tomllib
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from os import PathLike
from pathlib import Path
from typing import Any

from jinja2 import Environment, StrictUndefined, Template, TemplateError

from .errors import GenerationError, SchemaError
from .files import read_file
from .model import (
    Attr,
    Column,
    ColumnEnum,
    Definition,
    FieldType,
    KeyValueAttr,
    Relation,
    RelationKind,
    SingleAttr,
    Table,
)

logger = logging.getLogger(__name__)

_TEMPLATE_NAME = "templates/migrate_template.rs.txt"

_SINGLE_SQL = {
    "pk": "PRIMARY KEY",
    "unique": "UNIQUE",
    "increment": "INCREMENT",
    "not null": "NOT NULL",
}


@dataclass
class DefaultValue:
    """Column types whose default values need quoting, and those that do not."""

    needs_quotes: list[str] = field(default_factory=list)
    no_quotes: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Migration:
    """One migration: its file name stem and the SQL run up and down."""

    name: str
    up: str
    down: str


def _string_list(section: dict[str, Any], key: str) -> list[str]:
    value = section.get(key)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise SchemaError.bad_format()
    return list(value)


def load_default_values(path: str | PathLike[str]) -> DefaultValue:
    """Read the ``[default_value]`` section of the generation config at ``path``."""
    text = read_file(path)
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise SchemaError.bad_format() from exc
    section = data.get("default_value")
    if not isinstance(section, dict):
        raise SchemaError.bad_format()
    return DefaultValue(
        needs_quotes=_string_list(section, "needs_quotes"),
        no_quotes=_string_list(section, "no_quotes"),
    )


def split_definitions(
    definitions: Iterable[Definition],
) -> tuple[list[Table], list[ColumnEnum], list[Relation]]:
    """Sort definitions into tables, enums and relations, keeping their order."""
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
    return tables, enums, relations


# --- enums ------------------------------------------------------------------


def _enum_up(column_enum: ColumnEnum) -> str:
    values = ",".join(f"'{item.name}'" for item in column_enum.items)
    body = f"({values})" if values else ")"
    return f'CREATE TYPE "{column_enum.name}" AS ENUM {body};'


def enum_migrations(enums: Iterable[ColumnEnum]) -> list[Migration]:
    """Return a CREATE TYPE / DROP TYPE migration for each enum."""
    return [
        Migration(
            name=column_enum.name,
            up=_enum_up(column_enum),
            down=f'DROP TYPE IF EXISTS "{column_enum.name}";',
        )
        for column_enum in enums
    ]


# --- tables -----------------------------------------------------------------


def _default_sql(type_name: str, value: str, defaults: DefaultValue) -> str:
    if "(" in value:
        return f"DEFAULT {value}"
    if type_name in defaults.needs_quotes:
        return f"DEFAULT '{value}'"
    return f"DEFAULT {value}"


def _attr_sql(attr: Attr, field_type: FieldType, defaults: DefaultValue) -> str:
    match attr:
        case SingleAttr(name=name):
            return _SINGLE_SQL.get(name, "")
        case KeyValueAttr(key="default", value=value):
            return _default_sql(field_type.name, value, defaults)
        case _:
            return ""


def _type_sql(field_type: FieldType) -> str:
    if field_type.amount is not None:
        return f"{field_type.name}({field_type.amount})"
    return field_type.name


def _column_sql(column: Column, defaults: DefaultValue) -> str:
    parts = [column.name, _type_sql(column.field_type)]
    if column.attrs is not None:
        parts.extend(_attr_sql(a, column.field_type, defaults) for a in column.attrs)
    return " ".join(" ".join(parts).split())


def _table_up(table: Table, defaults: DefaultValue) -> str:
    columns = ",\n".join(_column_sql(column, defaults) for column in table.columns)
    return f'CREATE TABLE IF NOT EXISTS "{table.name}" (\n{columns}\n);'


def table_migrations(
    tables: Iterable[Table], defaults: DefaultValue
) -> list[Migration]:
    """Return a CREATE TABLE / DROP TABLE migration for each table."""
    return [
        Migration(
            name=f"create_{table.name}_table",
            up=_table_up(table, defaults),
            down=f'DROP TABLE IF EXISTS "{table.name}"',
        )
        for table in tables
    ]


# --- relations --------------------------------------------------------------


def _fk_name(relation: Relation) -> str:
    match relation.kind:
        case RelationKind.ONE_TO_MANY | RelationKind.ONE_TO_ONE:
            return f"fk_{relation.from_table}_to_{relation.to_table}"
        case RelationKind.MANY_TO_ONE:
            return f"fk_{relation.to_table}_to_{relation.from_table}"
        case RelationKind.MANY_TO_MANY:
            return f"fk_{relation.from_table}_to_{relation.to_table}_many"
    raise ValueError(relation.kind)


def _action_sql(relation: Relation) -> str:
    sql = ""
    if relation.update_action is not None:
        sql += f"ON UPDATE {relation.update_action}\n"
    if relation.delete_action is not None:
        sql += f"ON DELETE {relation.delete_action}\n"
    return sql


def _constraint_sql(
    table: str, constraint: str, column: str, ref_table: str, ref_column: str, action: str
) -> str:
    return (
        "\n"
        f'        ALTER TABLE "{table}"\n'
        f"        ADD CONSTRAINT {constraint}\n"
        f"        FOREIGN KEY ({column}) \n"
        f'        REFERENCES "{ref_table}" ("{ref_column}")\n'
        f"        {action};\n"
        "        "
    )


def _relation_up(relation: Relation, name: str) -> str:
    action = _action_sql(relation)
    match relation.kind:
        case RelationKind.MANY_TO_ONE | RelationKind.ONE_TO_ONE:
            return _constraint_sql(
                relation.from_table,
                name,
                relation.from_column,
                relation.to_table,
                relation.to_column,
                action,
            )
        case RelationKind.ONE_TO_MANY:
            return _constraint_sql(
                relation.to_table,
                f'"{name}"',
                f'"{relation.to_column}"',
                relation.from_table,
                relation.from_column,
                action,
            )
    return ""


def _relation_down(relation: Relation, name: str) -> str:
    match relation.kind:
        case RelationKind.ONE_TO_MANY:
            return f'ALTER TABLE "{relation.to_table}" DROP CONSTRAINT {name};'
        case RelationKind.ONE_TO_ONE | RelationKind.MANY_TO_ONE:
            return f'ALTER TABLE "{relation.from_table}" DROP CONSTRAINT {name};'
    return ""


def relation_migrations(relations: Iterable[Relation]) -> list[Migration]:
    """Return a foreign-key migration for each relation.

    Many-to-many relations produce empty SQL.
    """
    migrations = []
    for relation in relations:
        name = _fk_name(relation)
        migrations.append(
            Migration(
                name=name,
                up=_relation_up(relation, name),
                down=_relation_down(relation, name),
            )
        )
    return migrations


# --- files ------------------------------------------------------------------


def _load_template(path: str | PathLike[str]) -> Template:
    environment = Environment(
        undefined=StrictUndefined, keep_trailing_newline=True, autoescape=False
    )
    try:
        with open(path, encoding="utf-8") as handle:
            source = handle.read()
        return environment.from_string(source)
    except (OSError, UnicodeDecodeError, TemplateError) as exc:
        logger.error("%s", exc)
        raise GenerationError.template_not_loaded(_TEMPLATE_NAME) from exc


def write_migrations(
    migrations: Iterable[Migration],
    template: Template,
    output_path: str | PathLike[str],
) -> list[Path]:
    """Render each migration with ``template`` into a timestamped file.

    Returns the paths written.
    """
    written = []
    for migration in migrations:
        try:
            content = template.render(up_sql=migration.up, down_sql=migration.down)
        except TemplateError as exc:
            logger.error("%s", exc)
            raise GenerationError.render_failed() from exc
        stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
        path = Path(output_path) / f"m{stamp}_{migration.name}.rs"
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as exc:
            logger.error("%s", exc)
            raise GenerationError.file_not_created(str(path)) from exc
        written.append(path)
    return written


def generate_migrate_files(
    definitions: Iterable[Definition],
    defaults: DefaultValue,
    template_path: str | PathLike[str],
    output_path: str | PathLike[str],
    pause: float = 1.0,
) -> list[Path]:
    """Write the enum, table and relation migrations, in that order.

    ``pause`` seconds pass between the batches so their timestamps differ.
    Enum names are treated as types whose defaults need quoting.
    """
    template = _load_template(template_path)
    tables, enums, relations = split_definitions(definitions)

    defaults = replace(
        defaults,
        needs_quotes=[*defaults.needs_quotes, *(e.name for e in enums)],
    )

    enum_sqls = enum_migrations(enums)
    relation_sqls = relation_migrations(relations)
    table_sqls = table_migrations(tables, defaults)

    written: list[Path] = []
    logger.info("Generating migration file for enum creation.")
    written += write_migrations(enum_sqls, template, output_path)
    time.sleep(pause)
    logger.info("Generating migration file for table creation.")
    written += write_migrations(table_sqls, template, output_path)
    time.sleep(pause)
    logger.info("Generating migration file for relation creation.")
    written += write_migrations(relation_sqls, template, output_path)
    return written


__all__: Sequence[str] = (
    "DefaultValue",
    "Migration",
    "load_default_values",
    "split_definitions",
    "enum_migrations",
    "table_migrations",
    "relation_migrations",
    "write_migrations",
    "generate_migrate_files",
)
"""Command-line arguments and the working-directory layout of a run."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from .errors import InitError

logger = logging.getLogger(__name__)

_VERSION = "0.8.0"

_CONFIG_DIR = Path("config")
_TEMPLATE_DIR = Path("templates")
_OUTPUT_DIR = Path("output")

_GENERATE_CONFIG = """
[default_value]

needs_quotes = [
  "text",
  "varchar",
  "character varying",
  "char",
  "character",

  "timestamp",
  "timestamp without time zone",
  "timestamptz",
  "timestamp with time zone",
  "date",
  "time",
  "time without time zone",
  "timetz",
  "time with time zone",
  "interval",

  "json",
  "jsonb",

  "uuid",

  "inet",
  "cidr",
  "macaddr",
  "macaddr8",

  "xml",

  "enum",
  "point",
  "line",
  "lseg",
  "box",
  "path",
  "polygon",
  "circle",
  "array"
]

no_quotes = [
  "integer",
  "int",
  "int4",
  "smallint",
  "int2",
  "bigint",
  "int8",
  "decimal",
  "numeric",
  "real",
  "float4",
  "double precision",
  "float8",

  "serial",
  "serial4",
  "smallserial",
  "serial2",
  "bigserial",
  "serial8",

  "boolean",
  "bool"
]
"""

_SCHEMA_CONFIG = """
[table]
allow_type=[
  "SMALLINT",
  "INTEGER",
  "INT",
  "BIGINT",
  "DECIMAL",

  "NUMERIC",

  "REAL",
  "DOUBLE PRECISION",
  "SMALLSERIAL",
  "SERIAL",
  "BIGSERIAL",

  "VARCHAR",
  "CHAR",

  "TEXT",

  "TIMESTAMP",

  "TIMESTAMP WITHOUT TIME ZONE",

  "TIMESTAMPTZ",

  "TIMESTAMP WITH TIME ZONE",
  "DATE",

  "TIME",

  "TIME WITHOUT TIME ZONE",

  "TIMETZ",

  "TIME WITH TIME ZONE",

  "INTERVAL",

  "BOOLEAN",
  "BOOL",
  "JSON",
  "JSONB",
  "UUID",
  "BYTEA",
  "INET"
]
allow_name="^[a-zA-Z_][a-zA-Z0-9_]*$"
allow_column_name="^[a-zA-Z_][a-zA-Z0-9_]*$"
allow_column_attr=[
  "pk",
  "primary key",
  "not null",
  "unique",
  "increment",
  "null",
  "default",
  "note",
]

[enum]
allow_name="^[a-zA-Z_][a-zA-Z0-9_]*$"
allow_column_name="^[a-zA-Z_][a-zA-Z0-9_]*$"

[relation]
allow_name="^[a-zA-Z_][a-zA-Z0-9_]*$"
"""

_MIGRATE_TEMPLATE = """
use sea_orm_migration::{prelude::*, schema::*};

#[derive(DeriveMigrationName)]
pub struct Migration;

#[async_trait::async_trait]
impl MigrationTrait for Migration {
    async fn up(&self, manager: &SchemaManager) -> Result<(), DbErr> {
        // Replace the sample below with your own migration scripts
        let db = manager.get_connection();
        db.execute_unprepared(r#"{{ up_sql }}"#).await?;
        Ok(())
    }

    async fn down(&self, manager: &SchemaManager) -> Result<(), DbErr> {
        let db = manager.get_connection();
        db.execute_unprepared(r#"{{ down_sql }}"#).await?;
        Ok(())
    }
}
"""


@dataclass(frozen=True)
class ConfigPath:
    """Every path a run reads from or writes to."""

    input_path: Path
    schema_config: Path
    generation_config: Path
    template_path: Path
    output_path: Path


def build_parser() -> argparse.ArgumentParser:
    """Return the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="dbmlmigrate",
        description="DBML to SeaORM Migration Generator.",
    )
    parser.add_argument("input", type=Path, help="Path to the input DBML file.")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Directory for the output SeaORM migration.",
    )
    parser.add_argument(
        "-V", "--version", action="version", version=f"%(prog)s {_VERSION}"
    )
    return parser


def _make_dir(path: Path, error: InitError) -> None:
    if path.exists():
        return
    try:
        path.mkdir()
    except OSError as exc:
        print(f"It has an error been occured while create {path}:{exc}", file=sys.stderr)
        raise error from exc


def _write_if_missing(path: Path, content: str) -> None:
    if path.exists():
        return
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        print(
            f"It has an error been occured while create configration:{exc}",
            file=sys.stderr,
        )
        raise InitError.config_not_created() from exc


def create_config() -> tuple[Path, Path, Path]:
    """Write the default configuration files into the working directory.

    Existing files are left alone. Returns the generation config, schema
    config and migration template paths.
    """
    _make_dir(_CONFIG_DIR, InitError.config_not_created())
    generation = _CONFIG_DIR / "generate_config.toml"
    _write_if_missing(generation, _GENERATE_CONFIG)
    schema = _CONFIG_DIR / "schema_config.toml"
    _write_if_missing(schema, _SCHEMA_CONFIG)

    _make_dir(_TEMPLATE_DIR, InitError.template_folder_not_created())
    template = _TEMPLATE_DIR / "migrate_template.rs.txt"
    _write_if_missing(template, _MIGRATE_TEMPLATE)
    return generation, schema, template


def init(argv: Sequence[str] | None = None) -> ConfigPath:
    """Parse the command line, check the input and prepare the working directory."""
    args = build_parser().parse_args(argv)
    logger.info("Obtaining input file and generating default configuration.")
    input_path: Path = args.input

    if not input_path.exists():
        raise InitError.input_not_found()
    if not input_path.is_file():
        raise InitError.input_not_file()

    generation, schema, template = create_config()

    if args.output is not None:
        if not args.output.is_dir():
            raise InitError.output_not_folder()
        output_path = args.output
    else:
        output_path = _OUTPUT_DIR
        try:
            output_path.mkdir()
        except OSError as exc:
            print(
                f"It has an error been occured while create the output folder:{exc}",
                file=sys.stderr,
            )
            raise InitError.output_not_created() from exc

    return ConfigPath(
        input_path=input_path,
        schema_config=schema,
        generation_config=generation,
        template_path=template,
        output_path=output_path,
    )
# dbmlmigrate

Turn a DBML database diagram into SeaORM migration files.

`dbmlmigrate` reads a `.dbml` file that holds `Table`, `Enum` and `Ref`
definitions. It checks them against a configurable schema and writes one
migration file for each enum, each table and each foreign-key relation.
The generated SQL targets PostgreSQL.

## Installation

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Usage

```
dbmlmigrate path/to/schema.dbml
dbmlmigrate path/to/schema.dbml --output migrations/
dbmlmigrate --version
```

The input path must exist and must be a file. A directory given with
`-o`/`--output` must already exist.

On each run the command creates these files in the working directory if
they are missing. Files that already exist are left as they are, so you can
edit them:

- `config/generate_config.toml`: the `[default_value]` section lists the
  column types whose default values are quoted (`needs_quotes`) and those
  that are not (`no_quotes`).
- `config/schema_config.toml`: the `[table]`, `[enum]` and `[relation]`
  sections hold the allowed column types, the name patterns (regular
  expressions) and the allowed column attributes used during validation.
- `templates/migrate_template.rs.txt`: a Jinja2 template through which each
  migration is rendered. It receives `up_sql` and `down_sql`.

If you give no `--output` directory, the files go into a new `output/`
directory. That directory is created on every such run, so the command
fails if `output/` already exists; remove it or pass `--output`.

Each file is named `m<YYYYMMDD_HHMMSS>_<name>.rs`, with the timestamp in
UTC. Enum migrations are written first, then tables, then relations, with a
one-second pause between the three batches so that the files sort in the
order they should run.

On any error the command prints `Error: <message>` to standard error and
exits with status 1.

## Example input

```
Enum user_status {
  active
  banned
}

Table user {
  id BIGSERIAL [pk]
  name varchar(255) [not null]
  status user_status [default: 'active']
}

Table post {
  id BIGSERIAL [pk]
  user_id BIGSERIAL [not null]
}

Ref: post.user_id > user.id [delete: cascade]
```

Validation checks, among other things, that:

- table and enum names are not duplicated, and no table has two columns
  with the same name;
- names match the configured patterns;
- every column type is in `allow_type` (compared in upper case) or is the
  name of an enum;
- every column attribute is in `allow_column_attr`;
- both ends of a `Ref` name existing tables and columns, use the same schema
  prefix, and have the same column type.

## Library use

```python
from pathlib import Path

from dbmlmigrate.app import parse_file

definitions = parse_file(
    Path("schema.dbml").read_text(encoding="utf-8"),
    Path("config/schema_config.toml"),
)
```

- `dbmlmigrate.parser.parse_all(text)` parses without validating and returns
  the definitions together with the text that could not be parsed.
  `parse_table`, `parse_enum` and `parse_relation` parse a single definition.
- `dbmlmigrate.validator.validate_structure(definitions, schema_path)` runs
  the checks above; `dbmlmigrate.schema.load_schema(text)` builds the rules
  from TOML text.
- `dbmlmigrate.generation` builds `Migration` objects (`enum_migrations`,
  `table_migrations`, `relation_migrations`) and writes them to disk
  (`write_migrations`, `generate_migrate_files`).
- `dbmlmigrate.app.generate_file(definitions, paths)` writes the migrations
  using a `dbmlmigrate.project.ConfigPath`.

Every failure raises a subclass of `dbmlmigrate.errors.AppError`:
`ParserError`, `SchemaError`, `GenerationError` or `InitError`.

## What it does not do

- Many-to-many relations (`<>`) are parsed, but their migrations contain
  empty SQL.
- Table notes and `Note` blocks are not parsed. A `note:` column attribute
  is accepted but not written to the SQL.
- The `no action` referential action is written as `CASCADE`.
- The package only writes migration files. It does not run them against a
  database and does not register them with a migrator.
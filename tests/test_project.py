import tomllib
from pathlib import Path

import pytest

from dbmlmigrate.errors import InitError
from dbmlmigrate.project import ConfigPath, build_parser, create_config, init


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def input_file(workdir):
    path = workdir / "schema.dbml"
    path.write_text("Table user {\n  id int\n}\n", encoding="utf-8")
    return path


def test_parser_reads_input_and_output():
    args = build_parser().parse_args(["in.dbml", "-o", "out"])
    assert args.input == Path("in.dbml")
    assert args.output == Path("out")


def test_parser_output_defaults_to_none():
    args = build_parser().parse_args(["in.dbml"])
    assert args.output is None


def test_parser_requires_input():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_create_config_writes_defaults(workdir):
    generation, schema, template = create_config()
    assert generation == Path("config") / "generate_config.toml"
    assert schema == Path("config") / "schema_config.toml"
    assert template == Path("templates") / "migrate_template.rs.txt"

    defaults = tomllib.loads(generation.read_text(encoding="utf-8"))
    assert "varchar" in defaults["default_value"]["needs_quotes"]
    assert "bool" in defaults["default_value"]["no_quotes"]

    rules = tomllib.loads(schema.read_text(encoding="utf-8"))
    assert "BIGSERIAL" in rules["table"]["allow_type"]
    assert rules["enum"]["allow_name"] == "^[a-zA-Z_][a-zA-Z0-9_]*$"
    assert rules["relation"]["allow_name"] == "^[a-zA-Z_][a-zA-Z0-9_]*$"

    text = template.read_text(encoding="utf-8")
    assert "{{ up_sql }}" in text and "{{ down_sql }}" in text


def test_create_config_keeps_existing_files(workdir):
    (workdir / "config").mkdir()
    custom = workdir / "config" / "schema_config.toml"
    custom.write_text("[table]\n", encoding="utf-8")
    generation, schema, template = create_config()
    assert schema == Path("config") / "schema_config.toml"
    assert schema.read_text(encoding="utf-8") == "[table]\n"
    assert generation.is_file()
    assert template.is_file()


def test_init_missing_input(workdir):
    with pytest.raises(InitError) as info:
        init(["absent.dbml"])
    assert info.value.kind == "input_file_not_found"


def test_init_input_is_directory(workdir):
    (workdir / "folder").mkdir()
    with pytest.raises(InitError) as info:
        init(["folder"])
    assert info.value.kind == "input_must_be_file"


def test_init_output_must_be_folder(workdir, input_file):
    (workdir / "plain.txt").write_text("x", encoding="utf-8")
    with pytest.raises(InitError) as info:
        init([str(input_file), "-o", "plain.txt"])
    assert info.value.kind == "output_must_be_folder"


def test_init_with_output_folder(workdir, input_file):
    (workdir / "migrations").mkdir()
    paths = init([str(input_file), "--output", "migrations"])
    assert paths == ConfigPath(
        input_path=input_file,
        schema_config=Path("config") / "schema_config.toml",
        generation_config=Path("config") / "generate_config.toml",
        template_path=Path("templates") / "migrate_template.rs.txt",
        output_path=Path("migrations"),
    )
    assert paths.generation_config.is_file()


def test_init_creates_default_output_once(workdir, input_file):
    paths = init([str(input_file)])
    assert paths.output_path == Path("output")
    assert (workdir / "output").is_dir()
    with pytest.raises(InitError) as info:
        init([str(input_file)])
    assert info.value.kind == "output_not_created"
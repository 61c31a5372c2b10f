from unittest.mock import patch

import pytest

from dbmlmigrate.app import generate_file, main, parse_file
from dbmlmigrate.errors import ParserError, SchemaError
from dbmlmigrate.model import ColumnEnum, Relation, RelationKind, Table
from dbmlmigrate.project import ConfigPath, create_config

DBML = """
Enum user_gender {
    male
    female
}

Table user {
    id BIGSERIAL [pk]
    name varchar(64) [not null]
    gender user_gender [default: 'male']
}

Table post {
    id BIGSERIAL [pk]
    user_id BIGSERIAL [not null]
}

Ref: post.user_id > user.id [delete: cascade]
"""


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    generation, schema, template = create_config()
    return tmp_path, generation, schema, template


def test_parse_file(workspace):
    _, _, schema, _ = workspace
    definitions = parse_file(DBML, schema)
    assert [type(d) for d in definitions] == [ColumnEnum, Table, Table, Relation]
    assert [d.name for d in definitions[:3]] == ["user_gender", "user", "post"]
    assert definitions[3].kind is RelationKind.MANY_TO_ONE


def test_parse_file_duplicate_tables(workspace):
    _, _, schema, _ = workspace
    text = "Table a {\n id int\n}\nTable a {\n id int\n}\n"
    with pytest.raises(ParserError) as info:
        parse_file(text, schema)
    assert info.value.kind == "name_duplicated"


def test_parse_file_unknown_type(workspace):
    _, _, schema, _ = workspace
    with pytest.raises(SchemaError) as info:
        parse_file("Table a {\n shape geometry\n}\n", schema)
    assert info.value.kind == "no_contained"


@patch("dbmlmigrate.generation.time.sleep")
def test_generate_file(sleep, workspace):
    root, generation, schema, template = workspace
    out = root / "out"
    out.mkdir()
    paths = ConfigPath(
        input_path=root / "in.dbml",
        schema_config=schema,
        generation_config=generation,
        template_path=template,
        output_path=out,
    )
    generate_file(parse_file(DBML, schema), paths)
    files = sorted(out.iterdir())
    assert len(files) == 4
    user_file = next(p for p in files if p.name.endswith("_create_user_table.rs"))
    content = user_file.read_text()
    assert "DEFAULT 'male'" in content
    assert 'CREATE TABLE IF NOT EXISTS "user"' in content
    assert sleep.call_count == 2


@patch("dbmlmigrate.generation.time.sleep")
def test_main_success(sleep, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    source = tmp_path / "schema.dbml"
    source.write_text(DBML, encoding="utf-8")
    assert main([str(source)]) == 0
    files = list((tmp_path / "output").iterdir())
    assert len(files) == 4
    assert all(p.suffix == ".rs" for p in files)


def test_main_missing_input(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main([str(tmp_path / "missing.dbml")]) == 1
    assert "The input file is not found." in capsys.readouterr().err
    assert not (tmp_path / "output").exists()
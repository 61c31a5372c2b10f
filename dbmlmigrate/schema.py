"""Validation rules loaded from the schema configuration file."""

from __future__ import annotations

import re
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from os import PathLike
from typing import Any

from .errors import SchemaError
from .files import read_file


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile ``pattern``; raise SchemaError if it is not a valid expression."""
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise SchemaError.regex_error(pattern) from exc


def check_pattern(pattern: re.Pattern[str], target: str, type_name: str) -> None:
    """Raise SchemaError unless ``pattern`` matches somewhere in ``target``."""
    if pattern.search(target) is None:
        raise SchemaError.field_invalid(target, type_name)


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key)
    if not isinstance(value, Mapping):
        raise SchemaError.bad_format()
    return value


def _string(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise SchemaError.bad_format()
    return value


def _strings(data: Mapping[str, Any], key: str) -> frozenset[str]:
    value = data.get(key)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise SchemaError.bad_format()
    return frozenset(value)


@dataclass(frozen=True)
class TableRules:
    """Which names, column types and column attributes a table may use."""

    allow_name: re.Pattern[str]
    allow_column_name: re.Pattern[str]
    allow_type: frozenset[str]
    allow_column_attr: frozenset[str]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> TableRules:
        allow_type = _strings(data, "allow_type")
        name = _string(data, "allow_name")
        column_name = _string(data, "allow_column_name")
        column_attr = _strings(data, "allow_column_attr")
        return cls(
            allow_name=compile_pattern(name),
            allow_column_name=compile_pattern(column_name),
            allow_type=allow_type,
            allow_column_attr=column_attr,
        )


@dataclass(frozen=True)
class EnumRules:
    """Which names an enum and its variants may use."""

    allow_name: re.Pattern[str]
    allow_column_name: re.Pattern[str]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> EnumRules:
        name = _string(data, "allow_name")
        column_name = _string(data, "allow_column_name")
        return cls(
            allow_name=compile_pattern(name),
            allow_column_name=compile_pattern(column_name),
        )


@dataclass(frozen=True)
class RelationRules:
    """Which names a relation may produce."""

    allow_name: re.Pattern[str]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RelationRules:
        return cls(allow_name=compile_pattern(_string(data, "allow_name")))


@dataclass(frozen=True)
class ValidatorSchema:
    """The rules for tables, enums and relations together."""

    table: TableRules
    column_enum: EnumRules
    relation: RelationRules


def load_schema(text: str) -> ValidatorSchema:
    """Build the validation rules from TOML ``text``."""
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise SchemaError.bad_format() from exc
    table = _section(data, "table")
    column_enum = _section(data, "enum")
    relation = _section(data, "relation")
    return ValidatorSchema(
        table=TableRules.from_mapping(table),
        column_enum=EnumRules.from_mapping(column_enum),
        relation=RelationRules.from_mapping(relation),
    )


def read_schema(path: str | PathLike[str]) -> ValidatorSchema:
    """Read and load the schema configuration file at ``path``."""
    return load_schema(read_file(path))
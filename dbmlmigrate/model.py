"""Data types for the tables, enums and relations of a DBML document."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class SingleAttr:
    """A column attribute with no value, such as ``pk`` or ``not null``."""

    name: str


@dataclass(frozen=True)
class KeyValueAttr:
    """A column attribute of the form ``key: value``."""

    key: str
    value: str


Attr = SingleAttr | KeyValueAttr


@dataclass(frozen=True)
class FieldType:
    """A column type name with an optional size, as in ``varchar(255)``."""

    name: str
    amount: str | None = None


@dataclass
class Column:
    name: str
    field_type: FieldType
    attrs: list[Attr] | None = None

    def __str__(self) -> str:
        return (
            f"Column: \n name:{self.name} \n type:{self.field_type!r} \n"
            f" attrs:{self.attrs!r}"
        )


@dataclass
class Table:
    name: str
    columns: list[Column]
    alias: str | None = None
    note: str | None = None

    def __str__(self) -> str:
        return (
            f"Table: \n alias:{self.alias!r}\n name:{self.name} \n"
            f" columns:{self.columns!r}"
        )


@dataclass
class EnumItem:
    name: str
    attrs: list[str] | None = None

    def __str__(self) -> str:
        return f"name:{self.name} \n attrs:{self.attrs!r}"


@dataclass
class ColumnEnum:
    name: str
    items: list[EnumItem]

    def __str__(self) -> str:
        return f"Enum: \n name:{self.name} \n item:[{self.items!r}]"


class ReferentialAction(Enum):
    """An ON UPDATE / ON DELETE action; the value is its DBML spelling."""

    CASCADE = "cascade"
    NO_ACTION = "no action"
    RESTRICT = "restrict"
    SET_NULL = "set null"
    SET_DEFAULT = "set default"

    def __str__(self) -> str:
        return _ACTION_SQL[self]


_ACTION_SQL = {
    ReferentialAction.CASCADE: "CASCADE",
    ReferentialAction.NO_ACTION: "CASCADE",
    ReferentialAction.RESTRICT: "RESTRICT",
    ReferentialAction.SET_NULL: "SETNULL",
    ReferentialAction.SET_DEFAULT: "SETDEFAULT",
}


class RelationKind(Enum):
    """The cardinality of a reference; the value is its DBML operator."""

    MANY_TO_ONE = ">"
    ONE_TO_ONE = "-"
    ONE_TO_MANY = "<"
    MANY_TO_MANY = "<>"

    def __str__(self) -> str:
        return _KIND_TEXT[self]


_KIND_TEXT = {
    RelationKind.MANY_TO_MANY: "Many to many",
    RelationKind.ONE_TO_ONE: "One to one",
    RelationKind.ONE_TO_MANY: "One to many",
    RelationKind.MANY_TO_ONE: "Many to one",
}


@dataclass
class Relation:
    from_schema: str | None
    from_table: str
    from_column: str
    to_schema: str | None
    to_table: str
    to_column: str
    kind: RelationKind
    update_action: ReferentialAction | None = None
    delete_action: ReferentialAction | None = None

    def __str__(self) -> str:
        return (
            f"Relation: from:{self.from_table}.{self.from_column},"
            f"to:{self.to_table}.{self.to_column},relation_type:{self.kind}"
        )


Definition = Table | ColumnEnum | Relation


def action_from_str(text: str) -> ReferentialAction | None:
    """Return the action spelled ``text``, or None if it names none."""
    try:
        return ReferentialAction(text)
    except ValueError:
        return None


def relation_from_str(text: str) -> RelationKind | None:
    """Return the relation kind for the operator ``text``, or None."""
    try:
        return RelationKind(text)
    except ValueError:
        return None
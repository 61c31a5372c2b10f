"""Parser for the DBML subset: ``Table``, ``Enum`` and ``Ref`` definitions.

Every public parser takes the whole text and returns the parsed value together
with the text that was left unconsumed.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import TypeVar

from .errors import ParserError
from .model import (
    Attr,
    Column,
    ColumnEnum,
    Definition,
    EnumItem,
    FieldType,
    KeyValueAttr,
    ReferentialAction,
    Relation,
    RelationKind,
    SingleAttr,
    Table,
    action_from_str,
    relation_from_str,
)

T = TypeVar("T")

_SPACE0 = re.compile(r"[ \t]*")
_MULTISPACE0 = re.compile(r"[ \t\r\n]*")
_MULTISPACE1 = re.compile(r"[ \t\r\n]+")

_RELATION_OPERATORS = ("<>", "<", ">", "-")
_ACTION_WORDS = ("cascade", "restrict", "set default", "no action", "set null")
_QUOTES = "\"'`"


class _NoMatch(Exception):
    """Internal signal that a parser did not match at a position."""


_Parser = Callable[[str, int], tuple[T, int]]


def is_ident_char(char: str) -> bool:
    """Return True if ``char`` may appear in an identifier."""
    return char.isalnum() or char == "_" or char >= "\u4e00"


def _space0(text: str, pos: int) -> int:
    return _SPACE0.match(text, pos).end()


def _ms0(text: str, pos: int) -> int:
    return _MULTISPACE0.match(text, pos).end()


def _ms1(text: str, pos: int) -> int:
    match = _MULTISPACE1.match(text, pos)
    if match is None:
        raise _NoMatch
    return match.end()


def _tag(text: str, pos: int, literal: str) -> int:
    if not text.startswith(literal, pos):
        raise _NoMatch
    return pos + len(literal)


def _take_while1(text: str, pos: int, predicate: Callable[[str], bool]) -> tuple[str, int]:
    end = pos
    while end < len(text) and predicate(text[end]):
        end += 1
    if end == pos:
        raise _NoMatch
    return text[pos:end], end


def _ident(text: str, pos: int) -> tuple[str, int]:
    return _take_while1(text, pos, is_ident_char)


def _many(text: str, pos: int, item: _Parser[T]) -> tuple[list[T], int]:
    values: list[T] = []
    while True:
        try:
            value, after = item(text, pos)
        except _NoMatch:
            return values, pos
        if after == pos:
            raise _NoMatch
        values.append(value)
        pos = after


def _separated(
    text: str, pos: int, item: _Parser[T], separator: Callable[[str, int], int]
) -> tuple[list[T], int]:
    try:
        first, pos = item(text, pos)
    except _NoMatch:
        return [], pos
    values = [first]
    while True:
        try:
            after = separator(text, pos)
            value, after = item(text, after)
        except _NoMatch:
            return values, pos
        values.append(value)
        pos = after


def _bracketed(
    text: str, pos: int, item: _Parser[T], separator: Callable[[str, int], int]
) -> tuple[list[T], int]:
    pos = _tag(text, pos, "[")
    values, pos = _separated(text, pos, item, separator)
    pos = _tag(text, pos, "]")
    return values, pos


def _comma(text: str, pos: int) -> int:
    return _tag(text, pos, ",")


# --- tables -----------------------------------------------------------------


def _alias(text: str, pos: int) -> tuple[str | None, int]:
    try:
        after = _tag(text, _space0(text, pos), "as")
        after = _ms1(text, after)
        alias, after = _ident(text, after)
    except _NoMatch:
        return None, pos
    return alias, after


def _field_type(text: str, pos: int) -> tuple[FieldType, int]:
    name, pos = _ident(text, pos)
    try:
        after = _tag(text, pos, "(")
        digits, after = _take_while1(text, after, lambda c: "0" <= c <= "9")
        after = _tag(text, after, ")")
    except _NoMatch:
        return FieldType(name), pos
    return FieldType(name, digits), after


def _quoted(text: str, pos: int) -> tuple[str, int]:
    if pos >= len(text) or text[pos] not in _QUOTES:
        raise _NoMatch
    quote = text[pos]
    end = text.find(quote, pos + 1)
    if end <= pos + 1:
        raise _NoMatch
    return text[pos + 1 : end], end + 1


def _table_attr(text: str, pos: int) -> tuple[Attr, int]:
    pos = _ms0(text, pos)
    if text.startswith("not null", pos):
        return SingleAttr("not null"), pos + len("not null")
    key, after_key = _ident(text, pos)
    try:
        after = _tag(text, _ms0(text, after_key), ":")
        after = _ms0(text, after)
        try:
            value, after = _quoted(text, after)
        except _NoMatch:
            value, after = _ident(text, after)
    except _NoMatch:
        return SingleAttr(key), after_key
    return KeyValueAttr(key, value), after


def _column(text: str, pos: int) -> tuple[Column, int]:
    name, pos = _ident(text, _ms0(text, pos))
    field_type, pos = _field_type(text, _ms1(text, pos))
    try:
        attrs, after = _bracketed(text, _ms1(text, pos), _table_attr, _comma)
    except _NoMatch:
        return Column(name, field_type), pos
    return Column(name, field_type, attrs), after


def _column_line(text: str, pos: int) -> tuple[Column, int]:
    column, pos = _column(text, pos)
    return column, _ms0(text, pos)


def _table(text: str, pos: int) -> tuple[Table, int]:
    pos = _tag(text, _ms0(text, pos), "Table")
    pos = _ms1(text, pos)
    name, pos = _ident(text, pos)
    alias, pos = _alias(text, _ms0(text, pos))
    pos = _tag(text, _ms0(text, pos), "{")
    columns, pos = _many(text, pos, _column_line)
    if not columns:
        raise _NoMatch
    pos = _tag(text, pos, "}")
    return Table(name=name, columns=columns, alias=alias), pos


# --- enums ------------------------------------------------------------------


def _enum_attr(text: str, pos: int) -> tuple[str, int]:
    value, pos = _take_while1(text, _space0(text, pos), lambda c: c not in ",]")
    return value.strip(), pos


def _enum_item(text: str, pos: int) -> tuple[EnumItem, int]:
    name, pos = _ident(text, _ms0(text, pos))
    try:
        attrs, after = _bracketed(text, _ms1(text, pos), _enum_attr, _comma)
    except _NoMatch:
        return EnumItem(name), pos
    return EnumItem(name, attrs), after


def _enum_item_line(text: str, pos: int) -> tuple[EnumItem, int]:
    item, pos = _enum_item(text, pos)
    return item, _ms0(text, pos)


def _enum(text: str, pos: int) -> tuple[ColumnEnum, int]:
    pos = _tag(text, _ms0(text, pos), "Enum")
    pos = _ms1(text, pos)
    name, pos = _ident(text, pos)
    pos = _tag(text, _ms0(text, pos), "{")
    items, pos = _many(text, pos, _enum_item_line)
    pos = _tag(text, pos, "}")
    return ColumnEnum(name=name, items=items), pos


# --- relations --------------------------------------------------------------


def _colon(text: str, pos: int) -> int:
    return _ms0(text, _tag(text, _ms0(text, pos), ":"))


def _relation_end(text: str, pos: int) -> tuple[tuple[str | None, str, str], int]:
    first, pos = _ident(text, pos)
    second, pos = _ident(text, _tag(text, pos, "."))
    try:
        third, after = _ident(text, _tag(text, pos, "."))
    except _NoMatch:
        return (None, first, second), pos
    return (first, second, third), after


def _relation_kind(text: str, pos: int) -> tuple[RelationKind, int]:
    pos = _ms0(text, pos)
    operator = next((op for op in _RELATION_OPERATORS if text.startswith(op, pos)), None)
    if operator is None:
        raise _NoMatch
    kind = relation_from_str(operator)
    if kind is None:
        raise _NoMatch
    return kind, _ms0(text, pos + len(operator))


def _action_item(text: str, pos: int) -> tuple[tuple[str, ReferentialAction | None], int]:
    key, pos = _ident(text, pos)
    pos = _ms0(text, _colon(text, pos))
    word = next((w for w in _ACTION_WORDS if text.startswith(w, pos)), None)
    if word is None:
        raise _NoMatch
    return (key, action_from_str(word)), _ms0(text, pos + len(word))


def _action_separator(text: str, pos: int) -> int:
    return _ms0(text, _tag(text, _ms0(text, pos), ","))


def _relation_actions(
    text: str, pos: int
) -> tuple[tuple[ReferentialAction | None, ReferentialAction | None], int]:
    try:
        pairs, after = _bracketed(text, _ms0(text, pos), _action_item, _action_separator)
    except _NoMatch:
        return (None, None), pos
    delete = update = None
    for key, action in pairs:
        if key == "update":
            update = action
        elif key == "delete":
            delete = action
    return (delete, update), after


def _relation(text: str, pos: int) -> tuple[Relation, int]:
    pos = _tag(text, _ms0(text, pos), "Ref")
    pos = _colon(text, pos)
    (from_schema, from_table, from_column), pos = _relation_end(text, pos)
    kind, pos = _relation_kind(text, pos)
    (to_schema, to_table, to_column), pos = _relation_end(text, pos)
    (delete, update), pos = _relation_actions(text, pos)
    relation = Relation(
        from_schema=from_schema,
        from_table=from_table,
        from_column=from_column,
        to_schema=to_schema,
        to_table=to_table,
        to_column=to_column,
        kind=kind,
        update_action=update,
        delete_action=delete,
    )
    return relation, pos


# --- whole documents --------------------------------------------------------


def _definition(text: str, pos: int) -> tuple[Definition, int]:
    pos = _ms0(text, pos)
    for parser in (_table, _enum, _relation):
        try:
            return parser(text, pos)
        except _NoMatch:
            continue
    raise _NoMatch


def _run(parser: _Parser[T], text: str, error: ParserError) -> tuple[T, str]:
    try:
        value, pos = parser(text, 0)
    except _NoMatch:
        raise error from None
    return value, text[pos:]


def _run_many(parser: _Parser[T], text: str) -> tuple[list[T], str]:
    def preceded(source: str, pos: int) -> tuple[T, int]:
        return parser(source, _ms0(source, pos))

    values, pos = _many(text, 0, preceded)
    return values, text[pos:]


def parse_table(text: str) -> tuple[Table, str]:
    """Parse one ``Table`` block; return it and the remaining text."""
    return _run(_table, text, ParserError.parse_table_failed())


def parse_tables(text: str) -> tuple[list[Table], str]:
    """Parse as many ``Table`` blocks as follow one another."""
    return _run_many(_table, text)


def parse_enum(text: str) -> tuple[ColumnEnum, str]:
    """Parse one ``Enum`` block; return it and the remaining text."""
    return _run(_enum, text, ParserError.parse_enum_failed())


def parse_enums(text: str) -> tuple[list[ColumnEnum], str]:
    """Parse as many ``Enum`` blocks as follow one another."""
    return _run_many(_enum, text)


def parse_relation(text: str) -> tuple[Relation, str]:
    """Parse one ``Ref:`` line; return it and the remaining text."""
    return _run(_relation, text, ParserError.parse_enum_failed())


def parse_definition(text: str) -> tuple[Definition, str]:
    """Parse one table, enum or relation definition."""
    return _run(_definition, text, ParserError.parse_enum_failed())


def parse_all(text: str) -> tuple[list[Definition], str]:
    """Parse definitions until one fails; return them and the unparsed rest."""
    return _run_many(_definition, text)
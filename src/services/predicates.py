"""Tiny predicate combinator compiled to SQLAlchemy expressions.

Predicates refer to logical field names (``"reporter.id"``, ``"video.name"``...)
instead of columns. The same predicate can then be compiled against the listed
rows and against an aliased copy of the table, which is how the blocklist
reaches both the listing and the aggregate counters.

    pred = IsNotNull("video.id") & Matches("video.name", "cat")
    stmt = stmt.where(pred.compile(fields))
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from sqlalchemy import and_, false, func, not_, or_, true
from sqlalchemy.sql.elements import ColumnElement

FieldMap = Mapping[str, ColumnElement]


def escape_like(value: str) -> str:
    """Escape LIKE wildcard characters in user input."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _column(fields: FieldMap, name: str) -> ColumnElement:
    try:
        return fields[name]
    except KeyError:
        raise KeyError(f"unknown predicate field {name!r}") from None


class Predicate:
    """Base class, subclasses implement ``compile``."""

    def compile(self, fields: FieldMap) -> ColumnElement:
        raise NotImplementedError

    def __and__(self, other: Predicate) -> Predicate:
        return And((self, other))

    def __or__(self, other: Predicate) -> Predicate:
        return Or((self, other))

    def __invert__(self) -> Predicate:
        return Not(self)


@dataclass(frozen=True)
class Always(Predicate):
    def compile(self, fields: FieldMap) -> ColumnElement:
        return true()


@dataclass(frozen=True)
class IsNotNull(Predicate):
    field: str

    def compile(self, fields: FieldMap) -> ColumnElement:
        return _column(fields, self.field).is_not(None)


@dataclass(frozen=True)
class Equals(Predicate):
    field: str
    value: object

    def compile(self, fields: FieldMap) -> ColumnElement:
        return _column(fields, self.field) == self.value


@dataclass(frozen=True)
class Matches(Predicate):
    """Case-insensitive substring match, wildcards in ``term`` are literal."""
    field: str
    term: str

    def compile(self, fields: FieldMap) -> ColumnElement:
        pattern = f"%{escape_like(self.term.lower())}%"
        return func.lower(_column(fields, self.field)).like(pattern, escape="\\")


@dataclass(frozen=True)
class NotIn(Predicate):
    """True unless the field holds one of ``values``. A null field is never in the set."""
    field: str
    values: frozenset

    def __init__(self, field: str, values: Iterable):
        object.__setattr__(self, "field", field)
        object.__setattr__(self, "values", frozenset(values))

    def compile(self, fields: FieldMap) -> ColumnElement:
        if not self.values:
            return true()
        column = _column(fields, self.field)
        return or_(column.is_(None), column.not_in(sorted(self.values)))


@dataclass(frozen=True)
class And(Predicate):
    parts: tuple[Predicate, ...]

    def compile(self, fields: FieldMap) -> ColumnElement:
        if not self.parts:
            return true()
        return and_(*(p.compile(fields) for p in self.parts))

    def __and__(self, other: Predicate) -> Predicate:
        return And(self.parts + (other,))


@dataclass(frozen=True)
class Or(Predicate):
    parts: tuple[Predicate, ...]

    def compile(self, fields: FieldMap) -> ColumnElement:
        if not self.parts:
            return false()
        return or_(*(p.compile(fields) for p in self.parts))

    def __or__(self, other: Predicate) -> Predicate:
        return Or(self.parts + (other,))


@dataclass(frozen=True)
class Not(Predicate):
    part: Predicate

    def compile(self, fields: FieldMap) -> ColumnElement:
        return not_(self.part.compile(fields))


def all_of(predicates: Iterable[Predicate | None]) -> Predicate:
    """Conjunction of the given predicates, skipping ``None``."""
    parts = tuple(p for p in predicates if p is not None and not isinstance(p, Always))
    if not parts:
        return Always()
    if len(parts) == 1:
        return parts[0]
    return And(parts)

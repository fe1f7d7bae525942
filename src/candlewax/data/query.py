"""Immutable statement builders for candlewax.data.

Each builder accumulates clauses through chaining methods and compiles to
a SQL string plus a parameters tuple. Values are always bound as ``?``
parameters; only validated identifiers are ever spliced into the SQL
text. ``Database`` rewrites the placeholders for drivers that number
them (``$1, $2, ...`` on PostgreSQL).

Each chaining method returns a new frozen builder; the original is never
mutated. Same pattern as ``Response.with_*()``.

Usage::

    from candlewax.data.query import Select

    stmt = (
        Select("posts")
        .where("is_published", 1)
        .where("parent_id", None)           # -> posts.parent_id IS NULL
        .left_join("users", "user_id", "id")
        .order_by("posts.created_at DESC")
        .take(10)
        .skip(20)
    )
    stmt.sql     # exactly what will run
    stmt.params  # (1,)

Joined reads alias the ``id``, ``created_at`` and ``updated_at`` columns
of every table as ``<table>_<column>`` so flattened rows stay
unambiguous: ``posts.id AS posts_id``, ``users.id AS users_id``.
The primary table's own columns are selected last so its unaliased
``id`` wins in the flattened row.

Transparency: ``.sql`` and ``.params`` show exactly what will run.
No hidden queries, no magic.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any

from candlewax.data.errors import InvalidOperation

# Columns that collide between joined tables and get a per-table alias.
ALIASED_COLUMNS: tuple[str, ...] = ("id", "created_at", "updated_at")

# Comparison operators accepted in WHERE predicates.
COMPARISONS: frozenset[str] = frozenset(
    {"=", "!=", "<>", "<", ">", "<=", ">=", "LIKE", "NOT LIKE"}
)

# Range of a store INTEGER (SQLite and PostgreSQL BIGINT).
MAX_INTEGER = 2**63 - 1
MIN_INTEGER = -(2**63)

# Negative comparisons render a NULL value as IS NOT NULL.
_NEGATED: frozenset[str] = frozenset({"!=", "<>", "NOT LIKE"})

_IDENT = r"[A-Za-z_][A-Za-z0-9_]*"
_IDENTIFIER_RE = re.compile(rf"^{_IDENT}(?:\.{_IDENT})?$")
_ORDER_ITEM_RE = re.compile(rf"^{_IDENT}(?:\.{_IDENT})?(?:\s+(?:ASC|DESC))?$", re.IGNORECASE)


# =============================================================================
# Validation helpers
# =============================================================================


def check_identifier(name: str) -> str:
    """Return ``name`` if it is a safe ``column`` or ``table.column`` identifier."""
    if not isinstance(name, str) or not _IDENTIFIER_RE.match(name):
        msg = f"Unsafe SQL identifier: {name!r}"
        raise InvalidOperation(msg)
    return name


def check_table(name: str) -> str:
    """Return ``name`` if it is a safe, undotted table identifier."""
    check_identifier(name)
    if "." in name:
        msg = f"Table name must not be qualified: {name!r}"
        raise InvalidOperation(msg)
    return name


def check_comparison(operator: str) -> str:
    """Normalise and validate a comparison operator."""
    normalized = " ".join(str(operator).upper().split())
    if normalized not in COMPARISONS:
        allowed = ", ".join(sorted(COMPARISONS))
        msg = f"Unsupported comparison operator {operator!r}. Allowed: {allowed}"
        raise InvalidOperation(msg)
    return normalized


def check_order_by(clause: str) -> str:
    """Validate an ``ident [ASC|DESC], ...`` ORDER BY clause."""
    items = [item.strip() for item in clause.split(",")]
    if not items or not all(_ORDER_ITEM_RE.match(item) for item in items):
        msg = f"Unsafe ORDER BY clause: {clause!r}"
        raise InvalidOperation(msg)
    return ", ".join(" ".join(item.split()) for item in items)


def _check_count(value: int | None, what: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= MAX_INTEGER:
        msg = f"{what} must be an integer between 0 and {MAX_INTEGER}, got {value!r}"
        raise InvalidOperation(msg)
    return value


def _check_param(column: str, value: object) -> object:
    if isinstance(value, int) and not MIN_INTEGER <= value <= MAX_INTEGER:
        msg = f"Value for {column} does not fit a 64-bit integer: {value!r}"
        raise InvalidOperation(msg)
    return value


def _qualify(table: str, column: str) -> str:
    """Prefix an unqualified column with its table."""
    return column if "." in column else f"{table}.{column}"


def _predicates(
    wheres: Iterable[tuple[str, object]],
    comparison: str,
) -> tuple[list[str], list[object]]:
    """Render ANDed predicates. ``None`` values become ``IS [NOT] NULL``."""
    clauses: list[str] = []
    params: list[object] = []
    for column, value in wheres:
        if value is None:
            clauses.append(f"{column} IS NOT NULL" if comparison in _NEGATED else f"{column} IS NULL")
        else:
            clauses.append(f"{column} {comparison} ?")
            params.append(_check_param(column, value))
    return clauses, params


def _where_pairs(columns: Mapping[str, object] | None) -> tuple[tuple[str, object], ...]:
    if not columns:
        return ()
    return tuple((check_identifier(name), value) for name, value in columns.items())


def _alias_list(table: str, aliased: Sequence[str]) -> list[str]:
    return [f"{table}.{column} AS {table}_{column}" for column in aliased]


# =============================================================================
# SELECT
# =============================================================================


@dataclass(frozen=True, slots=True)
class Join:
    """One ``LEFT JOIN table ON primary.local = table.foreign`` clause."""

    table: str
    local: str
    foreign: str

    def on(self, primary: str) -> str:
        return f"{_qualify(primary, self.local)} = {_qualify(self.table, self.foreign)}"


def _joins_from(join_columns: Mapping[str, Sequence[str]] | None) -> tuple[Join, ...]:
    """Build joins from ``{table: (local_column, foreign_column)}``."""
    if not join_columns:
        return ()
    joins: list[Join] = []
    for table, pair in join_columns.items():
        if isinstance(pair, str) or len(pair) != 2:
            msg = f"Join columns for {table!r} must be a (local, foreign) pair, got {pair!r}"
            raise InvalidOperation(msg)
        local, foreign = pair
        joins.append(Join(check_table(table), check_identifier(local), check_identifier(foreign)))
    return tuple(joins)


@dataclass(frozen=True, slots=True)
class Select:
    """Immutable SELECT builder with optional LEFT JOINs.

    Every method returns a new ``Select``; the original is unchanged.
    """

    table: str
    _wheres: tuple[tuple[str, object], ...] = ()
    _joins: tuple[Join, ...] = ()
    _comparison: str = "="
    _order: str | None = None
    _limit: int | None = None
    _offset: int | None = None
    _aliased: tuple[str, ...] = ALIASED_COLUMNS

    def __post_init__(self) -> None:
        check_table(self.table)

    # ── Building ─────────────────────────────────────────────────────────

    def where(self, column: str, value: object) -> Select:
        """Add a predicate. Multiple calls are ANDed."""
        return replace(self, _wheres=(*self._wheres, (check_identifier(column), value)))

    def where_columns(self, columns: Mapping[str, object] | None) -> Select:
        """Add one predicate per ``{column: value}`` entry."""
        return replace(self, _wheres=(*self._wheres, *_where_pairs(columns)))

    def compare_with(self, operator: str) -> Select:
        """Use ``operator`` instead of ``=`` for every predicate."""
        return replace(self, _comparison=check_comparison(operator))

    def left_join(self, table: str, local: str, foreign: str) -> Select:
        """Add ``LEFT JOIN table ON <primary>.local = table.foreign``."""
        join = Join(check_table(table), check_identifier(local), check_identifier(foreign))
        return replace(self, _joins=(*self._joins, join))

    def left_joins(self, join_columns: Mapping[str, Sequence[str]] | None) -> Select:
        """Add one LEFT JOIN per ``{table: (local, foreign)}`` entry."""
        return replace(self, _joins=(*self._joins, *_joins_from(join_columns)))

    def order_by(self, clause: str | None) -> Select:
        """Set ORDER BY. Replaces any previous ordering; empty clears it."""
        return replace(self, _order=check_order_by(clause) if clause else None)

    def take(self, n: int | None) -> Select:
        """Set LIMIT (max rows to return)."""
        return replace(self, _limit=_check_count(n, "LIMIT"))

    def skip(self, n: int | None) -> Select:
        """Set OFFSET (rows to skip). Only valid together with ``take``."""
        return replace(self, _offset=_check_count(n, "OFFSET"))

    # ── Compilation ──────────────────────────────────────────────────────

    def _columns(self) -> str:
        if not self._joins:
            return "*"
        parts = [f"{join.table}.*" for join in self._joins]
        parts.append(f"{self.table}.*")
        parts.extend(_alias_list(self.table, self._aliased))
        for join in self._joins:
            parts.extend(_alias_list(join.table, self._aliased))
        return ", ".join(parts)

    def _from(self, source: str) -> list[str]:
        parts = [f"FROM {source}"]
        parts.extend(f"LEFT JOIN {join.table} ON {join.on(self.table)}" for join in self._joins)
        return parts

    def _tail(self) -> list[str]:
        parts: list[str] = []
        clauses, _ = _predicates(self._wheres, self._comparison)
        if clauses:
            parts.append("WHERE " + " AND ".join(clauses))
        if self._order:
            parts.append(f"ORDER BY {self._order}")
        if self._limit is not None:
            parts.append(f"LIMIT {self._limit}")
        if self._offset is not None:
            if self._limit is None:
                msg = "OFFSET requires a LIMIT"
                raise InvalidOperation(msg)
            parts.append(f"OFFSET {self._offset}")
        return parts

    @property
    def sql(self) -> str:
        """The exact SQL that will run. No surprises."""
        parts = [f"SELECT {self._columns()}", *self._from(self.table), *self._tail()]
        return " ".join(parts)

    @property
    def params(self) -> tuple[object, ...]:
        """The bound parameters, in order."""
        _, params = _predicates(self._wheres, self._comparison)
        return tuple(params)


@dataclass(frozen=True, slots=True)
class RecursiveSelect:
    """Descendant closure of a parent/child chain, LEFT JOINed like ``Select``.

    Seeds a recursive CTE with the rows matching ``wheres``, then unions
    in every row whose ``child_column`` (e.g. ``parent_id``) equals the
    ``parent_column`` (e.g. ``id``) of a row already in the set. The CTE
    is read back under the table's own name, so ORDER BY clauses such as
    ``posts.created_at DESC`` keep working.

    ``UNION`` (rather than ``UNION ALL``) makes a cyclic chain terminate.
    """

    table: str
    child_column: str = "parent_id"
    parent_column: str = "id"
    _wheres: tuple[tuple[str, object], ...] = ()
    _joins: tuple[Join, ...] = ()
    _order: str | None = None
    _aliased: tuple[str, ...] = ALIASED_COLUMNS

    def __post_init__(self) -> None:
        check_table(self.table)
        check_identifier(self.child_column)
        check_identifier(self.parent_column)

    @classmethod
    def build(
        cls,
        table: str,
        where_columns: Mapping[str, object] | None,
        union_columns: Sequence[str],
        join_columns: Mapping[str, Sequence[str]] | None = None,
        order_by: str | None = None,
    ) -> RecursiveSelect:
        if isinstance(union_columns, str) or len(union_columns) != 2:
            msg = f"union_columns must be a (child, parent) pair, got {union_columns!r}"
            raise InvalidOperation(msg)
        child, parent = union_columns
        return cls(
            table,
            child,
            parent,
            _wheres=_where_pairs(where_columns),
            _joins=_joins_from(join_columns),
            _order=check_order_by(order_by) if order_by else None,
        )

    @property
    def cte_name(self) -> str:
        return f"{self.table}_tree"

    @property
    def sql(self) -> str:
        table, tree = self.table, self.cte_name
        clauses, _ = _predicates(
            ((_qualify(table, column), value) for column, value in self._wheres), "="
        )
        seed = f"SELECT {table}.* FROM {table}"
        if clauses:
            seed += " WHERE " + " AND ".join(clauses)
        step = (
            f"SELECT {table}.* FROM {table} JOIN {tree} "
            f"ON {table}.{self.child_column} = {tree}.{self.parent_column}"
        )
        outer = Select(table, _joins=self._joins, _order=self._order, _aliased=self._aliased)
        parts = [
            f"WITH RECURSIVE {tree} AS ({seed} UNION {step})",
            f"SELECT {outer._columns()}",
            *outer._from(f"{tree} AS {table}"),
            *outer._tail(),
        ]
        return " ".join(parts)

    @property
    def params(self) -> tuple[object, ...]:
        _, params = _predicates(self._wheres, "=")
        return tuple(params)


@dataclass(frozen=True, slots=True)
class RootSelect:
    """Walk parent links upward from ``start_id`` to the row with no parent."""

    table: str
    start_id: int
    parent_column: str = "parent_id"

    def __post_init__(self) -> None:
        check_table(self.table)
        check_identifier(self.parent_column)
        if "." in self.parent_column:
            msg = f"parent_column must not be qualified: {self.parent_column!r}"
            raise InvalidOperation(msg)

    @property
    def sql(self) -> str:
        table, parent = self.table, self.parent_column
        chain = f"{table}_ancestry"
        return (
            f"WITH RECURSIVE {chain} AS ("
            f"SELECT {table}.* FROM {table} WHERE {table}.id = ? "
            f"UNION "
            f"SELECT {table}.* FROM {table} JOIN {chain} ON {table}.id = {chain}.{parent}"
            f") SELECT * FROM {chain} WHERE {parent} IS NULL LIMIT 1"
        )

    @property
    def params(self) -> tuple[object, ...]:
        return (self.start_id,)


@dataclass(frozen=True, slots=True)
class Count:
    """``SELECT COUNT(*)`` with ANDed equality predicates."""

    table: str
    _wheres: tuple[tuple[str, object], ...] = ()

    def __post_init__(self) -> None:
        check_table(self.table)

    @classmethod
    def build(cls, table: str, where_columns: Mapping[str, object] | None = None) -> Count:
        return cls(table, _where_pairs(where_columns))

    @property
    def sql(self) -> str:
        clauses, _ = _predicates(self._wheres, "=")
        sql = f"SELECT COUNT(*) AS count FROM {self.table}"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        return sql

    @property
    def params(self) -> tuple[object, ...]:
        _, params = _predicates(self._wheres, "=")
        return tuple(params)


# =============================================================================
# INSERT / UPDATE / DELETE
# =============================================================================


@dataclass(frozen=True, slots=True)
class Insert:
    """Multi-row ``INSERT ... RETURNING id``.

    Every row must carry exactly the column set of the first row.
    """

    table: str
    columns: tuple[str, ...]
    rows: tuple[tuple[object, ...], ...]

    @classmethod
    def build(cls, table: str, rows: Sequence[Mapping[str, Any]]) -> Insert:
        check_table(table)
        if not rows:
            msg = f"Cannot INSERT into {table!r}: no rows given"
            raise InvalidOperation(msg)
        columns = tuple(rows[0])
        if not columns:
            msg = f"Cannot INSERT into {table!r}: the first row has no columns"
            raise InvalidOperation(msg)
        for column in columns:
            check_identifier(column)
            if "." in column:
                msg = f"INSERT column must not be qualified: {column!r}"
                raise InvalidOperation(msg)
        expected = set(columns)
        values: list[tuple[object, ...]] = []
        for index, row in enumerate(rows):
            if set(row) != expected:
                msg = (
                    f"Row {index} for {table!r} has columns {sorted(row)}, "
                    f"expected {sorted(expected)}"
                )
                raise InvalidOperation(msg)
            values.append(tuple(_check_param(column, row[column]) for column in columns))
        return cls(table, columns, tuple(values))

    @property
    def sql(self) -> str:
        group = "(" + ", ".join("?" for _ in self.columns) + ")"
        groups = ", ".join(group for _ in self.rows)
        return (
            f"INSERT INTO {self.table} ({', '.join(self.columns)}) "
            f"VALUES {groups} RETURNING id"
        )

    @property
    def params(self) -> tuple[object, ...]:
        return tuple(value for row in self.rows for value in row)


@dataclass(frozen=True, slots=True)
class Update:
    """``UPDATE table SET every column WHERE id = ?`` for a single row."""

    table: str
    id: int
    columns: tuple[tuple[str, object], ...]

    def __post_init__(self) -> None:
        check_table(self.table)
        if not self.columns:
            msg = f"Cannot UPDATE {self.table!r} row {self.id}: no columns"
            raise InvalidOperation(msg)
        for column, value in self.columns:
            check_identifier(column)
            _check_param(column, value)

    @property
    def sql(self) -> str:
        assignments = ", ".join(f"{column} = ?" for column, _ in self.columns)
        return f"UPDATE {self.table} SET {assignments} WHERE id = ?"

    @property
    def params(self) -> tuple[object, ...]:
        return (*(value for _, value in self.columns), self.id)


@dataclass(frozen=True, slots=True)
class Delete:
    """``DELETE FROM table WHERE ...`` with ANDed equality predicates.

    An empty predicate set is refused; wiping a table is never implied.
    """

    table: str
    _wheres: tuple[tuple[str, object], ...]

    def __post_init__(self) -> None:
        check_table(self.table)
        if not self._wheres:
            msg = f"Refusing to DELETE from {self.table!r} without a WHERE clause"
            raise InvalidOperation(msg)

    @classmethod
    def build(cls, table: str, where_columns: Mapping[str, object]) -> Delete:
        return cls(table, _where_pairs(where_columns))

    @property
    def sql(self) -> str:
        clauses, _ = _predicates(self._wheres, "=")
        return f"DELETE FROM {self.table} WHERE " + " AND ".join(clauses)

    @property
    def params(self) -> tuple[object, ...]:
        _, params = _predicates(self._wheres, "=")
        return tuple(params)


def numbered_placeholders(sql: str) -> str:
    """Rewrite ``?`` placeholders as ``$1, $2, ...`` (asyncpg style).

    Builders never emit string literals, so every ``?`` is a placeholder.
    """
    counter = 0

    def _next(_: re.Match[str]) -> str:
        nonlocal counter
        counter += 1
        return f"${counter}"

    return re.sub(r"\?", _next, sql)

"""In-memory representation of one persisted row.

An Entity pairs an immutable identity (table, id) with a column mapping
whose key set is fixed when the Entity is built. Values may change;
keys may not. Persisting changes is always an explicit
``Database.update()`` call.
"""

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from candlewax.data.errors import UnknownColumn

# Scalar column values a store can hand back.
type ColumnValue = str | int | float | bool | None


class Entity(Mapping[str, Any]):
    """One row of ``table`` identified by ``id``.

    Read columns by key (``post["title"]``), write them with
    ``set_column``. Both fail with ``UnknownColumn`` for names the
    Entity was not built with::

        post = Entity("posts", 7, {"title": "Hello", "slug": "hello"})
        post.set_column("title", "Hello again")
        post.set_column("votes", 3)  # UnknownColumn
    """

    __slots__ = ("_columns", "_id", "_table")

    def __init__(self, table: str, id: int, columns: Mapping[str, ColumnValue]) -> None:  # noqa: A002
        self._table = table
        self._id = int(id)
        self._columns: dict[str, ColumnValue] = dict(columns)

    @property
    def table(self) -> str:
        return self._table

    @property
    def id(self) -> int:
        return self._id

    @property
    def columns(self) -> Mapping[str, ColumnValue]:
        """Read-only live view of the current column values."""
        return MappingProxyType(self._columns)

    def get_columns(self) -> dict[str, ColumnValue]:
        """Return a copy of the current column values, in column order."""
        return dict(self._columns)

    def set_column(self, column: str, value: ColumnValue) -> None:
        """Change the value of an existing column."""
        if column not in self._columns:
            raise UnknownColumn(self._table, column)
        self._columns[column] = value

    # -- Mapping protocol --

    def __getitem__(self, column: str) -> ColumnValue:
        try:
            return self._columns[column]
        except KeyError:
            raise UnknownColumn(self._table, column) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._columns)

    def __len__(self) -> int:
        return len(self._columns)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return NotImplemented
        return (
            self._table == other._table
            and self._id == other._id
            and self._columns == other._columns
        )

    __hash__ = None  # type: ignore[assignment]  # mutable values

    def __repr__(self) -> str:
        return f"Entity({self._table!r}, {self._id}, {self._columns!r})"

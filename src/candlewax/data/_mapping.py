"""Row-to-Entity mapping.

Converts raw database rows (dicts, as produced by the driver layer) into
``Entity`` objects. The row's ``id`` column becomes the Entity identity
and every other column becomes part of its fixed column set.
"""

from collections.abc import Iterable
from typing import Any

from candlewax.data.entity import Entity
from candlewax.data.errors import InvalidOperation


def map_row(table: str, row: dict[str, Any]) -> Entity:
    """Map a dict-like row to an Entity of ``table``.

    Raises ``InvalidOperation`` if the row has no ``id`` column (for
    example an aggregate SELECT routed through the entity readers).
    """
    columns = dict(row)
    try:
        row_id = columns.pop("id")
    except KeyError:
        msg = f"Row from {table!r} has no 'id' column; cannot build an Entity"
        raise InvalidOperation(msg) from None
    if row_id is None:
        msg = f"Row from {table!r} has a NULL id; cannot build an Entity"
        raise InvalidOperation(msg)
    return Entity(table, int(row_id), columns)


def map_rows(table: str, rows: Iterable[dict[str, Any]]) -> list[Entity]:
    """Map a sequence of dict-like rows to Entities of ``table``."""
    return [map_row(table, row) for row in rows]


def assign_ids(table: str, ids: list[int], rows: list[dict[str, Any]]) -> list[Entity]:
    """Pair inserted rows with the ids the store returned for them.

    Ids are matched to rows in ascending order. When the store returned a
    single id (drivers without multi-row RETURNING) the remaining ids are
    assumed contiguous from it.
    """
    ordered = sorted(int(i) for i in ids)
    if not ordered:
        msg = f"INSERT into {table!r} returned no ids"
        raise InvalidOperation(msg)
    if len(ordered) < len(rows):
        start = ordered[0]
        ordered = [start + offset for offset in range(len(rows))]
    return [Entity(table, row_id, row) for row_id, row in zip(ordered, rows, strict=True)]

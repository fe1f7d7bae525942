"""Generic relational data access for candlewax.

Table and column names in, ``Entity`` objects out. Not an ORM: there are
no model classes, only rows with a fixed column set.

Basic usage::

    from candlewax.data import Database

    db = Database("sqlite:///site.db")
    await db.connect()

    posts = await db.read("posts", {"parent_id": None})
    thread = await db.read_recursive("posts", {"parent_id": 7}, ("parent_id", "id"))

Requires ``anyio`` (SQLite) or ``asyncpg`` (PostgreSQL)::

    pip install candlewax              # SQLite
    pip install candlewax[postgres]    # PostgreSQL
"""

from candlewax.data.database import Database, get_db
from candlewax.data.entity import Entity
from candlewax.data.errors import (
    AlreadyConnected,
    DataError,
    DriverNotInstalledError,
    InvalidOperation,
    NotConnected,
    QueryError,
    StoreUnavailable,
    UnknownColumn,
)

__all__ = [
    "AlreadyConnected",
    "DataError",
    "Database",
    "DriverNotInstalledError",
    "Entity",
    "InvalidOperation",
    "NotConnected",
    "QueryError",
    "StoreUnavailable",
    "UnknownColumn",
    "get_db",
]

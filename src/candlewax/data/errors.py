"""Data layer error hierarchy."""

from candlewax.errors import CandlewaxError


class DataError(CandlewaxError):
    """Base for all candlewax.data errors."""


class DriverNotInstalledError(DataError):
    """Raised when the required database driver is not installed."""


class NotConnected(DataError):  # noqa: N818
    """Raised when an operation runs before ``Database.connect()``."""


class AlreadyConnected(DataError):  # noqa: N818
    """Raised when ``connect()`` is called on a connected Database."""


class InvalidOperation(DataError):
    """Raised when a statement cannot be built from the given arguments.

    Covers empty row sets, mismatched column sets, unsafe identifiers,
    and unsupported comparison operators.
    """


class StoreUnavailable(DataError):  # noqa: N818
    """Raised when the store times out or the connection is lost."""


class QueryError(DataError):
    """Raised when a SQL statement fails inside the driver."""


class UnknownColumn(DataError, KeyError):  # noqa: N818
    """Raised when an Entity is asked for a column it was not built with."""

    def __init__(self, table: str, column: str) -> None:
        self.table = table
        self.column = column
        super().__init__(f"Column {column!r} does not exist in table {table!r}")

    def __str__(self) -> str:
        return str(self.args[0])

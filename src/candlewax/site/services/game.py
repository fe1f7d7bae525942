"""The game catalogue."""

from collections.abc import Mapping
from typing import Any

from candlewax.data import Database, Entity

GAMES_TABLE = "games"
SCREENSHOTS_TABLE = "game_screenshots"


class GameService:
    __slots__ = ("_db",)

    def __init__(self, db: Database) -> None:
        self._db = db

    async def find(self, where: Mapping[str, Any] | None = None) -> list[Entity]:
        return await self._db.read(GAMES_TABLE, where)

    async def get_screenshots(self, where: Mapping[str, Any]) -> list[Entity]:
        return await self._db.read(SCREENSHOTS_TABLE, where)

    async def thumbnail(self, game: Entity) -> Entity | None:
        """The first screenshot of ``game``, used on the catalogue page."""
        shots = await self.get_screenshots({"game_id": game.id})
        return shots[0] if shots else None

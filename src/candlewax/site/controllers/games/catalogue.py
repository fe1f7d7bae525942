"""The game catalogue pages."""

from candlewax.routing.outcomes import Outcome, Render
from candlewax.site.controllers.base import BaseController
from candlewax.site.services.game import GameService
from candlewax.site.services.responder import Responder


class CatalogueController(BaseController):
    def __init__(self, games: GameService, response: Responder) -> None:
        super().__init__(response)
        self.games = games

    async def index_action(self) -> Render:
        games = await self.games.find()
        thumbnails = [await self.games.thumbnail(game) for game in games]
        return self.response.render(
            "games/catalogue/index",
            {
                "games": games,
                "thumbnails": thumbnails,
                "catalogue": list(zip(games, thumbnails, strict=True)),
            },
        )

    async def view_action(self, slug: str) -> Outcome:
        found = await self.games.find({"slug": slug})
        if not found:
            return self.response.forward(CatalogueController, "not_found_action", {"slug": slug})
        game = found[0]
        screenshots = await self.games.get_screenshots({"game_id": game.id})
        return self.response.render(
            "games/catalogue/view", {"game": game, "screenshots": screenshots}
        )

    def not_found_action(self, slug: str) -> Render:
        return self.response.render("games/catalogue/404", {"slug": slug})

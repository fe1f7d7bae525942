"""Candlewax ASGI application.

``App`` owns the pieces a running site needs: the router, the database
whose lifecycle it manages, and an optional session store. It is a
plain ASGI 3 callable; serve it with any ASGI server.
"""

import logging

from candlewax._internal.asgi import Receive, Scope, Send
from candlewax.config import AppConfig
from candlewax.data.database import Database
from candlewax.http.sessions import SessionStore
from candlewax.routing.router import Router
from candlewax.server.handler import handle_request

logger = logging.getLogger("candlewax.server")


class App:
    """The ASGI entry point.

    Lifespan startup connects the database and shutdown disconnects it,
    so the connection lives exactly as long as the server process.

    Usage::

        app = App(router, db=Database(config.database_url), config=config)
    """

    __slots__ = ("_config", "_db", "_router", "_sessions")

    def __init__(
        self,
        router: Router,
        *,
        db: Database | None = None,
        sessions: SessionStore | None = None,
        config: AppConfig | None = None,
    ) -> None:
        self._router = router
        self._db = db
        self._sessions = sessions
        self._config = config or AppConfig()

    @property
    def router(self) -> Router:
        return self._router

    @property
    def db(self) -> Database | None:
        return self._db

    @property
    def config(self) -> AppConfig:
        return self._config

    async def startup(self) -> None:
        if self._db is not None and not self._db.connected:
            await self._db.connect()
        logger.info("Started (debug=%s)", self._config.debug)

    async def shutdown(self) -> None:
        if self._db is not None:
            await self._db.disconnect()
        logger.info("Stopped")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return
        if scope["type"] != "http":
            return
        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            db=self._db,
            sessions=self._sessions,
            debug=self._config.debug,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                try:
                    await self.startup()
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

"""ASGI handler: translates ASGI scope/messages to candlewax types.

The only component that touches raw HTTP messages. It reads the body,
parses form fields and uploads, loads the session, runs the router, and
sends the Response back through ASGI ``send()``.
"""

import logging
from contextvars import Token
from dataclasses import replace

from candlewax._internal.asgi import Receive, Scope, Send
from candlewax.data.database import Database, _db_var
from candlewax.http.forms import parse_form_data
from candlewax.http.headers import Headers
from candlewax.http.request import Request
from candlewax.http.response import Response
from candlewax.http.sessions import SessionStore
from candlewax.routing.router import Router
from candlewax.server.errors import handle_internal_error
from candlewax.server.sender import send_response

logger = logging.getLogger("candlewax.server")


async def read_body(receive: Receive) -> bytes:
    """Consume the request body from ``http.request`` messages."""
    chunks: list[bytes] = []
    while True:
        message = await receive()
        if message["type"] == "http.disconnect":
            break
        chunks.append(message.get("body", b""))
        if not message.get("more_body", False):
            break
    return b"".join(chunks)


async def build_request(scope: Scope, receive: Receive) -> Request:
    """Create a Request from an ASGI scope, reading and parsing its body."""
    headers = Headers(tuple(scope.get("headers", ())))
    body = await read_body(receive)
    form = parse_form_data(body, headers.get("content-type") or "")
    return Request(
        method=scope["method"],
        path=scope["path"],
        headers=headers,
        form=form,
        query_string=scope.get("query_string", b"").decode("latin-1"),
    )


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    db: Database | None = None,
    sessions: SessionStore | None = None,
    debug: bool = False,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    try:
        request = await build_request(scope, receive)
    except ValueError as exc:
        logger.debug("400 %s %s: %s", scope["method"], scope["path"], exc)
        await send_response(Response(body="Bad Request", status=400), send)
        return
    if sessions is not None:
        request = replace(request, session=sessions.load(request))

    # Lifespan sets the database only in its own task.
    db_token: Token[Database] | None = _db_var.set(db) if db is not None else None
    try:
        response = await router.handle_request(request)
        if sessions is not None:
            cookie = sessions.save(request.session)
            if cookie is not None:
                response = response.with_cookie(cookie)
    except Exception as exc:
        response = handle_internal_error(exc, request, debug=debug)
    finally:
        if db_token is not None:
            _db_var.reset(db_token)

    await send_response(response, send)

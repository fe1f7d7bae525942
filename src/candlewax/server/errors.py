"""The 500 boundary: unexpected exceptions become error responses."""

import html
import logging
import traceback

from candlewax.http.request import Request
from candlewax.http.response import Response

logger = logging.getLogger("candlewax.server")


def handle_internal_error(exc: Exception, request: Request, *, debug: bool) -> Response:
    """Log ``exc`` with its traceback and return a 500 response.

    In debug mode the body carries the escaped traceback; otherwise a
    plain "Internal Server Error".
    """
    logger.exception("500 %s %s", request.method, request.path)
    if debug:
        trace = "".join(traceback.format_exception(exc))
        return Response(body=f"<pre>{html.escape(trace)}</pre>", status=500)
    return Response(
        body="Internal Server Error",
        status=500,
        content_type="text/plain; charset=utf-8",
    )

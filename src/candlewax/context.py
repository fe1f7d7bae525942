"""Request-scoped context via ContextVar.

``request_var`` holds the request being dispatched. The router sets it
before constructing controllers so that request-bound services
(``Responder``, ``View``) can reach the form and session without
having them threaded through every constructor.

Accessing it outside a dispatch raises ``LookupError``.
"""

from contextvars import ContextVar

from candlewax.http.request import Request

request_var: ContextVar[Request] = ContextVar("candlewax_request")


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()

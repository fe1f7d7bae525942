"""HTTP primitives: frozen request, chainable response, forms, sessions."""

from candlewax.http.forms import FormData, UploadFile
from candlewax.http.request import Request
from candlewax.http.response import Response

__all__ = ["FormData", "Request", "Response", "UploadFile"]

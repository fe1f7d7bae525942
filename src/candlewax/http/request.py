"""Immutable HTTP request.

Metadata, form fields, and uploads are read once by the server layer
and frozen. The session is the one mutable part: controllers write
flash messages and login state into it, and the server persists it
after the response is built.
"""

from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, field
from typing import Any

from candlewax.http.cookies import parse_cookies
from candlewax.http.forms import FormData, UploadFile
from candlewax.http.headers import Headers


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Usage::

        request = Request("POST", "/discussion/post/store",
                          form=FormData.from_fields({"title": "Hi"}))
    """

    method: str
    path: str
    headers: Headers = field(default_factory=Headers)
    form: FormData = field(default_factory=FormData)
    session: MutableMapping[str, Any] = field(default_factory=dict)
    query_string: str = ""

    @property
    def files(self) -> Mapping[str, UploadFile]:
        """Uploaded files by form field name."""
        return self.form.files

    @property
    def cookies(self) -> dict[str, str]:
        return parse_cookies(self.headers.get("cookie", ""))

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Path plus query string."""
        if self.query_string:
            return f"{self.path}?{self.query_string}"
        return self.path

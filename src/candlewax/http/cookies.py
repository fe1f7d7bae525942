"""The session cookie on the wire: ``Cookie`` in, ``Set-Cookie`` out."""

from dataclasses import dataclass


def parse_cookies(header: str) -> dict[str, str]:
    """``"a=1; b=2"`` → ``{"a": "1", "b": "2"}``. Pairs without ``=`` are skipped."""
    pairs = (item.partition("=") for item in header.split(";"))
    return {name.strip(): value.strip() for name, sep, value in pairs if sep}


@dataclass(frozen=True, slots=True)
class SetCookie:
    """A site-wide, script-inaccessible cookie (``Path=/; HttpOnly; SameSite=Lax``)."""

    name: str
    value: str
    max_age: int | None = None
    secure: bool = False

    def header_value(self) -> str:
        attributes = [f"{self.name}={self.value}", "Path=/", "HttpOnly", "SameSite=Lax"]
        if self.max_age is not None:
            attributes.append(f"Max-Age={self.max_age}")
        if self.secure:
            attributes.append("Secure")
        return "; ".join(attributes)

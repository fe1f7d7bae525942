"""Outbound mail.

Delivery is the host's concern; the site only needs something with a
``send()``. ``LoggingMailer`` is the default and records messages in
the log instead of sending them.
"""

import logging
from typing import Protocol

logger = logging.getLogger("candlewax.mail")


class Mailer(Protocol):
    def send(self, recipient: str, subject: str, message: str, sender: str) -> bool:
        """Hand an HTML message to the delivery system; True if accepted."""
        ...


class LoggingMailer:
    """A Mailer that logs each message and keeps it in ``outbox``."""

    __slots__ = ("outbox",)

    def __init__(self) -> None:
        self.outbox: list[tuple[str, str, str, str]] = []

    def send(self, recipient: str, subject: str, message: str, sender: str) -> bool:
        logger.info("Mail to %s from %s: %s", recipient, sender, subject)
        self.outbox.append((recipient, subject, message, sender))
        return True

"""Shared fixtures: a schema'd SQLite database and the wired site app."""

from collections.abc import Mapping
from typing import Any

import pytest

from candlewax.config import AppConfig
from candlewax.data import Database
from candlewax.http.sessions import SessionConfig, SignedCookieSessions
from candlewax.site import create_app
from candlewax.site.services.mail import LoggingMailer
from candlewax.testing import TestClient

SCHEMA = """
CREATE TABLE users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    username TEXT NOT NULL,
    email TEXT NOT NULL,
    password TEXT NOT NULL,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE user_profiles (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    bio TEXT,
    image TEXT,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE posts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL DEFAULT '',
    slug TEXT NOT NULL,
    content TEXT NOT NULL,
    is_published INTEGER NOT NULL DEFAULT 1,
    user_id INTEGER,
    parent_id INTEGER,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE games (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    slug TEXT NOT NULL,
    description TEXT,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE game_screenshots (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    game_id INTEGER NOT NULL,
    path TEXT NOT NULL,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE email_verification_tokens (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    token TEXT NOT NULL,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
"""


class RecordingView:
    """Stands in for the template service; the body is the view name."""

    def __init__(self) -> None:
        self.rendered: list[tuple[str, dict[str, Any]]] = []

    def render(self, view: str, data: Mapping[str, Any]) -> str:
        self.rendered.append((view, dict(data)))
        return view

    @property
    def last(self) -> tuple[str, dict[str, Any]]:
        return self.rendered[-1]


@pytest.fixture
async def db(tmp_path):
    """A connected SQLite database with the site schema."""
    database = Database(f"sqlite:///{tmp_path / 'site.db'}")
    await database.connect()
    await database.execute_script(SCHEMA)
    yield database
    await database.disconnect()


@pytest.fixture
def mailer() -> LoggingMailer:
    return LoggingMailer()


@pytest.fixture
def view() -> RecordingView:
    return RecordingView()


@pytest.fixture
def config(tmp_path) -> AppConfig:
    return AppConfig(
        template_dir=tmp_path / "views",
        upload_dir=tmp_path / "uploads",
    )


@pytest.fixture
def app(config, db, mailer, view):
    return create_app(
        config,
        db=db,
        mailer=mailer,
        sessions=SignedCookieSessions(SessionConfig(secret_key="test-secret")),
        view=view,
    )


@pytest.fixture
async def client(app):
    async with TestClient(app) as test_client:
        yield test_client

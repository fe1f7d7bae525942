"""Accounts, login state, e-mail verification, and profiles.

Passwords are hashed with argon2id (``argon2-cffi``). Login state is
two session keys, ``user_id`` and ``username``.
"""

import secrets
from collections.abc import Mapping, MutableMapping
from typing import Any

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from candlewax.data import Database, Entity
from candlewax.site.services.mail import Mailer

USERS_TABLE = "users"
PROFILES_TABLE = "user_profiles"
VERIFY_TABLE = "email_verification_tokens"

SITE_URL = "https://candlewax.games"
NO_REPLY = "no-reply@candlewax.games"
DEFAULT_BIO = "No bio entered."

_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    try:
        return _hasher.verify(hashed, password)
    except (VerificationError, InvalidHashError):
        return False


class UserService:
    __slots__ = ("_db", "_mailer")

    def __init__(self, db: Database, mailer: Mailer) -> None:
        self._db = db
        self._mailer = mailer

    async def create(self, username: str, email: str, password: str) -> Entity:
        """Add a user and the profile row that goes with it."""
        async with self._db.transaction():
            rows = [{"username": username, "email": email, "password": hash_password(password)}]
            user = (await self._db.create(USERS_TABLE, rows))[0]
            await self._db.create(
                PROFILES_TABLE, [{"user_id": user.id, "bio": DEFAULT_BIO, "image": ""}]
            )
        return user

    async def login(
        self, session: MutableMapping[str, Any], email: str, password: str
    ) -> Entity | None:
        users = await self._db.read(USERS_TABLE, {"email": email})
        if not users or not verify_password(password, users[0]["password"]):
            return None
        user = users[0]
        session["user_id"] = user.id
        session["username"] = user["username"]
        return user

    def logout(self, session: MutableMapping[str, Any]) -> None:
        session.pop("user_id", None)
        session.pop("username", None)

    async def find(self, where: Mapping[str, Any]) -> list[Entity]:
        return await self._db.read(USERS_TABLE, where)

    async def find_one(self, where: Mapping[str, Any]) -> Entity | None:
        users = await self.find(where)
        return users[0] if users else None

    def check_password(self, user: Entity, password: str) -> bool:
        return verify_password(password, user["password"])

    async def send_verification_email(self, user_id: int, email: str) -> str:
        """Store a verification token and mail a link containing it.

        Returns the token.
        """
        token = secrets.token_hex(6)
        await self._db.create(VERIFY_TABLE, [{"user_id": user_id, "token": token}])
        message = (
            "Thank you for creating an account at candlewax.games. Please verify your "
            f'email address by clicking the following link: <a href="{SITE_URL}'
            f'/user/account/verify/{token}">Verify your email.</a>'
        )
        self._mailer.send(email, "Verify your email address", message, NO_REPLY)
        return token

    async def verify_email(self, token: str) -> bool:
        """Consume ``token``; True if it was pending."""
        return await self._db.delete(VERIFY_TABLE, {"token": token}) > 0

    async def cancel_email_verification(self, user_id: int) -> None:
        await self._db.delete(VERIFY_TABLE, {"user_id": user_id})

    async def is_username_unique(self, username: str) -> bool:
        return not await self.find({"username": username})

    async def is_email_unique(self, email: str) -> bool:
        return not await self.find({"email": email})

    async def get_profile_info(self, username: str) -> dict[str, Any]:
        """Public profile fields for ``username``; empty when there is no such user."""
        rows = await self._db.read_left_join(
            USERS_TABLE,
            {PROFILES_TABLE: ("id", "user_id")},
            {"users.username": username},
        )
        if not rows:
            return {}
        user = rows[0]
        return {
            "id": user.id,
            "username": user["username"],
            "bio": user["bio"],
            "image": user["image"],
        }

    async def update_user(self, user_id: int, columns: Mapping[str, Any]) -> bool:
        changes = dict(columns)
        if "password" in changes:
            changes["password"] = hash_password(changes["password"])
        return await self._update(USERS_TABLE, {"id": user_id}, changes)

    async def update_profile(self, user_id: int, columns: Mapping[str, Any]) -> bool:
        return await self._update(PROFILES_TABLE, {"user_id": user_id}, columns)

    async def _update(
        self, table: str, where: Mapping[str, Any], columns: Mapping[str, Any]
    ) -> bool:
        entities = await self._db.read(table, where)
        if not entities:
            return False
        entity = entities[0]
        for name, value in columns.items():
            entity.set_column(name, value)
        await self._db.update([entity])
        return True

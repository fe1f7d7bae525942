"""Log in, register, verify e-mail, and edit account details."""

from collections.abc import Mapping

from candlewax.data import Entity
from candlewax.routing.outcomes import Outcome
from candlewax.site.controllers.base import LOGIN_URL, BaseController
from candlewax.site.services.responder import Responder
from candlewax.site.services.user import UserService
from candlewax.validation import (
    ValidationResult,
    Validator,
    alpha_num,
    email,
    min_length,
    same_as,
    validate,
)

EDIT_URL = "/user/account/edit"
VERIFY_SUCCESS = "Email verified successfully!"
VERIFY_FAILURE = (
    "Your email could not be verified. Please request a new verification email and try again."
)


def account_rules() -> dict[str, list[Validator]]:
    return {
        "username": [alpha_num("Username must contain only letters and numbers.")],
        "email": [email("Must be a valid email.")],
        "password": [min_length(8, "Password must be at least 8 characters long.")],
    }


class AccountController(BaseController):
    def __init__(self, response: Responder, users: UserService) -> None:
        super().__init__(response)
        self.users = users

    async def login_action(self, post: Mapping[str, str] | None = None) -> Outcome:
        if not post:
            return self.response.render("user/account/login")

        user = await self.users.login(
            self.response.session, post.get("email", ""), post.get("password", "")
        )
        if user is None:
            errors = {"email": ["The email and password combination are incorrect."]}
            return self.response.render("user/account/login", {"errors": errors})
        return self.response.redirect(f"/u/{user['username']}")

    async def register_action(self, post: Mapping[str, str] | None = None) -> Outcome:
        data = dict(post or {})
        rules = account_rules()
        if "password" in data:
            rules["confirm"] = [same_as(data["password"], "The password fields must match.")]

        result = await self._validate_unique(data, rules)
        if not result:
            self.response.flash("errors", result.errors)
            return self.response.redirect(LOGIN_URL)

        user = await self.users.create(data["username"], data["email"], data["password"])
        await self.users.send_verification_email(user.id, user["email"])
        self.response.flash("messages", ["Account created!"])
        await self.users.login(self.response.session, data["email"], data["password"])
        return self.response.redirect(f"/u/{data['username']}")

    def logout_action(self) -> Outcome:
        self.users.logout(self.response.session)
        return self.response.redirect(LOGIN_URL)

    async def verify_action(self, token: str) -> Outcome:
        verified = await self.users.verify_email(token)
        self.response.flash("messages", [VERIFY_SUCCESS if verified else VERIFY_FAILURE])
        return self.response.redirect(LOGIN_URL)

    async def edit_action(self) -> Outcome:
        if (redirect := self.require_login()) is not None:
            return redirect
        user = await self.users.find_one({"id": self.user_id})
        if user is None:
            self.users.logout(self.response.session)
            return self.response.redirect(LOGIN_URL)
        profile = await self.users.get_profile_info(user["username"])
        columns = user.get_columns()
        columns.pop("password", None)
        return self.response.render("user/account/edit", {"user": columns, "profile": profile})

    async def update_action(self, post: Mapping[str, str] | None = None) -> Outcome:
        if (redirect := self.require_login()) is not None:
            return redirect
        user = await self.users.find_one({"id": self.user_id})
        if user is None:
            return self.response.redirect(LOGIN_URL)

        data = dict(post or {})
        result = await self._validate_unique(data, account_rules(), user)
        errors = {field: list(messages) for field, messages in result.errors.items()}
        if not self.users.check_password(user, data.get("password", "")):
            errors.setdefault("password", []).append("The password was incorrect.")

        if errors:
            self.response.flash("errors", errors)
            return self.response.redirect(EDIT_URL)

        await self.users.update_user(
            user.id, {"username": data["username"], "email": data["email"]}
        )
        self.response.session["username"] = data["username"]
        if data["email"] != user["email"]:
            await self.users.cancel_email_verification(user.id)
            await self.users.send_verification_email(user.id, data["email"])
        self.response.flash("messages", ["Account details updated."])
        return self.response.redirect(EDIT_URL)

    async def update_password_action(self, post: Mapping[str, str] | None = None) -> Outcome:
        if (redirect := self.require_login()) is not None:
            return redirect
        user = await self.users.find_one({"id": self.user_id})
        if user is None:
            return self.response.redirect(LOGIN_URL)

        data = dict(post or {})
        too_short = "Password must be at least 8 characters long."
        rules: dict[str, list[Validator]] = {
            "old_password": [min_length(8, too_short)],
            "new_password": [min_length(8, too_short)],
            "new_confirm": [same_as(data.get("new_password", ""), "The password fields must match.")],
        }
        result = validate(data, rules)
        errors = {field: list(messages) for field, messages in result.errors.items()}
        if not self.users.check_password(user, data.get("old_password", "")):
            errors.setdefault("old_password", []).append("The password was incorrect.")

        if errors:
            self.response.flash("errors", errors)
            return self.response.redirect(EDIT_URL)

        await self.users.update_user(user.id, {"password": data["new_password"]})
        self.response.flash("messages", ["Password updated."])
        return self.response.redirect(EDIT_URL)

    async def _validate_unique(
        self,
        data: Mapping[str, str],
        rules: dict[str, list[Validator]],
        user: Entity | None = None,
    ) -> ValidationResult:
        """Validate ``data`` and check that a new username or e-mail is not taken.

        Without ``user`` (registration) both are always checked.
        """
        result = validate(data, rules)
        errors = {field: list(messages) for field, messages in result.errors.items()}

        username = data.get("username", "")
        if "username" not in errors and (user is None or username != user["username"]):
            if not await self.users.is_username_unique(username):
                errors["username"] = [f"The username {username} is already taken."]

        address = data.get("email", "")
        if "email" not in errors and (user is None or address != user["email"]):
            if not await self.users.is_email_unique(address):
                errors["email"] = [f"The email {address} is already taken."]

        return ValidationResult(data=result.data if not errors else {}, errors=errors)

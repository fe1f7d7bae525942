"""Public profiles and profile editing."""

from collections.abc import Mapping

from candlewax.http.forms import UploadFile
from candlewax.routing.outcomes import Outcome, Render
from candlewax.site.controllers.base import BaseController
from candlewax.site.services.images import ProfileImages
from candlewax.site.services.responder import Responder
from candlewax.site.services.user import UserService

EDIT_URL = "/user/account/edit"


class ProfileController(BaseController):
    def __init__(self, response: Responder, users: UserService, images: ProfileImages) -> None:
        super().__init__(response)
        self.users = users
        self.images = images

    async def index_action(self, username: str) -> Outcome:
        profile = await self.users.get_profile_info(username)
        if not profile:
            return self.response.forward(
                ProfileController, "user_not_found_action", {"username": username}
            )
        return self.response.render("user/profile/index", {"user": profile})

    async def update_action(
        self,
        post: Mapping[str, str] | None = None,
        files: Mapping[str, UploadFile] | None = None,
    ) -> Outcome:
        if (redirect := self.require_login()) is not None:
            return redirect

        columns: dict[str, str] = {}
        image = (files or {}).get("image")
        if image is not None and image.filename:
            stored = await self.images.store(image)
            if stored is None:
                self.response.flash(
                    "errors", {"image": ["The uploaded image was an invalid type or too large."]}
                )
                return self.response.redirect(EDIT_URL)
            previous = await self.users.get_profile_info(self.response.session["username"])
            self.images.remove(previous.get("image", ""))
            columns["image"] = stored

        if post and "bio" in post:
            columns["bio"] = post["bio"]

        if columns:
            await self.users.update_profile(self.user_id, columns)
            self.response.flash("messages", ["Your profile was updated successfully!"])
        return self.response.redirect(EDIT_URL)

    def user_not_found_action(self, username: str) -> Render:
        return self.response.render("user/profile/404", {"username": username})

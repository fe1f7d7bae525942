"""Services consumed by the site's controllers."""

from candlewax.site.services.game import GameService
from candlewax.site.services.images import ProfileImages
from candlewax.site.services.mail import LoggingMailer, Mailer
from candlewax.site.services.post import PostService, ReplyNode
from candlewax.site.services.responder import Responder
from candlewax.site.services.user import UserService

__all__ = [
    "GameService",
    "LoggingMailer",
    "Mailer",
    "PostService",
    "ProfileImages",
    "ReplyNode",
    "Responder",
    "UserService",
]

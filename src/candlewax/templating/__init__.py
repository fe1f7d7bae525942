"""Template rendering through kida."""

from candlewax.templating.view import TemplateRenderer, View, create_environment

__all__ = ["TemplateRenderer", "View", "create_environment"]

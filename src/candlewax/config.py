"""Application configuration.

AppConfig is a frozen dataclass; settings are read as attributes and never
changed after creation.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, database_url="sqlite:///site.db")
    """

    debug: bool = False

    # Routing
    default_module: str = "index"
    controllers_package: str = "candlewax.site.controllers"
    max_forward_depth: int = 10

    # Database
    database_url: str = "sqlite:///candlewax.db"
    database_timeout: float = 30.0
    database_echo: bool = False

    # Templates
    template_dir: str | Path = "views"
    template_suffix: str = ".html"
    autoescape: bool = True

    # Uploads
    upload_dir: str | Path = "public/images/profile"
    max_upload_size: int = 2_000_000

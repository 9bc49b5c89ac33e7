"""HTTP surface of the authentication service."""

from .server import create_app
from .service import ApiSettings

__all__ = ["ApiSettings", "create_app"]

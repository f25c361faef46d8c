"""Route blueprints for the web application."""

from .translation import translation_bp
from .admin import admin_bp
from .line import line_bp

__all__ = [
    "translation_bp",
    "admin_bp",
    "line_bp",
]

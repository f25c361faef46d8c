"""Web application package for WiseNest i18n."""

from .app import create_app

__all__ = ["create_app"]

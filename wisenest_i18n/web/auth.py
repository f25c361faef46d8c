"""Admin session verification for the i18n management routes."""

from __future__ import annotations

import hmac
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import wraps
from typing import Callable, Optional

from flask import current_app, g, jsonify, request

from wisenest_i18n.logger import get_logger

logger = get_logger(__name__)


@dataclass
class AdminUser:
    username: str
    role: str = "admin"


class SessionVerifier(ABC):
    """Verifies the session carried by a request; returns the user or None."""

    @abstractmethod
    def verify(self, req) -> Optional[AdminUser]:
        """Return the admin behind the request, or None to reject it."""


class TokenSessionVerifier(SessionVerifier):
    """Accepts 'Authorization: Bearer <token>' matching the configured admin token."""

    def __init__(self, admin_token: str, username: str = "admin"):
        self.admin_token = admin_token or ""
        self.username = username

    def verify(self, req) -> Optional[AdminUser]:
        if not self.admin_token:
            return None
        header = req.headers.get("Authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token:
            return None
        if not hmac.compare_digest(token.strip().encode("utf-8"), self.admin_token.encode("utf-8")):
            return None
        return AdminUser(username=self.username)


def admin_required(view: Callable):
    """Reject the request with 401 unless the app's session verifier accepts it."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        verifier: SessionVerifier = current_app.extensions["wisenest_i18n"]["session_verifier"]
        user = verifier.verify(request)
        if user is None:
            logger.warning("Rejected unauthenticated admin request to %s", request.path)
            return jsonify({"code": "A001", "message": "Authentication required"}), 401
        g.admin_user = user
        return view(*args, **kwargs)

    return wrapper

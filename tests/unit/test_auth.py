"""Tests for admin session verification."""

import pytest
from flask import Flask, request

from tests.conftest import FakeAIService
from wisenest_i18n.integrations.line import MockLineCapability
from wisenest_i18n.web import create_app
from wisenest_i18n.web.auth import AdminUser, SessionVerifier, TokenSessionVerifier


class HeaderVerifier(SessionVerifier):
    def verify(self, req):
        username = req.headers.get("X-Admin-User")
        return AdminUser(username=username) if username else None


def test_verifier_interface_cannot_be_instantiated():
    with pytest.raises(TypeError):
        SessionVerifier()


def test_token_verifier():
    app = Flask(__name__)
    verifier = TokenSessionVerifier("secret")

    with app.test_request_context(headers={"Authorization": "Bearer secret"}):
        assert verifier.verify(request) == AdminUser(username="admin")
    with app.test_request_context(headers={"Authorization": "Basic secret"}):
        assert verifier.verify(request) is None


def test_empty_configured_token_rejects_everything():
    app = Flask(__name__)
    verifier = TokenSessionVerifier("")

    with app.test_request_context(headers={"Authorization": "Bearer "}):
        assert verifier.verify(request) is None


def test_custom_verifier_guards_admin_routes(config, store):
    app = create_app(config=config, store=store, ai_service=FakeAIService(config),
                     session_verifier=HeaderVerifier(), line=MockLineCapability())
    client = app.test_client()

    assert client.get("/admin/api/i18n/status").status_code == 401
    assert client.get("/admin/api/i18n/status", headers={"X-Admin-User": "editor"}).status_code == 200

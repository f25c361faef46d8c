"""LINE profile and share-link routes for the consumer front end."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from wisenest_i18n.translation.validator import FormValidationError, validate_translated_form

line_bp = Blueprint("line", __name__)


def _line():
    return current_app.extensions["wisenest_i18n"]["line"]


def _user_access_token():
    """The visitor's LINE access token, from X-Line-Access-Token or a bearer header."""
    token = request.headers.get("X-Line-Access-Token", "").strip()
    if token:
        return token
    scheme, _, value = request.headers.get("Authorization", "").partition(" ")
    return value.strip() if scheme.lower() == "bearer" else ""


@line_bp.get("/profile")
def get_profile():
    """LINE profile of the visitor sending the request; null when not logged in."""
    profile = _line().get_profile(_user_access_token() or None)
    return jsonify({
        "code": 0,
        "message": "OK",
        "data": {"loggedIn": profile is not None, "profile": profile.to_dict() if profile else None},
    })


@line_bp.get("/share-url")
def get_share_url():
    params = request.args.to_dict()
    errors = validate_translated_form(params, ["activityId", "title"])
    if errors:
        raise FormValidationError(errors)

    line = _line()
    return jsonify({"code": 0, "message": "OK", "data": {
        "shareUrl": line.share_url(params["activityId"], params["title"]),
        "activityUrl": line.activity_url(params["activityId"]),
    }})

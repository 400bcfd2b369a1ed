from __future__ import annotations

from authlib.integrations.flask_client import OAuthError
from flask import current_app, jsonify, redirect, url_for
from flask_login import current_user, login_user, logout_user

from linkgroups.auth import auth_bp
from linkgroups.extensions import oauth
from linkgroups.services.identity import LOGIN_UNAUTHORIZED, resolve_login


def _client_url(path: str) -> str:
    base = current_app.config.get("FRONTEND_URL")
    if base and not current_app.config.get("IS_PRODUCTION"):
        return base.rstrip("/") + path
    return path


def _fetch_profile() -> dict | None:
    token = oauth.google.authorize_access_token()
    if not token:
        return None
    profile = token.get("userinfo")
    if not profile:
        profile = oauth.google.userinfo(token=token)
    return dict(profile) if profile else None


@auth_bp.route("/google")
def google_login():
    redirect_uri = current_app.config.get("GOOGLE_CALLBACK_URL") or url_for(
        "auth.google_callback", _external=True
    )
    return oauth.google.authorize_redirect(redirect_uri)


@auth_bp.route("/google/callback")
def google_callback():
    try:
        profile = _fetch_profile()
    except OAuthError as exc:
        current_app.logger.warning("google token exchange failed: %s", exc.error)
        return redirect(_client_url("/"))

    result = resolve_login(profile)
    if result.outcome == LOGIN_UNAUTHORIZED:
        return redirect(_client_url("/access-denied"))
    if not result.ok:
        return redirect(_client_url("/"))

    login_user(result.user, remember=True)
    return redirect(_client_url("/"))


@auth_bp.route("/me")
def me():
    if not current_user.is_authenticated:
        return jsonify({"error": "Not authenticated"}), 401
    payload = current_user.as_dict()
    payload["undoWindowSeconds"] = current_app.config["UNDO_WINDOW_SECONDS"]
    return jsonify(payload)


@auth_bp.route("/logout", methods=["POST"])
def logout():
    logout_user()
    return jsonify({"message": "Logged out successfully"})

"""Allow-list gate and mapping of provider profiles to local users."""

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from linkgroups.extensions import db
from linkgroups.models import AllowedEmail, Group, User
from linkgroups.services.common import (
    Conflict,
    NotFound,
    ValidationFailed,
    clean_text,
    normalize_email,
)
from linkgroups.services.groups import DEFAULT_GROUP_NAME

LOGIN_OK = "ok"
LOGIN_NO_PROFILE = "no_profile"
LOGIN_UNAUTHORIZED = "unauthorized"


@dataclass
class LoginResult:
    outcome: str
    user: User | None = None
    created: bool = False

    @property
    def ok(self) -> bool:
        return self.outcome == LOGIN_OK


def is_email_allowed(email: str) -> bool:
    email = normalize_email(email)
    if not email:
        return False
    return AllowedEmail.query.filter_by(email=email).first() is not None


def is_admin_email(email: str) -> bool:
    return normalize_email(email) in current_app.config.get("ADMIN_EMAILS", [])


def resolve_login(profile: dict | None) -> LoginResult:
    if not profile or not clean_text(profile.get("sub")):
        return LoginResult(LOGIN_NO_PROFILE)

    email = normalize_email(profile.get("email"))
    if not is_email_allowed(email):
        current_app.logger.warning("login rejected for %s: not on allow-list", email)
        return LoginResult(LOGIN_UNAUTHORIZED)

    google_id = clean_text(profile.get("sub"))
    user = User.query.filter_by(google_id=google_id).first()
    if user:
        user.name = profile.get("name") or user.name
        user.picture = profile.get("picture") or user.picture
        db.session.commit()
        return LoginResult(LOGIN_OK, user=user)

    user = User(
        google_id=google_id,
        email=email,
        name=profile.get("name"),
        picture=profile.get("picture"),
        is_admin=is_admin_email(email),
    )
    db.session.add(user)
    db.session.flush()
    db.session.add(Group(user_id=user.id, name=DEFAULT_GROUP_NAME))
    db.session.commit()
    current_app.logger.info("created user %s (admin=%s)", email, user.is_admin)
    return LoginResult(LOGIN_OK, user=user, created=True)


def list_allowed_emails() -> list[AllowedEmail]:
    return AllowedEmail.query.order_by(AllowedEmail.created_at.asc()).all()


def add_allowed_email(email) -> AllowedEmail:
    email = normalize_email(email)
    if not email:
        raise ValidationFailed("Email is required")
    if AllowedEmail.query.filter_by(email=email).first():
        raise Conflict("Email is already allowed")
    row = AllowedEmail(email=email)
    db.session.add(row)
    db.session.commit()
    return row


def remove_allowed_email(allowed_id) -> None:
    row = db.session.get(AllowedEmail, clean_text(allowed_id))
    if not row:
        raise NotFound("Allowed email not found")
    db.session.delete(row)
    db.session.commit()

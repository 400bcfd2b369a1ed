import uuid
from datetime import datetime, timezone

from flask_login import UserMixin

from linkgroups.extensions import db, login_manager


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def _iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    google_id = db.Column(db.String(255), unique=True, nullable=False, index=True)
    email = db.Column(db.String(320), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=True)
    picture = db.Column(db.Text, nullable=True)
    is_admin = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    groups = db.relationship("Group", backref="user", lazy=True)
    bookmarks = db.relationship("Bookmark", backref="user", lazy=True)

    def as_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "picture": self.picture,
            "isAdmin": self.is_admin,
        }


@login_manager.user_loader
def load_user(user_id: str):
    return db.session.get(User, user_id)


class AllowedEmail(db.Model):
    __tablename__ = "allowed_emails"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    email = db.Column(db.String(320), unique=True, nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def as_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "createdAt": _iso(self.created_at),
        }


class Group(db.Model):
    __tablename__ = "bookmark_groups"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False, index=True
    )
    name = db.Column(db.String(255), nullable=False)
    deleted = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    __table_args__ = (db.Index("ix_group_user_deleted", "user_id", "deleted"),)

    def as_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "userId": self.user_id,
            "deleted": self.deleted,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class Bookmark(db.Model):
    __tablename__ = "bookmarks"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False, index=True
    )
    group_id = db.Column(
        db.String(36), db.ForeignKey("bookmark_groups.id"), nullable=False, index=True
    )
    url = db.Column(db.Text, nullable=False)
    name = db.Column(db.String(512), nullable=False)
    image = db.Column(db.Text, nullable=False, default="")
    position = db.Column(db.Integer, nullable=False, default=0)
    deleted = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    group = db.relationship("Group", backref="bookmarks")

    __table_args__ = (
        db.Index("ix_bookmark_group_position", "group_id", "position"),
        db.Index("ix_bookmark_user_deleted", "user_id", "deleted"),
    )

    def as_dict(self):
        return {
            "id": self.id,
            "url": self.url,
            "name": self.name,
            "image": self.image or "",
            "groupId": self.group_id,
            "userId": self.user_id,
            "position": self.position,
            "deleted": self.deleted,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }

from __future__ import annotations

from flask import current_app, g, jsonify, request
from sqlalchemy import text

from linkgroups.api import api_bp
from linkgroups.extensions import db
from linkgroups.models import utcnow
from linkgroups.services import bookmarks as bookmark_service
from linkgroups.services import groups as group_service
from linkgroups.services.common import ServiceError
from linkgroups.services.identity import (
    add_allowed_email,
    list_allowed_emails,
    remove_allowed_email,
)
from linkgroups.services.positions import reorder
from linkgroups.services.security import api_login_required


@api_bp.errorhandler(ServiceError)
def handle_service_error(exc: ServiceError):
    db.session.rollback()
    return jsonify({"error": exc.message}), exc.status_code


def _payload() -> dict:
    """Form fields for multipart requests, JSON body otherwise."""
    if request.form:
        return request.form.to_dict()
    return request.get_json(silent=True) or {}


def _ping_database() -> None:
    db.session.execute(text("SELECT 1"))


@api_bp.route("/health")
def health():
    try:
        _ping_database()
    except Exception as exc:
        current_app.logger.error("health check failed: %s", exc)
        return (
            jsonify(
                {
                    "status": "error",
                    "timestamp": utcnow().isoformat(),
                    "database": "disconnected",
                    "error": str(exc),
                }
            ),
            500,
        )
    return jsonify(
        {"status": "ok", "timestamp": utcnow().isoformat(), "database": "connected"}
    )


@api_bp.route("/groups", methods=["GET"])
@api_login_required()
def groups_list():
    items = group_service.list_groups(g.api_user)
    return jsonify([item.as_dict() for item in items])


@api_bp.route("/groups", methods=["POST"])
@api_login_required()
def groups_create():
    payload = request.get_json(silent=True) or {}
    group = group_service.create_group(g.api_user, payload.get("name"))
    return jsonify(group.as_dict()), 201


@api_bp.route("/groups/<group_id>", methods=["PUT"])
@api_login_required()
def groups_update(group_id: str):
    payload = request.get_json(silent=True) or {}
    group = group_service.rename_group(g.api_user, group_id, payload.get("name"))
    return jsonify(group.as_dict())


@api_bp.route("/groups/<group_id>", methods=["DELETE"])
@api_login_required()
def groups_delete(group_id: str):
    group_service.delete_group(
        g.api_user, group_id, request.args.get("selectedGroupId")
    )
    return jsonify({"message": "Group deleted successfully"})


@api_bp.route("/groups/<group_id>/restore", methods=["POST"])
@api_login_required()
def groups_restore(group_id: str):
    group = group_service.restore_group(g.api_user, group_id)
    return jsonify(group.as_dict())


@api_bp.route("/allowed-emails", methods=["GET"])
@api_login_required(admin=True)
def allowed_emails_list():
    return jsonify([item.as_dict() for item in list_allowed_emails()])


@api_bp.route("/allowed-emails", methods=["POST"])
@api_login_required(admin=True)
def allowed_emails_create():
    payload = request.get_json(silent=True) or {}
    row = add_allowed_email(payload.get("email"))
    return jsonify(row.as_dict()), 201


@api_bp.route("/allowed-emails/<allowed_id>", methods=["DELETE"])
@api_login_required(admin=True)
def allowed_emails_delete(allowed_id: str):
    remove_allowed_email(allowed_id)
    return jsonify({"message": "Email removed from allowed list"})


@api_bp.route("/bookmarks", methods=["GET"])
@api_login_required()
def bookmarks_list():
    items = bookmark_service.list_bookmarks(g.api_user, request.args.get("groupId"))
    return jsonify([item.as_dict() for item in items])


@api_bp.route("/bookmarks", methods=["POST"])
@api_login_required()
def bookmarks_create():
    payload = _payload()
    bookmark = bookmark_service.create_bookmark(
        g.api_user,
        url=payload.get("url"),
        name=payload.get("name"),
        group_id=payload.get("groupId"),
        image=request.files.get("image"),
    )
    return jsonify(bookmark.as_dict()), 201


@api_bp.route("/bookmarks/reorder", methods=["POST"])
@api_login_required()
def bookmarks_reorder():
    payload = request.get_json(silent=True) or {}
    bookmark_ids = payload.get("bookmarkIds")
    if not isinstance(bookmark_ids, list):
        return jsonify({"error": "bookmarkIds must be an array"}), 400

    updated = reorder(g.api_user.id, bookmark_ids)
    db.session.commit()
    return jsonify({"message": "Bookmarks reordered successfully", "updated": updated})


@api_bp.route("/bookmarks/<bookmark_id>", methods=["PUT"])
@api_login_required()
def bookmarks_update(bookmark_id: str):
    payload = _payload()
    bookmark = bookmark_service.update_bookmark(
        g.api_user,
        bookmark_id,
        url=payload.get("url"),
        name=payload.get("name"),
        image=request.files.get("image"),
    )
    return jsonify(bookmark.as_dict())


@api_bp.route("/bookmarks/<bookmark_id>", methods=["DELETE"])
@api_login_required()
def bookmarks_delete(bookmark_id: str):
    bookmark_service.delete_bookmark(g.api_user, bookmark_id)
    return jsonify({"message": "Bookmark deleted successfully"})


@api_bp.route("/bookmarks/<bookmark_id>/restore", methods=["POST"])
@api_login_required()
def bookmarks_restore(bookmark_id: str):
    bookmark = bookmark_service.restore_bookmark(g.api_user, bookmark_id)
    return jsonify(bookmark.as_dict())


@api_bp.route("/bookmarks/<bookmark_id>/move", methods=["PATCH"])
@api_login_required()
def bookmarks_move(bookmark_id: str):
    payload = request.get_json(silent=True) or {}
    bookmark = bookmark_service.move_bookmark(
        g.api_user, bookmark_id, payload.get("groupId")
    )
    return jsonify(bookmark.as_dict())

"""Ordering of bookmarks inside a group.

Display order is ``position`` ascending. Positions only need to be strictly
increasing in display order, so gaps left by moves and deletes are fine.
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy import func

from linkgroups.extensions import db
from linkgroups.models import Bookmark


def next_position(group_id: str, include_deleted: bool = True) -> int:
    query = db.session.query(func.max(Bookmark.position)).filter(
        Bookmark.group_id == group_id
    )
    if not include_deleted:
        query = query.filter(Bookmark.deleted.is_(False))
    current_max = query.scalar()
    if current_max is None:
        current_max = -1
    return current_max + 1


def append_to_group(bookmark: Bookmark, group_id: str) -> None:
    """Point ``bookmark`` at ``group_id`` and make it the last live entry there."""
    position = next_position(group_id, include_deleted=False)
    bookmark.group_id = group_id
    bookmark.position = position


def reorder(user_id: str, bookmark_ids: list) -> int:
    """Set each listed bookmark's position to its index in ``bookmark_ids``.

    Ids the user does not own are skipped. A repeated id ends up with the
    index of its last occurrence. Returns the number of rows touched.
    """
    updated = 0
    for index, bookmark_id in enumerate(bookmark_ids):
        if bookmark_id is None:
            continue
        updated += (
            Bookmark.query.filter_by(id=str(bookmark_id), user_id=user_id).update(
                {Bookmark.position: index}, synchronize_session="fetch"
            )
        )
    current_app.logger.info(
        "reordered %s of %s bookmarks for user %s",
        updated,
        len(bookmark_ids),
        user_id,
    )
    return updated

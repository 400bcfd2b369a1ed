from __future__ import annotations

from werkzeug.datastructures import FileStorage

from linkgroups.extensions import db
from linkgroups.models import Bookmark, User
from linkgroups.services.common import NotFound, ValidationFailed, clean_text
from linkgroups.services.groups import get_owned_group
from linkgroups.services.images import store_image, validate_image
from linkgroups.services.positions import append_to_group, next_position


def list_bookmarks(user: User, group_id=None) -> list[Bookmark]:
    query = Bookmark.query.filter_by(user_id=user.id, deleted=False)
    group_id = clean_text(group_id)
    if group_id:
        query = query.filter_by(group_id=group_id)
    return query.order_by(Bookmark.position.asc(), Bookmark.created_at.asc()).all()


def get_owned_bookmark(user: User, bookmark_id) -> Bookmark:
    bookmark = Bookmark.query.filter_by(
        id=clean_text(bookmark_id), user_id=user.id
    ).first()
    if not bookmark:
        raise NotFound("Bookmark not found")
    return bookmark


def create_bookmark(
    user: User, url, name, group_id, image: FileStorage | None = None
) -> Bookmark:
    url = clean_text(url)
    name = clean_text(name)
    group_id = clean_text(group_id)
    if not url or not name or not group_id:
        raise ValidationFailed("URL, name, and groupId are required")

    pending = validate_image(image)
    group = get_owned_group(user, group_id, include_deleted=False)

    image_url = ""
    if pending:
        image_url = store_image(pending, user.email).url

    bookmark = Bookmark(
        user_id=user.id,
        group_id=group.id,
        url=url,
        name=name,
        image=image_url,
        position=next_position(group.id),
    )
    db.session.add(bookmark)
    db.session.commit()
    return bookmark


def update_bookmark(
    user: User, bookmark_id, url=None, name=None, image: FileStorage | None = None
) -> Bookmark:
    pending = validate_image(image)
    bookmark = get_owned_bookmark(user, bookmark_id)

    url = clean_text(url)
    name = clean_text(name)
    if url:
        bookmark.url = url
    if name:
        bookmark.name = name
    # the previous object stays in the bucket
    if pending:
        bookmark.image = store_image(pending, user.email).url

    db.session.commit()
    return bookmark


def delete_bookmark(user: User, bookmark_id) -> Bookmark:
    bookmark = get_owned_bookmark(user, bookmark_id)
    bookmark.deleted = True
    db.session.commit()
    return bookmark


def restore_bookmark(user: User, bookmark_id) -> Bookmark:
    bookmark = Bookmark.query.filter_by(
        id=clean_text(bookmark_id), user_id=user.id, deleted=True
    ).first()
    if not bookmark:
        raise NotFound("Deleted bookmark not found")
    bookmark.deleted = False
    db.session.commit()
    return bookmark


def move_bookmark(user: User, bookmark_id, group_id) -> Bookmark:
    group_id = clean_text(group_id)
    if not group_id:
        raise ValidationFailed("groupId is required")

    bookmark = get_owned_bookmark(user, bookmark_id)
    try:
        group = get_owned_group(user, group_id, include_deleted=False)
    except NotFound:
        raise NotFound("Target group not found") from None

    append_to_group(bookmark, group.id)
    db.session.commit()
    return bookmark

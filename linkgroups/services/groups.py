from __future__ import annotations

from linkgroups.extensions import db
from linkgroups.models import Group, User
from linkgroups.services.common import NotFound, ValidationFailed, clean_text

DEFAULT_GROUP_NAME = "main"


def list_groups(user: User) -> list[Group]:
    return (
        Group.query.filter_by(user_id=user.id, deleted=False)
        .order_by(Group.created_at.asc(), Group.id.asc())
        .all()
    )


def get_owned_group(user: User, group_id, include_deleted: bool = True) -> Group:
    query = Group.query.filter_by(id=clean_text(group_id), user_id=user.id)
    if not include_deleted:
        query = query.filter_by(deleted=False)
    group = query.first()
    if not group:
        raise NotFound("Group not found")
    return group


def create_group(user: User, name) -> Group:
    name = clean_text(name)
    if not name:
        raise ValidationFailed("Group name is required")
    group = Group(user_id=user.id, name=name)
    db.session.add(group)
    db.session.commit()
    return group


def rename_group(user: User, group_id, name) -> Group:
    group = get_owned_group(user, group_id)
    name = clean_text(name)
    if not name:
        raise ValidationFailed("Group name is required")
    group.name = name
    db.session.commit()
    return group


def delete_group(user: User, group_id, selected_group_id=None) -> Group:
    """Soft-delete a group unless it is the one the client has selected."""
    group_id = clean_text(group_id)
    if selected_group_id is not None and group_id == clean_text(selected_group_id):
        raise ValidationFailed("Cannot delete the currently selected group")
    group = get_owned_group(user, group_id)
    group.deleted = True
    db.session.commit()
    return group


def restore_group(user: User, group_id) -> Group:
    group = Group.query.filter_by(
        id=clean_text(group_id), user_id=user.id, deleted=True
    ).first()
    if not group:
        raise NotFound("Deleted group not found")
    group.deleted = False
    db.session.commit()
    return group

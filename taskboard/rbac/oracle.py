# ownership and membership over anything with owner_id and members[]
import uuid
from typing import Any

from taskboard.models.enums import ProjectRole

def user_id_of(who: Any) -> uuid.UUID:
    return who if isinstance(who, uuid.UUID) else who.id

def is_owner(who: Any, project: Any) -> bool:
    return project.owner_id == user_id_of(who)

def _entry(who: Any, project: Any):
    uid = user_id_of(who)
    for m in project.members or ():
        if m.user_id == uid:
            return m
    return None

def is_explicit_member(who: Any, project: Any) -> bool:
    return _entry(who, project) is not None

def is_member(who: Any, project: Any) -> bool:
    # the owner counts as a member even without a members[] entry
    return is_owner(who, project) or is_explicit_member(who, project)

def member_sub_role(who: Any, project: Any) -> ProjectRole | None:
    entry = _entry(who, project)
    if entry is None:
        return None
    return ProjectRole(entry.role)

def effective_sub_role(who: Any, project: Any) -> ProjectRole | None:
    # owner always wins over a lesser explicit sub-role
    if is_owner(who, project):
        return ProjectRole.manager
    return member_sub_role(who, project)

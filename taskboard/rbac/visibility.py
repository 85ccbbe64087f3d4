# list filters: boolean clauses ANDed into the route query before paginating
import uuid

from sqlalchemy import ColumnElement, Select, and_, false, or_, select, true
from sqlalchemy.orm import Session

from taskboard.auth.principal import Principal
from taskboard.models.enums import Role
from taskboard.models.project import Project, ProjectMember
from taskboard.models.task import Task
from taskboard.models.user import User
from taskboard.rbac.perms import coerce_role

UNSCOPED_ROLES = (Role.admin, Role.department_head)

def member_project_ids_query(user_id: uuid.UUID) -> Select:
    return select(ProjectMember.project_id).where(ProjectMember.user_id == user_id)

def projects_visible_to(principal: Principal) -> ColumnElement[bool]:
    role = coerce_role(principal.role)
    if role in UNSCOPED_ROLES:
        return true()
    member_of = member_project_ids_query(principal.id)
    if role in (Role.project_lead, Role.team_member):
        return or_(Project.owner_id == principal.id, Project.id.in_(member_of))
    return false()

def visible_project_ids(db: Session, principal: Principal) -> list[uuid.UUID] | None:
    # None means unscoped
    role = coerce_role(principal.role)
    if role in UNSCOPED_ROLES:
        return None
    if role not in (Role.project_lead, Role.team_member):
        return []
    q = select(Project.id).where(
        Project.organization_id == principal.organization_id,
        projects_visible_to(principal),
    )
    return list(db.scalars(q).all())

def tasks_visible_to(principal: Principal, project_ids: list[uuid.UUID] | None) -> ColumnElement[bool]:
    role = coerce_role(principal.role)
    if role in UNSCOPED_ROLES:
        return true()
    ids = list(project_ids or ())
    if role is Role.project_lead:
        return Task.project_id.in_(ids)
    if role is Role.team_member:
        return or_(
            Task.assignee_id == principal.id,
            Task.reporter_id == principal.id,
            Task.project_id.in_(ids),
        )
    return false()

def task_visibility(db: Session, principal: Principal) -> ColumnElement[bool]:
    return tasks_visible_to(principal, visible_project_ids(db, principal))

def users_visible_to(principal: Principal) -> ColumnElement[bool]:
    scoped = User.organization_id == principal.organization_id
    role = coerce_role(principal.role)
    if role is Role.admin:
        return scoped
    if role is None:
        return false()
    return and_(scoped, User.is_active.is_(True), User.is_approved.is_(True))

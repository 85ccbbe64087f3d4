# rank gates routes only; project and task rules switch on the role (admin is view-only on projects)
import logging
from dataclasses import dataclass
from typing import Any, Callable

from taskboard.auth.principal import Principal
from taskboard.errors import Forbidden
from taskboard.models.enums import ProjectRole, Role
from taskboard.rbac import oracle

logger = logging.getLogger("taskboard.rbac")

ROLE_LEVELS: dict[Role, int] = {
    Role.team_member: 1,
    Role.project_lead: 2,
    Role.department_head: 3,
    Role.admin: 4,
}

def coerce_role(role: Role | str | None) -> Role | None:
    if isinstance(role, Role):
        return role
    try:
        return Role(role)
    except ValueError:
        return None

def role_level(role: Role | str | None) -> int:
    r = coerce_role(role)
    return ROLE_LEVELS.get(r, 0) if r is not None else 0

def at_least(role: Role | str | None, min_role: Role | str) -> bool:
    required = role_level(min_role)
    # an unknown minimum must not turn into "everyone"
    if required == 0:
        return False
    return role_level(role) >= required

@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str

    def __bool__(self) -> bool:
        return self.allowed

def allow(reason: str = "allowed") -> Decision:
    return Decision(True, reason)

def deny(reason: str) -> Decision:
    return Decision(False, reason)

ADMIN_VIEW_ONLY = (
    "Admins have view-only access to projects. "
    "Only Department Heads and Project Leads can modify projects."
)
NOT_A_MEMBER = "Access denied. You are not a member of this project."
NO_PROJECT_ACCESS = "Access denied. You do not have access to this project."
NO_TASK_ACCESS = "Access denied. You do not have access to this task."

# projects

def can_create_project(p: Principal) -> Decision:
    role = coerce_role(p.role)
    if role is Role.admin:
        return deny(ADMIN_VIEW_ONLY)
    if role is Role.department_head:
        return allow()
    return deny("Only Department Heads can create projects.")

def can_view_project(p: Principal, project: Any) -> Decision:
    role = coerce_role(p.role)
    if role in (Role.admin, Role.department_head):
        return allow()
    # the owner counts as a member whatever their organization role
    if role in (Role.project_lead, Role.team_member) and oracle.is_member(p, project):
        return allow()
    return deny(NOT_A_MEMBER)

def can_modify_project(p: Principal, project: Any) -> Decision:
    role = coerce_role(p.role)
    if role is Role.admin:
        return deny(ADMIN_VIEW_ONLY)
    if role is Role.department_head:
        return allow()
    if role is Role.project_lead:
        if oracle.effective_sub_role(p, project) is ProjectRole.manager:
            return allow()
    return deny("Access denied. You do not have permission to modify this project.")

def can_delete_project(p: Principal, project: Any) -> Decision:
    role = coerce_role(p.role)
    if role is Role.admin:
        return allow()
    if role is Role.department_head:
        if project.created_by_id == p.id:
            return allow()
        return deny("Only the Department Head who created this project can delete it.")
    return deny("Access denied. You do not have permission to delete this project.")

def can_manage_members(p: Principal, project: Any) -> Decision:
    role = coerce_role(p.role)
    if role is Role.admin:
        return deny(ADMIN_VIEW_ONLY)
    if role is Role.department_head:
        return allow()
    if role is Role.project_lead:
        if oracle.effective_sub_role(p, project) is ProjectRole.manager:
            return allow()
    return deny("Access denied. Only owners and managers can change project members.")

# tasks

def has_project_access(p: Principal, project: Any) -> bool:
    return oracle.is_member(p, project)

def can_create_task(p: Principal, project: Any) -> Decision:
    role = coerce_role(p.role)
    if role in (Role.admin, Role.department_head):
        return allow()
    if role in (Role.project_lead, Role.team_member) and oracle.is_member(p, project):
        return allow()
    return deny(NO_PROJECT_ACCESS)

def can_access_task(p: Principal, project: Any) -> Decision:
    # view, modify and comment share one rule
    role = coerce_role(p.role)
    if role in (Role.admin, Role.department_head):
        return allow()
    if role in (Role.project_lead, Role.team_member) and has_project_access(p, project):
        return allow()
    return deny(NO_TASK_ACCESS)

def can_delete_task(p: Principal, project: Any) -> Decision:
    role = coerce_role(p.role)
    if role in (Role.admin, Role.department_head):
        return allow()
    return deny("Only Admins and Department Heads can delete tasks.")

def can_assign_task(project: Any, assignee: Any) -> Decision:
    if oracle.is_member(assignee, project):
        return allow()
    return deny("Assignee must be a member of the project")

# users

def can_manage_users(p: Principal) -> Decision:
    if at_least(p.role, Role.admin):
        return allow()
    return deny("Access denied. Admin privileges required.")

def can_manage_user(p: Principal, target: Any) -> Decision:
    decision = can_manage_users(p)
    if not decision:
        return decision
    if target.organization_id != p.organization_id:
        return deny("Access denied. User belongs to another organization.")
    return allow()

PROJECT_PERMS: dict[str, Callable[[Principal, Any], Decision]] = {
    "projects:read": can_view_project,
    "projects:update": can_modify_project,
    "projects:delete": can_delete_project,
    "projects:members": can_manage_members,
    "tasks:create": can_create_task,
    "tasks:read": can_access_task,
    "tasks:update": can_access_task,
    "tasks:comment": can_access_task,
    "tasks:delete": can_delete_task,
}

def enforce(decision: Decision, *, action: str = "", principal: Principal | None = None) -> None:
    if decision.allowed:
        return
    if principal is not None:
        logger.info(
            "denied %s for %s (%s): %s",
            action or "operation",
            principal.id,
            getattr(principal.role, "value", principal.role),
            decision.reason,
        )
    raise Forbidden(decision.reason)

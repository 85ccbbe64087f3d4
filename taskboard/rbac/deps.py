import uuid
from dataclasses import dataclass

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from taskboard.auth.deps import get_current_principal
from taskboard.auth.principal import Principal
from taskboard.db import get_db
from taskboard.errors import Forbidden, NotFound
from taskboard.models.enums import Role
from taskboard.models.project import Project
from taskboard.models.task import Task
from taskboard.models.user import User
from taskboard.rbac.perms import PROJECT_PERMS, at_least, enforce

@dataclass
class ProjectContext:
    principal: Principal
    project: Project

@dataclass
class TaskContext:
    principal: Principal
    task: Task
    project: Project

def require_min_role(min_role: Role):
    def _checker(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not at_least(principal.role, min_role):
            raise Forbidden(f"Access denied. Requires {min_role.value} role or higher.")
        return principal

    return _checker

# lookups are always org-scoped: another tenant's id is simply not found

def load_project(db: Session, principal: Principal, project_id: uuid.UUID) -> Project:
    project = db.scalar(
        select(Project).where(
            Project.id == project_id,
            Project.organization_id == principal.organization_id,
        )
    )
    if project is None:
        raise NotFound("Project not found")
    return project

def load_task(db: Session, principal: Principal, task_id: uuid.UUID) -> Task:
    task = db.scalar(
        select(Task).where(
            Task.id == task_id,
            Task.organization_id == principal.organization_id,
        )
    )
    if task is None:
        raise NotFound("Task not found")
    return task

def load_org_user(db: Session, principal: Principal, user_id: uuid.UUID) -> User:
    user = db.scalar(
        select(User).where(
            User.id == user_id,
            User.organization_id == principal.organization_id,
        )
    )
    if user is None:
        raise NotFound("User not found")
    return user

def _perm(action: str):
    decide = PROJECT_PERMS.get(action)
    if decide is None:
        raise RuntimeError(f"unknown permission action: {action}")
    return decide

def require_project_perm(action: str):
    decide = _perm(action)

    def _checker(
        project_id: uuid.UUID,
        principal: Principal = Depends(get_current_principal),
        db: Session = Depends(get_db),
    ) -> ProjectContext:
        project = load_project(db, principal, project_id)
        enforce(decide(principal, project), action=action, principal=principal)
        return ProjectContext(principal=principal, project=project)

    return _checker

def require_task_perm(action: str):
    decide = _perm(action)

    def _checker(
        task_id: uuid.UUID,
        principal: Principal = Depends(get_current_principal),
        db: Session = Depends(get_db),
    ) -> TaskContext:
        task = load_task(db, principal, task_id)
        # decide against the parent project as it is right now
        project = load_project(db, principal, task.project_id)
        enforce(decide(principal, project), action=action, principal=principal)
        return TaskContext(principal=principal, task=task, project=project)

    return _checker

# admin console: admin role only, scoped to the admin's organization
import logging
import uuid

from fastapi import APIRouter, Depends
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from taskboard import cascade
from taskboard.auth.principal import Principal
from taskboard.auth.tokens import now_utc
from taskboard.db import get_db
from taskboard.errors import InvalidPrecondition
from taskboard.models.enums import ProjectStatus, Role, TaskPriority, TaskStatus, TaskType
from taskboard.models.project import Project
from taskboard.models.task import Task
from taskboard.models.user import User
from taskboard.pagination import PageParams, page_params, paginate
from taskboard.rbac.deps import load_org_user, load_project, load_task, require_min_role
from taskboard.rbac.perms import can_delete_project, can_delete_task, can_manage_user, enforce
from taskboard.schemas.admin import AdminUserCreateIn, AdminUserUpdateIn, DashboardCounts, DashboardOut
from taskboard.schemas.common import Envelope, ok
from taskboard.schemas.projects import ProjectList, ProjectOut
from taskboard.schemas.tasks import TaskList, TaskOut
from taskboard.schemas.users import UserList, UserOut
from taskboard.tenancy import same_org

logger = logging.getLogger("taskboard.admin")

router = APIRouter(prefix="/admin", tags=["admin"])

require_admin = require_min_role(Role.admin)

def _target_user(db: Session, admin: Principal, user_id: uuid.UUID) -> User:
    user = load_org_user(db, admin, user_id)
    enforce(can_manage_user(admin, user), action="users:manage", principal=admin)
    return user

def _count(db: Session, model, *criteria) -> int:
    return db.scalar(select(func.count()).select_from(model).where(*criteria)) or 0

@router.get("/dashboard", response_model=Envelope[DashboardOut])
def dashboard(
    admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    in_org_users = same_org(User, admin)
    in_org_tasks = same_org(Task, admin)
    counts = DashboardCounts(
        total_users=_count(db, User, in_org_users),
        admin_users=_count(db, User, in_org_users, User.role == Role.admin),
        pending_users=_count(db, User, in_org_users, User.is_approved.is_(False)),
        total_projects=_count(db, Project, same_org(Project, admin)),
        total_tasks=_count(db, Task, in_org_tasks),
        completed_tasks=_count(db, Task, in_org_tasks, Task.status == TaskStatus.done),
        overdue_tasks=_count(
            db, Task, in_org_tasks, Task.due_date < now_utc(), Task.status != TaskStatus.done
        ),
    )

    recent_users = db.scalars(select(User).where(in_org_users).order_by(User.created_at.desc()).limit(5)).all()
    recent_projects = db.scalars(
        select(Project).where(same_org(Project, admin)).order_by(Project.created_at.desc()).limit(5)
    ).all()
    recent_tasks = db.scalars(select(Task).where(in_org_tasks).order_by(Task.created_at.desc()).limit(10)).all()

    return ok(
        DashboardOut(
            counts=counts,
            recent_users=[UserOut.model_validate(u) for u in recent_users],
            recent_projects=[ProjectOut.model_validate(p) for p in recent_projects],
            recent_tasks=[TaskOut.model_validate(t) for t in recent_tasks],
        )
    )

# users

@router.get("/users", response_model=Envelope[UserList])
def list_users(
    role: Role | None = None,
    search: str | None = None,
    params: PageParams = Depends(page_params),
    admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    q = select(User).where(same_org(User, admin))
    if role is not None:
        q = q.where(User.role == role)
    if search:
        like = f"%{search.strip()}%"
        q = q.where(or_(User.name.ilike(like), User.email.ilike(like)))
    q = q.order_by(User.created_at.desc(), User.id)

    rows, meta = paginate(db, q, params)
    return ok({"users": [UserOut.model_validate(u) for u in rows], "pagination": meta})

@router.get("/users/pending", response_model=Envelope[UserList])
def list_pending_users(
    params: PageParams = Depends(page_params),
    admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    q = (
        select(User)
        .where(same_org(User, admin), User.is_approved.is_(False))
        .order_by(User.created_at.asc(), User.id)
    )
    rows, meta = paginate(db, q, params)
    return ok({"users": [UserOut.model_validate(u) for u in rows], "pagination": meta})

@router.post("/users", response_model=Envelope[UserOut], status_code=201)
def create_user(
    payload: AdminUserCreateIn,
    admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    email = payload.email.lower().strip()
    if db.scalar(select(User.id).where(User.email == email)) is not None:
        raise InvalidPrecondition("User with this email already exists")

    # created by an admin, so approved straight away
    user = User(
        email=email,
        name=payload.name.strip(),
        role=payload.role,
        organization_id=admin.organization_id,
        is_active=True,
        is_approved=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("admin %s created user %s (%s)", admin.id, user.id, user.role.value)
    return ok(UserOut.model_validate(user), "User created successfully")

@router.patch("/users/{user_id}", response_model=Envelope[UserOut])
def update_user(
    user_id: uuid.UUID,
    payload: AdminUserUpdateIn,
    admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    if user_id == admin.id and payload.is_active is False:
        raise InvalidPrecondition("Cannot deactivate your own account")
    if user_id == admin.id and payload.role is not None and payload.role != Role.admin:
        raise InvalidPrecondition("Cannot change your own role")

    user = _target_user(db, admin, user_id)

    if payload.email is not None:
        email = payload.email.lower().strip()
        if email != user.email:
            if db.scalar(select(User.id).where(User.email == email)) is not None:
                raise InvalidPrecondition("Email is already taken")
            user.email = email
    if payload.name is not None:
        user.name = payload.name.strip()
    if payload.role is not None:
        user.role = payload.role
    if payload.is_active is not None:
        user.is_active = payload.is_active

    db.commit()
    db.refresh(user)
    return ok(UserOut.model_validate(user), "User updated successfully")

@router.delete("/users/{user_id}", response_model=Envelope[dict])
def delete_user(
    user_id: uuid.UUID,
    admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    if user_id == admin.id:
        raise InvalidPrecondition("Cannot delete your own account")

    user = _target_user(db, admin, user_id)
    res = cascade.delete_user(db, user, admin)
    db.commit()
    return ok(
        {
            "deleted": True,
            "memberships_removed": res.memberships_removed,
            "tasks_unassigned": res.tasks_unassigned,
            "tasks_reassigned": res.tasks_reassigned,
        },
        "User deleted successfully",
    )

@router.post("/users/{user_id}/approve", response_model=Envelope[UserOut])
def approve_user(
    user_id: uuid.UUID,
    admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    user = _target_user(db, admin, user_id)
    if user.is_approved:
        raise InvalidPrecondition("User is already approved")

    user.is_approved = True
    user.is_active = True
    db.commit()
    db.refresh(user)
    logger.info("admin %s approved user %s", admin.id, user.id)
    return ok(UserOut.model_validate(user), "User approved successfully")

@router.post("/users/{user_id}/reject", response_model=Envelope[dict])
def reject_user(
    user_id: uuid.UUID,
    admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    user = _target_user(db, admin, user_id)
    if user.is_approved:
        raise InvalidPrecondition("Only pending registrations can be rejected")

    # a pending account owns nothing, but go through the cascade anyway
    cascade.delete_user(db, user, admin)
    db.commit()
    logger.info("admin %s rejected registration %s", admin.id, user_id)
    return ok({"rejected": True}, "Registration rejected")

# projects

@router.get("/projects", response_model=Envelope[ProjectList])
def list_projects(
    status: ProjectStatus | None = None,
    search: str | None = None,
    params: PageParams = Depends(page_params),
    admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    q = select(Project).where(same_org(Project, admin))
    if status is not None:
        q = q.where(Project.status == status)
    if search:
        like = f"%{search.strip()}%"
        q = q.where(or_(Project.name.ilike(like), Project.key.ilike(like)))
    q = q.order_by(Project.created_at.desc(), Project.id)

    rows, meta = paginate(db, q, params)
    return ok({"projects": [ProjectOut.model_validate(p) for p in rows], "pagination": meta})

@router.delete("/projects/{project_id}", response_model=Envelope[dict])
def delete_project(
    project_id: uuid.UUID,
    admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    project = load_project(db, admin, project_id)
    enforce(can_delete_project(admin, project), action="projects:delete", principal=admin)
    n = cascade.delete_project(db, project)
    db.commit()
    return ok({"deleted": True, "tasks_deleted": n}, "Project deleted successfully")

# tasks

@router.get("/tasks", response_model=Envelope[TaskList])
def list_tasks(
    status: TaskStatus | None = None,
    priority: TaskPriority | None = None,
    type: TaskType | None = None,
    params: PageParams = Depends(page_params),
    admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    q = select(Task).where(same_org(Task, admin))
    if status is not None:
        q = q.where(Task.status == status)
    if priority is not None:
        q = q.where(Task.priority == priority)
    if type is not None:
        q = q.where(Task.type == type)
    q = q.order_by(Task.created_at.desc(), Task.id)

    rows, meta = paginate(db, q, params)
    return ok({"tasks": [TaskOut.model_validate(t) for t in rows], "pagination": meta})

@router.delete("/tasks/{task_id}", response_model=Envelope[dict])
def delete_task(
    task_id: uuid.UUID,
    admin: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict:
    task = load_task(db, admin, task_id)
    project = load_project(db, admin, task.project_id)
    enforce(can_delete_task(admin, project), action="tasks:delete", principal=admin)
    cascade.delete_task(db, task)
    db.commit()
    return ok({"deleted": True}, "Task deleted successfully")

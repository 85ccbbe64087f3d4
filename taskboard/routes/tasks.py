import logging
import uuid

from fastapi import APIRouter, Depends
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from taskboard import cascade
from taskboard.auth.deps import get_current_principal
from taskboard.auth.principal import Principal
from taskboard.auth.tokens import now_utc
from taskboard.db import get_db
from taskboard.errors import InvalidPrecondition
from taskboard.models.enums import TaskPriority, TaskStatus, TaskType
from taskboard.models.project import Project
from taskboard.models.task import Task, TaskComment, TaskDependency
from taskboard.pagination import PageParams, page_params, paginate
from taskboard.rbac.deps import (
    TaskContext,
    load_org_user,
    load_project,
    load_task,
    require_task_perm,
)
from taskboard.rbac.perms import can_assign_task, can_create_task, can_view_project, enforce
from taskboard.rbac.visibility import task_visibility
from taskboard.schemas.common import Envelope, ok
from taskboard.schemas.tasks import (
    CommentIn,
    DependencyIn,
    TaskCreateIn,
    TaskList,
    TaskOut,
    TaskStatusIn,
    TaskUpdateIn,
)
from taskboard.tenancy import same_org

logger = logging.getLogger("taskboard.tasks")

router = APIRouter(prefix="/tasks", tags=["tasks"])

def _task_out(t: Task) -> TaskOut:
    return TaskOut.model_validate(t)

def _check_assignee(db: Session, principal: Principal, project: Project, assignee_id: uuid.UUID) -> None:
    assignee = load_org_user(db, principal, assignee_id)
    decision = can_assign_task(project, assignee)
    if not decision:
        raise InvalidPrecondition(decision.reason)

def _set_status(t: Task, status: TaskStatus) -> None:
    # any of the four values may follow any other
    t.status = status
    t.completed_at = now_utc() if status == TaskStatus.done else None

@router.get("", response_model=Envelope[TaskList])
def list_tasks(
    project: uuid.UUID | None = None,
    status: TaskStatus | None = None,
    priority: TaskPriority | None = None,
    type: TaskType | None = None,
    assignee: uuid.UUID | None = None,
    search: str | None = None,
    params: PageParams = Depends(page_params),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> dict:
    q = select(Task).where(same_org(Task, principal), task_visibility(db, principal))

    if project is not None:
        project_row = load_project(db, principal, project)
        enforce(can_view_project(principal, project_row), action="tasks:list", principal=principal)
        q = q.where(Task.project_id == project)
    if status is not None:
        q = q.where(Task.status == status)
    if priority is not None:
        q = q.where(Task.priority == priority)
    if type is not None:
        q = q.where(Task.type == type)
    if assignee is not None:
        q = q.where(Task.assignee_id == assignee)
    if search:
        like = f"%{search.strip()}%"
        q = q.where(or_(Task.title.ilike(like), Task.description.ilike(like)))
    q = q.order_by(Task.updated_at.desc(), Task.id)

    rows, meta = paginate(db, q, params)
    return ok({"tasks": [_task_out(t) for t in rows], "pagination": meta})

@router.post("", response_model=Envelope[TaskOut], status_code=201)
def create_task(
    payload: TaskCreateIn,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> dict:
    project = load_project(db, principal, payload.project_id)
    enforce(can_create_task(principal, project), action="tasks:create", principal=principal)

    if payload.assignee_id is not None:
        _check_assignee(db, principal, project, payload.assignee_id)

    t = Task(
        organization_id=principal.organization_id,
        project_id=project.id,
        title=payload.title.strip(),
        description=payload.description.strip(),
        priority=payload.priority,
        type=payload.type,
        reporter_id=principal.id,
        assignee_id=payload.assignee_id,
        due_date=payload.due_date,
        estimated_hours=payload.estimated_hours,
        labels=list(payload.labels),
    )
    _set_status(t, payload.status)
    db.add(t)
    db.commit()
    db.refresh(t)
    return ok(_task_out(t), "Task created successfully")

@router.get("/{task_id}", response_model=Envelope[TaskOut])
def get_task(ctx: TaskContext = Depends(require_task_perm("tasks:read"))) -> dict:
    return ok(_task_out(ctx.task))

@router.patch("/{task_id}", response_model=Envelope[TaskOut])
def update_task(
    payload: TaskUpdateIn,
    ctx: TaskContext = Depends(require_task_perm("tasks:update")),
    db: Session = Depends(get_db),
) -> dict:
    t = ctx.task
    fields = payload.model_fields_set

    # explicit null unassigns; a new assignee must be on the project now
    if "assignee_id" in fields:
        if payload.assignee_id is not None and payload.assignee_id != t.assignee_id:
            _check_assignee(db, ctx.principal, ctx.project, payload.assignee_id)
        t.assignee_id = payload.assignee_id

    for field in ("title", "description", "priority", "type", "labels"):
        if field in fields and getattr(payload, field) is not None:
            setattr(t, field, getattr(payload, field))
    for field in ("due_date", "estimated_hours"):
        if field in fields:
            setattr(t, field, getattr(payload, field))
    if payload.status is not None:
        _set_status(t, payload.status)

    db.add(t)
    db.commit()
    db.refresh(t)
    return ok(_task_out(t), "Task updated successfully")

@router.put("/{task_id}/status", response_model=Envelope[TaskOut])
def update_task_status(
    payload: TaskStatusIn,
    ctx: TaskContext = Depends(require_task_perm("tasks:update")),
    db: Session = Depends(get_db),
) -> dict:
    _set_status(ctx.task, payload.status)
    db.commit()
    db.refresh(ctx.task)
    return ok(_task_out(ctx.task), "Task status updated successfully")

@router.delete("/{task_id}", response_model=Envelope[dict])
def delete_task(
    ctx: TaskContext = Depends(require_task_perm("tasks:delete")),
    db: Session = Depends(get_db),
) -> dict:
    cascade.delete_task(db, ctx.task)
    db.commit()
    return ok({"deleted": True}, "Task deleted successfully")

@router.post("/{task_id}/comments", response_model=Envelope[TaskOut], status_code=201)
def add_comment(
    payload: CommentIn,
    ctx: TaskContext = Depends(require_task_perm("tasks:comment")),
    db: Session = Depends(get_db),
) -> dict:
    ctx.task.comments.append(TaskComment(author_id=ctx.principal.id, content=payload.content.strip()))
    db.commit()
    db.refresh(ctx.task)
    return ok(_task_out(ctx.task), "Comment added successfully")

@router.post("/{task_id}/dependencies", response_model=Envelope[TaskOut], status_code=201)
def add_dependency(
    payload: DependencyIn,
    ctx: TaskContext = Depends(require_task_perm("tasks:update")),
    db: Session = Depends(get_db),
) -> dict:
    t = ctx.task
    if payload.task_id == t.id:
        raise InvalidPrecondition("A task cannot depend on itself")
    other = load_task(db, ctx.principal, payload.task_id)

    existing = db.get(TaskDependency, {"task_id": t.id, "depends_on_id": other.id})
    if existing is not None:
        existing.type = payload.type
    else:
        t.dependencies.append(TaskDependency(depends_on_id=other.id, type=payload.type))

    db.commit()
    db.refresh(t)
    return ok(_task_out(t), "Dependency added successfully")

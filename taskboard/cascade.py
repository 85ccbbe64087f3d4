# ordered deletes: dependants first, flushed step by step, the route commits once
import logging
from dataclasses import dataclass

from sqlalchemy import delete, or_, select, update
from sqlalchemy.orm import Session

from taskboard.auth.principal import Principal
from taskboard.models.auth_magic_link import AuthMagicLink
from taskboard.models.org import Organization
from taskboard.models.project import Project, ProjectMember
from taskboard.models.task import Task, TaskComment, TaskDependency
from taskboard.models.user import User

logger = logging.getLogger("taskboard.cascade")

@dataclass
class UserCascadeResult:
    memberships_removed: int = 0
    tasks_unassigned: int = 0
    tasks_reassigned: int = 0
    projects_reassigned: int = 0

def delete_user(db: Session, user: User, acting: Principal) -> UserCascadeResult:
    if user.id == acting.id:
        raise ValueError("a principal cannot cascade-delete itself")

    res = UserCascadeResult()
    uid = user.id

    res.memberships_removed = db.execute(
        delete(ProjectMember).where(ProjectMember.user_id == uid)
    ).rowcount
    res.tasks_unassigned = db.execute(
        update(Task).where(Task.assignee_id == uid).values(assignee_id=None)
    ).rowcount
    # a task must always have a resolvable reporter
    res.tasks_reassigned = db.execute(
        update(Task).where(Task.reporter_id == uid).values(reporter_id=acting.id)
    ).rowcount

    db.execute(update(Project).where(Project.project_lead_id == uid).values(project_lead_id=None))
    res.projects_reassigned = db.execute(
        update(Project).where(Project.owner_id == uid).values(owner_id=acting.id)
    ).rowcount
    db.execute(update(Project).where(Project.created_by_id == uid).values(created_by_id=acting.id))
    db.execute(update(Organization).where(Organization.admin_id == uid).values(admin_id=acting.id))

    db.execute(update(TaskComment).where(TaskComment.author_id == uid).values(author_id=None))
    db.execute(delete(AuthMagicLink).where(AuthMagicLink.user_id == uid))
    db.flush()

    db.delete(user)
    db.flush()

    logger.info(
        "deleted user %s by %s: %d memberships, %d unassigned, %d reporter reassigned, %d projects reassigned",
        uid,
        acting.id,
        res.memberships_removed,
        res.tasks_unassigned,
        res.tasks_reassigned,
        res.projects_reassigned,
    )
    return res

def delete_project(db: Session, project: Project) -> int:
    pid = project.id
    task_ids = select(Task.id).where(Task.project_id == pid)

    db.execute(delete(TaskComment).where(TaskComment.task_id.in_(task_ids)))
    db.execute(
        delete(TaskDependency).where(
            or_(TaskDependency.task_id.in_(task_ids), TaskDependency.depends_on_id.in_(task_ids))
        )
    )
    # tasks before their project
    n = db.execute(delete(Task).where(Task.project_id == pid)).rowcount
    db.flush()

    db.delete(project)
    db.flush()

    logger.info("deleted project %s with %d tasks", pid, n)
    return n

def delete_task(db: Session, task: Task) -> None:
    db.execute(
        delete(TaskDependency).where(
            or_(TaskDependency.task_id == task.id, TaskDependency.depends_on_id == task.id)
        )
    )
    db.flush()
    db.expire(task, ["dependencies"])
    db.delete(task)
    db.flush()

from taskboard.models.auth_magic_link import AuthMagicLink
from taskboard.models.org import Organization
from taskboard.models.project import Project, ProjectMember
from taskboard.models.task import Task, TaskComment, TaskDependency
from taskboard.models.user import User

__all__ = [
    "AuthMagicLink",
    "Organization",
    "Project",
    "ProjectMember",
    "Task",
    "TaskComment",
    "TaskDependency",
    "User",
]

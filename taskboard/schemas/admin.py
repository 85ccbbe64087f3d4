from pydantic import BaseModel, EmailStr, Field

from taskboard.models.enums import Role
from taskboard.schemas.projects import ProjectOut
from taskboard.schemas.tasks import TaskOut
from taskboard.schemas.users import UserOut

class AdminUserCreateIn(BaseModel):
    email: EmailStr
    name: str = Field(min_length=1, max_length=200)
    role: Role = Role.team_member

class AdminUserUpdateIn(BaseModel):
    name: str | None = Field(default=None, max_length=200)
    email: EmailStr | None = None
    role: Role | None = None
    is_active: bool | None = None

class DashboardCounts(BaseModel):
    total_users: int
    admin_users: int
    pending_users: int
    total_projects: int
    total_tasks: int
    completed_tasks: int
    overdue_tasks: int

class DashboardOut(BaseModel):
    counts: DashboardCounts
    recent_users: list[UserOut]
    recent_projects: list[ProjectOut]
    recent_tasks: list[TaskOut]

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from taskboard.auth.deps import get_current_principal
from taskboard.auth.principal import Principal
from taskboard.db import get_db
from taskboard.errors import InvalidPrecondition, NotFound
from taskboard.models.enums import Role, TaskStatus
from taskboard.models.project import Project, ProjectMember
from taskboard.models.task import Task
from taskboard.models.user import User
from taskboard.pagination import PageParams, page_params, paginate
from taskboard.rbac import oracle
from taskboard.rbac.visibility import member_project_ids_query, users_visible_to
from taskboard.schemas.common import Envelope, ok
from taskboard.schemas.users import (
    ProfileUpdateIn,
    TeamMemberOut,
    TeamOut,
    TeamsOut,
    TeamStatsOut,
    UserList,
    UserOut,
)
from taskboard.tenancy import same_org

router = APIRouter(prefix="/users", tags=["users"])

def _involved_in(principal: Principal):
    # owned projects count even without a member entry
    return or_(Project.owner_id == principal.id, Project.id.in_(member_project_ids_query(principal.id)))

def _member_projects(db: Session, principal: Principal) -> list[Project]:
    q = (
        select(Project)
        .where(same_org(Project, principal), _involved_in(principal))
        .order_by(Project.updated_at.desc())
    )
    return list(db.scalars(q).all())

@router.get("", response_model=Envelope[UserList])
def list_users(
    role: Role | None = None,
    search: str | None = None,
    params: PageParams = Depends(page_params),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> dict:
    q = select(User).where(users_visible_to(principal))
    if role is not None:
        q = q.where(User.role == role)
    if search:
        like = f"%{search.strip()}%"
        q = q.where(or_(User.name.ilike(like), User.email.ilike(like)))
    q = q.order_by(User.created_at.desc(), User.id)

    rows, meta = paginate(db, q, params)
    return ok({"users": [UserOut.model_validate(u) for u in rows], "pagination": meta})

@router.get("/me", response_model=Envelope[UserOut])
def get_profile(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> dict:
    return ok(UserOut.model_validate(db.get(User, principal.id)))

@router.patch("/me", response_model=Envelope[UserOut])
def update_profile(
    payload: ProfileUpdateIn,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> dict:
    user = db.get(User, principal.id)

    if payload.email is not None:
        email = payload.email.lower().strip()
        if email != user.email:
            taken = db.scalar(select(User.id).where(User.email == email))
            if taken is not None:
                raise InvalidPrecondition("Email is already taken")
            user.email = email
    if payload.name is not None:
        user.name = payload.name.strip()

    db.commit()
    db.refresh(user)
    return ok(UserOut.model_validate(user), "Profile updated successfully")

@router.get("/me/teams", response_model=Envelope[TeamsOut])
def my_teams(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> dict:
    teams = []
    for p in _member_projects(db, principal):
        teams.append(
            TeamOut(
                project_id=p.id,
                project_name=p.name,
                project_key=p.key,
                project_status=p.status.value,
                user_role_in_project=oracle.effective_sub_role(principal, p),
                owner_id=p.owner_id,
                members=[
                    TeamMemberOut(user_id=m.user_id, project_role=m.role, joined_at=m.joined_at)
                    for m in p.members
                ],
                member_count=len(p.members),
            )
        )
    return ok(TeamsOut(teams=teams, total_teams=len(teams), user_role=principal.role))

@router.get("/me/stats", response_model=Envelope[TeamStatsOut])
def my_stats(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> dict:
    project_ids = list(
        db.scalars(
            select(Project.id).where(
                same_org(Project, principal),
                _involved_in(principal),
            )
        ).all()
    )

    def _count(*criteria) -> int:
        q = select(func.count()).select_from(Task).where(Task.project_id.in_(project_ids), *criteria)
        return db.scalar(q) or 0

    total = _count()
    assigned = _count(Task.assignee_id == principal.id)
    completed = _count(Task.assignee_id == principal.id, Task.status == TaskStatus.done)
    return ok(
        TeamStatsOut(
            project_count=len(project_ids),
            total_tasks=total,
            assigned_tasks=assigned,
            completed_tasks=completed,
            completion_rate=round(completed / assigned * 100) if assigned else 0,
        )
    )

@router.get("/{user_id}", response_model=Envelope[UserOut])
def get_user(
    user_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> dict:
    user = db.scalar(select(User).where(User.id == user_id, users_visible_to(principal)))
    if user is None:
        raise NotFound("User not found")
    return ok(UserOut.model_validate(user))

import logging
import uuid

from fastapi import APIRouter, Depends
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from taskboard import cascade
from taskboard.auth.deps import get_current_principal
from taskboard.auth.principal import Principal
from taskboard.db import get_db
from taskboard.errors import InvalidPrecondition, NotFound
from taskboard.models.enums import ProjectRole, ProjectStatus
from taskboard.models.project import Project, ProjectMember
from taskboard.models.user import User
from taskboard.pagination import PageParams, page_params, paginate
from taskboard.rbac import oracle
from taskboard.rbac.deps import ProjectContext, load_org_user, require_project_perm
from taskboard.rbac.perms import can_create_project, enforce
from taskboard.rbac.visibility import projects_visible_to
from taskboard.schemas.common import Envelope, ok
from taskboard.schemas.projects import (
    MemberIn,
    ProjectCreateIn,
    ProjectList,
    ProjectOut,
    ProjectUpdateIn,
)
from taskboard.tenancy import same_org

logger = logging.getLogger("taskboard.projects")

router = APIRouter(prefix="/projects", tags=["projects"])

def _project_out(p: Project) -> ProjectOut:
    return ProjectOut.model_validate(p)

def _require_org_users(db: Session, principal: Principal, ids: set[uuid.UUID]) -> None:
    if not ids:
        return
    found = set(
        db.scalars(
            select(User.id).where(User.id.in_(ids), same_org(User, principal))
        ).all()
    )
    missing = ids - found
    if missing:
        raise InvalidPrecondition(f"Unknown users for this organization: {sorted(str(m) for m in missing)}")

def add_member(project: Project, user_id: uuid.UUID, role: ProjectRole) -> ProjectMember:
    # members are a set keyed by user: re-adding updates the sub-role
    for m in project.members:
        if m.user_id == user_id:
            m.role = role
            return m
    m = ProjectMember(user_id=user_id, role=role)
    project.members.append(m)
    return m

@router.get("", response_model=Envelope[ProjectList])
def list_projects(
    status: ProjectStatus | None = None,
    search: str | None = None,
    params: PageParams = Depends(page_params),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> dict:
    q = select(Project).where(same_org(Project, principal), projects_visible_to(principal))
    if status is not None:
        q = q.where(Project.status == status)
    if search:
        like = f"%{search.strip()}%"
        q = q.where(or_(Project.name.ilike(like), Project.key.ilike(like)))
    q = q.order_by(Project.updated_at.desc(), Project.id)

    rows, meta = paginate(db, q, params)
    return ok({"projects": [_project_out(p) for p in rows], "pagination": meta})

@router.post("", response_model=Envelope[ProjectOut], status_code=201)
def create_project(
    payload: ProjectCreateIn,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> dict:
    enforce(can_create_project(principal), action="projects:create", principal=principal)

    key = payload.key.upper()
    if db.scalar(select(Project.id).where(Project.key == key)) is not None:
        raise InvalidPrecondition("Project key already exists")

    lead_id = payload.project_lead_id
    member_ids = {m for m in payload.member_ids if m not in (principal.id, lead_id)}
    _require_org_users(db, principal, member_ids | ({lead_id} if lead_id else set()))

    p = Project(
        organization_id=principal.organization_id,
        name=payload.name.strip(),
        key=key,
        description=payload.description.strip(),
        owner_id=principal.id,
        created_by_id=principal.id,
        project_lead_id=lead_id,
        visibility=payload.visibility,
        tags=list(payload.tags),
        members=[],
    )
    # creator and lead manage, everyone else develops
    add_member(p, principal.id, ProjectRole.manager)
    if lead_id and lead_id != principal.id:
        add_member(p, lead_id, ProjectRole.manager)
    for uid in sorted(member_ids, key=str):
        add_member(p, uid, ProjectRole.developer)

    db.add(p)
    db.commit()
    db.refresh(p)
    logger.info("project %s (%s) created by %s", p.id, p.key, principal.id)
    return ok(_project_out(p), "Project created successfully")

@router.get("/{project_id}", response_model=Envelope[ProjectOut])
def get_project(ctx: ProjectContext = Depends(require_project_perm("projects:read"))) -> dict:
    return ok(_project_out(ctx.project))

@router.patch("/{project_id}", response_model=Envelope[ProjectOut])
def update_project(
    payload: ProjectUpdateIn,
    ctx: ProjectContext = Depends(require_project_perm("projects:update")),
    db: Session = Depends(get_db),
) -> dict:
    p = ctx.project
    for field in ("name", "description", "status", "visibility", "tags"):
        if field in payload.model_fields_set:
            value = getattr(payload, field)
            if value is not None:
                setattr(p, field, value)

    db.add(p)
    db.commit()
    db.refresh(p)
    return ok(_project_out(p), "Project updated successfully")

@router.delete("/{project_id}", response_model=Envelope[dict])
def delete_project(
    ctx: ProjectContext = Depends(require_project_perm("projects:delete")),
    db: Session = Depends(get_db),
) -> dict:
    n = cascade.delete_project(db, ctx.project)
    db.commit()
    return ok({"deleted": True, "tasks_deleted": n}, "Project deleted successfully")

@router.post("/{project_id}/members", response_model=Envelope[ProjectOut])
def add_project_member(
    payload: MemberIn,
    ctx: ProjectContext = Depends(require_project_perm("projects:members")),
    db: Session = Depends(get_db),
) -> dict:
    user = load_org_user(db, ctx.principal, payload.user_id)
    add_member(ctx.project, user.id, payload.role)
    db.commit()
    db.refresh(ctx.project)
    return ok(_project_out(ctx.project), "Member added successfully")

@router.delete("/{project_id}/members/{user_id}", response_model=Envelope[ProjectOut])
def remove_project_member(
    user_id: uuid.UUID,
    ctx: ProjectContext = Depends(require_project_perm("projects:members")),
    db: Session = Depends(get_db),
) -> dict:
    p = ctx.project
    if oracle.is_owner(user_id, p):
        raise InvalidPrecondition("Cannot remove project owner")
    if not oracle.is_explicit_member(user_id, p):
        raise NotFound("Member not found")

    p.members = [m for m in p.members if m.user_id != user_id]
    db.commit()
    db.refresh(p)
    return ok(_project_out(p), "Member removed successfully")

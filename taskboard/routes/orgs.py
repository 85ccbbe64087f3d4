import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from taskboard.auth.deps import get_current_principal
from taskboard.auth.principal import Principal
from taskboard.config import settings
from taskboard.db import get_db
from taskboard.errors import InvalidPrecondition, NotFound
from taskboard.models.enums import Role
from taskboard.models.org import Organization
from taskboard.models.user import User
from taskboard.ratelimit import rate_limit
from taskboard.schemas.common import Envelope, ok
from taskboard.schemas.orgs import OrgCodeCheckOut, OrgCreateIn, OrgOut
from taskboard.tenancy import active_org_by_code, normalize_org_code, unique_org_code

logger = logging.getLogger("taskboard.orgs")

router = APIRouter(prefix="/orgs", tags=["orgs"])

@router.post("", response_model=Envelope[OrgOut], status_code=201)
def create_org(
    payload: OrgCreateIn,
    db: Session = Depends(get_db),
    _: None = Depends(
        rate_limit(
            "orgs:create",
            limit_per_window=settings.rate_limit_org_bootstrap_per_min,
            window_seconds=60,
        )
    ),
) -> dict:
    email = payload.admin_email.lower().strip()
    if db.scalar(select(User.id).where(User.email == email)) is not None:
        raise InvalidPrecondition("User with this email already exists")

    if payload.code:
        code = normalize_org_code(payload.code)
        if db.scalar(select(Organization.id).where(Organization.code == code)) is not None:
            raise InvalidPrecondition("Organization code already in use")
    else:
        code = unique_org_code(db, payload.name)

    org = Organization(name=payload.name.strip(), code=code, description=payload.description)
    db.add(org)
    db.flush()

    # the bootstrap admin is approved on creation
    admin = User(
        email=email,
        name=payload.admin_name.strip(),
        organization_id=org.id,
        role=Role.admin,
        is_active=True,
        is_approved=True,
    )
    db.add(admin)
    db.flush()

    org.admin_id = admin.id
    db.commit()
    db.refresh(org)
    logger.info("created organization %s (%s) with admin %s", org.id, org.code, admin.id)
    return ok(OrgOut.model_validate(org), "Organization created successfully")

@router.get("/validate/{code}", response_model=Envelope[OrgCodeCheckOut])
def validate_code(code: str, db: Session = Depends(get_db)) -> dict:
    try:
        normalized = normalize_org_code(code)
    except InvalidPrecondition:
        return ok(OrgCodeCheckOut(valid=False))

    org = active_org_by_code(db, normalized)
    if org is None:
        return ok(OrgCodeCheckOut(valid=False))
    return ok(OrgCodeCheckOut(valid=True, name=org.name))

@router.get("/current", response_model=Envelope[OrgOut])
def current_org(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> dict:
    org = db.get(Organization, principal.organization_id)
    if org is None:
        raise NotFound("Organization not found")
    return ok(OrgOut.model_validate(org))

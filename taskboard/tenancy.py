# organization scoping and org codes
import re
import secrets
import string

from sqlalchemy import ColumnElement, select
from sqlalchemy.orm import Session

from taskboard.auth.principal import Principal
from taskboard.errors import InvalidPrecondition
from taskboard.models.org import Organization

ORG_CODE_RE = re.compile(r"^[A-Z0-9]{6,12}$")
_CODE_ALPHABET = string.digits + string.ascii_uppercase

def normalize_org_code(raw: str | None) -> str:
    code = (raw or "").strip().upper()
    if not ORG_CODE_RE.fullmatch(code):
        raise InvalidPrecondition("Organization code must be 6-12 alphanumeric characters")
    return code

def generate_org_code(name: str) -> str:
    # up to 3 letters of the name + 6 random base-36 chars, capped at 10
    prefix = re.sub(r"[^A-Z]", "", name[:3].upper())
    rand = "".join(secrets.choice(_CODE_ALPHABET) for _ in range(6))
    return f"{prefix}{rand}"[:10]

def unique_org_code(db: Session, name: str, attempts: int = 10) -> str:
    for _ in range(attempts):
        code = generate_org_code(name)
        if db.scalar(select(Organization.id).where(Organization.code == code)) is None:
            return code
    raise RuntimeError("could not allocate a unique organization code")

def active_org_by_code(db: Session, code: str) -> Organization | None:
    return db.scalar(
        select(Organization).where(Organization.code == code, Organization.is_active.is_(True))
    )

def same_org(model, principal: Principal) -> ColumnElement[bool]:
    return model.organization_id == principal.organization_id

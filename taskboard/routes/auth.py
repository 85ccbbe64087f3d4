from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from taskboard.auth.tokens import (
    as_utc,
    hash_magic_token,
    issue_access_token,
    magic_link_expiry,
    new_magic_token,
    now_utc,
)
from taskboard.config import settings
from taskboard.db import get_db
from taskboard.errors import Forbidden, InvalidPrecondition
from taskboard.models.auth_magic_link import AuthMagicLink
from taskboard.models.enums import Role
from taskboard.models.user import User
from taskboard.ratelimit import rate_limit
from taskboard.schemas.auth import AccessTokenOut, RedeemIn, RegisterIn, RequestLinkIn, RequestLinkOut
from taskboard.schemas.common import Envelope, ok
from taskboard.schemas.users import UserOut
from taskboard.tenancy import active_org_by_code, normalize_org_code

logger = logging.getLogger("taskboard.auth")

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/register", response_model=Envelope[UserOut], status_code=201)
def register(
    payload: RegisterIn,
    db: Session = Depends(get_db),
    _: None = Depends(
        rate_limit(
            "auth:register",
            limit_per_window=settings.rate_limit_register_per_min,
            window_seconds=60,
        )
    ),
) -> dict:
    code = normalize_org_code(payload.organization_code)
    org = active_org_by_code(db, code)
    if org is None:
        raise InvalidPrecondition("Invalid organization code")

    email = payload.email.lower().strip()
    if db.scalar(select(User.id).where(User.email == email)) is not None:
        raise InvalidPrecondition("User with this email already exists")

    # self-registered accounts wait for an admin of the organization
    user = User(
        email=email,
        name=payload.name.strip(),
        organization_id=org.id,
        role=Role.team_member,
        is_active=True,
        is_approved=False,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("registered pending user %s in org %s", user.id, org.code)
    return ok(UserOut.model_validate(user), "Registration submitted. Awaiting admin approval.")

@router.post("/request-link", response_model=Envelope[RequestLinkOut])
def request_link(
    payload: RequestLinkIn,
    db: Session = Depends(get_db),
    _: None = Depends(
        rate_limit(
            "auth:request_link",
            limit_per_window=settings.rate_limit_auth_request_link_per_min,
            window_seconds=60,
        )
    ),
) -> dict:
    email = payload.email.lower().strip()

    user = db.scalar(select(User).where(User.email == email))
    # same answer whether the account is missing, pending or disabled
    if user is None or not user.is_active or not user.is_approved:
        return ok(RequestLinkOut(sent=True))

    token = new_magic_token()
    db.add(
        AuthMagicLink(
            token_hash=hash_magic_token(token),
            user_id=user.id,
            expires_at=magic_link_expiry(),
            used_at=None,
        )
    )
    db.commit()

    if settings.app_env == "prod":
        return ok(RequestLinkOut(token=None, link=f"{settings.base_url}/auth/redeem?token={token}"))

    return ok(RequestLinkOut(sent=True, token=token, link=None))

@router.post("/redeem", response_model=Envelope[AccessTokenOut])
def redeem(
    payload: RedeemIn,
    db: Session = Depends(get_db),
    _: None = Depends(
        rate_limit(
            "auth:redeem",
            limit_per_window=settings.rate_limit_auth_redeem_per_min,
            window_seconds=60,
        )
    ),
) -> dict:
    token = payload.token.strip()
    now = now_utc()

    # atomic single-use + expiry gate
    stmt = (
        update(AuthMagicLink)
        .where(AuthMagicLink.token_hash == hash_magic_token(token))
        .where(AuthMagicLink.used_at.is_(None))
        .where(AuthMagicLink.expires_at > now)
        .values(used_at=now)
        .returning(AuthMagicLink.user_id)
    )

    user_id = db.scalar(stmt)
    if user_id is None:
        row = db.get(AuthMagicLink, hash_magic_token(token))
        if row is None:
            raise InvalidPrecondition("invalid token")
        if row.used_at is not None:
            raise InvalidPrecondition("token already used")
        if as_utc(row.expires_at) <= now:
            raise InvalidPrecondition("token expired")
        raise InvalidPrecondition("invalid token")

    user = db.get(User, user_id)
    if user is None:
        raise InvalidPrecondition("invalid token")
    if not user.is_active or not user.is_approved:
        db.rollback()
        raise Forbidden("Account is not active")

    db.commit()
    return ok(AccessTokenOut(access_token=issue_access_token(user.id)))

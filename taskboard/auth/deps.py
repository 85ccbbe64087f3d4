import logging
import uuid

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from taskboard.auth.principal import Principal
from taskboard.auth.tokens import decode_access_token
from taskboard.db import get_db
from taskboard.errors import Unauthenticated
from taskboard.models.user import User

logger = logging.getLogger("taskboard.auth")

bearer = HTTPBearer(auto_error=False)

# one body for every post-decode failure so a deactivated account
# looks exactly like a missing one
INVALID_CREDENTIALS = "invalid or expired credentials"

def resolve_principal(db: Session, token: str) -> Principal:
    try:
        payload = decode_access_token(token)
        user_id = uuid.UUID(str(payload["sub"]))
    except (jwt.PyJWTError, KeyError, ValueError) as e:
        logger.debug("rejecting bearer token: %s", type(e).__name__)
        raise Unauthenticated(INVALID_CREDENTIALS)

    user = db.get(User, user_id)
    if user is None or not user.is_active or not user.is_approved:
        logger.debug("rejecting token for unusable account %s", user_id)
        raise Unauthenticated(INVALID_CREDENTIALS)

    return Principal.from_user(user)

def get_current_principal(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> Principal:
    if creds is None or creds.scheme.lower() != "bearer":
        raise Unauthenticated("missing bearer token")

    return resolve_principal(db, creds.credentials)

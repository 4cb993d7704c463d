import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from signage.db import get_db
from signage.errors import Unauthenticated
from signage.models.display import Display
from signage.models.user import User
from signage.services.displays import find_display_by_access_token, utcnow

logger = logging.getLogger(__name__)

ACCOUNT_HEADER = "X-Account-ID"

# auto_error=False: a missing header must answer 401 like a bad token does.
bearer_scheme = HTTPBearer(auto_error=False)


def authenticate_token(db: Session, token: str | None) -> Display:
    display = find_display_by_access_token(db, (token or "").strip())
    if display is None:
        raise Unauthenticated("Unauthorized - invalid token")
    return display


def get_current_display(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Display:
    if credentials is None or not credentials.credentials:
        logger.info("Player request without bearer token")
        raise Unauthenticated("Unauthorized - invalid token")
    return authenticate_token(db, credentials.credentials)


def resolve_account_id(request: Request) -> str | None:
    account = (request.headers.get(ACCOUNT_HEADER) or "").strip()
    return account or None


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    account_id = resolve_account_id(request)
    if not account_id:
        raise Unauthenticated("Unauthorized")
    user = db.get(User, account_id)
    if user is None:
        user = User(id=account_id, role="client")
        db.add(user)
    user.updated_at = utcnow()
    try:
        db.commit()
    except IntegrityError:
        # First requests for a new account raced on the insert.
        db.rollback()
        user = db.get(User, account_id)
        if user is None:
            raise
        return user
    db.refresh(user)
    return user

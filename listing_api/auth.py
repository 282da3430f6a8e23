"""
Caller identity.

The gateway authenticates the request and forwards the user id in
X-User-Id; here it is only resolved against the user directory.
"""

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from .database import get_db
from .errors import Unauthenticated
from .models.tables import MAX_ROW_ID, Users
from .services.directory import resolve_user


def get_current_user(
    x_user_id: str | None = Header(None),
    db: Session = Depends(get_db),
) -> Users:
    if not x_user_id:
        raise Unauthenticated("Missing caller identity")

    try:
        user_id = int(x_user_id)
    except ValueError:
        raise Unauthenticated("Invalid caller identity") from None
    if not 0 < user_id <= MAX_ROW_ID:
        raise Unauthenticated("Invalid caller identity")

    user = resolve_user(db, user_id)
    if not user:
        raise Unauthenticated("Unknown or inactive user")
    return user

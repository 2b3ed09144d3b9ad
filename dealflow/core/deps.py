"""FastAPI dependencies for database access and the acting user."""

from typing import Generator
from uuid import UUID

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from dealflow.db.enums import Role
from dealflow.db.session import SessionLocal


# Set by the upstream auth gateway once the session is validated
USER_HEADER = "X-User-Id"


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user_id(
    x_user_id: str | None = Header(default=None, alias=USER_HEADER),
    db: Session = Depends(get_db),
) -> UUID:
    """
    Resolve the acting user from the gateway header.

    Raises:
        HTTPException 401: Header missing, malformed, or unknown user
    """
    from dealflow.db.models import Profile

    if not x_user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        user_id = UUID(x_user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid user header")

    exists = db.query(Profile.id).filter(Profile.id == user_id).first()
    if not exists:
        raise HTTPException(status_code=401, detail="User not found")
    return user_id


ADMIN_ROLES = {Role.ADMIN.value, Role.SUPER_ADMIN.value}


def require_admin(
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> UUID:
    """
    Restrict to admins (workflow configuration).

    Raises:
        HTTPException 403: Acting user is not an admin
    """
    from dealflow.db.models import Profile

    role = db.query(Profile.role).filter(Profile.id == user_id).scalar()
    if role not in ADMIN_ROLES:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user_id

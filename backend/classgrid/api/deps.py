from collections.abc import Generator

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from classgrid.core.exceptions import AuthenticationError, ForbiddenError
from classgrid.core.security import decode_token
from classgrid.db.session import SessionLocal
from classgrid.models.user import User

# Missing credentials are reported through AuthenticationError so every auth
# failure renders in the application error shape.
security = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None:
        raise AuthenticationError("Missing bearer token")
    try:
        payload = decode_token(credentials.credentials)
    except JWTError as exc:
        raise AuthenticationError() from exc

    user_id = payload.get("sub")
    if user_id is None:
        raise AuthenticationError()
    user = db.get(User, user_id)
    if user is None:
        raise AuthenticationError()
    if not user.is_active:
        raise ForbiddenError("User account is inactive")
    return user


def get_current_reviewer(current_user: User = Depends(get_current_user)) -> User:
    """Admins and schedulers; the same gate the change-request review applies."""
    if not current_user.is_reviewer:
        raise ForbiddenError("Only schedulers can access this resource")
    return current_user

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Cookie, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from learnpath.config import get_db, settings
from learnpath.models.models import User
from learnpath.schemas.auth_schemas import AuthTokenPayload
from learnpath.schemas.user_schemas import User as UserSchema
from learnpath.utils.common import commit_or_raise
from learnpath.utils.jwt import create_access_token, get_password_hash, verify_password, verify_token
from learnpath.utils.logger import configure_logging
from learnpath.utils.permissions import PermissionSet

logger = configure_logging()


def to_user_schema(user: User) -> UserSchema:
    return UserSchema(
        id=int(user.id),
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        permissions=list(user.permissions or []),
    )


def get_current_user(access_token: Optional[str] = Cookie(None), db: Session = Depends(get_db)) -> UserSchema:
    if not access_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing token",
        )

    payload = verify_token(access_token)
    if payload.sub is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token"
        )
    user = get_user_by_email(payload.sub, db)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )
    return to_user_schema(user)


def get_permissions(current_user: UserSchema = Depends(get_current_user)) -> PermissionSet:
    return PermissionSet.from_names(current_user.permissions)


def set_auth_cookie(response: Response, user: User) -> None:
    minutes = settings.access_token_expire_minutes
    token = create_access_token(AuthTokenPayload(sub=user.email, exp=datetime.now(timezone.utc) + timedelta(minutes=minutes)))
    response.set_cookie(
        key="access_token",
        value=token,
        httponly=True,
        secure=False,
        samesite="lax",
        max_age=minutes * 60,
    )


def clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(
        key="access_token",
        httponly=True,
        secure=False,
        samesite="lax"
    )


def get_user_by_email(email: str, db: Session) -> User | None:
    return db.query(User).filter(User.email == email.strip().lower()).first()


def create_user(
    email: str,
    password: str,
    db: Session,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    permissions: Optional[list[str]] = None,
) -> User:
    logger.info("creating user email=%s", email)
    user = User(
        email=email.strip().lower(),
        hashed_password=get_password_hash(password),
        first_name=first_name,
        last_name=last_name,
        permissions=PermissionSet.from_names(permissions).to_names(),
    )
    db.add(user)
    commit_or_raise(db, "create user")
    db.refresh(user)
    return user


def authenticate_user(email: str, password: str, db: Session) -> User | None:
    user = get_user_by_email(email, db)
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user

"""
Security Module - Authentication

Tokens are signed JWTs carried in an HttpOnly cookie (or a Bearer header
for API clients). The rest of the app only relies on the pass/fail
contract of ``get_current_user``.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from buffetdesk.core.config import Settings
from buffetdesk.core.database import get_db

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token scheme
bearer_scheme = HTTPBearer(auto_error=False)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password"""
    return pwd_context.hash(password)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def create_access_token(data: dict, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token"""
    to_encode = data.copy()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": datetime.now(timezone.utc) + expires_delta})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> Optional[dict]:
    """Decode and validate a JWT token"""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Dependency to get the current authenticated user.
    Supports both Authorization header and cookies.
    """
    from buffetdesk.services.user_service import UserService

    token = credentials.credentials if credentials else None
    if not token:
        token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        raise _unauthorized("Authentication required")

    payload = decode_access_token(token, settings)
    if payload is None:
        raise _unauthorized("Invalid or expired token")

    username = payload.get("sub")
    if username is None:
        raise _unauthorized("Invalid token payload")

    user = UserService(db).get_by_username(username)
    if user is None:
        raise _unauthorized("User not found")

    return user

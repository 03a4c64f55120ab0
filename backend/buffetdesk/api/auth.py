"""
Authentication API Routes
"""
import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from buffetdesk.core.config import Settings
from buffetdesk.core.database import get_db
from buffetdesk.core.security import create_access_token, get_current_user, get_settings
from buffetdesk.schemas import LoginRequest, MessageResponse, RegisterRequest, Token, UserResponse
from buffetdesk.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])


def _set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        httponly=settings.SESSION_COOKIE_HTTPONLY,
        max_age=int(expires.total_seconds()),
        samesite=settings.SESSION_COOKIE_SAMESITE,
        secure=settings.SESSION_COOKIE_SECURE,
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(
    register_data: RegisterRequest,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Create a staff account and start a session for it"""
    user = UserService(db).create(register_data)
    _set_session_cookie(response, create_access_token({"sub": user.username}, settings), settings)
    logger.info("User '%s' registered", user.username)
    return user


@router.post("/login", response_model=Token)
def login(
    login_data: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Login and get access token"""
    user = UserService(db).authenticate(login_data.username, login_data.password)
    if not user:
        logger.warning("Failed login attempt for username '%s'", login_data.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password"
        )

    access_token = create_access_token({"sub": user.username}, settings)
    _set_session_cookie(response, access_token, settings)
    logger.info("User '%s' logged in", user.username)
    return {"access_token": access_token, "token_type": "bearer"}


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response, settings: Settings = Depends(get_settings)):
    """Logout and clear token"""
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME)
    return {"message": "Logged out successfully"}


@router.get("/user", response_model=UserResponse)
def get_current_user_info(current_user=Depends(get_current_user)):
    """Get current user info"""
    return current_user

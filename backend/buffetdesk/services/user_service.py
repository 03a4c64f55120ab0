"""
User Service - Business Logic for User Operations
"""
from typing import Optional
from sqlalchemy.orm import Session

from buffetdesk.core.exceptions import ValidationError
from buffetdesk.core.security import get_password_hash, verify_password
from buffetdesk.models import User
from buffetdesk.schemas import RegisterRequest


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def create(self, user_data: RegisterRequest, role: str = "admin") -> User:
        if self.get_by_username(user_data.username):
            raise ValidationError("Username already registered")

        user = User(
            username=user_data.username,
            hashed_password=get_password_hash(user_data.password),
            name=user_data.name,
            role=role,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def authenticate(self, username: str, password: str) -> Optional[User]:
        user = self.get_by_username(username)
        if not user or not verify_password(password, user.hashed_password):
            return None
        return user

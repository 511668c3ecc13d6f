# registrar/services/auth_service.py - Staff credential store operations
from sqlalchemy.orm import Session
from sqlalchemy import select
from datetime import datetime
from typing import Optional
import logging

from registrar.core.exceptions import DuplicateUserError
from registrar.core.security import PasswordManager
from registrar.models.user import User, UserRole

logger = logging.getLogger(__name__)


class AuthService:
    """Service class for authentication operations"""

    def __init__(self, db: Session, password_manager: PasswordManager):
        self.db = db
        self.password_manager = password_manager

    def get_by_username(self, username: str) -> Optional[User]:
        return self.db.execute(
            select(User).where(User.username == username.strip())
        ).scalar_one_or_none()

    def create_user(self, username: str, password: str, role: str = UserRole.SECRETARY.value) -> User:
        """
        Create a staff account

        Args:
            username: Login name (unique)
            password: Plain text password (will be hashed)
            role: One of admin, secretary, accountant

        Returns:
            Created User object

        Raises:
            DuplicateUserError: If the username is taken
            ValueError: If the role is unknown
        """
        username = username.strip()
        if role not in [r.value for r in UserRole]:
            raise ValueError(f"Unknown role: {role}")

        if self.get_by_username(username) is not None:
            raise DuplicateUserError(f"User {username} already exists")

        user = User(
            username=username,
            password_hash=self.password_manager.hash_password(password),
            role=role,
            is_active=True,
        )

        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)

        logger.info(f"User created: {username} ({role})")
        return user

    def authenticate(self, username: str, password: str) -> Optional[User]:
        """
        Authenticate a staff member

        Returns:
            User object if authentication successful, None otherwise
        """
        user = self.get_by_username(username)

        if not user or not user.is_active:
            return None

        if not self.password_manager.verify_password(password, user.password_hash):
            return None

        user.last_login = datetime.utcnow()
        self.db.commit()

        logger.info(f"User authenticated: {user.username}")
        return user

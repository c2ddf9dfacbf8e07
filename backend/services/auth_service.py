"""
Auth Service

Credential checks and member registration. Session handling lives outside
this package; login only answers "who is this".
"""

from typing import Any, Optional
import logging

import bcrypt
from sqlalchemy.orm import Session

from config.lending_config import settings
from database import transaction
from dtos.request import UserRegistrationRequest
from exceptions import AuthenticationError
from models import User
from repositories import UserRepository
from .interfaces import IAuthService
from .request_validator import RequestValidator

logger = logging.getLogger(__name__)

_INVALID_CREDENTIALS = "Invalid username or password"


class PasswordHasher:
    """Bcrypt password hashing utility."""

    def __init__(self, rounds: Optional[int] = None) -> None:
        """Initialize with bcrypt rounds (cost factor)."""
        self.rounds = rounds or settings.bcrypt_rounds

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Verify a password against its hash; malformed hashes never match."""
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError as e:
            logger.error(f"Password verification failed: {e}")
            return False


class AuthService(IAuthService):
    """Service for login and registration."""

    def __init__(self, db: Session, hasher: Optional[PasswordHasher] = None):
        self.db = db
        self.user_repo = UserRepository(db)
        self.hasher = hasher or PasswordHasher()

    @staticmethod
    def _clean(value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    def login(self, username: Optional[str], password: Optional[str]) -> User:
        """
        Authenticate a user by username and password.

        Surrounding whitespace on either value is ignored.

        Raises:
            AuthenticationError: On blank input, unknown user or wrong password
        """
        username = self._clean(username)
        password = self._clean(password)
        if username is None:
            raise AuthenticationError("Username is required")
        if password is None:
            raise AuthenticationError("Password is required", username=username)

        user = self.user_repo.find_by_username(username)
        if user is None or not self.hasher.verify(password, user.password_hash):
            logger.warning(f"Failed login for '{username}'")
            raise AuthenticationError(_INVALID_CREDENTIALS, username=username)

        logger.info(f"User {user.id} ('{username}') logged in")
        return user

    def register(self, request: Any) -> User:
        """
        Create an account after checking the username and email are free.

        Args:
            request: UserRegistrationRequest or a dict with the same fields

        Returns:
            The saved user

        Raises:
            AuthenticationError: If request is None or username/email is taken
            ValidationError: If the payload is malformed
        """
        if request is None:
            raise AuthenticationError("Registration details are required")

        request = RequestValidator.validate(UserRegistrationRequest, request, "Registration")

        if self.user_repo.exists_by_username(request.username):
            raise AuthenticationError("Username is already taken", username=request.username)
        if self.user_repo.exists_by_email(request.email):
            raise AuthenticationError("Email is already registered", username=request.username)

        user = User(
            username=request.username,
            email=request.email,
            password_hash=self.hasher.hash(request.password),
            role=request.role.value,
        )
        with transaction(self.db):
            self.user_repo.save(user)

        logger.info(f"Registered user {user.id} ('{user.username}', {user.role})")
        return user

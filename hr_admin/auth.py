"""Credential checks, registration and login."""

import logging
from collections.abc import Mapping
from typing import Any, Optional

from hr_admin.exceptions import AuthenticationError, ConflictError, ValidationError
from hr_admin.models import Principal, PublicUser, Role
from hr_admin.security import PasswordHasher, TokenIssuer
from hr_admin.services import UsersService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "invalid credentials"


class CredentialService:
    """Use case: register accounts and check passwords against the user store."""

    def __init__(self, users: UsersService, hasher: PasswordHasher):
        self._users = users
        self._hasher = hasher

    def register(self, *, username: str, password: str, email: str, role: Role) -> PublicUser:
        logger.info("Registration attempt for user %s", username)
        if not password:
            raise ValidationError("password is required")
        if self._users.find_by_username(username) is not None:
            # fail before spending a bcrypt round; the store re-checks under its lock
            raise ConflictError(f"Username {username} already exists")
        user = self._users.create(
            {
                "username": username,
                "password_hash": self._hasher.hash(password),
                "email": email,
                "role": role,
            }
        )
        logger.info("Registered user %s (role: %s)", username, user.role.value)
        return PublicUser.from_user(user)

    def authenticate(self, username: str, password: str) -> Optional[PublicUser]:
        user = self._users.find_by_username(username)
        if user is None:
            # unknown usernames cost the same bcrypt work as wrong passwords
            self._hasher.dummy_verify()
        if user is None or not self._hasher.verify(password, user.password_hash):
            logger.warning("Authentication failed for %s", username)
            return None
        return PublicUser.from_user(user)

    def update_user(self, user_id: int, changes: Mapping[str, Any]) -> PublicUser:
        return PublicUser.from_user(self._users.update(user_id, changes))


class AuthService:
    """Use case: exchange credentials for an access token."""

    def __init__(self, credentials: CredentialService, tokens: TokenIssuer):
        self._credentials = credentials
        self._tokens = tokens

    def login(self, username: str, password: str) -> tuple[str, PublicUser]:
        logger.info("Login attempt for user %s", username)
        user = self._credentials.authenticate(username, password)
        if user is None:
            raise AuthenticationError(INVALID_CREDENTIALS)
        token = self._tokens.issue(user)
        logger.info("User %s logged in (role: %s)", username, user.role.value)
        return token, user

    def verify(self, token: str) -> Principal:
        return self._tokens.verify(token)

"""
User Authentication Service
===========================
Manages dashboard accounts with bcrypt hashing and audit logging.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import bcrypt

from app.domain.exceptions import AuthenticationError, ConflictError, NotFoundError
from app.schemas.auth import MAX_PASSWORD_BYTES
from infrastructure.database.repositories.users import UserRepository
from infrastructure.logging.audit import AuditLogger

logger = logging.getLogger(__name__)

UNKNOWN_EMAIL_MESSAGE = "There is no existing account for this email."
INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"
DEFAULT_ROLE = "client"


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """User row without the password hash."""
    return {key: value for key, value in user.items() if key != "password_hash"}


@dataclass
class UserAuthManager:
    """
    Manages user authentication with bcrypt hashing and audit logging.
    """

    user_repo: UserRepository
    audit_logger: Optional[AuditLogger] = None

    def hash_password(self, password: str) -> str:
        """Hash the provided password using bcrypt."""
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")

    def check_password(self, stored_password: str, provided_password: str) -> bool:
        """Validate a plaintext password against the stored hash."""
        provided = provided_password.encode("utf-8")
        if len(provided) > MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(provided, stored_password.encode("utf-8"))
        except ValueError:
            logger.error("Stored password hash is not a valid bcrypt hash")
            return False

    def _audit(self, actor: str, action: str, outcome: str, **metadata: Any) -> None:
        if self.audit_logger:
            self.audit_logger.log_event(actor=actor, action=action, resource="user", outcome=outcome, **metadata)

    def register_user(self, fullname: str, email: str, password: str) -> Dict[str, Any]:
        """
        Create an account.

        Raises:
            ConflictError: If the email is already registered.
        """
        try:
            user = self.user_repo.create(fullname, email, self.hash_password(password), DEFAULT_ROLE)
        except ConflictError:
            self._audit(email, "signup", "conflict")
            raise
        logger.info("User '%s' registered successfully.", email)
        self._audit(email, "signup", "success", user_id=user["id"])
        return public_user(user)

    def authenticate_user(self, email: str, password: str) -> Dict[str, Any]:
        """
        Verify credentials and return the user.

        Raises:
            AuthenticationError: With a distinct message for an unknown email
                and for a wrong password.
        """
        user = self.user_repo.get_by_email(email)
        if not user:
            logger.warning("Authentication failed for '%s': user not found.", email)
            self._audit(email, "login", "not_found")
            raise AuthenticationError(UNKNOWN_EMAIL_MESSAGE)

        if not self.check_password(user["password_hash"], password):
            logger.warning("Authentication failed for '%s': invalid credentials.", email)
            self._audit(email, "login", "denied")
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

        logger.info("User '%s' authenticated successfully.", email)
        self._audit(email, "login", "success", user_id=user["id"])
        return public_user(user)

    def get_profile(self, user_id: int) -> Dict[str, Any]:
        user = self.user_repo.get(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found", detail={"id": user_id})
        return public_user(user)

    def update_security(
        self,
        user_id: int,
        current_password: str,
        *,
        email: Optional[str] = None,
        new_password: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Change the email and/or password after re-checking the current password.

        Raises:
            NotFoundError: Unknown user.
            AuthenticationError: Current password is wrong.
            ConflictError: The new email belongs to another account.
        """
        user = self.user_repo.get(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found", detail={"id": user_id})

        actor = str(user_id)
        if not self.check_password(user["password_hash"], current_password):
            self._audit(actor, "security_update", "denied")
            raise AuthenticationError("Current password is incorrect")

        changes: Dict[str, Any] = {}
        if email and email != user["email"]:
            other = self.user_repo.get_by_email(email)
            if other and other["id"] != user_id:
                self._audit(actor, "security_update", "conflict")
                raise ConflictError("Email already in use", detail={"email": email})
            changes["email"] = email
        if new_password:
            changes["password_hash"] = self.hash_password(new_password)

        if changes:
            self.user_repo.update(user_id, **changes)
            logger.info("Updated security settings for user %s (%s)", user_id, ", ".join(sorted(changes)))
        self._audit(actor, "security_update", "success", fields=sorted(changes))
        return self.get_profile(user_id)

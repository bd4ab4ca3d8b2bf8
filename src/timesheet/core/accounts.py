"""User account management: registration, authentication and administration."""

import logging
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from timesheet.core.errors import AuthenticationError, PermissionDeniedError, ValidationError
from timesheet.core.models import ROLE_ADMIN, ROLE_USER, ROLES, User
from timesheet.core.storage import StorageManager

logger = logging.getLogger(__name__)

DEFAULT_MIN_PASSWORD_LENGTH = 6
DEFAULT_HASH_METHOD = "scrypt"


def _normalize_email(email: Optional[str]) -> str:
    if email is None or not email.strip():
        raise ValidationError("email", "Email is required")
    email = email.strip()
    if "@" not in email:
        raise ValidationError("email", f"Invalid email address: {email}")
    return email


class AccountManager:
    """Manage users and their credentials."""

    def __init__(
        self,
        storage: Optional[StorageManager] = None,
        min_password_length: int = DEFAULT_MIN_PASSWORD_LENGTH,
        hash_method: str = DEFAULT_HASH_METHOD,
    ):
        """Initialize account manager.

        Args:
            storage: Storage manager instance. Creates default if None.
            min_password_length: Shortest password accepted
            hash_method: werkzeug password hashing method
        """
        self.storage = storage or StorageManager()
        self.min_password_length = min_password_length
        self.hash_method = hash_method

    def _hash(self, password: str) -> str:
        return generate_password_hash(password, method=self.hash_method)

    def _check_password_rules(self, password: Optional[str], field: str = "password") -> str:
        if not password:
            raise ValidationError(field, "Password is required")
        if len(password) < self.min_password_length:
            raise ValidationError(
                field, f"Password must be at least {self.min_password_length} characters"
            )
        return password

    def _check_email_free(self, email: str, user_id: Optional[str] = None) -> None:
        existing = self.storage.get_user_by_email(email)
        if existing is not None and existing.id != user_id:
            raise ValidationError("email", f"Email already registered: {email}")

    @staticmethod
    def _require_admin(actor: User, action: str) -> None:
        if not actor.is_admin:
            raise PermissionDeniedError(f"Only administrators can {action}")

    def register(
        self,
        email: str,
        password: str,
        name: Optional[str] = None,
        role: Optional[str] = None,
    ) -> User:
        """Create a new account.

        Args:
            email: Login email (must be unused)
            password: Plain password, hashed before storage
            name: Display name. Defaults to the email's local part
            role: 'admin' or 'user'. When omitted, the first account
                becomes an admin and later ones are users

        Returns:
            Created user

        Raises:
            ValidationError: If email, password or role is invalid
        """
        email = _normalize_email(email)
        self._check_password_rules(password)
        if role is None:
            role = ROLE_USER if self.storage.list_users() else ROLE_ADMIN
        if role not in ROLES:
            raise ValidationError("role", f"Role must be one of: {', '.join(ROLES)}")
        self._check_email_free(email)

        user = User(
            email=email,
            name=(name or "").strip() or email.split("@")[0],
            role=role,
            password_hash=self._hash(password),
        )
        self.storage.save_user(user)
        logger.info(f"Registered user {user.id} ({role})")
        return user

    def add_user(
        self,
        actor: User,
        email: str,
        password: str,
        name: Optional[str] = None,
        role: str = ROLE_USER,
    ) -> User:
        """Create an account on behalf of an administrator.

        Raises:
            PermissionDeniedError: If actor is not an admin
            ValidationError: If the new account's fields are invalid
        """
        self._require_admin(actor, "add users")
        return self.register(email, password, name=name, role=role)

    def authenticate(self, email: str, password: str) -> User:
        """Check credentials and return the matching user.

        Args:
            email: Login email
            password: Plain password

        Returns:
            Authenticated user

        Raises:
            AuthenticationError: If the email is unknown, the account has no
                password, or the password does not match
        """
        user = self.storage.get_user_by_email(email or "")
        if user is None or not user.password_hash or not password:
            raise AuthenticationError("Invalid email or password")
        if not check_password_hash(user.password_hash, password):
            logger.warning(f"Failed login for user {user.id}")
            raise AuthenticationError("Invalid email or password")
        return user

    def list_users(self, actor: User) -> list[User]:
        """List users visible to an actor (everyone for admins, self otherwise)."""
        if actor.is_admin:
            return self.storage.list_users()
        own = self.storage.get_user_by_id(actor.id)
        return [own] if own else []

    def update_profile(
        self,
        actor: User,
        user_id: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
        role: Optional[str] = None,
    ) -> Optional[User]:
        """Update a user's display name, email or role.

        Users may edit themselves; admins may edit anyone. Only admins may
        change roles, and never their own.

        Returns:
            Updated user, or None if no user has that ID

        Raises:
            PermissionDeniedError: If the actor may not make the change
            ValidationError: If the new email or role is invalid
        """
        if not actor.is_admin and actor.id != user_id:
            raise PermissionDeniedError("You can only edit your own profile")

        user = self.storage.get_user_by_id(user_id)
        if user is None:
            return None

        if role is not None and role != user.role:
            self._require_admin(actor, "change roles")
            if actor.id == user_id:
                raise PermissionDeniedError("Administrators cannot change their own role")
            if role not in ROLES:
                raise ValidationError("role", f"Role must be one of: {', '.join(ROLES)}")
            user.role = role

        if email is not None:
            email = _normalize_email(email)
            self._check_email_free(email, user_id=user.id)
            user.email = email

        if name is not None:
            if not name.strip():
                raise ValidationError("name", "Name cannot be empty")
            user.name = name.strip()

        self.storage.save_user(user)
        logger.info(f"Updated profile of user {user.id}")
        return user

    def change_password(
        self,
        actor: User,
        user_id: str,
        new_password: str,
        current_password: Optional[str] = None,
    ) -> bool:
        """Set a new password.

        Users changing their own password must supply the current one.
        Admins may reset other users' passwords without it.

        Returns:
            True if changed, False if no user has that ID

        Raises:
            PermissionDeniedError: If the actor may not change this password
            AuthenticationError: If the current password is wrong
            ValidationError: If the new password is too short
        """
        if not actor.is_admin and actor.id != user_id:
            raise PermissionDeniedError("You can only change your own password")

        user = self.storage.get_user_by_id(user_id)
        if user is None:
            return False

        if actor.id == user_id:
            if (
                not current_password
                or not user.password_hash
                or not check_password_hash(user.password_hash, current_password)
            ):
                raise AuthenticationError("Current password is incorrect")

        self._check_password_rules(new_password, field="new_password")
        user.password_hash = self._hash(new_password)
        self.storage.save_user(user)
        logger.info(f"Password changed for user {user.id}")
        return True

    def delete_user(self, actor: User, user_id: str) -> bool:
        """Delete a user and cascade to their time entries.

        Returns:
            True if deleted, False if no user has that ID

        Raises:
            PermissionDeniedError: If actor is not an admin or targets themself
        """
        self._require_admin(actor, "delete users")
        if actor.id == user_id:
            raise PermissionDeniedError("Administrators cannot delete their own account")
        return self.storage.delete_user(user_id)


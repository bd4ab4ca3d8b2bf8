"""Tests for account management."""

from datetime import date

import pytest  # type: ignore[import-not-found]

from conftest import make_entry
from timesheet.core.accounts import AccountManager
from timesheet.core.errors import AuthenticationError, PermissionDeniedError, ValidationError
from timesheet.core.models import User


class TestRegister:
    """Test AccountManager.register."""

    def test_first_account_is_admin(self, accounts: AccountManager) -> None:
        first = accounts.register("first@example.com", "secret123")
        second = accounts.register("second@example.com", "secret123")

        assert first.is_admin
        assert not second.is_admin

    def test_name_defaults_to_email_local_part(self, accounts: AccountManager) -> None:
        user = accounts.register("jane.doe@example.com", "secret123")
        assert user.name == "jane.doe"

    def test_password_is_hashed(self, accounts: AccountManager) -> None:
        user = accounts.register("a@example.com", "secret123")
        stored = accounts.storage.get_user_by_id(user.id)

        assert stored.password_hash
        assert "secret123" not in stored.password_hash

    def test_duplicate_email_rejected(self, accounts: AccountManager) -> None:
        accounts.register("a@example.com", "secret123")
        with pytest.raises(ValidationError) as exc_info:
            accounts.register("A@Example.com", "secret123")
        assert exc_info.value.field == "email"

    @pytest.mark.parametrize("email", ["", "   ", "not-an-email"])
    def test_invalid_email(self, accounts: AccountManager, email: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            accounts.register(email, "secret123")
        assert exc_info.value.field == "email"

    def test_short_password(self, accounts: AccountManager) -> None:
        with pytest.raises(ValidationError, match="at least 6"):
            accounts.register("a@example.com", "123")

    def test_custom_minimum_length(self, storage) -> None:
        accounts = AccountManager(storage, min_password_length=10, hash_method="pbkdf2:sha256:1000")
        with pytest.raises(ValidationError, match="at least 10"):
            accounts.register("a@example.com", "secret123")

    def test_invalid_role(self, accounts: AccountManager) -> None:
        with pytest.raises(ValidationError) as exc_info:
            accounts.register("a@example.com", "secret123", role="owner")
        assert exc_info.value.field == "role"


class TestAuthenticate:
    """Test AccountManager.authenticate."""

    def test_success(self, accounts: AccountManager, alice: User) -> None:
        assert accounts.authenticate("alice@example.com", "alicepass").id == alice.id

    def test_email_is_case_insensitive(self, accounts: AccountManager, alice: User) -> None:
        assert accounts.authenticate("ALICE@example.com", "alicepass").id == alice.id

    def test_wrong_password(self, accounts: AccountManager, alice: User) -> None:
        with pytest.raises(AuthenticationError):
            accounts.authenticate("alice@example.com", "wrong")

    def test_unknown_email(self, accounts: AccountManager) -> None:
        with pytest.raises(AuthenticationError):
            accounts.authenticate("nobody@example.com", "whatever")

    def test_account_without_password_never_matches(self, accounts: AccountManager) -> None:
        """A stored account lacking a hash has no default password."""
        accounts.storage.save_user(User(email="legacy@example.com", name="Legacy"))

        for candidate in ("", "password", "123456"):
            with pytest.raises(AuthenticationError):
                accounts.authenticate("legacy@example.com", candidate)


class TestAdministration:
    """Test admin-only and self-service account operations."""

    def test_add_user_requires_admin(
        self, accounts: AccountManager, admin: User, alice: User
    ) -> None:
        with pytest.raises(PermissionDeniedError):
            accounts.add_user(alice, "carol@example.com", "secret123")

        carol = accounts.add_user(admin, "carol@example.com", "secret123", name="Carol")
        assert carol.role == "user"

    def test_list_users(
        self, accounts: AccountManager, admin: User, alice: User, bob: User
    ) -> None:
        assert len(accounts.list_users(admin)) == 3
        assert [u.id for u in accounts.list_users(alice)] == [alice.id]

    def test_update_own_profile(self, accounts: AccountManager, alice: User) -> None:
        updated = accounts.update_profile(alice, alice.id, name="Alice Smith")
        assert updated.name == "Alice Smith"

    def test_cannot_edit_other_profile(
        self, accounts: AccountManager, alice: User, bob: User
    ) -> None:
        with pytest.raises(PermissionDeniedError):
            accounts.update_profile(alice, bob.id, name="Hacked")

    def test_admin_changes_role(self, accounts: AccountManager, admin: User, alice: User) -> None:
        updated = accounts.update_profile(admin, alice.id, role="admin")
        assert updated.is_admin

    def test_user_cannot_change_own_role(self, accounts: AccountManager, alice: User) -> None:
        with pytest.raises(PermissionDeniedError):
            accounts.update_profile(alice, alice.id, role="admin")

    def test_admin_cannot_change_own_role(self, accounts: AccountManager, admin: User) -> None:
        with pytest.raises(PermissionDeniedError):
            accounts.update_profile(admin, admin.id, role="user")

    def test_email_change_must_be_unique(
        self, accounts: AccountManager, alice: User, bob: User
    ) -> None:
        with pytest.raises(ValidationError):
            accounts.update_profile(alice, alice.id, email="bob@example.com")

    def test_update_missing_user(self, accounts: AccountManager, admin: User) -> None:
        assert accounts.update_profile(admin, "missing", name="x") is None

    def test_change_own_password(self, accounts: AccountManager, alice: User) -> None:
        assert accounts.change_password(alice, alice.id, "newpass1", current_password="alicepass")
        assert accounts.authenticate("alice@example.com", "newpass1").id == alice.id

    def test_change_own_password_requires_current(
        self, accounts: AccountManager, alice: User
    ) -> None:
        with pytest.raises(AuthenticationError):
            accounts.change_password(alice, alice.id, "newpass1", current_password="wrong")

    def test_admin_resets_other_password(
        self, accounts: AccountManager, admin: User, alice: User
    ) -> None:
        assert accounts.change_password(admin, alice.id, "resetpass")
        accounts.authenticate("alice@example.com", "resetpass")

    def test_new_password_length(self, accounts: AccountManager, admin: User, alice: User) -> None:
        with pytest.raises(ValidationError) as exc_info:
            accounts.change_password(admin, alice.id, "x")
        assert exc_info.value.field == "new_password"

    def test_change_password_missing_user(self, accounts: AccountManager, admin: User) -> None:
        assert accounts.change_password(admin, "missing", "newpass1") is False

    def test_delete_user_cascades(
        self, accounts: AccountManager, admin: User, alice: User
    ) -> None:
        accounts.storage.save_time_entry(make_entry(alice.id, date(2025, 1, 20)))

        assert accounts.delete_user(admin, alice.id) is True

        assert accounts.storage.get_user_by_id(alice.id) is None
        assert accounts.storage.list_time_entries_by_user(alice.id) == []

    def test_delete_user_requires_admin(
        self, accounts: AccountManager, alice: User, bob: User
    ) -> None:
        with pytest.raises(PermissionDeniedError):
            accounts.delete_user(alice, bob.id)

    def test_admin_cannot_delete_self(self, accounts: AccountManager, admin: User) -> None:
        with pytest.raises(PermissionDeniedError):
            accounts.delete_user(admin, admin.id)

    def test_delete_missing_user(self, accounts: AccountManager, admin: User) -> None:
        assert accounts.delete_user(admin, "missing") is False

"""Tests for core data models."""

from datetime import date, datetime, time

import pytest  # type: ignore[import-not-found]

from timesheet.core.models import ROLE_ADMIN, TimeEntry, User, Viewer, hours_between


class TestHoursBetween:
    """Test hours_between helper."""

    def test_full_day(self) -> None:
        assert hours_between(time(9, 0), time(17, 0)) == 8.0

    def test_partial_hours(self) -> None:
        assert hours_between(time(9, 15), time(10, 45)) == 1.5

    def test_end_before_start_is_negative(self) -> None:
        assert hours_between(time(12, 0), time(11, 0)) == -1.0


class TestTimeEntry:
    """Test TimeEntry model."""

    def test_create_entry(self) -> None:
        """Test creating a basic entry."""
        entry = TimeEntry(
            user_id="u1",
            date=date(2025, 1, 20),
            category="Development",
            subcategory="Code Review",
            hours=2.0,
        )

        assert entry.user_id == "u1"
        assert entry.description == ""
        assert entry.start_time is None
        assert entry.computed_hours is None
        assert len(entry.id) == 32
        assert isinstance(entry.created_at, datetime)

    def test_ids_are_unique(self) -> None:
        a = TimeEntry("u1", date(2025, 1, 20), "Leave", "Sick Leave", 8.0)
        b = TimeEntry("u1", date(2025, 1, 20), "Leave", "Sick Leave", 8.0)
        assert a.id != b.id

    def test_computed_hours(self) -> None:
        """Test hours implied by start and end times."""
        entry = TimeEntry(
            user_id="u1",
            date=date(2025, 1, 20),
            category="Development",
            subcategory="Code Review",
            hours=3.5,
            start_time=time(13, 0),
            end_time=time(16, 30),
        )
        assert entry.computed_hours == 3.5

    def test_month_key(self) -> None:
        entry = TimeEntry("u1", date(2024, 12, 31), "Leave", "Annual Leave", 8.0)
        assert entry.month_key == (2024, 12)

    def test_to_dict(self) -> None:
        """Test serialization to dictionary."""
        entry = TimeEntry(
            user_id="u1",
            date=date(2025, 1, 20),
            category="Development",
            subcategory="Code Review",
            hours=8.0,
            description="Reviewed PRs",
            start_time=time(9, 0),
            end_time=time(17, 0),
        )

        data = entry.to_dict()

        assert data["date"] == "2025-01-20"
        assert data["start_time"] == "09:00"
        assert data["end_time"] == "17:00"
        assert data["hours"] == 8.0
        assert data["description"] == "Reviewed PRs"

    def test_to_dict_without_times(self) -> None:
        entry = TimeEntry("u1", date(2025, 1, 20), "Leave", "Sick Leave", 4.0)
        data = entry.to_dict()
        assert data["start_time"] == ""
        assert data["end_time"] == ""

    def test_from_dict(self) -> None:
        """Test deserialization from dictionary."""
        data = {
            "id": "abc123",
            "user_id": "u1",
            "date": "2025-01-20",
            "start_time": "09:00",
            "end_time": "12:30",
            "category": "Project Management",
            "subcategory": "Documentation",
            "description": "Wrote docs",
            "hours": "3.5",
            "created_at": "2025-01-20T12:31:00",
        }

        entry = TimeEntry.from_dict(data)

        assert entry.id == "abc123"
        assert entry.date == date(2025, 1, 20)
        assert entry.start_time == time(9, 0)
        assert entry.end_time == time(12, 30)
        assert entry.hours == 3.5
        assert entry.created_at == datetime(2025, 1, 20, 12, 31)

    def test_from_dict_missing_field_raises(self) -> None:
        with pytest.raises(KeyError):
            TimeEntry.from_dict({"id": "x", "user_id": "u1"})


class TestUser:
    """Test User model."""

    def test_default_role_is_user(self) -> None:
        user = User(email="a@example.com", name="A")
        assert user.role == "user"
        assert user.is_admin is False

    def test_admin_role(self) -> None:
        assert User(email="a@example.com", name="A", role=ROLE_ADMIN).is_admin is True

    def test_to_dict_from_dict(self) -> None:
        user = User(email="a@example.com", name="A", password_hash="hash")
        restored = User.from_dict(user.to_dict())

        assert restored.id == user.id
        assert restored.email == "a@example.com"
        assert restored.password_hash == "hash"
        assert restored.created_at == user.created_at

    def test_missing_password_hash_is_none(self) -> None:
        user = User(email="a@example.com", name="A")
        assert user.to_dict()["password_hash"] == ""
        assert User.from_dict(user.to_dict()).password_hash is None

    def test_unknown_role_rejected(self) -> None:
        data = User(email="a@example.com", name="A").to_dict()
        data["role"] = "superuser"
        with pytest.raises(ValueError, match="Unknown role"):
            User.from_dict(data)


class TestViewer:
    """Test Viewer construction."""

    def test_for_regular_user(self) -> None:
        user = User(email="a@example.com", name="A")
        viewer = Viewer.for_user(user)
        assert viewer.user_id == user.id
        assert viewer.is_privileged is False

    def test_for_admin(self) -> None:
        user = User(email="a@example.com", name="A", role=ROLE_ADMIN)
        assert Viewer.for_user(user).is_privileged is True

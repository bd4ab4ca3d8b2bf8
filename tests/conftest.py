"""Pytest configuration and shared fixtures."""

import tempfile
from collections.abc import Iterator
from datetime import date, time
from pathlib import Path
from typing import Optional

import pytest  # type: ignore[import-not-found]

from timesheet.core.accounts import AccountManager
from timesheet.core.models import TimeEntry, User, hours_between
from timesheet.core.storage import StorageManager
from timesheet.core.tracker import HoursTracker

# Cheap hash so tests that create accounts stay fast
FAST_HASH = "pbkdf2:sha256:1000"


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest."""
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")


def make_entry(
    user_id: str,
    day: date,
    category: str = "Development",
    subcategory: str = "Code Review",
    hours: Optional[float] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    description: str = "Work",
) -> TimeEntry:
    """Build an entry without going through validation."""
    start_time = time.fromisoformat(start) if start else None
    end_time = time.fromisoformat(end) if end else None
    if hours is None:
        hours = hours_between(start_time, end_time) if start_time and end_time else 1.0
    return TimeEntry(
        user_id=user_id,
        date=day,
        category=category,
        subcategory=subcategory,
        hours=hours,
        description=description,
        start_time=start_time,
        end_time=end_time,
    )


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def storage(temp_dir: Path) -> StorageManager:
    """Create storage manager with temporary directory."""
    return StorageManager(temp_dir / "data")


@pytest.fixture
def accounts(storage: StorageManager) -> AccountManager:
    """Create account manager sharing the temporary storage."""
    return AccountManager(storage, hash_method=FAST_HASH)


@pytest.fixture
def tracker(storage: StorageManager) -> HoursTracker:
    """Create hours tracker sharing the temporary storage."""
    return HoursTracker(storage)


@pytest.fixture
def admin(accounts: AccountManager) -> User:
    """First registered account (becomes admin)."""
    return accounts.register("admin@example.com", "secret123", name="Admin")


@pytest.fixture
def alice(accounts: AccountManager, admin: User) -> User:
    """Regular user registered after the admin."""
    return accounts.register("alice@example.com", "alicepass", name="Alice")


@pytest.fixture
def bob(accounts: AccountManager, admin: User) -> User:
    """Second regular user."""
    return accounts.register("bob@example.com", "bobpass1", name="Bob")

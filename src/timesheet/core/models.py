"""Core data models for work hours tracking."""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Optional
from uuid import uuid4

ROLE_ADMIN = "admin"
ROLE_USER = "user"
ROLES = (ROLE_ADMIN, ROLE_USER)


def _new_id() -> str:
    return uuid4().hex


def hours_between(start_time: time, end_time: time) -> float:
    """Calculate the number of hours between two times of the same day.

    Args:
        start_time: Start of the interval
        end_time: End of the interval

    Returns:
        Hours as a float (negative or zero if end is not after start)
    """
    anchor = date(2000, 1, 1)
    delta = datetime.combine(anchor, end_time) - datetime.combine(anchor, start_time)
    return delta.total_seconds() / 3600


def _format_time(value: Optional[time]) -> str:
    return value.strftime("%H:%M") if value else ""


@dataclass
class TimeEntry:
    """A single logged work interval.

    Attributes:
        user_id: Identifier of the owning user
        date: Calendar day the work happened on
        category: Work category label
        subcategory: Subcategory label (allowed values depend on category)
        hours: Duration in hours, derived from start/end when both are set
        description: What was done
        start_time: Time of day the work started (optional)
        end_time: Time of day the work ended (optional)
        id: Unique identifier
        created_at: When this record was created
    """

    user_id: str
    date: date
    category: str
    subcategory: str
    hours: float
    description: str = ""
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def computed_hours(self) -> Optional[float]:
        """Hours implied by start/end times. Returns None unless both are set."""
        if self.start_time is None or self.end_time is None:
            return None
        return hours_between(self.start_time, self.end_time)

    @property
    def month_key(self) -> tuple[int, int]:
        """(year, month) bucket this entry falls into."""
        return (self.date.year, self.date.month)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON/CSV serialization."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "date": self.date.isoformat(),
            "start_time": _format_time(self.start_time),
            "end_time": _format_time(self.end_time),
            "category": self.category,
            "subcategory": self.subcategory,
            "description": self.description,
            "hours": self.hours,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimeEntry":
        """Create TimeEntry from dictionary (JSON/CSV deserialization)."""
        return cls(
            id=data["id"],
            user_id=data["user_id"],
            date=date.fromisoformat(data["date"]),
            start_time=time.fromisoformat(data["start_time"]) if data.get("start_time") else None,
            end_time=time.fromisoformat(data["end_time"]) if data.get("end_time") else None,
            category=data["category"],
            subcategory=data["subcategory"],
            description=data.get("description") or "",
            hours=float(data["hours"]),
            created_at=datetime.fromisoformat(data["created_at"]),
        )


@dataclass
class User:
    """Account that owns time entries.

    Attributes:
        email: Login email, unique across users
        name: Display name
        role: Either 'admin' or 'user'
        id: Unique identifier
        password_hash: Salted one-way hash of the password
        created_at: When the account was created
    """

    email: str
    name: str
    role: str = ROLE_USER
    id: str = field(default_factory=_new_id)
    password_hash: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def is_admin(self) -> bool:
        """Check if this user has the admin role."""
        return self.role == ROLE_ADMIN

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "password_hash": self.password_hash or "",
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        """Create User from dictionary (JSON deserialization)."""
        role = data.get("role") or ROLE_USER
        if role not in ROLES:
            raise ValueError(f"Unknown role: {role}")
        return cls(
            id=data["id"],
            email=data["email"],
            name=data.get("name") or "",
            role=role,
            password_hash=data["password_hash"] if data.get("password_hash") else None,
            created_at=datetime.fromisoformat(data["created_at"]),
        )


@dataclass(frozen=True)
class Viewer:
    """Identity on whose behalf entries are read.

    Attributes:
        user_id: Identifier of the viewing user
        is_privileged: Whether the viewer may see every user's entries
    """

    user_id: str
    is_privileged: bool = False

    @classmethod
    def for_user(cls, user: User) -> "Viewer":
        """Build the viewer context for a user (admins are privileged)."""
        return cls(user_id=user.id, is_privileged=user.is_admin)

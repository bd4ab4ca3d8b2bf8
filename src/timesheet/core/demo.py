"""Demo users and time entries for trying the tool out."""

import logging
from datetime import date, datetime, time
from typing import Optional

from werkzeug.security import generate_password_hash

from timesheet.core.accounts import DEFAULT_HASH_METHOD
from timesheet.core.models import ROLE_ADMIN, ROLE_USER, TimeEntry, User, hours_between
from timesheet.core.storage import StorageManager

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "demo123"

DEMO_USERS = [
    ("demo-admin-001", "admin@demo.com", "System Administrator", ROLE_ADMIN, "2024-01-01"),
    ("demo-user-001", "user1@demo.com", "Alex Chang", ROLE_USER, "2024-01-02"),
    ("demo-user-002", "user2@demo.com", "Lee Hua", ROLE_USER, "2024-01-03"),
]

# (user_id, date, start, end, category, subcategory, description)
DEMO_ENTRIES = [
    ("demo-user-001", "2025-01-20", "09:00", "17:00", "Development", "Frontend Development",
     "Finished the user interface layout and responsive tweaks"),
    ("demo-user-001", "2025-01-21", "09:00", "12:00", "Project Management", "Requirements Analysis",
     "Reviewed the customer requirements and wrote up the feature list"),
    ("demo-user-001", "2025-01-21", "13:00", "17:30", "Development", "Backend Development",
     "API development and database design"),
    ("demo-user-001", "2025-01-22", "09:00", "17:00", "Development", "System Testing",
     "Unit and integration testing"),
    ("demo-user-001", "2025-01-23", "09:00", "16:00", "Customer Service", "Technical Support",
     "Helped a customer resolve technical issues"),
    ("demo-user-002", "2025-01-20", "09:00", "17:00", "Customer Service", "Customer Inquiries",
     "Handled customer questions"),
    ("demo-user-002", "2025-01-21", "09:00", "17:00", "Leave", "Annual Leave",
     "Annual leave"),
    ("demo-user-002", "2025-01-22", "09:00", "16:00", "Administration", "Paperwork",
     "Organized customer contracts and related documents"),
    ("demo-user-002", "2025-01-23", "10:00", "18:00", "Customer Service", "Product Demo",
     "Product walkthrough for a new customer"),
    ("demo-admin-001", "2025-01-20", "09:00", "12:00", "Project Management", "Progress Tracking",
     "Checked project progress and updated the schedule"),
    ("demo-admin-001", "2025-01-20", "13:00", "17:00", "Project Management", "Meeting Coordination",
     "Ran the team meeting"),
    ("demo-admin-001", "2025-01-21", "09:00", "17:00", "Administration", "Report Writing",
     "Monthly report and performance analysis"),
    ("demo-admin-001", "2025-01-22", "09:00", "15:00", "Project Management", "Risk Assessment",
     "Assessed project risks and planned mitigations"),
    ("demo-user-001", "2024-12-15", "09:00", "17:00", "Development", "Frontend Development",
     "December frontend work"),
    ("demo-user-001", "2024-12-16", "09:00", "17:00", "Development", "Backend Development",
     "December backend work"),
    ("demo-user-002", "2024-12-18", "09:00", "17:00", "Customer Service", "Training",
     "Customer training session"),
]


def build_demo_data(
    hash_method: str = DEFAULT_HASH_METHOD,
) -> tuple[list[User], list[TimeEntry]]:
    """Build the demo users and entries without touching storage.

    Args:
        hash_method: werkzeug password hashing method for the demo password

    Returns:
        Tuple of (users, entries)
    """
    password_hash = generate_password_hash(DEMO_PASSWORD, method=hash_method)
    users = [
        User(
            id=user_id,
            email=email,
            name=name,
            role=role,
            password_hash=password_hash,
            created_at=datetime.fromisoformat(created),
        )
        for user_id, email, name, role, created in DEMO_USERS
    ]

    entries = []
    for user_id, day, start, end, category, subcategory, description in DEMO_ENTRIES:
        start_time, end_time = time.fromisoformat(start), time.fromisoformat(end)
        entries.append(
            TimeEntry(
                user_id=user_id,
                date=date.fromisoformat(day),
                start_time=start_time,
                end_time=end_time,
                category=category,
                subcategory=subcategory,
                description=description,
                hours=hours_between(start_time, end_time),
            )
        )
    return users, entries


def load_demo_data(
    storage: StorageManager,
    hash_method: Optional[str] = None,
) -> tuple[int, int]:
    """Replace stored data with the demo data set.

    Args:
        storage: Storage to overwrite
        hash_method: werkzeug password hashing method

    Returns:
        Tuple of (user count, entry count)
    """
    users, entries = build_demo_data(hash_method or DEFAULT_HASH_METHOD)
    storage.import_data(users, entries)
    logger.info("Demo data loaded")
    return len(users), len(entries)

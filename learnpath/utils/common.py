"""
Common utility functions used across services and routes.
"""

from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from learnpath.utils.errors import PersistenceError
from learnpath.utils.logger import configure_logging

logger = configure_logging()


def iso_format(dt: Optional[datetime]) -> Optional[str]:
    """Format datetime as ISO string with Z suffix."""
    if dt is None:
        return None
    return dt.isoformat() + "Z"


def new_id() -> str:
    return str(uuid4())


def round_percent(part: int, whole: int) -> int:
    """
    100 * part / whole rounded half-up, in integer arithmetic.
    round_percent(1, 8) == 13, round_percent(1, 3) == 33, whole <= 0 gives 0.
    """
    if whole <= 0:
        return 0
    return (200 * part + whole) // (2 * whole)


def commit_or_raise(db: Session, action: str) -> None:
    """Commit the unit of work; on failure roll back and raise PersistenceError."""
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("commit failed action=%s", action)
        raise PersistenceError(f"Failed to {action}") from e


def apply_updates(entity: object, updates: dict, allowed: set[str]) -> list[str]:
    """Set the allowed keys of `updates` on `entity`; returns the names that changed."""
    changed: list[str] = []
    for key, value in updates.items():
        if key not in allowed:
            continue
        if getattr(entity, key) != value:
            setattr(entity, key, value)
            changed.append(key)
    return changed

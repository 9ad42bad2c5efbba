from __future__ import annotations
import datetime
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class SetRecord:
    """A logged set joined with its exercise and session."""

    set_id: int
    session_id: int
    exercise_id: int
    exercise_name: str
    muscle_group: str
    weight: float
    reps: int
    is_warmup: bool
    is_completed: bool
    session_date: datetime.datetime
    set_number: int = 0

    @property
    def volume(self) -> float:
        return self.weight * self.reps

    @property
    def is_working_set(self) -> bool:
        """Completed, non-warmup set with positive weight and reps."""
        return (
            self.is_completed
            and not self.is_warmup
            and self.weight > 0
            and self.reps > 0
        )


@dataclass(frozen=True)
class SessionRecord:
    session_id: int
    user_id: Optional[int]
    date: datetime.datetime
    duration_seconds: int
    is_completed: bool
    set_count: int = 0
    exercise_count: int = 0


@dataclass(frozen=True)
class SetFilters:
    """Query filters for ``AsyncRecordStore.list_sets``."""

    since: Optional[datetime.datetime] = None
    exercise_id: Optional[int] = None
    exercise_names: Tuple[str, ...] = ()
    muscle_group: Optional[str] = None
    only_completed: bool = True
    exclude_warmup: bool = True


@dataclass(frozen=True)
class SessionFilters:
    """Query filters for ``AsyncRecordStore.list_sessions``."""

    since: Optional[datetime.datetime] = None
    only_completed: bool = True

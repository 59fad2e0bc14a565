from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional


class ValidationError(ValueError):
    """Raised when an upstream record is missing or has malformed fields."""


class DurationUnit(str, Enum):
    DAYS = "days"
    MONTHS = "months"
    YEARS = "years"


@dataclass(frozen=True)
class User:
    id: str
    notify_email: Optional[str] = None


@dataclass(frozen=True)
class Item:
    id: str
    user_id: str
    name: str
    start_date: date
    duration: int
    unit: DurationUnit


@dataclass(frozen=True)
class ExpiryResult:
    name: str
    days_left: int  # negative = already expired
    expiry_date: date

    def is_expired(self) -> bool:
        return self.days_left < 0


@dataclass
class AlertGroup:
    user_id: str
    email: str
    items: List[ExpiryResult] = field(default_factory=list)


class RunState(str, Enum):
    START = "start"
    DIRECTORY_LOADED = "directory-loaded"
    ITEMS_LOADED = "items-loaded"
    GROUPED = "grouped"
    NOTIFYING = "notifying"
    DONE = "done"


@dataclass
class RunReport:
    state: RunState = RunState.START
    groups: int = 0
    sent: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    def is_complete(self) -> bool:
        return self.state == RunState.DONE

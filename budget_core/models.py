"""Data models for the budget tracker domain."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

__all__ = [
    "CATEGORIES",
    "DEFAULT_MONTHLY_SALARY",
    "DEFAULT_SAVINGS_GOAL",
    "Expense",
    "Salary",
    "Savings",
    "isoformat_utc",
    "parse_date",
    "parse_datetime",
    "parse_decimal",
    "utc_today",
]

CATEGORIES = (
    "Food & Dining",
    "Transportation",
    "Shopping",
    "Entertainment",
    "Bills & Utilities",
    "Healthcare",
    "Education",
    "Travel",
    "Other",
)

DEFAULT_MONTHLY_SALARY = Decimal("50000")
DEFAULT_SAVINGS_GOAL = Decimal("100000")


def isoformat_utc(dt: datetime) -> str:
    """Return an ISO 8601 string with trailing Z for UTC-aware datetimes."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    iso = dt.isoformat(timespec="milliseconds")
    return iso.replace("+00:00", "Z")


def parse_datetime(value: str) -> datetime:
    """Parse ISO 8601 datetime strings with optional trailing Z into UTC-aware datetime."""
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        # Naive timestamps are treated as UTC.
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_date(value: Any) -> date:
    """Accept a ``date`` or an ISO ``YYYY-MM-DD`` string (time part ignored)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Unsupported date value: {value!r}")
    return date.fromisoformat(value.strip()[:10])


def _optional_datetime(value: Optional[str]) -> Optional[datetime]:
    if value in (None, ""):
        return None
    return parse_datetime(value)


def _optional_isoformat(value: Optional[datetime]) -> Optional[str]:
    return isoformat_utc(value) if value is not None else None


def parse_decimal(value: Any) -> Decimal:
    """Convert a JSON number or numeric string; NaN and infinities are refused."""
    amount = Decimal(str(value))
    if not amount.is_finite():
        raise ValueError(f"Amount must be a finite number: {value!r}")
    return amount


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def _number(value: Decimal) -> Any:
    # JSON numbers on the wire; whole amounts stay integral.
    if value == value.to_integral_value():
        return int(value)
    return float(value)


@dataclass(frozen=True)
class Expense:
    id: str
    amount: Decimal
    description: str
    category: str
    date: date
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def month(self) -> str:
        return self.date.strftime("%Y-%m")

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the expense to JSON-friendly natives."""
        payload: Dict[str, Any] = {
            "id": self.id,
            "amount": _number(self.amount),
            "description": self.description,
            "category": self.category,
            "date": self.date.isoformat(),
        }
        if self.user_id is not None:
            payload["userId"] = self.user_id
        if self.created_at is not None:
            payload["createdAt"] = isoformat_utc(self.created_at)
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Expense":
        """Hydrate an Expense from JSON-native data."""
        return cls(
            id=str(data["id"]),
            amount=parse_decimal(data["amount"]),
            description=str(data.get("description") or ""),
            category=str(data.get("category") or ""),
            date=parse_date(data["date"]),
            user_id=data.get("userId"),
            created_at=_optional_datetime(data.get("createdAt")),
        )


@dataclass(frozen=True)
class Salary:
    monthly: Decimal = DEFAULT_MONTHLY_SALARY
    last_updated: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "monthly": _number(self.monthly),
            "lastUpdated": _optional_isoformat(self.last_updated),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Salary":
        return cls(
            monthly=parse_decimal(data.get("monthly", DEFAULT_MONTHLY_SALARY)),
            last_updated=_optional_datetime(data.get("lastUpdated")),
        )


@dataclass(frozen=True)
class Savings:
    goal: Decimal = DEFAULT_SAVINGS_GOAL
    current: Decimal = Decimal("0")
    last_updated: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "goal": _number(self.goal),
            "current": _number(self.current),
            "lastUpdated": _optional_isoformat(self.last_updated),
        }

    def merge(self, changes: Dict[str, Any]) -> "Savings":
        """Return a copy with the goal and/or current amount replaced."""
        updates: Dict[str, Any] = {}
        if changes.get("goal") is not None:
            updates["goal"] = parse_decimal(changes["goal"])
        if changes.get("current") is not None:
            updates["current"] = parse_decimal(changes["current"])
        return replace(self, **updates)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Savings":
        return cls(
            goal=parse_decimal(data.get("goal", DEFAULT_SAVINGS_GOAL)),
            current=parse_decimal(data.get("current", 0)),
            last_updated=_optional_datetime(data.get("lastUpdated")),
        )

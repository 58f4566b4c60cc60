"""Framework-agnostic business services for the budget tracker."""

from __future__ import annotations

import secrets
import string
import time
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, List, Optional, TypeVar

from .exceptions import PersistenceError, RecordNotFoundError, ValidationError
from .models import Expense, Salary, Savings, isoformat_utc, parse_decimal
from .storage import KeyValueStore

T = TypeVar("T")

_ID_ALPHABET = string.digits + string.ascii_lowercase
_MALFORMED = (KeyError, TypeError, ValueError, InvalidOperation)


def generate_expense_id(now: Optional[float] = None) -> str:
    """Millisecond timestamp followed by nine random base-36 characters."""
    millis = int((time.time() if now is None else now) * 1000)
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"{millis}{suffix}"


def expense_prefix(user_id: str) -> str:
    return f"expenses:{user_id}:"


def expense_key(user_id: str, expense_id: str) -> str:
    return f"{expense_prefix(user_id)}{expense_id}"


def salary_key(user_id: str) -> str:
    return f"salary:{user_id}"


def savings_key(user_id: str) -> str:
    return f"savings:{user_id}"


class _StoreBackedService:
    def __init__(self, store: KeyValueStore, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._store = store
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _guard(self, message: str, operation: Callable[..., T], *args: Any) -> T:
        try:
            return operation(*args)
        except PersistenceError:
            raise
        except Exception as exc:  # pragma: no cover - defensive guard
            raise PersistenceError(message) from exc

    def _now(self) -> datetime:
        return self._clock()


class ExpenseService(_StoreBackedService):
    """Stores one key per expense under the owning user's prefix."""

    # Public API -----------------------------------------------------------
    def list(self, user_id: str) -> List[Expense]:
        prefix = expense_prefix(user_id)
        pairs = self._guard("Unexpected error while reading expenses", self._store.get_by_prefix, prefix)
        # The key suffix is authoritative for the id.
        return [Expense.from_dict({**value, "id": key[len(prefix):]}) for key, value in pairs]

    def add(self, user_id: str, payload: Dict[str, Any]) -> Expense:
        if not isinstance(payload, dict):
            raise ValidationError("Expense payload must be an object")
        expense_id = generate_expense_id()
        record = {
            **payload,
            "id": expense_id,
            "userId": user_id,
            "createdAt": isoformat_utc(self._now()),
        }
        try:
            expense = Expense.from_dict(record)
        except _MALFORMED as exc:
            raise ValidationError(f"Malformed expense payload: {exc}") from exc
        self._guard(
            "Unexpected error while saving expense",
            self._store.set,
            expense_key(user_id, expense_id),
            expense.to_dict(),
        )
        return expense

    def get(self, user_id: str, expense_id: str) -> Expense:
        """Return an expense or raise if it does not exist."""
        raw = self._guard(
            "Unexpected error while reading expense",
            self._store.get,
            expense_key(user_id, expense_id),
        )
        if raw is None:
            raise RecordNotFoundError(f"Expense {expense_id} not found")
        return Expense.from_dict({**raw, "id": expense_id})

    def delete(self, user_id: str, expense_id: str) -> None:
        """Remove an expense; unknown ids are ignored."""
        self._guard(
            "Unexpected error while deleting expense",
            self._store.delete,
            expense_key(user_id, expense_id),
        )


class SalaryService(_StoreBackedService):
    """Single overwrite-only salary record per user."""

    def get(self, user_id: str) -> Salary:
        raw = self._guard("Unexpected error while reading salary", self._store.get, salary_key(user_id))
        if raw is None:
            return Salary()
        return Salary.from_dict(raw)

    def update(self, user_id: str, payload: Dict[str, Any]) -> Salary:
        if not isinstance(payload, dict) or payload.get("monthly") is None:
            raise ValidationError("monthly is required")
        try:
            monthly = parse_decimal(payload["monthly"])
        except _MALFORMED as exc:
            raise ValidationError("monthly must be a numeric value") from exc
        salary = Salary(monthly=monthly, last_updated=self._now())
        self._guard(
            "Unexpected error while saving salary",
            self._store.set,
            salary_key(user_id),
            salary.to_dict(),
        )
        return salary


class SavingsService(_StoreBackedService):
    """Savings goal and running balance; the balance is adjusted, never recomputed."""

    def get(self, user_id: str) -> Savings:
        raw = self._guard("Unexpected error while reading savings", self._store.get, savings_key(user_id))
        if raw is None:
            return Savings()
        return Savings.from_dict(raw)

    def update(self, user_id: str, payload: Dict[str, Any]) -> Savings:
        """Merge a partial ``{goal, current}`` payload over the stored record."""
        if not isinstance(payload, dict):
            raise ValidationError("Savings payload must be an object")
        try:
            merged = self.get(user_id).merge(payload)
        except _MALFORMED as exc:
            raise ValidationError(f"Malformed savings payload: {exc}") from exc
        return self._save(user_id, merged)

    def deposit(self, user_id: str, amount: Decimal) -> Savings:
        current = self.get(user_id)
        return self.update(user_id, {"current": current.current + amount})

    def withdraw(self, user_id: str, amount: Decimal) -> Savings:
        current = self.get(user_id)
        return self.update(user_id, {"current": max(Decimal("0"), current.current - amount)})

    def _save(self, user_id: str, savings: Savings) -> Savings:
        stamped = Savings(goal=savings.goal, current=savings.current, last_updated=self._now())
        self._guard(
            "Unexpected error while saving savings",
            self._store.set,
            savings_key(user_id),
            stamped.to_dict(),
        )
        return stamped

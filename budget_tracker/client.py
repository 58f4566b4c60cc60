"""Client-side state for the budget tracker.

Holds the expenses, salary and savings records fetched from the REST API and
computes the dashboard views from them. Every action issues a single request;
when the network call fails the state falls back to defaults, sample data or
an optimistic local change instead of raising.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

import requests

from budget_core import aggregates
from budget_core.config import DEFAULT_USER_ID, Settings
from budget_core.models import Expense, Salary, Savings, utc_today
from budget_core.services import generate_expense_id
from budget_core.validators import (
    parse_amount,
    validate_category,
    validate_date,
    validate_required_str,
)

logger = logging.getLogger(__name__)

# Shown when the expense list cannot be fetched.
SAMPLE_EXPENSES: List[Dict[str, Any]] = [
    {"id": "1", "amount": 2450.50, "description": "Grocery shopping at SM",
     "category": "Food & Dining", "date": "2024-12-15"},
    {"id": "2", "amount": 1200.00, "description": "Gasoline",
     "category": "Transportation", "date": "2024-12-14"},
    {"id": "3", "amount": 549.00, "description": "Netflix subscription",
     "category": "Entertainment", "date": "2024-12-13"},
    {"id": "4", "amount": 3850.00, "description": "Electric bill",
     "category": "Bills & Utilities", "date": "2024-12-12"},
    {"id": "5", "amount": 2890.00, "description": "Dinner at Jollibee",
     "category": "Food & Dining", "date": "2024-12-11"},
    {"id": "6", "amount": 850.00, "description": "Jeepney fare",
     "category": "Transportation", "date": "2024-12-10"},
    {"id": "7", "amount": 1650.00, "description": "Coffee shop",
     "category": "Food & Dining", "date": "2024-12-09"},
]

# Failures that trigger the local fallback; decoding errors are ValueErrors.
NETWORK_ERRORS = (requests.RequestException, ValueError)


def sample_expenses() -> List[Expense]:
    return [Expense.from_dict(record) for record in SAMPLE_EXPENSES]


class BudgetTrackerClient:
    """In-memory view of one user's budget backed by the REST API."""

    def __init__(
        self,
        base_url: str,
        user_id: str = DEFAULT_USER_ID,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = 10,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.user_id = user_id
        self.timeout = timeout
        self._session = session or requests.Session()
        self._today = today or utc_today

        self.expenses: List[Expense] = []
        self.salary = Salary()
        self.savings = Savings()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **kwargs: Any) -> "BudgetTrackerClient":
        settings = settings or Settings.from_env()
        return cls(settings.api_url + settings.api_prefix, settings.user_id, **kwargs)

    # Expenses -------------------------------------------------------------
    def fetch_expenses(self) -> List[Expense]:
        try:
            result = self._request("GET", f"/expenses/{self.user_id}")
        except NETWORK_ERRORS as exc:
            logger.warning("Error fetching expenses: %s", exc)
            self.expenses = sample_expenses()
            return self.expenses
        if result.get("success"):
            self.expenses = [Expense.from_dict(record) for record in result.get("expenses", [])]
        return self.expenses

    def add_expense(
        self,
        amount: object,
        description: object,
        category: object,
        day: Optional[object] = None,
    ) -> Optional[Expense]:
        """Validate the form input, submit it and prepend the new expense.

        Returns ``None`` when the server answered without success.
        """
        body = {
            "amount": parse_amount(amount, "amount"),
            "description": validate_required_str(description, "description", 200),
            "category": validate_category(category),
            "date": validate_date(day, "date") if day is not None else self._today(),
        }
        wire = {**body, "amount": float(body["amount"]), "date": body["date"].isoformat()}
        try:
            result = self._request("POST", f"/expenses/{self.user_id}", json=wire)
        except NETWORK_ERRORS as exc:
            logger.warning("Error adding expense: %s", exc)
            expense = Expense(id=generate_expense_id(), **body)
        else:
            if not result.get("success"):
                return None
            expense = Expense(id=str(result["id"]), **body)
        self.expenses.insert(0, expense)
        return expense

    def delete_expense(self, expense_id: str) -> bool:
        try:
            result = self._request("DELETE", f"/expenses/{self.user_id}/{expense_id}")
        except NETWORK_ERRORS as exc:
            logger.warning("Error deleting expense: %s", exc)
        else:
            if not result.get("success"):
                return False
        self.expenses = [expense for expense in self.expenses if expense.id != expense_id]
        return True

    # Salary ---------------------------------------------------------------
    def fetch_salary(self) -> Salary:
        try:
            result = self._request("GET", f"/salary/{self.user_id}")
        except NETWORK_ERRORS as exc:
            logger.warning("Error fetching salary data: %s", exc)
            return self.salary
        if result.get("success"):
            self.salary = Salary.from_dict(result["salary"])
        return self.salary

    def update_salary(self, monthly: object) -> bool:
        amount = parse_amount(monthly, "monthly")
        try:
            result = self._request("POST", f"/salary/{self.user_id}", json={"monthly": float(amount)})
        except NETWORK_ERRORS as exc:
            logger.warning("Error updating salary: %s", exc)
            return False
        if not result.get("success"):
            return False
        self.salary = Salary(monthly=amount, last_updated=self.salary.last_updated)
        return True

    # Savings --------------------------------------------------------------
    def fetch_savings(self) -> Savings:
        try:
            result = self._request("GET", f"/savings/{self.user_id}")
        except NETWORK_ERRORS as exc:
            logger.warning("Error fetching savings data: %s", exc)
            return self.savings
        if result.get("success"):
            self.savings = Savings.from_dict(result["savings"])
        return self.savings

    def update_goal(self, goal: object) -> bool:
        return self._update_savings({"goal": parse_amount(goal, "goal")})

    def deposit(self, amount: object) -> bool:
        value = parse_amount(amount, "amount")
        return self._update_savings({"current": self.savings.current + value})

    def withdraw(self, amount: object) -> bool:
        value = parse_amount(amount, "amount")
        return self._update_savings({"current": max(Decimal("0"), self.savings.current - value)})

    def _update_savings(self, updates: Dict[str, Decimal]) -> bool:
        merged = self.savings.merge(updates)
        body = {"goal": float(merged.goal), "current": float(merged.current)}
        try:
            result = self._request("POST", f"/savings/{self.user_id}", json=body)
        except NETWORK_ERRORS as exc:
            logger.warning("Error updating savings data: %s", exc)
            return False
        if not result.get("success"):
            return False
        self.savings = merged
        return True

    # Derived views --------------------------------------------------------
    @property
    def monthly_expenses(self) -> Decimal:
        return aggregates.monthly_total(self.expenses, aggregates.month_key(self._today()))

    def budget_summary(self, monthly_budget: Decimal = aggregates.DEFAULT_MONTHLY_BUDGET) -> aggregates.BudgetSummary:
        return aggregates.budget_summary(self.expenses, self._today(), monthly_budget)

    def salary_analysis(self) -> aggregates.SalaryAnalysis:
        return aggregates.salary_analysis(self.salary, self.monthly_expenses)

    def savings_progress(self) -> aggregates.SavingsProgress:
        return aggregates.savings_progress(self.savings)

    def daily_summary(self, day: Optional[date] = None) -> aggregates.DailySummary:
        today = self._today()
        return aggregates.daily_summary(self.expenses, day or today, today)

    def monthly_trend(self, limit: int = 6) -> List[aggregates.LabelTotal]:
        return aggregates.sum_by_month(self.expenses, limit)

    def category_breakdown(self, limit: Optional[int] = 6) -> List[aggregates.LabelTotal]:
        return aggregates.sum_by_category(self.expenses, limit)

    def daily_trend(self, days: int = 30) -> List[aggregates.DayTotal]:
        return aggregates.daily_window(self.expenses, self._today(), days)

    def filter_by_category(self, category: Optional[str] = None) -> List[Expense]:
        if category in (None, "", "all"):
            return list(self.expenses)
        return [expense for expense in self.expenses if expense.category == category]

    # Transport ------------------------------------------------------------
    def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        response = self._session.request(
            method,
            f"{self.base_url}{path}",
            json=json,
            headers={"Content-Type": "application/json"},
            timeout=self.timeout,
        )
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError("Unexpected response payload")
        return payload

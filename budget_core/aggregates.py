"""Derived views over expense lists: totals, groupings and trailing windows."""

from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from .models import Expense, Salary, Savings

ZERO = Decimal("0")
HUNDRED = Decimal("100")

DEFAULT_MONTHLY_BUDGET = Decimal("35000")
DEFAULT_SAVINGS_CONTRIBUTION = Decimal("5000")

DayTotal = Tuple[date, Decimal]
LabelTotal = Tuple[str, Decimal]


def total(expenses: Iterable[Expense]) -> Decimal:
    return sum((expense.amount for expense in expenses), start=ZERO)


def month_key(day: date) -> str:
    return day.strftime("%Y-%m")


def percentage(part: Decimal, whole: Decimal) -> Decimal:
    """``part`` as a percentage of ``whole``; zero when ``whole`` is zero."""
    if not whole:
        return ZERO
    return part / whole * HUNDRED


def format_amount(value: Decimal) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}₱{abs(value):,.2f}"


def monthly_total(expenses: Iterable[Expense], month: str) -> Decimal:
    return total(expense for expense in expenses if expense.month == month)


def sum_by_month(expenses: Iterable[Expense], limit: Optional[int] = 6) -> List[LabelTotal]:
    """Chronological ``(YYYY-MM, total)`` pairs, keeping only the latest ``limit`` months."""
    buckets: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    for expense in expenses:
        buckets[expense.month] += expense.amount
    ordered = sorted(buckets.items())
    if limit is not None:
        ordered = ordered[-limit:] if limit > 0 else []
    return ordered


def sum_by_category(expenses: Iterable[Expense], limit: Optional[int] = None) -> List[LabelTotal]:
    """``(category, total)`` pairs, largest first."""
    buckets: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    for expense in expenses:
        buckets[expense.category] += expense.amount
    # sorted() is stable, so equal totals keep first-seen order.
    ordered = sorted(buckets.items(), key=lambda item: item[1], reverse=True)
    return ordered[:limit] if limit is not None else ordered


def expenses_on(expenses: Iterable[Expense], day: date) -> List[Expense]:
    return [expense for expense in expenses if expense.date == day]


def daily_total(expenses: Iterable[Expense], day: date) -> Decimal:
    return total(expenses_on(expenses, day))


def daily_window(expenses: Iterable[Expense], today: date, days: int) -> List[DayTotal]:
    """Oldest-first daily totals for the ``days`` days ending with ``today``."""
    buckets: Dict[date, Decimal] = defaultdict(lambda: ZERO)
    for expense in expenses:
        buckets[expense.date] += expense.amount
    window = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
    return [(day, buckets[day]) for day in window]


@dataclass(frozen=True)
class DailySummary:
    day: date
    expenses: List[Expense]
    total: Decimal
    week: List[DayTotal]
    week_total: Decimal
    week_average: Decimal
    categories: List[LabelTotal]

    @property
    def above_average(self) -> bool:
        return self.total > self.week_average


def daily_summary(expenses: Iterable[Expense], day: date, today: Optional[date] = None) -> DailySummary:
    """Summarise ``day`` against the seven days ending ``today``."""
    expenses = list(expenses)
    selected = expenses_on(expenses, day)
    week = daily_window(expenses, today or date.today(), 7)
    week_total = sum((amount for _, amount in week), start=ZERO)
    return DailySummary(
        day=day,
        expenses=selected,
        total=total(selected),
        week=week,
        week_total=week_total,
        week_average=week_total / 7,
        categories=sum_by_category(selected),
    )


@dataclass(frozen=True)
class BudgetSummary:
    month: str
    budget: Decimal
    spent: Decimal

    @property
    def remaining(self) -> Decimal:
        return self.budget - self.spent

    @property
    def percent_used(self) -> Decimal:
        return percentage(self.spent, self.budget)

    @property
    def over_budget(self) -> bool:
        return self.remaining < 0


def budget_summary(
    expenses: Iterable[Expense],
    today: Optional[date] = None,
    monthly_budget: Decimal = DEFAULT_MONTHLY_BUDGET,
) -> BudgetSummary:
    month = month_key(today or date.today())
    return BudgetSummary(month=month, budget=monthly_budget, spent=monthly_total(expenses, month))


@dataclass(frozen=True)
class SalaryAnalysis:
    monthly: Decimal
    expenses: Decimal

    @property
    def remaining(self) -> Decimal:
        return self.monthly - self.expenses

    @property
    def expense_percentage(self) -> Decimal:
        return percentage(self.expenses, self.monthly)

    @property
    def savings_rate(self) -> Decimal:
        return percentage(self.remaining, self.monthly)

    @property
    def advice(self) -> str:
        if self.savings_rate >= 20:
            return "Great savings rate! You're on track for financial goals."
        if self.savings_rate >= 10:
            return "Good savings rate. Consider reducing expenses to save more."
        return "Low savings rate. Review your budget to increase savings."


def salary_analysis(salary: Salary, monthly_expenses: Decimal) -> SalaryAnalysis:
    return SalaryAnalysis(monthly=salary.monthly, expenses=monthly_expenses)


@dataclass(frozen=True)
class SavingsProgress:
    goal: Decimal
    current: Decimal
    monthly_contribution: Decimal = DEFAULT_SAVINGS_CONTRIBUTION

    @property
    def progress(self) -> Decimal:
        return percentage(self.current, self.goal)

    @property
    def remaining(self) -> Decimal:
        return self.goal - self.current

    @property
    def goal_reached(self) -> bool:
        return self.progress >= 100

    @property
    def months_to_goal(self) -> int:
        if self.remaining <= 0 or self.monthly_contribution <= 0:
            return 0
        return math.ceil(self.remaining / self.monthly_contribution)


def savings_progress(
    savings: Savings, monthly_contribution: Decimal = DEFAULT_SAVINGS_CONTRIBUTION
) -> SavingsProgress:
    return SavingsProgress(
        goal=savings.goal, current=savings.current, monthly_contribution=monthly_contribution
    )

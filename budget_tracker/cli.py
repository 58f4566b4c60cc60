"""Console interface for the budget tracker."""

from __future__ import annotations

import argparse
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import List, Optional

from budget_core import aggregates
from budget_core.config import Settings
from budget_core.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from budget_core.models import CATEGORIES, Expense, utc_today
from budget_core.services import ExpenseService, SalaryService, SavingsService
from budget_core.storage import JSONKeyValueStore
from budget_core.validators import (
    parse_amount,
    validate_category,
    validate_date,
    validate_required_str,
)

fmt = aggregates.format_amount


def _parse_date(value: str) -> date:
    try:
        return validate_date(value, "date")
    except ValidationError as exc:
        raise argparse.ArgumentTypeError(
            f"Invalid date '{value}'. Expected format YYYY-MM-DD."
        ) from exc


def _parse_amount(value: str) -> Decimal:
    try:
        return parse_amount(value, "amount")
    except ValidationError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _format_expense(expense: Expense) -> str:
    return (
        f"[{expense.id}] {expense.date.isoformat()} {fmt(expense.amount)}\n"
        f"  Category: {expense.category}\n"
        f"  Description: {expense.description or '-'}\n"
    )


def _today(args: argparse.Namespace) -> date:
    return args.today or utc_today()


def handle_expense(args: argparse.Namespace, service: ExpenseService) -> None:
    if args.command == "add":
        payload = {
            "amount": str(args.amount),
            "description": validate_required_str(args.description, "description", 200),
            "category": validate_category(args.category),
            "date": (args.date or _today(args)).isoformat(),
        }
        expense = service.add(args.user, payload)
        print("Expense added:\n" + _format_expense(expense))
    elif args.command == "list":
        expenses = service.list(args.user)
        if args.category:
            expenses = [expense for expense in expenses if expense.category == args.category]
        if not expenses:
            print("No expenses found.")
            return
        print(f"Found {len(expenses)} expenses (total {fmt(aggregates.total(expenses))}):")
        for expense in sorted(expenses, key=lambda exp: exp.date, reverse=True):
            print(_format_expense(expense))
    elif args.command == "delete":
        service.get(args.user, args.id)
        service.delete(args.user, args.id)
        print(f"Expense {args.id} deleted.")


def handle_salary(args: argparse.Namespace, salary: SalaryService, expenses: ExpenseService) -> None:
    if args.command == "set":
        salary.update(args.user, {"monthly": str(args.monthly)})
        print(f"Monthly salary set to {fmt(args.monthly)}")
        return
    record = salary.get(args.user)
    month = aggregates.month_key(_today(args))
    analysis = aggregates.salary_analysis(
        record, aggregates.monthly_total(expenses.list(args.user), month)
    )
    print(f"Monthly salary: {fmt(analysis.monthly)}")
    if record.last_updated:
        print(f"Last updated: {record.last_updated.date().isoformat()}")
    print(f"Expenses this month: -{fmt(analysis.expenses)} ({analysis.expense_percentage:.1f}%)")
    print(f"Remaining: {fmt(analysis.remaining)}")
    print(f"Savings rate: {analysis.savings_rate:.1f}%")
    print(analysis.advice)


def handle_savings(args: argparse.Namespace, service: SavingsService) -> None:
    if args.command == "goal":
        service.update(args.user, {"goal": str(args.amount)})
    elif args.command == "deposit":
        service.deposit(args.user, args.amount)
    elif args.command == "withdraw":
        service.withdraw(args.user, args.amount)

    progress = aggregates.savings_progress(service.get(args.user))
    print(f"Savings: {fmt(progress.current)} of {fmt(progress.goal)}")
    if progress.goal_reached:
        print("Goal achieved!")
    else:
        print(f"Progress: {progress.progress:.1f}%")
        print(f"Remaining to goal: {fmt(progress.remaining)}")
        print(f"Months to goal at {fmt(progress.monthly_contribution)}/month: {progress.months_to_goal}")


def handle_summary(args: argparse.Namespace, service: ExpenseService) -> None:
    expenses = service.list(args.user)
    summary = aggregates.budget_summary(expenses, _today(args), args.budget)
    print(f"Budget for {summary.month}: {fmt(summary.budget)}")
    print(f"Spent this month: {fmt(summary.spent)} ({summary.percent_used:.1f}% of budget used)")
    status = "Available to spend" if not summary.over_budget else "Over budget"
    print(f"Remaining: {fmt(summary.remaining)} ({status})")

    print("\nMonthly spending:")
    for month, amount in aggregates.sum_by_month(expenses):
        print(f"  {month}  {fmt(amount)}")
    print("\nTop categories:")
    for category, amount in aggregates.sum_by_category(expenses, limit=6):
        print(f"  {category:<20} {fmt(amount)}")


def handle_daily(args: argparse.Namespace, service: ExpenseService) -> None:
    today = _today(args)
    summary = aggregates.daily_summary(service.list(args.user), args.date or today, today)
    relation = "Above" if summary.above_average else "Below"
    print(f"{summary.day.strftime('%A, %B %d, %Y')}: {fmt(summary.total)}")
    print(f"{relation} 7-day average ({fmt(summary.week_average)})")
    for category, amount in summary.categories:
        print(f"  {category:<20} {fmt(amount)}")
    print("\n7-day trend:")
    for day, amount in summary.week:
        print(f"  {day.strftime('%a %d')}  {fmt(amount)}")
    print(f"7-day total: {fmt(summary.week_total)}")


def handle_serve(args: argparse.Namespace) -> None:
    from api.app import create_app

    app = create_app(args.data_dir)
    app.run(host=args.host, port=args.port, debug=args.debug)


def build_parser(settings: Optional[Settings] = None) -> argparse.ArgumentParser:
    settings = settings or Settings.from_env()
    parser = argparse.ArgumentParser(description="Budget Tracker CLI")
    parser.add_argument(
        "--data-dir",
        default=settings.data_dir,
        type=Path,
        help="Directory holding the key-value store (default: ./data)",
    )
    parser.add_argument("--user", default=settings.user_id, help="User identifier")
    parser.add_argument("--today", type=_parse_date, help=argparse.SUPPRESS)

    subparsers = parser.add_subparsers(dest="entity", required=True)

    expense_parser = subparsers.add_parser("expense", help="Manage expenses")
    expense_sub = expense_parser.add_subparsers(dest="command", required=True)

    expense_add = expense_sub.add_parser("add", help="Add a new expense")
    expense_add.add_argument("amount", type=_parse_amount)
    expense_add.add_argument("category", help=f"One of: {', '.join(CATEGORIES)}")
    expense_add.add_argument("description")
    expense_add.add_argument("--date", type=_parse_date)

    expense_list = expense_sub.add_parser("list", help="List expenses")
    expense_list.add_argument("--category")

    expense_delete = expense_sub.add_parser("delete", help="Delete an expense")
    expense_delete.add_argument("id")

    salary_parser = subparsers.add_parser("salary", help="Track monthly salary")
    salary_sub = salary_parser.add_subparsers(dest="command", required=True)
    salary_sub.add_parser("show", help="Show salary and income analysis")
    salary_set = salary_sub.add_parser("set", help="Set the gross monthly salary")
    salary_set.add_argument("monthly", type=_parse_amount)

    savings_parser = subparsers.add_parser("savings", help="Track a savings goal")
    savings_sub = savings_parser.add_subparsers(dest="command", required=True)
    savings_sub.add_parser("show", help="Show savings progress")
    for name, help_text in (
        ("goal", "Set the savings goal"),
        ("deposit", "Add to current savings"),
        ("withdraw", "Withdraw from current savings"),
    ):
        command = savings_sub.add_parser(name, help=help_text)
        command.add_argument("amount", type=_parse_amount)

    summary_parser = subparsers.add_parser("summary", help="Monthly budget overview")
    summary_parser.add_argument(
        "--budget", type=_parse_amount, default=aggregates.DEFAULT_MONTHLY_BUDGET
    )

    daily_parser = subparsers.add_parser("daily", help="Daily spending breakdown")
    daily_parser.add_argument("--date", type=_parse_date)

    serve_parser = subparsers.add_parser("serve", help="Run the REST API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=5000)
    serve_parser.add_argument("--debug", action="store_true")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.entity == "serve":
        handle_serve(args)
        return 0

    try:
        store = JSONKeyValueStore(args.data_dir)
        expense_service = ExpenseService(store)
        if args.entity == "expense":
            handle_expense(args, expense_service)
        elif args.entity == "salary":
            handle_salary(args, SalaryService(store), expense_service)
        elif args.entity == "savings":
            handle_savings(args, SavingsService(store))
        elif args.entity == "summary":
            handle_summary(args, expense_service)
        elif args.entity == "daily":
            handle_daily(args, expense_service)
        else:  # pragma: no cover - argparse should prevent this
            parser.error(f"Unknown entity: {args.entity}")
            return 2
    except ValidationError as exc:
        print(f"Validation error: {exc}", file=sys.stderr)
        return 1
    except RecordNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

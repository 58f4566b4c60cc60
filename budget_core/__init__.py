"""Core business logic package for the budget tracker."""

from .exceptions import PersistenceError, RecordNotFoundError, ValidationError
from .models import CATEGORIES, Expense, Salary, Savings
from .services import ExpenseService, SalaryService, SavingsService
from .storage import JSONKeyValueStore, KeyValueStore, MemoryKeyValueStore

__all__ = [
    "CATEGORIES",
    "Expense",
    "Salary",
    "Savings",
    "ExpenseService",
    "SalaryService",
    "SavingsService",
    "KeyValueStore",
    "JSONKeyValueStore",
    "MemoryKeyValueStore",
    "PersistenceError",
    "ValidationError",
    "RecordNotFoundError",
]

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum

ZERO = Decimal("0")


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class CategoryType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    BOTH = "both"


class BudgetPeriod(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class UncategorizedBudgetScope(str, Enum):
    """Which expenses count against a budget that has no category."""

    ALL_EXPENSES = "all_expenses"
    UNCATEGORIZED_ONLY = "uncategorized_only"


class BudgetLevel(str, Enum):
    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"
    OVER = "over"


def _require_non_negative(kind: str, ident: str, amount: Decimal) -> None:
    if amount < ZERO:
        raise ValueError(f"{kind} {ident!r} has negative amount {amount}")


@dataclass(frozen=True)
class Transaction:
    id: str
    amount: Decimal
    type: TransactionType
    transaction_date: date
    category_id: str | None = None
    description: str | None = None

    def __post_init__(self) -> None:
        _require_non_negative("transaction", self.id, self.amount)


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    type: CategoryType = CategoryType.EXPENSE
    color: str | None = None


@dataclass(frozen=True)
class Budget:
    id: str
    name: str
    amount: Decimal
    start_date: date
    period: BudgetPeriod = BudgetPeriod.MONTHLY
    category_id: str | None = None
    end_date: date | None = None

    def __post_init__(self) -> None:
        _require_non_negative("budget", self.id, self.amount)


@dataclass(frozen=True)
class LedgerSnapshot:
    transactions: tuple[Transaction, ...] = ()
    categories: tuple[Category, ...] = ()
    budgets: tuple[Budget, ...] = ()
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class Totals:
    income: Decimal
    expenses: Decimal
    balance: Decimal


@dataclass(frozen=True)
class MonthlyPoint:
    year: int
    month: int
    label: str
    income: Decimal
    expenses: Decimal
    net: Decimal


@dataclass(frozen=True)
class CategoryTotal:
    category_name: str
    total: Decimal
    count: int


@dataclass(frozen=True)
class BalancePoint:
    date: date
    income: Decimal
    expenses: Decimal
    balance: Decimal


@dataclass(frozen=True)
class BudgetStatus:
    budget_id: str
    spent: Decimal
    percentage: Decimal
    remaining: Decimal
    level: BudgetLevel

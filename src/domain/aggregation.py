"""
Pure aggregations over a fetched ledger.

Every function takes plain collections (``None`` is treated as empty) and
returns fresh values; nothing here performs I/O or mutates its inputs.
"""
from __future__ import annotations

from calendar import month_abbr
from collections import defaultdict
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from domain.models import (
    ZERO,
    BalancePoint,
    Budget,
    BudgetLevel,
    BudgetStatus,
    Category,
    CategoryTotal,
    MonthlyPoint,
    Totals,
    Transaction,
    TransactionType,
    UncategorizedBudgetScope,
)

OTHER_CATEGORY = "Other"
HUNDRED = Decimal("100")
WARNING_PERCENT = Decimal("70")
CRITICAL_PERCENT = Decimal("90")


def totals(transactions: Optional[Iterable[Transaction]]) -> Totals:
    income = ZERO
    expenses = ZERO
    for txn in transactions or ():
        if txn.type == TransactionType.INCOME:
            income += txn.amount
        else:
            expenses += txn.amount
    return Totals(income=income, expenses=expenses, balance=income - expenses)


def month_label(year: int, month: int) -> str:
    return f"{month_abbr[month]} {year:04d}"


def monthly_series(
    transactions: Optional[Iterable[Transaction]],
    months_window: int = 6,
) -> list[MonthlyPoint]:
    """
    Income/expense/net per calendar month, oldest first, limited to the most
    recent ``months_window`` months that have data.
    """
    if months_window <= 0:
        return []

    groups: dict[tuple[int, int], dict[str, Decimal]] = defaultdict(
        lambda: {"income": ZERO, "expenses": ZERO}
    )
    for txn in transactions or ():
        entry = groups[(txn.transaction_date.year, txn.transaction_date.month)]
        if txn.type == TransactionType.INCOME:
            entry["income"] += txn.amount
        else:
            entry["expenses"] += txn.amount

    keys = sorted(groups.keys())[-months_window:]
    return [
        MonthlyPoint(
            year=year,
            month=month,
            label=month_label(year, month),
            income=groups[(year, month)]["income"],
            expenses=groups[(year, month)]["expenses"],
            net=groups[(year, month)]["income"] - groups[(year, month)]["expenses"],
        )
        for year, month in keys
    ]


def category_names(categories: Optional[Iterable[Category]]) -> dict[str, str]:
    return {category.id: category.name for category in categories or ()}


def resolve_category_name(category_id: str | None, names: dict[str, str]) -> str:
    if category_id is None:
        return OTHER_CATEGORY
    return names.get(category_id, OTHER_CATEGORY)


def category_breakdown(
    transactions: Optional[Iterable[Transaction]],
    categories: Optional[Iterable[Category]],
) -> list[CategoryTotal]:
    names = category_names(categories)
    sums: dict[str, Decimal] = {}
    counts: dict[str, int] = {}
    for txn in transactions or ():
        if txn.type != TransactionType.EXPENSE:
            continue
        name = resolve_category_name(txn.category_id, names)
        sums[name] = sums.get(name, ZERO) + txn.amount
        counts[name] = counts.get(name, 0) + 1
    return [CategoryTotal(category_name=name, total=sums[name], count=counts[name]) for name in sums]


def balance_before(transactions: Optional[Iterable[Transaction]], day: date) -> Decimal:
    """Net of every transaction dated strictly before ``day``."""
    return totals(txn for txn in transactions or () if txn.transaction_date < day).balance


def trend_cutoff(window_days: int, today: date | None = None) -> date:
    """First day of the trailing window, clamped to the calendar range."""
    try:
        return (today or date.today()) - timedelta(days=window_days)
    except OverflowError:
        return date.min if window_days > 0 else date.max


def recent_balance_trend(
    transactions: Optional[Iterable[Transaction]],
    window_days: int = 30,
    max_points: int = 14,
    today: date | None = None,
    opening_balance: Decimal = ZERO,
) -> list[BalancePoint]:
    """
    Daily income/expenses over the trailing window with a running balance.

    The balance starts from ``opening_balance`` (zero by default), so it shows
    net flow inside the window rather than the all-time balance.
    """
    if max_points <= 0:
        return []

    cutoff = trend_cutoff(window_days, today)
    days: dict[date, dict[str, Decimal]] = defaultdict(lambda: {"income": ZERO, "expenses": ZERO})
    for txn in transactions or ():
        if txn.transaction_date < cutoff:
            continue
        entry = days[txn.transaction_date]
        if txn.type == TransactionType.INCOME:
            entry["income"] += txn.amount
        else:
            entry["expenses"] += txn.amount

    points: list[BalancePoint] = []
    running = opening_balance
    for day in sorted(days.keys()):
        entry = days[day]
        running += entry["income"] - entry["expenses"]
        points.append(BalancePoint(date=day, income=entry["income"], expenses=entry["expenses"], balance=running))
    return points[-max_points:]


def _budget_matches(
    budget: Budget,
    txn: Transaction,
    scope: UncategorizedBudgetScope,
) -> bool:
    if budget.category_id is not None:
        return txn.category_id == budget.category_id
    if scope == UncategorizedBudgetScope.UNCATEGORIZED_ONLY:
        return txn.category_id is None
    return True


def budget_level(percentage: Decimal, remaining: Decimal) -> BudgetLevel:
    if remaining < ZERO:
        return BudgetLevel.OVER
    if percentage >= CRITICAL_PERCENT:
        return BudgetLevel.CRITICAL
    if percentage >= WARNING_PERCENT:
        return BudgetLevel.WARNING
    return BudgetLevel.OK


def budget_status(
    budget: Budget,
    transactions: Optional[Iterable[Transaction]],
    scope: UncategorizedBudgetScope = UncategorizedBudgetScope.ALL_EXPENSES,
) -> BudgetStatus:
    spent = ZERO
    for txn in transactions or ():
        if txn.type == TransactionType.EXPENSE and _budget_matches(budget, txn, scope):
            spent += txn.amount

    percentage = spent / budget.amount * HUNDRED if budget.amount > ZERO else ZERO
    remaining = budget.amount - spent
    return BudgetStatus(
        budget_id=budget.id,
        spent=spent,
        percentage=percentage,
        remaining=remaining,
        level=budget_level(percentage, remaining),
    )


def budget_progress(
    budgets: Optional[Iterable[Budget]],
    transactions: Optional[Iterable[Transaction]],
    scope: UncategorizedBudgetScope = UncategorizedBudgetScope.ALL_EXPENSES,
) -> list[BudgetStatus]:
    txns = tuple(transactions or ())
    return [budget_status(budget, txns, scope) for budget in budgets or ()]


def total_budgeted(budgets: Optional[Iterable[Budget]]) -> Decimal:
    return sum((budget.amount for budget in budgets or ()), ZERO)


def average_usage(statuses: Optional[Iterable[BudgetStatus]]) -> int:
    """Mean budget percentage rounded half up to a whole number, 0 without budgets."""
    percentages = [status.percentage for status in statuses or ()]
    if not percentages:
        return 0
    mean = sum(percentages, ZERO) / Decimal(len(percentages))
    return int(mean.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def savings_rate(total_income: Decimal, net_balance: Decimal) -> Decimal:
    if total_income <= ZERO:
        return ZERO
    return net_balance / total_income * HUNDRED


def monthly_averages(series: Optional[Iterable[MonthlyPoint]]) -> tuple[Decimal, Decimal]:
    points = list(series or ())
    if not points:
        return ZERO, ZERO
    count = Decimal(len(points))
    income = sum((p.income for p in points), ZERO)
    expenses = sum((p.expenses for p in points), ZERO)
    return income / count, expenses / count


def filter_transactions(
    transactions: Optional[Iterable[Transaction]],
    categories: Optional[Iterable[Category]] = None,
    query: str | None = None,
    txn_type: TransactionType | None = None,
) -> list[Transaction]:
    """Case-insensitive search over description and category name, plus a type filter."""
    names = category_names(categories)
    needle = (query or "").strip().lower()
    matched: list[Transaction] = []
    for txn in transactions or ():
        if txn_type is not None and txn.type != txn_type:
            continue
        if needle:
            description = (txn.description or "").lower()
            category = names.get(txn.category_id or "", "").lower()
            if needle not in description and needle not in category:
                continue
        matched.append(txn)
    return matched


def recent_transactions(
    transactions: Optional[Iterable[Transaction]],
    limit: int = 10,
) -> list[Transaction]:
    """Newest first; ties keep their input order."""
    if limit <= 0:
        return []
    ordered = sorted(transactions or (), key=lambda txn: txn.transaction_date, reverse=True)
    return ordered[:limit]

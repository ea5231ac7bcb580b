"""Presentation helpers layered on top of view results."""
from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from domain.schemas import PageResult

CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£", "JPY": "¥", "INR": "₹"}


def format_currency(amount: Decimal | float | int, currency: str = "USD", whole: bool = False) -> str:
    value = Decimal(str(amount))
    quantum = Decimal("1") if whole else Decimal("0.01")
    value = value.quantize(quantum, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    digits = f"{abs(value):,.0f}" if whole else f"{abs(value):,.2f}"
    symbol = CURRENCY_SYMBOLS.get(currency.upper())
    if symbol is None:
        return f"{sign}{currency.upper()} {digits}"
    return f"{sign}{symbol}{digits}"


def format_day(value: date) -> str:
    return f"{value.strftime('%b')} {value.day}, {value.year}"


def _money_lines(result: dict[str, Any], keys: tuple[tuple[str, str], ...], currency: str) -> list[str]:
    return [f"  {label}: {format_currency(result[key], currency)}" for key, label in keys if key in result]


def render_text(page: PageResult, currency: str = "USD") -> str:
    """Plain-text rendering of a page result for the terminal."""
    lines = [f"{page.page.title()} ({page.counts.transactions} transactions)"]
    for view in page.views:
        lines.append(f"[{view.tool}]")
        if not view.ok:
            lines.extend(f"  error: {error}" for error in view.errors)
            continue
        result = view.result
        if view.tool == "ledger.totals":
            lines.extend(_money_lines(result, (("balance", "Balance"), ("income", "Income"), ("expenses", "Expenses")), currency))
        elif view.tool == "analytics.summary":
            lines.extend(_money_lines(result, (
                ("net_worth", "Net worth"),
                ("avg_monthly_income", "Avg monthly income"),
                ("avg_monthly_expenses", "Avg monthly expenses"),
            ), currency))
            lines.append(f"  Savings rate: {result.get('savings_rate', 0)}%")
        elif view.tool == "budget.overview":
            lines.extend(_money_lines(result, (("total_budgeted", "Total budget"),), currency))
            lines.append(f"  Over budget: {result.get('over_budget_count', 0)} of {result.get('budget_count', 0)}")
            lines.append(f"  Average usage: {result.get('average_usage', 0)}%")
        elif view.tool == "budget.progress":
            for item in result.get("budgets", []):
                remaining = item["remaining"]
                label = "Remaining" if remaining >= 0 else "Over budget"
                lines.append(
                    f"  {item['name']}: {format_currency(item['spent'], currency)} of "
                    f"{format_currency(item['amount'], currency)} ({item['percentage']:.0f}%) "
                    f"{label}: {format_currency(abs(remaining), currency)}"
                )
        elif view.tool == "ledger.transactions":
            for row in result.get("transactions", []):
                sign = "+" if row["type"] == "income" else "-"
                day = format_day(date.fromisoformat(row["transaction_date"]))
                lines.append(f"  {day}  {sign}{format_currency(row['amount'], currency)}  {row['category']}  {row['description'] or ''}".rstrip())
        elif view.tool == "ledger.monthly_series":
            for month in result.get("months", []):
                lines.append(
                    f"  {month['month']}: in {format_currency(month['income'], currency, whole=True)} "
                    f"out {format_currency(month['expenses'], currency, whole=True)} "
                    f"net {format_currency(month['net'], currency, whole=True)}"
                )
        elif view.tool == "ledger.category_breakdown":
            for category in result.get("categories", []):
                lines.append(f"  {category['name']}: {format_currency(category['total'], currency)} ({category['share']:.0f}%)")
        elif view.tool == "ledger.balance_trend":
            for point in result.get("points", []):
                day = format_day(date.fromisoformat(point["date"]))
                lines.append(f"  {day}: {format_currency(point['balance'], currency)}")
        else:
            lines.append(f"  {len(result)} fields")
    return "\n".join(lines)

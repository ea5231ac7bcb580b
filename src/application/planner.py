from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from domain.schemas import PagePlan, PageRequest, PlanCall
from infrastructure.config import Settings
from tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewSlot:
    tool: str
    purpose: str
    option_keys: tuple[str, ...] = ()
    defaults: dict[str, str] = field(default_factory=dict)


# Defaults map an argument name to the Settings attribute that supplies it.
PAGES: dict[str, tuple[ViewSlot, ...]] = {
    "dashboard": (
        ViewSlot("ledger.totals", "Balance, income and expense cards"),
        ViewSlot("budget.overview", "Total budget card", ("scope",)),
        ViewSlot("ledger.monthly_series", "Income vs expenses bar chart", ("months_window",),
                 {"months_window": "months_window"}),
        ViewSlot("ledger.category_breakdown", "Spending by category pie chart"),
        ViewSlot("ledger.transactions", "Recent transactions list", ("limit",), {"limit": "recent_limit"}),
        ViewSlot("budget.progress", "Budget progress widget", ("scope",)),
    ),
    "analytics": (
        ViewSlot("analytics.summary", "Net worth, averages and savings rate cards", ("months_window",),
                 {"months_window": "months_window"}),
        ViewSlot("ledger.monthly_series", "Monthly trend and net charts", ("months_window",),
                 {"months_window": "months_window"}),
        ViewSlot("ledger.category_breakdown", "Expense categories chart"),
        ViewSlot("ledger.balance_trend", "Daily balance trend", ("window_days", "max_points", "seed_from_history"),
                 {"window_days": "trend_days", "max_points": "trend_points"}),
    ),
    "budgets": (
        ViewSlot("budget.overview", "Budget totals", ("scope",)),
        ViewSlot("budget.progress", "Per-budget progress", ("scope", "budget_id")),
    ),
    "transactions": (
        ViewSlot("ledger.transactions", "Searchable transaction history", ("query", "type", "limit")),
    ),
}

TRANSACTIONS_PAGE_LIMIT = 100


class PagePlanner:
    """Maps a page name to the ordered list of view calls that render it."""

    def __init__(self, registry: ToolRegistry, settings: Settings | None = None):
        self._registry = registry
        self._settings = settings or Settings()

    def pages(self) -> list[str]:
        return sorted(PAGES)

    def plan(self, request: PageRequest) -> PagePlan:
        slots = PAGES.get(request.page)
        if slots is None:
            raise ValueError(f"Unknown page: {request.page!r} (expected one of {', '.join(self.pages())})")

        calls: list[PlanCall] = []
        for index, slot in enumerate(slots, start=1):
            if not self._registry.has(slot.tool):
                logger.warning("PagePlanner skipping unregistered view=%s page=%s", slot.tool, request.page)
                continue
            calls.append(
                PlanCall(
                    id=f"c{index}",
                    tool=slot.tool,
                    args=self._build_args(slot, request.page, request.options),
                    purpose=slot.purpose,
                )
            )
        logger.info("PagePlanner planned request_id=%s page=%s calls=%d", request.request_id, request.page, len(calls))
        return PagePlan(page=request.page, calls=calls)

    def _build_args(self, slot: ViewSlot, page: str, options: dict[str, Any]) -> dict[str, Any]:
        args: dict[str, Any] = {key: getattr(self._settings, attr) for key, attr in slot.defaults.items()}
        if page == "transactions":
            args.setdefault("limit", TRANSACTIONS_PAGE_LIMIT)
        for key in slot.option_keys:
            if options.get(key) is not None:
                args[key] = options[key]
        return args

from __future__ import annotations

from domain.aggregation import average_usage, budget_progress, total_budgeted
from domain.models import BudgetLevel, LedgerSnapshot
from domain.schemas import ToolRequest, ToolResponse
from tools._snapshot_support import ArgumentError, money
from tools.base import Tool
from tools.budget.progress import resolve_scope
from tools.registry import register_tool


@register_tool
class BudgetOverviewTool(Tool):
    name = "budget.overview"
    description = (
        "Total allocated across all budgets, how many are over or near their limit "
        "and the average usage percentage."
    )

    def run(self, request: ToolRequest, snapshot: LedgerSnapshot) -> ToolResponse:
        try:
            scope = resolve_scope(request)
        except ArgumentError as exc:
            return self.fail(request, str(exc))

        statuses = budget_progress(snapshot.budgets, snapshot.transactions, scope)
        levels = [status.level for status in statuses]
        return self.respond(
            request,
            {
                "total_budgeted": money(total_budgeted(snapshot.budgets)),
                "budget_count": len(statuses),
                "over_budget_count": levels.count(BudgetLevel.OVER),
                "near_limit_count": levels.count(BudgetLevel.WARNING) + levels.count(BudgetLevel.CRITICAL),
                "average_usage": average_usage(statuses),
                "currency": request.context.currency,
            },
        )

from __future__ import annotations

from typing import Any

from domain.aggregation import budget_progress, category_names
from domain.models import Budget, BudgetStatus, LedgerSnapshot, UncategorizedBudgetScope
from domain.schemas import ToolRequest, ToolResponse
from tools._snapshot_support import ArgumentError, money, str_arg
from tools.base import Tool, ToolSpec
from tools.registry import register_tool


def resolve_scope(request: ToolRequest) -> UncategorizedBudgetScope:
    raw = str_arg(request.args, "scope")
    if raw is None:
        return request.context.budget_scope
    try:
        return UncategorizedBudgetScope(raw)
    except ValueError:
        allowed = ", ".join(s.value for s in UncategorizedBudgetScope)
        raise ArgumentError(f"scope must be one of {allowed}, got {raw!r}") from None


def _serialize_status(budget: Budget, status: BudgetStatus, names: dict[str, str]) -> dict[str, Any]:
    return {
        "budget_id": budget.id,
        "name": budget.name,
        "period": budget.period.value,
        "category_id": budget.category_id,
        "category": names.get(budget.category_id) if budget.category_id else None,
        "start_date": budget.start_date.isoformat(),
        "end_date": budget.end_date.isoformat() if budget.end_date else None,
        "amount": money(budget.amount),
        "spent": money(status.spent),
        "percentage": money(status.percentage),
        "remaining": money(status.remaining),
        "level": status.level.value,
    }


@register_tool
class BudgetProgressTool(Tool):
    name = "budget.progress"
    description = (
        "Spent, remaining and percentage used for each budget. Optional `budget_id` limits the result "
        "to one budget; `scope` overrides how budgets without a category are matched."
    )

    def run(self, request: ToolRequest, snapshot: LedgerSnapshot) -> ToolResponse:
        try:
            scope = resolve_scope(request)
        except ArgumentError as exc:
            return self.fail(request, str(exc))

        budgets = list(snapshot.budgets)
        budget_id = str_arg(request.args, "budget_id")
        if budget_id is not None:
            budgets = [b for b in budgets if b.id == budget_id]
            if not budgets:
                return self.fail(request, f"Unknown budget_id: {budget_id}")

        names = category_names(snapshot.categories)
        statuses = budget_progress(budgets, snapshot.transactions, scope)
        return self.respond(
            request,
            {
                "budgets": [_serialize_status(b, s, names) for b, s in zip(budgets, statuses)],
                "budget_count": len(budgets),
                "scope": scope.value,
            },
        )

    def spec(self) -> ToolSpec:
        return ToolSpec(
            name=self.name,
            description=self.description,
            args_schema={
                "type": "object",
                "properties": {
                    "budget_id": {"type": "string"},
                    "scope": {"type": "string", "enum": [s.value for s in UncategorizedBudgetScope]},
                },
            },
        )

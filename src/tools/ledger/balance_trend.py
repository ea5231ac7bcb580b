from __future__ import annotations

from domain.aggregation import balance_before, recent_balance_trend, trend_cutoff
from domain.models import ZERO, LedgerSnapshot
from domain.schemas import ToolRequest, ToolResponse
from tools._snapshot_support import ArgumentError, bool_arg, int_arg, money
from tools.base import Tool, ToolSpec
from tools.registry import register_tool

DEFAULT_WINDOW_DAYS = 30
DEFAULT_MAX_POINTS = 14


@register_tool
class BalanceTrendTool(Tool):
    name = "ledger.balance_trend"
    description = (
        "Daily income/expenses over the trailing `window_days` with a running balance, "
        "keeping the last `max_points` days. The balance starts at zero unless `seed_from_history` is set."
    )

    def run(self, request: ToolRequest, snapshot: LedgerSnapshot) -> ToolResponse:
        try:
            window_days = int_arg(request.args, "window_days", DEFAULT_WINDOW_DAYS)
            max_points = int_arg(request.args, "max_points", DEFAULT_MAX_POINTS, minimum=1)
            seed_from_history = bool_arg(request.args, "seed_from_history")
        except ArgumentError as exc:
            return self.fail(request, str(exc))

        today = request.context.resolved_today()
        cutoff = trend_cutoff(window_days, today)
        opening = balance_before(snapshot.transactions, cutoff) if seed_from_history else ZERO
        points = recent_balance_trend(
            snapshot.transactions,
            window_days=window_days,
            max_points=max_points,
            today=today,
            opening_balance=opening,
        )
        return self.respond(
            request,
            {
                "points": [
                    {
                        "date": point.date.isoformat(),
                        "income": money(point.income),
                        "expenses": money(point.expenses),
                        "balance": money(point.balance),
                    }
                    for point in points
                ],
                "window_start": cutoff.isoformat(),
                "as_of": today.isoformat(),
                "opening_balance": money(opening),
                "seeded_from_history": seed_from_history,
            },
        )

    def spec(self) -> ToolSpec:
        return ToolSpec(
            name=self.name,
            description=self.description,
            args_schema={
                "type": "object",
                "properties": {
                    "window_days": {"type": "integer", "minimum": 0},
                    "max_points": {"type": "integer", "minimum": 1},
                    "seed_from_history": {"type": "boolean"},
                },
            },
        )

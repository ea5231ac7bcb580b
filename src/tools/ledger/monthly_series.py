from __future__ import annotations

from domain.aggregation import monthly_series
from domain.models import LedgerSnapshot
from domain.schemas import ToolRequest, ToolResponse
from tools._snapshot_support import ArgumentError, int_arg, money
from tools.base import Tool, ToolSpec
from tools.registry import register_tool

DEFAULT_MONTHS_WINDOW = 6


@register_tool
class MonthlySeriesTool(Tool):
    name = "ledger.monthly_series"
    description = (
        "Income, expenses and net per calendar month, oldest first. "
        "Takes `months_window` (default 6): only the most recent months with data are returned."
    )

    def run(self, request: ToolRequest, snapshot: LedgerSnapshot) -> ToolResponse:
        try:
            months_window = int_arg(request.args, "months_window", DEFAULT_MONTHS_WINDOW, minimum=1)
        except ArgumentError as exc:
            return self.fail(request, str(exc))

        series = monthly_series(snapshot.transactions, months_window)
        months = [
            {
                "month": point.label,
                "key": f"{point.year:04d}-{point.month:02d}",
                "income": money(point.income),
                "expenses": money(point.expenses),
                "net": money(point.net),
            }
            for point in series
        ]
        return self.respond(request, {"months": months, "months_window": months_window, "month_count": len(months)})

    def spec(self) -> ToolSpec:
        return ToolSpec(
            name=self.name,
            description=self.description,
            args_schema={
                "type": "object",
                "properties": {
                    "months_window": {
                        "type": "integer",
                        "minimum": 1,
                        "description": "Number of most recent months to keep.",
                    },
                },
            },
        )

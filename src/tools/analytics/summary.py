from __future__ import annotations

from domain.aggregation import monthly_averages, monthly_series, savings_rate, totals
from domain.models import LedgerSnapshot
from domain.schemas import ToolRequest, ToolResponse
from tools._snapshot_support import ArgumentError, int_arg, money
from tools.base import Tool
from tools.ledger.monthly_series import DEFAULT_MONTHS_WINDOW
from tools.registry import register_tool


@register_tool
class AnalyticsSummaryTool(Tool):
    name = "analytics.summary"
    description = (
        "Headline analytics: net worth, average monthly income and expenses over the "
        "`months_window` most recent months, and the savings rate."
    )

    def run(self, request: ToolRequest, snapshot: LedgerSnapshot) -> ToolResponse:
        try:
            months_window = int_arg(request.args, "months_window", DEFAULT_MONTHS_WINDOW, minimum=1)
        except ArgumentError as exc:
            return self.fail(request, str(exc))

        overall = totals(snapshot.transactions)
        series = monthly_series(snapshot.transactions, months_window)
        avg_income, avg_expenses = monthly_averages(series)
        rate = savings_rate(overall.income, overall.balance)
        return self.respond(
            request,
            {
                "net_worth": money(overall.balance),
                "total_income": money(overall.income),
                "total_expenses": money(overall.expenses),
                "avg_monthly_income": money(avg_income),
                "avg_monthly_expenses": money(avg_expenses),
                "savings_rate": round(float(rate), 1),
                "months_covered": len(series),
            },
        )

from __future__ import annotations

from domain.aggregation import savings_rate, totals
from domain.models import LedgerSnapshot
from domain.schemas import ToolRequest, ToolResponse
from tools._snapshot_support import money
from tools.base import Tool
from tools.registry import register_tool


@register_tool
class LedgerTotalsTool(Tool):
    name = "ledger.totals"
    description = "Total income, total expenses and net balance over the whole snapshot, plus the savings rate."

    def run(self, request: ToolRequest, snapshot: LedgerSnapshot) -> ToolResponse:
        result = totals(snapshot.transactions)
        return self.respond(
            request,
            {
                "income": money(result.income),
                "expenses": money(result.expenses),
                "balance": money(result.balance),
                "savings_rate": money(savings_rate(result.income, result.balance)),
                "transaction_count": len(snapshot.transactions),
                "currency": request.context.currency,
            },
        )

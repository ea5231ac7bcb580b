from __future__ import annotations

from typing import Any

from domain.aggregation import category_breakdown
from domain.models import ZERO, CategoryTotal, LedgerSnapshot
from domain.schemas import ToolRequest, ToolResponse
from tools._snapshot_support import money
from tools.base import Tool
from tools.registry import register_tool


def _build_breakdown(buckets: list[CategoryTotal]) -> dict[str, Any]:
    expenses = sum((bucket.total for bucket in buckets), ZERO)
    ordered = sorted(buckets, key=lambda b: (-b.total, b.category_name))
    categories = [
        {
            "name": bucket.category_name,
            "total": money(bucket.total),
            "count": bucket.count,
            "share": money(bucket.total / expenses * 100) if expenses > ZERO else 0.0,
        }
        for bucket in ordered
    ]
    return {
        "categories": categories,
        "category_count": len(categories),
        "total_expenses": money(expenses),
        "transaction_count": sum(bucket.count for bucket in buckets),
    }


@register_tool
class CategoryBreakdownTool(Tool):
    name = "ledger.category_breakdown"
    description = "Expense totals and counts per category; unknown or missing categories are grouped under Other."

    def run(self, request: ToolRequest, snapshot: LedgerSnapshot) -> ToolResponse:
        buckets = category_breakdown(snapshot.transactions, snapshot.categories)
        return self.respond(request, _build_breakdown(buckets))

from __future__ import annotations

from domain.aggregation import category_names, filter_transactions, recent_transactions
from domain.models import LedgerSnapshot, TransactionType
from domain.schemas import ToolRequest, ToolResponse
from tools._snapshot_support import ArgumentError, int_arg, serialize_transaction, str_arg
from tools.base import Tool, ToolSpec
from tools.registry import register_tool

DEFAULT_LIMIT = 10


@register_tool
class TransactionListTool(Tool):
    name = "ledger.transactions"
    description = (
        "Newest transactions first. Optional `query` searches description and category name, "
        "`type` is income or expense, `limit` caps the list (default 10)."
    )

    def run(self, request: ToolRequest, snapshot: LedgerSnapshot) -> ToolResponse:
        args = request.args
        try:
            limit = int_arg(args, "limit", DEFAULT_LIMIT, minimum=1)
            raw_type = str_arg(args, "type")
            if raw_type in (None, "all"):
                txn_type = None
            elif raw_type in ("income", "expense"):
                txn_type = TransactionType(raw_type)
            else:
                raise ArgumentError(f"type must be income, expense or all, got {raw_type!r}")
        except ArgumentError as exc:
            return self.fail(request, str(exc))

        query = str_arg(args, "query")
        matched = filter_transactions(snapshot.transactions, snapshot.categories, query=query, txn_type=txn_type)
        names = category_names(snapshot.categories)
        rows = [serialize_transaction(txn, names) for txn in recent_transactions(matched, limit)]
        return self.respond(
            request,
            {
                "transactions": rows,
                "matched_count": len(matched),
                "query": query,
                "type": txn_type.value if txn_type else "all",
            },
        )

    def spec(self) -> ToolSpec:
        return ToolSpec(
            name=self.name,
            description=self.description,
            args_schema={
                "type": "object",
                "properties": {
                    "query": {"type": "string"},
                    "type": {"type": "string", "enum": ["all", "income", "expense"]},
                    "limit": {"type": "integer", "minimum": 1},
                },
            },
        )

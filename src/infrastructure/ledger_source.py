from __future__ import annotations

import logging
import time
from typing import Any, Iterable

from pydantic import ValidationError

from domain.aggregation import category_names
from domain.models import Budget, Category, LedgerSnapshot, Transaction
from domain.schemas import TransactionQuery
from infrastructure.ledger_providers.provider import Provider

logger = logging.getLogger(__name__)


class LedgerSource:
    """
    Builds immutable ledger snapshots from registered providers.

    Dynamic behavior:
    - Providers can be added/removed at runtime via add_provider/remove_provider
    - If no provider filter is passed, reads from all registered providers
    - Transaction-level filters are applied after fetching; the text query
      matches the description or the resolved category name
    - Categories and budgets are de-duplicated by id, first provider wins
    """

    def __init__(self, providers: Iterable[Provider] | None = None) -> None:
        self._providers: dict[str, Provider] = {}
        for provider in providers or []:
            self.add_provider(provider)

    # ---- dynamic provider management ----
    def add_provider(self, provider: Provider) -> None:
        self._providers[provider.name] = provider

    def remove_provider(self, provider_name: str) -> None:
        self._providers.pop(provider_name, None)

    def list_provider_names(self) -> list[str]:
        return sorted(self._providers.keys())

    def snapshot(self, filters: TransactionQuery | dict[str, Any] | None = None) -> LedgerSnapshot:
        query = self._normalize_filters(filters)
        selected = self._select_providers(query)
        started = time.perf_counter()

        transactions: list[Transaction] = []
        categories: dict[str, Category] = {}
        budgets: dict[str, Budget] = {}
        for provider in selected:
            for category in provider.fetch_categories():
                categories.setdefault(category.id, category)
            for budget in provider.fetch_budgets():
                budgets.setdefault(budget.id, budget)

        names = category_names(categories.values())
        for provider in selected:
            for txn in provider.fetch_transactions(query):
                if self._transaction_matches(txn, query, names):
                    transactions.append(txn)

        logger.info(
            "LedgerSource snapshot providers=%s transactions=%d categories=%d budgets=%d in %.2fs",
            ",".join(p.name for p in selected) or "-",
            len(transactions),
            len(categories),
            len(budgets),
            time.perf_counter() - started,
        )
        return LedgerSnapshot(
            transactions=tuple(transactions),
            categories=tuple(categories.values()),
            budgets=tuple(budgets.values()),
        )

    def _normalize_filters(self, filters: TransactionQuery | dict[str, Any] | None) -> TransactionQuery:
        if filters is None:
            return TransactionQuery()
        if isinstance(filters, TransactionQuery):
            return filters
        try:
            query = TransactionQuery.model_validate(filters)
        except ValidationError as exc:
            raise ValueError(f"Invalid TransactionQuery: {exc}") from exc
        return query

    # ---- provider filtering ----
    def _select_providers(self, query: TransactionQuery) -> list[Provider]:
        requested = query.providers or ([query.source] if query.source else [])
        if not requested:
            return list(self._providers.values())

        requested_set = {str(name) for name in requested}
        return [p for name, p in self._providers.items() if name in requested_set]

    # ---- transaction filtering ----
    def _transaction_matches(self, txn: Transaction, query: TransactionQuery, names: dict[str, str]) -> bool:
        date_range = query.date_range
        if date_range is not None:
            if txn.transaction_date < date_range.start or txn.transaction_date > date_range.end:
                return False

        if query.types and txn.type.value not in query.types:
            return False

        if query.category_ids and (txn.category_id or "") not in set(query.category_ids):
            return False

        if query.min_amount is not None and txn.amount < query.min_amount:
            return False
        if query.max_amount is not None and txn.amount > query.max_amount:
            return False

        text = (query.query or "").strip().lower()
        if text:
            category = names.get(txn.category_id or "", "").lower()
            if text not in (txn.description or "").lower() and text not in category:
                return False

        return True

from __future__ import annotations

from typing import Iterable

from domain.models import Budget, Category, LedgerSnapshot, Transaction
from domain.schemas import TransactionQuery
from infrastructure.ledger_providers.provider import Provider


class InMemoryProvider(Provider):
    """Serves records that are already materialized, e.g. a snapshot posted to the API."""

    def __init__(
        self,
        transactions: Iterable[Transaction] = (),
        categories: Iterable[Category] = (),
        budgets: Iterable[Budget] = (),
        name: str = "memory",
    ) -> None:
        self.name = name
        self._transactions = list(transactions)
        self._categories = list(categories)
        self._budgets = list(budgets)

    @classmethod
    def from_snapshot(cls, snapshot: LedgerSnapshot, name: str = "memory") -> "InMemoryProvider":
        return cls(snapshot.transactions, snapshot.categories, snapshot.budgets, name=name)

    def fetch_transactions(self, _filter: TransactionQuery) -> list[Transaction]:
        return list(self._transactions)

    def fetch_categories(self) -> list[Category]:
        return list(self._categories)

    def fetch_budgets(self) -> list[Budget]:
        return list(self._budgets)

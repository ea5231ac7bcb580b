from __future__ import annotations

from abc import ABC, abstractmethod

from domain.models import Budget, Category, Transaction
from domain.schemas import TransactionQuery


class ProviderError(RuntimeError):
    pass


class Provider(ABC):
    """Base provider contract for ledger sources."""

    name: str = "provider"

    @abstractmethod
    def fetch_transactions(self, _filter: TransactionQuery) -> list[Transaction]:
        raise NotImplementedError

    @abstractmethod
    def fetch_categories(self) -> list[Category]:
        raise NotImplementedError

    @abstractmethod
    def fetch_budgets(self) -> list[Budget]:
        raise NotImplementedError

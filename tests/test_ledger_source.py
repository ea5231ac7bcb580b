from __future__ import annotations

import unittest
from datetime import date
from decimal import Decimal

from domain.models import Budget, Category, Transaction, TransactionType
from domain.schemas import TransactionQuery
from infrastructure.ledger_providers.memory_provider import InMemoryProvider
from infrastructure.ledger_providers.provider import Provider
from infrastructure.ledger_source import LedgerSource


class _FakeProvider(Provider):
    def __init__(self, name: str, transactions: list[Transaction], categories=None, budgets=None):
        self.name = name
        self._transactions = transactions
        self._categories = categories or []
        self._budgets = budgets or []
        self.queries: list[TransactionQuery] = []

    def fetch_transactions(self, _filter):
        self.queries.append(_filter)
        return list(self._transactions)

    def fetch_categories(self):
        return list(self._categories)

    def fetch_budgets(self):
        return list(self._budgets)


class LedgerSourceTests(unittest.TestCase):
    def _txn(self, *, id: str, day: date, amount: str, type: TransactionType = TransactionType.EXPENSE,
             category_id: str | None = None, desc: str | None = None) -> Transaction:
        return Transaction(
            id=id,
            amount=Decimal(amount),
            type=type,
            transaction_date=day,
            category_id=category_id,
            description=desc,
        )

    def test_reads_all_registered_providers_by_default(self) -> None:
        p1 = _FakeProvider("p1", [self._txn(id="t1", day=date(2026, 1, 5), amount="12.50")])
        p2 = _FakeProvider("p2", [self._txn(id="t2", day=date(2026, 1, 6), amount="15.99")])
        source = LedgerSource(providers=[p1, p2])

        snapshot = source.snapshot()

        self.assertEqual({t.id for t in snapshot.transactions}, {"t1", "t2"})
        self.assertEqual(source.list_provider_names(), ["p1", "p2"])
        self.assertIsInstance(p1.queries[0], TransactionQuery)

    def test_filters_by_source_and_transaction_fields(self) -> None:
        p1 = _FakeProvider("checking", [
            self._txn(id="t1", day=date(2026, 1, 10), amount="42.10", category_id="C1", desc="Whole Foods"),
            self._txn(id="t2", day=date(2026, 2, 1), amount="1800.00", category_id="C2", desc="Rent"),
            self._txn(id="t3", day=date(2026, 1, 11), amount="42.10", category_id="C1", desc="Whole Foods",
                      type=TransactionType.INCOME),
        ])
        p2 = _FakeProvider("cards", [self._txn(id="t4", day=date(2026, 1, 12), amount="60.00", category_id="C1")])
        source = LedgerSource(providers=[p1, p2])

        snapshot = source.snapshot(
            {
                "source": "checking",
                "date_range": {"start": "2026-01-01", "end": "2026-01-31"},
                "types": ["expense"],
                "category_ids": ["C1"],
                "min_amount": 20,
                "max_amount": 100,
                "query": "whole",
            }
        )

        self.assertEqual([t.id for t in snapshot.transactions], ["t1"])

    def test_text_query_matches_description_or_category_name(self) -> None:
        p1 = _FakeProvider(
            "p1",
            [
                self._txn(id="t1", day=date(2026, 1, 10), amount="42.10", category_id="C1", desc="Trader Joe's"),
                self._txn(id="t2", day=date(2026, 1, 11), amount="9.00", desc="Groceries run"),
                self._txn(id="t3", day=date(2026, 1, 12), amount="1800.00", category_id="C2", desc="Rent"),
            ],
            categories=[Category(id="C1", name="Groceries"), Category(id="C2", name="Housing")],
        )
        source = LedgerSource(providers=[p1])

        snapshot = source.snapshot({"query": "GROC"})

        self.assertEqual([t.id for t in snapshot.transactions], ["t1", "t2"])

    def test_categories_and_budgets_are_deduplicated_by_id(self) -> None:
        budget = Budget(id="b1", name="Food", amount=Decimal("100"), start_date=date(2026, 1, 1))
        p1 = _FakeProvider("p1", [], categories=[Category(id="C1", name="Food")], budgets=[budget])
        p2 = _FakeProvider("p2", [], categories=[Category(id="C1", name="Dupe"), Category(id="C2", name="Fun")],
                           budgets=[budget])
        source = LedgerSource(providers=[p1, p2])

        snapshot = source.snapshot()

        self.assertEqual([c.name for c in snapshot.categories], ["Food", "Fun"])
        self.assertEqual(len(snapshot.budgets), 1)

    def test_remove_provider_and_memory_provider(self) -> None:
        memory = InMemoryProvider(transactions=[self._txn(id="m1", day=date(2026, 3, 1), amount="1")])
        source = LedgerSource(providers=[memory, _FakeProvider("other", [])])
        source.remove_provider("other")

        snapshot = source.snapshot(TransactionQuery())

        self.assertEqual(source.list_provider_names(), ["memory"])
        self.assertEqual([t.id for t in snapshot.transactions], ["m1"])

    def test_invalid_query_raises_value_error(self) -> None:
        source = LedgerSource(providers=[_FakeProvider("p", [])])

        with self.assertRaises(ValueError):
            source.snapshot({"date_range": {"start": "2026-02-01", "end": "2026-01-01"}})

    def test_empty_source_returns_empty_snapshot(self) -> None:
        snapshot = LedgerSource().snapshot()
        self.assertEqual((snapshot.transactions, snapshot.categories, snapshot.budgets), ((), (), ()))


if __name__ == "__main__":
    unittest.main()

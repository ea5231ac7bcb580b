from __future__ import annotations

import unittest
from datetime import date
from decimal import Decimal

from domain.aggregation import (
    OTHER_CATEGORY,
    average_usage,
    balance_before,
    budget_progress,
    budget_status,
    category_breakdown,
    filter_transactions,
    monthly_averages,
    monthly_series,
    recent_balance_trend,
    recent_transactions,
    savings_rate,
    total_budgeted,
    totals,
    trend_cutoff,
)
from domain.models import (
    Budget,
    BudgetLevel,
    Category,
    Transaction,
    TransactionType,
    UncategorizedBudgetScope,
)


def _txn(id: str, amount: str, type: str, day: date, category_id: str | None = None, desc: str | None = None) -> Transaction:
    return Transaction(
        id=id,
        amount=Decimal(amount),
        type=TransactionType(type),
        transaction_date=day,
        category_id=category_id,
        description=desc,
    )


def _budget(amount: str, category_id: str | None = None, id: str = "b1") -> Budget:
    return Budget(id=id, name=f"Budget {id}", amount=Decimal(amount), start_date=date(2024, 1, 1), category_id=category_id)


class TotalsTests(unittest.TestCase):
    def test_scenario_income_and_one_expense(self) -> None:
        ts = [
            _txn("t1", "100", "income", date(2024, 1, 5)),
            _txn("t2", "40", "expense", date(2024, 1, 10), category_id="C1"),
        ]

        result = totals(ts)

        self.assertEqual(result.income, Decimal("100"))
        self.assertEqual(result.expenses, Decimal("40"))
        self.assertEqual(result.balance, Decimal("60"))

    def test_empty_and_none_are_all_zero(self) -> None:
        for value in ([], None):
            result = totals(value)
            self.assertEqual((result.income, result.expenses, result.balance), (0, 0, 0))

    def test_balance_is_income_minus_expenses_regardless_of_order(self) -> None:
        ts = [
            _txn("a", "12.34", "expense", date(2024, 3, 1)),
            _txn("b", "1000.01", "income", date(2024, 2, 1)),
            _txn("c", "0.66", "expense", date(2024, 1, 1)),
            _txn("d", "5", "income", date(2024, 4, 1)),
        ]

        forward = totals(ts)
        backward = totals(reversed(ts))

        self.assertEqual(forward, backward)
        self.assertEqual(forward.balance, forward.income - forward.expenses)
        self.assertEqual(forward.income, Decimal("1005.01"))
        self.assertEqual(forward.expenses, Decimal("13.00"))

    def test_negative_amount_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            _txn("bad", "-1", "expense", date(2024, 1, 1))


class MonthlySeriesTests(unittest.TestCase):
    def test_groups_by_calendar_month_with_labels(self) -> None:
        ts = [
            _txn("t1", "100", "income", date(2024, 1, 5)),
            _txn("t2", "40", "expense", date(2024, 1, 31)),
            _txn("t3", "25", "expense", date(2024, 2, 1)),
        ]

        series = monthly_series(ts)

        self.assertEqual([p.label for p in series], ["Jan 2024", "Feb 2024"])
        self.assertEqual(series[0].income, Decimal("100"))
        self.assertEqual(series[0].expenses, Decimal("40"))
        self.assertEqual(series[0].net, Decimal("60"))
        self.assertEqual(series[1].income, Decimal("0"))
        self.assertEqual(series[1].net, Decimal("-25"))

    def test_newest_first_input_is_returned_chronologically(self) -> None:
        ts = [
            _txn("t1", "1", "expense", date(2024, 3, 2)),
            _txn("t2", "1", "expense", date(2023, 12, 30)),
            _txn("t3", "1", "income", date(2024, 1, 15)),
            _txn("t4", "1", "expense", date(2024, 2, 9)),
        ]

        series = monthly_series(ts)

        keys = [(p.year, p.month) for p in series]
        self.assertEqual(keys, sorted(keys))
        self.assertEqual(series[0].label, "Dec 2023")

    def test_window_keeps_most_recent_months(self) -> None:
        ts = [_txn(f"t{m}", "10", "expense", date(2024, m, 1)) for m in range(1, 10)]

        series = monthly_series(ts, months_window=6)

        self.assertEqual(len(series), 6)
        self.assertEqual(series[0].label, "Apr 2024")
        self.assertEqual(series[-1].label, "Sep 2024")

    def test_window_larger_than_data_returns_everything(self) -> None:
        ts = [_txn("t1", "10", "income", date(2024, 5, 1))]
        self.assertEqual(len(monthly_series(ts, months_window=12)), 1)

    def test_non_positive_window_and_empty_input(self) -> None:
        ts = [_txn("t1", "10", "income", date(2024, 5, 1))]
        self.assertEqual(monthly_series(ts, months_window=0), [])
        self.assertEqual(monthly_series([]), [])
        self.assertEqual(monthly_series(None), [])


class CategoryBreakdownTests(unittest.TestCase):
    def test_scenario_single_resolved_category(self) -> None:
        ts = [
            _txn("t1", "100", "income", date(2024, 1, 5)),
            _txn("t2", "40", "expense", date(2024, 1, 10), category_id="C1"),
        ]
        categories = [Category(id="C1", name="Food")]

        result = category_breakdown(ts, categories)

        self.assertEqual(len(result), 1)
        self.assertEqual(result[0].category_name, "Food")
        self.assertEqual(result[0].total, Decimal("40"))
        self.assertEqual(result[0].count, 1)

    def test_missing_and_unknown_categories_fall_back_to_other(self) -> None:
        ts = [
            _txn("t1", "5", "expense", date(2024, 1, 1), category_id=None),
            _txn("t2", "7", "expense", date(2024, 1, 2), category_id="gone"),
            _txn("t3", "9", "expense", date(2024, 1, 3), category_id="C1"),
        ]

        result = {b.category_name: b for b in category_breakdown(ts, [Category(id="C1", name="Food")])}

        self.assertEqual(result[OTHER_CATEGORY].total, Decimal("12"))
        self.assertEqual(result[OTHER_CATEGORY].count, 2)
        self.assertEqual(result["Food"].count, 1)

    def test_buckets_sum_to_total_expenses(self) -> None:
        ts = [
            _txn("t1", "19.99", "expense", date(2024, 1, 1), category_id="C1"),
            _txn("t2", "250", "income", date(2024, 1, 1), category_id="C1"),
            _txn("t3", "3.01", "expense", date(2024, 1, 2), category_id="C2"),
            _txn("t4", "11", "expense", date(2024, 1, 3)),
        ]
        categories = [Category(id="C1", name="Food"), Category(id="C2", name="Travel")]

        buckets = category_breakdown(ts, categories)

        self.assertEqual(sum(b.total for b in buckets), totals(ts).expenses)
        self.assertEqual(sum(b.count for b in buckets), 3)

    def test_empty_inputs(self) -> None:
        self.assertEqual(category_breakdown([], []), [])
        self.assertEqual(category_breakdown(None, None), [])


class RecentBalanceTrendTests(unittest.TestCase):
    def setUp(self) -> None:
        self.today = date(2024, 3, 31)
        self.ts = [
            _txn("old", "999", "income", date(2024, 2, 29)),
            _txn("t1", "100", "income", date(2024, 3, 1)),
            _txn("t2", "30", "expense", date(2024, 3, 1)),
            _txn("t3", "20", "expense", date(2024, 3, 20)),
            _txn("t4", "50", "income", date(2024, 3, 10)),
        ]

    def test_filters_groups_sorts_and_accumulates(self) -> None:
        points = recent_balance_trend(self.ts, window_days=30, max_points=14, today=self.today)

        self.assertEqual([p.date for p in points], [date(2024, 3, 1), date(2024, 3, 10), date(2024, 3, 20)])
        self.assertEqual(points[0].income, Decimal("100"))
        self.assertEqual(points[0].expenses, Decimal("30"))
        self.assertEqual([p.balance for p in points], [Decimal("70"), Decimal("120"), Decimal("100")])

    def test_window_start_is_inclusive(self) -> None:
        points = recent_balance_trend(self.ts, window_days=31, today=self.today)
        self.assertEqual(points[0].date, date(2024, 2, 29))

    def test_last_point_equals_net_of_included_points(self) -> None:
        points = recent_balance_trend(self.ts, window_days=30, today=self.today)
        self.assertEqual(points[-1].balance, sum(p.income - p.expenses for p in points))

    def test_truncates_to_most_recent_points_without_reseeding(self) -> None:
        points = recent_balance_trend(self.ts, window_days=30, max_points=2, today=self.today)

        self.assertEqual([p.date for p in points], [date(2024, 3, 10), date(2024, 3, 20)])
        self.assertEqual(points[-1].balance, Decimal("100"))

    def test_opening_balance_seeds_running_total(self) -> None:
        cutoff = date(2024, 3, 1)
        opening = balance_before(self.ts, cutoff)

        points = recent_balance_trend(self.ts, window_days=30, today=self.today, opening_balance=opening)

        self.assertEqual(opening, Decimal("999"))
        self.assertEqual(points[-1].balance, Decimal("1099"))

    def test_empty_input(self) -> None:
        self.assertEqual(recent_balance_trend([], today=self.today), [])
        self.assertEqual(recent_balance_trend(None), [])

    def test_huge_window_clamps_to_earliest_date(self) -> None:
        self.assertEqual(trend_cutoff(800000, date(2024, 3, 1)), date.min)

        points = recent_balance_trend(self.ts, window_days=800000, today=self.today)

        self.assertEqual(points[0].date, date(2024, 2, 29))
        self.assertEqual(points[-1].balance, Decimal("1099"))


class BudgetStatusTests(unittest.TestCase):
    def setUp(self) -> None:
        self.ts = [
            _txn("t1", "50", "expense", date(2024, 1, 1), category_id="C1"),
            _txn("t2", "70", "expense", date(2024, 1, 2), category_id=None),
            _txn("t3", "500", "income", date(2024, 1, 3), category_id="C1"),
        ]

    def test_scenario_uncategorized_budget_counts_all_expenses(self) -> None:
        status = budget_status(_budget("200"), self.ts)

        self.assertEqual(status.spent, Decimal("120"))
        self.assertEqual(status.percentage, Decimal("60"))
        self.assertEqual(status.remaining, Decimal("80"))
        self.assertEqual(status.level, BudgetLevel.OK)

    def test_uncategorized_only_scope(self) -> None:
        status = budget_status(_budget("200"), self.ts, UncategorizedBudgetScope.UNCATEGORIZED_ONLY)

        self.assertEqual(status.spent, Decimal("70"))
        self.assertEqual(status.percentage, Decimal("35"))

    def test_category_budget_counts_only_its_expenses(self) -> None:
        status = budget_status(_budget("60", category_id="C1"), self.ts)

        self.assertEqual(status.spent, Decimal("50"))
        self.assertEqual(status.remaining, Decimal("10"))
        self.assertEqual(status.level, BudgetLevel.WARNING)

    def test_scenario_zero_budget_never_divides(self) -> None:
        status = budget_status(_budget("0"), self.ts)

        self.assertEqual(status.percentage, Decimal("0"))
        self.assertEqual(status.spent, Decimal("120"))
        self.assertEqual(status.remaining, Decimal("-120"))
        self.assertEqual(status.level, BudgetLevel.OVER)

    def test_levels(self) -> None:
        self.assertEqual(budget_status(_budget("130"), self.ts).level, BudgetLevel.CRITICAL)
        self.assertEqual(budget_status(_budget("100"), self.ts).level, BudgetLevel.OVER)
        self.assertEqual(budget_status(_budget("0"), []).level, BudgetLevel.OK)

    def test_empty_transactions(self) -> None:
        status = budget_status(_budget("200"), None)
        self.assertEqual((status.spent, status.percentage, status.remaining), (0, 0, Decimal("200")))

    def test_progress_preserves_budget_order(self) -> None:
        budgets = [_budget("60", "C1", id="b2"), _budget("200", id="b1")]

        statuses = budget_progress(budgets, iter(self.ts))

        self.assertEqual([s.budget_id for s in statuses], ["b2", "b1"])
        self.assertEqual(statuses[1].spent, Decimal("120"))
        self.assertEqual(budget_progress([], self.ts), [])
        self.assertEqual(total_budgeted(budgets), Decimal("260"))
        self.assertEqual(total_budgeted(None), Decimal("0"))

    def test_average_usage_rounds_half_up(self) -> None:
        statuses = budget_progress([_budget("60", "C1", id="b2"), _budget("200", id="b1")], self.ts)
        self.assertEqual(average_usage(statuses), 72)

        halves = budget_progress([_budget("200", id="b1"), _budget("12000", id="b3")], self.ts)
        self.assertEqual([s.percentage for s in halves], [Decimal("60"), Decimal("1")])
        self.assertEqual(average_usage(halves), 31)

    def test_average_usage_without_budgets_or_amounts(self) -> None:
        self.assertEqual(average_usage([]), 0)
        self.assertEqual(average_usage(None), 0)
        self.assertEqual(average_usage(budget_progress([_budget("0")], self.ts)), 0)


class SavingsAndAveragesTests(unittest.TestCase):
    def test_savings_rate(self) -> None:
        self.assertEqual(savings_rate(Decimal("200"), Decimal("50")), Decimal("25"))
        self.assertEqual(savings_rate(Decimal("0"), Decimal("-50")), Decimal("0"))
        self.assertEqual(savings_rate(Decimal("100"), Decimal("-50")), Decimal("-50"))

    def test_monthly_averages(self) -> None:
        ts = [
            _txn("t1", "100", "income", date(2024, 1, 1)),
            _txn("t2", "300", "income", date(2024, 2, 1)),
            _txn("t3", "50", "expense", date(2024, 2, 2)),
        ]

        avg_income, avg_expenses = monthly_averages(monthly_series(ts))

        self.assertEqual(avg_income, Decimal("200"))
        self.assertEqual(avg_expenses, Decimal("25"))
        self.assertEqual(monthly_averages([]), (Decimal("0"), Decimal("0")))


class TransactionSearchTests(unittest.TestCase):
    def setUp(self) -> None:
        self.categories = [Category(id="C1", name="Groceries")]
        self.ts = [
            _txn("t1", "10", "expense", date(2024, 1, 1), "C1", "Corner shop"),
            _txn("t2", "20", "income", date(2024, 1, 3), None, "Refund from store"),
            _txn("t3", "30", "expense", date(2024, 1, 3), None, None),
            _txn("t4", "40", "expense", date(2024, 1, 2), None, "Gym"),
        ]

    def test_query_matches_description_or_category(self) -> None:
        ids = [t.id for t in filter_transactions(self.ts, self.categories, query="GROCER")]
        self.assertEqual(ids, ["t1"])

        ids = [t.id for t in filter_transactions(self.ts, self.categories, query="sto")]
        self.assertEqual(ids, ["t2"])

    def test_type_filter_and_blank_query(self) -> None:
        ids = [t.id for t in filter_transactions(self.ts, self.categories, query="  ", txn_type=TransactionType.EXPENSE)]
        self.assertEqual(ids, ["t1", "t3", "t4"])

    def test_recent_transactions_newest_first_and_stable(self) -> None:
        ids = [t.id for t in recent_transactions(self.ts, limit=3)]
        self.assertEqual(ids, ["t2", "t3", "t4"])
        self.assertEqual(recent_transactions(self.ts, limit=0), [])
        self.assertEqual(recent_transactions(None), [])


if __name__ == "__main__":
    unittest.main()

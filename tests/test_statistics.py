from datetime import datetime, timedelta, timezone
from decimal import Decimal
from itertools import permutations
from uuid import uuid4

import pytest

from lumina_core.models import CategoryTotal, MonthlyStats, Transaction, UserProfile
from lumina_core.statistics import (
    budget_progress,
    budget_remaining,
    category_breakdown,
    daily_allowance,
    monthly_stats,
    net_worth,
    percentage_of_total,
)

NOW = datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)


def tx(amount, type="expense", category="Food", date=NOW):
    return Transaction(
        id=str(uuid4()),
        amount=Decimal(str(amount)),
        type=type,
        category=category,
        date=date,
    )


class TestNetWorth:
    def test_initial_balance_plus_income_minus_expense(self):
        profile = UserProfile(initial_balance=Decimal("1000"))
        transactions = [tx(500, "income"), tx(200, "expense")]
        assert net_worth(transactions, profile) == Decimal("1300")

    def test_empty_ledger_is_initial_balance(self):
        assert net_worth([], UserProfile(initial_balance=Decimal("42.50"))) == Decimal("42.50")

    def test_counts_all_dates(self):
        profile = UserProfile()
        transactions = [tx(10, "income", date=NOW - timedelta(days=400)), tx(3, date=NOW + timedelta(days=90))]
        assert net_worth(transactions, profile) == Decimal("7")

    def test_independent_of_insertion_order(self):
        profile = UserProfile(initial_balance=Decimal("10"))
        transactions = [tx(5, "income"), tx(7), tx("0.25", "income"), tx(1)]
        results = {net_worth(list(order), profile) for order in permutations(transactions)}
        assert results == {Decimal("7.25")}


class TestMonthlyStats:
    def test_only_current_month_counts(self):
        transactions = [
            tx(100, "income", date=NOW),
            tx(40, date=NOW - timedelta(days=2)),
            tx(999, date=datetime(2024, 4, 15, tzinfo=timezone.utc)),
            tx(999, "income", date=datetime(2024, 6, 15, tzinfo=timezone.utc)),
            tx(999, date=datetime(2023, 5, 15, tzinfo=timezone.utc)),
        ]
        assert monthly_stats(transactions, now=NOW) == MonthlyStats(Decimal("100"), Decimal("40"))

    def test_empty_ledger(self):
        assert monthly_stats([], now=NOW) == MonthlyStats(Decimal("0"), Decimal("0"))

    def test_dates_compared_in_callers_timezone(self):
        tokyo = timezone(timedelta(hours=9))
        # 2024-05-31 20:00 UTC is already June 1st in Tokyo.
        late = tx(50, date=datetime(2024, 5, 31, 20, tzinfo=timezone.utc))
        assert monthly_stats([late], now=datetime(2024, 6, 10, tzinfo=tokyo)).expense == 50
        assert monthly_stats([late], now=NOW).expense == 50

    def test_defaults_to_wall_clock(self):
        now = datetime.now(timezone.utc)
        last_year = now.replace(year=now.year - 1, day=1)
        transactions = [tx(10, date=now), tx(20, date=last_year)]
        assert monthly_stats(transactions).expense == 10


class TestCategoryBreakdown:
    def test_groups_and_sorts_descending(self):
        transactions = [tx(10, category="Food"), tx(5, category="Food"), tx(20, category="Transport")]
        assert category_breakdown(transactions, "expense") == [
            CategoryTotal("Transport", Decimal("20"), 1),
            CategoryTotal("Food", Decimal("15"), 2),
        ]

    def test_filters_by_type(self):
        transactions = [tx(10, "income", "Salary"), tx(5, "expense", "Food")]
        assert [g.category for g in category_breakdown(transactions, "income")] == ["Salary"]

    def test_ties_keep_first_seen_order(self):
        transactions = [tx(5, category="B"), tx(5, category="A"), tx(9, category="C")]
        assert [g.category for g in category_breakdown(transactions, "expense")] == ["C", "B", "A"]

    def test_no_group_limit(self):
        transactions = [tx(i + 1, category=f"cat-{i}") for i in range(40)]
        groups = category_breakdown(transactions, "expense")
        assert len(groups) == 40
        assert groups[0].category == "cat-39"

    @pytest.mark.parametrize("kind", ["income", "expense"])
    def test_empty_ledger(self, kind):
        assert category_breakdown([], kind) == []


class TestPercentageOfTotal:
    def test_share_of_total(self):
        groups = [CategoryTotal("A", Decimal("30"), 1), CategoryTotal("B", Decimal("10"), 1)]
        assert percentage_of_total(groups[0], groups) == Decimal("75")

    def test_zero_total_is_zero(self):
        groups = [CategoryTotal("A", Decimal("0"), 2)]
        assert percentage_of_total(groups[0], groups) == 0


class TestBudget:
    def test_disabled_budget(self):
        profile = UserProfile(monthly_budget=Decimal("0"))
        assert budget_progress(profile, Decimal("150")) == 0
        assert budget_remaining(profile, Decimal("150")) == 0

    def test_progress_is_clamped_and_remaining_not_negative(self):
        profile = UserProfile(monthly_budget=Decimal("100"))
        assert budget_progress(profile, Decimal("150")) == 100
        assert budget_remaining(profile, Decimal("150")) == 0

    def test_partial_spend(self):
        profile = UserProfile(monthly_budget=Decimal("200"))
        assert budget_progress(profile, Decimal("50")) == 25
        assert budget_remaining(profile, Decimal("50")) == Decimal("150")

    def test_daily_allowance(self):
        assert daily_allowance(Decimal("300")) == 10
        assert daily_allowance(Decimal("0")) == 0


class TestStatisticsService:
    def test_reads_live_state(self, onboarded):
        stats = onboarded.statistics
        assert stats.net_worth() == Decimal("1000")

        onboarded.ledger.add({"amount": "500", "type": "income", "category": "Salary"})
        onboarded.ledger.add({"amount": "200", "type": "expense", "category": "Food"})
        assert stats.net_worth() == Decimal("1300")

        onboarded.profiles.update({"monthly_budget": Decimal("100")})
        assert stats.monthly_stats().expense == Decimal("200")
        assert stats.budget_progress() == 100
        assert stats.budget_remaining() == 0
        assert stats.daily_allowance() == 0

    def test_excludes_freshly_inserted_transaction_dated_last_year(self, onboarded):
        last_year = datetime.now(timezone.utc).replace(day=1) - timedelta(days=370)
        onboarded.ledger.add({"amount": "75", "type": "expense", "category": "Food", "date": last_year})
        assert onboarded.statistics.monthly_stats().expense == 0
        assert onboarded.statistics.net_worth() == Decimal("925")

    def test_summary_is_serialisable(self, onboarded, now):
        onboarded.ledger.add({"amount": "20", "type": "expense", "category": "Food", "date": now})
        onboarded.profiles.update({"monthly_budget": Decimal("80")})
        summary = onboarded.statistics.summary(now=now)
        assert summary["net_worth"] == "980.00"
        assert summary["monthly"] == {"income": "0.00", "expense": "20.00"}
        assert summary["budget"]["progress"] == "25.00"
        assert summary["budget"]["remaining"] == "60.00"
        assert summary["budget"]["enabled"] is True

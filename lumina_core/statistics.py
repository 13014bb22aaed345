"""Derived figures computed on demand from the ledger and profile.

Every function here is pure: it takes a snapshot of transactions (and the
profile where relevant) and recomputes from a full scan. Nothing is cached,
so results always reflect the state they are given.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Sequence

from .models import EXPENSE, INCOME, CategoryTotal, MonthlyStats, Transaction, UserProfile

if TYPE_CHECKING:  # pragma: no cover
    from .services import LedgerService, ProfileService

ZERO = Decimal("0")
HUNDRED = Decimal("100")
DAYS_PER_BUDGET_MONTH = 30


def _total(transactions: Iterable[Transaction], transaction_type: str) -> Decimal:
    return sum(
        (t.amount for t in transactions if t.type == transaction_type),
        start=ZERO,
    )


def net_worth(transactions: Iterable[Transaction], profile: UserProfile) -> Decimal:
    """Initial balance plus all-time income minus all-time expense."""
    snapshot = list(transactions)
    return profile.initial_balance + _total(snapshot, INCOME) - _total(snapshot, EXPENSE)


def in_month_of(transaction: Transaction, now: datetime) -> bool:
    local = transaction.date.astimezone(now.tzinfo)
    return local.year == now.year and local.month == now.month


def monthly_stats(
    transactions: Iterable[Transaction], now: Optional[datetime] = None
) -> MonthlyStats:
    """Income and expense totals for the calendar month containing ``now``.

    ``now`` defaults to the local wall clock. Each transaction's own date is
    compared, after conversion into ``now``'s timezone, so a record inserted
    today but dated last month is excluded.
    """
    if now is None:
        now = datetime.now().astimezone()
    elif now.tzinfo is None:
        now = now.astimezone()
    current = [t for t in transactions if in_month_of(t, now)]
    return MonthlyStats(income=_total(current, INCOME), expense=_total(current, EXPENSE))


def category_breakdown(
    transactions: Iterable[Transaction], transaction_type: str
) -> List[CategoryTotal]:
    """Group ``transaction_type`` records by category, largest total first.

    Ties keep the order in which each category was first seen (``sorted`` is
    stable). All categories are returned.
    """
    grouped: Dict[str, List] = {}
    for t in transactions:
        if t.type != transaction_type:
            continue
        bucket = grouped.setdefault(t.category, [ZERO, 0])
        bucket[0] += t.amount
        bucket[1] += 1

    totals = [CategoryTotal(category=name, total=amount, count=count)
              for name, (amount, count) in grouped.items()]
    return sorted(totals, key=lambda group: group.total, reverse=True)


def percentage_of_total(group: CategoryTotal, groups: Sequence[CategoryTotal]) -> Decimal:
    grand_total = sum((g.total for g in groups), start=ZERO)
    if grand_total == 0:
        return ZERO
    return group.total / grand_total * HUNDRED


def budget_progress(profile: UserProfile, monthly_expense: Decimal) -> Decimal:
    """Share of the monthly budget spent, clamped to 100. Zero when no budget is set."""
    if profile.monthly_budget <= 0:
        return ZERO
    return min(monthly_expense / profile.monthly_budget * HUNDRED, HUNDRED)


def budget_remaining(profile: UserProfile, monthly_expense: Decimal) -> Decimal:
    return max(profile.monthly_budget - monthly_expense, ZERO)


def daily_allowance(remaining: Decimal, days: int = DAYS_PER_BUDGET_MONTH) -> Decimal:
    """Spending per day that keeps the month within budget."""
    if days <= 0:
        return ZERO
    return max(remaining / days, ZERO)


class StatisticsService:
    """Binds the statistics functions to the live ledger and profile."""

    def __init__(self, ledger: "LedgerService", profiles: "ProfileService") -> None:
        self._ledger = ledger
        self._profiles = profiles

    def net_worth(self) -> Decimal:
        return net_worth(self._ledger.all(), self._profiles.get())

    def monthly_stats(self, now: Optional[datetime] = None) -> MonthlyStats:
        return monthly_stats(self._ledger.all(), now)

    def category_breakdown(self, transaction_type: str) -> List[CategoryTotal]:
        return category_breakdown(self._ledger.all(), transaction_type)

    def budget_progress(self, now: Optional[datetime] = None) -> Decimal:
        return budget_progress(self._profiles.get(), self.monthly_stats(now).expense)

    def budget_remaining(self, now: Optional[datetime] = None) -> Decimal:
        return budget_remaining(self._profiles.get(), self.monthly_stats(now).expense)

    def daily_allowance(self, now: Optional[datetime] = None) -> Decimal:
        return daily_allowance(self.budget_remaining(now))

    def summary(self, now: Optional[datetime] = None) -> Dict[str, object]:
        """Serialisable dashboard figures."""
        profile = self._profiles.get()
        stats = self.monthly_stats(now)
        return {
            "currency": profile.currency,
            "net_worth": f"{self.net_worth():.2f}",
            "monthly": stats.to_dict(),
            "budget": {
                "monthly_budget": f"{profile.monthly_budget:.2f}",
                "enabled": profile.has_budget,
                "progress": f"{budget_progress(profile, stats.expense):.2f}",
                "remaining": f"{budget_remaining(profile, stats.expense):.2f}",
            },
        }

"""Data models for the Lumina finance domain."""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

__all__ = [
    "CategoryTotal",
    "MonthlyStats",
    "Transaction",
    "UserProfile",
    "isoformat_utc",
    "parse_datetime",
]

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)
THEMES = ("light", "dark")


def isoformat_utc(dt: datetime) -> str:
    """Return an ISO 8601 string with trailing Z for UTC-aware datetimes."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    iso = dt.isoformat(timespec="seconds")
    # datetime.isoformat renders +00:00 for UTC; replace with the shorter Z form.
    return iso.replace("+00:00", "Z")


def parse_datetime(value: str) -> datetime:
    """Parse ISO 8601 datetime strings with optional trailing Z into UTC-aware datetime."""
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        # Treat naive datetimes as UTC to avoid accidental timezone drift.
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _decimal(value: Any) -> Decimal:
    return Decimal(str(value))


@dataclass(frozen=True)
class Transaction:
    id: str
    amount: Decimal
    type: str
    category: str
    date: datetime
    note: str = ""

    @property
    def is_income(self) -> bool:
        return self.type == INCOME

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the transaction to JSON-friendly natives."""
        return {
            "id": self.id,
            "amount": f"{self.amount:.2f}",
            "type": self.type,
            "category": self.category,
            "note": self.note,
            "date": isoformat_utc(self.date),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transaction":
        """Hydrate a Transaction from JSON-native data."""
        return cls(
            id=str(data["id"]),
            amount=_decimal(data["amount"]),
            type=data["type"],
            category=data["category"],
            note=data.get("note") or "",
            date=parse_datetime(data["date"]),
        )


@dataclass(frozen=True)
class UserProfile:
    name: str = ""
    currency: str = "USD"
    initial_balance: Decimal = Decimal("0.00")
    is_onboarded: bool = False
    theme: str = "light"
    monthly_budget: Decimal = Decimal("0.00")
    avatar: Optional[str] = None

    @property
    def has_budget(self) -> bool:
        # A zero budget means "not set", not "spend nothing".
        return self.monthly_budget > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "currency": self.currency,
            "initial_balance": str(self.initial_balance),
            "is_onboarded": self.is_onboarded,
            "theme": self.theme,
            "monthly_budget": str(self.monthly_budget),
            "avatar": self.avatar,
        }

    @classmethod
    def field_names(cls) -> frozenset:
        return frozenset(field.name for field in fields(cls))

    @classmethod
    def hydrate_fields(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        """Convert the known fields of ``data`` to their model types, dropping the rest."""
        known = {key: value for key, value in data.items() if key in cls.field_names()}
        for numeric in ("initial_balance", "monthly_budget"):
            if numeric in known:
                known[numeric] = _decimal(known[numeric])
        if "is_onboarded" in known and not isinstance(known["is_onboarded"], bool):
            raise TypeError("is_onboarded must be a boolean")
        if known.get("avatar") == "":
            known["avatar"] = None
        return known

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserProfile":
        """Hydrate a profile, letting absent fields fall back to the defaults."""
        return cls(**cls.hydrate_fields(data))


@dataclass(frozen=True)
class MonthlyStats:
    income: Decimal
    expense: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {"income": f"{self.income:.2f}", "expense": f"{self.expense:.2f}"}


@dataclass(frozen=True)
class CategoryTotal:
    category: str
    total: Decimal
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"category": self.category, "total": f"{self.total:.2f}", "count": self.count}

"""Framework-agnostic business services for Lumina finance."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from uuid import uuid4

from .catalog import DEFAULT_CURRENCY
from .exceptions import (
    OnboardingRequiredError,
    PersistenceError,
    RecordNotFoundError,
    ValidationError,
)
from .models import TRANSACTION_TYPES, Transaction, UserProfile
from .statistics import StatisticsService
from .storage import PROFILE_KEY, TRANSACTIONS_KEY, JSONStorage
from .validators import (
    parse_amount,
    validate_datetime,
    validate_enum,
    validate_required_str,
)

logger = logging.getLogger(__name__)

# Anything that can go wrong while turning stored JSON back into models.
_HYDRATION_ERRORS = (KeyError, TypeError, ValueError, AttributeError, InvalidOperation)

DEFAULT_PROFILE = UserProfile(currency=DEFAULT_CURRENCY)


class LedgerService:
    """Ordered transaction list, newest insertion first, mirrored to storage."""

    def __init__(self, storage: JSONStorage, resource: str = TRANSACTIONS_KEY) -> None:
        self._storage = storage
        self._resource = resource
        self._transactions: List[Transaction] = []
        self.load()  # Hydrate in-memory list from persistence on construction.

    # Public API -----------------------------------------------------------
    def add(self, payload: Dict[str, object]) -> Transaction:
        data = self._validate_payload(payload)
        transaction = Transaction(**data)
        self._transactions.insert(0, transaction)
        self._persist()
        logger.debug("Added %s transaction %s", transaction.type, transaction.id)
        return transaction

    def delete(self, transaction_id: str) -> None:
        remaining = [t for t in self._transactions if t.id != transaction_id]
        if len(remaining) == len(self._transactions):
            return
        self._transactions = remaining
        self._persist()
        logger.debug("Deleted transaction %s", transaction_id)

    def reset(self) -> None:
        self._transactions = []
        self._storage.remove(self._resource)
        logger.info("Ledger reset")

    def all(self) -> List[Transaction]:
        return list(self._transactions)

    def get(self, transaction_id: str) -> Transaction:
        """Return a transaction or raise if it does not exist."""
        for transaction in self._transactions:
            if transaction.id == transaction_id:
                return transaction
        raise RecordNotFoundError(f"Transaction {transaction_id} not found")

    def list(
        self,
        type: Optional[str] = None,
        category: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Transaction]:
        """Filtered view that keeps ledger order."""
        if limit is not None and limit < 0:
            raise ValidationError("limit cannot be negative")
        records = [
            t for t in self._transactions
            if (type is None or t.type == type)
            and (category is None or t.category == category)
        ]
        if limit is not None:
            records = records[:limit]
        return records

    def categories(self, type: Optional[str] = None) -> List[str]:
        return sorted({t.category for t in self.list(type=type)})

    def load(self) -> None:
        """Load transactions from persistence; unreadable data yields an empty ledger."""
        try:
            raw_records = self._storage.load(self._resource)
        except PersistenceError as exc:
            logger.warning("Ignoring unreadable transaction record: %s", exc)
            raw_records = None

        if raw_records is None:
            self._transactions = []
            return
        if not isinstance(raw_records, list):
            logger.warning("Expected a list in %s, starting with an empty ledger", self._resource)
            self._transactions = []
            return
        try:
            self._transactions = [Transaction.from_dict(payload) for payload in raw_records]
        except _HYDRATION_ERRORS as exc:
            logger.warning("Corrupt transaction record, starting with an empty ledger: %s", exc)
            self._transactions = []

    def __len__(self) -> int:
        return len(self._transactions)

    # Internal helpers -----------------------------------------------------
    def _persist(self) -> None:
        self._storage.save(self._resource, [t.to_dict() for t in self._transactions])

    def _validate_payload(self, payload: Dict[str, object]) -> Dict[str, object]:
        date = payload.get("date")
        when = datetime.now(timezone.utc) if date is None else validate_datetime(date, "date")
        return {
            "id": str(uuid4()),
            "amount": parse_amount(payload.get("amount"), "amount"),
            "type": validate_enum(payload.get("type"), "type", TRANSACTION_TYPES),
            "category": validate_required_str(payload.get("category"), "category", 50),
            "note": str(payload.get("note") or "").strip(),
            # Stored with second precision.
            "date": when.replace(microsecond=0),
        }


class ProfileService:
    """Holds the single user profile and merges partial updates into it."""

    def __init__(self, storage: JSONStorage, resource: str = PROFILE_KEY) -> None:
        self._storage = storage
        self._resource = resource
        self._profile = DEFAULT_PROFILE
        self.load()

    def get(self) -> UserProfile:
        return self._profile

    def update(self, changes: Dict[str, Any]) -> UserProfile:
        unknown = set(changes) - UserProfile.field_names()
        if unknown:
            raise ValidationError(f"Unknown profile fields: {', '.join(sorted(unknown))}")
        try:
            self._profile = replace(self._profile, **UserProfile.hydrate_fields(changes))
        except _HYDRATION_ERRORS as exc:
            raise ValidationError(f"Invalid profile update: {exc}") from exc
        self._persist()
        return self._profile

    def complete_onboarding(
        self,
        name: str,
        currency: str,
        initial_balance: Decimal,
        theme: str = "dark",
    ) -> UserProfile:
        profile = self.update(
            {
                "name": name,
                "currency": currency,
                "initial_balance": initial_balance,
                "is_onboarded": True,
                "theme": theme,
            }
        )
        logger.info("Onboarding completed for %s", profile.name)
        return profile

    def reset(self) -> None:
        self._profile = DEFAULT_PROFILE
        self._storage.remove(self._resource)
        logger.info("Profile reset")

    def load(self) -> None:
        """Merge the stored record over the defaults so older records gain new fields."""
        try:
            raw = self._storage.load(self._resource)
        except PersistenceError as exc:
            logger.warning("Ignoring unreadable profile record: %s", exc)
            raw = None

        if raw is None:
            self._profile = DEFAULT_PROFILE
            return
        if not isinstance(raw, dict):
            logger.warning("Expected an object in %s, using the default profile", self._resource)
            self._profile = DEFAULT_PROFILE
            return
        try:
            self._profile = UserProfile.from_dict({**DEFAULT_PROFILE.to_dict(), **raw})
        except _HYDRATION_ERRORS as exc:
            logger.warning("Corrupt profile record, using the default profile: %s", exc)
            self._profile = DEFAULT_PROFILE

    def _persist(self) -> None:
        self._storage.save(self._resource, self._profile.to_dict())


class FinanceContext:
    """Explicit application state: one profile, one ledger and their statistics.

    Front ends build one context and pass it where it is needed instead of
    reaching for module-level singletons.
    """

    def __init__(self, storage: JSONStorage) -> None:
        self.storage = storage
        self.profiles = ProfileService(storage)
        self.ledger = LedgerService(storage)
        self.statistics = StatisticsService(self.ledger, self.profiles)

    @classmethod
    def open(cls, data_dir: Union[str, Path]) -> "FinanceContext":
        return cls(JSONStorage(Path(data_dir)))

    @property
    def profile(self) -> UserProfile:
        return self.profiles.get()

    def require_onboarded(self) -> UserProfile:
        profile = self.profiles.get()
        if not profile.is_onboarded:
            raise OnboardingRequiredError("Complete onboarding before using the ledger")
        return profile

    def refresh(self) -> None:
        """Reload profile and ledger from persistence."""
        self.profiles.load()
        self.ledger.load()

    def reset(self) -> None:
        """Erase everything; afterwards the context is indistinguishable from a first run."""
        self.ledger.reset()
        self.profiles.reset()
        self.refresh()

    def snapshot(self) -> Dict[str, object]:
        """Return serialisable snapshot useful for testing or exports."""
        return {
            "profile": self.profiles.get().to_dict(),
            "transactions": [t.to_dict() for t in self.ledger.all()],
        }


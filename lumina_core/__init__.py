"""Core business logic package for Lumina finance."""

from .models import CategoryTotal, MonthlyStats, Transaction, UserProfile
from .services import FinanceContext, LedgerService, ProfileService
from .statistics import StatisticsService
from .storage import JSONStorage
from .exceptions import (
    OnboardingRequiredError,
    PersistenceError,
    RecordNotFoundError,
    ValidationError,
)

__all__ = [
    "CategoryTotal",
    "MonthlyStats",
    "Transaction",
    "UserProfile",
    "FinanceContext",
    "LedgerService",
    "ProfileService",
    "StatisticsService",
    "JSONStorage",
    "OnboardingRequiredError",
    "PersistenceError",
    "RecordNotFoundError",
    "ValidationError",
]

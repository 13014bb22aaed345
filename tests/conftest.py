from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from lumina_core.services import FinanceContext
from lumina_core.storage import JSONStorage

# Mid-month so timezone shifts never cross a month boundary.
NOW = datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def storage(tmp_path) -> JSONStorage:
    return JSONStorage(tmp_path / "data")


@pytest.fixture
def context(storage) -> FinanceContext:
    return FinanceContext(storage)


@pytest.fixture
def onboarded(context) -> FinanceContext:
    context.profiles.complete_onboarding("Ada", "USD", Decimal("1000"))
    return context


@pytest.fixture
def now() -> datetime:
    return NOW

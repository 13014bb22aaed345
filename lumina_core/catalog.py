"""Static reference data: supported currencies, predefined categories and avatars."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class Currency:
    code: str
    symbol: str
    name: str
    locale: str

    def to_dict(self) -> Dict[str, str]:
        return {"code": self.code, "symbol": self.symbol, "name": self.name, "locale": self.locale}


CURRENCIES: Tuple[Currency, ...] = (
    Currency("USD", "$", "United States Dollar", "en-US"),
    Currency("EUR", "€", "Euro", "de-DE"),
    Currency("GBP", "£", "British Pound", "en-GB"),
    Currency("PKR", "Rs", "Pakistani Rupee", "ur-PK"),
    Currency("INR", "₹", "Indian Rupee", "en-IN"),
    Currency("SAR", "﷼", "Saudi Riyal", "ar-SA"),
    Currency("AED", "dh", "UAE Dirham", "ar-AE"),
    Currency("JPY", "¥", "Japanese Yen", "ja-JP"),
    Currency("CNY", "¥", "Chinese Yuan", "zh-CN"),
    Currency("CAD", "$", "Canadian Dollar", "en-CA"),
    Currency("AUD", "$", "Australian Dollar", "en-AU"),
    Currency("CHF", "Fr", "Swiss Franc", "de-CH"),
    Currency("TRY", "₺", "Turkish Lira", "tr-TR"),
    Currency("RUB", "₽", "Russian Ruble", "ru-RU"),
    Currency("KRW", "₩", "South Korean Won", "ko-KR"),
    Currency("BRL", "R$", "Brazilian Real", "pt-BR"),
    Currency("ZAR", "R", "South African Rand", "en-ZA"),
    Currency("SGD", "$", "Singapore Dollar", "en-SG"),
    Currency("MXN", "$", "Mexican Peso", "es-MX"),
    Currency("NZD", "$", "New Zealand Dollar", "en-NZ"),
)

DEFAULT_CURRENCY = "USD"
CURRENCY_CODES: Tuple[str, ...] = tuple(currency.code for currency in CURRENCIES)
_BY_CODE: Dict[str, Currency] = {currency.code: currency for currency in CURRENCIES}


def get_currency(code: str) -> Currency:
    """Look up a currency, falling back to the default for unknown codes."""
    return _BY_CODE.get((code or "").upper(), _BY_CODE[DEFAULT_CURRENCY])


# (id, label) pairs. Ids are what gets stored on transactions.
EXPENSE_CATEGORIES: List[Tuple[str, str]] = [
    ("Food", "Food & Dining"),
    ("Transport", "Transport"),
    ("Shopping", "Shopping"),
    ("Entertainment", "Entertainment"),
    ("Health", "Health"),
    ("Bills", "Bills & Utilities"),
    ("Education", "Education"),
    ("Other", "Other"),
]

INCOME_CATEGORIES: List[Tuple[str, str]] = [
    ("Salary", "Salary"),
    ("Finance", "Investments"),
    ("Freelancing", "Freelancing"),
    ("Business", "Business"),
    ("Gift", "Gift"),
    ("Rental", "Rental"),
    ("Sold Items", "Sold Items"),
    ("Other", "Other"),
]


def predefined_categories(transaction_type: str) -> List[Tuple[str, str]]:
    if transaction_type == "income":
        return list(INCOME_CATEGORIES)
    return list(EXPENSE_CATEGORIES)


def default_category(transaction_type: str) -> str:
    return predefined_categories(transaction_type)[0][0]


AVATARS: Tuple[str, ...] = (
    "\U0001F468‍\U0001F4BC",
    "\U0001F469‍\U0001F4BC",
    "\U0001F9B8",
    "\U0001F431",
    "\U0001F436",
    "\U0001F680",
    "\U0001F31F",
    "\U0001F984",
    "\U0001F916",
    "\U0001F981",
    "\U0001F575️",
)

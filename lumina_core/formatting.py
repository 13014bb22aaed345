"""Presentation helpers. Nothing here touches stored values."""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional, Tuple

from .catalog import get_currency

# locale tag -> (group separator, decimal separator)
_SEPARATORS: Dict[str, Tuple[str, str]] = {
    "de-DE": (".", ","),
    "de-CH": ("’", "."),
    "tr-TR": (".", ","),
    "ru-RU": ("\u00a0", ","),
    "pt-BR": (".", ","),
    "en-ZA": ("\u00a0", ","),
}
_DEFAULT_SEPARATORS = (",", ".")

# Above this length an avatar string is treated as an embedded image payload.
AVATAR_SYMBOL_MAX_LENGTH = 10


def separators_for(locale: str) -> Tuple[str, str]:
    return _SEPARATORS.get(locale, _DEFAULT_SEPARATORS)


def format_number(amount: Decimal, locale: str = "en-US", decimals: int = 2) -> str:
    """Render ``amount`` with locale grouping and a fixed number of fraction digits."""
    group_sep, decimal_sep = separators_for(locale)
    exponent = Decimal(1).scaleb(-decimals)
    quantized = Decimal(amount).quantize(exponent, rounding=ROUND_HALF_UP)
    sign = "-" if quantized < 0 else ""
    text = f"{abs(quantized):,.{decimals}f}"
    integer_part, _, fraction = text.partition(".")
    integer_part = integer_part.replace(",", group_sep)
    if decimals:
        return f"{sign}{integer_part}{decimal_sep}{fraction}"
    return f"{sign}{integer_part}"


def format_money(
    amount: Decimal,
    currency_code: str,
    decimals: int = 2,
    locale: Optional[str] = None,
) -> str:
    """Prefix the currency symbol to a locale-formatted amount, e.g. ``-$1,234.50``."""
    currency = get_currency(currency_code)
    number = format_number(amount, locale or currency.locale, decimals)
    if number.startswith("-"):
        return f"-{currency.symbol}{number[1:]}"
    return f"{currency.symbol}{number}"


def format_signed(amount: Decimal, transaction_type: str, currency_code: str) -> str:
    """Ledger-row rendering: ``+`` for income, ``-`` for expense."""
    sign = "+" if transaction_type == "income" else "-"
    return sign + format_money(abs(amount), currency_code)


def avatar_kind(avatar: Optional[str]) -> Optional[str]:
    """Classify a stored avatar as ``"image"``, ``"symbol"`` or ``None`` when unset."""
    if not avatar:
        return None
    if len(avatar) > AVATAR_SYMBOL_MAX_LENGTH:
        return "image"
    return "symbol"

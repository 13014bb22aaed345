"""Console interface for Lumina finance."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import List, Optional

from lumina_core.catalog import CURRENCIES, default_category, predefined_categories
from lumina_core.exceptions import (
    OnboardingRequiredError,
    PersistenceError,
    RecordNotFoundError,
    ValidationError,
)
from lumina_core.formatting import avatar_kind, format_money, format_signed
from lumina_core.models import THEMES, TRANSACTION_TYPES, Transaction
from lumina_core.services import FinanceContext
from lumina_core.statistics import percentage_of_total
from lumina_core.validators import coerce_amount, validate_currency

DATA_DIR_ENV = "LUMINA_DATA_DIR"
RECENT_LIMIT = 5

# Commands that work before onboarding has completed.
UNGATED_COMMANDS = {"onboard", "reset", "currencies", "profile"}


def _parse_date(value: str) -> str:
    try:
        date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"Invalid date '{value}'. Expected format YYYY-MM-DD."
        ) from exc
    return value


def _parse_amount(value: str) -> str:
    try:
        positive = Decimal(value) > 0
    except InvalidOperation as exc:
        raise argparse.ArgumentTypeError("Amount must be a numeric value") from exc
    if not positive:
        raise argparse.ArgumentTypeError("Amount must be greater than zero")
    return value


def _currency_code(value: str) -> str:
    try:
        return validate_currency(value)
    except ValidationError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _format_transaction(transaction: Transaction, currency: str) -> str:
    day = transaction.date.astimezone().date().isoformat()
    return (
        f"[{transaction.id}] {day} {format_signed(transaction.amount, transaction.type, currency)}\n"
        f"  Category: {transaction.category} | Note: {transaction.note or '-'}\n"
    )


def handle_onboard(args: argparse.Namespace, context: FinanceContext) -> None:
    profile = context.profiles.complete_onboarding(
        name=args.name,
        currency=args.currency,
        initial_balance=coerce_amount(args.initial_balance),
        theme=args.theme,
    )
    print(f"Welcome, {profile.name}! Starting balance: "
          f"{format_money(profile.initial_balance, profile.currency)}")


def handle_profile(args: argparse.Namespace, context: FinanceContext) -> None:
    if args.command == "update":
        context.require_onboarded()
        changes = {
            "name": args.name,
            "currency": args.currency,
            "theme": args.theme,
            "avatar": args.avatar,
        }
        context.profiles.update({k: v for k, v in changes.items() if v is not None})
    profile = context.profiles.get()
    print(f"Name: {profile.name or '-'}")
    print(f"Currency: {profile.currency}")
    print(f"Initial balance: {format_money(profile.initial_balance, profile.currency)}")
    print(f"Theme: {profile.theme}")
    print(f"Monthly budget: {format_money(profile.monthly_budget, profile.currency) if profile.has_budget else 'not set'}")
    if avatar_kind(profile.avatar) == "image":
        print("Avatar: (image)")
    else:
        print(f"Avatar: {profile.avatar or '-'}")
    print(f"Onboarded: {'yes' if profile.is_onboarded else 'no'}")


def handle_transaction(args: argparse.Namespace, context: FinanceContext) -> None:
    currency = context.profile.currency
    if args.command == "add":
        payload = {
            "amount": args.amount,
            "type": args.type,
            "category": args.category or default_category(args.type),
            "note": args.note,
            "date": args.date,
        }
        transaction = context.ledger.add({k: v for k, v in payload.items() if v is not None})
        print("Transaction added:\n" + _format_transaction(transaction, currency))
    elif args.command == "list":
        limit = None if args.all else args.limit
        transactions = context.ledger.list(type=args.type, category=args.category, limit=limit)
        if not transactions:
            print("No transactions found.")
            return
        for transaction in transactions:
            print(_format_transaction(transaction, currency))
    elif args.command == "delete":
        context.ledger.delete(args.id)
        print(f"Transaction {args.id} deleted.")


def handle_summary(args: argparse.Namespace, context: FinanceContext) -> None:
    currency = context.profile.currency
    stats = context.statistics.monthly_stats()
    print(f"Net worth: {format_money(context.statistics.net_worth(), currency)}")
    print(f"This month income: {format_money(stats.income, currency)}")
    print(f"This month expense: {format_money(stats.expense, currency)}")


def handle_breakdown(args: argparse.Namespace, context: FinanceContext) -> None:
    currency = context.profile.currency
    groups = context.statistics.category_breakdown(args.type)
    if not groups:
        print(f"No {args.type} transactions recorded.")
        return
    total = sum((group.total for group in groups), start=Decimal("0"))
    print(f"Total {args.type}: {format_money(total, currency)}")
    for group in groups:
        share = percentage_of_total(group, groups)
        print(
            f"  {group.category}: {format_money(group.total, currency)} "
            f"({share:.1f}%, {group.count} item{'s' if group.count != 1 else ''})"
        )


def handle_budget(args: argparse.Namespace, context: FinanceContext) -> None:
    if args.command == "set":
        # Unparseable input disables the budget instead of failing.
        context.profiles.update({"monthly_budget": coerce_amount(args.amount)})
    profile = context.profile
    if not profile.has_budget:
        print("No budget set.")
        return
    stats = context.statistics
    currency = profile.currency
    print(f"Monthly budget: {format_money(profile.monthly_budget, currency)}")
    print(f"Spent this month: {format_money(stats.monthly_stats().expense, currency)}")
    print(f"Used: {stats.budget_progress():.0f}%")
    print(f"Remaining: {format_money(stats.budget_remaining(), currency)}")
    print(f"Daily allowance: {format_money(stats.daily_allowance(), currency, decimals=0)}")


def handle_categories(args: argparse.Namespace, context: FinanceContext) -> None:
    for transaction_type in TRANSACTION_TYPES:
        if args.type and args.type != transaction_type:
            continue
        predefined = [category_id for category_id, _ in predefined_categories(transaction_type)]
        custom = [c for c in context.ledger.categories(transaction_type) if c not in predefined]
        print(f"{transaction_type.capitalize()}: {', '.join(predefined)}")
        if custom:
            print(f"  Custom: {', '.join(custom)}")


def handle_currencies(args: argparse.Namespace, context: FinanceContext) -> None:
    for currency in CURRENCIES:
        print(f"{currency.code}  {currency.symbol:<3} {currency.name}")


def handle_reset(args: argparse.Namespace, context: FinanceContext) -> int:
    if not args.yes:
        print("Refusing to erase all data without --yes.", file=sys.stderr)
        return 1
    context.reset()
    print("All data erased.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Lumina personal finance CLI")
    parser.add_argument(
        "--data-dir",
        default=os.getenv(DATA_DIR_ENV, "data"),
        type=Path,
        help=f"Directory to store JSON data (default: ${DATA_DIR_ENV} or ./data)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="entity", required=True)

    onboard = subparsers.add_parser("onboard", help="Create your profile")
    onboard.add_argument("name")
    onboard.add_argument("currency", type=_currency_code)
    onboard.add_argument("initial_balance")
    onboard.add_argument("--theme", choices=THEMES, default="dark")

    profile_parser = subparsers.add_parser("profile", help="Show or edit your profile")
    profile_sub = profile_parser.add_subparsers(dest="command", required=True)
    profile_sub.add_parser("show", help="Show the profile")
    profile_update = profile_sub.add_parser("update", help="Update profile fields")
    profile_update.add_argument("--name")
    profile_update.add_argument("--currency", type=_currency_code)
    profile_update.add_argument("--theme", choices=THEMES)
    profile_update.add_argument("--avatar")

    tx_parser = subparsers.add_parser("tx", help="Manage transactions")
    tx_sub = tx_parser.add_subparsers(dest="command", required=True)

    tx_add = tx_sub.add_parser("add", help="Record a transaction")
    tx_add.add_argument("type", choices=TRANSACTION_TYPES)
    tx_add.add_argument("amount", type=_parse_amount)
    tx_add.add_argument("category", nargs="?", help="Defaults to the first predefined category")
    tx_add.add_argument("--note")
    tx_add.add_argument("--date", type=_parse_date, help="YYYY-MM-DD (default: today)")

    tx_list = tx_sub.add_parser("list", help="List transactions, newest first")
    tx_list.add_argument("--type", choices=TRANSACTION_TYPES)
    tx_list.add_argument("--category")
    tx_list.add_argument("--limit", type=int, default=RECENT_LIMIT)
    tx_list.add_argument("--all", action="store_true", help="Ignore --limit")

    tx_delete = tx_sub.add_parser("delete", help="Delete a transaction")
    tx_delete.add_argument("id")

    subparsers.add_parser("summary", help="Net worth and this month's totals")

    breakdown = subparsers.add_parser("breakdown", help="Totals grouped by category")
    breakdown.add_argument("type", choices=TRANSACTION_TYPES, nargs="?", default="expense")

    budget_parser = subparsers.add_parser("budget", help="Monthly budget")
    budget_sub = budget_parser.add_subparsers(dest="command", required=True)
    budget_sub.add_parser("show", help="Show budget progress")
    budget_set = budget_sub.add_parser("set", help="Set the monthly budget (0 disables it)")
    budget_set.add_argument("amount")

    categories = subparsers.add_parser("categories", help="List categories")
    categories.add_argument("--type", choices=TRANSACTION_TYPES)

    subparsers.add_parser("currencies", help="List supported currencies")

    reset = subparsers.add_parser("reset", help="Erase the profile and all transactions")
    reset.add_argument("--yes", action="store_true", help="Confirm the reset")

    return parser


HANDLERS = {
    "onboard": handle_onboard,
    "profile": handle_profile,
    "tx": handle_transaction,
    "summary": handle_summary,
    "breakdown": handle_breakdown,
    "budget": handle_budget,
    "categories": handle_categories,
    "currencies": handle_currencies,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    context = FinanceContext.open(args.data_dir)

    try:
        if args.entity == "reset":
            return handle_reset(args, context)
        if args.entity not in UNGATED_COMMANDS:
            context.require_onboarded()
        HANDLERS[args.entity](args, context)
    except OnboardingRequiredError:
        print("Run 'lumina onboard NAME CURRENCY BALANCE' first.", file=sys.stderr)
        return 1
    except ValidationError as exc:
        print(f"Validation error: {exc}", file=sys.stderr)
        return 1
    except RecordNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

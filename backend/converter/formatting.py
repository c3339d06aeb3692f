from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable

from .errors import UnrenderableAmount

RANK_ORDER = "23456789TJQKA"
SUITS = "cdhs"

CURRENCY_SYMBOLS = {
    "USD": "$",
    "CAD": "$",
    "AUD": "$",
    "EUR": "€",
    "GBP": "£",
}
CURRENCY_DECIMALS = {
    "JPY": 0,
    "KRW": 0,
}
DEFAULT_DECIMALS = 2

_PLACEHOLDER_CARDS = {"", "?", "??", "x", "xx"}


def normalize_card(raw: str) -> str | None:
    """Return a card in rank-then-suit notation, or None for a hidden card placeholder.

    Raises ValueError for anything that is not a playing card.
    """
    token = raw.strip()
    if token.lower() in _PLACEHOLDER_CARDS:
        return None
    if len(token) == 3 and token[:2] == "10":
        token = "T" + token[2]
    if len(token) != 2:
        raise ValueError(f"Invalid card: {raw!r}")
    rank, suit = token[0].upper(), token[1].lower()
    if rank not in RANK_ORDER or suit not in SUITS:
        raise ValueError(f"Invalid card: {raw!r}")
    return rank + suit


def format_cards(cards: Iterable[str]) -> str:
    return " ".join(cards)


def currency_decimals(currency: str) -> int:
    return CURRENCY_DECIMALS.get(currency.upper(), DEFAULT_DECIMALS)


def smallest_unit(currency: str) -> Decimal:
    return Decimal(1).scaleb(-currency_decimals(currency))


def format_money(amount: Decimal, currency: str) -> str:
    if not amount.is_finite() or amount < 0:
        raise UnrenderableAmount(f"Amount {amount} cannot be rendered in {currency}.")
    if amount == 0:
        amount = Decimal(0)
    unit = smallest_unit(currency)
    quantized = amount.quantize(unit)
    if quantized != amount:
        raise UnrenderableAmount(
            f"Amount {amount} has more than {currency_decimals(currency)} decimal places for {currency}."
        )
    return f"{CURRENCY_SYMBOLS.get(currency.upper(), '')}{quantized:f}"


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    utc = value.astimezone(timezone.utc)
    return f"{utc:%Y/%m/%d} {utc.hour}:{utc:%M:%S} UTC"

"""
Identifier validation and input sanitization.
"""

import math
import re
from collections.abc import Iterable

from fintracker.adapters.base import IdentifierValidator
from fintracker.adapters.news import NEWS_CATEGORIES
from fintracker.core.config import settings

MAX_INPUT_LENGTH = 50
STOCK_SYMBOL_PATTERN = re.compile(r"^[A-Za-z.]+$")
CURRENCY_CODE_PATTERN = re.compile(r"^[A-Za-z]{3}$")
MAX_AMOUNT = 1_000_000_000

_INJECTION_PATTERNS = [
    re.compile(r"[<>\"'`]"),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"data:", re.IGNORECASE),
    re.compile(r"vbscript:", re.IGNORECASE),
    re.compile(r"on\w+\s*=", re.IGNORECASE),
    re.compile(r"[\x00-\x1F\x7F]"),
]


def sanitize_input(value: str, max_length: int = MAX_INPUT_LENGTH) -> str:
    """Strip markup and control characters, trim, and cap length."""
    if not isinstance(value, str):
        return ""
    for pattern in _INJECTION_PATTERNS:
        value = pattern.sub("", value)
    return value.strip()[:max_length]


def normalize_symbol(symbol: str) -> str:
    return sanitize_input(symbol).upper()


class SymbolValidator(IdentifierValidator):
    """
    Accepts ticker symbols made of letters and dots.

    The symbol is checked as given; markup or whitespace that sanitizing
    would have to strip makes it invalid rather than silently repaired.
    """

    def __init__(self, max_length: int | None = None):
        self.max_length = max_length or settings.MAX_SYMBOL_LENGTH

    def is_valid(self, identifier: str) -> bool:
        if not identifier or not isinstance(identifier, str):
            return False

        candidate = identifier.strip()
        if sanitize_input(candidate) != candidate:
            return False

        return (
            1 <= len(candidate) <= self.max_length
            and STOCK_SYMBOL_PATTERN.match(candidate) is not None
        )

    def normalize(self, identifier: str) -> str:
        return normalize_symbol(identifier)


class CurrencyValidator(IdentifierValidator):
    """Accepts three-letter ISO 4217 style currency codes."""

    def is_valid(self, identifier: str) -> bool:
        if not identifier or not isinstance(identifier, str):
            return False
        return CURRENCY_CODE_PATTERN.match(identifier.strip()) is not None


class NewsCategoryValidator(IdentifierValidator):
    """Accepts one of the known news categories, case-insensitively."""

    def __init__(self, categories: Iterable[str] = NEWS_CATEGORIES):
        self.categories = frozenset(c.lower() for c in categories)

    def is_valid(self, identifier: str) -> bool:
        if not identifier or not isinstance(identifier, str):
            return False
        return self.normalize(identifier) in self.categories

    def normalize(self, identifier: str) -> str:
        return sanitize_input(identifier).lower()


def validate_amount(amount: object) -> bool:
    """A convertible amount is a finite positive number up to MAX_AMOUNT."""
    if isinstance(amount, bool) or not isinstance(amount, int | float):
        return False
    return math.isfinite(amount) and 0 < amount <= MAX_AMOUNT

# src/newrelic_logsink/core/sanitizer.py
"""Make free text safe to use as a New Relic query (NRQL) identifier.

Two steps, always in this order:

1. Strip every character outside the allow-list (letters, digits and the
   configured punctuation). The backtick is never allow-listed.
2. Wrap every whole-word, case-insensitive occurrence of an NRQL reserved
   word in backticks, keeping the original casing: ``"Select"`` becomes
   ``"`Select`"``.

Stripping first means removing a character can never leave a bare reserved
word behind (``"se#lect"`` becomes ``"`select`"``).

Patterns are compiled once per Sanitizer and applied in RESERVED_WORDS
order, which is sorted and fixed. Each word is matched with its own
word-boundary pattern, so ``second`` never matches inside ``seconds``.
"""

import re
from collections.abc import Iterable

# NRQL keywords and time units that would otherwise be parsed as syntax
RESERVED_WORDS: tuple[str, ...] = (
    "add",
    "ago",
    "and",
    "as",
    "auto",
    "begin",
    "begintime",
    "compare",
    "day",
    "days",
    "end",
    "endtime",
    "explain",
    "facet",
    "from",
    "hour",
    "hours",
    "in",
    "is",
    "like",
    "limit",
    "minute",
    "minutes",
    "month",
    "months",
    "not",
    "null",
    "offset",
    "or",
    "second",
    "seconds",
    "select",
    "since",
    "timeseries",
    "until",
    "week",
    "weeks",
    "where",
    "with",
)

QUOTE_CHARACTER = "`"

# Permissive variant: letters, digits, colon, underscore, dot, dash, space
DEFAULT_ALLOWED_PUNCTUATION = ":_.- "

# Strict variant: letters, digits, colon, underscore, space
STRICT_ALLOWED_PUNCTUATION = ":_ "


class Sanitizer:
    """Deterministic text sanitizer for backend identifiers.

    Thread-safe: holds only compiled patterns.

    Example:
        sanitizer = Sanitizer()
        sanitizer.sanitize("Orders from Europe!")  # "Orders `from` Europe"
    """

    def __init__(
        self,
        allowed_punctuation: str = DEFAULT_ALLOWED_PUNCTUATION,
        reserved_words: Iterable[str] = RESERVED_WORDS,
    ) -> None:
        if QUOTE_CHARACTER in allowed_punctuation:
            raise ValueError(f"{QUOTE_CHARACTER!r} is reserved for quoting and cannot be allow-listed")
        self._allowed_punctuation = allowed_punctuation
        self._disallowed = re.compile(f"[^A-Za-z0-9{re.escape(allowed_punctuation)}]")
        words = sorted({w.lower() for w in reserved_words})
        self._reserved_words = tuple(words)
        self._patterns = tuple(re.compile(rf"\b{re.escape(word)}\b", re.IGNORECASE) for word in words)

    @property
    def allowed_punctuation(self) -> str:
        return self._allowed_punctuation

    @property
    def reserved_words(self) -> tuple[str, ...]:
        return self._reserved_words

    @property
    def output_alphabet(self) -> frozenset[str]:
        """Every character sanitize() may emit."""
        letters_and_digits = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
        return frozenset(letters_and_digits + self._allowed_punctuation + QUOTE_CHARACTER)

    def sanitize(self, text: str) -> str:
        safe = self._disallowed.sub("", text)
        for pattern in self._patterns:
            safe = pattern.sub(_quote, safe)
        return safe

    __call__ = sanitize


def _quote(match: re.Match[str]) -> str:
    return f"{QUOTE_CHARACTER}{match.group(0)}{QUOTE_CHARACTER}"


_default_sanitizer = Sanitizer()


def sanitize(text: str) -> str:
    """Sanitize with the default allow-list and reserved words."""
    return _default_sanitizer.sanitize(text)

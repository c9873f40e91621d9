"""Tax identifier (CNPJ) normalization.

A CNPJ's first eight digits identify the company; the remaining digits are
branch and check digits. That prefix, the *root*, is the organization key used
for novelty lookups.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional, Union

from extraction.models import NOT_IDENTIFIED


ROOT_LENGTH = 8

_NON_DIGITS = re.compile(r"\D")
_REFERENCE_DELIMITERS = re.compile(r"[\n,;]")


def identifier_root(value: Optional[Union[str, Iterable[str]]]) -> str:
    """Return the root of a raw identifier, or of the first one in a sequence.

    Never raises. Input with fewer than eight digits yields a shorter (possibly
    empty) root; an empty root means "unknown" and must not be matched against
    other empty roots.
    """
    if value is None:
        return ""
    if not isinstance(value, str):
        value = next(iter(value), "") or ""
    if not value or value.strip().upper() == NOT_IDENTIFIED:
        return ""
    return _NON_DIGITS.sub("", value)[:ROOT_LENGTH]


def parse_reference_roots(blob: Optional[str]) -> frozenset[str]:
    """Normalize a delimited reference blob into a set of full-length roots.

    Tokens are split on newlines, commas and semicolons. Tokens with fewer than
    eight digits are discarded.
    """
    if not blob:
        return frozenset()
    roots = set()
    for token in _REFERENCE_DELIMITERS.split(blob):
        digits = _NON_DIGITS.sub("", token)
        if len(digits) >= ROOT_LENGTH:
            roots.add(digits[:ROOT_LENGTH])
    return frozenset(roots)

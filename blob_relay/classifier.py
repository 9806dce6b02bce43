"""
Filename classification.

Maps an object name to the destination sub-path it is relayed to. Matching
is a case-insensitive ordinal prefix comparison over an ordered rule table;
the first matching rule wins.
"""

from typing import Iterable, Optional, Tuple

from .utils.constants import CLASSIFICATION_RULES

ClassificationRule = Tuple[str, str]


def _has_prefix(name: str, prefix: str) -> bool:
    # str.upper() is locale-independent
    return len(name) >= len(prefix) and name[: len(prefix)].upper() == prefix.upper()


def classify(name: str, rules: Iterable[ClassificationRule] = CLASSIFICATION_RULES) -> Optional[str]:
    """
    Determine the destination sub-path for an object name.

    Args:
        name: Object name to classify
        rules: Ordered (prefix, sub-path) pairs; defaults to the built-in table

    Returns:
        Sub-path of the first rule whose prefix matches, or None

    Example:
        >>> classify("invoice_1001.pdf")
        'Invoices'
        >>> classify("Report_Q1.pdf") is None
        True
    """
    if not isinstance(name, str):
        return None
    for prefix, sub_path in rules:
        if _has_prefix(name, prefix):
            return sub_path
    return None


__all__ = ["ClassificationRule", "classify"]

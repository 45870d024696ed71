"""
Risk aggregation – folds per-interaction severities into one risk level.

Rules, evaluated top-down:
  - no interactions         → low
  - any high                → high
  - two or more medium      → high (compounding)
  - exactly one medium      → medium
  - otherwise               → low
"""

from collections import Counter
from typing import Iterable


def _severity_of(item) -> str:
    if isinstance(item, str):
        return item.strip().lower()
    if isinstance(item, dict):
        value = item.get("severity")
    else:
        value = getattr(item, "severity", None)
    return value.strip().lower() if isinstance(value, str) else "low"


def aggregate_risk(items: Iterable) -> str:
    """
    Accepts severity strings, dicts with a ``severity`` key, or objects with
    a ``severity`` attribute. Anything unrecognised counts as low.
    """
    counts = Counter(_severity_of(item) for item in items)
    if counts["high"] > 0:
        return "high"
    if counts["medium"] >= 2:
        return "high"
    if counts["medium"] == 1:
        return "medium"
    return "low"

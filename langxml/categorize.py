#!/usr/bin/env python3
"""
Partitioning records into named buckets.

Two independent views over the same records:

- categorize(): key-pattern rules, first match wins. Meant for filtering in
  a UI or on the command line.
- group_by_section(): the section each record was parsed from. This is the
  partition the exporter uses; it mirrors the source structure exactly.
"""

from collections import Counter
from typing import Iterable, Sequence

from .config import DEFAULT_CATEGORY_RULES, CategoryRule
from .records import SAVED, STATUSES, Record


def categorize(
    records: Iterable[Record],
    rules: Sequence[CategoryRule] = DEFAULT_CATEGORY_RULES,
) -> dict[str, list[Record]]:
    """
    Assign each record to the first rule whose patterns match its key.

    Every rule name is present in the result, in rule order, even if empty.
    Records matching no rule are dropped; put CATCH_ALL last to keep them.
    """
    buckets: dict[str, list[Record]] = {r.name: [] for r in rules}
    for record in records:
        for category in rules:
            if category.matches(record.key):
                buckets[category.name].append(record)
                break
    return buckets


def group_by_section(records: Iterable[Record]) -> dict[str, list[Record]]:
    """Group records by their intrinsic section, in first-seen order."""
    groups: dict[str, list[Record]] = {}
    for record in records:
        groups.setdefault(record.section, []).append(record)
    return groups


def search(records: Sequence[Record], term: str) -> list[Record]:
    """
    Filter records whose key, original or committed text contains ``term``.

    Matching is case-insensitive. Terms of two characters or fewer are
    ignored and the input is returned as-is.
    """
    if not term or len(term) <= 2:
        return list(records)

    needle = term.lower()
    return [
        r for r in records
        if needle in r.key.lower()
        or needle in r.original.lower()
        or (r.committed is not None and needle in r.committed.lower())
    ]


def progress_stats(records: Sequence[Record]) -> dict:
    """Status counts and the share of saved records."""
    counts = Counter(r.status for r in records)
    total = len(records)
    saved = counts.get(SAVED, 0)
    return {
        "total": total,
        "saved": saved,
        "percent": round(saved / total * 100) if total else 0,
        "by_status": {s: counts.get(s, 0) for s in STATUSES},
    }

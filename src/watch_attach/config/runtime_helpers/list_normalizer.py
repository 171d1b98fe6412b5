"""List normalization utilities for environment variables."""

from __future__ import annotations

from typing import Iterable, Sequence


class ListNormalizer:
    """Normalizes delimited list values from environment variables."""

    @staticmethod
    def split_and_normalize(raw_value: str, separator: str, strip_items: bool) -> list[str]:
        """Split ``raw_value`` on ``separator``; blank items are dropped when stripping."""
        parts: Iterable[str] = raw_value.split(separator) if separator else [raw_value]
        items: list[str] = []
        for part in parts:
            candidate = part.strip() if strip_items else part
            if strip_items and candidate == "":
                continue
            items.append(candidate)
        return items

    @staticmethod
    def deduplicate_preserving_order(items: Sequence[str]) -> tuple[str, ...]:
        seen: set[str] = set()
        deduped: list[str] = []
        for item in items:
            if item not in seen:
                deduped.append(item)
                seen.add(item)
        return tuple(deduped)

"""Search engine — indexed name search and in-memory weighted fuzzy search."""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Iterable, Protocol, Sequence

from fileindex.schemas.files import FileCategory, FileRecord
from fileindex.schemas.search import FieldMatch, SearchFilters, SearchHit
from fileindex.store.base import RecordStore
from fileindex.utils.categories import normalize_extension
from fileindex.utils.fuzzy import best_match

logger = logging.getLogger(__name__)

# (field, weight): name matters most, then extension, then full path
DEFAULT_FIELDS: tuple[tuple[str, float], ...] = (
    ("name", 0.7),
    ("extension", 0.2),
    ("path", 0.1),
)


class FieldScorer(Protocol):
    """Scores one record against a query; None means no match."""

    def score(
        self, query: str, record: FileRecord, threshold: float
    ) -> tuple[float, list[FieldMatch]] | None: ...


class WeightedFieldScorer:
    """Multi-field approximate matcher.

    Each field is scored independently (0 = exact, 1 = no resemblance) and
    only fields within the threshold whose matched span is at least
    ``min_match_length`` characters count. The record score is the product
    of ``field_score ** weight`` over matching fields, so extra matching
    fields can only improve it.
    """

    def __init__(
        self,
        fields: Sequence[tuple[str, float]] = DEFAULT_FIELDS,
        min_match_length: int = 2,
    ):
        total = sum(weight for _, weight in fields)
        if total <= 0:
            raise ValueError("field weights must sum to a positive value")
        self.fields = [(key, weight / total) for key, weight in fields]
        self.min_match_length = min_match_length

    def score(
        self, query: str, record: FileRecord, threshold: float
    ) -> tuple[float, list[FieldMatch]] | None:
        total = 1.0
        matches: list[FieldMatch] = []

        for key, weight in self.fields:
            value = getattr(record, key) or ""
            match = best_match(query, value)
            if match is None or match.score > threshold or match.length < self.min_match_length:
                continue
            # An exact field would zero the product and hide the other fields
            total *= (match.score or sys.float_info.epsilon) ** weight
            matches.append(FieldMatch(key=key, value=value, indices=[(match.start, match.end)]))

        if not matches or total > threshold:
            return None
        return total, matches


class SearchService:
    """Indexed search through the store, fuzzy search over caller-supplied lists."""

    def __init__(
        self,
        store: RecordStore,
        scorer: FieldScorer | None = None,
        threshold: float = 0.3,
        limit: int = 100,
        index_limit: int = 100,
    ):
        self._store = store
        self._scorer = scorer or WeightedFieldScorer()
        self.threshold = threshold
        self.limit = limit
        self.index_limit = index_limit

    async def search_indexed(
        self,
        query: str,
        limit: int | None = None,
        category: FileCategory | str | None = None,
    ) -> list[SearchHit]:
        """Name search against the store. Score is 0.0 for prefix hits, else 1.0.

        Prefix detection folds case with ``str.lower`` so it agrees with the
        stores' SQL ``lower()``.
        """
        records = await self._store.search_by_name(query, limit or self.index_limit, category)
        lowered = query.strip().lower()
        return [
            SearchHit(file=r, score=0.0 if r.name.lower().startswith(lowered) else 1.0)
            for r in records
        ]

    def search_fuzzy(
        self,
        query: str,
        records: Iterable[FileRecord],
        threshold: float | None = None,
        limit: int | None = None,
    ) -> list[SearchHit]:
        """Rank records by approximate match, best (lowest score) first."""
        query = query.strip()
        if not query:
            return []
        threshold = self.threshold if threshold is None else threshold
        if not 0.0 < threshold <= 1.0:
            raise ValueError(f"threshold must be in (0, 1], got {threshold}")
        limit = self.limit if limit is None else limit

        hits: list[SearchHit] = []
        for record in records:
            scored = self._scorer.score(query, record, threshold)
            if scored is None:
                continue
            score, matches = scored
            hits.append(SearchHit(file=record, score=score, matches=matches))

        # sort() is stable: equal scores keep input order
        hits.sort(key=lambda h: h.score)
        logger.debug("Fuzzy search %r: %d hits (threshold %.2f)", query, len(hits), threshold)
        return hits[:limit]


# --- pure filters (order preserving, no I/O) ---

def filter_by_category(
    records: Iterable[FileRecord], categories: Iterable[FileCategory | str]
) -> list[FileRecord]:
    wanted = {FileCategory(c) for c in categories}
    if not wanted:
        return list(records)
    return [r for r in records if r.category in wanted]


def filter_by_extension(records: Iterable[FileRecord], extensions: Iterable[str]) -> list[FileRecord]:
    wanted = {normalize_extension(e) for e in extensions if e.strip()}
    if not wanted:
        return list(records)
    return [r for r in records if normalize_extension(r.extension) in wanted]


def filter_by_size_range(
    records: Iterable[FileRecord], min_size: int | None = None, max_size: int | None = None
) -> list[FileRecord]:
    return [
        r for r in records
        if (min_size is None or r.size >= min_size)
        and (max_size is None or r.size <= max_size)
    ]


def _naive_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def filter_by_date_range(
    records: Iterable[FileRecord], start: datetime | None = None, end: datetime | None = None
) -> list[FileRecord]:
    """Inclusive range on modified_at. Records without a timestamp drop out."""
    if start is None and end is None:
        return list(records)
    start, end = _naive_utc(start), _naive_utc(end)
    return [
        r for r in records
        if r.modified_at is not None
        and (start is None or _naive_utc(r.modified_at) >= start)
        and (end is None or _naive_utc(r.modified_at) <= end)
    ]


def filter_by_folder(records: Iterable[FileRecord], folder: str | None) -> list[FileRecord]:
    """Keep records located at or below folder."""
    if not folder:
        return list(records)
    base = folder.rstrip("/\\") or folder
    prefix = base if base.endswith(os.sep) else base + os.sep
    return [r for r in records if r.path == base or r.path.startswith(prefix)]


def apply_filters(records: Iterable[FileRecord], filters: SearchFilters) -> list[FileRecord]:
    result = filter_by_category(records, filters.categories)
    result = filter_by_extension(result, filters.extensions)
    result = filter_by_size_range(result, filters.min_size, filters.max_size)
    result = filter_by_date_range(result, filters.start_date, filters.end_date)
    return filter_by_folder(result, filters.folder)

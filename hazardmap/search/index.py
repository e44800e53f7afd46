"""
Fuzzy search over the shelter dataset.

Builds a normalized text index over the searchable shelter fields once and
answers approximate-match queries with rapidfuzz. Scores are distances
as the map's search box expects them: ``score = 1 - similarity`` where 0
is a perfect match, and entries scoring above ``threshold`` are dropped.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from rapidfuzz import fuzz, process

from ..data.shelters import ShelterRecord
from .normalize import normalize

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.3


class SearchField(Enum):
    """Shelter fields the index can search."""

    NAME = "name"
    ADDRESS = "address"

    def value_of(self, record: ShelterRecord) -> str:
        """Raw text of this field for ``record``."""
        if self is SearchField.NAME:
            return record.name
        return record.address


@dataclass(frozen=True)
class SearchIndexEntry:
    """A shelter with its normalized searchable text."""

    record: ShelterRecord
    texts: Dict[SearchField, str] = field(hash=False)


@dataclass(frozen=True)
class SearchHit:
    """
    One search result.

    Attributes:
        record: Matched shelter
        similarity: 0-1, where 1 is an exact (sub)string match
        matched_field: Field that produced the best similarity
    """

    record: ShelterRecord
    similarity: float
    matched_field: SearchField

    @property
    def score(self) -> float:
        """Distance-style score (0 = perfect)."""
        return 1.0 - self.similarity


class FuzzySearchIndex:
    """
    Approximate-match index over shelter records.

    Example:
        index = FuzzySearchIndex(dataset)
        for record in index.search("たちかわ小"):
            print(record.name)
    """

    def __init__(
        self,
        records: Iterable[ShelterRecord],
        threshold: float = DEFAULT_THRESHOLD,
        fields: Sequence[SearchField] = (SearchField.NAME, SearchField.ADDRESS),
    ):
        """
        Build the index.

        Args:
            records: Shelter collection, in source order
            threshold: Highest accepted score (0-1)
            fields: Fields to search
        """
        if not 0.0 <= threshold <= 1.0:
            raise ValueError(f"threshold must be between 0 and 1, got {threshold}")
        if not fields:
            raise ValueError("At least one search field is required")

        self.threshold = threshold
        self.fields: Tuple[SearchField, ...] = tuple(fields)
        self._entries: List[SearchIndexEntry] = [
            SearchIndexEntry(
                record=record,
                texts={f: normalize(f.value_of(record)) for f in self.fields},
            )
            for record in records
        ]
        self._choices: Dict[SearchField, Dict[int, str]] = {
            f: {pos: entry.texts[f] for pos, entry in enumerate(self._entries)}
            for f in self.fields
        }

        logger.debug(
            "Built search index over %d shelters (fields=%s, threshold=%.2f)",
            len(self._entries), [f.value for f in self.fields], threshold,
        )

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> List[SearchIndexEntry]:
        return list(self._entries)

    def search_hits(self, query: str, limit: Optional[int] = None) -> List[SearchHit]:
        """
        Search and return scored hits, best first.

        Partial matches are ranked by how much of the field they cover, so
        an exact name beats a field that merely contains the query or is
        contained in it. Remaining ties keep the original collection order.
        """
        needle = normalize(query)
        if not needle:
            return []

        cutoff = (1.0 - self.threshold) * 100.0
        best: Dict[int, Tuple[float, float, SearchField]] = {}

        for search_field in self.fields:
            matches = process.extract(
                needle,
                self._choices[search_field],
                scorer=fuzz.partial_ratio,
                processor=None,
                score_cutoff=cutoff,
                limit=None,
            )
            for text, ratio, pos in matches:
                coverage = fuzz.ratio(needle, text, processor=None)
                current = best.get(pos)
                if current is None or (ratio, coverage) > current[:2]:
                    best[pos] = (ratio, coverage, search_field)

        ranked = sorted(best.items(), key=lambda item: (-item[1][0], -item[1][1], item[0]))
        if limit is not None:
            ranked = ranked[:limit]

        hits = [
            SearchHit(record=self._entries[pos].record, similarity=ratio / 100.0, matched_field=search_field)
            for pos, (ratio, _coverage, search_field) in ranked
        ]
        logger.debug("Query %r matched %d shelters", needle, len(hits))
        return hits

    def search(self, query: str, limit: Optional[int] = None) -> List[ShelterRecord]:
        """Search and return matching shelters, best first."""
        return [hit.record for hit in self.search_hits(query, limit=limit)]

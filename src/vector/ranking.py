"""
Ranking policy for similarity search.
Boost factors are fixed constants so rankings stay reproducible across releases.
"""

from typing import List, Sequence, Tuple

from .types import Record

# Query and field name contain one another (case-insensitive)
FIELD_MATCH_BOOST = 1.2
# Full-context record answering a short query
FULL_CONTEXT_BOOST = 1.1
# Queries with fewer words than this count as short
SHORT_QUERY_WORDS = 4

# (position, score) pairs
Scored = List[Tuple[int, float]]


def rank(scored: Scored) -> Scored:
    """Sort descending by score; earlier insertion position wins ties."""
    return sorted(scored, key=lambda item: (-item[1], item[0]))


def apply_threshold(scored: Scored, min_score: float) -> Scored:
    """Keep candidates scoring strictly above min_score."""
    return [(position, score) for position, score in scored if score > min_score]


def field_matches_query(query: str, field_name: str) -> bool:
    q = query.lower()
    f = field_name.lower()
    return bool(f) and (f in q or q in f)


def boost_factor(query: str, record: Record) -> float:
    """Multiplicative re-ranking boost for one record."""
    factor = 1.0
    if field_matches_query(query, record.field):
        factor *= FIELD_MATCH_BOOST
    if record.is_full_context and len(query.split()) < SHORT_QUERY_WORDS:
        factor *= FULL_CONTEXT_BOOST
    return factor


def rerank(query: str, scored: Scored, records: Sequence[Record]) -> Scored:
    """Apply heuristic boosts and re-sort."""
    boosted = [(position, score * boost_factor(query, records[position])) for position, score in scored]
    return rank(boosted)

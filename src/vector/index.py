"""
Field index derivation and vector similarity.
The field index is a rebuildable cache over the record list and is never persisted.
"""

from typing import List, Sequence

import numpy as np

from .types import FieldIndex, Record


def build_field_index(records: Sequence[Record]) -> FieldIndex:
    """Group record positions by their `field` metadata, in insertion order."""
    field_index: FieldIndex = {}
    for position, record in enumerate(records):
        field_index.setdefault(record.field, []).append(position)
    return field_index


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors; 0.0 when either vector has zero norm."""
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)

    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    return float(np.dot(va, vb) / (norm_a * norm_b))


def score_candidates(query_vector: Sequence[float], records: Sequence[Record],
                     positions: Sequence[int]) -> List[float]:
    """Cosine similarity of the query against each candidate position."""
    return [cosine_similarity(query_vector, records[position].embedding) for position in positions]

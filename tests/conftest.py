"""
Shared fixtures: deterministic providers and stores backed by a temporary file.
"""

import re

import pytest

from src.vector import service
from src.vector.embeddings import EmbeddingGate, IEmbeddingProvider
from src.vector.store import RetrievalStore


class TableEmbedding(IEmbeddingProvider):
    """Returns fixed vectors from a lookup table; unknown text raises."""

    model_name = "table"

    def __init__(self, vectors, dimension):
        self.vectors = dict(vectors)
        self.dimension = dimension
        self.calls = []

    def embed_text(self, text):
        self.calls.append(text)
        if text not in self.vectors:
            raise KeyError(text)
        return list(self.vectors[text])

    def get_dimension(self):
        return self.dimension


class KeywordEmbedding(IEmbeddingProvider):
    """Tiny concept model: hobby words, education words, everything else."""

    model_name = "keyword"
    HOBBY = {"hobby", "hobbies", "hiking", "like", "chess"}
    EDUCATION = {"degree", "cs", "education", "university", "study"}

    def embed_text(self, text):
        vector = [0.0, 0.0, 0.0]
        for token in re.findall(r"[a-z]+", text.lower()):
            if token in self.HOBBY:
                vector[0] += 1.0
            elif token in self.EDUCATION:
                vector[1] += 1.0
            else:
                vector[2] += 0.1
        return vector

    def get_dimension(self):
        return 3


@pytest.fixture
def store_path(tmp_path):
    return str(tmp_path / "data" / "vectorDB.json")


@pytest.fixture
def keyword_store(store_path):
    gate = EmbeddingGate(KeywordEmbedding(), dimension=3, max_workers=2)
    return RetrievalStore(gate, path=store_path)


@pytest.fixture
def make_table_store(store_path):
    """Factory for stores whose embeddings come from a lookup table."""

    def factory(vectors, dimension=2, zero_vector_fallback=False, path=None):
        provider = TableEmbedding(vectors, dimension)
        gate = EmbeddingGate(provider, dimension=dimension,
                             zero_vector_fallback=zero_vector_fallback, max_workers=2)
        return RetrievalStore(gate, path=path or store_path)

    return factory


@pytest.fixture
def shared_store(keyword_store):
    """Install a store as the process-wide store for the duration of a test."""
    service.set_store(keyword_store)
    yield keyword_store
    service.set_store(None)

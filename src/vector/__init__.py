"""
Embedding-indexed retrieval store for a personal knowledge base.
Records are embedded, grouped by field, persisted as JSON and searched by cosine similarity.
"""

# Package initialization for vector module
from .embeddings import IEmbeddingProvider, DeterministicHashEmbedding, SentenceTransformerEmbedding, EmbeddingGate
from .index import build_field_index, cosine_similarity
from .store import RetrievalStore
from .types import Record, SearchResult, BuildReport, DEFAULT_FIELD, FULL_CONTEXT_KEY

__all__ = [
    'IEmbeddingProvider',
    'DeterministicHashEmbedding',
    'SentenceTransformerEmbedding',
    'EmbeddingGate',
    'build_field_index',
    'cosine_similarity',
    'RetrievalStore',
    'Record',
    'SearchResult',
    'BuildReport',
    'DEFAULT_FIELD',
    'FULL_CONTEXT_KEY',
]

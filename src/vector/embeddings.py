"""
Embedding providers and the embedding gate.
The gate guarantees the provider is acquired once before any text is embedded.
"""

from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
import hashlib
import re
import threading
from typing import List, Sequence

import numpy as np

from src.core.errors import EmbeddingError, InitializationError, InvalidInputError, NotInitializedError
from util.logging import logger, truncate

_TOKEN_PATTERN = re.compile(r"[a-z0-9]+")


class IEmbeddingProvider(ABC):
    """Abstract interface for embedding providers."""

    model_name: str = "unknown"

    def load(self) -> None:
        """Acquire the underlying model. Providers without a model do nothing."""

    @abstractmethod
    def embed_text(self, text: str) -> List[float]:
        """Generate embedding vector for given text."""
        pass

    @abstractmethod
    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        pass


class DeterministicHashEmbedding(IEmbeddingProvider):
    """Deterministic hashed bag-of-words embedding provider.

    Each lowercase word token is hashed into one signed bucket and the result is
    L2-normalized, so identical text always produces the identical vector and
    texts sharing words score a positive cosine similarity. Useful for tests and
    offline runs without requiring external model dependencies.
    """

    model_name = "hash-bow"

    def __init__(self, dimension: int = 384):
        self.dimension = dimension

    def embed_text(self, text: str) -> List[float]:
        """Generate deterministic embedding vector using hash function."""
        vector = np.zeros(self.dimension, dtype=np.float64)

        for token in _TOKEN_PATTERN.findall(text.lower()):
            hex_dig = hashlib.md5(token.encode("utf-8")).hexdigest()
            bucket = int(hex_dig[:8], 16) % self.dimension
            sign = 1.0 if int(hex_dig[8:10], 16) % 2 == 0 else -1.0
            vector[bucket] += sign

        norm = np.linalg.norm(vector)
        if norm > 0:
            vector = vector / norm

        return vector.tolist()

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        return self.dimension


class SentenceTransformerEmbedding(IEmbeddingProvider):
    """Sentence transformers embedding provider using pre-trained models.

    Uses all-MiniLM-L6-v2 (384 dimensions) with mean pooling and unit
    normalization by default.
    """

    def __init__(self, model_name: str = "all-MiniLM-L6-v2", device: str = "cpu", normalize: bool = True):
        self.model_name = model_name
        self.device = device
        self.normalize = normalize
        self._model = None

    def load(self) -> None:
        if self._model is None:
            from sentence_transformers import SentenceTransformer
            self._model = SentenceTransformer(self.model_name, device=self.device)

    @property
    def model(self):
        self.load()
        return self._model

    def embed_text(self, text: str) -> List[float]:
        """Generate embedding vector using sentence transformers."""
        embedding = self.model.encode(
            text,
            convert_to_numpy=True,
            normalize_embeddings=self.normalize,
        )
        return embedding.tolist()

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        return self.model.get_sentence_embedding_dimension()


class EmbeddingGate:
    """
    Single entry point for embedding text.

    The provider is acquired on the first initialize() call only. Embedding
    before that is a caller error. When the provider fails, the gate raises
    EmbeddingError unless both the configured zero-vector fallback and the
    caller's allow_fallback are set, in which case a zero vector is returned.
    """

    def __init__(self, provider: IEmbeddingProvider, dimension: int = 384,
                 zero_vector_fallback: bool = False, max_workers: int = 4):
        self.provider = provider
        self.dimension = dimension
        self.zero_vector_fallback = zero_vector_fallback
        self.max_workers = max(1, max_workers)
        self._ready = False
        self._init_lock = threading.Lock()

    @property
    def is_ready(self) -> bool:
        return self._ready

    @property
    def model_name(self) -> str:
        return getattr(self.provider, "model_name", type(self.provider).__name__)

    def initialize(self) -> None:
        """Acquire the provider once. Repeated calls return immediately."""
        if self._ready:
            return

        with self._init_lock:
            if self._ready:
                return

            logger.log_embedder_event("initialize", self.model_name, status="started")
            try:
                self.provider.load()
                provided = self.provider.get_dimension()
            except Exception as e:
                logger.log_embedder_event("initialize", self.model_name, {"error": str(e)}, status="failed")
                raise InitializationError(f"Failed to initialize embedder '{self.model_name}': {e}") from e

            if provided != self.dimension:
                logger.log_embedder_event("initialize", self.model_name, {
                    "provider_dimension": provided,
                    "expected_dimension": self.dimension,
                }, status="failed")
                raise InitializationError(
                    f"Embedder '{self.model_name}' produces {provided}-dimensional vectors, expected {self.dimension}"
                )

            self._ready = True
            logger.log_embedder_event("initialize", self.model_name, {"dimension": self.dimension})

    def embed(self, text: str, allow_fallback: bool = False) -> List[float]:
        """
        Embed a single text.

        Args:
            text: Non-empty text to embed
            allow_fallback: Whether this call site accepts a zero vector on provider failure

        Returns:
            List of exactly `dimension` floats
        """
        if not self._ready:
            raise NotInitializedError("Embedder not initialized. Call initialize() first.")

        if not isinstance(text, str) or not text.strip():
            raise InvalidInputError("Text to embed must be a non-empty string")

        try:
            vector = self.provider.embed_text(text)
        except Exception as e:
            if self.zero_vector_fallback and allow_fallback:
                logger.log_embedder_event(
                    "fallback", self.model_name,
                    {"error": str(e), "text": truncate(text)},
                    status="degraded",
                )
                return [0.0] * self.dimension
            raise EmbeddingError(f"Embedding failed: {e}") from e

        if len(vector) != self.dimension:
            raise EmbeddingError(
                f"Embedding dimension {len(vector)} does not match expected dimension {self.dimension}"
            )

        return [float(v) for v in vector]

    def embed_many(self, texts: Sequence[str]) -> List[List[float]]:
        """
        Embed a batch strictly, preserving input order.

        Calls may run concurrently; the first failure propagates.
        """
        if not texts:
            return []

        if self.max_workers == 1 or len(texts) == 1:
            return [self.embed(text) for text in texts]

        workers = min(self.max_workers, len(texts))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="embed") as executor:
            return list(executor.map(self.embed, texts))

"""
Retrieval store configuration.
Values come from the environment (and a local .env file when present).
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Durable store location
VECTOR_DB_PATH = os.getenv("VECTOR_DB_PATH", "./data/vectorDB.json")
PROFILE_PATH = os.getenv("PROFILE_PATH", "./data/owner_profile.json")

# Embedding provider configuration
EMBED_PROVIDER = os.getenv("EMBED_PROVIDER", "sentence-transformers")  # sentence-transformers|hash
EMBED_MODEL_NAME = os.getenv("EMBED_MODEL_NAME", "all-MiniLM-L6-v2")
EMBED_DEVICE = os.getenv("EMBED_DEVICE", "cpu")
EMBED_DIM = int(os.getenv("EMBED_DIM", "384"))
EMBED_BATCH_WORKERS = int(os.getenv("EMBED_BATCH_WORKERS", "4"))

# Search defaults
SEARCH_TOP_K = int(os.getenv("SEARCH_TOP_K", "3"))
SEARCH_MIN_SCORE = float(os.getenv("SEARCH_MIN_SCORE", "0.2"))
SEARCH_ZERO_VECTOR_FALLBACK = os.getenv("SEARCH_ZERO_VECTOR_FALLBACK", "true").lower() == "true"

VALID_EMBED_PROVIDERS = ["sentence-transformers", "hash"]

# Version string
VERSION = "1.0.0"


def get_vector_db_path() -> str:
    """Get the durable store path, read from the environment on every call."""
    return os.getenv("VECTOR_DB_PATH", VECTOR_DB_PATH)


def get_embed_provider_name() -> str:
    return os.getenv("EMBED_PROVIDER", EMBED_PROVIDER).lower()


def get_embed_dimension() -> int:
    return int(os.getenv("EMBED_DIM", str(EMBED_DIM)))


def get_batch_workers() -> int:
    return int(os.getenv("EMBED_BATCH_WORKERS", str(EMBED_BATCH_WORKERS)))


def get_default_top_k() -> int:
    return int(os.getenv("SEARCH_TOP_K", str(SEARCH_TOP_K)))


def get_default_min_score() -> float:
    return float(os.getenv("SEARCH_MIN_SCORE", str(SEARCH_MIN_SCORE)))


def zero_vector_fallback_enabled() -> bool:
    """Check if the search path may substitute a zero vector when embedding fails."""
    return os.getenv("SEARCH_ZERO_VECTOR_FALLBACK", "true").lower() == "true"


def get_embedding_provider():
    """Get configured embedding provider implementation."""
    provider = get_embed_provider_name()

    if provider == "hash":
        from src.vector.embeddings import DeterministicHashEmbedding
        return DeterministicHashEmbedding(dimension=get_embed_dimension())

    from src.vector.embeddings import SentenceTransformerEmbedding
    return SentenceTransformerEmbedding(
        model_name=os.getenv("EMBED_MODEL_NAME", EMBED_MODEL_NAME),
        device=os.getenv("EMBED_DEVICE", EMBED_DEVICE),
    )


def create_store():
    """Create a retrieval store wired to the configured provider and path."""
    from src.vector.embeddings import EmbeddingGate
    from src.vector.store import RetrievalStore

    dimension = get_embed_dimension()
    gate = EmbeddingGate(
        get_embedding_provider(),
        dimension=dimension,
        zero_vector_fallback=zero_vector_fallback_enabled(),
        max_workers=get_batch_workers(),
    )
    return RetrievalStore(gate, path=get_vector_db_path(), dimension=dimension)


def ensure_data_directory():
    """Ensure the durable store directory exists."""
    Path(get_vector_db_path()).parent.mkdir(parents=True, exist_ok=True)


def validate_config():
    """Validate retrieval configuration and return any issues."""
    issues = []

    if get_embed_provider_name() not in VALID_EMBED_PROVIDERS:
        issues.append(f"Invalid EMBED_PROVIDER: {get_embed_provider_name()}")

    if get_embed_dimension() < 1:
        issues.append("EMBED_DIM must be >= 1")

    if get_batch_workers() < 1:
        issues.append("EMBED_BATCH_WORKERS must be >= 1")

    if get_default_top_k() < 1:
        issues.append("SEARCH_TOP_K must be >= 1")

    if not -1.0 <= get_default_min_score() <= 1.0:
        issues.append("SEARCH_MIN_SCORE must be within [-1, 1]")

    return issues

"""
Process-wide retrieval store façade.
These functions are the only entry points the surrounding service uses.
"""

import threading
from typing import Any, Callable, Dict, List, Optional, Sequence

from src.core import config
from util.logging import logger

from .store import RetrievalStore
from .types import BuildReport, Record, SearchResult

_store: Optional[RetrievalStore] = None
_store_lock = threading.Lock()


def get_store() -> RetrievalStore:
    """Return the shared store, creating it from configuration on first use."""
    global _store
    if _store is None:
        with _store_lock:
            if _store is None:
                _store = config.create_store()
    return _store


def set_store(store: Optional[RetrievalStore]) -> None:
    """Replace the shared store. Passing None makes the next call rebuild it from configuration."""
    global _store
    with _store_lock:
        _store = store


def init_embedder() -> None:
    get_store().initialize()


def build_vector_store(chunks: Sequence) -> BuildReport:
    return get_store().build(chunks)


def search(query: str, top_k: Optional[int] = None, min_score: Optional[float] = None,
           field_filter: Optional[str] = None, use_reranking: bool = False) -> List[SearchResult]:
    """Search the shared store, filling unset options from configuration."""
    return get_store().search(
        query,
        top_k=top_k if top_k is not None else config.get_default_top_k(),
        min_score=min_score if min_score is not None else config.get_default_min_score(),
        field_filter=field_filter,
        use_reranking=use_reranking,
    )


def add_document(content: str, metadata: Optional[Dict[str, Any]] = None) -> Record:
    return get_store().add(content, metadata)


def load_from_disk() -> bool:
    return get_store().load()


def clear() -> None:
    get_store().clear()


def stats() -> Dict[str, Any]:
    return get_store().stats()


def bootstrap(chunk_source: Callable[[], Sequence]) -> Dict[str, Any]:
    """
    Start-up sequence: initialize the embedder, reuse the durable file when
    present, otherwise build from the chunk source.

    Args:
        chunk_source: Zero-argument callable returning the chunks to build from

    Returns:
        Store stats after start-up
    """
    init_embedder()

    if load_from_disk():
        logger.info("Using existing vector store")
    else:
        logger.info("Building vector store from scratch")
        build_vector_store(chunk_source())

    current = stats()
    logger.log_operation("rag.bootstrap", "success", {
        "record_count": current["record_count"],
        "fields": len(current["field_names"]),
    })
    return current

"""
Error taxonomy for the retrieval store.
All store failures derive from RetrievalStoreError so callers can catch one type.
"""


class RetrievalStoreError(Exception):
    """Base class for every retrieval store failure."""


class InitializationError(RetrievalStoreError):
    """The embedding provider could not be acquired. A later initialize() may retry."""


class NotInitializedError(RetrievalStoreError):
    """An embedding was requested before the embedder was initialized."""


class InvalidInputError(RetrievalStoreError, ValueError):
    """Empty or malformed text, chunk, metadata or search option."""


class EmptyInputError(RetrievalStoreError, ValueError):
    """A build was requested with no chunks or with something that is not a sequence."""


class EmbeddingError(RetrievalStoreError):
    """The provider failed while embedding, or returned a vector of the wrong dimension."""


class PersistenceError(RetrievalStoreError):
    """The durable file could not be written, read or removed, or its contents are corrupt."""

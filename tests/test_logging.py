"""
Structured log lines emitted by the store and the embedder.
"""

import logging

from src.vector.embeddings import DeterministicHashEmbedding, EmbeddingGate
from util.logging import StructuredLogger, truncate


def test_log_operation_format(caplog):
    structured = StructuredLogger("profile_rag.test")

    with caplog.at_level(logging.INFO, logger="profile_rag.test"):
        structured.log_vector_operation("search", {"returned": 2})

    assert "Operation: vector.search, Status: success, Details: {'returned': 2}" in caplog.text


def test_failure_statuses_log_as_warning(caplog):
    structured = StructuredLogger("profile_rag.test")

    with caplog.at_level(logging.INFO, logger="profile_rag.test"):
        structured.log_embedder_event("fallback", "hash-bow", {"error": "down"}, status="degraded")
        structured.log_skipped_chunk(3, "content cannot be empty")

    assert [r.levelno for r in caplog.records] == [logging.WARNING, logging.WARNING]
    assert "build.skip_chunk" in caplog.records[1].getMessage()


def test_initialize_logs_once(caplog):
    gate = EmbeddingGate(DeterministicHashEmbedding(dimension=8), dimension=8)

    with caplog.at_level(logging.INFO, logger="profile_rag"):
        gate.initialize()
        gate.initialize()

    ready_lines = [r for r in caplog.records if "embedder.initialize, Status: success" in r.getMessage()]
    assert len(ready_lines) == 1


def test_truncate():
    assert truncate("short") == "short"
    assert truncate("x" * 60) == "x" * 50 + "..."

"""
Structured logging for retrieval store operations.
Every store, embedder and build event goes through the shared `logger` instance.
"""

import logging
import os
from typing import Any, Dict

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Statuses logged at warning level
WARNING_STATUSES = {"failed", "degraded", "skipped"}


class StructuredLogger:
    """Structured logger for embedding, indexing and search operations."""

    def __init__(self, name: str = "profile_rag"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None, level: int = logging.INFO):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        self.logger.log(level, message)

    def log_vector_operation(self, operation: str, details: Dict[str, Any] = None, status: str = "success"):
        """Log a vector store operation."""
        level = logging.WARNING if status in WARNING_STATUSES else logging.INFO
        self.log_operation(f"vector.{operation}", status, details, level=level)

    def log_embedder_event(self, event: str, model: str, details: Dict[str, Any] = None, status: str = "success"):
        """Log an embedder lifecycle event."""
        log_details = {"model": model}
        if details:
            log_details.update(details)

        level = logging.WARNING if status in WARNING_STATUSES else logging.INFO
        self.log_operation(f"embedder.{event}", status, log_details, level=level)

    def log_skipped_chunk(self, position: int, reason: str, chunk_id: str = None):
        """Log a chunk rejected by the build pipeline."""
        details = {"position": position, "reason": reason[:100]}
        if chunk_id is not None:
            details["chunk_id"] = chunk_id

        self.log_operation("build.skip_chunk", "skipped", details, level=logging.WARNING)

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


def truncate(text: str, limit: int = 50) -> str:
    """Shorten free text before it is written to a log line."""
    return text[:limit] + "..." if len(text) > limit else text


# Global logger instance
logger = StructuredLogger()

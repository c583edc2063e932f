"""
Embedding-indexed retrieval store.
Owns the record list, the field index derived from it, and the durable JSON file.
"""

from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
import time
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from src.core.errors import EmptyInputError, InvalidInputError
from src.core.locks import ReadWriteLock
from util.logging import logger, truncate

from .embeddings import EmbeddingGate
from .index import build_field_index, score_candidates
from .persistence import load_records, remove_file, save_records
from .ranking import apply_threshold, rank, rerank
from .schemas import ChunkIn, SearchOptions
from .types import BuildReport, FieldIndex, Record, SearchResult, is_metadata_value, normalize_metadata


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _chunk_payload(chunk: Any) -> Any:
    """Accept mappings as-is and read attributes from chunk-like objects."""
    if isinstance(chunk, Mapping):
        return chunk
    if hasattr(chunk, 'content'):
        return {
            'id': getattr(chunk, 'id', None),
            'content': getattr(chunk, 'content'),
            'metadata': getattr(chunk, 'metadata', None),
        }
    return chunk


class RetrievalStore:
    """
    In-memory record collection with exact cosine search and JSON persistence.

    Mutations (build, add, load, clear) replace state under the exclusive lock
    and rebuild the field index before releasing it, so readers never see an
    index that disagrees with the records. Embedding for build and add runs
    before the lock is taken.
    """

    def __init__(self, gate: EmbeddingGate, path: str = "./data/vectorDB.json", dimension: Optional[int] = None):
        self.gate = gate
        self.path = path
        self.dimension = dimension if dimension is not None else gate.dimension
        self._records: List[Record] = []
        self._field_index: FieldIndex = {}
        self._lock = ReadWriteLock()

    def __len__(self):
        return len(self._records)

    @property
    def records(self) -> List[Record]:
        """Snapshot of the stored records in insertion order."""
        with self._lock.read_locked():
            return list(self._records)

    @property
    def field_index(self) -> FieldIndex:
        with self._lock.read_locked():
            return {name: list(positions) for name, positions in self._field_index.items()}

    def initialize(self) -> None:
        self.gate.initialize()

    # ---------------------------------------------------------------- build

    def _validate_chunks(self, chunks: Sequence) -> List[ChunkIn]:
        valid: List[ChunkIn] = []
        seen_ids = set()

        for position, chunk in enumerate(chunks):
            try:
                parsed = ChunkIn.model_validate(_chunk_payload(chunk))
            except ValidationError as e:
                reason = "; ".join(err.get('msg', 'invalid') for err in e.errors())
                logger.log_skipped_chunk(position, reason)
                continue

            if parsed.id is not None:
                if parsed.id in seen_ids:
                    logger.log_skipped_chunk(position, "duplicate id", parsed.id)
                    continue
                seen_ids.add(parsed.id)

            valid.append(parsed)

        return valid

    def build(self, chunks: Sequence) -> BuildReport:
        """
        Replace the store with the embedded chunks and persist it.

        Args:
            chunks: Non-empty ordered sequence of {id, content, metadata} chunks

        Returns:
            BuildReport with indexed and skipped counts
        """
        if (
            not isinstance(chunks, Sequence)
            or isinstance(chunks, (str, bytes))
            or len(chunks) == 0
        ):
            raise EmptyInputError("Chunks must be a non-empty sequence")

        self.gate.initialize()
        logger.log_vector_operation("build", {"chunks": len(chunks)}, status="started")

        valid = self._validate_chunks(chunks)

        # Generated ids must not collide with caller ids in the same batch
        taken = {chunk.id for chunk in valid if chunk.id is not None}
        ids: List[str] = []
        for ordinal, chunk in enumerate(valid):
            if chunk.id is not None:
                ids.append(chunk.id)
                continue
            candidate = f"chunk_{ordinal}"
            while candidate in taken:
                candidate += "_"
            taken.add(candidate)
            ids.append(candidate)

        embeddings = self.gate.embed_many([chunk.content for chunk in valid])

        created = _now()
        records = [
            Record(
                id=record_id,
                content=chunk.content,
                embedding=embedding,
                metadata=normalize_metadata(chunk.resolved_metadata()),
                timestamp=created,
            )
            for record_id, chunk, embedding in zip(ids, valid, embeddings)
        ]

        with self._lock.write_locked():
            self._records = records
            self._field_index = build_field_index(records)
            save_records(self.path, self._records)

        report = BuildReport(indexed=len(records), skipped=len(chunks) - len(records), path=self.path)
        logger.log_vector_operation("build", {
            "indexed": report.indexed,
            "skipped": report.skipped,
            "fields": len(self._field_index),
        })
        return report

    # ------------------------------------------------------------------ add

    def add(self, content: str, metadata: Optional[Dict[str, Any]] = None) -> Record:
        """Embed and append a single document, then persist the store."""
        if not isinstance(content, str) or not content.strip():
            raise InvalidInputError("Document content must be a non-empty string")

        metadata = dict(metadata or {})
        for key, value in metadata.items():
            if not isinstance(key, str) or not is_metadata_value(value):
                raise InvalidInputError(f"Metadata value for '{key}' must be a string, number or boolean")

        self.gate.initialize()
        embedding = self.gate.embed(content)

        with self._lock.write_locked():
            record = Record(
                id=f"doc_{int(time.time() * 1000)}_{len(self._records)}",
                content=content,
                embedding=embedding,
                metadata=metadata,
                timestamp=_now(),
            )
            self._records.append(record)
            self._field_index = build_field_index(self._records)
            save_records(self.path, self._records)

        logger.log_vector_operation("add", {"record_id": record.id, "field": record.field})
        return record

    # --------------------------------------------------------------- search

    def search(self, query: str, top_k: Optional[int] = None, min_score: Optional[float] = None,
               field_filter: Optional[str] = None, use_reranking: bool = False) -> List[SearchResult]:
        """
        Rank stored records against a free-text query.

        Candidates are scored by cosine similarity, sorted (ties keep insertion
        order), filtered to scores strictly above min_score, optionally boosted
        and re-sorted, then truncated to top_k.
        """
        if not isinstance(query, str) or not query.strip():
            raise InvalidInputError("Query must be a non-empty string")

        options_in = {"field_filter": field_filter, "use_reranking": use_reranking}
        if top_k is not None:
            options_in["top_k"] = top_k
        if min_score is not None:
            options_in["min_score"] = min_score
        try:
            options = SearchOptions(**options_in)
        except ValidationError as e:
            raise InvalidInputError(f"Invalid search options: {e}") from e

        if not self._records:
            logger.log_vector_operation("search", {"query": truncate(query)}, status="empty_store")
            return []

        self.gate.initialize()
        query_vector = self.gate.embed(query, allow_fallback=True)

        with self._lock.read_locked():
            if options.field_filter is not None:
                positions = list(self._field_index.get(options.field_filter, []))
            else:
                positions = list(range(len(self._records)))

            scores = score_candidates(query_vector, self._records, positions)
            scored = apply_threshold(rank(list(zip(positions, scores))), options.min_score)

            if options.use_reranking:
                scored = rerank(query, scored, self._records)

            results = []
            for position, score in scored[:options.top_k]:
                record = self._records[position]
                results.append(SearchResult(
                    id=record.id,
                    content=record.content,
                    score=score,
                    metadata=dict(record.metadata),
                ))

        logger.log_vector_operation("search", {
            "query": truncate(query),
            "candidates": len(positions),
            "returned": len(results),
            "field_filter": options.field_filter,
            "reranked": options.use_reranking,
        })
        return results

    # ---------------------------------------------------------- persistence

    def save(self) -> None:
        """Write the current records to the durable file."""
        with self._lock.write_locked():
            save_records(self.path, self._records)
            count = len(self._records)
        logger.log_vector_operation("save", {"records": count, "path": self.path})

    def load(self) -> bool:
        """
        Replace the store with the durable file contents.

        Returns:
            False when the file is missing or empty, True otherwise
        """
        with self._lock.write_locked():
            records = load_records(self.path, self.dimension)
            if records is None:
                logger.log_vector_operation("load", {"path": self.path}, status="not_found")
                return False

            self._records = records
            self._field_index = build_field_index(records)

        logger.log_vector_operation("load", {"records": len(records), "path": self.path})
        return True

    def clear(self) -> None:
        """Drop every record and remove the durable file."""
        with self._lock.write_locked():
            self._records = []
            self._field_index = {}
            removed = remove_file(self.path)
        logger.log_vector_operation("clear", {"file_removed": removed})

    def stats(self) -> Dict[str, Any]:
        with self._lock.read_locked():
            return {
                "record_count": len(self._records),
                "field_names": sorted(self._field_index),
                "dimension": self.dimension,
                "embedder_ready": self.gate.is_ready,
                "path": self.path,
            }

"""
Record and result types for the retrieval store.
Every record carries a `field` metadata key used to group it in the field index.
"""

from dataclasses import dataclass
from dataclasses import field as dataclass_field
from typing import Dict, List, Optional, Union

MetadataValue = Union[str, int, float, bool]
Metadata = Dict[str, MetadataValue]
FieldIndex = Dict[str, List[int]]

DEFAULT_FIELD = "general"
FIELD_KEY = "field"
FULL_CONTEXT_KEY = "isFullContext"


def is_metadata_value(value: object) -> bool:
    """Check that a metadata value is a scalar (string, number or boolean)."""
    return isinstance(value, (str, int, float, bool))


def normalize_metadata(metadata: Optional[Dict[str, object]]) -> Metadata:
    """Copy metadata and guarantee a non-empty `field` entry."""
    normalized = dict(metadata or {})
    if not normalized.get(FIELD_KEY):
        normalized[FIELD_KEY] = DEFAULT_FIELD
    return normalized


@dataclass
class Record:
    """Represents one embedded, indexed unit of stored text."""

    id: str
    """Unique identifier within the store"""

    content: str
    """The embedded text"""

    embedding: List[float]
    """Vector representation of the content, fixed dimension per store"""

    metadata: Metadata = dataclass_field(default_factory=dict)
    """Open scalar metadata; always contains `field`"""

    timestamp: Optional[str] = None
    """ISO-8601 creation time, advisory only"""

    def __post_init__(self):
        self.metadata = normalize_metadata(self.metadata)

    @property
    def field(self) -> str:
        return str(self.metadata[FIELD_KEY])

    @property
    def is_full_context(self) -> bool:
        return self.metadata.get(FULL_CONTEXT_KEY) is True

    def to_dict(self) -> Dict[str, object]:
        """Serialize to the durable file layout."""
        data = {
            "id": self.id,
            "content": self.content,
            "embedding": list(self.embedding),
            "metadata": dict(self.metadata),
        }
        if self.timestamp is not None:
            data["timestamp"] = self.timestamp
        return data


@dataclass
class SearchResult:
    """Represents a ranked search hit."""

    id: str
    """Identifier of the matching record"""

    content: str
    """Text of the matching record"""

    score: float
    """Final score: cosine similarity, times any re-ranking boost"""

    metadata: Metadata
    """Metadata of the matching record"""

    @property
    def field(self) -> str:
        return str(self.metadata.get(FIELD_KEY, DEFAULT_FIELD))

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "content": self.content,
            "score": self.score,
            "metadata": dict(self.metadata),
        }


@dataclass
class BuildReport:
    """Outcome of a full build."""

    indexed: int
    """Number of records stored"""

    skipped: int
    """Number of chunks rejected as empty or malformed"""

    path: str
    """Durable file the records were written to"""

"""
Validation models for chunks entering a build and for search options.
"""

from typing import Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

ScalarValue = Union[bool, int, float, str]


class ChunkIn(BaseModel):
    """One chunk produced by a chunk source."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    content: str
    metadata: Optional[Dict[str, ScalarValue]] = None
    field: Optional[str] = None

    @field_validator('content')
    @classmethod
    def content_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('content cannot be empty')
        return v

    @field_validator('id')
    @classmethod
    def id_must_not_be_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError('id cannot be blank')
        return v

    def resolved_metadata(self) -> Dict[str, ScalarValue]:
        """Chunk metadata, with a top-level `field` used when metadata has none."""
        metadata = dict(self.metadata or {})
        if self.field and not metadata.get('field'):
            metadata['field'] = self.field
        return metadata


class SearchOptions(BaseModel):
    top_k: int = Field(default=3, ge=1)
    min_score: float = Field(default=0.2, ge=-1.0, le=1.0)
    field_filter: Optional[str] = None
    use_reranking: bool = False

    @field_validator('field_filter')
    @classmethod
    def field_filter_must_not_be_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError('field_filter cannot be blank')
        return v

"""
Data models for knowledge nodes
Using Pydantic for data validation of everything entering the store
"""
import math
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .base import clamp_percent, new_id, unique, utcnow

NodeType = Literal["markdown", "pdf", "mindmap", "note"]

WORDS_PER_MINUTE = 200


class Position(BaseModel):
    """Graph position; z is the knowledge depth"""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


class NodeMetadata(BaseModel):
    word_count: int = Field(default=0, ge=0)
    reading_time: int = Field(default=0, ge=0, description="Estimated reading time in minutes")
    difficulty: float = Field(default=50.0, description="Difficulty score from 0 to 100")
    mastery: float = Field(default=0.0, description="Mastery score from 0 to 100")
    connections: List[str] = Field(default_factory=list, description="Related node ids")

    @field_validator("difficulty", "mastery")
    @classmethod
    def _clamp(cls, value: float) -> float:
        return clamp_percent(value)

    @field_validator("connections")
    @classmethod
    def _unique_connections(cls, value: List[str]) -> List[str]:
        return unique(value)


class KnowledgeNode(BaseModel):
    """A unit of stored content with graph position and relations"""
    id: str = Field(default_factory=new_id)
    title: str = Field(description="Node title")
    content: str = Field(default="", description="Node body, Markdown for markdown/note nodes")
    type: NodeType = "note"
    tags: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    parent_id: Optional[str] = None
    position: Position = Field(default_factory=Position)
    metadata: NodeMetadata = Field(default_factory=NodeMetadata)

    @field_validator("tags")
    @classmethod
    def _unique_tags(cls, value: List[str]) -> List[str]:
        return unique(tag.strip() for tag in value if tag.strip())

    def with_content_metrics(self) -> "KnowledgeNode":
        """Return a copy whose word count and reading time reflect the content"""
        words = len(self.content.split())
        metadata = self.metadata.model_copy(update={
            "word_count": words,
            "reading_time": math.ceil(words / WORDS_PER_MINUTE),
        })
        return self.model_copy(update={"metadata": metadata})


class SearchResult(BaseModel):
    """Scored search match for a knowledge node"""
    node: KnowledgeNode
    score: float = 0.0
    highlights: List[str] = Field(default_factory=list)
    context: str = ""

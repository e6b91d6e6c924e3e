"""
Data models for uploads and imports
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .base import new_id
from .knowledge import KnowledgeNode

UploadStatus = Literal["pending", "uploading", "processing", "completed", "error"]


class UploadProgress(BaseModel):
    file_name: str
    loaded: int = 0
    total: int = 0

    @property
    def percentage(self) -> float:
        if self.total <= 0:
            return 100.0
        return round(self.loaded * 100.0 / self.total, 2)


class FileUpload(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    type: str = "application/octet-stream"
    size: int = 0
    status: UploadStatus = "pending"
    progress: float = 0.0
    url: Optional[str] = None
    extracted_content: Optional[str] = None
    error: Optional[str] = None


class ImportResult(BaseModel):
    """Outcome of a bulk node import; ``errors`` lists per-item problems"""
    success: bool
    nodes: List[KnowledgeNode] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    error: Optional[str] = None

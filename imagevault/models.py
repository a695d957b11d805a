from enum import Enum
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")

class StoredObject(BaseModel):
    key: Optional[str] = None
    size: int = 0

class UploadResult(BaseModel):
    key: str
    url: str
    keywords: List[str] = []

class SearchItem(BaseModel):
    key: str
    url: str
    keywords: List[str] = []

class SearchResponse(BaseModel):
    items: List[SearchItem] = []

class HealthResponse(BaseModel):
    ok: bool = True
    region: Optional[str] = None
    bucket: Optional[str] = None

class DebugConfig(BaseModel):
    bucket: Optional[str] = None
    region: Optional[str] = None
    hasAccessKey: bool
    hasSecret: bool

class ErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    STORE = "store"

class GatewayError(BaseModel):
    kind: ErrorKind
    message: str
    missing: List[str] = Field(default_factory=list)
    details: Optional[str] = None

class Outcome(BaseModel, Generic[T]):
    """Either a value or a GatewayError, never both."""
    value: Optional[T] = None
    error: Optional[GatewayError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: GatewayError) -> "Outcome[T]":
        return cls(error=error)

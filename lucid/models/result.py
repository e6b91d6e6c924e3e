"""
Result envelopes

``ServiceResponse`` is the wire-level envelope every external service returns.
``Success`` / ``Failure`` are what store commands hand back to callers.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Optional, TypeVar, Union

from pydantic import BaseModel

T = TypeVar("T")


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    INVALID_STATE = "invalid_state"
    SERVICE_FAILURE = "service_failure"
    VALIDATION_FAILURE = "validation_failure"


class ServiceResponse(BaseModel, Generic[T]):
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None, message: Optional[str] = None) -> "ServiceResponse":
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, error: str) -> "ServiceResponse":
        return cls(success=False, error=error)


@dataclass(frozen=True)
class Success(Generic[T]):
    data: Optional[T] = None
    success: bool = field(default=True, init=False)


@dataclass(frozen=True)
class Failure:
    error: str
    kind: ErrorKind = ErrorKind.SERVICE_FAILURE
    success: bool = field(default=False, init=False)


Result = Union[Success, Failure]

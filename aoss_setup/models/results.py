from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Created(Generic[T]):
    """The control plane accepted the request and created the resource."""

    name: str
    detail: T


@dataclass(frozen=True)
class AlreadyExists(Generic[T]):
    """The control plane rejected the request with a ConflictException.

    `detail` is whatever could be re-resolved for the existing resource (may be None).
    """

    name: str
    message: str = ""
    detail: Any = field(default=None)


@dataclass(frozen=True)
class Failed:
    """Any other failure; carries the wrapped exception for the caller to log or raise."""

    name: str
    error: Exception


ProvisionResult = Union[Created[T], AlreadyExists[T], Failed]

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CollectionType(str, Enum):
    SEARCH = "SEARCH"
    TIMESERIES = "TIMESERIES"
    VECTORSEARCH = "VECTORSEARCH"


class CollectionState(str, Enum):
    CREATING = "CREATING"
    ACTIVE = "ACTIVE"
    FAILED = "FAILED"
    DELETING = "DELETING"

    @property
    def is_terminal_failure(self) -> bool:
        return self in (CollectionState.FAILED, CollectionState.DELETING)


class CollectionRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    type: CollectionType = CollectionType.SEARCH
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must be provided")
        return value


class _ControlPlaneModel(BaseModel):
    # Responses carry more fields than we use (kmsKeyArn, createdDate, ...)
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class CollectionHandle(_ControlPlaneModel):
    """What the control plane returns for a collection we created (or found already existing)."""

    id: str
    name: str
    status: CollectionState
    arn: Optional[str] = None
    type: Optional[CollectionType] = None

    @staticmethod
    def from_response(detail: dict[str, Any]) -> "CollectionHandle":
        return CollectionHandle.model_validate(detail)


class CollectionStatus(_ControlPlaneModel):
    """One entry of `collectionDetails` from BatchGetCollection.

    `endpoint` is only populated once the collection is ACTIVE.
    """

    id: Optional[str] = None
    name: str
    status: CollectionState
    endpoint: Optional[str] = Field(default=None, alias="collectionEndpoint")
    dashboard_endpoint: Optional[str] = Field(default=None, alias="dashboardEndpoint")

    @staticmethod
    def from_response(detail: dict[str, Any]) -> "CollectionStatus":
        return CollectionStatus.model_validate(detail)

    def to_handle(self) -> CollectionHandle:
        return CollectionHandle(id=self.id or "", name=self.name, status=self.status)

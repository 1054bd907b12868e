from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, List, Optional


class DeletionStatus(str, Enum):
    NONE_MATCHED = "none_matched"
    ALL_DELETED = "all_deleted"
    PARTIAL_FAILURE = "partial_failure"


class FaceEntry(BaseModel):
    id: Optional[Any] = None
    name: Optional[Any] = None

    model_config = ConfigDict(extra="allow")


class DeletionFailure(BaseModel):
    id: Any
    status: int
    error: Any


class DeletionOutcome(BaseModel):
    name: str
    attempted_ids: List[Any] = Field(default_factory=list)
    succeeded_count: int = 0
    failures: List[DeletionFailure] = Field(default_factory=list)

    @property
    def outcome(self) -> DeletionStatus:
        if not self.attempted_ids:
            return DeletionStatus.NONE_MATCHED
        if self.failures:
            return DeletionStatus.PARTIAL_FAILURE
        return DeletionStatus.ALL_DELETED


class DeleteByNameRequest(BaseModel):
    name: Optional[str] = None

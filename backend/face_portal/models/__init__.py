
from .deletion import DeleteByNameRequest, DeletionFailure, DeletionOutcome, DeletionStatus, FaceEntry
from .error import ErrorResponse

__all__ = [
    "DeleteByNameRequest",
    "DeletionFailure",
    "DeletionOutcome",
    "DeletionStatus",
    "ErrorResponse",
    "FaceEntry",
]

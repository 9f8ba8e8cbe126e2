# backend/modules/occupancy/exceptions/occupancy_exceptions.py

"""Exceptions raised by the occupancy engine"""

from typing import Any, Dict, Optional

from core.exceptions import InternalError, ValidationError


class MalformedRecordError(ValidationError):
    """Raised when an input record violates its own invariants"""

    def __init__(self, record_type: str, record_id: Any, reason: str):
        self.record_type = record_type
        self.record_id = record_id
        self.reason = reason
        super().__init__(
            detail=f"Malformed {record_type} {record_id}: {reason}",
            error_code="MALFORMED_RECORD",
            context=self.to_dict(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "record_type": self.record_type,
            "record_id": self.record_id,
            "reason": self.reason,
        }


class InconsistentSnapshotError(InternalError):
    """
    Raised when records in one evaluation pass contradict each other
    (mixed tables or dates, dangling ids). Indicates a programming error in the
    caller or the engine, never a user error.
    """

    def __init__(self, reason: str, details: Optional[Dict[str, Any]] = None):
        self.reason = reason
        self.details = details or {}
        super().__init__(
            detail=f"Inconsistent occupancy snapshot: {reason}",
            error_code="INCONSISTENT_SNAPSHOT",
            context=self.details,
        )

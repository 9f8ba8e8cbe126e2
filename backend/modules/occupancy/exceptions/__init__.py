from .occupancy_exceptions import MalformedRecordError, InconsistentSnapshotError

__all__ = ["MalformedRecordError", "InconsistentSnapshotError"]

"""Exception hierarchy for backup-history formatting.

Record-level problems (``InvalidRecordError``) are recovered by the
formatter: the record is skipped and the batch continues.  Configuration
problems (``ConfigurationConflictError``) fail the whole call before any
record is touched.
"""


class BackupHistoryError(Exception):
    """Base exception for all backup-history errors."""

    pass


class InvalidRecordError(BackupHistoryError):
    """Raised when a history record is malformed or misses a required field."""

    pass


class ConfigurationConflictError(BackupHistoryError):
    """Raised when formatter options cannot be applied unambiguously."""

    pass


class ProfileNotFoundError(BackupHistoryError):
    """Raised when a requested formatter profile is not configured."""

    pass

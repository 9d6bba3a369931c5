"""Backup-history records and the restore-preparation formatter.

Usage:
    from backup_history.history import BackupHistoryRecord, FileEntry
    from backup_history.history import format_backup_history
"""

from backup_history.history.formatter import format_backup_history, format_record
from backup_history.history.models import (
    BackupHistoryRecord,
    FileEntry,
    FormatReport,
    RecordOutcome,
    RecordStatus,
)

__all__ = [
    "BackupHistoryRecord",
    "FileEntry",
    "FormatReport",
    "RecordOutcome",
    "RecordStatus",
    "format_backup_history",
    "format_record",
]

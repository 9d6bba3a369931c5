"""backup-history: reshape SQL Server backup history before a restore.

Renames target databases, relocates data/log/FileStream files and rebases
backup folders on backup-history records, producing input for a restore
planner.

Usage:
    from backup_history import BackupHistoryRecord, FormatOptions
    from backup_history import format_backup_history, load_format_config
"""

__version__ = "0.1.0"

# Records and formatter
from backup_history.history.formatter import format_backup_history, format_record
from backup_history.history.models import (
    BackupHistoryRecord,
    FileEntry,
    FormatReport,
    RecordOutcome,
    RecordStatus,
)

# Config
from backup_history.config.loader import load_format_config, resolve_options
from backup_history.config.models import (
    FormatOptions,
    MappedRename,
    NoRename,
    SingleRename,
)

# Errors
from backup_history.errors import (
    BackupHistoryError,
    ConfigurationConflictError,
    InvalidRecordError,
    ProfileNotFoundError,
)

__all__ = [
    # Records and formatter
    "BackupHistoryRecord",
    "FileEntry",
    "FormatReport",
    "RecordOutcome",
    "RecordStatus",
    "format_backup_history",
    "format_record",
    # Config
    "load_format_config",
    "resolve_options",
    "FormatOptions",
    "NoRename",
    "SingleRename",
    "MappedRename",
    # Errors
    "BackupHistoryError",
    "InvalidRecordError",
    "ConfigurationConflictError",
    "ProfileNotFoundError",
]

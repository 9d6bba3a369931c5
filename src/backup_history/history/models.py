"""Pydantic models for backup-history records and formatter results.

Records mirror what the history collector emits: PascalCase keys such as
``Database``, ``FileList`` and ``PhysicalName``.  Both the PascalCase
aliases and the snake_case field names are accepted on input; output is
serialised with the aliases.  Collector fields that the formatter does
not touch (LSNs, timestamps, server name, ...) are kept as extras.

Usage:
    from backup_history.history.models import BackupHistoryRecord, FileEntry

    record = BackupHistoryRecord(
        database="Sales",
        type="Full",
        file_list=[FileEntry(logical_name="Sales_Data",
                             physical_name="E:\\data\\Sales.mdf", type="D")],
        full_name=["C:\\backups\\Sales_full.bak"],
    )
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ============================================================================
# History Records
# ============================================================================


class FileClass(str, Enum):
    """Physical file classification used to pick a target directory."""

    DATA = "data"
    LOG = "log"
    FILESTREAM = "filestream"


_FILE_CLASS_CODES: dict[str, FileClass] = {
    "D": FileClass.DATA,
    "DATA": FileClass.DATA,
    "ROWS": FileClass.DATA,
    "L": FileClass.LOG,
    "LOG": FileClass.LOG,
    "S": FileClass.FILESTREAM,
    "FILESTREAM": FileClass.FILESTREAM,
}


class FileEntry(BaseModel):
    """One physical file contained in a backup."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    logical_name: str | None = Field(default=None, alias="LogicalName")
    physical_name: str | None = Field(default=None, alias="PhysicalName")
    type: str | None = Field(default=None, alias="Type")
    file_type: str | None = Field(default=None, alias="FileType")

    @property
    def file_class(self) -> FileClass | None:
        """Data/Log/FileStream classification, ``None`` when unrecognised."""
        code = self.type or self.file_type
        if not code:
            return None
        return _FILE_CLASS_CODES.get(code.strip().upper())


class BackupHistoryRecord(BaseModel):
    """One backup event (full, differential or log) and the files it wrote.

    The ``original_*`` fields are snapshots: ``None`` until
    ``ensure_snapshot()`` first runs, never overwritten afterwards.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    database: str | None = Field(default=None, alias="Database")
    original_database: str | None = Field(default=None, alias="OriginalDatabase")
    type: str | None = Field(default=None, alias="Type")
    file_list: list[FileEntry] = Field(default_factory=list, alias="FileList")
    original_file_list: list[FileEntry] | None = Field(
        default=None, alias="OriginalFileList"
    )
    full_name: list[str] = Field(default_factory=list, alias="FullName")
    original_full_name: list[str] | None = Field(
        default=None, alias="OriginalFullName"
    )
    is_verified: bool = Field(default=False, alias="IsVerified")

    @field_validator("full_name", "original_full_name", mode="before")
    @classmethod
    def _single_path_as_list(cls, value):
        # The collector emits a bare string for single-file backup sets
        if isinstance(value, str):
            return [value]
        return value

    @property
    def has_snapshot(self) -> bool:
        """Whether the snapshot fields have been captured."""
        return self.original_database is not None

    def ensure_snapshot(self) -> None:
        """Capture the snapshot fields if this record has not been seen yet.

        Each field is only filled while still ``None``; running this again
        (or running the formatter twice) leaves existing snapshots alone.
        """
        if self.original_database is None:
            self.original_database = self.database
            self.is_verified = False
        if self.original_file_list is None:
            self.original_file_list = [entry.model_copy() for entry in self.file_list]
        if self.original_full_name is None:
            self.original_full_name = list(self.full_name)

    def restore_target(self) -> tuple:
        """Fields the formatter rewrites, for change detection."""
        return (
            self.database,
            self.type,
            tuple(entry.physical_name for entry in self.file_list),
            tuple(self.full_name),
        )


# ============================================================================
# Formatter Results
# ============================================================================


class RecordStatus(str, Enum):
    """Outcome of formatting a single record."""

    TRANSFORMED = "transformed"
    SKIPPED = "skipped"
    UNCHANGED = "unchanged"


class RecordOutcome(BaseModel):
    """Per-record status reported alongside the formatted output."""

    index: int
    status: RecordStatus
    database: str | None = None
    record: BackupHistoryRecord | None = None
    error: str | None = None


class FormatReport(BaseModel):
    """Result of a formatter run over a batch of records."""

    outcomes: list[RecordOutcome] = Field(default_factory=list)

    @property
    def records(self) -> list[BackupHistoryRecord]:
        """Emitted records in input order (skipped records excluded)."""
        return [
            outcome.record
            for outcome in self.outcomes
            if outcome.status != RecordStatus.SKIPPED and outcome.record is not None
        ]

    @property
    def skipped(self) -> list[RecordOutcome]:
        """Outcomes of records that were rejected as invalid."""
        return [o for o in self.outcomes if o.status == RecordStatus.SKIPPED]

    def count(self, status: RecordStatus) -> int:
        """Number of records that ended with *status*."""
        return sum(1 for o in self.outcomes if o.status == status)

    def format_report(self) -> str:
        """Format the batch summary as a human-readable report."""
        lines = [
            f"Formatted {len(self.outcomes)} record(s): "
            f"{self.count(RecordStatus.TRANSFORMED)} transformed, "
            f"{self.count(RecordStatus.UNCHANGED)} unchanged, "
            f"{self.count(RecordStatus.SKIPPED)} skipped"
        ]

        for outcome in self.skipped:
            lines.append(f"  - record {outcome.index}: {outcome.error}")

        return "\n".join(lines)

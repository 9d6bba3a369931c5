"""Backup-history formatter: reshape history records ahead of a restore.

Renames target databases, relocates database files, and rebases backup
folders on a batch of ``BackupHistoryRecord`` objects.  Pure logic -- no
file, network or database I/O.  Records are mutated in place and returned
in a ``FormatReport`` with a per-record status.

Usage:
    from backup_history.config.models import FormatOptions
    from backup_history.history.formatter import format_backup_history

    options = FormatOptions(
        database_name_prefix="Dev_",
        data_file_directory="F:\\newdata",
    )
    report = format_backup_history(records, options)
    for record in report.records:
        ...
"""

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from backup_history.config.models import FormatOptions
from backup_history.errors import InvalidRecordError
from backup_history.history.models import (
    BackupHistoryRecord,
    FileEntry,
    FormatReport,
    RecordOutcome,
    RecordStatus,
)
from backup_history.history.paths import is_url, join_path, split_directory, split_path

logger = logging.getLogger(__name__)

# Short backup type codes -> labels used by restore planning
BACKUP_TYPE_LABELS: dict[str, str] = {
    "Full": "Database",
    "Differential": "Database Differential",
    "Log": "Transaction Log",
}


def format_backup_history(
    records: Iterable[BackupHistoryRecord | Mapping[str, Any]],
    options: FormatOptions | None = None,
) -> FormatReport:
    """Apply renaming and relocation rules to a batch of history records.

    Each record is handled independently.  A record that fails validation
    is logged and reported as ``skipped``; the rest of the batch carries on.
    Options are validated when ``FormatOptions`` is built, so configuration
    conflicts surface before this function sees any record.

    Args:
        records: History records, either models or raw mappings with the
            collector's PascalCase keys.  Mappings are parsed one by one.
        options: Renaming/relocation rules.  Defaults to no changes beyond
            snapshotting and type normalisation.

    Returns:
        ``FormatReport`` with one ``RecordOutcome`` per input item, in
        input order.  ``report.records`` is the emitted sequence.

    Example:
        report = format_backup_history(
            records,
            FormatOptions(replace_database_name={"Sales": "Retail"}),
        )
        print(report.format_report())
    """
    options = options or FormatOptions()
    report = FormatReport()

    for index, item in enumerate(records):
        try:
            record = _as_record(item)
            before = record.restore_target()
            format_record(record, options)
        except InvalidRecordError as e:
            logger.warning("Skipping backup history record %d: %s", index, e)
            report.outcomes.append(
                RecordOutcome(
                    index=index,
                    status=RecordStatus.SKIPPED,
                    database=_database_of(item),
                    record=item if isinstance(item, BackupHistoryRecord) else None,
                    error=str(e),
                )
            )
            continue

        if record.restore_target() == before:
            status = RecordStatus.UNCHANGED
        else:
            status = RecordStatus.TRANSFORMED

        logger.debug("Record %d (%s): %s", index, record.database, status.value)
        report.outcomes.append(
            RecordOutcome(
                index=index,
                status=status,
                database=record.database,
                record=record,
            )
        )

    return report


def format_record(record: BackupHistoryRecord, options: FormatOptions) -> BackupHistoryRecord:
    """Format a single history record in place.

    Steps run strictly in order because later steps read fields written by
    earlier ones (the file rename needs the resolved database name).

    Raises:
        InvalidRecordError: If the record lacks a database name or a file
            entry lacks its logical or physical name.  The record is not
            modified in that case.
    """
    _validate_record(record)

    record.ensure_snapshot()

    if record.type is not None:
        record.type = BACKUP_TYPE_LABELS.get(record.type, record.type)

    record.database = (
        options.database_name_prefix
        + options.replace_database_name.resolve(record.database)
    )

    for entry in record.file_list:
        entry.physical_name = _relocate_file(entry, record, options)

    if options.rebase_backup_folder and record.full_name and not is_url(record.full_name[0]):
        record.full_name = [
            join_path(
                options.rebase_backup_folder,
                split_directory(path)[1],
                options.path_separator,
            )
            for path in record.full_name
        ]

    return record


def _relocate_file(
    entry: FileEntry, record: BackupHistoryRecord, options: FormatOptions
) -> str:
    """Compute the new physical name of one file entry."""
    if entry.logical_name in options.file_mapping:
        return options.file_mapping[entry.logical_name]

    physical_name = entry.physical_name
    if options.replace_db_name_in_file:
        physical_name = replace_database_name(
            physical_name, record.original_database, record.database
        )

    directory, base_name, extension = split_path(physical_name)
    target_directory = options.directory_for(entry.file_class) or directory
    file_name = (
        f"{options.database_file_prefix}{base_name}"
        f"{options.database_file_suffix}{extension}"
    )
    return join_path(target_directory, file_name, options.path_separator)


def replace_database_name(path: str, old_name: str | None, new_name: str) -> str:
    """Replace every occurrence of *old_name* in *path*, ignoring case.

    Examples:
        >>> replace_database_name("E:\\\\data\\\\sales_log.ldf", "Sales", "Retail")
        'E:\\\\data\\\\Retail_log.ldf'
    """
    if not old_name:
        return path
    return re.sub(re.escape(old_name), lambda _: new_name, path, flags=re.IGNORECASE)


def _validate_record(record: BackupHistoryRecord) -> None:
    if not record.database:
        raise InvalidRecordError("record has no Database name")

    for position, entry in enumerate(record.file_list):
        if not entry.logical_name:
            raise InvalidRecordError(
                f"FileList entry {position} of '{record.database}' has no LogicalName"
            )
        if not entry.physical_name:
            raise InvalidRecordError(
                f"FileList entry '{entry.logical_name}' of '{record.database}' "
                f"has no PhysicalName"
            )


def _as_record(item: BackupHistoryRecord | Mapping[str, Any]) -> BackupHistoryRecord:
    if isinstance(item, BackupHistoryRecord):
        return item
    if not isinstance(item, Mapping):
        raise InvalidRecordError(
            f"expected a history record object, got {type(item).__name__}"
        )
    try:
        return BackupHistoryRecord.model_validate(dict(item))
    except ValidationError as e:
        raise InvalidRecordError(
            f"malformed history record ({e.error_count()} error(s)): "
            f"{e.errors()[0]['msg']}"
        ) from e


def _database_of(item: Any) -> str | None:
    if isinstance(item, BackupHistoryRecord):
        return item.database
    if isinstance(item, Mapping):
        value = item.get("Database", item.get("database"))
        return value if isinstance(value, str) else None
    return None

"""Pydantic models for formatter options and TOML profiles."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from backup_history.errors import ConfigurationConflictError
from backup_history.history.models import FileClass
from backup_history.history.paths import split_directory, strip_trailing_separators


# ============================================================================
# Database Rename Rules
# ============================================================================


class NoRename(BaseModel):
    """Keep every record's database name."""

    kind: Literal["none"] = "none"

    def resolve(self, database: str) -> str:
        return database


class SingleRename(BaseModel):
    """Rename every record to the same database name.

    An empty name keeps each record's database name.
    """

    kind: Literal["single"] = "single"
    name: str

    def resolve(self, database: str) -> str:
        return self.name or database


class MappedRename(BaseModel):
    """Rename only the databases listed in ``names`` (old -> new)."""

    kind: Literal["mapped"] = "mapped"
    names: dict[str, str] = Field(default_factory=dict)

    def resolve(self, database: str) -> str:
        return self.names.get(database, database)


RenameRule = Annotated[
    NoRename | SingleRename | MappedRename, Field(discriminator="kind")
]

_RENAME_KINDS = {"none", "single", "mapped"}


def rename_rule(value: str | dict[str, str] | None) -> NoRename | SingleRename | MappedRename:
    """Build a rename rule from a loosely typed value.

    A non-empty string renames every record, a mapping renames only its
    keys, and ``None`` or an empty value keeps names as they are.
    """
    if not value:
        return NoRename()
    if isinstance(value, str):
        return SingleRename(name=value)
    return MappedRename(names=dict(value))


# ============================================================================
# Formatter Options
# ============================================================================


_DIRECTORY_FIELDS = (
    "data_file_directory",
    "log_file_directory",
    "file_stream_directory",
    "rebase_backup_folder",
)


class FormatOptions(BaseModel):
    """Renaming and relocation rules applied by the formatter.

    Construction is the one normalisation step: trailing separators are
    stripped from the directory options and conflicting combinations raise
    ``ConfigurationConflictError`` before any record is processed.
    """

    replace_database_name: RenameRule = Field(default_factory=NoRename)
    database_name_prefix: str = ""
    data_file_directory: str = ""
    log_file_directory: str = ""
    file_stream_directory: str = ""
    database_file_prefix: str = ""
    database_file_suffix: str = ""
    replace_db_name_in_file: bool = False
    file_mapping: dict[str, str] = Field(default_factory=dict)
    rebase_backup_folder: str = ""
    path_separator: str = "\\"

    @field_validator("replace_database_name", mode="before")
    @classmethod
    def _coerce_rename(cls, value):
        if isinstance(value, (NoRename, SingleRename, MappedRename)):
            return value
        if isinstance(value, dict) and value.get("kind") in _RENAME_KINDS:
            return value
        return rename_rule(value)

    @field_validator("path_separator")
    @classmethod
    def _single_character(cls, value: str) -> str:
        if len(value) != 1:
            raise ValueError(
                f"path_separator must be a single character, got {value!r}"
            )
        return value

    @model_validator(mode="after")
    def _normalise(self) -> "FormatOptions":
        for name in _DIRECTORY_FIELDS:
            value = getattr(self, name)
            if value:
                setattr(self, name, strip_trailing_separators(value))

        self._check_conflicts()
        return self

    def _check_conflicts(self) -> None:
        if self.file_mapping and self.has_directory_overrides:
            bare = sorted(
                logical
                for logical, target in self.file_mapping.items()
                if not split_directory(target)[0]
            )
            if bare:
                raise ConfigurationConflictError(
                    "file_mapping targets without a directory are ambiguous "
                    f"when directory overrides are set: {', '.join(bare)}"
                )

        seen: dict[str, str] = {}
        for logical, target in self.file_mapping.items():
            key = target.casefold()
            if key in seen:
                raise ConfigurationConflictError(
                    f"file_mapping sends '{seen[key]}' and '{logical}' "
                    f"to the same file: {target}"
                )
            seen[key] = logical

        if isinstance(self.replace_database_name, MappedRename):
            targets: dict[str, tuple[str, str]] = {}
            for old, new in self.replace_database_name.names.items():
                key = new.casefold()
                if key in targets:
                    first_old, first_new = targets[key]
                    raise ConfigurationConflictError(
                        f"replace_database_name maps '{first_old}' -> '{first_new}' "
                        f"and '{old}' -> '{new}' onto the same database"
                    )
                targets[key] = (old, new)

    @property
    def has_directory_overrides(self) -> bool:
        """Whether any per-type directory override is set."""
        return bool(
            self.data_file_directory
            or self.log_file_directory
            or self.file_stream_directory
        )

    def directory_for(self, file_class: FileClass | None) -> str:
        """Target directory for a file class, or ``""`` to keep the original.

        Precedence: explicit per-type override, then ``data_file_directory``
        (Log and FileStream only), then the file's own directory.
        """
        if file_class == FileClass.DATA:
            return self.data_file_directory
        if file_class == FileClass.LOG:
            return self.log_file_directory or self.data_file_directory
        if file_class == FileClass.FILESTREAM:
            return self.file_stream_directory or self.data_file_directory
        return ""


# ============================================================================
# TOML Profiles
# ============================================================================


class FormatterProfile(FormatOptions):
    """Named set of formatter options from backup-history.toml."""

    description: str = ""

    def to_options(self) -> FormatOptions:
        """Drop the profile metadata and return plain formatter options."""
        return FormatOptions(**options_values(self))


class FormatterConfig(BaseModel):
    """Complete formatter configuration from backup-history.toml."""

    profiles: dict[str, FormatterProfile] = Field(default_factory=dict)
    default_profile: str | None = None


def options_values(options: FormatOptions) -> dict:
    """Field values of *options*, keeping rename rules as model instances."""
    return {name: getattr(options, name) for name in FormatOptions.model_fields}

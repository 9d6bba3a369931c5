"""CLI for reshaping backup history ahead of a restore.

Reads backup-history records as JSON (for example the output of the
history collector piped through ``ConvertTo-Json``), applies renaming and
relocation rules, and writes the reshaped records as JSON.  Status output
goes to stderr so stdout can feed the restore planner.

Usage:
    backup-history format history.json --database-name-prefix Dev_
        --data-file-directory F:/newdata --path-separator /
    backup-history format - --rename Sales=Retail --rename HR=People < history.json
    backup-history format history.json --rebase-backup-folder 'D:\\newloc' -o out.json
    backup-history --profile dev format history.json
    backup-history profiles

Commands:
    format    - Rewrite database names, file paths and backup folders
    profiles  - List formatter profiles from backup-history.toml
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from backup_history.config.loader import (
    DEFAULT_CONFIG_FILE,
    get_active_profile_name,
    load_format_config,
    resolve_options,
)
from backup_history.config.models import FormatOptions, FormatterConfig, options_values
from backup_history.errors import ConfigurationConflictError, ProfileNotFoundError
from backup_history.history.formatter import format_backup_history
from backup_history.history.models import FormatReport, RecordStatus

console = Console(stderr=True)

_STATUS_STYLES = {
    RecordStatus.TRANSFORMED: "green",
    RecordStatus.UNCHANGED: "dim",
    RecordStatus.SKIPPED: "red",
}

# CLI flag dest -> FormatOptions field, for plain string options
_STRING_OPTIONS = (
    "database_name_prefix",
    "data_file_directory",
    "log_file_directory",
    "file_stream_directory",
    "database_file_prefix",
    "database_file_suffix",
    "rebase_backup_folder",
    "path_separator",
)


# ============================================================================
# Argument helpers
# ============================================================================


def _key_value(text: str) -> tuple[str, str]:
    """Parse a ``KEY=VALUE`` argument."""
    key, sep, value = text.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got '{text}'")
    return key, value


def _load_config(args: argparse.Namespace) -> FormatterConfig | None:
    """Load the TOML config named by ``--config``, or the default if present.

    Raises:
        FileNotFoundError: If ``--config`` names a missing file
    """
    if args.config:
        return load_format_config(Path(args.config))

    default_path = Path.cwd() / DEFAULT_CONFIG_FILE
    if default_path.exists():
        return load_format_config(default_path)
    return None


def _build_options(
    args: argparse.Namespace, config: FormatterConfig | None
) -> FormatOptions:
    """Profile options with command line flags layered on top.

    Raises:
        ProfileNotFoundError: If the requested profile is not configured
        ConfigurationConflictError: If the combined options conflict
        pydantic.ValidationError: If an option value is invalid
    """
    env_prefix = getattr(args, "env_prefix", "")

    if config is None and args.profile:
        raise ProfileNotFoundError(
            f"Profile '{args.profile}' requested but no {DEFAULT_CONFIG_FILE} found"
        )

    base = resolve_options(config, profile_name=args.profile, env_prefix=env_prefix)
    values = options_values(base)

    if args.replace_database_name is not None:
        values["replace_database_name"] = args.replace_database_name
    elif args.rename:
        values["replace_database_name"] = dict(args.rename)

    for name in _STRING_OPTIONS:
        value = getattr(args, name)
        if value is not None:
            values[name] = value

    if args.replace_db_name_in_file:
        values["replace_db_name_in_file"] = True

    if args.file_map:
        values["file_mapping"] = {**base.file_mapping, **dict(args.file_map)}

    return FormatOptions(**values)


def _read_records(source: str) -> list:
    """Read a JSON array (or single object) of history records.

    Raises:
        OSError: If the input file cannot be read
        ValueError: If the input is not JSON or not an array/object
    """
    if source == "-":
        text = sys.stdin.read()
    else:
        # PowerShell writes a BOM with -Encoding UTF8
        text = Path(source).read_text(encoding="utf-8-sig")

    data = json.loads(text)
    if isinstance(data, dict):
        return [data]
    if not isinstance(data, list):
        raise ValueError("expected a JSON array or object of history records")
    return data


def _write_records(report: FormatReport, output: str | None) -> None:
    payload = json.dumps(
        [record.model_dump(mode="json", by_alias=True) for record in report.records],
        indent=2,
    )
    if output:
        Path(output).write_text(payload + "\n", encoding="utf-8")
    else:
        sys.stdout.write(payload + "\n")


def _print_report(report: FormatReport) -> None:
    table = Table(title="Backup History", show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Database")
    table.add_column("Status")
    table.add_column("Detail")

    for outcome in report.outcomes:
        style = _STATUS_STYLES[outcome.status]
        table.add_row(
            str(outcome.index),
            escape(outcome.database or "-"),
            f"[{style}]{outcome.status.value}[/{style}]",
            escape(outcome.error or ""),
        )

    console.print(table)


# ============================================================================
# Command implementations
# ============================================================================


def cmd_format(args: argparse.Namespace) -> int:
    """Format backup history records.

    Args:
        args: Parsed CLI arguments.

    Returns:
        0 on success (skipped records included), 1 on configuration or
        input errors.
    """
    try:
        config = _load_config(args)
        options = _build_options(args, config)
    except (FileNotFoundError, ProfileNotFoundError, ConfigurationConflictError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        return 1
    except ValueError as e:
        # pydantic ValidationError and TOMLDecodeError
        console.print(f"[bold red]Invalid option:[/bold red] {escape(str(e))}")
        return 1

    try:
        records = _read_records(args.input)
    except (OSError, ValueError) as e:
        console.print(f"[bold red]Error reading history:[/bold red] {escape(str(e))}")
        return 1

    report = format_backup_history(records, options)

    for outcome in report.skipped:
        console.print(
            f"[bold red]x[/bold red] Record {outcome.index} skipped: {escape(outcome.error or '')}"
        )

    _write_records(report, args.output)

    if not args.quiet:
        _print_report(report)
        console.print(f"[dim]{report.format_report().splitlines()[0]}[/dim]")

    return 0


def cmd_profiles(args: argparse.Namespace) -> int:
    """List formatter profiles from the TOML config.

    Args:
        args: Parsed CLI arguments.

    Returns:
        0 on success, 1 if the config is missing or invalid.
    """
    try:
        config = _load_config(args)
    except (FileNotFoundError, ConfigurationConflictError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1

    if config is None:
        console.print(f"[yellow]No {DEFAULT_CONFIG_FILE} found.[/yellow]")
        return 1

    try:
        current = get_active_profile_name(
            config, args.profile, getattr(args, "env_prefix", "")
        )
    except ProfileNotFoundError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1

    table = Table(
        title="Formatter Profiles", show_header=True, header_style="bold"
    )
    table.add_column("", width=2)
    table.add_column("Profile")
    table.add_column("Database prefix")
    table.add_column("Data directory")
    table.add_column("Description")

    for name, profile in config.profiles.items():
        marker = "[bold green]*[/bold green]" if name == current else " "
        table.add_row(
            marker,
            f"[bold cyan]{name}[/bold cyan]" if name == current else name,
            profile.database_name_prefix,
            profile.data_file_directory,
            profile.description,
        )

    console.print(table)

    if current:
        console.print("\n[bold green]*[/bold green] = active profile")

    return 0


# ============================================================================
# Main entry point
# ============================================================================


def _configure_logging(verbose: bool) -> None:
    # Skipped records are already reported per line; only show logs on --verbose
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def main() -> int:
    """Main CLI entry point.

    Parses command line arguments and dispatches to appropriate handler.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = argparse.ArgumentParser(
        prog="backup-history",
        description="Reshape SQL Server backup history ahead of a restore",
    )

    parser.add_argument(
        "--config",
        help=f"Path to formatter TOML config (default: ./{DEFAULT_CONFIG_FILE})",
    )
    parser.add_argument(
        "--profile",
        help="Formatter profile to apply from the config",
    )
    parser.add_argument(
        "--env-prefix",
        default="",
        help=(
            "Prefix for environment variable lookup "
            "(e.g., --env-prefix APP_ reads APP_BACKUP_HISTORY_PROFILE)"
        ),
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log per-record details",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # format command
    p_format = subparsers.add_parser(
        "format",
        help="Rewrite database names, file paths and backup folders",
    )
    p_format.add_argument(
        "input",
        help="JSON file of backup history records, or - for stdin",
    )
    p_format.add_argument(
        "--output",
        "-o",
        help="Write formatted records to this file instead of stdout",
    )
    rename_group = p_format.add_mutually_exclusive_group()
    rename_group.add_argument(
        "--replace-database-name",
        help="Restore every record under this database name",
    )
    rename_group.add_argument(
        "--rename",
        action="append",
        type=_key_value,
        metavar="OLD=NEW",
        help="Rename database OLD to NEW (repeatable)",
    )
    p_format.add_argument(
        "--database-name-prefix",
        help="Prefix added to every database name",
    )
    p_format.add_argument(
        "--data-file-directory",
        help="Directory for data files (fallback for log and FileStream files)",
    )
    p_format.add_argument(
        "--log-file-directory",
        help="Directory for log files",
    )
    p_format.add_argument(
        "--filestream-directory",
        dest="file_stream_directory",
        help="Directory for FileStream files",
    )
    p_format.add_argument(
        "--database-file-prefix",
        help="Prefix added to every database file name",
    )
    p_format.add_argument(
        "--database-file-suffix",
        help="Suffix added to every database file name (before the extension)",
    )
    p_format.add_argument(
        "--replace-db-name-in-file",
        action="store_true",
        help="Replace the original database name inside file paths",
    )
    p_format.add_argument(
        "--file-map",
        action="append",
        type=_key_value,
        metavar="LOGICAL=PATH",
        help="Restore logical file LOGICAL to exactly PATH (repeatable)",
    )
    p_format.add_argument(
        "--rebase-backup-folder",
        help="Directory the backup files have been moved to",
    )
    p_format.add_argument(
        "--path-separator",
        help="Separator used when joining paths (default: backslash)",
    )
    p_format.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Do not print the status table",
    )
    p_format.set_defaults(func=cmd_format)

    # profiles command
    p_profiles = subparsers.add_parser(
        "profiles",
        help="List formatter profiles",
    )
    p_profiles.set_defaults(func=cmd_profiles)

    args = parser.parse_args()
    _configure_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())

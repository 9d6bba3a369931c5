"""Formatter configuration: options, TOML profiles, and loading.

Usage:
    >>> from backup_history.config import FormatOptions, load_format_config
"""

from backup_history.config.loader import load_format_config, resolve_options
from backup_history.config.models import (
    FormatOptions,
    FormatterConfig,
    FormatterProfile,
    MappedRename,
    NoRename,
    SingleRename,
)

__all__ = [
    "load_format_config",
    "resolve_options",
    "FormatOptions",
    "FormatterConfig",
    "FormatterProfile",
    "NoRename",
    "SingleRename",
    "MappedRename",
]

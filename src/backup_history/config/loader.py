"""TOML loading and profile resolution for formatter options."""

import os
import tomllib
from pathlib import Path

from backup_history.config.models import FormatOptions, FormatterConfig, FormatterProfile
from backup_history.errors import ProfileNotFoundError

DEFAULT_CONFIG_FILE = "backup-history.toml"
PROFILE_ENV_VAR = "BACKUP_HISTORY_PROFILE"


def load_format_config(config_path: Path | None = None) -> FormatterConfig:
    """Load formatter profiles from a TOML file.

    Keys under ``[defaults]`` are merged beneath every ``[profiles.<name>]``
    table; profile keys win.

    Args:
        config_path: Path to the TOML file (default: ./backup-history.toml)

    Returns:
        FormatterConfig with all profiles

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigurationConflictError: If a profile holds conflicting options
        pydantic.ValidationError: If a profile holds invalid values
    """
    if config_path is None:
        config_path = Path.cwd() / DEFAULT_CONFIG_FILE

    if not config_path.exists():
        raise FileNotFoundError(
            f"Formatter config not found: {config_path}\n"
            f"Create {DEFAULT_CONFIG_FILE} with [profiles.<name>] tables."
        )

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    defaults = data.get("defaults", {})

    # Parse profiles
    profiles = {}
    for name, profile_data in data.get("profiles", {}).items():
        profiles[name] = FormatterProfile(**{**defaults, **profile_data})

    # Parse formatter settings
    formatter_settings = data.get("formatter", {})

    return FormatterConfig(
        profiles=profiles,
        default_profile=formatter_settings.get("default_profile"),
    )


def get_active_profile_name(
    config: FormatterConfig,
    profile_name: str | None = None,
    env_prefix: str = "",
) -> str | None:
    """Pick the profile to use.

    Priority:
    1. Explicit *profile_name* (``--profile``)
    2. ``{env_prefix}BACKUP_HISTORY_PROFILE`` env var
    3. ``[formatter].default_profile`` from the config
    4. ``None`` (built-in defaults)

    Raises:
        ProfileNotFoundError: If the chosen profile is not in the config
    """
    name = (
        profile_name
        or os.environ.get(f"{env_prefix}{PROFILE_ENV_VAR}")
        or config.default_profile
    )
    if name is None:
        return None

    if name not in config.profiles:
        available = ", ".join(config.profiles) or "(none)"
        raise ProfileNotFoundError(
            f"Profile '{name}' not found in formatter config.\n"
            f"Available profiles: {available}"
        )
    return name


def resolve_options(
    config: FormatterConfig | None,
    profile_name: str | None = None,
    env_prefix: str = "",
) -> FormatOptions:
    """Formatter options for the active profile, or defaults without one."""
    if config is None:
        return FormatOptions()

    name = get_active_profile_name(config, profile_name, env_prefix)
    if name is None:
        return FormatOptions()
    return config.profiles[name].to_options()

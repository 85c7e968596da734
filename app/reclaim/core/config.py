"""User configuration for reclaim.

Settings are stored in ~/.config/reclaim/config.toml. A missing file
means defaults; a malformed one is reported through ConfigError so the
CLI can show a readable message.
"""

import os
import tempfile
import tomllib
from pathlib import Path
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from reclaim.core.paths import ensure_config_dir, get_config_path
from reclaim.models.cleanup import CleanupOptions
from reclaim.models.errors import ReclaimError
from reclaim.models.file_record import SAFE_AUTOMATED_CATEGORIES, CleanupCategory

MIN_AGE_THRESHOLD_DAYS = 30
MAX_AGE_THRESHOLD_DAYS = 1095
LARGE_FILE_THRESHOLD_BYTES = 100 * 1024 * 1024


class CleanupDefaults(BaseModel):
    """Default cleanup options applied when the CLI gets no flag.

    Attributes:
        create_backup: Archive files before deleting them.
        move_to_trash: Move files to the trash instead of removing them.
        skip_in_use_files: Leave files that are held open untouched.
    """

    model_config = ConfigDict(extra="forbid")

    create_backup: Annotated[bool, Field(description="Archive before deleting")] = False
    move_to_trash: Annotated[bool, Field(description="Use the trash")] = True
    skip_in_use_files: Annotated[bool, Field(description="Skip open files")] = True

    def to_options(self, **overrides: Any) -> CleanupOptions:
        """Build CleanupOptions, letting explicit non-None overrides win."""
        values = self.model_dump()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return CleanupOptions(**values)


class ReclaimConfig(BaseModel):
    """Configuration for reclaim.

    Attributes:
        scan_paths: Directories scanned when none are given on the command line.
        age_threshold_days: Default age filter (30-1095 days).
        large_file_threshold_bytes: Minimum size reported as a large file.
        backup_retention_days: Age after which backups are pruned.
        backup_timeout_seconds: Time limit for creating one archive (None = unlimited).
        cleanup: Default cleanup options.
        automated_categories: Categories an unattended run may clean.
    """

    model_config = ConfigDict(extra="forbid")

    scan_paths: Annotated[
        list[str],
        Field(description="Directories scanned by default"),
    ] = Field(default_factory=lambda: [str(Path.home())])
    age_threshold_days: Annotated[
        int,
        Field(
            ge=MIN_AGE_THRESHOLD_DAYS,
            le=MAX_AGE_THRESHOLD_DAYS,
            description="Age threshold in days (30-1095)",
        ),
    ] = 365
    large_file_threshold_bytes: Annotated[
        int,
        Field(ge=0, description="Large file threshold in bytes"),
    ] = LARGE_FILE_THRESHOLD_BYTES
    backup_retention_days: Annotated[
        int,
        Field(ge=0, description="Backups older than this are pruned"),
    ] = 30
    backup_timeout_seconds: Annotated[
        float | None,
        Field(gt=0, description="Archive creation time limit"),
    ] = None
    cleanup: Annotated[
        CleanupDefaults,
        Field(description="Default cleanup options"),
    ] = Field(default_factory=CleanupDefaults)
    automated_categories: Annotated[
        list[CleanupCategory],
        Field(description="Categories allowed in unattended runs"),
    ] = Field(default_factory=lambda: sorted(SAFE_AUTOMATED_CATEGORIES, key=lambda c: c.value))

    @field_validator("scan_paths")
    @classmethod
    def expand_scan_paths(cls, v: list[str]) -> list[str]:
        """Expand ~ in configured scan paths."""
        return [os.path.expanduser(p) for p in v]

    def validated_automated_categories(self) -> set[CleanupCategory]:
        """Return the configured automated categories restricted to the safe subset.

        Large, old, download and duplicate files always need interactive
        confirmation, so they are dropped here even when configured.
        """
        return set(self.automated_categories) & SAFE_AUTOMATED_CATEGORIES


class ConfigError(ReclaimError):
    """Base exception for configuration errors."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> ReclaimConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated ReclaimConfig. Defaults when the file does not exist.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the file cannot be read or fails validation.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        return ReclaimConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return ReclaimConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config: {e}") from e


def save_config(config: ReclaimConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written to a temporary sibling first and moved into
    place, so a crash never leaves a truncated config behind.

    Args:
        config: Configuration to save.
        path: Target path. If None, uses the default config path.

    Returns:
        Path where the config was written.

    Raises:
        ConfigError: If the file cannot be written.
    """
    if path is None:
        ensure_config_dir()
        config_path = get_config_path()
    else:
        config_path = path
        config_path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(mode="json", exclude_none=True)

    try:
        with tempfile.NamedTemporaryFile(
            mode="wb", dir=config_path.parent, suffix=".tmp", delete=False
        ) as tmp:
            tomli_w.dump(data, tmp)
            tmp_path = Path(tmp.name)
        os.replace(tmp_path, config_path)
    except OSError as e:
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path

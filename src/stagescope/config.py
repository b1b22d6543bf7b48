"""Configuration and environment handling for Stagescope."""

import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

__all__ = [
    "ViewerSettings",
    "get_data_dir",
    "get_settings",
    "reset_settings",
    "is_dev_mode",
]


HostGrouping = Literal["grouped", "contiguous"]


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class ViewerSettings(BaseModel):
    """Settings for series building and the dashboard.

    All settings can be customized via environment variables.
    """

    system_namespace: str = Field(
        default="sigar",
        description="Top-level metric namespace holding per-host system resource metrics",
    )

    lead_in_ms: int = Field(
        default=1000,
        ge=0,
        description="Offset in milliseconds of the backfilled point before the earliest marker",
    )

    cumulative_patterns: list[str] = Field(
        default_factory=lambda: ["sigar.network.*", "sigar.disk.*"],
        description="Glob patterns of metric paths whose backfilled value is zero",
    )

    host_grouping: HostGrouping = Field(
        default="grouped",
        description="'grouped' keys series by canonical host; 'contiguous' closes a host once another one is seen",
    )

    live_history_limit: int = Field(
        default=0,
        ge=0,
        description="Maximum number of samples kept by a live session (0 means unbounded)",
    )

    max_jsonl_lines: int = Field(
        default=1_000_000,  # 1M lines
        description="Maximum number of lines read from one sample file",
    )

    max_apps: int = Field(
        default=100,
        description="Maximum number of applications listed by the catalog",
    )

    @classmethod
    def from_env(cls) -> "ViewerSettings":
        """Create ViewerSettings from environment variables.

        Environment variables:
        - STAGESCOPE_SYSTEM_NAMESPACE: System resource namespace (default: sigar)
        - STAGESCOPE_LEAD_IN_MS: Backfill lead-in offset in ms (default: 1000)
        - STAGESCOPE_CUMULATIVE_PATTERNS: Comma-separated glob patterns (default: sigar.network.*,sigar.disk.*)
        - STAGESCOPE_HOST_GROUPING: grouped or contiguous (default: grouped)
        - STAGESCOPE_LIVE_HISTORY_LIMIT: Live history size, 0 for unbounded (default: 0)
        - STAGESCOPE_MAX_JSONL_LINES: Maximum lines per sample file (default: 1M)
        - STAGESCOPE_MAX_APPS: Maximum listed applications (default: 100)
        """
        fields = cls.model_fields
        kwargs: dict = {
            "system_namespace": os.environ.get("STAGESCOPE_SYSTEM_NAMESPACE", fields["system_namespace"].default),
            "lead_in_ms": int(os.environ.get("STAGESCOPE_LEAD_IN_MS", fields["lead_in_ms"].default)),
            "host_grouping": os.environ.get("STAGESCOPE_HOST_GROUPING", fields["host_grouping"].default),
            "live_history_limit": int(os.environ.get("STAGESCOPE_LIVE_HISTORY_LIMIT", fields["live_history_limit"].default)),
            "max_jsonl_lines": int(os.environ.get("STAGESCOPE_MAX_JSONL_LINES", fields["max_jsonl_lines"].default)),
            "max_apps": int(os.environ.get("STAGESCOPE_MAX_APPS", fields["max_apps"].default)),
        }
        patterns = os.environ.get("STAGESCOPE_CUMULATIVE_PATTERNS")
        if patterns is not None:
            kwargs["cumulative_patterns"] = _split_csv(patterns)
        return cls(**kwargs)


# Global settings instance
_settings: ViewerSettings | None = None


def get_settings() -> ViewerSettings:
    """Get viewer settings.

    Returns cached instance if already initialized.
    """
    global _settings
    if _settings is None:
        _settings = ViewerSettings.from_env()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None


# Forbidden system directories that cannot be used as data directories
_FORBIDDEN_PATHS = frozenset(["/", "/etc", "/sys", "/dev", "/bin", "/sbin", "/usr", "/var", "/boot", "/proc"])


def _validate_data_dir(data_path: Path) -> None:
    """Validate that data directory is not a dangerous system path.

    Raises:
        ValueError: If path is a forbidden system directory
    """
    resolved_str = str(data_path.resolve())

    for forbidden in _FORBIDDEN_PATHS:
        if resolved_str == forbidden or resolved_str.rstrip("/") == forbidden:
            raise ValueError(f"STAGESCOPE_DATA_DIR cannot be set to system directory: {forbidden}")


def get_data_dir() -> Path:
    """Get the directory holding collector output.

    Resolution priority:
    1. STAGESCOPE_DATA_DIR environment variable (if set)
    2. XDG_DATA_HOME/stagescope (if XDG_DATA_HOME is set)
    3. ~/.local/share/stagescope (fallback)

    Raises:
        ValueError: If STAGESCOPE_DATA_DIR points to a system directory
    """
    data_dir = os.environ.get("STAGESCOPE_DATA_DIR")
    if data_dir:
        data_path = Path(data_dir).expanduser().resolve()
        _validate_data_dir(data_path)
        return data_path

    xdg_data_home = os.environ.get("XDG_DATA_HOME")
    if xdg_data_home:
        return Path(xdg_data_home).expanduser() / "stagescope"

    return Path.home() / ".local" / "share" / "stagescope"


def is_dev_mode() -> bool:
    """Check if running in development mode.

    Returns:
        True if STAGESCOPE_DEV_MODE is set to "1", False otherwise.
    """
    return os.environ.get("STAGESCOPE_DEV_MODE") == "1"

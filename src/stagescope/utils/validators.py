"""Security validators for Stagescope.

This module provides common validation functions to prevent security vulnerabilities
like path traversal attacks.
"""

import os
import re
from pathlib import Path

__all__ = ["validate_safe_path", "validate_name", "validate_app_name"]

# Only allow alphanumeric characters, underscores, and hyphens
_SAFE_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")


def validate_safe_path(path: Path, base_dir: Path) -> None:
    """Validate that the resolved path is within the base directory.

    Args:
        path: Path to validate
        base_dir: Base directory that should contain the path

    Raises:
        ValueError: If path is outside base_dir, is a symlink, or path resolution fails

    Examples:
        >>> base = Path("/data")
        >>> validate_safe_path(Path("/data/app-1/node_0.json"), base)  # OK
        >>> validate_safe_path(Path("/data/../etc/passwd"), base)  # Raises ValueError
    """
    try:
        resolved_path = path.resolve()
        resolved_base = base_dir.resolve()

        if path.is_symlink():
            raise ValueError(f"Path is a symlink: {path}")

        if not str(resolved_path).startswith(str(resolved_base) + os.sep) and resolved_path != resolved_base:
            raise ValueError(f"Path {path} is outside base directory {base_dir}")
    except (ValueError, OSError) as e:
        if isinstance(e, ValueError) and str(e).startswith("Path"):
            raise
        raise ValueError(f"Invalid path: {path}") from e


def validate_name(name: str, name_type: str = "name") -> None:
    """Validate a name to prevent path traversal attacks.

    Args:
        name: Name from user input
        name_type: Type of name (for error messages), e.g., "application"

    Raises:
        ValueError: If name is empty or contains invalid characters
    """
    if not name or not _SAFE_NAME_PATTERN.match(name):
        raise ValueError(f"Invalid {name_type}. Only alphanumeric characters, underscores, and hyphens are allowed.")


def validate_app_name(app: str) -> None:
    """Validate an application id.

    Examples:
        >>> validate_app_name("app-20170524120000-0001")  # OK
        >>> validate_app_name("../etc")  # Raises ValueError
    """
    validate_name(app, "application id")

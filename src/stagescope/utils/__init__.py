"""Utility modules for stagescope."""

from stagescope.utils.validators import validate_app_name, validate_name, validate_safe_path

__all__ = [
    "validate_app_name",
    "validate_name",
    "validate_safe_path",
]

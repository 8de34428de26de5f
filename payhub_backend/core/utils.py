"""Common utilities for the PayHub backend."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def sanitize_string(value: str | None, max_length: int = 255) -> str | None:
    """Strip whitespace, map blanks to None and truncate."""
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if len(value) > max_length:
        return value[:max_length]
    return value


def split_file_name(original_name: str) -> tuple[str, str]:
    """Split an uploaded file name into (display name, extension)."""
    name, _, extension = original_name.rpartition(".")
    if not name:
        return extension, ""
    return name, extension.lower()

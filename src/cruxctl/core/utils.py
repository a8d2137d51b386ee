"""Common utilities for cruxctl."""

import os
import re
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

PREFIX_PATTERN = re.compile(r"^[a-z0-9-]+$")


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Generate a new entity id."""
    return str(uuid.uuid4())


def is_uuid(value: str) -> bool:
    """Check whether a string is a UUID in canonical lower-case form.

    Ids are file names in the state directory, so other spellings of the same
    UUID would not be found.
    """
    try:
        return str(uuid.UUID(value)) == value
    except (ValueError, AttributeError, TypeError):
        return False


def is_valid_prefix(prefix: str) -> bool:
    """Check a container prefix: lowercase letters, digits and dashes."""
    return bool(prefix) and PREFIX_PATTERN.match(prefix) is not None


def parse_datetime(value: str | None) -> datetime | None:
    """Parse an ISO timestamp, returning None for empty values."""
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def get_config_dir() -> Path:
    """Get the cruxctl configuration directory."""
    return Path(os.environ.get("CRUXCTL_CONFIG_DIR", "~/.cruxctl")).expanduser()


def merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge on top

    Returns:
        Merged dictionary
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


def parse_key_value_pairs(pairs: list[str] | tuple[str, ...]) -> dict[str, str]:
    """Parse KEY=VALUE pairs from a list of strings.

    Entries without ``=`` are ignored.
    """
    result = {}
    for pair in pairs:
        if "=" in pair:
            key, value = pair.split("=", 1)
            result[key.strip()] = value.strip()
    return result


def parse_image(image: str) -> tuple[str, str]:
    """Split ``name[:tag]`` into name and tag (default ``latest``).

    A colon inside a registry host (``host:5000/app``) is not a tag separator.
    """
    name, sep, tag = image.rpartition(":")
    if not sep or "/" in tag:
        return image, "latest"
    return name, tag

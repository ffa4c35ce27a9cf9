"""Shared helpers for configuration loading and validation.

Errors carry the full key path of the offending value, e.g.
``queries[0].query.AND[1].TERM.boost``.
"""

from __future__ import annotations

from typing import Any, Mapping


def get_section(raw: Mapping[str, Any], key: str, *, required: bool) -> Mapping[str, Any]:
    """Return a mapping section from root config.

    Args:
        raw: Root configuration mapping.
        key: Section name.
        required: Whether the section must exist.

    Returns:
        Section mapping, or empty mapping for optional missing sections.

    Raises:
        ValueError: If section is required but missing.
        TypeError: If section is not a mapping.
    """
    section = raw.get(key)
    if section is None:
        if required:
            raise ValueError(f"Missing required config: {key}")
        return {}
    return expect_mapping(section, key)


def get_required_value(section: Mapping[str, Any], field: str, config_key: str) -> Any:
    """Return a required field value from a section.

    Raises:
        ValueError: If field is missing.
    """
    if field not in section:
        raise ValueError(f"Missing required config: {config_key}")
    return section[field]


def expect_mapping(value: Any, config_key: str) -> Mapping[str, Any]:
    """Validate and return a mapping value."""
    if not isinstance(value, Mapping):
        raise TypeError(f"{config_key} must be an object")
    return value


def expect_list(value: Any, config_key: str) -> list[Any]:
    """Validate and return a list value."""
    if not isinstance(value, list):
        raise TypeError(f"{config_key} must be a list")
    return value


def expect_str(value: Any, config_key: str) -> str:
    """Validate and return string value."""
    if not isinstance(value, str):
        raise TypeError(f"{config_key} must be a string")
    return value


def expect_bool(value: Any, config_key: str) -> bool:
    """Validate and return boolean value."""
    if not isinstance(value, bool):
        raise TypeError(f"{config_key} must be a boolean")
    return value


def expect_int(value: Any, config_key: str) -> int:
    """Validate and return integer value (excluding bool)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{config_key} must be an integer")
    return value


def expect_number(value: Any, config_key: str) -> int | float:
    """Validate a numeric value, keeping ints as ints (boosts render as ``^3``, not ``^3.0``)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{config_key} must be a number")
    return value


def expect_str_or_str_list(value: Any, config_key: str) -> str | list[str]:
    """Validate a string, or a list of strings."""
    if isinstance(value, str):
        return value
    items = expect_list(value, config_key)
    for idx, item in enumerate(items):
        expect_str(item, f"{config_key}[{idx}]")
    return items

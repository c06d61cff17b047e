"""
Layout options loader: supports YAML files, dicts, LayoutOptions instances, and defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

DEFAULT_VERTICAL_SPACING = 120.0
DEFAULT_HORIZONTAL_OFFSET = 200.0


@dataclass(frozen=True)
class LayoutOptions:
    """Editor settings used when a branch is inserted."""

    vertical_spacing: float = DEFAULT_VERTICAL_SPACING  # Gap between transferred steps
    horizontal_offset: float = DEFAULT_HORIZONTAL_OFFSET  # Arm 1 column, relative to the branch node
    arm_spacing: float = 350.0  # Horizontal distance between the two arms
    keep_affected_edges: bool = False  # Keep edges entering the moved steps from outside


def default_layout_options() -> LayoutOptions:
    return LayoutOptions()


def load_layout_options(
    source: LayoutOptions | str | Path | dict | None,
) -> LayoutOptions:
    """
    Load LayoutOptions from various sources.

    Args:
        source: Can be:
            - LayoutOptions instance: returned as-is
            - str or Path: treated as YAML file path
            - dict: constructed directly from dict keys
            - None: returns default_layout_options()

    Raises:
        FileNotFoundError: If source is a file path that doesn't exist
        ValueError: If the YAML is invalid or a field has the wrong type
        TypeError: If source is of an unsupported type
    """
    if source is None:
        return default_layout_options()

    if isinstance(source, LayoutOptions):
        return source

    if isinstance(source, (str, Path)):
        return _load_from_yaml_file(source)

    if isinstance(source, dict):
        return _load_from_dict(source)

    raise TypeError(
        f"Unsupported source type for load_layout_options: {type(source).__name__}"
    )


def _load_from_yaml_file(path: str | Path) -> LayoutOptions:
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Layout file not found: {file_path}")

    try:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse YAML file {file_path}: {e}") from e

    if data is None:
        raise ValueError(f"YAML file {file_path} is empty")
    if not isinstance(data, dict):
        raise ValueError(f"YAML file {file_path}: expected dict, got {type(data).__name__}")

    # Either a nested "layout:" section or fields at the root
    if "layout" in data:
        section = data["layout"]
        if not isinstance(section, dict):
            raise ValueError(f"YAML file {file_path}: 'layout' must be a dict")
        return _load_from_dict(section)
    return _load_from_dict(data)


def _number(data: dict, key: str, default: float) -> float:
    value = data.get(key, default)
    # bool is an int subclass but never a valid spacing
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Layout '{key}' must be a number, got {type(value).__name__}")
    return float(value)


def _load_from_dict(data: dict) -> LayoutOptions:
    defaults = default_layout_options()
    vertical_spacing = _number(data, "vertical_spacing", defaults.vertical_spacing)
    horizontal_offset = _number(data, "horizontal_offset", defaults.horizontal_offset)
    arm_spacing = _number(data, "arm_spacing", defaults.arm_spacing)
    if vertical_spacing < 0:
        raise ValueError("Layout 'vertical_spacing' must not be negative")

    keep_affected_edges = data.get("keep_affected_edges", defaults.keep_affected_edges)
    if not isinstance(keep_affected_edges, bool):
        raise ValueError(
            f"Layout 'keep_affected_edges' must be a boolean, "
            f"got {type(keep_affected_edges).__name__}"
        )

    return LayoutOptions(
        vertical_spacing=vertical_spacing,
        horizontal_offset=horizontal_offset,
        arm_spacing=arm_spacing,
        keep_affected_edges=keep_affected_edges,
    )

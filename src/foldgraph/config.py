"""Rendering configuration loading.

Resolution order (highest first):
1. CLI flags (applied by the caller via ``with_overrides``)
2. Environment variables (FOLDGRAPH_FORMAT, FOLDGRAPH_RANKDIR,
   FOLDGRAPH_MAX_LABEL_LENGTH)
3. ``render:`` section of a foldgraph.yaml file
4. Defaults
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from foldgraph.observability.logging import get_logger

log = get_logger(__name__)

DEFAULT_CONFIG_FILENAME = "foldgraph.yaml"
OUTPUT_FORMATS = ("table", "elements", "dot", "mermaid")
RANKDIRS = ("LR", "RL", "TB", "BT")

DEFAULT_FORMAT = "table"
DEFAULT_RANKDIR = "LR"
DEFAULT_MAX_LABEL_LENGTH = 40


@dataclass(frozen=True)
class RenderConfig:
    """How the active view is printed or exported.

    Attributes:
        format: One of ``table``, ``elements``, ``dot``, ``mermaid``.
        rankdir: Layout direction for DOT output.
        max_label_length: Labels longer than this are truncated with "...".
    """

    format: str = DEFAULT_FORMAT
    rankdir: str = DEFAULT_RANKDIR
    max_label_length: int = DEFAULT_MAX_LABEL_LENGTH

    def __post_init__(self) -> None:
        if self.format not in OUTPUT_FORMATS:
            raise ValueError(
                f"Unknown output format '{self.format}'. Expected one of: {', '.join(OUTPUT_FORMATS)}"
            )
        if self.rankdir not in RANKDIRS:
            raise ValueError(
                f"Unknown rankdir '{self.rankdir}'. Expected one of: {', '.join(RANKDIRS)}"
            )
        if self.max_label_length < 4:
            raise ValueError("max_label_length must be at least 4")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RenderConfig:
        """Create config from the ``render:`` mapping of a config file."""
        return cls(
            format=str(data.get("format", DEFAULT_FORMAT)),
            rankdir=str(data.get("rankdir", DEFAULT_RANKDIR)).upper(),
            max_label_length=int(data.get("max_label_length", DEFAULT_MAX_LABEL_LENGTH)),
        )

    def with_env(self) -> RenderConfig:
        """Apply FOLDGRAPH_* environment overrides."""
        updates: dict[str, Any] = {}
        if fmt := os.getenv("FOLDGRAPH_FORMAT"):
            updates["format"] = fmt
        if rankdir := os.getenv("FOLDGRAPH_RANKDIR"):
            updates["rankdir"] = rankdir.upper()
        if max_len := os.getenv("FOLDGRAPH_MAX_LABEL_LENGTH"):
            try:
                updates["max_label_length"] = int(max_len)
            except ValueError:
                raise ValueError(
                    f"FOLDGRAPH_MAX_LABEL_LENGTH must be an integer, got '{max_len}'"
                ) from None
        return replace(self, **updates) if updates else self

    def with_overrides(self, *, format: str | None = None) -> RenderConfig:
        """Apply explicit overrides (e.g. CLI flags); None means keep."""
        if format is None:
            return self
        return replace(self, format=format)


def load_config(config_path: Path | None = None) -> RenderConfig:
    """Load rendering configuration.

    Args:
        config_path: Explicit config file. Defaults to ./foldgraph.yaml when
            it exists.

    Returns:
        Resolved RenderConfig, environment overrides applied.

    Raises:
        FileNotFoundError: If an explicit ``config_path`` doesn't exist.
        ValueError: If the file is unreadable or malformed, or a configured
            value is invalid.
    """
    if config_path is None:
        candidate = Path.cwd() / DEFAULT_CONFIG_FILENAME
        config_path = candidate if candidate.exists() else None
    elif not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    config = RenderConfig()
    if config_path is not None:
        yaml = YAML(typ="safe")
        try:
            with config_path.open("r", encoding="utf-8") as f:
                data = yaml.load(f)
        except (OSError, YAMLError) as e:
            raise ValueError(f"Invalid config {config_path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Invalid config {config_path}: top level must be a mapping")
        render_data = data.get("render") or {}
        if not isinstance(render_data, dict):
            raise ValueError(f"Invalid config {config_path}: 'render' must be a mapping")
        config = RenderConfig.from_dict(render_data)
        log.debug("config_loaded", path=str(config_path))

    return config.with_env()

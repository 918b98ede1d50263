"""Three-tier read tool configuration loader.

defaults → user (~/.octo-run/read.json) → project (.octo-run/read.json) → overrides
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from octo.config.schema import ReadToolConfig

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".octo-run"
CONFIG_FILE_NAME = "read.json"


class ReadConfigLoader:
    """Merge read.json files from the user and project tiers."""

    def __init__(self, workspace_root: str | Path | None = None):
        self.workspace_root = Path(workspace_root).resolve() if workspace_root else None

    def load(self, overrides: dict[str, Any] | None = None) -> ReadToolConfig:
        user = self._load_json(Path.home() / CONFIG_DIR_NAME / CONFIG_FILE_NAME)
        project = self._load_project()

        merged = self._deep_merge(user, project, overrides or {})
        merged = self._expand_env_vars(merged)

        return ReadToolConfig(**merged)

    def _load_project(self) -> dict[str, Any]:
        if not self.workspace_root:
            return {}
        return self._load_json(self.workspace_root / CONFIG_DIR_NAME / CONFIG_FILE_NAME)

    @staticmethod
    def _load_json(path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable config %s: %s", path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: top level must be an object", path)
            return {}
        return data

    def _deep_merge(self, *dicts: dict[str, Any]) -> dict[str, Any]:
        """Deep merge multiple dicts. Later dicts override earlier ones."""
        result: dict[str, Any] = {}
        for d in dicts:
            for key, value in d.items():
                if key not in result:
                    result[key] = value
                elif value is None:
                    continue
                elif isinstance(value, dict) and isinstance(result[key], dict):
                    result[key] = self._deep_merge(result[key], value)
                else:
                    result[key] = value
        return result

    def _expand_env_vars(self, obj: Any) -> Any:
        """Recursively expand ${VAR} and ~ in string values."""
        if isinstance(obj, dict):
            return {k: self._expand_env_vars(v) for k, v in obj.items()}
        if isinstance(obj, list):
            return [self._expand_env_vars(v) for v in obj]
        if isinstance(obj, str):
            return os.path.expandvars(os.path.expanduser(obj))
        return obj


def load_read_config(
    workspace_root: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> ReadToolConfig:
    """Convenience wrapper around ReadConfigLoader."""
    return ReadConfigLoader(workspace_root).load(overrides)

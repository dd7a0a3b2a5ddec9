"""JSON configuration: shipped defaults overlaid with a per-user file."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "config/default_config.json"
USER_CONFIG_FILE = "config/user_config.json"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


class ConfigManager:
    def __init__(
        self,
        default_path: str = DEFAULT_CONFIG_FILE,
        user_path: str = USER_CONFIG_FILE,
    ) -> None:
        self._runtime_root = Path(__file__).resolve().parents[1]
        self.default_path = self._resolve(default_path)
        self.user_path = self._resolve(user_path)
        self._config = self._load()

    def _resolve(self, raw_path: str | Path) -> Path:
        path = Path(raw_path).expanduser()
        return path if path.is_absolute() else self._runtime_root / path

    def get_runtime_root(self) -> Path:
        return self._runtime_root

    @staticmethod
    def _read(path: Path) -> dict[str, Any]:
        if not path.is_file():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable config file %s: %s", path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring config file %s: top level is not an object", path)
            return {}
        return data

    def _load(self) -> dict[str, Any]:
        config = deep_merge(self._read(self.default_path), self._read(self.user_path))
        logger.debug("Loaded config from %s and %s", self.default_path, self.user_path)
        return config

    def reload(self) -> dict[str, Any]:
        self._config = self._load()
        return self._config

    def all(self) -> dict[str, Any]:
        return self._config

    def get(self, path: str, default: Any = None) -> Any:
        """Dotted lookup, e.g. ``get("exam.time_limit", 90)``."""
        node: Any = self._config
        for key in path.split("."):
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return node

    def update(self, partial: dict[str, Any]) -> dict[str, Any]:
        """Merge ``partial`` into the live config and persist it to the user file only."""
        self._config = deep_merge(self._config, partial)
        stored = deep_merge(self._read(self.user_path), partial)
        self.user_path.parent.mkdir(parents=True, exist_ok=True)
        self.user_path.write_text(
            json.dumps(stored, ensure_ascii=False, indent=2) + "\n",
            encoding="utf-8",
        )
        logger.info("Saved user config to %s", self.user_path)
        return self._config

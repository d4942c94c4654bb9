"""
settings.py

JSON-backed settings for the C++ workflow.  Values not present in the file
fall back to ``default_settings()``; unknown keys in the file are ignored.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

log = logging.getLogger("scc.settings")

# Settings are stored under settings/ next to the modules unless overridden
SETTINGS_DIR = Path(__file__).parent / "settings"
DEFAULT_SETTINGS_FILE = SETTINGS_DIR / "cp.json"


class Settings:
    """Persisted key/value settings with declared defaults."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else DEFAULT_SETTINGS_FILE
        self._cache: Dict[str, Any] = {}
        self._loaded = False

    @staticmethod
    def default_settings() -> Dict[str, Any]:
        return {
            "compiler": "g++",
            "compiler_flags": ["-std=c++17", "-Wall", "-Wextra", "-O2"],
            "exec_name": "a.out",
            "source_ext": ".cpp",
            "input_ext": ".in",
            "output_ext": ".out",
            "float_ratio": 0.8,
            "terminal_title": "C++ Build & Run Output",
            "keymap_new_project": "<Control-Alt-n>",
            "keymap_run": "<F5>",
            "snippet_paths": [],
        }

    def get(self, key: str) -> Any:
        """Read a setting value (falls back to default)."""
        if not self._loaded:
            self._cache = self._load()
            self._loaded = True
        defaults = self.default_settings()
        if key not in defaults:
            raise KeyError(f"unknown setting: {key}")
        return self._cache.get(key, defaults[key])

    def set(self, key: str, value: Any) -> None:
        """Persist a setting value."""
        if key not in self.default_settings():
            raise KeyError(f"unknown setting: {key}")
        if not self._loaded:
            self._cache = self._load()
            self._loaded = True
        self._cache[key] = value
        self._save()

    def as_dict(self) -> Dict[str, Any]:
        return {key: self.get(key) for key in self.default_settings()}

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            log.warning("Ignoring unreadable settings file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            log.warning("Ignoring settings file %s: top level is not an object", self.path)
            return {}
        known = self.default_settings()
        unknown = sorted(set(data) - set(known))
        if unknown:
            log.debug("Unknown settings ignored: %s", ", ".join(unknown))
        return {k: v for k, v in data.items() if k in known}

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._cache, indent=2), encoding="utf-8")
        log.debug("Saved settings to %s", self.path)

"""Colour theme preference persisted in a local key-value store."""

import json
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

from loguru import logger

THEMES = ("dark", "light")
DEFAULT_THEME = "dark"
DEFAULT_THEME_KEY = "theme"


class KeyValueStore(Protocol):
    """Local persistence of string values."""

    def get_string(self, key: str) -> Optional[str]:
        ...

    def set_string(self, key: str, value: str) -> None:
        ...


class MemoryStore:
    """KeyValueStore kept in a dict."""

    def __init__(self, values: Optional[Dict[str, str]] = None):
        self.values: Dict[str, str] = dict(values or {})

    def get_string(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set_string(self, key: str, value: str) -> None:
        self.values[key] = value


class JsonFileStore:
    """KeyValueStore backed by a small JSON object on disk."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable preferences file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def get_string(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set_string(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)


class ThemePreference:
    """
    The "dark"/"light" toggle.

    Read once from the store when created (falling back to the default for
    missing or unknown values) and written back on every change.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str = DEFAULT_THEME_KEY,
        default: str = DEFAULT_THEME,
    ):
        self.store = store
        self.key = key
        stored = store.get_string(key)
        self._value = stored if stored in THEMES else default
        self.store.set_string(self.key, self._value)

    @property
    def value(self) -> str:
        return self._value

    def set(self, theme: str) -> None:
        if theme not in THEMES:
            raise ValueError(f"Unknown theme {theme!r}; expected one of {THEMES}")
        self._value = theme
        self.store.set_string(self.key, theme)

    def toggle(self) -> str:
        self.set("light" if self._value == "dark" else "dark")
        return self._value

    @property
    def toggle_label(self) -> str:
        return "🌞 Light" if self._value == "dark" else "🌙 Dark"

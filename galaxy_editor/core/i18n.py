"""Internationalization — JSON catalogs for menu labels and history descriptions.

Catalogs live in ``translations/{lang}.json`` (nested JSON, flattened to
dot-notation keys). A regional language such as ``de_AT`` falls back to
``de``, then to the English default passed at the call site.

History descriptions are user-facing text only: undo/redo decide how to
restore selection from typed entry metadata, so a translated label
never changes history behavior.

Usage:
    from galaxy_editor.core.i18n import t, tf, TranslationManager

    TranslationManager.init("de")
    action.setText(t("menu.undo", "Undo"))
    label = tf("history.created_system", "Created System {name}", name="Alpha")
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable

logger = logging.getLogger(__name__)

_TRANSLATIONS_DIR = Path(__file__).parent.parent.parent / "translations"


class TranslationManager:
    """Process-wide catalog holder with change listeners."""

    _instance: TranslationManager | None = None
    _listeners: list[Callable[[], None]] = []

    def __init__(self, lang: str = "en", directory: Path | None = None):
        self._directory = directory or _TRANSLATIONS_DIR
        self.lang = lang
        self._strings: dict[str, str] = {}
        self._load(lang)

    def _load(self, lang: str) -> None:
        """Merge catalogs from the most generic to the most specific locale."""
        self._strings = {}
        for code in _fallback_chain(lang):
            path = self._directory / f"{code}.json"
            if not path.exists():
                continue
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError):
                logger.exception("Failed to load translation catalog %s", path)
                continue
            self._strings.update(_flatten(data))

    def get(self, key: str, default: str = "") -> str:
        return self._strings.get(key, default)

    def available_languages(self) -> list[str]:
        """Language codes with a catalog file, sorted."""
        if not self._directory.is_dir():
            return []
        return sorted(p.stem for p in self._directory.glob("*.json"))

    def set_language(self, lang: str) -> None:
        """Switch language and notify all listeners."""
        self.lang = lang
        self._load(lang)
        for cb in list(self._listeners):
            cb()

    @classmethod
    def instance(cls) -> TranslationManager:
        if cls._instance is None:
            cls._instance = cls("en")
        return cls._instance

    @classmethod
    def init(cls, lang: str = "en", directory: Path | None = None) -> TranslationManager:
        cls._instance = cls(lang, directory)
        return cls._instance

    @classmethod
    def on_language_changed(cls, callback: Callable[[], None]) -> None:
        cls._listeners.append(callback)

    @classmethod
    def remove_listener(cls, callback: Callable[[], None]) -> None:
        if callback in cls._listeners:
            cls._listeners.remove(callback)

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton and listeners (for testing)."""
        cls._instance = None
        cls._listeners.clear()


def _fallback_chain(lang: str) -> list[str]:
    """``"de_AT"`` -> ``["de", "de_AT"]`` (generic first)."""
    lang = (lang or "").replace("-", "_")
    if not lang:
        return []
    base = lang.split("_", 1)[0]
    return [base] if base == lang else [base, lang]


def _flatten(d: dict, prefix: str = "") -> dict[str, str]:
    """Flatten nested dict to dot-notation keys.

    {"menu": {"undo": "Rückgängig"}} -> {"menu.undo": "Rückgängig"}
    """
    result: dict[str, str] = {}
    for k, v in d.items():
        key = f"{prefix}.{k}" if prefix else k
        if isinstance(v, dict):
            result.update(_flatten(v, key))
        else:
            result[key] = str(v)
    return result


def t(key: str, default: str = "") -> str:
    """Translate *key*, falling back to the English *default*."""
    return TranslationManager.instance().get(key, default)


def tf(key: str, default: str, **kwargs: Any) -> str:
    """Translate and ``str.format`` in one step.

    A catalog entry with a broken placeholder falls back to *default*.
    """
    template = t(key, default)
    try:
        return template.format(**kwargs)
    except (KeyError, IndexError, ValueError):
        logger.warning("Bad placeholder in translation %r: %r", key, template)
        return default.format(**kwargs)

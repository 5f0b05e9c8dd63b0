"""Locale text for Jarvis replies, error messages and panel strings.

Locale files live in jarvis/locales/<code>.yaml. Keys are dot paths
("responses.greeting"); a value may be a string template, a list of
alternative phrasings, or a nested section.
"""

import os
from typing import Any, Dict, List

import yaml

from jarvis import PACKAGE_DIR
from jarvis.utils import jarvis_log

LOCALES_DIR = os.path.join(PACKAGE_DIR, "locales")

_translations: Dict[str, dict] = {}
_locale: str = "en"
_fallback: str = "en"


def available_locales() -> List[str]:
    """Locale codes with a YAML file on disk."""
    if not os.path.isdir(LOCALES_DIR):
        return []
    return sorted(name[:-5] for name in os.listdir(LOCALES_DIR) if name.endswith(".yaml"))


def _load_locale(code: str) -> dict:
    path = os.path.join(LOCALES_DIR, f"{code}.yaml")
    if not os.path.exists(path):
        jarvis_log("I18N", f"No locale file for '{code}'", level="WARNING")
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def setup(locale: str = "en", fallback: str = "en") -> None:
    """Load the active locale and its fallback, replacing anything loaded before."""
    global _locale, _fallback, _translations
    _locale = locale
    _fallback = fallback
    _translations = {code: _load_locale(code) for code in dict.fromkeys((fallback, locale))}


def _lookup(key: str) -> Any:
    for code in (_locale, _fallback):
        node: Any = _translations.get(code, {})
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                node = None
                break
            node = node[part]
        if node is not None:
            return node
    return None


def t(key: str, **kwargs) -> Any:
    """Text for a dot-path key in the active locale.

    Missing keys fall back to the fallback locale, then to the key itself.
    String values are formatted with ``kwargs``; lists and sections are
    returned unchanged.
    """
    if not _translations:
        setup(_locale, _fallback)
    value = _lookup(key)
    if value is None:
        return key
    if isinstance(value, str) and kwargs:
        return value.format(**kwargs)
    return value


def t_list(key: str) -> List[str]:
    """Alternative phrasings for a key; a single string becomes a one-item list."""
    value = t(key)
    if isinstance(value, list):
        return [str(v) for v in value]
    if value == key:
        return []
    return [str(value)]


def get_locale() -> str:
    return _locale


def get_fallback() -> str:
    return _fallback

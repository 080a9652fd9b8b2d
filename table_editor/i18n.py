"""
Translation lookup for user-facing labels.

Labels are looked up in the active catalogue and returned unchanged when no
translation exists.
"""

import logging
from pathlib import Path
from typing import Dict, Optional

import yaml

logger = logging.getLogger(__name__)

_translations: Dict[str, str] = {}


def i18n(label: str) -> str:
    """Translate a label with the active catalogue."""
    return _translations.get(label, label)


def set_translations(translations: Optional[Dict[str, str]]) -> None:
    """Replace the active catalogue. None clears it."""
    global _translations
    _translations = {str(k): str(v) for k, v in (translations or {}).items()}
    logger.debug(f"Loaded {len(_translations)} translations")


def load_translations(path: Optional[Path]) -> Dict[str, str]:
    """
    Load a YAML mapping of label -> translation and make it active.

    A missing or unreadable file leaves the identity translation in place.
    """
    if path is None:
        set_translations(None)
        return {}

    path = Path(path)
    if not path.exists():
        logger.warning(f"Translations file not found: {path}")
        set_translations(None)
        return {}

    try:
        with open(path, 'r', encoding='utf-8') as f:
            translations = yaml.safe_load(f) or {}
    except (yaml.YAMLError, OSError) as e:
        logger.error(f"Failed to load translations from {path}: {e}")
        set_translations(None)
        return {}

    if not isinstance(translations, dict):
        logger.error(f"Translations file is not a mapping: {path}")
        set_translations(None)
        return {}

    set_translations(translations)
    return dict(_translations)

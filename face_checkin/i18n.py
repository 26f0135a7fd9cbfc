"""
Internationalisation (i18n) module for the face check-in client.
Supports Indonesian (id), English (en) and Vietnamese (vi).
"""

import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, Optional

from . import config

logger = logging.getLogger(__name__)

TRANSLATIONS_DIR = os.path.join(os.path.dirname(__file__), 'translations')
SUPPORTED_LANGUAGES = ['id', 'en', 'vi']
DEFAULT_LANGUAGE = config.APP_LANGUAGE if config.APP_LANGUAGE in SUPPORTED_LANGUAGES else 'id'

# Date/time layout per language, mirrors how each locale prints a timestamp
TIMESTAMP_FORMATS = {
    'id': '%d/%m/%Y, %H.%M.%S',
    'en': '%m/%d/%Y, %I:%M:%S %p',
    'vi': '%H:%M:%S %d/%m/%Y',
}

# Cache translations so each file is read once
_translations_cache: Dict[str, Dict[str, Any]] = {}
_current_language = DEFAULT_LANGUAGE


def load_translations(lang: str) -> Dict[str, Any]:
    """
    Load the JSON translation file for the given language.

    Args:
        lang: Language code ('id', 'en' or 'vi')

    Returns:
        Dictionary of translated strings
    """
    if lang not in SUPPORTED_LANGUAGES:
        lang = DEFAULT_LANGUAGE

    if lang in _translations_cache:
        return _translations_cache[lang]

    file_path = os.path.join(TRANSLATIONS_DIR, f'{lang}.json')

    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            translations = json.load(f)
            _translations_cache[lang] = translations
            return translations
    except (FileNotFoundError, json.JSONDecodeError) as e:
        logger.error("[i18n] Error loading translations for '%s': %s", lang, e)
        return {}


def get_locale() -> str:
    """Current language code."""
    return _current_language


def set_locale(lang: str) -> bool:
    """
    Switch the current language.

    Returns:
        True on success, False if the language is not supported
    """
    global _current_language
    if lang not in SUPPORTED_LANGUAGES:
        return False
    _current_language = lang
    return True


def translate(key: str, lang: Optional[str] = None, **kwargs) -> str:
    """
    Translate a key into the current (or given) language.
    Nested keys use dots, e.g. 'errors.checkin_failed'.

    Returns:
        The translated string, or the key itself when no translation exists
    """
    translations = load_translations(lang or get_locale())

    value = translations
    try:
        for k in key.split('.'):
            value = value[k]

        if kwargs and isinstance(value, str):
            return value.format(**kwargs)

        return value if isinstance(value, str) else key
    except (KeyError, TypeError):
        return key


def _(key: str, **kwargs) -> str:
    """Shorthand for translate()."""
    return translate(key, **kwargs)


def format_percentage(value: float) -> str:
    """0.87 -> '87.00%'"""
    return f"{float(value) * 100:.2f}%"


def format_timestamp(value: Optional[datetime], lang: Optional[str] = None) -> str:
    if value is None:
        return ''
    layout = TIMESTAMP_FORMATS.get(lang or get_locale(), TIMESTAMP_FORMATS[DEFAULT_LANGUAGE])
    if value.tzinfo is not None:
        value = value.astimezone()
    return value.strftime(layout)


def reload_translations() -> None:
    """
    Reload all translations from disk (clears the cache).
    """
    _translations_cache.clear()
    for lang in SUPPORTED_LANGUAGES:
        load_translations(lang)

"""Settings helpers for meta_search."""

from __future__ import annotations

from typing import Any, Mapping

from django.conf import settings

_SETTINGS_KEY = "META_SEARCH"
_DEFAULT_SEARCH_KEY = "search"
_DEFAULT_SORT_KEY = "meta_sort"


def _config(django_settings: Any = settings) -> Mapping[str, Any]:
    value = getattr(django_settings, _SETTINGS_KEY, {})
    if isinstance(value, Mapping):
        return value
    return {}


def _setting(name: str, default: str, django_settings: Any) -> str:
    value = _config(django_settings).get(
        name, getattr(django_settings, f"{_SETTINGS_KEY}_{name}", None)
    )
    if value is None:
        return default
    value = str(value).strip()
    return value or default


def search_key(django_settings: Any = settings) -> str:
    """Return the default request parameter name that holds search params."""
    return _setting("SEARCH_KEY", _DEFAULT_SEARCH_KEY, django_settings)


def sort_key(django_settings: Any = settings) -> str:
    """Return the search parameter that carries the requested ordering."""
    return _setting("SORT_KEY", _DEFAULT_SORT_KEY, django_settings)

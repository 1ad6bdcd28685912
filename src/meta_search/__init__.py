"""Permission-aware search builder for Django models."""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "search",
    "builder_class_for",
    "SearchBuilder",
    "BuilderState",
    "SearchableMixin",
    "SearchQuerySetMixin",
    "SearchMethod",
    "Where",
    "register_where",
    "attr_searchable",
    "attr_unsearchable",
    "assoc_searchable",
    "assoc_unsearchable",
    "search_methods",
    "search_method",
    "get_registry",
    "method_authorized",
    "attribute_authorized",
    "association_authorized",
    "SearchConfigurationError",
    "BuilderMaterializedError",
]

_MODULE_MAP = {
    "search": ("meta_search.dispatch", "search"),
    "builder_class_for": ("meta_search.dispatch", "builder_class_for"),
    "SearchBuilder": ("meta_search.builder", "SearchBuilder"),
    "BuilderState": ("meta_search.builder", "BuilderState"),
    "SearchableMixin": ("meta_search.searchable", "SearchableMixin"),
    "SearchQuerySetMixin": ("meta_search.searchable", "SearchQuerySetMixin"),
    "SearchMethod": ("meta_search.methods", "SearchMethod"),
    "Where": ("meta_search.wheres", "Where"),
    "register_where": ("meta_search.wheres", "register_where"),
    "attr_searchable": ("meta_search.registry", "attr_searchable"),
    "attr_unsearchable": ("meta_search.registry", "attr_unsearchable"),
    "assoc_searchable": ("meta_search.registry", "assoc_searchable"),
    "assoc_unsearchable": ("meta_search.registry", "assoc_unsearchable"),
    "search_methods": ("meta_search.registry", "search_methods"),
    "search_method": ("meta_search.registry", "search_method"),
    "get_registry": ("meta_search.registry", "get_registry"),
    "method_authorized": ("meta_search.authorization", "method_authorized"),
    "attribute_authorized": ("meta_search.authorization", "attribute_authorized"),
    "association_authorized": ("meta_search.authorization", "association_authorized"),
    "SearchConfigurationError": ("meta_search.errors", "SearchConfigurationError"),
    "BuilderMaterializedError": ("meta_search.errors", "BuilderMaterializedError"),
}


def __getattr__(name: str) -> Any:
    if name not in __all__:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_path, attr = _MODULE_MAP[name]
    module = import_module(module_path)
    value = getattr(module, attr)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + __all__)

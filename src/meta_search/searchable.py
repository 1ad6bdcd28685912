"""Model and queryset integration for meta_search."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Callable

from django.db import models

from meta_search import registry
from meta_search.builder import SearchBuilder
from meta_search.dispatch import search
from meta_search.errors import InvalidSearchConfigError
from meta_search.logging import get_logger

logger = get_logger("searchable")


class SearchableMixin:
    """
    Give a Django model ``search`` and the search declaration class methods.

    Example:
        class Article(SearchableMixin, models.Model):
            title = models.CharField(max_length=200)
            secret = models.CharField(max_length=200)

        Article.attr_unsearchable("secret", condition=lambda ctx: not ctx.get("staff"))
        Article.search({"title_contains": "orm"}, {"staff": request.user.is_staff})
    """

    @classmethod
    def search(
        cls,
        params: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> SearchBuilder:
        return search(cls, params, options)

    metasearch = search

    @classmethod
    def attr_searchable(cls, *names: Any, condition: Any = None) -> None:
        registry.attr_searchable(cls, *names, condition=condition)

    @classmethod
    def attr_unsearchable(cls, *names: Any, condition: Any = None) -> None:
        registry.attr_unsearchable(cls, *names, condition=condition)

    @classmethod
    def assoc_searchable(cls, *names: Any, condition: Any = None) -> None:
        registry.assoc_searchable(cls, *names, condition=condition)

    @classmethod
    def assoc_unsearchable(cls, *names: Any, condition: Any = None) -> None:
        registry.assoc_unsearchable(cls, *names, condition=condition)

    @classmethod
    def search_methods(cls, *names: Any, **options: Any) -> None:
        registry.search_methods(cls, *names, **options)

    search_method = search_methods


class SearchQuerySetMixin:
    """Add ``search`` to a custom ``QuerySet`` so filtered querysets can be searched."""

    def search(
        self,
        params: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> SearchBuilder:
        return search(self, params, options)  # type: ignore[arg-type]


_RULE_DECLARATIONS: dict[str, Callable[..., None]] = {
    "searchable_attributes": registry.attr_searchable,
    "unsearchable_attributes": registry.attr_unsearchable,
    "searchable_associations": registry.assoc_searchable,
    "unsearchable_associations": registry.assoc_unsearchable,
}


def _declare_from_config(
    model: type[models.Model],
    option: str,
    value: Any,
    declare: Callable[..., None],
) -> None:
    if isinstance(value, str):
        declare(model, value)
    elif isinstance(value, Mapping):
        for name, condition in value.items():
            declare(model, name, condition=condition)
    elif isinstance(value, Iterable):
        declare(model, *value)
    else:
        raise InvalidSearchConfigError(model, option)


def _declare_methods_from_config(model: type[models.Model], value: Any) -> None:
    if isinstance(value, str):
        registry.search_methods(model, value)
    elif isinstance(value, Mapping):
        for name, options in value.items():
            registry.search_methods(model, name, **dict(options or {}))
    elif isinstance(value, Iterable):
        registry.search_methods(model, *value)
    else:
        raise InvalidSearchConfigError(model, "search_methods")


def _config_owner(model: type[models.Model]) -> type | None:
    for klass in model.__mro__:
        if "SearchConfig" in klass.__dict__:
            return klass
    return None


def apply_search_config(model: type[models.Model]) -> bool:
    """
    Apply the inner ``SearchConfig`` declarations of ``model``.

    A ``SearchConfig`` reached through a concrete ancestor is not re-applied;
    the child already shares that ancestor's registry. One inherited directly
    from abstract parents is applied to ``model`` and validated against its
    fields.

    Returns:
        bool: True when declarations were applied.

    Raises:
        SearchConfigurationError: If the configuration names unknown columns or associations.
    """
    owner = _config_owner(model)
    if owner is None:
        return False
    if owner is not model:
        for klass in model.__mro__[1:]:
            klass_meta = getattr(klass, "_meta", None)
            if klass_meta is not None and not klass_meta.abstract:
                # a concrete ancestor already carries this config
                return False
            if klass is owner:
                break

    config = owner.__dict__["SearchConfig"]
    for option, declare in _RULE_DECLARATIONS.items():
        value = getattr(config, option, None)
        if value is not None:
            _declare_from_config(model, option, value, declare)
    methods = getattr(config, "search_methods", None)
    if methods is not None:
        _declare_methods_from_config(model, methods)

    logger.debug(
        "applied search config",
        context={"model": model._meta.label, "source": owner.__name__},
    )
    return True


def apply_search_configs(model_classes: Iterable[type[models.Model]]) -> list[str]:
    """Apply ``SearchConfig`` declarations for every given model; return their labels."""
    return [
        model._meta.label for model in model_classes if apply_search_config(model)
    ]

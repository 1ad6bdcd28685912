"""Per-model builder classes and the ``search`` entry point."""

from __future__ import annotations

from threading import Lock
from typing import Any, Mapping

from django.db import models

from meta_search.builder import SearchBuilder
from meta_search.logging import get_logger

logger = get_logger("dispatch")

_builder_classes: dict[type[models.Model], type[SearchBuilder]] = {}
_lock = Lock()


def builder_class_for(model: type[models.Model]) -> type[SearchBuilder]:
    """
    Return the builder class bound to ``model``, creating it on first use.

    Classes are created once per model and kept for the lifetime of the
    process; concurrent first calls for the same model receive the same class.

    Parameters:
        model (type[models.Model]): Model the builder searches.

    Returns:
        type[SearchBuilder]: Subclass of ``SearchBuilder`` whose ``model`` is ``model``.
    """
    builder_class = _builder_classes.get(model)
    if builder_class is not None:
        return builder_class
    with _lock:
        builder_class = _builder_classes.get(model)
        if builder_class is None:
            builder_class = type(
                f"{model.__name__}SearchBuilder",
                (SearchBuilder,),
                {"model": model, "__module__": __name__},
            )
            _builder_classes[model] = builder_class
            logger.debug(
                "created search builder",
                context={"model": model._meta.label, "builder": builder_class.__name__},
            )
    return builder_class


def clear_builder_classes() -> None:
    """Forget every cached builder class."""
    with _lock:
        _builder_classes.clear()


def search(
    base: type[models.Model] | models.QuerySet,
    params: Mapping[str, Any] | None = None,
    options: Mapping[str, Any] | None = None,
) -> SearchBuilder:
    """
    Prepare a search against a model or queryset without querying the database.

    Parameters:
        base (type[models.Model] | models.QuerySet): What to search.
        params (Mapping[str, Any] | None): Search parameters such as ``{"title_contains": "orm"}``.
        options (Mapping[str, Any] | None): Search context made available to every
            authorization condition; ``search_key`` renames the request parameter used
            by link and form helpers.

    Returns:
        SearchBuilder: A built, unevaluated builder.
    """
    model = base.model if isinstance(base, models.QuerySet) else base
    builder = builder_class_for(model)(base, options or {})
    return builder.build(params or {})

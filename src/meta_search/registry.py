"""Per-model registry of searchable attributes, associations and methods."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from threading import Lock
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping

from django.db import models

from meta_search.errors import UnknownAssociationError, UnknownAttributeError
from meta_search.logging import get_logger
from meta_search.methods import SearchMethod

type SearchContext = Mapping[str, Any]
type Condition = Callable[[SearchContext], Any]

logger = get_logger("registry")


def ALWAYS(_context: SearchContext) -> bool:
    """Condition used when a declaration carries no ``condition``."""
    return True


@dataclass(frozen=True)
class AuthorizationRule:
    """A registered name together with the condition gating it."""

    name: str
    condition: Condition = ALWAYS

    def applies(self, context: SearchContext) -> bool:
        """Return True when the rule's condition holds for ``context``."""
        return bool(self.condition(context))


@dataclass(frozen=True)
class SearchMethodEntry:
    """A search method and the rule authorizing its use."""

    method: SearchMethod
    authorization: AuthorizationRule


_EMPTY: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True)
class SearchRegistry:
    """
    Immutable search declarations for one model.

    Whitelists win exclusively: when ``include_attributes`` (or
    ``include_associations``) is non-empty the matching exclude map is never
    consulted.
    """

    include_attributes: Mapping[str, AuthorizationRule] = field(default=_EMPTY)
    exclude_attributes: Mapping[str, AuthorizationRule] = field(default=_EMPTY)
    include_associations: Mapping[str, AuthorizationRule] = field(default=_EMPTY)
    exclude_associations: Mapping[str, AuthorizationRule] = field(default=_EMPTY)
    methods: Mapping[str, SearchMethodEntry] = field(default=_EMPTY)

    def extend(self, kind: str, entries: Mapping[str, Any]) -> SearchRegistry:
        """Return a copy with ``entries`` merged into the ``kind`` mapping."""
        merged = {**getattr(self, kind), **entries}
        return replace(self, **{kind: MappingProxyType(merged)})


EMPTY_REGISTRY = SearchRegistry()

_registries: dict[type[models.Model], SearchRegistry] = {}
_lock = Lock()


def get_registry(model: type[models.Model]) -> SearchRegistry:
    """
    Return the effective registry for ``model``.

    A model without declarations of its own uses the registry of its nearest
    registered ancestor.
    """
    for klass in model.__mro__:
        registry = _registries.get(klass)
        if registry is not None:
            return registry
    return EMPTY_REGISTRY


def reset_registry(model: type[models.Model]) -> None:
    """Drop the declarations made directly on ``model``."""
    with _lock:
        _registries.pop(model, None)


def model_columns(model: type[models.Model]) -> set[str]:
    """Return the persisted column names usable as search attributes."""
    columns: set[str] = set()
    for model_field in model._meta.concrete_fields:
        if model_field.is_relation:
            columns.add(model_field.attname)
        else:
            columns.add(model_field.name)
    return columns


def model_associations(model: type[models.Model]) -> dict[str, Any]:
    """Return relation fields of ``model`` keyed by their lookup name."""
    associations: dict[str, Any] = {}
    for model_field in model._meta.get_fields(include_hidden=False):
        if not model_field.is_relation or model_field.related_model is None:
            continue
        if isinstance(model_field.related_model, str):
            continue
        associations[model_field.name] = model_field
    return associations


def _flatten(names: Iterable[Any]) -> list[str]:
    flat: list[str] = []
    for name in names:
        if isinstance(name, (list, tuple, set, frozenset)):
            flat.extend(_flatten(name))
        else:
            flat.append(str(name))
    return flat


def _declare(
    model: type[models.Model],
    kind: str,
    names: Iterable[Any],
    entries: Mapping[str, Any],
) -> None:
    with _lock:
        registry = get_registry(model).extend(kind, entries)
        _registries[model] = registry
    logger.debug(
        "search declaration",
        context={"model": model.__name__, "kind": kind, "names": list(names)},
    )


def _declare_rules(
    model: type[models.Model],
    kind: str,
    names: tuple[Any, ...],
    condition: Condition | None,
    known: Iterable[str],
    error: type[UnknownAttributeError] | type[UnknownAssociationError],
) -> None:
    flat = _flatten(names)
    known_names = set(known)
    for name in flat:
        if name not in known_names:
            raise error(name, model)
    rules = {
        name: AuthorizationRule(name, condition if condition is not None else ALWAYS)
        for name in flat
    }
    _declare(model, kind, flat, rules)


def attr_unsearchable(
    model: type[models.Model], *names: Any, condition: Condition | None = None
) -> None:
    """
    Exclude columns of ``model`` from searching.

    Excluded columns are rejected both for direct searches on ``model`` and
    for searches reaching ``model`` through an association. When a
    ``condition`` is given the exclusion only applies while it holds.

    Raises:
        UnknownAttributeError: If a name is not a persisted column of ``model``.
    """
    _declare_rules(
        model,
        "exclude_attributes",
        names,
        condition,
        model_columns(model),
        UnknownAttributeError,
    )


def attr_searchable(
    model: type[models.Model], *names: Any, condition: Condition | None = None
) -> None:
    """
    Whitelist columns of ``model`` for searching.

    Once any column is whitelisted the blacklist of ``model`` is ignored.

    Raises:
        UnknownAttributeError: If a name is not a persisted column of ``model``.
    """
    _declare_rules(
        model,
        "include_attributes",
        names,
        condition,
        model_columns(model),
        UnknownAttributeError,
    )


def assoc_unsearchable(
    model: type[models.Model], *names: Any, condition: Condition | None = None
) -> None:
    """
    Exclude associations of ``model`` from searching.

    Raises:
        UnknownAssociationError: If a name is not an association of ``model``.
    """
    _declare_rules(
        model,
        "exclude_associations",
        names,
        condition,
        model_associations(model),
        UnknownAssociationError,
    )


def assoc_searchable(
    model: type[models.Model], *names: Any, condition: Condition | None = None
) -> None:
    """
    Whitelist associations of ``model`` for searching.

    Raises:
        UnknownAssociationError: If a name is not an association of ``model``.
    """
    _declare_rules(
        model,
        "include_associations",
        names,
        condition,
        model_associations(model),
        UnknownAssociationError,
    )


def search_methods(
    model: type[models.Model],
    *names: Any,
    condition: Condition | None = None,
    **options: Any,
) -> None:
    """
    Register custom search parameters handled by queryset methods.

    Parameters:
        model (type[models.Model]): Model the methods belong to.
        *names (Any): Method names; each is also the accepted parameter name.
        condition (Condition | None): Authorization condition for all given names.
        **options (Any): Passed to ``SearchMethod`` (``value_type``, ``splat``, ``formatter``).
    """
    flat = _flatten(names)
    rule_condition = condition if condition is not None else ALWAYS
    entries = {
        name: SearchMethodEntry(
            method=SearchMethod(name, **options),
            authorization=AuthorizationRule(name, rule_condition),
        )
        for name in flat
    }
    _declare(model, "methods", flat, entries)


search_method = search_methods

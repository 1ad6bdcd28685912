"""Lazy search builder returned by ``meta_search.search``."""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar, Iterator, Mapping

from django.db import models
from django.db.models import Q

from meta_search import conf
from meta_search.authorization import method_authorized
from meta_search.errors import (
    BuilderMaterializedError,
    UncastableValueError,
    UndefinedSearchMethodError,
)
from meta_search.logging import get_logger
from meta_search.methods import SearchMethod
from meta_search.parsing import SearchCondition, resolve_condition, resolve_sort
from meta_search.registry import SearchMethodEntry, get_registry

logger = get_logger("builder")


class BuilderState(Enum):
    """Lifecycle of a search builder."""

    UNBUILT = "unbuilt"
    BUILT = "built"
    MATERIALIZED = "materialized"


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return not value
    return False


class SearchBuilder:
    """
    Accumulates authorized search parameters for one model without querying.

    Concrete builders are created per model by ``meta_search.dispatch`` and
    carry the model in the ``model`` class attribute. The database is hit only
    when results are needed (iteration, ``len``, ``count``, indexing); the rows
    are then cached and the builder no longer accepts parameters.
    """

    model: ClassVar[type[models.Model]]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if not isinstance(cls.__dict__.get("model"), type):
            raise TypeError(f"{cls.__name__} must define a model class.")

    def __init__(
        self,
        base: type[models.Model] | models.QuerySet | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> None:
        """
        Create a builder over ``base``.

        Parameters:
            base (type[models.Model] | models.QuerySet | None): Model or queryset to search;
                defaults to every row of ``model``. A queryset keeps its existing filters.
            options (Mapping[str, Any] | None): Search context handed to every
                authorization condition. ``search_key`` overrides the parameter name
                used by form and link helpers.
        """
        if base is None:
            base = self.model
        if isinstance(base, models.QuerySet):
            self._base = base
        else:
            self._base = base._default_manager.all()
        self._options: Mapping[str, Any] = MappingProxyType(dict(options or {}))
        self._conditions: dict[str, tuple[SearchCondition, Q]] = {}
        self._method_calls: dict[str, tuple[SearchMethod, Any]] = {}
        self._search_attributes: dict[str, Any] = {}
        self._resolved: dict[str, SearchCondition | SearchMethodEntry | None] = {}
        self._sorts: list[str] = []
        self._state = BuilderState.UNBUILT
        self._result_cache: list[models.Model] | None = None
        self._count_cache: int | None = None

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} state={self._state.value} "
            f"params={sorted(self._search_attributes)}>"
        )

    @property
    def options(self) -> Mapping[str, Any]:
        return self._options

    @property
    def context(self) -> Mapping[str, Any]:
        """Mapping passed to authorization conditions."""
        return self._options

    @property
    def search_key(self) -> str:
        """Parameter name under which this search's params travel in requests."""
        key = self._options.get("search_key")
        return str(key) if key else conf.search_key()

    @property
    def state(self) -> BuilderState:
        return self._state

    @property
    def search_attributes(self) -> dict[str, Any]:
        """Accepted parameters with the values they were submitted with."""
        return dict(self._search_attributes)

    @property
    def conditions(self) -> dict[str, Q]:
        """Accumulated attribute clauses keyed by parameter name."""
        return {key: clause for key, (_condition, clause) in self._conditions.items()}

    @property
    def sorts(self) -> list[str]:
        return list(self._sorts)

    def _resolve(self, name: str) -> SearchCondition | SearchMethodEntry | None:
        if name not in self._resolved:
            registry = get_registry(self.model)
            resolved: SearchCondition | SearchMethodEntry | None
            if method_authorized(registry, name, self.context):
                resolved = registry.methods[name]
            else:
                resolved = resolve_condition(self.model, name, self.context)
            self._resolved[name] = resolved
        return self._resolved[name]

    def _forget(self, key: str) -> None:
        self._conditions.pop(key, None)
        self._method_calls.pop(key, None)
        self._search_attributes.pop(key, None)

    def _apply_sort(self, value: Any) -> None:
        values = value if isinstance(value, (list, tuple)) else [value]
        sorts = [
            resolved
            for resolved in (
                resolve_sort(self.model, item, self.context) for item in values
            )
            if resolved is not None
        ]
        if not sorts:
            logger.debug(
                "search sort ignored",
                context={"model": self.model.__name__, "sort": value},
            )
            return
        self._sorts = sorts
        self._search_attributes[conf.sort_key()] = value

    def _check_methods(self, params: Mapping[str, Any], sort_key: str) -> None:
        for raw_key, value in params.items():
            key = str(raw_key)
            if key == sort_key or _is_blank(value):
                continue
            resolved = self._resolve(key)
            if isinstance(resolved, SearchMethodEntry) and not callable(
                getattr(self._base, resolved.method.name, None)
            ):
                raise UndefinedSearchMethodError(resolved.method.name, self.model)

    def _apply_method(self, key: str, entry: SearchMethodEntry, value: Any) -> None:
        method = entry.method
        try:
            casted = method.cast(value)
        except UncastableValueError as exc:
            logger.warning(
                "search method value ignored",
                context={
                    "model": self.model.__name__,
                    "parameter": key,
                    "error": str(exc),
                },
            )
            self._forget(key)
            return
        self._method_calls[key] = (method, casted)
        self._search_attributes[key] = value

    def build(self, params: Mapping[str, Any] | None = None) -> SearchBuilder:
        """
        Add search parameters to the builder.

        Unknown and unauthorized parameter names are ignored. Blank values are
        treated as not specified and clear an earlier value for the same name.
        Calling ``build`` several times accumulates parameters.

        Parameters:
            params (Mapping[str, Any] | None): Search parameters, e.g.
                ``{"title_contains": "django", "meta_sort": "created_at.desc"}``.

        Returns:
            SearchBuilder: ``self``, not yet evaluated.

        Raises:
            BuilderMaterializedError: If results were already loaded.
            UndefinedSearchMethodError: If an accepted search method is missing on the queryset.
        """
        if self._state is BuilderState.MATERIALIZED:
            raise BuilderMaterializedError(self.model)

        params = params or {}
        sort_key = conf.sort_key()
        self._check_methods(params, sort_key)
        ignored: list[str] = []
        for raw_key, value in params.items():
            key = str(raw_key)
            if key == sort_key:
                if _is_blank(value):
                    self._sorts = []
                    self._search_attributes.pop(sort_key, None)
                else:
                    self._apply_sort(value)
                continue

            resolved = self._resolve(key)
            if resolved is None:
                ignored.append(key)
                continue
            if _is_blank(value):
                self._forget(key)
                continue
            if isinstance(resolved, SearchMethodEntry):
                self._apply_method(key, resolved, value)
                continue

            clause = resolved.clause(value)
            if clause is None:
                self._forget(key)
                continue
            self._conditions[key] = (resolved, clause)
            self._search_attributes[key] = value

        if ignored:
            logger.debug(
                "search parameters ignored",
                context={"model": self.model.__name__, "parameters": ignored},
            )
        self._state = BuilderState.BUILT
        return self

    @property
    def queryset(self) -> models.QuerySet:
        """
        Return a fresh lazy queryset for the accumulated parameters.

        Clauses are applied in a single ``filter`` call so that conditions on the
        same multi-valued association refer to the same related row. Searches
        through multi-valued associations are made ``distinct``.
        """
        queryset = self._base.filter(
            *(clause for _condition, clause in self._conditions.values())
        )
        for method, value in self._method_calls.values():
            queryset = method.apply(queryset, value)
        if any(
            condition.target.multi_valued for condition, _q in self._conditions.values()
        ):
            queryset = queryset.distinct()
        if self._sorts:
            queryset = queryset.order_by(*self._sorts)
        return queryset

    relation = queryset

    def _fetch_all(self) -> list[models.Model]:
        if self._result_cache is None:
            self._result_cache = list(self.queryset)
            self._state = BuilderState.MATERIALIZED
            logger.debug(
                "search evaluated",
                context={
                    "model": self.model.__name__,
                    "parameters": sorted(self._search_attributes),
                    "rows": len(self._result_cache),
                },
            )
        return self._result_cache

    def all(self) -> list[models.Model]:
        """Evaluate the search and return the matching rows."""
        return list(self._fetch_all())

    def __iter__(self) -> Iterator[models.Model]:
        return iter(self._fetch_all())

    def __len__(self) -> int:
        return len(self._fetch_all())

    def __bool__(self) -> bool:
        return bool(self._fetch_all())

    def __getitem__(self, item: int | slice) -> Any:
        return self._fetch_all()[item]

    def count(self) -> int:
        """Return the number of matches; uses a COUNT query unless rows are loaded."""
        if self._result_cache is not None:
            return len(self._result_cache)
        if self._count_cache is None:
            self._count_cache = self.queryset.count()
            self._state = BuilderState.MATERIALIZED
        return self._count_cache

    def exists(self) -> bool:
        return self.count() > 0

    def first(self) -> models.Model | None:
        rows = self._fetch_all()
        return rows[0] if rows else None

    def last(self) -> models.Model | None:
        rows = self._fetch_all()
        return rows[-1] if rows else None

    def __getattr__(self, name: str) -> Any:
        """Expose submitted values by parameter name, e.g. ``builder.title_contains``."""
        if name.startswith("_"):
            raise AttributeError(name)
        if name in self._search_attributes:
            return self._search_attributes[name]
        if self._resolve(name) is not None:
            return None
        raise AttributeError(
            f"'{type(self).__name__}' object has no attribute '{name}'"
        )

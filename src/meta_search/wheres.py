"""Predicate suffixes accepted in search parameter names."""

from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Iterator, Literal

from django.db.models import Q

from meta_search.errors import InvalidWhereError
from meta_search.methods import TRUE_VALUES

type value_kind = Literal["value", "list", "boolean"]
type ClauseFactory = Callable[[str, Any], Q]

TEXT_FIELD_TYPES = frozenset(
    {
        "CharField",
        "TextField",
        "SlugField",
        "EmailField",
        "URLField",
        "FilePathField",
        "GenericIPAddressField",
    }
)
BOOLEAN_FIELD_TYPES = frozenset({"BooleanField"})


@dataclass(frozen=True)
class Where:
    """
    Maps a parameter suffix such as ``greater_than`` onto a Django lookup.

    Attributes:
        name (str): Canonical suffix.
        aliases (tuple[str, ...]): Alternative suffixes accepted for the same where.
        lookup (str | None): Django lookup applied to the field path.
        negate (bool): Wrap the clause in ``~Q``.
        kind (str): ``value`` passes the value through, ``list`` expects several
            values, ``boolean`` applies only when the value is truthy.
        clause (ClauseFactory | None): Builds the ``Q`` directly; overrides ``lookup``.
        field_types (frozenset[str] | None): Internal field types (``get_internal_type``)
            the where applies to; None accepts every column.
    """

    name: str
    aliases: tuple[str, ...] = ()
    lookup: str | None = None
    negate: bool = False
    kind: value_kind = "value"
    clause: ClauseFactory | None = None
    field_types: frozenset[str] | None = None

    @property
    def suffixes(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)

    def accepts(self, model_field: Any) -> bool:
        """Return True when the where can be applied to ``model_field``."""
        if self.field_types is None:
            return True
        return model_field.get_internal_type() in self.field_types

    def normalize(self, value: Any) -> Any | None:
        """Return the value to filter with, or None when the parameter should be skipped."""
        if self.kind == "boolean":
            if value is True:
                return True
            return True if str(value).strip().lower() in TRUE_VALUES else None
        if self.kind == "list":
            if isinstance(value, str):
                items = [item.strip() for item in value.split(",")]
            elif isinstance(value, (list, tuple, set, frozenset)):
                items = list(value)
            else:
                items = [value]
            items = [item for item in items if item not in (None, "")]
            return items or None
        return value

    def build(self, path: str, value: Any) -> Q:
        """Return the ``Q`` clause for ``path`` compared against ``value``."""
        if self.clause is not None:
            return self.clause(path, value)
        condition = Q(**{f"{path}__{self.lookup}": value})
        return ~condition if self.negate else condition


def _present(path: str, _value: Any) -> Q:
    return Q(**{f"{path}__isnull": False}) & ~Q(**{path: ""})


def _blank(path: str, _value: Any) -> Q:
    return Q(**{f"{path}__isnull": True}) | Q(**{path: ""})


DEFAULT_WHERES: tuple[Where, ...] = (
    Where("equals", ("eq",), "exact"),
    Where("does_not_equal", ("ne", "not_eq"), "exact", negate=True),
    Where("contains", ("like", "matches"), "icontains", field_types=TEXT_FIELD_TYPES),
    Where(
        "does_not_contain",
        ("nlike", "not_matches"),
        "icontains",
        negate=True,
        field_types=TEXT_FIELD_TYPES,
    ),
    Where("starts_with", ("sw",), "istartswith", field_types=TEXT_FIELD_TYPES),
    Where(
        "does_not_start_with",
        ("dnsw",),
        "istartswith",
        negate=True,
        field_types=TEXT_FIELD_TYPES,
    ),
    Where("ends_with", ("ew",), "iendswith", field_types=TEXT_FIELD_TYPES),
    Where(
        "does_not_end_with",
        ("dnew",),
        "iendswith",
        negate=True,
        field_types=TEXT_FIELD_TYPES,
    ),
    Where("greater_than", ("gt",), "gt"),
    Where("less_than", ("lt",), "lt"),
    Where("greater_than_or_equal_to", ("gte",), "gte"),
    Where("less_than_or_equal_to", ("lte",), "lte"),
    Where("in", (), "in", kind="list"),
    Where("not_in", ("ni",), "in", negate=True, kind="list"),
    Where(
        "is_true",
        (),
        kind="boolean",
        clause=lambda path, _v: Q(**{path: True}),
        field_types=BOOLEAN_FIELD_TYPES,
    ),
    Where(
        "is_false",
        (),
        kind="boolean",
        clause=lambda path, _v: Q(**{path: False}),
        field_types=BOOLEAN_FIELD_TYPES,
    ),
    Where("is_present", (), kind="boolean", clause=_present, field_types=TEXT_FIELD_TYPES),
    Where("is_blank", (), kind="boolean", clause=_blank, field_types=TEXT_FIELD_TYPES),
    Where("is_null", (), "isnull", kind="boolean"),
    Where(
        "is_not_null",
        (),
        kind="boolean",
        clause=lambda path, _v: Q(**{f"{path}__isnull": False}),
    ),
)

_wheres: dict[str, Where] = {}
_suffix_order: list[str] = []
_lock = Lock()


def _rebuild_order() -> None:
    _suffix_order[:] = sorted(_wheres, key=len, reverse=True)


def register_where(where: Where) -> None:
    """
    Make ``where`` available to every search.

    Raises:
        InvalidWhereError: If the where defines neither a lookup nor a clause factory.
    """
    if where.lookup is None and where.clause is None:
        raise InvalidWhereError(where.name, "a lookup or a clause factory is required")
    with _lock:
        for suffix in where.suffixes:
            _wheres[suffix] = where
        _rebuild_order()


def reset_wheres() -> None:
    """Restore the built-in where table."""
    with _lock:
        _wheres.clear()
        for where in DEFAULT_WHERES:
            for suffix in where.suffixes:
                _wheres[suffix] = where
        _rebuild_order()


def get_where(suffix: str) -> Where | None:
    return _wheres.get(suffix)


def iter_where_splits(key: str) -> Iterator[tuple[str, Where]]:
    """
    Yield every split of ``key`` into an attribute part and a trailing where.

    Longer suffixes come first, so ``created_at_greater_than_or_equal_to``
    tries ``greater_than_or_equal_to`` before ``equal_to``.
    """
    for suffix in tuple(_suffix_order):
        marker = f"_{suffix}"
        if key.endswith(marker) and len(key) > len(marker):
            yield key[: -len(marker)], _wheres[suffix]


reset_wheres()

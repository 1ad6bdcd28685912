"""Custom named search methods backed by queryset methods."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Literal

from django.db import models
from django.utils.dateparse import parse_date, parse_datetime

from meta_search.errors import (
    InvalidSearchMethodError,
    UncastableValueError,
    UndefinedSearchMethodError,
)

type search_value_type = Literal[
    "string", "integer", "float", "decimal", "boolean", "date", "datetime"
]

TRUE_VALUES = frozenset({"1", "true", "t", "yes", "y", "on"})
FALSE_VALUES = frozenset({"0", "false", "f", "no", "n", "off"})


def _to_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise UncastableValueError(value, "boolean")


def _to_date(value: Any) -> Any:
    if hasattr(value, "year") and not isinstance(value, str):
        return value
    parsed = parse_date(str(value).strip())
    if parsed is None:
        raise UncastableValueError(value, "date")
    return parsed


def _to_datetime(value: Any) -> Any:
    if hasattr(value, "hour") and not isinstance(value, str):
        return value
    parsed = parse_datetime(str(value).strip())
    if parsed is None:
        raise UncastableValueError(value, "datetime")
    return parsed


def _to_decimal(value: Any) -> Decimal:
    try:
        return Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise UncastableValueError(value, "decimal") from exc


_CASTS: dict[str, Callable[[Any], Any]] = {
    "string": str,
    "integer": int,
    "float": float,
    "decimal": _to_decimal,
    "boolean": _to_boolean,
    "date": _to_date,
    "datetime": _to_datetime,
}


@dataclass(frozen=True)
class SearchMethod:
    """
    Definition of a custom search parameter handled by a queryset method.

    Attributes:
        name (str): Parameter name and name of the queryset method to call.
        value_type (str): Type the submitted value is cast to before the call.
        splat (bool): When True a list value is passed as positional arguments.
        formatter (Callable[[Any], Any] | None): Optional post-cast transformation.
    """

    name: str
    value_type: search_value_type = "string"
    splat: bool = False
    formatter: Callable[[Any], Any] | None = None

    def __post_init__(self) -> None:
        if self.value_type not in _CASTS:
            raise InvalidSearchMethodError(self.name, self.value_type)

    def cast(self, value: Any) -> Any:
        """
        Convert a submitted value into the arguments for the queryset method.

        Lists are cast element-wise. The formatter, when present, runs after casting.

        Raises:
            UncastableValueError: If the value cannot be converted.
        """
        caster = _CASTS[self.value_type]
        try:
            if isinstance(value, (list, tuple)):
                casted: Any = [caster(item) for item in value]
            else:
                casted = caster(value)
        except UncastableValueError:
            raise
        except (TypeError, ValueError) as exc:
            raise UncastableValueError(value, self.value_type) from exc
        if self.formatter is not None:
            casted = self.formatter(casted)
        return casted

    def apply(self, queryset: models.QuerySet, value: Any) -> models.QuerySet:
        """
        Call the queryset method named after this search method.

        Parameters:
            queryset (models.QuerySet): Queryset to narrow.
            value (Any): Value already converted by ``cast``.

        Returns:
            models.QuerySet: The queryset returned by the method.

        Raises:
            UndefinedSearchMethodError: If the queryset has no such method.
        """
        handler = getattr(queryset, self.name, None)
        if not callable(handler):
            raise UndefinedSearchMethodError(self.name, queryset.model)
        if self.splat and isinstance(value, (list, tuple)):
            return handler(*value)
        return handler(value)

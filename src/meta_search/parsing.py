"""Resolve search parameter names against a model's association graph."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from django.db import models
from django.db.models import Q

from meta_search.authorization import association_authorized, attribute_authorized
from meta_search.registry import (
    SearchContext,
    get_registry,
    model_associations,
    model_columns,
)
from meta_search.wheres import Where, iter_where_splits

SORT_DIRECTIONS = ("asc", "desc")


@dataclass(frozen=True)
class AttributePath:
    """
    An authorized attribute reached from a root model.

    Attributes:
        model (type[models.Model]): Model owning the attribute.
        associations (tuple[str, ...]): Association names walked from the root model.
        attribute (str): Column name on ``model``.
        multi_valued (bool): True when any walked association can yield several rows.
    """

    model: type[models.Model]
    associations: tuple[str, ...]
    attribute: str
    multi_valued: bool = False

    @property
    def lookup(self) -> str:
        """Django lookup path, e.g. ``comments__created_at``."""
        return "__".join((*self.associations, self.attribute))

    @property
    def field(self) -> Any:
        """Model field behind ``attribute``; foreign key attnames resolve to the relation."""
        return self.model._meta.get_field(self.attribute)


@dataclass(frozen=True)
class SearchCondition:
    """A parameter name resolved to an attribute path and a where."""

    key: str
    target: AttributePath
    where: Where

    def clause(self, value: Any) -> Q | None:
        """Return the ``Q`` for ``value`` or None when the value means "not specified"."""
        normalized = self.where.normalize(value)
        if normalized is None:
            return None
        return self.where.build(self.target.lookup, normalized)


def _is_multi_valued(relation: Any) -> bool:
    return bool(relation.many_to_many or relation.one_to_many)


def resolve_attribute(
    model: type[models.Model], name: str, context: SearchContext
) -> AttributePath | None:
    """
    Resolve ``name`` to an authorized attribute of ``model`` or of an associated model.

    ``comments_created_at`` resolves to ``created_at`` on the model behind
    ``comments`` when ``comments`` is an authorized association of ``model``
    and ``created_at`` is an authorized attribute of the comment model.
    Longer association names are tried first.

    Returns:
        AttributePath | None: The resolved path, or None when nothing authorized matches.
    """
    registry = get_registry(model)
    if name in model_columns(model) and attribute_authorized(registry, name, context):
        return AttributePath(model, (), name)

    associations = model_associations(model)
    for association in sorted(associations, key=len, reverse=True):
        prefix = f"{association}_"
        if not name.startswith(prefix) or len(name) == len(prefix):
            continue
        if not association_authorized(registry, association, context):
            continue
        relation = associations[association]
        nested = resolve_attribute(relation.related_model, name[len(prefix) :], context)
        if nested is None:
            continue
        return AttributePath(
            nested.model,
            (association, *nested.associations),
            nested.attribute,
            _is_multi_valued(relation) or nested.multi_valued,
        )
    return None


def resolve_condition(
    model: type[models.Model], key: str, context: SearchContext
) -> SearchCondition | None:
    """
    Resolve a parameter such as ``comments_body_contains`` to a condition.

    A where that does not apply to the resolved column type, e.g. ``contains``
    on a date or ``is_true`` on a text column, does not match.
    """
    for attribute_name, where in iter_where_splits(key):
        target = resolve_attribute(model, attribute_name, context)
        if target is not None and where.accepts(target.field):
            return SearchCondition(key, target, where)
    return None


def resolve_sort(
    model: type[models.Model], value: Any, context: SearchContext
) -> str | None:
    """
    Translate ``"<attribute>.<asc|desc>"`` into a Django ``order_by`` expression.

    The direction defaults to ascending. Unknown directions, unauthorized
    attributes and attributes reached through a multi-valued association
    resolve to None.
    """
    text = str(value).strip()
    if not text:
        return None
    name, _, direction = text.partition(".")
    direction = (direction or "asc").lower()
    if direction not in SORT_DIRECTIONS:
        return None
    target = resolve_attribute(model, name, context)
    if target is None or target.multi_valued:
        return None
    return f"-{target.lookup}" if direction == "desc" else target.lookup

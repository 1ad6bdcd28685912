"""Authorization checks for search parameter names."""

from __future__ import annotations

from typing import Mapping

from meta_search.registry import AuthorizationRule, SearchContext, SearchRegistry


def _rule_holds(
    rules: Mapping[str, AuthorizationRule], name: str, context: SearchContext
) -> bool:
    rule = rules.get(name)
    return rule is not None and rule.applies(context)


def _authorized(
    include: Mapping[str, AuthorizationRule],
    exclude: Mapping[str, AuthorizationRule],
    name: str,
    context: SearchContext,
) -> bool:
    if include:
        return _rule_holds(include, name, context)
    return not _rule_holds(exclude, name, context)


def method_authorized(
    registry: SearchRegistry, name: str, context: SearchContext
) -> bool:
    """Return True when ``name`` is a registered method whose condition holds."""
    entry = registry.methods.get(str(name))
    return entry is not None and entry.authorization.applies(context)


def attribute_authorized(
    registry: SearchRegistry, name: str, context: SearchContext
) -> bool:
    """
    Decide whether attribute ``name`` may be searched in ``context``.

    With a non-empty whitelist the attribute must be listed and its condition
    must hold. Otherwise it is allowed unless it is blacklisted with a
    condition that holds.
    """
    return _authorized(
        registry.include_attributes,
        registry.exclude_attributes,
        str(name),
        context,
    )


def association_authorized(
    registry: SearchRegistry, name: str, context: SearchContext
) -> bool:
    """Decide whether association ``name`` may be traversed in ``context``."""
    return _authorized(
        registry.include_associations,
        registry.exclude_associations,
        str(name),
        context,
    )

"""Structured logger helpers shared across meta_search modules."""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping
from typing import Any

_ROOT_LOGGER_NAME = "meta_search"


class MetaSearchLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that tags records with a component and a context mapping."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        """
        Merge the adapter's component and the caller supplied ``context`` into ``extra``.

        Parameters:
            msg (Any): Log message.
            kwargs (MutableMapping[str, Any]): Keyword arguments passed to the logging call.

        Returns:
            tuple[Any, MutableMapping[str, Any]]: The message and the rewritten keyword arguments.

        Raises:
            TypeError: If ``context`` is given and is not a mapping.
        """
        context = kwargs.pop("context", None)
        if context is not None and not isinstance(context, Mapping):
            raise TypeError("context must be a mapping")

        extra = dict(kwargs.pop("extra", None) or {})
        merged: dict[str, Any] = {}
        existing = extra.get("context")
        if isinstance(existing, Mapping):
            merged.update(existing)
        if context:
            merged.update(context)
        extra["context"] = merged
        extra.setdefault("component", self.extra["component"])
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(component: str) -> MetaSearchLoggerAdapter:
    """Return an adapter writing to ``meta_search.<component>``."""
    logger = logging.getLogger(f"{_ROOT_LOGGER_NAME}.{component}")
    return MetaSearchLoggerAdapter(logger, {"component": component})

"""Exceptions raised by meta_search."""

from __future__ import annotations


class SearchConfigurationError(ValueError):
    """Base class for defects in a model's search declarations."""


class UnknownAttributeError(SearchConfigurationError):
    """Raised when a declaration names a column the model does not persist."""

    def __init__(self, attribute: str, model: type) -> None:
        """
        Build the error for an attribute missing from ``model``.

        Parameters:
            attribute (str): The declared attribute name.
            model (type): Model class the declaration was made on.
        """
        super().__init__(
            f"No persisted attribute (column) named '{attribute}' in {model.__name__}."
        )


class UnknownAssociationError(SearchConfigurationError):
    """Raised when a declaration names an association the model does not have."""

    def __init__(self, association: str, model: type) -> None:
        """
        Build the error for an association missing from ``model``.

        Parameters:
            association (str): The declared association name.
            model (type): Model class the declaration was made on.
        """
        super().__init__(f"No such association '{association}' in {model.__name__}.")


class UndefinedSearchMethodError(SearchConfigurationError):
    """Raised when a registered search method is not available on the queryset."""

    def __init__(self, method: str, model: type) -> None:
        super().__init__(
            f"Search method '{method}' is registered on {model.__name__} "
            "but its queryset does not define it."
        )


class InvalidSearchConfigError(SearchConfigurationError):
    """Raised when an inner ``SearchConfig`` declares an unsupported value."""

    def __init__(self, model: type, option: str) -> None:
        super().__init__(
            f"SearchConfig option '{option}' on {model.__name__} must be an iterable "
            "of names or a mapping."
        )


class InvalidSearchMethodError(SearchConfigurationError):
    """Raised when a search method is declared with an unsupported value type."""

    def __init__(self, method: str, value_type: str) -> None:
        super().__init__(
            f"Unsupported value_type '{value_type}' for search method '{method}'."
        )


class UncastableValueError(ValueError):
    """Raised when a submitted value cannot be converted to a method's value type."""

    def __init__(self, value: object, target: str) -> None:
        super().__init__(f"Cannot convert {value!r} to {target}.")


class InvalidWhereError(ValueError):
    """Raised when a custom where definition cannot be registered."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Cannot register where '{name}': {reason}.")


class BuilderMaterializedError(RuntimeError):
    """Raised when parameters are added to a builder whose results were already loaded."""

    def __init__(self, model: type) -> None:
        """
        Build the error for a late ``build`` call.

        Parameters:
            model (type): Model class the builder is bound to.
        """
        super().__init__(
            f"Search on {model.__name__} has already been evaluated; "
            "start a new search to add parameters."
        )

"""
Filter engine exception hierarchy with fuzzy-match suggestions.

All exceptions inherit from ``SpecificationError`` and provide
``to_dict()`` for API-friendly error responses.  The concrete classes
also derive from the closest built-in exception (``ValueError``,
``LookupError``, ``AttributeError``, ``TypeError``) so callers can catch
them generically.
"""

from __future__ import annotations

from difflib import get_close_matches
from typing import Any


def _type_name(target: Any) -> str:
    return getattr(target, "__name__", None) or repr(target)


class SpecificationError(Exception):
    """Base exception for all filter engine errors."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": str(self),
        }


class ValidationError(SpecificationError):
    """Filter structure validation failed."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.message = message
        self.path = path
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "VALIDATION_ERROR",
            "message": self.message,
            "path": self.path,
        }


# -- schema ------------------------------------------------------------------


class FilterSchemaError(ValidationError, ValueError):
    """Malformed filter: missing field, missing parameter, bad payload."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "FILTER_SCHEMA_ERROR",
            "message": self.message,
            "path": self.path,
        }


class UnsupportedCustomTypeError(FilterSchemaError):
    """No builder is registered for the requested custom filter type."""

    def __init__(self, custom_type: Any, path: str | None = None) -> None:
        self.custom_type = getattr(custom_type, "value", custom_type)
        super().__init__(
            f"Unsupported custom filter type: '{self.custom_type}'", path=path
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "UNSUPPORTED_CUSTOM_TYPE",
            "custom_type": self.custom_type,
            "path": self.path,
        }


class OperatorNotFoundError(FilterSchemaError):
    """
    Unknown operator specified.

    Provides fuzzy-matched suggestions for likely intended operators.
    """

    def __init__(self, operator: str, valid_operators: list[str]) -> None:
        self.operator = operator
        self.valid_operators = valid_operators
        self.suggestions = get_close_matches(operator, valid_operators, n=3, cutoff=0.6)

        message = f"Unknown operator: '{operator}'."
        if self.suggestions:
            message += f" Did you mean: {', '.join(self.suggestions)}?"
        message += f" Valid operators: {', '.join(sorted(valid_operators)[:10])}..."
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "OPERATOR_NOT_FOUND",
            "operator": self.operator,
            "suggestions": self.suggestions,
            "valid_operators": sorted(self.valid_operators),
        }


# -- coercion ----------------------------------------------------------------


class ValueCoercionError(SpecificationError, ValueError):
    """A filter value could not be converted to the field's type."""

    def __init__(self, value: Any, target_type: Any, reason: str | None = None) -> None:
        self.value = value
        self.target_type = target_type
        self.reason = reason
        message = f"Cannot convert {value!r} to '{_type_name(target_type)}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "VALUE_COERCION_ERROR",
            "value": repr(self.value),
            "target_type": _type_name(self.target_type),
            "reason": self.reason,
        }


# -- resolution --------------------------------------------------------------


class SpecificationNotRegisteredError(SpecificationError, LookupError):
    """A named specification was requested but never registered."""

    def __init__(self, name: str, registered: list[str]) -> None:
        self.name = name
        self.registered = registered
        self.suggestions = get_close_matches(name, registered, n=3, cutoff=0.6)

        message = f"Specification '{name}' is not registered."
        if self.suggestions:
            message += f" Did you mean: {', '.join(self.suggestions)}?"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "SPECIFICATION_NOT_REGISTERED",
            "name": self.name,
            "suggestions": self.suggestions,
        }


class SpecificationRegistrationError(SpecificationError):
    """A specification could not be registered (duplicate, wrong type)."""


class SpecificationArgumentsError(SpecificationError, TypeError):
    """Arguments do not match the named specification's constructor."""

    def __init__(self, name: str, arguments: list[Any], reason: str) -> None:
        self.name = name
        self.arguments = arguments
        self.reason = reason
        super().__init__(
            f"Invalid arguments {arguments!r} for specification '{name}': {reason}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "SPECIFICATION_ARGUMENTS_ERROR",
            "name": self.name,
            "reason": self.reason,
        }


# -- path --------------------------------------------------------------------


class FieldNotFoundError(SpecificationError, AttributeError):
    """
    Invalid field path with helpful suggestions.

    Uses fuzzy matching to suggest similar valid field names.

    Example error message::

        Invalid field 'frist_name' on 'Person'.
        Did you mean one of these?
          • first_name

        Available fields: age, first_name, id, last_name, ...
    """

    def __init__(
        self,
        invalid_field: str,
        model_name: str,
        available_fields: list[str],
        full_path: str | None = None,
        cutoff: float = 0.6,
    ) -> None:
        self.invalid_field = invalid_field
        self.model_name = model_name
        self.available_fields = available_fields
        self.full_path = full_path or invalid_field

        self.suggestions = get_close_matches(
            invalid_field, available_fields, n=5, cutoff=cutoff
        )

        message = self._build_message()
        super().__init__(message)

    def _build_message(self) -> str:
        lines = [f"Invalid field '{self.invalid_field}' on '{self.model_name}'."]
        if self.suggestions:
            lines.append("Did you mean one of these?")
            for s in self.suggestions:
                lines.append(f"  • {s}")

        sorted_fields = sorted(self.available_fields)
        preview = ", ".join(sorted_fields[:15])
        if len(sorted_fields) > 15:
            preview += ", ..."
        lines.append(f"Available fields: {preview}")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "FIELD_NOT_FOUND",
            "field": self.invalid_field,
            "model": self.model_name,
            "full_path": self.full_path,
            "suggestions": self.suggestions,
            "available_fields": sorted(self.available_fields),
        }


class RelationshipTraversalError(ValidationError):
    """
    Error when trying to traverse a field that has no members.

    Happens when a path like ``age.something`` is used, but ``age`` is a
    scalar, or when a path walks through a collection without a
    quantifier (``addresses.city`` instead of ``any`` on ``addresses``).
    """

    def __init__(
        self,
        field: str,
        model_name: str,
        full_path: str | None = None,
        reason: str = "it is not a nested object",
    ) -> None:
        self.field = field
        self.model_name = model_name
        self.full_path = full_path or field

        message = (
            f"Cannot traverse '{field}' on '{model_name}': "
            f"{reason}. Full path: '{self.full_path}'"
        )
        super().__init__(message, path=self.full_path)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "RELATIONSHIP_TRAVERSAL_ERROR",
            "field": self.field,
            "model": self.model_name,
            "full_path": self.full_path,
        }


class NotACollectionError(RelationshipTraversalError):
    """A quantifier (any/all/none) was applied to a non-collection field."""

    def __init__(self, field: str, model_name: str, full_path: str | None = None):
        super().__init__(
            field,
            model_name,
            full_path,
            reason="quantifiers require a collection-typed field",
        )

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["error"] = "NOT_A_COLLECTION"
        return data

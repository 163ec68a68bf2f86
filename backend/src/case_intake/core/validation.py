"""Required-field validation for case submissions."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping

from .fields import FieldCatalogue, PropertyKind
from .normalize import normalize_list, safe_str, to_number_or_none


class MissingFieldsError(RuntimeError):
    """Raised when a submission lacks one or more required fields.

    Only field names are carried, never the submitted values.
    """

    def __init__(self, *, missing: List[str], required: List[str], received_keys: List[str]):
        super().__init__(f"Missing required fields: {', '.join(missing)}")
        self.missing = missing
        self.required = required
        self.received_keys = received_keys


class InvalidBodyError(ValueError):
    """Raised when the request body is not a JSON object."""


def is_present(value: Any, kind: PropertyKind) -> bool:
    """Whether ``value`` would produce a property for a field of ``kind``.

    Mirrors the omission rules of the property builder, without defaults.
    """

    if kind is PropertyKind.PEOPLE:
        return False
    if kind is PropertyKind.NUMBER:
        return to_number_or_none(value) is not None
    if kind is PropertyKind.MULTI_SELECT:
        return bool(normalize_list(value))
    return bool(safe_str(value).strip())


def validate_required(
    resolved: Dict[str, Any],
    body: Mapping[str, Any],
    *,
    catalogue: FieldCatalogue,
    required_fields: Iterable[str],
) -> None:
    """Raise :class:`MissingFieldsError` unless every required field has a value."""

    required = set(required_fields)
    specs = [spec for spec in catalogue if spec.canonical in required]
    missing = [spec.canonical for spec in specs if not is_present(resolved.get(spec.canonical), spec.kind)]

    if missing:
        raise MissingFieldsError(
            missing=missing,
            required=[spec.label for spec in specs],
            received_keys=[str(key) for key in body.keys()],
        )


__all__ = [
    "InvalidBodyError",
    "MissingFieldsError",
    "is_present",
    "validate_required",
]

"""
Field descriptors for editable domain objects.

Each descriptor states how a field is labelled, ordered, edited and
validated. The table is declared statically; nothing is discovered by
reflection at runtime.
"""

from dataclasses import dataclass, field
from typing import Any

from mocktrade.core.constants import ACCOUNT_DESCRIPTION_MAX_CHARS, ACCOUNT_NAME_MAX_CHARS
from mocktrade.core.enums import EditState
from mocktrade.core.exceptions.trading import ValidationError
from mocktrade.core.types.financial import Money

# Hint keys
MAX_CHARS = "MAX_CHARS"
NOT_EMPTY = "NOT_EMPTY"
NON_NEGATIVE = "NON_NEGATIVE"
HIDE_CENTS = "HIDE_CENTS"
DISPLAY_LINES = "DISPLAY_LINES"


@dataclass(frozen=True)
class FieldDescriptor:
    """Presentation and validation metadata for a single field."""

    label: str
    order: int
    new_state: EditState = EditState.CHANGEABLE
    edit_state: EditState = EditState.CHANGEABLE
    hints: dict[str, Any] = field(default_factory=dict)


ACCOUNT_FIELDS: dict[str, FieldDescriptor] = {
    "name": FieldDescriptor(
        label="Name",
        order=1,
        hints={MAX_CHARS: ACCOUNT_NAME_MAX_CHARS, NOT_EMPTY: True},
    ),
    "description": FieldDescriptor(
        label="Description",
        order=2,
        hints={MAX_CHARS: ACCOUNT_DESCRIPTION_MAX_CHARS, DISPLAY_LINES: 2},
    ),
    "initial_balance": FieldDescriptor(
        label="Initial Balance",
        order=3,
        edit_state=EditState.READONLY,
        hints={NON_NEGATIVE: True, HIDE_CENTS: True},
    ),
    "strategy": FieldDescriptor(label="Strategy", order=4, edit_state=EditState.READONLY),
    "exclude_from_totals": FieldDescriptor(
        label="Exclude From Totals", order=5, edit_state=EditState.READONLY
    ),
}


def _check_hints(name: str, descriptor: FieldDescriptor, value: Any) -> list[str]:
    errors = []
    hints = descriptor.hints

    if hints.get(NOT_EMPTY) and (value is None or (isinstance(value, str) and not value.strip())):
        errors.append(f"{descriptor.label} must not be empty")

    max_chars = hints.get(MAX_CHARS)
    if max_chars is not None and isinstance(value, str) and len(value) > max_chars:
        errors.append(f"{descriptor.label} must be at most {max_chars} characters")

    if hints.get(NON_NEGATIVE) and isinstance(value, Money) and value.is_negative():
        errors.append(f"{descriptor.label} must not be negative")

    return errors


def validate_fields(obj: Any, descriptors: dict[str, FieldDescriptor]) -> None:
    """Validate an object against its descriptor table.

    Raises:
        ValidationError: Listing every failed hint
    """
    errors: list[str] = []
    for name, descriptor in sorted(descriptors.items(), key=lambda item: item[1].order):
        errors.extend(_check_hints(name, descriptor, getattr(obj, name, None)))
    if errors:
        raise ValidationError("; ".join(errors))


def editable_fields(descriptors: dict[str, FieldDescriptor], is_new: bool) -> list[str]:
    """Field names a caller may change, in display order."""
    state_of = (lambda d: d.new_state) if is_new else (lambda d: d.edit_state)
    return [
        name
        for name, descriptor in sorted(descriptors.items(), key=lambda item: item[1].order)
        if state_of(descriptor) == EditState.CHANGEABLE
    ]

"""
State enumerations for the scheduler and editable fields.
"""

from enum import StrEnum


class SchedulerState(StrEnum):
    """Poll scheduler states: IDLE -> ARMED -> FIRING -> IDLE."""

    IDLE = "idle"
    ARMED = "armed"
    FIRING = "firing"


class EditState(StrEnum):
    """How a field may be edited after creation."""

    CHANGEABLE = "changeable"
    READONLY = "readonly"
    HIDDEN = "hidden"

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Actor role used for authorization of administrative actions."""

    ADMIN = "ADMIN"
    EMPLOYEE = "EMPLOYEE"


class QRPointType(str, Enum):
    """Semantic type of a scannable point on the shop floor."""

    ENTRANCE = "ENTRANCE"
    EXIT = "EXIT"
    BREAK_AREA = "BREAK_AREA"
    LUNCH = "LUNCH"


class ShiftStatus(str, Enum):
    PLANNED = "PLANNED"
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class LunchStatus(str, Enum):
    """Lunch sub-state of a shift."""

    NOT_TAKEN = "NOT_TAKEN"
    IN_PROGRESS = "IN_PROGRESS"
    TAKEN = "TAKEN"
    SKIPPED = "SKIPPED"


class ScanAction(str, Enum):
    """What a scan does given the current shift state."""

    CLOCK_IN = "CLOCK_IN"
    CLOCK_OUT = "CLOCK_OUT"
    LUNCH_START = "LUNCH_START"
    LUNCH_END = "LUNCH_END"


class WorkLogStatus(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class PauseState(str, Enum):
    RUNNING = "RUNNING"
    PAUSED = "PAUSED"


class MachineStatus(str, Enum):
    WORKING = "WORKING"
    REQUIRES_ATTENTION = "REQUIRES_ATTENTION"
    REPAIR = "REPAIR"


class TaskStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"

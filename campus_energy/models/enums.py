"""Enum definitions stored as plain strings in the database."""

from enum import Enum


class UserRole(str, Enum):
    """Who is calling: campus administrator or student."""

    ADMIN = "admin"
    STUDENT = "student"


class LineStatus(str, Enum):
    """Derived state of a line (see services.line_status)."""

    ACTIVE = "active"
    IDLE = "idle"
    DISCONNECTED = "disconnected"


class CommandType(str, Enum):
    """Instruction an admin can queue for a line's device."""

    DISCONNECT = "disconnect"
    RECONNECT = "reconnect"


class CommandStatus(str, Enum):
    """Lifecycle of a queued command."""

    PENDING = "pending"
    EXECUTED = "executed"  # Claimed by a device poll
    SUPERSEDED = "superseded"  # Replaced by a newer command before any poll


class ControlAction(str, Enum):
    """Action a device is told to perform when it polls."""

    DISCONNECT = "disconnect"
    RECONNECT = "reconnect"
    NONE = "none"


class AlertType(str, Enum):
    """Alert taxonomy."""

    LOW_BALANCE = "low_balance"
    IDLE_LINE = "idle_line"
    OVERLOAD = "overload"
    DISCONNECTION = "disconnection"
    TOP_UP_CONFIRMATION = "top_up_confirmation"


class PaymentStatus(str, Enum):
    """Top-up payment state."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

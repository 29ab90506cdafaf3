"""Database models, imported here so Base.metadata sees every table."""

from campus_energy.models.alert import Alert
from campus_energy.models.block import Block
from campus_energy.models.control_command import ControlCommand
from campus_energy.models.device import Device
from campus_energy.models.energy_log import EnergyLog
from campus_energy.models.line import Line
from campus_energy.models.payment import Payment
from campus_energy.models.prediction import AiPrediction
from campus_energy.models.user import User

__all__ = [
    "AiPrediction",
    "Alert",
    "Block",
    "ControlCommand",
    "Device",
    "EnergyLog",
    "Line",
    "Payment",
    "User",
]

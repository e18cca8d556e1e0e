"""Operating values the indoor unit understands, keyed by register."""

from enum import IntEnum

__all__ = [
    "Power",
    "Mode",
    "FanSpeed",
    "VerticalAirflow",
    "VerticalSwing",
    "Powerful",
    "Economy",
    "EnergySavingFan",
    "OutdoorUnitLowNoise",
]


class Power(IntEnum):
    """Value of the power register."""

    ON = 0x0001
    OFF = 0x0000


class Mode(IntEnum):
    """Value of the operating mode register."""

    AUTO = 0x0000
    COOL = 0x0001
    DRY = 0x0002
    FAN = 0x0003
    HEAT = 0x0004


class FanSpeed(IntEnum):
    """Value of the fan speed register."""

    AUTO = 0x0000
    QUIET = 0x0002
    LOW = 0x0005
    MEDIUM = 0x0008
    HIGH = 0x000B


class VerticalAirflow(IntEnum):
    """Position of the vertical louvre."""

    POSITION_1 = 0x0001
    POSITION_2 = 0x0002
    POSITION_3 = 0x0003
    POSITION_4 = 0x0004
    POSITION_5 = 0x0005
    POSITION_6 = 0x0006


class VerticalSwing(IntEnum):
    """Whether the vertical louvre swings."""

    OFF = 0x0000
    ON = 0x0001


class Powerful(IntEnum):
    """Value of the powerful mode register."""

    ON = 0x0001
    OFF = 0x0003


class Economy(IntEnum):
    """Value of the economy mode register."""

    OFF = 0x0000
    ON = 0x0001


class EnergySavingFan(IntEnum):
    """Value of the energy saving fan register."""

    OFF = 0x0000
    ON = 0x0001


class OutdoorUnitLowNoise(IntEnum):
    """Value of the outdoor unit low noise register."""

    OFF = 0x0000
    ON = 0x0001
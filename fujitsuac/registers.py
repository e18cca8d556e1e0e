"""Register addresses of the indoor unit and a table of their values."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator

__all__ = ["Address", "Register", "RegistryTable"]


class Address(IntEnum):
    """Sixteen-bit register addresses."""

    INITIAL_0 = 0x0001
    INITIAL_1 = 0x0101

    INITIAL_2 = 0x0110
    INITIAL_3 = 0x0111
    INITIAL_4 = 0x0112
    INITIAL_5 = 0x0113
    INITIAL_6 = 0x0114
    INITIAL_7 = 0x0115
    INITIAL_8 = 0x0117
    INITIAL_9 = 0x011A
    INITIAL_10 = 0x011D
    INITIAL_11 = 0x0120
    INITIAL_12 = 0x0130
    INITIAL_13 = 0x0131
    INITIAL_14 = 0x0142
    INITIAL_15 = 0x0143

    INITIAL_16 = 0x0150
    INITIAL_17 = 0x0151
    INITIAL_18 = 0x0152
    INITIAL_19 = 0x0153
    INITIAL_20 = 0x0154
    INITIAL_21 = 0x0155
    INITIAL_22 = 0x0156
    INITIAL_23 = 0x0170
    INITIAL_24 = 0x0171
    INITIAL_25 = 0x0193

    POWER = 0x1000
    MODE = 0x1001
    SETPOINT_TEMP = 0x1002
    FAN = 0x1003
    VERTICAL_AIRFLOW = 0x1010
    VERTICAL_SWING = 0x1011
    REGISTER_7 = 0x10A0
    REGISTER_8 = 0x1022
    REGISTER_9 = 0x1023
    REGISTER_10 = 0x10A9
    REGISTER_11 = 0x1031
    ACTUAL_TEMP = 0x1033
    REGISTER_13 = 0x1034

    ECONOMY_MODE = 0x1100
    REGISTER_15 = 0x1101
    REGISTER_16 = 0x1102
    REGISTER_17 = 0x1103
    REGISTER_18 = 0x1104
    REGISTER_19 = 0x1105
    REGISTER_20 = 0x1106
    REGISTER_21 = 0x1107
    ENERGY_SAVING_FAN = 0x1108
    REGISTER_23 = 0x1109
    POWERFUL = 0x1120
    OUTDOOR_UNIT_LOW_NOISE = 0x1121
    REGISTER_26 = 0x1144
    REGISTER_27 = 0x1200
    REGISTER_28 = 0x1201
    REGISTER_29 = 0x1202
    REGISTER_30 = 0x1203
    REGISTER_31 = 0x1204
    REGISTER_32 = 0x1141

    REGISTER_33 = 0x1400
    REGISTER_34 = 0x1401
    REGISTER_35 = 0x1402
    REGISTER_36 = 0x1403
    REGISTER_37 = 0x1404
    REGISTER_38 = 0x1405
    REGISTER_39 = 0x1406
    REGISTER_40 = 0x140E
    REGISTER_41 = 0x2000
    REGISTER_42 = 0x2020
    REGISTER_43 = 0x2021
    REGISTER_44 = 0xF001


@dataclass
class Register:
    """One register: its address, current value and whether it may be written."""

    address: Address
    value: int = 0
    writable: bool = False


class RegistryTable:
    """All known registers, ordered by address, each starting at zero."""

    def __init__(self) -> None:
        self._registers: dict[Address, Register] = {
            address: Register(address) for address in sorted(Address)
        }

    def get_register(self, address: int) -> Register:
        """Return the register at ``address``; raise KeyError if there is none."""
        try:
            return self._registers[address]
        except KeyError:
            raise KeyError(f"unknown register address 0x{int(address):04X}") from None

    def __iter__(self) -> Iterator[Register]:
        return iter(self._registers.values())

    def __len__(self) -> int:
        return len(self._registers)
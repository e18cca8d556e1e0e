"""Controller side of the indoor unit's serial protocol."""

from __future__ import annotations

import re
import time
from enum import IntEnum
from typing import Callable, Optional

from .framing import FrameBuffer, Uart, frame_checksum
from .modes import (
    Economy,
    EnergySavingFan,
    FanSpeed,
    Mode,
    OutdoorUnitLowNoise,
    Power,
    Powerful,
    VerticalAirflow,
    VerticalSwing,
)
from .registers import Address, Register, RegistryTable

__all__ = ["FrameType", "FujitsuController", "to_hex_str"]

RESPONSE_TIMEOUT_MS = 200
REQUEST_INTERVAL_MS = 400
MIN_SETPOINT = 180
MAX_SETPOINT = 300

_INIT_1_REQUEST = bytes([0x00, 0x00, 0x00, 0x00, 0x04, 0x00, 0x00, 0x00, 0x00, 0xFF, 0xFB])
_INIT_2_REQUEST = bytes([0x01, 0x00, 0x00, 0x00, 0x04, 0x00, 0x04, 0x00, 0x01, 0xFF, 0xF5])
_INIT_1_RESPONSE = bytes([0x00, 0x00, 0x00, 0x00, 0x01, 0x01, 0xFF, 0xFD])
_INIT_2_RESPONSE = bytes([0x01, 0x00, 0x00, 0x00, 0x01, 0x01, 0xFF, 0xFC])

_LEADING_NUMBER = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


class FrameType(IntEnum):
    """The last kind of frame the controller sent."""

    NONE = -1
    INIT_1 = 0
    INIT_2 = 1
    INITIAL_REGISTRIES_1 = 2
    INITIAL_REGISTRIES_2 = 3
    INITIAL_REGISTRIES_3 = 4
    FRAME_A = 5
    FRAME_B = 6
    FRAME_C = 7
    SEND_REGISTRIES = 8
    CHECK_REGISTRIES = 9


_READ_FRAMES: dict[FrameType, tuple[Address, ...]] = {
    FrameType.INITIAL_REGISTRIES_1: (Address.INITIAL_0, Address.INITIAL_1),
    FrameType.INITIAL_REGISTRIES_2: (
        Address.INITIAL_2,
        Address.INITIAL_3,
        Address.INITIAL_4,
        Address.INITIAL_5,
        Address.INITIAL_6,
        Address.INITIAL_7,
        Address.INITIAL_8,
        Address.INITIAL_9,
        Address.INITIAL_10,
        Address.INITIAL_11,
        Address.INITIAL_12,
        Address.INITIAL_13,
        Address.INITIAL_14,
        Address.INITIAL_15,
    ),
    FrameType.INITIAL_REGISTRIES_3: (
        Address.INITIAL_16,
        Address.INITIAL_17,
        Address.INITIAL_18,
        Address.INITIAL_19,
        Address.INITIAL_20,
        Address.INITIAL_21,
        Address.INITIAL_22,
        Address.INITIAL_23,
        Address.INITIAL_24,
        Address.INITIAL_25,
    ),
    FrameType.FRAME_A: (
        Address.POWER,
        Address.MODE,
        Address.SETPOINT_TEMP,
        Address.FAN,
        Address.VERTICAL_AIRFLOW,
        Address.VERTICAL_SWING,
        Address.REGISTER_7,
        Address.REGISTER_8,
        Address.REGISTER_9,
        Address.REGISTER_10,
        Address.REGISTER_11,
        Address.ACTUAL_TEMP,
        Address.REGISTER_13,
    ),
    FrameType.FRAME_B: (
        Address.ECONOMY_MODE,
        Address.REGISTER_15,
        Address.REGISTER_16,
        Address.REGISTER_17,
        Address.REGISTER_18,
        Address.REGISTER_19,
        Address.REGISTER_20,
        Address.REGISTER_21,
        Address.ENERGY_SAVING_FAN,
        Address.REGISTER_23,
        Address.POWERFUL,
        Address.OUTDOOR_UNIT_LOW_NOISE,
        Address.REGISTER_26,
        Address.REGISTER_27,
        Address.REGISTER_28,
        Address.REGISTER_29,
        Address.REGISTER_30,
        Address.REGISTER_31,
        Address.REGISTER_32,
    ),
    FrameType.FRAME_C: (
        Address.REGISTER_33,
        Address.REGISTER_34,
        Address.REGISTER_35,
        Address.REGISTER_36,
        Address.REGISTER_37,
        Address.REGISTER_38,
        Address.REGISTER_39,
        Address.REGISTER_40,
        Address.REGISTER_41,
        Address.REGISTER_42,
        Address.REGISTER_43,
        Address.REGISTER_44,
    ),
}

_NEXT_READ: dict[FrameType, FrameType] = {
    FrameType.INIT_2: FrameType.INITIAL_REGISTRIES_1,
    FrameType.INITIAL_REGISTRIES_1: FrameType.INITIAL_REGISTRIES_2,
    FrameType.INITIAL_REGISTRIES_2: FrameType.INITIAL_REGISTRIES_3,
    FrameType.INITIAL_REGISTRIES_3: FrameType.FRAME_A,
    FrameType.FRAME_C: FrameType.FRAME_A,
    FrameType.FRAME_B: FrameType.FRAME_C,
}


def _monotonic_ms() -> int:
    return time.monotonic_ns() // 1_000_000


def to_hex_str(data: bytes) -> str:
    """Render bytes as upper-case hex pairs separated by spaces."""
    return " ".join(f"{byte:02X}" for byte in data)


def _parse_leading_float(text: str) -> float:
    match = _LEADING_NUMBER.match(text)
    return float(match.group(1)) if match else 0.0


class FujitsuController:
    """Polls the indoor unit's registers and writes requested changes.

    ``on_register_change`` is called with each register whose value changed;
    ``on_debug`` is called with a name and a message for diagnostics.
    """

    def __init__(self, uart: Uart, clock: Optional[Callable[[], int]] = None) -> None:
        self.uart = uart
        self.registry_table = RegistryTable()
        self.on_register_change: Optional[Callable[[Register], None]] = None
        self.on_debug: Optional[Callable[[str, str], None]] = None
        self._clock = clock or _monotonic_ms
        self._buffer = FrameBuffer(uart, self._clock)
        self._last_request_millis = 0
        self._response_received = True
        self._no_response_notified = False
        self._initialized = False
        self._terminated = False
        self._last_frame_sent = FrameType.NONE
        self._pending: list[tuple[Address, int]] = []

    def setup(self) -> None:
        """Allow the controller to start talking to the unit."""
        self._initialized = True

    def loop(self) -> None:
        """Send the next request when due and handle any received frames."""
        if not self._initialized:
            return
        self._send_request()
        self._buffer.loop(self._on_frame)

    def is_power_on(self) -> bool:
        """Whether the last known power register value is on."""
        return self.registry_table.get_register(Address.POWER).value == Power.ON

    def set_power(self, power: Power) -> None:
        self._pending = [(Address.POWER, int(power))]

    def set_mode(self, mode: Mode) -> None:
        self._pending = [(Address.MODE, int(mode))]

    def set_fan_speed(self, fan_speed: FanSpeed) -> None:
        self._pending = [(Address.FAN, int(fan_speed))]

    def set_vertical_airflow(self, vertical_airflow: VerticalAirflow) -> None:
        """Stop the swing and move the louvre to a fixed position."""
        self._pending = [
            (Address.VERTICAL_SWING, int(VerticalSwing.OFF)),
            (Address.VERTICAL_AIRFLOW, int(vertical_airflow)),
        ]

    def set_vertical_swing(self, vertical_swing: VerticalSwing) -> None:
        self._pending = [(Address.VERTICAL_SWING, int(vertical_swing))]

    def set_powerful(self, powerful: Powerful) -> None:
        self._pending = [(Address.POWERFUL, int(powerful))]

    def set_economy(self, economy: Economy) -> None:
        self._pending = [(Address.ECONOMY_MODE, int(economy))]

    def set_energy_saving_fan(self, energy_saving_fan: EnergySavingFan) -> None:
        self._pending = [(Address.ENERGY_SAVING_FAN, int(energy_saving_fan))]

    def set_outdoor_unit_low_noise(self, outdoor_unit_low_noise: OutdoorUnitLowNoise) -> None:
        self._pending = [(Address.OUTDOOR_UNIT_LOW_NOISE, int(outdoor_unit_low_noise))]

    def set_temp(self, temp: str | float) -> None:
        """Request a setpoint in degrees, rounded to 0.5 and kept within 18..30.

        A string is read up to the first character that is not part of a
        number; a string with no leading number counts as zero.
        """
        if isinstance(temp, (int, float)):
            number = float(temp)
        else:
            number = _parse_leading_float(str(temp))
        number = min(max(number, -1000.0), 1000.0)
        tenths = int(number * 10 + 0.5)
        tenths = (tenths + 2) // 5 * 5
        tenths = min(max(tenths, MIN_SETPOINT), MAX_SETPOINT)
        self._pending = [(Address.SETPOINT_TEMP, tenths)]

    def _debug(self, name: str, message: str) -> None:
        if self.on_debug is not None:
            self.on_debug(name, message)

    def _send_request(self) -> None:
        if self._terminated:
            return

        now = self._clock()
        elapsed = now - self._last_request_millis

        if not self._response_received and elapsed >= RESPONSE_TIMEOUT_MS:
            if self._last_frame_sent in (FrameType.NONE, FrameType.INIT_1):
                # Handshake not established yet; it starts over.
                self._last_frame_sent = FrameType.NONE
                self._response_received = True
            elif not self._no_response_notified:
                self._no_response_notified = True
                self._debug("error", "No response for 200 ms")
            return

        if not self._response_received:
            return
        if self._last_request_millis != 0 and elapsed < REQUEST_INTERVAL_MS:
            return

        self._last_request_millis = now
        last = self._last_frame_sent

        if last is FrameType.NONE:
            self._send_handshake(FrameType.INIT_1, _INIT_1_REQUEST)
        elif last is FrameType.INIT_1:
            self._send_handshake(FrameType.INIT_2, _INIT_2_REQUEST)
        elif last in (FrameType.FRAME_A, FrameType.CHECK_REGISTRIES):
            if self._pending:
                self._send_registries()
            else:
                self._request_registries(FrameType.FRAME_B, _READ_FRAMES[FrameType.FRAME_B])
        elif last is FrameType.SEND_REGISTRIES:
            addresses = tuple(address for address, _ in self._pending)
            self._pending = []
            self._request_registries(FrameType.CHECK_REGISTRIES, addresses)
        else:
            frame_type = _NEXT_READ[last]
            self._request_registries(frame_type, _READ_FRAMES[frame_type])

    def _send_handshake(self, frame_type: FrameType, payload: bytes) -> None:
        self._last_frame_sent = frame_type
        self._response_received = False
        self.uart.write(payload)

    def _request_registries(self, frame_type: FrameType, addresses: tuple[Address, ...]) -> None:
        self._last_frame_sent = frame_type
        self._response_received = False

        body = bytearray([0x03, 0x00, 0x00, 0x00, (2 * len(addresses)) & 0xFF])
        for address in addresses:
            body += int(address).to_bytes(2, "big")
        body += frame_checksum(body).to_bytes(2, "big")
        self.uart.write(bytes(body))

    def _send_registries(self) -> None:
        self._last_frame_sent = FrameType.SEND_REGISTRIES
        self._response_received = False

        length = (4 * len(self._pending)) & 0xFF
        body = bytearray([0x02, 0x00, 0x00, 0x00, length])
        address_sum = 0
        for address, value in self._pending:
            address_bytes = int(address).to_bytes(2, "big")
            address_sum += sum(address_bytes)
            body += address_bytes
            body += (value & 0xFFFF).to_bytes(2, "big")
        # Write frames are checksummed over the addresses only, seeded with 0x03.
        checksum = (0xFFFF - 0x03 - length - address_sum) & 0xFFFF
        body += checksum.to_bytes(2, "big")
        self.uart.write(bytes(body))

    def _on_frame(self, frame: bytes, is_valid: bool) -> None:
        if not self._initialized:
            return

        if not is_valid:
            self._debug("error", to_hex_str(frame))
            return

        if self._terminated:
            self._debug("after_termination", to_hex_str(frame))
            return

        self._no_response_notified = False

        if self._last_frame_sent is FrameType.INIT_1:
            self._check_handshake(frame, _INIT_1_RESPONSE)
            return

        if self._last_frame_sent is FrameType.INIT_2:
            self._check_handshake(frame, _INIT_2_RESPONSE)
            return

        if frame[0] == 0x03:
            if frame[5] != 0x01:
                self._debug("error", to_hex_str(frame))
            self._response_received = True
            self._update_registries(frame)
            return

        if frame[0] == 0x02:
            if frame[4] != 0x01:
                self._debug("error", to_hex_str(frame))
                return
            self._response_received = True

    def _check_handshake(self, frame: bytes, expected: bytes) -> None:
        if len(frame) != len(expected) or frame > expected:
            self._debug("error", to_hex_str(frame))
            self._debug("error", "terminated")
            self._terminated = True
        else:
            self._response_received = True

    def _update_registries(self, frame: bytes) -> None:
        for i in range(frame[4] // 4):
            offset = 6 + i * 4
            address = int.from_bytes(frame[offset:offset + 2], "big")
            value = int.from_bytes(frame[offset + 2:offset + 4], "big")
            register = self.registry_table.get_register(address)

            if register.value != value:
                self._debug(
                    "changed",
                    f"{int(register.address):04X} | {register.value:04X} -> {value:04X}",
                )
                register.value = value
                if self.on_register_change is not None:
                    self.on_register_change(register)
"""A stand-in for the indoor unit that answers a controller over a UART."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .framing import FrameBuffer, Uart, frame_checksum
from .registers import Address, RegistryTable

__all__ = ["DummyUnit"]

log = logging.getLogger(__name__)

_INIT_RESPONSE = bytes([0x00, 0x00, 0x00, 0x00, 0x01, 0x01, 0xFF, 0xFD])
_CONNECT_RESPONSE = bytes([0x01, 0x00, 0x00, 0x00, 0x01, 0x01, 0xFF, 0xFC])
_WRITE_RESPONSE = bytes([0x02, 0x00, 0x00, 0x00, 0x01, 0x01, 0xFF, 0xFB])

_DEFAULTS: tuple[tuple[Address, int], ...] = (
    (Address.INITIAL_0, 0x0000),
    (Address.INITIAL_1, 0x0000),
    (Address.INITIAL_2, 0x0001),
    (Address.INITIAL_3, 0x0001),
    (Address.INITIAL_4, 0x0001),
    (Address.INITIAL_5, 0x0001),
    (Address.INITIAL_6, 0x0001),
    (Address.INITIAL_7, 0x0001),
    (Address.INITIAL_8, 0x0001),
    (Address.INITIAL_9, 0x0001),
    (Address.INITIAL_10, 0x0001),
    (Address.INITIAL_11, 0x0001),
    (Address.INITIAL_12, 0x0006),
    (Address.INITIAL_13, 0x0001),
    (Address.INITIAL_14, 0x0000),
    (Address.INITIAL_15, 0x0000),
    (Address.INITIAL_16, 0x0001),
    (Address.INITIAL_17, 0x0001),
    (Address.INITIAL_18, 0x0000),
    (Address.INITIAL_19, 0x0001),
    (Address.INITIAL_20, 0x0000),
    (Address.INITIAL_21, 0x0000),
    (Address.INITIAL_22, 0x0000),
    (Address.INITIAL_23, 0x0001),
    (Address.INITIAL_24, 0x0001),
    (Address.INITIAL_25, 0x0000),
    (Address.POWER, 0x0001),
    (Address.MODE, 0x0001),
    (Address.SETPOINT_TEMP, 0x00FA),
    (Address.FAN, 0x0002),
    (Address.VERTICAL_AIRFLOW, 0x0001),
    (Address.VERTICAL_SWING, 0x0000),
    (Address.REGISTER_7, 0x0001),
    (Address.REGISTER_8, 0xFFFF),
    (Address.REGISTER_9, 0xFFFF),
    (Address.REGISTER_10, 0xFFFF),
    (Address.REGISTER_11, 0x0181),
    (Address.ACTUAL_TEMP, 0x1B71),
    (Address.REGISTER_13, 0x0000),
    (Address.ECONOMY_MODE, 0x0000),
    (Address.REGISTER_15, 0x0000),
    (Address.REGISTER_16, 0xFFFF),
    (Address.REGISTER_17, 0xFFFF),
    (Address.REGISTER_18, 0xFFFF),
    (Address.REGISTER_19, 0xFFFF),
    (Address.REGISTER_20, 0xFFFF),
    (Address.REGISTER_21, 0xFFFF),
    (Address.ENERGY_SAVING_FAN, 0x0001),
    (Address.REGISTER_23, 0x0000),
    (Address.POWERFUL, 0x0000),
    (Address.OUTDOOR_UNIT_LOW_NOISE, 0x0000),
    (Address.REGISTER_26, 0xFFFF),
    (Address.REGISTER_27, 0x0000),
    (Address.REGISTER_28, 0x0000),
    (Address.REGISTER_29, 0x0000),
    (Address.REGISTER_30, 0x0000),
    (Address.REGISTER_31, 0x0000),
    (Address.REGISTER_32, 0xFFFF),
    (Address.REGISTER_33, 0x0000),
    (Address.REGISTER_34, 0x0000),
    (Address.REGISTER_35, 0x0000),
    (Address.REGISTER_36, 0x0000),
    (Address.REGISTER_37, 0x0000),
    (Address.REGISTER_38, 0x0000),
    (Address.REGISTER_39, 0x0000),
    (Address.REGISTER_40, 0x0000),
    (Address.REGISTER_41, 0xFFFF),
    (Address.REGISTER_42, 0x1964),
    (Address.REGISTER_43, 0x0000),
    (Address.REGISTER_44, 0x0000),
)


class DummyUnit:
    """Answers handshake, read and write frames the way an indoor unit does."""

    def __init__(self, uart: Uart, clock: Optional[Callable[[], int]] = None) -> None:
        self.uart = uart
        self.registry_table = RegistryTable()
        self._buffer = FrameBuffer(uart, clock)

    def setup(self) -> None:
        """Load the default register values."""
        for address, value in _DEFAULTS:
            self.registry_table.get_register(address).value = value
        log.info("DummyUnit setup done")

    def loop(self) -> None:
        """Read pending bytes and answer every complete frame."""
        self._buffer.loop(self._on_frame)

    def _on_frame(self, frame: bytes, is_valid: bool) -> None:
        kind = frame[0]
        if kind == 0x00:
            log.info("Controller initialized connection")
            self.uart.write(_INIT_RESPONSE)
        elif kind == 0x01:
            log.info("Controller connected")
            self.uart.write(_CONNECT_RESPONSE)
        elif kind == 0x02:
            self._set_registry_values(frame)
        elif kind == 0x03:
            self._send_registry_values(frame)

    def _set_registry_values(self, frame: bytes) -> None:
        log.info(" ".join(f"{byte:X}" for byte in frame))
        for i in range(frame[4] // 4):
            offset = 5 + i * 4
            address = int.from_bytes(frame[offset:offset + 2], "big")
            value = int.from_bytes(frame[offset + 2:offset + 4], "big")
            self.registry_table.get_register(address).value = value
        self.uart.write(_WRITE_RESPONSE)

    def _send_registry_values(self, frame: bytes) -> None:
        count = frame[4] // 2
        body = bytearray([0x03, 0x00, 0x00, 0x00, (4 * count + 1) & 0xFF, 0x01])
        for i in range(count):
            offset = 5 + i * 2
            address_bytes = frame[offset:offset + 2]
            register = self.registry_table.get_register(int.from_bytes(address_bytes, "big"))
            body += address_bytes
            body += register.value.to_bytes(2, "big")
        body += frame_checksum(body).to_bytes(2, "big")
        self.uart.write(bytes(body))
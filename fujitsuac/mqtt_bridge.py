"""Publishing the indoor unit's state over MQTT and taking commands from it."""

from __future__ import annotations

import json
import logging
import time
from enum import IntEnum
from typing import Callable, Optional, Protocol, TypeVar, Union

from .controller import FujitsuController
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
from .registers import Address, Register

__all__ = ["MqttBridge", "address_to_string", "value_to_string", "string_to_enum"]

log = logging.getLogger(__name__)

POWER_ON_WAIT_MS = 2000
ACTUAL_TEMP_OFFSET = 5025

E = TypeVar("E", bound=IntEnum)


class MqttClient(Protocol):
    def publish(self, topic: str, payload: str, retain: bool = False) -> object: ...

    def subscribe(self, topic: str) -> object: ...


_ADDRESS_NAMES: dict[Address, str] = {
    Address.POWER: "power",
    Address.MODE: "mode",
    Address.FAN: "fan",
    Address.VERTICAL_SWING: "vertical_swing",
    Address.VERTICAL_AIRFLOW: "vertical_airflow",
    Address.POWERFUL: "powerful",
    Address.ECONOMY_MODE: "economy_mode",
    Address.ENERGY_SAVING_FAN: "energy_saving_fan",
    Address.OUTDOOR_UNIT_LOW_NOISE: "outdoor_unit_low_noise",
    Address.SETPOINT_TEMP: "temp",
    Address.ACTUAL_TEMP: "actual_temp",
}

_ON_OFF = {"on": 0x0001}

_PARSERS: dict[type, dict[str, IntEnum]] = {
    Power: {"on": Power.ON},
    Mode: {
        "cool": Mode.COOL,
        "dry": Mode.DRY,
        "fan_only": Mode.FAN,
        "heat": Mode.HEAT,
    },
    FanSpeed: {
        "auto": FanSpeed.AUTO,
        "quiet": FanSpeed.QUIET,
        "low": FanSpeed.LOW,
        "medium": FanSpeed.MEDIUM,
        "high": FanSpeed.HIGH,
    },
    VerticalAirflow: {str(int(position)): position for position in VerticalAirflow},
    VerticalSwing: {"on": VerticalSwing.ON},
    Powerful: {"on": Powerful.ON},
    Economy: {"on": Economy.ON},
    EnergySavingFan: {"on": EnergySavingFan.ON},
    OutdoorUnitLowNoise: {"on": OutdoorUnitLowNoise.ON},
}

_VALUE_NAMES: dict[Address, dict[int, str]] = {
    Address.POWER: {Power.ON: "on", Power.OFF: "off"},
    Address.MODE: {
        Mode.AUTO: "auto",
        Mode.COOL: "cool",
        Mode.DRY: "dry",
        Mode.FAN: "fan_only",
        Mode.HEAT: "heat",
    },
    Address.FAN: {
        FanSpeed.AUTO: "auto",
        FanSpeed.QUIET: "quiet",
        FanSpeed.LOW: "low",
        FanSpeed.MEDIUM: "medium",
        FanSpeed.HIGH: "high",
    },
    Address.VERTICAL_SWING: {VerticalSwing.ON: "on", VerticalSwing.OFF: "off"},
    Address.VERTICAL_AIRFLOW: {position: str(int(position)) for position in VerticalAirflow},
    Address.POWERFUL: {Powerful.ON: "on", Powerful.OFF: "off"},
    Address.ECONOMY_MODE: {Economy.ON: "on", Economy.OFF: "off"},
    Address.ENERGY_SAVING_FAN: {EnergySavingFan.ON: "on", EnergySavingFan.OFF: "off"},
    Address.OUTDOOR_UNIT_LOW_NOISE: {
        OutdoorUnitLowNoise.ON: "on",
        OutdoorUnitLowNoise.OFF: "off",
    },
}

_SWITCHES = (
    Address.VERTICAL_AIRFLOW,
    Address.VERTICAL_SWING,
    Address.POWERFUL,
    Address.ECONOMY_MODE,
    Address.ENERGY_SAVING_FAN,
    Address.OUTDOOR_UNIT_LOW_NOISE,
)


def _monotonic_ms() -> int:
    return time.monotonic_ns() // 1_000_000


def address_to_string(address: int) -> str:
    """Name used for a register in MQTT topics."""
    try:
        return _ADDRESS_NAMES[Address(address)]
    except (KeyError, ValueError):
        return f"address_{int(address) & 0xFFFF:04X}"


def _tenths(whole: int, rest: int, negative: bool) -> str:
    return f"{'-' if negative else ''}{whole}.{rest}"


def value_to_string(register: Register) -> str:
    """Render a register's value as it is published."""
    value = register.value
    names = _VALUE_NAMES.get(register.address)
    if names is not None:
        return names.get(value, "unknown")
    if register.address == Address.SETPOINT_TEMP:
        return f"{value // 10}.{value % 10}"
    if register.address == Address.ACTUAL_TEMP:
        diff = value - ACTUAL_TEMP_OFFSET
        whole, rest = divmod(abs(diff), 100)
        return _tenths(whole, rest, diff < 0)
    return f"{value & 0xFFFF:04X}"


def string_to_enum(default: E, value: str) -> E:
    """Parse a command payload into the enum of ``default``, or return ``default``."""
    try:
        parser = _PARSERS[type(default)]
    except KeyError:
        raise TypeError(f"no payload parser for {type(default).__name__}") from None
    return parser.get(value, default)  # type: ignore[return-value]


class MqttBridge:
    """Connects a controller to an MQTT broker with Home Assistant discovery.

    ``client`` needs ``publish(topic, payload, retain=False)`` and
    ``subscribe(topic)``; incoming messages are to be passed to
    :meth:`on_message`. ``restart`` is called when a restart is requested.
    """

    def __init__(
        self,
        client: MqttClient,
        controller: FujitsuController,
        unique_id: str,
        name: str,
        clock: Optional[Callable[[], int]] = None,
        restart: Optional[Callable[[], None]] = None,
    ) -> None:
        self.client = client
        self.controller = controller
        self.unique_id = unique_id
        self.name = name
        self._clock = clock or _monotonic_ms
        self._restart = restart
        self._waiting_power_on_from: Optional[int] = None
        self._mode_after_powering = Mode.AUTO

    def _topic(self, *parts: str) -> str:
        return "/".join(("fujitsu", self.unique_id, *parts))

    def _device(self) -> dict:
        return {
            "identifiers": [self.unique_id],
            "manufacturer": "FujitsuAC",
            "model": "Fujitsu AC",
            "name": self.name,
        }

    def _publish_config(self, topic: str, config: dict) -> None:
        config["device"] = self._device()
        self.client.publish(topic, json.dumps(config), retain=True)

    def setup(self) -> None:
        """Hook into the controller, announce the device and subscribe to commands."""
        self.controller.on_register_change = self._on_register_change
        self.controller.on_debug = self._debug

        log.info("MQTT Connected")
        self.client.publish(self._topic("status"), "online", retain=True)

        uid = self.unique_id
        self._publish_config(
            f"homeassistant/climate/{uid}_climate/config",
            {
                "name": "climate",
                "unique_id": f"{uid}_climate",
                "icon": "mdi:air-conditioner",
                "mode_command_topic": self._topic("set", "mode"),
                "mode_state_topic": self._topic("state", "mode"),
                "temperature_command_topic": self._topic("set", "temp"),
                "temperature_state_topic": self._topic("state", "temp"),
                "fan_mode_command_topic": self._topic("set", "fan"),
                "fan_mode_state_topic": self._topic("state", "fan"),
                "current_temperature_topic": self._topic("state", "actual_temp"),
                "min_temp": 18,
                "max_temp": 30,
                "temp_step": 0.5,
                "modes": ["off", "auto", "cool", "dry", "fan_only", "heat"],
                "fan_modes": ["auto", "quiet", "low", "medium", "high"],
            },
        )

        for address in _SWITCHES:
            prop = address_to_string(address)
            config = {
                "name": prop,
                "unique_id": f"{uid}_{prop}",
                "state_topic": self._topic("state", prop),
                "command_topic": self._topic("set", prop),
            }
            if address == Address.VERTICAL_AIRFLOW:
                config["options"] = ["1", "2", "3", "4", "5", "6"]
                component = "select"
            else:
                config["payload_on"] = "on"
                config["payload_off"] = "off"
                component = "switch"
            self._publish_config(f"homeassistant/{component}/{uid}_{prop}/config", config)

        self._publish_config(
            f"homeassistant/button/{uid}_restart/config",
            {
                "name": "restart",
                "unique_id": f"{uid}_restart",
                "command_topic": self._topic("set", "restart"),
                "payload_press": "restart",
            },
        )

        self.client.subscribe(self._topic("#"))

    def loop(self) -> None:
        """Apply a mode that was waiting for the unit to power on."""
        if self._waiting_power_on_from is None:
            return
        if self._clock() - self._waiting_power_on_from < POWER_ON_WAIT_MS:
            return
        if self.controller.is_power_on():
            self.controller.set_mode(self._mode_after_powering)
        else:
            self._debug("error", "Power on not succeded")
        self._waiting_power_on_from = None

    def on_message(self, topic: str, payload: Union[str, bytes]) -> None:
        """Handle a message on ``fujitsu/<id>/set/<property>``."""
        if isinstance(payload, (bytes, bytearray)):
            payload = bytes(payload).decode("utf-8", errors="replace")
        parts = topic.rsplit("/", 2)
        if len(parts) < 2 or parts[-2] != "set":
            return
        prop = parts[-1]
        controller = self.controller

        if prop == "restart":
            if self._restart is not None:
                self._restart()
            else:
                log.warning("restart requested but no restart handler is set")
            return

        if prop == "mode":
            if payload == "off":
                controller.set_power(Power.OFF)
                return
            mode = string_to_enum(Mode.AUTO, payload)
            if not controller.is_power_on():
                controller.set_power(Power.ON)
                self._waiting_power_on_from = self._clock()
                self._mode_after_powering = mode
                return
            controller.set_mode(mode)
            return

        if prop == "temp":
            controller.set_temp(payload)
            return

        handlers: dict[str, tuple[Callable[[IntEnum], None], IntEnum]] = {
            "power": (controller.set_power, Power.OFF),
            "fan": (controller.set_fan_speed, FanSpeed.AUTO),
            "vertical_airflow": (controller.set_vertical_airflow, VerticalAirflow.POSITION_1),
            "vertical_swing": (controller.set_vertical_swing, VerticalSwing.OFF),
            "powerful": (controller.set_powerful, Powerful.OFF),
            "economy_mode": (controller.set_economy, Economy.OFF),
            "energy_saving_fan": (controller.set_energy_saving_fan, EnergySavingFan.OFF),
            "outdoor_unit_low_noise": (
                controller.set_outdoor_unit_low_noise,
                OutdoorUnitLowNoise.OFF,
            ),
        }
        handler = handlers.get(prop)
        if handler is not None:
            setter, default = handler
            setter(string_to_enum(default, payload))

    def _on_register_change(self, register: Register) -> None:
        self.client.publish(
            self._topic("state", address_to_string(register.address)),
            value_to_string(register),
            retain=True,
        )

    def _debug(self, name: str, message: str) -> None:
        self.client.publish(self._topic("debug", name), message)
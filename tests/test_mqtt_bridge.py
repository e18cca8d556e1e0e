import json

import pytest

from fujitsuac.modes import (
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
from fujitsuac.mqtt_bridge import (
    MqttBridge,
    address_to_string,
    string_to_enum,
    value_to_string,
)
from fujitsuac.registers import Address, Register


class FakeClient:
    def __init__(self):
        self.published = []
        self.subscribed = []

    def publish(self, topic, payload, retain=False):
        self.published.append((topic, payload, retain))

    def subscribe(self, topic):
        self.subscribed.append(topic)

    def payload_for(self, topic):
        return [p for t, p, _ in self.published if t == topic]


class FakeController:
    def __init__(self, power_on=True):
        self.power_on = power_on
        self.calls = []
        self.on_register_change = None
        self.on_debug = None

    def is_power_on(self):
        return self.power_on

    def _record(name):
        def method(self, value):
            self.calls.append((name, value))

        return method

    set_power = _record("power")
    set_mode = _record("mode")
    set_fan_speed = _record("fan")
    set_vertical_airflow = _record("vertical_airflow")
    set_vertical_swing = _record("vertical_swing")
    set_powerful = _record("powerful")
    set_economy = _record("economy")
    set_energy_saving_fan = _record("energy_saving_fan")
    set_outdoor_unit_low_noise = _record("outdoor_unit_low_noise")
    set_temp = _record("temp")


class Clock:
    def __init__(self):
        self.now = 1000

    def __call__(self):
        return self.now


@pytest.fixture
def parts():
    client = FakeClient()
    controller = FakeController()
    clock = Clock()
    restarts = []
    bridge = MqttBridge(client, controller, "abc", "Living room", clock, lambda: restarts.append(1))
    return bridge, client, controller, clock, restarts


def test_setup_announces_and_subscribes(parts):
    bridge, client, controller, _, _ = parts
    bridge.setup()
    assert client.published[0] == ("fujitsu/abc/status", "online", True)
    assert client.subscribed == ["fujitsu/abc/#"]
    climate = json.loads(client.payload_for("homeassistant/climate/abc_climate/config")[0])
    assert climate["unique_id"] == "abc_climate"
    assert climate["mode_command_topic"] == "fujitsu/abc/set/mode"
    assert climate["modes"] == ["off", "auto", "cool", "dry", "fan_only", "heat"]
    assert climate["device"]["name"] == "Living room"
    assert controller.on_register_change is not None


def test_setup_publishes_select_switches_and_button(parts):
    bridge, client, _, _, _ = parts
    bridge.setup()
    select = json.loads(client.payload_for("homeassistant/select/abc_vertical_airflow/config")[0])
    assert select["options"] == ["1", "2", "3", "4", "5", "6"]
    switch = json.loads(client.payload_for("homeassistant/switch/abc_powerful/config")[0])
    assert switch["payload_on"] == "on"
    assert switch["command_topic"] == "fujitsu/abc/set/powerful"
    button = json.loads(client.payload_for("homeassistant/button/abc_restart/config")[0])
    assert button["payload_press"] == "restart"
    assert all(retain for _, _, retain in client.published)


def test_register_change_published_retained(parts):
    bridge, client, controller, _, _ = parts
    bridge.setup()
    controller.on_register_change(Register(Address.MODE, int(Mode.HEAT)))
    assert client.published[-1] == ("fujitsu/abc/state/mode", "heat", True)


def test_debug_published_not_retained(parts):
    bridge, client, controller, _, _ = parts
    bridge.setup()
    controller.on_debug("error", "boom")
    assert client.published[-1] == ("fujitsu/abc/debug/error", "boom", False)


def test_mode_off_turns_power_off(parts):
    bridge, _, controller, _, _ = parts
    bridge.on_message("fujitsu/abc/set/mode", "off")
    assert controller.calls == [("power", Power.OFF)]


def test_mode_when_powered_sets_mode(parts):
    bridge, _, controller, _, _ = parts
    bridge.on_message("fujitsu/abc/set/mode", b"cool")
    assert controller.calls == [("mode", Mode.COOL)]


def test_mode_when_off_powers_on_then_sets_mode(parts):
    bridge, _, controller, clock, _ = parts
    controller.power_on = False
    bridge.on_message("fujitsu/abc/set/mode", "heat")
    assert controller.calls == [("power", Power.ON)]
    clock.now += 1999
    bridge.loop()
    assert controller.calls == [("power", Power.ON)]
    controller.power_on = True
    clock.now += 1
    bridge.loop()
    assert controller.calls[-1] == ("mode", Mode.HEAT)
    bridge.loop()
    assert len(controller.calls) == 2


def test_power_on_failure_reported(parts):
    bridge, client, controller, clock, _ = parts
    controller.power_on = False
    bridge.on_message("fujitsu/abc/set/mode", "dry")
    clock.now += 2000
    bridge.loop()
    assert client.published[-1] == ("fujitsu/abc/debug/error", "Power on not succeded", False)
    assert controller.calls == [("power", Power.ON)]


@pytest.mark.parametrize(
    "prop, payload, expected",
    [
        ("power", "on", ("power", Power.ON)),
        ("power", "bogus", ("power", Power.OFF)),
        ("fan", "high", ("fan", FanSpeed.HIGH)),
        ("vertical_airflow", "4", ("vertical_airflow", VerticalAirflow.POSITION_4)),
        ("vertical_swing", "on", ("vertical_swing", VerticalSwing.ON)),
        ("powerful", "off", ("powerful", Powerful.OFF)),
        ("economy_mode", "on", ("economy", Economy.ON)),
        ("energy_saving_fan", "on", ("energy_saving_fan", EnergySavingFan.ON)),
        ("outdoor_unit_low_noise", "on", ("outdoor_unit_low_noise", OutdoorUnitLowNoise.ON)),
        ("temp", "22.5", ("temp", "22.5")),
    ],
)
def test_set_commands(parts, prop, payload, expected):
    bridge, _, controller, _, _ = parts
    bridge.on_message(f"fujitsu/abc/set/{prop}", payload)
    assert controller.calls == [expected]


def test_state_topics_ignored(parts):
    bridge, _, controller, _, restarts = parts
    bridge.on_message("fujitsu/abc/state/power", "on")
    bridge.on_message("fujitsu/abc/state/restart", "restart")
    assert controller.calls == []
    assert restarts == []


def test_restart_calls_handler(parts):
    bridge, _, controller, _, restarts = parts
    bridge.on_message("fujitsu/abc/set/restart", "restart")
    assert restarts == [1]
    assert controller.calls == []


def test_address_to_string():
    assert address_to_string(Address.SETPOINT_TEMP) == "temp"
    assert address_to_string(Address.OUTDOOR_UNIT_LOW_NOISE) == "outdoor_unit_low_noise"
    assert address_to_string(Address.REGISTER_7).startswith("address_")
    assert address_to_string(Address.REGISTER_44) == "address_F001"


def test_value_to_string_temperatures():
    assert value_to_string(Register(Address.ACTUAL_TEMP, 0x1B71)) == "20.0"
    assert value_to_string(Register(Address.SETPOINT_TEMP, 0x00FA)) == "25.0"


def test_value_to_string_unknown_and_raw():
    assert value_to_string(Register(Address.MODE, 9)) == "unknown"
    assert value_to_string(Register(Address.REGISTER_8, 0xFFFF)) == "FFFF"


@pytest.mark.parametrize("mode", [Mode.COOL, Mode.DRY, Mode.FAN, Mode.HEAT])
def test_mode_round_trip(mode):
    text = value_to_string(Register(Address.MODE, int(mode)))
    assert string_to_enum(Mode.AUTO, text) is mode


@pytest.mark.parametrize("speed", list(FanSpeed))
def test_fan_round_trip(speed):
    text = value_to_string(Register(Address.FAN, int(speed)))
    assert string_to_enum(FanSpeed.LOW, text) is speed


@pytest.mark.parametrize("position", list(VerticalAirflow))
def test_airflow_round_trip(position):
    text = value_to_string(Register(Address.VERTICAL_AIRFLOW, int(position)))
    assert string_to_enum(VerticalAirflow.POSITION_1, text) is position


def test_string_to_enum_defaults():
    assert string_to_enum(Mode.AUTO, "auto") is Mode.AUTO
    assert string_to_enum(Powerful.OFF, "off") is Powerful.OFF
    assert string_to_enum(Powerful.OFF, "on") is Powerful.ON


def test_string_to_enum_rejects_unknown_type():
    with pytest.raises(TypeError):
        string_to_enum(Address.POWER, "on")
# fujitsuac

Talk to a Fujitsu air conditioner over its serial bus, keep a mirror of its
registers, and publish its state to an MQTT broker in a form Home Assistant
discovers on its own.

## Install

    pip install fujitsuac

The package has no runtime dependencies. You supply the serial port and the
MQTT client; a millisecond clock may be supplied too, and defaults to the
monotonic clock.

## Pieces

- `fujitsuac.modes`: the setting values as integer enums (`Power`, `Mode`,
  `FanSpeed`, `VerticalAirflow`, `VerticalSwing`, `Powerful`, `Economy`,
  `EnergySavingFan`, `OutdoorUnitLowNoise`).
- `fujitsuac.registers`: the `Address` of every known register, the
  `Register` dataclass (`address`, `value`, `writable`) and the
  `RegistryTable` that holds one register per address, in address order.
  `get_register(address)` raises `KeyError` for an unknown address.
- `fujitsuac.framing`: `FrameBuffer` splits the incoming byte stream into
  frames; a pause of 20 ms or more between bytes starts a new frame.
  `frame_checksum` and `is_valid_frame` handle the 16-bit trailing checksum.
- `fujitsuac.controller`: `FujitsuController` runs the handshake, polls the
  unit's registers in a fixed cycle and queues writes such as
  `set_mode(Mode.COOL)` or `set_temp("22.5")`. Assign `on_register_change`
  to be told of each register whose value changed, and `on_debug` to receive
  `(name, message)` diagnostics. `to_hex_str` renders bytes as hex pairs.
- `fujitsuac.mqtt_bridge`: `MqttBridge` publishes Home Assistant discovery
  documents and state changes, and turns `fujitsu/<id>/set/<property>`
  messages into controller calls. `address_to_string`, `value_to_string`
  and `string_to_enum` give the names and payloads it uses.
- `fujitsuac.dummy_unit`: `DummyUnit` answers handshake, read and write
  frames like an indoor unit, for trying the controller without hardware.

## Use

    from fujitsuac.controller import FujitsuController
    from fujitsuac.mqtt_bridge import MqttBridge

    controller = FujitsuController(uart)
    bridge = MqttBridge(client, controller, "living_room", "Living room", restart=restart)

    controller.setup()
    bridge.setup()

    while True:
        controller.loop()
        bridge.loop()

`uart` is any object with `read()` returning the bytes waiting (empty when
there are none) and `write(data)`. `client` needs
`publish(topic, payload, retain=False)` and `subscribe(topic)`; pass each
incoming message to `bridge.on_message(topic, payload)`, with the payload as
text or bytes. `restart` is called when a `restart` command arrives; without
it the request is only logged.

State is published to `fujitsu/<id>/state/<property>`, diagnostics to
`fujitsu/<id>/debug/<name>`, and `online` to `fujitsu/<id>/status`.

Temperatures go in as text or numbers: `set_temp("22.5")` rounds to the
nearest half degree and keeps the value between 18 and 30. Setting a mode
while the unit is off powers it on first and applies the mode 2 seconds
later, if the unit then reports power on.

## What it does not do

The package does not open a serial port or connect to an MQTT broker
itself, and it has no command-line program: you wire it to your own port,
client and main loop as shown above.
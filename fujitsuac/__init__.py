"""Control Fujitsu air conditioners over their serial bus and bridge them to MQTT."""

__version__ = "0.1.0"
"""Command/data transactions on the e-Paper's 4-wire SPI interface."""

from inkhat.devices.eink.hal import HIGH, LOW
from inkhat.utils.logger import logger


class TransactionFramer:
    """
    Frames every bus write with chip-select.

    Each call asserts cs (low), sets dc (low = command, high = data), performs
    exactly one bus write and releases cs again. Errors from the bus or the
    GPIO backend are not caught.
    """

    def __init__(self, bus, pins, dc_pin, cs_pin):
        self.bus = bus
        self.pins = pins
        self.dc_pin = dc_pin
        self.cs_pin = cs_pin

    def _transfer(self, dc_level, payload):
        self.pins.write(self.cs_pin, LOW)
        self.pins.write(self.dc_pin, dc_level)
        self.bus.write(payload)
        self.pins.write(self.cs_pin, HIGH)

    def send_command(self, command):
        logger.debug(f"Send command: 0x{command:02X}")
        self._transfer(LOW, bytes([command]))

    def send_data(self, data):
        if isinstance(data, int):
            data = [data]
        data = bytes(data)
        logger.debug(f"Send data: {len(data)} bytes")
        self._transfer(HIGH, data)

    def send_command_with_data(self, command, data=b''):
        """Command transaction followed by a separate data transaction."""
        self.send_command(command)
        if len(data):
            self.send_data(data)

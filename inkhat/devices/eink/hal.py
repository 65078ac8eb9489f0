"""
Hardware access for the e-Paper HAT: the SPI bus and the four GPIO lines.

Two real backends are provided:
  * rpi   - RPi.GPIO (BCM numbering) + spidev, for Raspberry Pi 1-4
  * gpiod - libgpiod v2 line requests + spidev, for the Raspberry Pi 5

The hardware libraries are imported when a backend is opened so that the
package imports cleanly on machines without them.
"""

import importlib
import traceback
from typing import NamedTuple

from inkhat.devices.eink.errors import ResourceError
from inkhat.utils.logger import logger

LOW = 0
HIGH = 1


def _import(module_name):
    try:
        return importlib.import_module(module_name)
    except ImportError as e:
        raise ResourceError(f"Hardware library '{module_name}' is not available: {e}") from e
    except RuntimeError as e:
        # RPi.GPIO refuses to import when not running on a Pi
        raise ResourceError(f"Hardware library '{module_name}' failed to load: {e}") from e


class SpiBus:
    """spidev wrapper writing whole payloads in a single call."""

    def __init__(self, bus=0, device=0, speed_hz=4000000, mode=0):
        spidev = _import('spidev')
        logger.info(f"Opening SPI device /dev/spidev{bus}.{device}")
        self.spi = spidev.SpiDev()
        self.spi.open(bus, device)
        self.spi.max_speed_hz = speed_hz
        self.spi.mode = mode

    def write(self, data):
        # writebytes2 accepts buffers larger than the 4096 byte spidev limit
        self.spi.writebytes2(data)

    def close(self):
        self.spi.close()
        logger.info("Closed SPI device")


class RPiGpioPins:
    """GPIO lines driven through RPi.GPIO in BCM mode."""

    def __init__(self, outputs, inputs):
        self.GPIO = _import('RPi.GPIO')
        self.pins = list(outputs) + list(inputs)
        self.GPIO.setmode(self.GPIO.BCM)
        self.GPIO.setwarnings(False)
        for pin in outputs:
            logger.info(f"Requesting pin {pin} as output")
            self.GPIO.setup(pin, self.GPIO.OUT)
        for pin in inputs:
            logger.info(f"Requesting pin {pin} as input")
            self.GPIO.setup(pin, self.GPIO.IN)

    def write(self, pin, level):
        self.GPIO.output(pin, self.GPIO.HIGH if level else self.GPIO.LOW)

    def read(self, pin):
        return HIGH if self.GPIO.input(pin) else LOW

    def release(self):
        # Only clean up our pins to avoid interfering with other users
        self.GPIO.cleanup(self.pins)
        logger.info("Released GPIO pins")


class GpiodPins:
    """GPIO lines requested from a gpiochip with the libgpiod v2 API."""

    def __init__(self, outputs, inputs, chip_path='/dev/gpiochip0'):
        gpiod = _import('gpiod')
        line = _import('gpiod.line')
        self.Value = line.Value

        config = {}
        if outputs:
            config[tuple(outputs)] = gpiod.LineSettings(
                direction=line.Direction.OUTPUT, output_value=line.Value.INACTIVE)
        if inputs:
            config[tuple(inputs)] = gpiod.LineSettings(direction=line.Direction.INPUT)

        logger.info(f"Requesting lines {list(outputs)} (out) and {list(inputs)} (in) on {chip_path}")
        self.request = gpiod.request_lines(chip_path, consumer='inkhat', config=config)

    def write(self, pin, level):
        self.request.set_value(pin, self.Value.ACTIVE if level else self.Value.INACTIVE)

    def read(self, pin):
        return HIGH if self.request.get_value(pin) == self.Value.ACTIVE else LOW

    def release(self):
        self.request.release()
        logger.info("Released GPIO lines")


class Hardware(NamedTuple):
    bus: object
    pins: object


def open_hardware(config, backend=None):
    """
    Acquire the SPI bus and GPIO lines described by config.

    rst, dc and cs become outputs and busy becomes an input. Anything acquired
    before a failure is released again and ResourceError is raised.
    """
    backend = backend or config.resolve_backend()
    outputs = (config.rst_pin, config.dc_pin, config.cs_pin)
    inputs = (config.busy_pin,)

    if backend == 'mock':
        from inkhat.devices.eink.mock_hardware import MockHardware
        mock = MockHardware(busy_pin=config.busy_pin, idle_level=1 - config.busy_active_level)
        return Hardware(mock.spi, mock.gpio)

    pins = None
    try:
        if backend == 'rpi':
            pins = RPiGpioPins(outputs, inputs)
        elif backend == 'gpiod':
            pins = GpiodPins(outputs, inputs, chip_path=config.gpio_chip)
        else:
            raise ResourceError(f"Unknown hardware backend '{backend}'")

        bus = SpiBus(config.spi_bus, config.spi_device, config.spi_speed_hz, config.spi_mode)
    except Exception as e:
        logger.error(f"Hardware initialization failed: {e}")
        logger.debug(traceback.format_exc())
        if pins is not None:
            try:
                pins.release()
            except Exception as cleanup_error:
                logger.error(f"Error releasing GPIO during cleanup: {cleanup_error}")
        if isinstance(e, ResourceError):
            raise
        raise ResourceError(f"Could not open {backend} hardware: {e}") from e

    logger.info(f"Hardware initialized with {backend} backend")
    return Hardware(bus, pins)

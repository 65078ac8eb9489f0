#!/usr/bin/env python3
"""
Mock SPI bus and GPIO lines for running the driver without a panel.

Both mocks append to one shared event log so the exact interleaving of pin
changes, bus writes and (when time.sleep is patched with MockHardware.sleep)
delays can be inspected afterwards.
"""

from collections import deque

from inkhat.utils.logger import logger


class MockSpiDev:
    def __init__(self, hardware):
        self.hardware = hardware
        self.closed = False

    def write(self, data):
        data = bytes(data)
        logger.debug(f"Mock SPI: writing {len(data)} bytes")
        self.hardware.events.append(('spi', data))

    def close(self):
        logger.debug("Mock SPI: closing")
        self.closed = True
        self.hardware.events.append(('spi_close',))


class MockGPIO:
    def __init__(self, hardware, busy_pin, idle_level=1):
        self.hardware = hardware
        self.busy_pin = busy_pin
        self.idle_level = idle_level
        self.levels = {}
        self.busy_readings = deque()
        self.released = False

    def queue_busy(self, *levels):
        """Values returned by the next reads of the busy pin, in order."""
        self.busy_readings.extend(levels)

    def write(self, pin, level):
        level = 1 if level else 0
        logger.debug(f"Mock GPIO: setting pin {pin} to {level}")
        self.levels[pin] = level
        self.hardware.events.append(('pin', pin, level))

    def read(self, pin):
        if pin == self.busy_pin:
            level = self.busy_readings.popleft() if self.busy_readings else self.idle_level
        else:
            level = self.levels.get(pin, 0)
        self.hardware.events.append(('read', pin, level))
        return level

    def release(self):
        logger.debug("Mock GPIO: releasing lines")
        self.released = True
        self.hardware.events.append(('gpio_release',))


class MockHardware:
    """A recording stand-in for the SPI bus and GPIO lines."""

    def __init__(self, busy_pin=24, idle_level=1):
        self.events = []
        self.spi = MockSpiDev(self)
        self.gpio = MockGPIO(self, busy_pin, idle_level)

    def sleep(self, seconds):
        """Drop-in replacement for time.sleep that only records the call."""
        self.events.append(('sleep', seconds))

    def clear(self):
        self.events.clear()

    def transactions(self, dc_pin=25):
        """
        Decode the bus writes into ('command' | 'data', payload) pairs using
        the level of the dc line at the time of each write.
        """
        dc_level = 0
        result = []
        for event in self.events:
            if event[0] == 'pin' and event[1] == dc_pin:
                dc_level = event[2]
            elif event[0] == 'spi':
                result.append(('data' if dc_level else 'command', event[1]))
        return result

    def pin_history(self, pin):
        return [event[2] for event in self.events if event[0] == 'pin' and event[1] == pin]

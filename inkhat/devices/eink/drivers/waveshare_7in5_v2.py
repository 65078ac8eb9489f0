#!/usr/bin/env python3
"""
Waveshare 7.5inch e-Paper HAT (V2) Driver
Resolution: 800x480 pixels
Interface: SPI
Color: Black and White
"""

import traceback

from inkhat.config import EInkConfig
from inkhat.devices.eink import buffer as framebuffer
from inkhat.devices.eink import sequences, timing
from inkhat.devices.eink.eink import EInkDeviceInterface, Rect
from inkhat.devices.eink.errors import DisplayClosedError, InvalidStateError
from inkhat.devices.eink.framer import TransactionFramer
from inkhat.devices.eink.hal import LOW, open_hardware
from inkhat.devices.eink.state import ALLOWED_FROM, DisplayState
from inkhat.utils.logger import logger


class Driver(EInkDeviceInterface):
    """
    Driver for Waveshare 7.5inch e-Paper HAT (V2)

    Constructing the driver only acquires the SPI bus and GPIO lines; call
    init() before displaying anything and sleep() when done, since keeping the
    panel powered for long periods can damage it. After sleep() the panel
    needs init() again. close() releases the hardware for good.

    Not thread safe: one driver instance must be used from one thread.
    """
    WIDTH = 800
    HEIGHT = 480
    PIXEL_GROUP = framebuffer.PIXEL_GROUP

    # Fill bytes streamed to the old and new frame registers by clear()
    CLEAR_OLD_FILL = 0xFF
    CLEAR_NEW_FILL = 0x00

    def __init__(self, config=None):
        self.config = config or EInkConfig.from_env()

        logger.info("Opening Waveshare 7.5in V2 e-Paper HAT")
        self.bus, self.pins = open_hardware(self.config)

        self.framer = TransactionFramer(self.bus, self.pins, self.config.dc_pin, self.config.cs_pin)
        self.buffer_size = framebuffer.buffer_size(self.WIDTH, self.HEIGHT, self.PIXEL_GROUP)
        self._bounds = Rect(0, 0, self.WIDTH, self.HEIGHT)
        self._state = DisplayState.UNINITIALIZED

    @property
    def state(self):
        return self._state

    def bounds(self):
        """Returns the panel area, Rect(0, 0, 800, 480)."""
        if self._state is DisplayState.CLOSED:
            raise DisplayClosedError("Display has been closed")
        return self._bounds

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if self._state is not DisplayState.CLOSED:
            self.close()
        return False

    # -------------------------------------------------------------------------
    # Timing and protocol helpers
    # -------------------------------------------------------------------------

    def _delay(self, ms):
        timing.delay_ms(ms)

    def wait_until_idle(self):
        timing.wait_until_idle(
            lambda: self.pins.read(self.config.busy_pin),
            busy_level=self.config.busy_active_level,
            poll_ms=self.config.busy_poll_ms,
            timeout=self.config.busy_timeout,
        )

    def _check(self, operation):
        if self._state is DisplayState.CLOSED:
            logger.error(f"Cannot {operation}: display has been closed")
            raise DisplayClosedError(f"Cannot {operation}: display has been closed")
        if self._state not in ALLOWED_FROM[operation]:
            logger.error(f"Cannot {operation} while display is {self._state.value}")
            raise InvalidStateError(f"Cannot {operation} while display is {self._state.value}")

    def _run(self, steps, during, after):
        self._state = during
        try:
            sequences.issue_sequence(steps, self.framer, self._delay, self.wait_until_idle)
        except Exception as e:
            # Panel state is unknown now, only a fresh init() can recover
            logger.error(f"Display sequence failed while {during.value}: {e}")
            logger.debug(traceback.format_exc())
            self._state = DisplayState.UNINITIALIZED
            raise
        self._state = after

    def reset(self):
        logger.debug("Resetting display")
        for level, ms in sequences.RESET_PULSE:
            self.pins.write(self.config.rst_pin, level)
            self._delay(ms)
        logger.debug("Display reset")

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def init(self):
        """Powers on the screen after construction or sleep."""
        self._check('init')
        logger.info("Initializing display")
        self._state = DisplayState.UNINITIALIZED
        self.reset()
        self._run(sequences.init_sequence(self.WIDTH, self.HEIGHT),
                  DisplayState.UNINITIALIZED, DisplayState.READY)
        logger.info("Display initialized")

    def getbuffer(self, image, threshold):
        """
        Converts an image into a frame ready for display_bytes().

        The display only supports two colors, so pixels whose darkness
        reaches threshold become black and everything else white.
        """
        if tuple(image.size) != self._bounds.size:
            message = f"Image size {image.size[0]}x{image.size[1]} does not match display size {self.WIDTH}x{self.HEIGHT}"
            logger.error(message)
            raise ValueError(message)
        logger.debug("Getting buffer")
        return framebuffer.pack(image, threshold, self.PIXEL_GROUP)

    def display_bytes(self, image_bytes):
        """Full refresh with an already packed frame."""
        self._check('display')
        if len(image_bytes) != self.buffer_size:
            message = f"Incorrect byte array size for display. Expected {self.buffer_size} bytes, got {len(image_bytes)}."
            logger.error(message)
            raise ValueError(message)
        logger.info("Displaying buffer")
        self._run(sequences.display_sequence(image_bytes), DisplayState.DISPLAYING, DisplayState.READY)
        logger.info("Buffer displayed")

    def display_image(self, image, threshold):
        """
        Display a PIL image of exactly 800x480 pixels.

        Args:
            image: PIL Image object
            threshold: darkness (0-255) at which a pixel is drawn black,
                framebuffer.DEFAULT_THRESHOLD is a sensible choice
        """
        self._check('display')
        logger.info("Displaying image")
        self.display_bytes(self.getbuffer(image, threshold))
        logger.info("Image displayed")

    def clear(self):
        """Clear the panel and refresh right away."""
        self._check('clear')
        logger.info("Clearing display")
        old_rows = framebuffer.scanlines(self.WIDTH, self.HEIGHT, self.CLEAR_OLD_FILL, self.PIXEL_GROUP)
        new_rows = framebuffer.scanlines(self.WIDTH, self.HEIGHT, self.CLEAR_NEW_FILL, self.PIXEL_GROUP)
        self._run(sequences.clear_sequence(old_rows, new_rows), DisplayState.CLEARING, DisplayState.READY)
        logger.info("Display cleared")

    def sleep(self):
        """Puts the display to sleep and powers off. Run init() to wake it."""
        self._check('sleep')
        logger.info("Putting display to sleep")
        self._run(sequences.SLEEP_SEQUENCE, DisplayState.READY, DisplayState.ASLEEP)
        logger.info("Display is asleep")

    def close(self):
        """Drives the control lines low and releases the SPI bus and GPIO."""
        if self._state is DisplayState.CLOSED:
            logger.error("Display already closed")
            raise DisplayClosedError("Display already closed")

        logger.info("Closing display")
        try:
            self.pins.write(self.config.cs_pin, LOW)
            self.pins.write(self.config.dc_pin, LOW)
            self.pins.write(self.config.rst_pin, LOW)
        finally:
            self._state = DisplayState.CLOSED
            try:
                self.bus.close()
            finally:
                self.pins.release()
        logger.info("Display closed")

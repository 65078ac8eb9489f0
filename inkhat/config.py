"""
Configuration for the e-Paper driver.

Values default to the Waveshare HAT wiring and can be overridden through
EINK_* environment variables with EInkConfig.from_env().
"""

import os
from typing import Literal, Optional

from pydantic import BaseModel, Field

from inkhat.utils.logger import logger

# Default BCM pin numbers for the Waveshare e-Paper HAT
RST_PIN = 17
DC_PIN = 25
CS_PIN = 8
BUSY_PIN = 24

DEFAULT_THRESHOLD = 199

DEVICE_TREE_MODEL = '/proc/device-tree/model'

Backend = Literal['auto', 'rpi', 'gpiod', 'mock']

# Environment variable -> config field
ENV_FIELDS = {
    'EINK_BACKEND': 'backend',
    'EINK_DISPLAY_TYPE': 'display_type',
    'EINK_RST_PIN': 'rst_pin',
    'EINK_DC_PIN': 'dc_pin',
    'EINK_CS_PIN': 'cs_pin',
    'EINK_BUSY_PIN': 'busy_pin',
    'EINK_SPI_BUS': 'spi_bus',
    'EINK_SPI_DEVICE': 'spi_device',
    'EINK_SPI_SPEED': 'spi_speed_hz',
    'EINK_GPIO_CHIP': 'gpio_chip',
    'EINK_BUSY_TIMEOUT': 'busy_timeout',
    'EINK_THRESHOLD': 'threshold',
}


class EInkConfig(BaseModel):
    backend: Backend = 'auto'
    display_type: str = '7in5_v2'

    rst_pin: int = Field(default=RST_PIN, ge=0)
    dc_pin: int = Field(default=DC_PIN, ge=0)
    cs_pin: int = Field(default=CS_PIN, ge=0)
    busy_pin: int = Field(default=BUSY_PIN, ge=0)

    spi_bus: int = Field(default=0, ge=0)
    spi_device: int = Field(default=0, ge=0)
    spi_speed_hz: int = Field(default=4000000, gt=0)
    spi_mode: int = Field(default=0, ge=0, le=3)
    gpio_chip: str = '/dev/gpiochip0'

    # The 7.5" V2 panel pulls BUSY low while it is working
    busy_active_level: Literal[0, 1] = 0
    busy_poll_ms: int = Field(default=10, gt=0)
    # None waits forever
    busy_timeout: Optional[float] = Field(default=None, gt=0)

    threshold: int = Field(default=DEFAULT_THRESHOLD, ge=0, le=255)

    @classmethod
    def from_env(cls, environ=None, **overrides) -> "EInkConfig":
        """Build a config from EINK_* environment variables.

        Keyword overrides win over the environment.
        """
        environ = os.environ if environ is None else environ
        values = {}
        for var, field in ENV_FIELDS.items():
            raw = environ.get(var)
            if raw is None or raw.strip() == '':
                continue
            values[field] = raw.strip()

        if values.get('busy_timeout', '').lower() in ('0', 'none', 'off'):
            values.pop('busy_timeout')

        if environ.get('EINK_MOCK_MODE', '0') == '1':
            values['backend'] = 'mock'

        values.update(overrides)
        config = cls(**values)
        logger.debug(f"Loaded e-Paper config: {config.model_dump()}")
        return config

    def resolve_backend(self) -> str:
        """Return the concrete backend name, detecting the board for 'auto'."""
        if self.backend != 'auto':
            return self.backend
        return detect_backend()


def detect_backend(model_path=DEVICE_TREE_MODEL) -> str:
    """Pick 'gpiod' on a Raspberry Pi 5 and 'rpi' everywhere else."""
    try:
        with open(model_path, 'r') as f:
            model = f.read()
    except OSError as e:
        logger.warning(f"Could not read board model from {model_path}: {e}")
        return 'rpi'

    if 'Raspberry Pi 5' in model:
        logger.info("Detected Raspberry Pi 5, using gpiod backend")
        return 'gpiod'
    logger.info(f"Detected board {model.strip(chr(0)).strip()!r}, using RPi.GPIO backend")
    return 'rpi'

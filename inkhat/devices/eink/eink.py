from abc import ABC, abstractmethod
import importlib
from typing import NamedTuple, Optional

from inkhat.config import EInkConfig
from inkhat.utils.logger import logger

# inkhat/devices/eink/eink.py

# Display type -> module under inkhat.devices.eink.drivers
DRIVERS = {
    '7in5_v2': 'waveshare_7in5_v2',
}


class Rect(NamedTuple):
    """Half-open rectangle [x0, x1) x [y0, y1)."""
    x0: int
    y0: int
    x1: int
    y1: int

    @property
    def width(self):
        return self.x1 - self.x0

    @property
    def height(self):
        return self.y1 - self.y0

    @property
    def size(self):
        return (self.width, self.height)


class EInkDeviceInterface(ABC):
    @abstractmethod
    def init(self):
        """Initialize the e-ink device."""
        pass

    @abstractmethod
    def clear(self):
        """Clear the e-ink display."""
        pass

    @abstractmethod
    def display_image(self, image, threshold):
        """Display an image on the e-ink screen."""
        pass

    @abstractmethod
    def display_bytes(self, image_bytes):
        """Display an already packed frame on the e-ink screen."""
        pass

    @abstractmethod
    def sleep(self):
        """Power the panel down into deep sleep."""
        pass

    @abstractmethod
    def close(self):
        """Release the bus and GPIO resources."""
        pass

    @abstractmethod
    def bounds(self) -> Rect:
        """The panel area in pixels."""
        pass


class EInk:
    def __init__(self, driver_name: Optional[str] = None, config: Optional[EInkConfig] = None):
        self.config = config or EInkConfig.from_env()
        driver_name = driver_name or DRIVERS.get(self.config.display_type.lower())
        if driver_name is None:
            logger.error(f"No driver for display type '{self.config.display_type}'")
            raise RuntimeError(f"No driver for display type '{self.config.display_type}'")
        self.driver = self._load_driver_by_name(driver_name)

    def _load_driver_by_name(self, driver_name: str) -> EInkDeviceInterface:
        try:
            module_path = f"inkhat.devices.eink.drivers.{driver_name}"
            module = importlib.import_module(module_path)
            driver_class = getattr(module, 'Driver')
            if not issubclass(driver_class, EInkDeviceInterface):
                raise TypeError(f"{driver_name} does not implement EInkDeviceInterface")
        except (ImportError, AttributeError, TypeError) as e:
            logger.error(f"Error loading driver '{driver_name}': {e}")
            raise
        logger.info(f"Loaded driver: {driver_name}")
        return driver_class(self.config)

    def initialize(self):
        self.driver.init()

    def clear_display(self):
        self.driver.clear()

    def display_image(self, image, threshold=None):
        if threshold is None:
            threshold = self.config.threshold
        self.driver.display_image(image, threshold)

    def display_bytes(self, image_bytes):
        self.driver.display_bytes(image_bytes)

    def sleep(self):
        self.driver.sleep()

    def close(self):
        self.driver.close()

    def bounds(self) -> Rect:
        return self.driver.bounds()

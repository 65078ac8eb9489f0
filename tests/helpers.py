from unittest import mock

from PIL import Image

from inkhat.config import EInkConfig
from inkhat.devices.eink.drivers.waveshare_7in5_v2 import Driver

WIDTH = Driver.WIDTH
HEIGHT = Driver.HEIGHT

RST, DC, CS, BUSY = 17, 25, 8, 24


def mock_config(**overrides):
    return EInkConfig(backend='mock', **overrides)


def patch_sleep(testcase, side_effect=None):
    """Replace time.sleep for the duration of the test."""
    patcher = mock.patch('inkhat.devices.eink.timing.time.sleep', side_effect=side_effect)
    sleep = patcher.start()
    testcase.addCleanup(patcher.stop)
    return sleep


def make_driver(testcase, **overrides):
    """A driver on the mock backend with time.sleep recorded into its event log."""
    driver = Driver(mock_config(**overrides))
    hardware = driver.bus.hardware
    patch_sleep(testcase, side_effect=hardware.sleep)
    return driver, hardware


def white_image(size=(WIDTH, HEIGHT), mode='L'):
    return Image.new(mode, size, 255 if mode in ('L', '1') else (255, 255, 255))

import unittest
from unittest import mock

from inkhat.config import EInkConfig
from inkhat.devices.eink import hal
from inkhat.devices.eink.errors import ResourceError
from inkhat.devices.eink.mock_hardware import MockGPIO, MockSpiDev
from tests.helpers import mock_config


def fake_importer(modules):
    def import_module(name):
        if name in modules:
            return modules[name]
        raise ImportError(f"No module named '{name}'")
    return import_module


class TestOpenHardware(unittest.TestCase):
    def test_mock_backend(self):
        hardware = hal.open_hardware(mock_config())
        self.assertIsInstance(hardware.bus, MockSpiDev)
        self.assertIsInstance(hardware.pins, MockGPIO)
        self.assertIs(hardware.bus.hardware, hardware.pins.hardware)

    def test_unknown_backend(self):
        with self.assertRaises(ResourceError):
            hal.open_hardware(EInkConfig(), backend='serial')

    def test_missing_library(self):
        with mock.patch('inkhat.devices.eink.hal.importlib.import_module', side_effect=fake_importer({})):
            with self.assertRaises(ResourceError):
                hal.open_hardware(EInkConfig(backend='rpi'))

    def test_gpio_released_when_spi_fails(self):
        gpio = mock.MagicMock()
        modules = {'RPi.GPIO': gpio}
        with mock.patch('inkhat.devices.eink.hal.importlib.import_module', side_effect=fake_importer(modules)):
            with self.assertRaises(ResourceError):
                hal.open_hardware(EInkConfig(backend='rpi'))
        gpio.cleanup.assert_called_once_with([17, 25, 8, 24])

    def test_rpi_backend(self):
        gpio = mock.MagicMock()
        gpio.input.return_value = 1
        spidev = mock.MagicMock()
        modules = {'RPi.GPIO': gpio, 'spidev': spidev}
        with mock.patch('inkhat.devices.eink.hal.importlib.import_module', side_effect=fake_importer(modules)):
            hardware = hal.open_hardware(EInkConfig(backend='rpi'))

        gpio.setmode.assert_called_once_with(gpio.BCM)
        gpio.setup.assert_any_call(17, gpio.OUT)
        gpio.setup.assert_any_call(24, gpio.IN)
        spi = spidev.SpiDev.return_value
        spi.open.assert_called_once_with(0, 0)
        self.assertEqual(spi.max_speed_hz, 4000000)

        hardware.bus.write(b'\x12\x34')
        spi.writebytes2.assert_called_once_with(b'\x12\x34')
        hardware.pins.write(25, 1)
        gpio.output.assert_called_once_with(25, gpio.HIGH)
        self.assertEqual(hardware.pins.read(24), 1)

    def test_gpiod_backend(self):
        gpiod = mock.MagicMock()
        line = mock.MagicMock()
        request = gpiod.request_lines.return_value
        request.get_value.return_value = line.Value.INACTIVE
        modules = {'gpiod': gpiod, 'gpiod.line': line, 'spidev': mock.MagicMock()}
        with mock.patch('inkhat.devices.eink.hal.importlib.import_module', side_effect=fake_importer(modules)):
            hardware = hal.open_hardware(EInkConfig(backend='gpiod', gpio_chip='/dev/gpiochip4'))

        args, kwargs = gpiod.request_lines.call_args
        self.assertEqual(args, ('/dev/gpiochip4',))
        self.assertEqual(kwargs['consumer'], 'inkhat')
        self.assertEqual(set(kwargs['config']), {(17, 25, 8), (24,)})

        hardware.pins.write(17, 1)
        request.set_value.assert_called_once_with(17, line.Value.ACTIVE)
        self.assertEqual(hardware.pins.read(24), 0)
        hardware.pins.release()
        request.release.assert_called_once_with()


if __name__ == '__main__':
    unittest.main()

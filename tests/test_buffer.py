import unittest

from PIL import Image, ImageDraw

from inkhat.devices.eink import buffer
from tests.helpers import HEIGHT, WIDTH, white_image


class TestPack(unittest.TestCase):
    def test_buffer_length_matches_panel(self):
        packed = buffer.pack(white_image(), buffer.DEFAULT_THRESHOLD)
        self.assertEqual(len(packed), (WIDTH // 8) * HEIGHT)
        self.assertEqual(len(packed), buffer.buffer_size(WIDTH, HEIGHT))

    def test_all_white_is_all_zero(self):
        packed = buffer.pack(white_image(), 199)
        self.assertEqual(packed, bytes(len(packed)))

    def test_all_black_is_all_ones(self):
        for mode, color in (('L', 0), ('RGB', (0, 0, 0)), ('1', 0)):
            with self.subTest(mode=mode):
                packed = buffer.pack(Image.new(mode, (WIDTH, HEIGHT), color), 199)
                self.assertEqual(packed, b'\xff' * (WIDTH // 8 * HEIGHT))

    def test_single_stripe_sets_one_bit(self):
        for k in range(8):
            with self.subTest(offset=k):
                image = white_image((16, 2))
                image.putpixel((k, 0), 0)
                image.putpixel((8 + k, 1), 0)
                packed = buffer.pack(image, 199)
                self.assertEqual(packed, bytes([0x80 >> k, 0x00, 0x00, 0x80 >> k]))

    def test_threshold_boundary(self):
        # luminance 56 is darkness 199
        image = Image.new('L', (8, 1), 255)
        image.putpixel((0, 0), 56)
        image.putpixel((1, 0), 57)
        self.assertEqual(buffer.pack(image, 199), bytes([0x80]))
        self.assertEqual(buffer.pack(image, 198), bytes([0xC0]))

    def test_deterministic(self):
        image = white_image()
        draw = ImageDraw.Draw(image)
        draw.ellipse((100, 50, 600, 400), fill=40)
        draw.line((0, 0, WIDTH - 1, HEIGHT - 1), fill=0, width=3)
        first = buffer.pack(image, 199)
        second = buffer.pack(image.copy(), 199)
        self.assertEqual(first, second)
        self.assertNotEqual(first, bytes(len(first)))

    def test_transparent_pixels_are_white(self):
        image = Image.new('RGBA', (8, 1), (0, 0, 0, 0))
        image.putpixel((3, 0), (0, 0, 0, 255))
        self.assertEqual(buffer.pack(image, 199), bytes([0x10]))

    def test_group_size(self):
        image = white_image((8, 1))
        image.putpixel((5, 0), 0)
        self.assertEqual(buffer.pack(image, 199, group_size=4), bytes([0x00, 0x40]))

    def test_every_group_size_is_msb_first(self):
        for group_size in range(1, 9):
            with self.subTest(group_size=group_size):
                image = white_image((group_size * 2, 1))
                image.putpixel((0, 0), 0)
                image.putpixel((group_size * 2 - 1, 0), 0)
                self.assertEqual(buffer.pack(image, 199, group_size=group_size),
                                 bytes([0x80, 0x80 >> (group_size - 1)]))

    def test_sixteen_bit_grayscale_is_scaled(self):
        # 30000 / 256 is luminance 117, darkness 138
        for mode in ('I;16', 'I'):
            with self.subTest(mode=mode):
                image = Image.new(mode, (8, 1), 30000)
                self.assertEqual(buffer.pack(image, 128), b'\xff')
                self.assertEqual(buffer.pack(image, 199), b'\x00')
                self.assertEqual(buffer.grayscale(image).getpixel((0, 0)), 117)

    def test_sixteen_bit_extremes(self):
        image = Image.new('I;16', (8, 1), 0xFFFF)
        image.putpixel((0, 0), 0)
        self.assertEqual(buffer.pack(image, 199), bytes([0x80]))

    def test_transparent_palette_image_is_white(self):
        image = Image.new('PA', (8, 1), (0, 0))
        image.putpalette([0, 0, 0] * 256)
        self.assertEqual(buffer.pack(image, 199), b'\x00')
        self.assertEqual(buffer.grayscale(image).getpixel((0, 0)), 255)

    def test_width_must_be_multiple_of_group(self):
        with self.assertRaises(ValueError):
            buffer.pack(white_image((10, 4)), 199)

    def test_invalid_arguments(self):
        with self.assertRaises(ValueError):
            buffer.pack(white_image((8, 1)), 256)
        with self.assertRaises(ValueError):
            buffer.pack(white_image((8, 1)), 199, group_size=9)


class TestScanlines(unittest.TestCase):
    def test_rows(self):
        rows = buffer.scanlines(WIDTH, HEIGHT, 0xFF)
        self.assertEqual(len(rows), HEIGHT)
        self.assertTrue(all(row == b'\xff' * 100 for row in rows))

    def test_partial_group_rounds_up(self):
        self.assertEqual(buffer.row_bytes(801), 101)
        rows = buffer.scanlines(801, 2, 0x00)
        self.assertEqual(rows, (bytes(101), bytes(101)))


if __name__ == '__main__':
    unittest.main()

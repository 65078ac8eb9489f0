"""
Conversion between Pillow images and the panel's packed 1-bit frame format.

A packed frame is row-major with one bit per pixel, most significant bit
first. A set bit is a black pixel.
"""

import numpy as np
from PIL import Image

from inkhat.config import DEFAULT_THRESHOLD

# Pixels packed into one byte at 1 bit per pixel
PIXEL_GROUP = 8

__all__ = ['DEFAULT_THRESHOLD', 'PIXEL_GROUP', 'buffer_size', 'row_bytes', 'grayscale', 'pack', 'scanlines']


def row_bytes(width, group_size=PIXEL_GROUP):
    """Bytes per scanline, rounding up for a partial trailing group."""
    return -(-width // group_size)


def buffer_size(width, height, group_size=PIXEL_GROUP):
    return (width // group_size) * height


def _luminance(image):
    """8-bit luminance of the image with transparent areas flattened onto white."""
    if image.has_transparency_data:
        rgba = image.convert('RGBA')
        background = Image.new('RGBA', rgba.size, (255, 255, 255, 255))
        image = Image.alpha_composite(background, rgba)
    if image.mode == 'I' or image.mode.startswith('I;16'):
        # 16-bit grayscale, convert('L') would clip instead of scale
        values = np.asarray(image).astype(np.int64)
        return (np.clip(values, 0, 0xFFFF) >> 8).astype(np.uint8)
    if image.mode != 'L':
        image = image.convert('L')
    return np.asarray(image, dtype=np.uint8)


def grayscale(image):
    """The image as pack() sees it, an 8-bit 'L' image on a white background."""
    return Image.fromarray(_luminance(image))


def pack(image, threshold, group_size=PIXEL_GROUP):
    """
    Convert an image to a packed frame.

    A pixel is black when its darkness (255 - luminance) is at least
    threshold. 16-bit grayscale is scaled down to 8 bits first. The pixel at offset k within a group of group_size pixels sets
    bit 0x80 >> k of the output byte.

    Args:
        image: PIL image; its width must be a multiple of group_size
        threshold: darkness from 0 to 255 at which a pixel becomes black
        group_size: pixels per output byte, 1 to 8

    Returns:
        bytes: (width / group_size) * height bytes
    """
    if not 1 <= group_size <= 8:
        raise ValueError(f"Pixel group size must be between 1 and 8, got {group_size}")
    if not 0 <= threshold <= 255:
        raise ValueError(f"Threshold must be between 0 and 255, got {threshold}")

    width, height = image.size
    if width % group_size:
        raise ValueError(f"Image width {width} is not a multiple of the pixel group size {group_size}")

    darkness = 255 - _luminance(image).astype(np.int16)
    black = darkness >= threshold

    # Groups shorter than 8 are padded with zero bits on the right
    groups = black.reshape(height, width // group_size, group_size)
    return np.packbits(groups, axis=-1).tobytes()


def scanlines(width, height, fill, group_size=PIXEL_GROUP):
    """height identical rows of ceil(width / group_size) bytes of fill."""
    row = bytes([fill]) * row_bytes(width, group_size)
    return (row,) * height

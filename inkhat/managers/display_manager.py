from typing import Optional

from PIL import Image, ImageDraw, ImageFont

from inkhat.config import EInkConfig
from inkhat.devices.eink import buffer as framebuffer
from inkhat.devices.eink.eink import EInk
from inkhat.devices.eink.state import DisplayState
from inkhat.utils.logger import logger


class DisplayManager:
    """
    Manager for interacting with the e-ink display

    Wraps a driver loaded through EInk and adds convenience helpers for text
    and image files. The display is initialized on construction unless
    initialize=False is passed.
    """

    def __init__(self, driver_name: Optional[str] = None, config: Optional[EInkConfig] = None,
                 initialize: bool = True):
        """
        Initialize the DisplayManager

        Args:
            driver_name: Specific driver module to use (e.g., 'waveshare_7in5_v2')
            config: Driver configuration, read from the environment when omitted
            initialize: Whether to power up the panel right away
        """
        self.config = config or EInkConfig.from_env()
        logger.debug(f"Initializing DisplayManager with driver: {driver_name if driver_name else 'auto-detect'}")
        self.eink_device = EInk(driver_name, self.config)

        try:
            if initialize:
                self.eink_device.initialize()
        except Exception as e:
            logger.error(f"Failed to initialize display: {e}")
            self.eink_device.close()
            raise

        width, height = self.size
        logger.info(f"Display dimensions: {width}x{height}")

    @property
    def size(self):
        return self.eink_device.bounds().size

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if self.eink_device.driver.state is not DisplayState.CLOSED:
            self.close()
        return False

    def prepare_image(self, image, resize: bool = True):
        """Fit an image to the panel: grayscale, resized to the display size."""
        if image.mode not in ('1', 'L'):
            # Transparent areas become white and 16-bit levels are scaled
            image = framebuffer.grayscale(image)
        if image.size != self.size:
            if not resize:
                message = f"Image size {image.size} does not match display size {self.size}"
                logger.error(message)
                raise ValueError(message)
            logger.debug(f"Resizing image from {image.size[0]}x{image.size[1]} to {self.size[0]}x{self.size[1]}")
            image = image.resize(self.size, Image.Resampling.LANCZOS)
        return image

    def clear_screen(self):
        """Clear the e-ink display"""
        try:
            logger.debug("Clearing screen")
            self.eink_device.clear_display()
        except Exception as e:
            logger.error(f"Error clearing screen: {e}")
            raise

    def render_text(self, text: str, font_size: int = 24, x: int = 10, y: int = 10,
                    font_name: Optional[str] = None):
        """Draw text in black on a white image the size of the display."""
        image = Image.new('L', self.size, 255)
        draw = ImageDraw.Draw(image)

        # Load font
        try:
            if font_name:
                font = ImageFont.truetype(font_name, font_size)
            else:
                font = ImageFont.load_default(size=font_size)
        except OSError as e:
            logger.warning(f"Could not load font, using default: {e}")
            font = ImageFont.load_default()

        draw.multiline_text((x, y), text, font=font, fill=0)
        return image

    def display_text(self, text: str, font_size: int = 24, x: int = 10, y: int = 10,
                     font_name: Optional[str] = None):
        """
        Display text on the e-ink display

        Args:
            text: Text to display
            font_size: Font size in pixels
            x: X coordinate for text position
            y: Y coordinate for text position
            font_name: Path to font file (optional)
        """
        try:
            logger.info(f"Displaying text: {text}")
            self.eink_device.display_image(self.render_text(text, font_size, x, y, font_name),
                                           self.config.threshold)
        except Exception as e:
            logger.error(f"Error displaying text: {e}")
            raise

    def display_image_from_file(self, file_path: str, resize: bool = True):
        """
        Display an image from a file on the e-ink display

        Args:
            file_path: Path to the image file
            resize: Whether to resize the image to fit the display
        """
        try:
            logger.info(f"Displaying image from file: {file_path}")
            with Image.open(file_path) as image:
                image.load()
                self.display_image(image, resize=resize)
        except Exception as e:
            logger.error(f"Error displaying image from file: {e}")
            raise

    def display_image(self, image, resize: bool = True):
        """
        Display a PIL Image object on the e-ink display

        Args:
            image: PIL Image object to display
            resize: Whether to resize the image to fit the display
        """
        try:
            logger.info("Displaying PIL Image")
            self.eink_device.display_image(self.prepare_image(image, resize), self.config.threshold)
        except Exception as e:
            logger.error(f"Error displaying image: {e}")
            raise

    def display_bytes(self, image_bytes):
        """
        Display an already packed frame

        Args:
            image_bytes: Packed 1-bit frame, see inkhat.devices.eink.buffer.pack
        """
        try:
            logger.info("Displaying raw byte data via DisplayManager.")
            self.eink_device.display_bytes(image_bytes)
        except Exception as e:
            logger.error(f"Error displaying byte data: {e}")
            raise

    def sleep(self):
        """Put the display to sleep to save power"""
        try:
            logger.info("Putting display to sleep")
            self.eink_device.sleep()
        except Exception as e:
            logger.error(f"Error sleeping display: {e}")
            raise

    def wake(self):
        """Wake up the display from sleep mode"""
        try:
            logger.info("Waking up display")
            self.eink_device.initialize()
        except Exception as e:
            logger.error(f"Error waking display: {e}")
            raise

    def close(self):
        """Release the display hardware"""
        logger.info("Closing display manager")
        self.eink_device.close()

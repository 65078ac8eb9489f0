"""
Utilities package for the inkhat e-Paper driver.
Contains utility modules used throughout the package.
"""

# Import utilities for easy access
from .logger import setup_logger, get_logger

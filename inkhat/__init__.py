"""
inkhat - driver for the Waveshare 7.5inch V2 e-Paper HAT on Raspberry Pi.
"""

__version__ = "0.1.0"

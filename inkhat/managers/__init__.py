"""
Managers package for inkhat.
Contains high level helpers built on top of the device drivers.
"""

# Import managers for easy access
from .display_manager import DisplayManager

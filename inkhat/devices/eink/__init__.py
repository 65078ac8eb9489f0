"""
E-Paper display support: device interface, driver loader and error types.
"""

from .eink import EInk, EInkDeviceInterface, Rect
from .errors import (
    BusyTimeoutError,
    DisplayClosedError,
    EInkError,
    InvalidStateError,
    ResourceError,
)
from .state import DisplayState

"""
Exceptions raised by the e-Paper driver.

Only construction can fail in a recoverable way. Bus and pin operations on
an opened device are assumed to succeed; whatever the backend library raises
propagates unchanged.
"""


class EInkError(Exception):
    """Base class for all e-Paper driver errors."""


class ResourceError(EInkError):
    """The SPI bus or GPIO lines could not be acquired."""


class BusyTimeoutError(EInkError, TimeoutError):
    """The busy line did not clear within the configured timeout."""


class InvalidStateError(EInkError, RuntimeError):
    """The operation is not valid in the driver's current state."""


class DisplayClosedError(InvalidStateError):
    """The driver has been closed and its resources released."""

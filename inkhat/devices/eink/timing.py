import time

from inkhat.devices.eink.errors import BusyTimeoutError
from inkhat.utils.logger import logger

DEFAULT_POLL_MS = 10


def delay_ms(milliseconds):
    """Block for at least the given number of milliseconds."""
    time.sleep(milliseconds / 1000.0)


def wait_until_idle(read_busy, busy_level=0, poll_ms=DEFAULT_POLL_MS, timeout=None):
    """
    Poll the busy line until it stops reading busy_level.

    Without a timeout this waits forever on a panel that never releases the
    line. With a timeout (seconds) BusyTimeoutError is raised instead.
    """
    logger.debug("Waiting for e-Paper display to become idle")
    start_time = time.monotonic()
    while read_busy() == busy_level:
        if timeout is not None and time.monotonic() - start_time > timeout:
            logger.error(f"Timeout waiting for display to become idle after {timeout}s")
            raise BusyTimeoutError(f"Busy line still active after {timeout} seconds")
        delay_ms(poll_ms)
    logger.debug("Display is now idle")

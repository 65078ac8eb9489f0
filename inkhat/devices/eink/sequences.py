"""
Waveshare 7.5" V2 (UC8179 controller) commands and protocol sequences.

Every multi-step operation is a tuple of steps executed by issue_sequence():

  Command(opcode, payload)  command transaction, then a data transaction if
                            the payload is not empty
  Data(payload)             data transaction only
  Delay(ms)                 fixed delay
  WaitIdle()                poll the busy line until the panel is idle

Datasheet: https://www.waveshare.com/w/upload/6/60/7.5inch_e-Paper_V2_Specification.pdf
"""

from typing import NamedTuple

# =============================================================================
# Commands
# =============================================================================

PANEL_SETTING = 0x00
POWER_SETTING = 0x01
POWER_OFF = 0x02
POWER_ON = 0x04
BOOSTER_SOFT_START = 0x06
DEEP_SLEEP = 0x07
DATA_START_TRANSMISSION_1 = 0x10    # "old" frame
DISPLAY_REFRESH = 0x12
DATA_START_TRANSMISSION_2 = 0x13    # "new" frame
DUAL_SPI = 0x15
VCOM_AND_DATA_INTERVAL = 0x50
TCON_SETTING = 0x60
RESOLUTION_SETTING = 0x61
# Undocumented tuning register used by the manufacturer's init sequence
TUNING = 0x52

DEEP_SLEEP_CHECK_CODE = 0xA5

# =============================================================================
# Timing (milliseconds)
# =============================================================================

RESET_HIGH_MS = 20
RESET_LOW_MS = 2
POWER_ON_SETTLE_MS = 100
REFRESH_SETTLE_MS = 100
DEEP_SLEEP_SETTLE_MS = 2000

# Reset line levels and the time to hold each one
RESET_PULSE = ((1, RESET_HIGH_MS), (0, RESET_LOW_MS), (1, RESET_HIGH_MS))


class Command(NamedTuple):
    opcode: int
    payload: bytes = b''


class Data(NamedTuple):
    payload: bytes


class Delay(NamedTuple):
    ms: int


class WaitIdle(NamedTuple):
    pass


def resolution_payload(width, height):
    return bytes([(width >> 8) & 0xFF, width & 0xFF, (height >> 8) & 0xFF, height & 0xFF])


def init_sequence(width, height):
    """Power-up sequence run after a hardware reset."""
    return (
        Command(POWER_SETTING, bytes([
            0x07,
            0x07,   # VGH=20V, VGL=-20V
            0x3F,   # VDH=15V
            0x3F,   # VDL=-15V
        ])),
        Command(BOOSTER_SOFT_START, bytes([0x17, 0x17, 0x28, 0x17])),
        Command(POWER_ON),
        Delay(POWER_ON_SETTLE_MS),
        WaitIdle(),
        Command(PANEL_SETTING, bytes([0x1F])),     # KW-3f KWR-2F BWROTP 0f BWOTP 1f
        Command(RESOLUTION_SETTING, resolution_payload(width, height)),
        Command(DUAL_SPI, bytes([0x00])),
        Command(VCOM_AND_DATA_INTERVAL, bytes([0x10, 0x17])),
        Command(TUNING, bytes([0x03])),
        Command(TCON_SETTING, bytes([0x22])),
    )


TURN_ON_DISPLAY = (
    Command(DISPLAY_REFRESH),
    Delay(REFRESH_SETTLE_MS),
    WaitIdle(),
)

# No busy wait after deep sleep, the regulators need the fixed settle time
SLEEP_SEQUENCE = (
    Command(POWER_OFF),
    WaitIdle(),
    Command(DEEP_SLEEP, bytes([DEEP_SLEEP_CHECK_CODE])),
    Delay(DEEP_SLEEP_SETTLE_MS),
)


def display_sequence(buffer):
    """Full refresh: the same frame goes to both the old and new registers."""
    buffer = bytes(buffer)
    return (
        Command(DATA_START_TRANSMISSION_1),
        Data(buffer),
        Command(DATA_START_TRANSMISSION_2),
        Data(buffer),
    ) + TURN_ON_DISPLAY


def clear_sequence(old_rows, new_rows):
    """Full refresh streamed one scanline per data transaction."""
    return (
        (Command(DATA_START_TRANSMISSION_1),)
        + tuple(Data(row) for row in old_rows)
        + (Command(DATA_START_TRANSMISSION_2),)
        + tuple(Data(row) for row in new_rows)
        + TURN_ON_DISPLAY
    )


def issue_sequence(steps, framer, delay, wait_idle):
    """Execute protocol steps in order against a TransactionFramer."""
    for step in steps:
        if isinstance(step, Command):
            framer.send_command_with_data(step.opcode, step.payload)
        elif isinstance(step, Data):
            framer.send_data(step.payload)
        elif isinstance(step, Delay):
            delay(step.ms)
        elif isinstance(step, WaitIdle):
            wait_idle()
        else:
            raise TypeError(f"Unknown protocol step: {step!r}")

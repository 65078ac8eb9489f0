"""
Driver lifecycle states.

    UNINITIALIZED --init()--> READY
    READY --display/clear--> DISPLAYING | CLEARING --> READY
    READY --sleep()--> ASLEEP --init()--> READY
    any --close()--> CLOSED   (terminal)

A sequence that fails midway leaves the panel in an unknown state, so the
driver falls back to UNINITIALIZED and a fresh init() is required.
"""

from enum import Enum


class DisplayState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    DISPLAYING = "displaying"
    CLEARING = "clearing"
    ASLEEP = "asleep"
    CLOSED = "closed"


# Operation -> states it may start from
ALLOWED_FROM = {
    'init': (DisplayState.UNINITIALIZED, DisplayState.READY, DisplayState.ASLEEP),
    'display': (DisplayState.READY,),
    'clear': (DisplayState.READY,),
    'sleep': (DisplayState.READY,),
}

"""Shared enumerations, value types and response-parsing helpers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum

MAX_PHONE_LENGTH = 20
SOCKET_ERROR_ID = 255
# Seconds before a socket that failed to connect destroys itself.
SOCKET_CLOSE_CONNECT_FAIL_TIMEOUT = 11.0

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")


class ThresholdState(IntEnum):
    """Temperature supervision state reported by the modem."""

    T_MINUS_2 = -2
    T_MINUS_1 = -1
    T = 0
    T_PLUS_1 = 1
    T_PLUS_2 = 2
    SHUTDOWN_AFTER_CALL = 10
    SHUTDOWN = 20
    ERROR = 100


class RegState(IntEnum):
    """Network registration state."""

    IDLE = 0
    CONNECTED_HOME = 1
    CONNECTING = 2
    DENIED = 3
    UNKNOWN = 4
    CONNECTED_ROAMING = 5
    CONNECTED_SMS_ONLY_HOME = 6
    CONNECTED_SMS_ONLY_ROAMING = 7
    CONNECTED_EMERGENCY_ONLY = 8
    CONNECTED_CSFB_NOT_HOME = 9
    CONNECTED_CSFB_NOT_ROAMING = 10


class NetworkType(IntEnum):
    """Radio access technology in use."""

    UNKNOWN = 0
    GSM_2G = 1
    GPRS_2G = 2
    EDGE_2G = 3
    WCDMA_3G = 4
    HSDPA_3G = 5
    HSUPA_3G = 6
    HSPA_3G = 7
    OTHER_3G = 8
    LTE_4G = 9
    NR_5G = 10


class InitState(IntEnum):
    NONE = 0
    PIN = 1
    WAIT_CREG = 2
    READY = 3
    ERROR = 4


class FailState(IntEnum):
    UNKNOWN = 0
    OTHER_PIN = 1
    REG_NETWORK = 2


class SocketState(IntEnum):
    CREATING = 0
    CONNECTING = 1
    READY = 2
    CLOSING = 3
    CLOSING_DELAY = 4
    DISCONNECTED = 5


class SocketSSL(IntEnum):
    DISABLE = 0
    PROFILE_DEF = 1
    PROFILE_1 = 2
    PROFILE_2 = 3
    PROFILE_3 = 4
    PROFILE_4 = 5


class SocketError(IntEnum):
    NONE = 0
    NO_AVAILABLE_SLOTS = 1
    FAILED_ACTIVATE_SERVICE = 2
    FAILED_CREATE_SOCKET = 3
    FAILED_CONFIGURE_SOCKET = 4
    FAILED_CONNECT = 5


class ResponseType(IntEnum):
    """Kind of modem response delivered for a pending command.

    Everything above ``OK`` is a failure of some kind.
    """

    DATA = 0
    EXPECT_DATA = 1
    EXTRA_TRIGGER = 2
    OK = 3
    ERROR = 4
    TIMEOUT = 5


@dataclass
class NetworkStats:
    """Last known network and module statistics."""

    reg_state: RegState = RegState.IDLE
    network_type: NetworkType = NetworkType.UNKNOWN
    threshold_state: ThresholdState = ThresholdState.T
    signal_strength: int = 0
    signal_quality: int = 0
    temperature: float = 0.0

    def reset(self) -> None:
        """Return every field to its initial value."""
        self.reg_state = RegState.IDLE
        self.network_type = NetworkType.UNKNOWN
        self.threshold_state = ThresholdState.T
        self.signal_strength = 0
        self.signal_quality = 0
        self.temperature = 0.0


@dataclass
class IncomingSMSInfo:
    """Sender and time stamp of a received SMS."""

    sender: str = ""
    timestamp: datetime | None = None

    def __post_init__(self) -> None:
        if len(self.sender) >= MAX_PHONE_LENGTH:
            raise ValueError(
                f"sender longer than {MAX_PHONE_LENGTH - 1} characters: {self.sender!r}"
            )


def is_event(prefix: str, data: str) -> bool:
    """Tell whether an unsolicited line starts with the given command prefix."""
    if not data.startswith(prefix):
        return False
    rest = data[len(prefix):]
    return not rest or rest[0] in ":, "


def event_payload(prefix: str, data: str) -> str:
    """Return the arguments that follow ``prefix`` and its separator."""
    if not is_event(prefix, data):
        raise ValueError(f"{data!r} does not start with {prefix!r}")
    rest = data[len(prefix):]
    if rest[:1] in (":", ","):
        rest = rest[1:]
    return rest.lstrip(" ")


def split_args(text: str, count: int) -> list[str | None]:
    """Split on commas into exactly ``count`` slots, missing ones as None."""
    if count < 1:
        raise ValueError("count must be positive")
    parts: list[str | None] = list(text.split(",", count - 1))
    parts.extend([None] * (count - len(parts)))
    return parts


def unquote(text: str) -> str:
    """Strip surrounding double quotes."""
    if text.startswith('"'):
        text = text[1:]
    if text.endswith('"'):
        text = text[:-1]
    return text


def parse_int(text: str | None) -> int:
    """Read a leading decimal integer, giving 0 when there is none."""
    if text is None:
        return 0
    match = _INT_PREFIX.match(text)
    return int(match.group(1)) if match else 0
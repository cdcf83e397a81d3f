"""A modem-side socket and its connection life cycle."""

from __future__ import annotations

import time
from collections import deque
from collections.abc import Callable
from ipaddress import IPv4Address
from typing import TYPE_CHECKING, Union

from .types import (
    SOCKET_CLOSE_CONNECT_FAIL_TIMEOUT,
    SOCKET_ERROR_ID,
    SocketError,
    SocketSSL,
    SocketState,
)

if TYPE_CHECKING:
    from .socket_manager import GSMSocketManager

MAX_PENDING_PACKETS = 16
DEFAULT_KEEP_ALIVE_MS = 300000

IPLike = Union[IPv4Address, str, int]


def _check_port(port: int) -> int:
    if not 0 <= port <= 0xFFFF:
        raise ValueError(f"port {port} outside 0..65535")
    return port


class GSMSocket:
    """A socket opened through the modem.

    A socket that is not connected within
    ``SOCKET_CLOSE_CONNECT_FAIL_TIMEOUT`` seconds, or whose connection
    failed, asks its manager to destroy it the next time it is polled.
    """

    def __init__(
        self,
        manager: GSMSocketManager,
        ip: IPLike,
        port: int,
        no_tcp_delay: bool = True,
        keep_alive_ms: int = DEFAULT_KEEP_ALIVE_MS,
        ssl_type: SocketSSL = SocketSSL.DISABLE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        _check_port(port)
        if keep_alive_ms < 0:
            raise ValueError("keep_alive_ms must not be negative")
        self._manager = manager
        self._clock = clock
        self.ip = IPv4Address(ip)
        self.port = port
        self.no_tcp_delay = no_tcp_delay
        self.keep_alive_ms = keep_alive_ms
        self.ssl_type = SocketSSL(ssl_type)
        self.socket_id = SOCKET_ERROR_ID
        self.state = SocketState.CREATING
        self.error = SocketError.NONE
        self.outgoing: deque[bytes] = deque()
        self._destroy_at: float | None = None
        self._start_destroy_timer()

    def _start_destroy_timer(self) -> None:
        self._destroy_at = self._clock() + SOCKET_CLOSE_CONNECT_FAIL_TIMEOUT

    def _next_setup_step(self, keep_alive: bool, ssl: bool) -> None:
        if keep_alive and self.keep_alive_ms > 0:
            self._manager.set_keep_alive(self)
        elif ssl and self.ssl_type > SocketSSL.DISABLE:
            self._manager.set_ssl(self)
        elif self.no_tcp_delay:
            self._manager.set_tcp_no_delay(self)
        else:
            self._manager.connect(self)

    def on_socket_created(self, socket_id: int) -> None:
        """Take the id the modem assigned and start configuring the socket."""
        self.socket_id = socket_id
        self.state = SocketState.CONNECTING
        self._next_setup_step(keep_alive=True, ssl=True)

    def on_socket_connection(self, error: SocketError) -> None:
        """Record the connection outcome; a failure closes and schedules destruction."""
        self.error = SocketError(error)
        if self.error != SocketError.NONE:
            self._manager.close(self.socket_id)
            self.state = SocketState.CLOSING_DELAY
            self._start_destroy_timer()
            return
        self.state = SocketState.READY
        self._destroy_at = None

    def on_keep_alive_confirm(self) -> None:
        self._next_setup_step(keep_alive=False, ssl=True)

    def on_ssl_confirm(self) -> None:
        self._next_setup_step(keep_alive=False, ssl=False)

    def on_tcp_no_delay_confirm(self) -> None:
        self._manager.connect(self)

    def close(self) -> bool:
        """Ask the modem to close the socket; False if already closing."""
        if self.state in (SocketState.CLOSING, SocketState.CLOSING_DELAY):
            return False
        self.state = SocketState.CLOSING
        return self._manager.close(self.socket_id)

    def start_listen(self, port: int) -> bool:
        """Check the port; listening is never started, so the result is False."""
        _check_port(port)
        listening = False
        return listening

    def send_data(self, data: bytes) -> bool:
        """Queue a packet for sending; False if not connected or the queue is full."""
        if self.state != SocketState.READY:
            return False
        packet = bytes(data)
        if not packet or len(self.outgoing) >= MAX_PENDING_PACKETS:
            return False
        self.outgoing.append(packet)
        self._manager.send(self)
        return True

    def is_connected(self) -> bool:
        return self.state == SocketState.READY

    def is_initialising(self) -> bool:
        return self.socket_id == SOCKET_ERROR_ID and self.state == SocketState.CREATING

    def poll(self, now: float | None = None) -> bool:
        """Fire the destroy timer if it has expired; True when it fired."""
        if self._destroy_at is None:
            return False
        if now is None:
            now = self._clock()
        if now < self._destroy_at:
            return False
        self._destroy_at = None
        self._manager.destroy_socket(self.socket_id)
        return True

    def __repr__(self) -> str:
        return (
            f"GSMSocket(id={self.socket_id}, {self.ip}:{self.port}, "
            f"state={self.state.name})"
        )
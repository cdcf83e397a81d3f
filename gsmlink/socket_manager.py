"""Book-keeping for modem sockets shared by every modem family."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from ipaddress import IPv4Address

from .socket import GSMSocket, IPLike
from .types import SOCKET_ERROR_ID, SocketError, SocketState

# Command timeouts in seconds.
SOCKET_CONNECTION_TIMEOUT = 60.0
SOCKET_CMD_TIMEOUT = 10.0
SOCKET_BUFFER_SIZE = 256

_log = logging.getLogger(__name__)

SocketCallback = Callable[[GSMSocket], None]
DataCallback = Callable[[GSMSocket, bytes], None]


class SocketHandler:
    """Receives socket notifications.

    Pass callables for the notifications of interest, or subclass and
    override the methods.
    """

    def __init__(
        self,
        connected: SocketCallback | None = None,
        data: DataCallback | None = None,
        closed: SocketCallback | None = None,
        listening: SocketCallback | None = None,
    ) -> None:
        self._connected = connected
        self._data = data
        self._closed = closed
        self._listening = listening

    def on_socket_connected(self, socket: GSMSocket) -> None:
        """Called when a socket finished connecting."""
        if self._connected is not None:
            self._connected(socket)

    def on_socket_data(self, socket: GSMSocket, data: bytes) -> None:
        """Called with data received on a socket."""
        if self._data is not None:
            self._data(socket, data)

    def on_socket_close(self, socket: GSMSocket) -> None:
        """Called just before a socket is discarded."""
        if self._closed is not None:
            self._closed(socket)

    def on_socket_start_listen(self, socket: GSMSocket) -> None:
        """Called when a socket starts listening."""
        if self._listening is not None:
            self._listening(socket)


class SocketArray:
    """A bounded, ordered collection of sockets."""

    def __init__(self, max_size: int) -> None:
        if max_size < 1:
            raise ValueError("max_size must be positive")
        self.max_size = max_size
        self._items: list[GSMSocket] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[GSMSocket]:
        return iter(list(self._items))

    def __getitem__(self, index: int) -> GSMSocket:
        return self._items[index]

    def append(self, socket: GSMSocket) -> bool:
        if self.is_full():
            return False
        self._items.append(socket)
        return True

    def remove(self, socket: GSMSocket) -> bool:
        try:
            self._items.remove(socket)
        except ValueError:
            return False
        return True

    def is_full(self) -> bool:
        return len(self._items) >= self.max_size

    def peek_socket(self, socket_id: int) -> GSMSocket | None:
        return next((s for s in self._items if s.socket_id == socket_id), None)

    def peek_by_address(self, ip: IPLike, port: int) -> GSMSocket | None:
        address = IPv4Address(ip)
        return next(
            (s for s in self._items if s.ip == address and s.port == port), None
        )

    def peek_initialising_socket(self) -> GSMSocket | None:
        return next((s for s in self._items if s.is_initialising()), None)

    def unshift_socket(self, socket_id: int) -> GSMSocket | None:
        """Remove and return the first socket with this id."""
        socket = self.peek_socket(socket_id)
        if socket is not None:
            self._items.remove(socket)
        return socket


class GSMSocketManager(ABC):
    """Tracks sockets and drives their set-up, sending and teardown.

    Subclasses issue the modem-specific commands.
    """

    def __init__(
        self,
        modem: object,
        gprs: object,
        sockets_amount: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.modem = modem
        self.gprs = gprs
        self.sockets = SocketArray(sockets_amount)
        self.handler: SocketHandler | None = None
        self.pending_transmission = SOCKET_ERROR_ID
        self._clock = clock

    def set_socket_handler(self, handler: SocketHandler | None) -> None:
        self.handler = handler

    def connect_socket(self, ip: IPLike, port: int) -> GSMSocket | None:
        """Return the socket to ``ip:port``, creating one if there is room."""
        socket = self.sockets.peek_by_address(ip, port)
        if socket is not None:
            return socket
        if self.sockets.is_full():
            return None
        socket = GSMSocket(self, ip, port, clock=self._clock)
        self.sockets.append(socket)
        if not self.connect_socket_internal(socket):
            self.sockets.remove(socket)
            return None
        return socket

    def close_socket(self, socket_id: int) -> bool:
        socket = self.sockets.peek_socket(socket_id)
        if socket is None:
            return False
        return socket.close()

    def close_all(self) -> None:
        for socket in reversed(list(self.sockets)):
            self.close_socket(socket.socket_id)

    def get_socket(self, socket_id: int) -> GSMSocket | None:
        return self.sockets.peek_socket(socket_id)

    def is_max_created(self) -> bool:
        return self.sockets.is_full()

    def on_modem_reboot(self) -> None:
        """Forget the pending transmission and destroy every socket."""
        self.pending_transmission = SOCKET_ERROR_ID
        while len(self.sockets) > 0:
            self.destroy_socket(self.sockets[0].socket_id)

    def debug_lines(self) -> list[str]:
        lines = [f"SH pendTR: {self.pending_transmission}"]
        for number, socket in enumerate(self.sockets, start=1):
            lines.append(f"{number}) SH sock: {socket.socket_id}->{int(socket.state)}")
        return lines

    def send(self, socket: GSMSocket | None) -> int:
        """Start sending the socket's next packet; return its length or 0."""
        # Only one send command at a time, so the command queue is not flooded.
        if self.pending_transmission != SOCKET_ERROR_ID or socket is None:
            return 0
        if not socket.outgoing or not socket.outgoing[0]:
            return 0
        packet = socket.outgoing[0]
        self.pending_transmission = socket.socket_id
        if not self.send_internal(socket, packet):
            self.pending_transmission = SOCKET_ERROR_ID
            return 0
        socket.outgoing.popleft()
        return len(packet)

    def send_next_available_data(self) -> int:
        """Send from the next connected socket with queued data, round robin."""
        start = (self.pending_transmission + 1) & 0xFF
        if start >= self.sockets.max_size:
            start = 0
        order = list(range(start, self.sockets.max_size)) + list(range(0, start + 1))
        for socket_id in order:
            socket = self.sockets.peek_socket(socket_id)
            if socket is None or not socket.is_connected():
                continue
            if socket.outgoing:
                self.pending_transmission = SOCKET_ERROR_ID
                return self.send(socket)
        self.pending_transmission = SOCKET_ERROR_ID
        return 0

    def destroy_socket(self, socket_id: int) -> bool:
        """Remove a socket, notifying the handler and closing it if needed."""
        socket = self.sockets.unshift_socket(socket_id)
        _log.debug("destroy socket %s: %s", socket_id, "found" if socket else "missing")
        if socket is None:
            return False
        if self.handler is not None:
            self.handler.on_socket_close(socket)
        if socket.state != SocketState.CLOSING:
            self.close(socket.socket_id)
        return True

    def on_socket_created(self, socket_id: int) -> GSMSocket | None:
        """Bind a new modem socket id to the first socket waiting for one."""
        socket = self.sockets.peek_initialising_socket()
        if socket is None:
            self.close(socket_id)
        else:
            socket.on_socket_created(socket_id)
        return socket

    def on_socket_connection(self, socket_id: int, error: SocketError) -> None:
        _log.debug("socket %s connection result %s", socket_id, int(error))
        socket = self.get_socket(socket_id)
        if socket is None:
            if socket_id != SOCKET_ERROR_ID:
                self.close(socket_id)
            else:
                self.destroy_socket(socket_id)
            return
        socket.on_socket_connection(error)
        if error == SocketError.NONE and self.handler is not None:
            self.handler.on_socket_connected(socket)

    def on_socket_closed(self, socket_id: int) -> None:
        _log.debug("socket %s closed", socket_id)
        self.destroy_socket(socket_id)
        if self.pending_transmission == socket_id:
            self.send_next_available_data()

    def on_socket_data(self, socket_id: int, data: bytes) -> None:
        socket = self.get_socket(socket_id)
        if socket is not None and self.handler is not None:
            self.handler.on_socket_data(socket, bytes(data))

    def on_keep_alive_confirm(self, socket_id: int) -> None:
        socket = self.get_socket(socket_id)
        if socket is not None:
            socket.on_keep_alive_confirm()

    def on_ssl_confirm(self, socket_id: int) -> None:
        socket = self.get_socket(socket_id)
        if socket is not None:
            socket.on_ssl_confirm()

    def on_tcp_no_delay_confirm(self, socket_id: int) -> None:
        socket = self.get_socket(socket_id)
        if socket is not None:
            socket.on_tcp_no_delay_confirm()

    def get_initialising_socket(self) -> GSMSocket | None:
        return self.sockets.peek_initialising_socket()

    def next_available_socket_index(self) -> int:
        """Lowest socket id not in use, or ``SOCKET_ERROR_ID`` when none is free."""
        for socket_id in range(self.sockets.max_size):
            if self.sockets.peek_socket(socket_id) is None:
                return socket_id
        return SOCKET_ERROR_ID

    @abstractmethod
    def connect(self, socket: GSMSocket) -> bool:
        """Issue the command that connects the socket."""

    @abstractmethod
    def set_keep_alive(self, socket: GSMSocket) -> bool:
        """Issue the keep-alive configuration command."""

    @abstractmethod
    def set_tcp_no_delay(self, socket: GSMSocket) -> bool:
        """Issue the TCP no-delay configuration command."""

    @abstractmethod
    def set_ssl(self, socket: GSMSocket) -> bool:
        """Issue the SSL configuration command."""

    @abstractmethod
    def close(self, socket_id: int) -> bool:
        """Issue the command that closes a modem socket."""

    @abstractmethod
    def send_internal(self, socket: GSMSocket, packet: bytes) -> bool:
        """Issue the command that writes a packet."""

    @abstractmethod
    def connect_socket_internal(self, socket: GSMSocket) -> bool:
        """Start creating a modem socket for ``socket``."""
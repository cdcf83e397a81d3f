"""Socket handling for SimCom modems (CIPOPEN / CIPSEND / CIPRXGET family)."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

from .commands import ByteCommand, LongArrayCommand, ModemCommand
from .socket import GSMSocket
from .socket_commands import SocketConnectCommand2, SocketStreamWriteCommand
from .socket_manager import (
    SOCKET_BUFFER_SIZE,
    SOCKET_CMD_TIMEOUT,
    SOCKET_CONNECTION_TIMEOUT,
    GSMSocketManager,
)
from .types import (
    SOCKET_ERROR_ID,
    ResponseType,
    SocketError,
    event_payload,
    is_event,
    parse_int,
    split_args,
)

SIMCOM_SOCKETS_AMOUNT = 7

SOCKET_CONNECT_CMD = "+CIPOPEN"
SOCKET_CLOSE_CMD = "+CIPCLOSE"
SOCKET_CLOSE_EVENT = "+IPCLOSE"
SOCKET_READ_CMD = "+CIPRXGET"
SOCKET_READ_EVENT = "+RECEIVE"
SOCKET_WRITE_CMD = "+CIPSEND"

# Seconds to wait for the raw data that follows a read response.
READ_EXPECT_TIMEOUT = 0.1
# Mode 2 of +CIPRXGET reads buffered data in raw form.
_READ_MODE = 2


def _payload(cmd: str, response: str) -> str:
    return response[len(cmd) + 2:]


class SimComSocketManager(GSMSocketManager):
    """Drives sockets on a SimCom modem.

    ``modem`` must offer ``add_command(cmd) -> bool``,
    ``set_expect_fixed_length(length, timeout)`` and a writable binary
    ``stream`` attribute.
    """

    def __init__(
        self, modem: Any, gprs: Any, clock: Callable[[], float] = time.monotonic
    ) -> None:
        super().__init__(modem, gprs, SIMCOM_SOCKETS_AMOUNT, clock)

    def on_gsm_response(
        self, request: ModemCommand, response: str | bytes, resp_type: ResponseType
    ) -> bool:
        """Handle a response to one of this manager's commands; False if not ours."""
        if request.cmd == SOCKET_CONNECT_CMD:
            # Success is reported by the +CIPOPEN event.
            if resp_type >= ResponseType.ERROR:
                self.on_socket_connection(request.socket_id, SocketError.FAILED_CONNECT)
            return True

        if request.cmd == SOCKET_READ_CMD:
            socket_id = request.values[1] & 0xFF
            if resp_type == ResponseType.DATA:
                args = split_args(_payload(SOCKET_READ_CMD, response), 4)
                data_size = parse_int(args[2]) & 0xFFFF
                if data_size > 0:
                    self.modem.set_expect_fixed_length(data_size, READ_EXPECT_TIMEOUT)
                    self.modem.add_command(
                        LongArrayCommand((_READ_MODE, socket_id, data_size), SOCKET_READ_CMD)
                    )
            elif resp_type == ResponseType.EXPECT_DATA:
                self.on_socket_data(socket_id, response)
            elif resp_type != ResponseType.OK:
                self.close_socket(socket_id)
            return True

        if request.cmd == SOCKET_WRITE_CMD:
            if resp_type == ResponseType.EXTRA_TRIGGER:
                request.write_content(self.modem.stream)
            elif resp_type == ResponseType.OK:
                self.send_next_available_data()
            elif resp_type > ResponseType.OK:
                self.close_socket(request.socket_id)
            return True

        if request.cmd == SOCKET_CLOSE_CMD:
            if resp_type >= ResponseType.OK:
                self.on_socket_closed(request.byte_data)
            return True

        return False

    def on_gsm_event(self, data: str) -> bool:
        """Handle an unsolicited line; False if it is not a socket event."""
        if is_event(SOCKET_CONNECT_CMD, data):
            args = split_args(event_payload(SOCKET_CONNECT_CMD, data), 2)
            socket_id = parse_int(args[0]) & 0xFF
            error = parse_int(args[1]) & 0xFF
            self.on_socket_connection(
                socket_id, SocketError.NONE if error == 0 else SocketError.FAILED_CONNECT
            )
            return True

        if is_event(SOCKET_CLOSE_EVENT, data):
            args = split_args(event_payload(SOCKET_CLOSE_EVENT, data), 2)
            self.on_socket_closed(parse_int(args[0]) & 0xFF)
            return True

        if is_event(SOCKET_READ_EVENT, data):
            args = split_args(event_payload(SOCKET_READ_EVENT, data), 2)
            socket_id = parse_int(args[0]) & 0xFF
            available = min(parse_int(args[1]) & 0xFFFF, SOCKET_BUFFER_SIZE)
            if available > 0:
                self.modem.add_command(
                    LongArrayCommand((_READ_MODE, socket_id, available), SOCKET_READ_CMD)
                )
            return True

        if is_event(SOCKET_WRITE_CMD, data):
            # Notification that data has been sent; nothing to do.
            return True
        return False

    def connect_socket_internal(self, socket: GSMSocket) -> bool:
        # Socket ids are chosen locally; no create command is needed.
        created = self.on_socket_created(self.next_available_socket_index())
        return created is not None

    def connect(self, socket: GSMSocket | None) -> bool:
        if socket is None:
            return False
        return self.modem.add_command(
            SocketConnectCommand2(
                socket.socket_id,
                "TCP",
                socket.ip,
                socket.port,
                SOCKET_CONNECT_CMD,
                SOCKET_CONNECTION_TIMEOUT,
            )
        )

    def set_keep_alive(self, socket: GSMSocket | None) -> bool:
        if socket is None:
            return False
        self.on_keep_alive_confirm(socket.socket_id)
        return True

    def set_ssl(self, socket: GSMSocket | None) -> bool:
        if socket is None:
            return False
        self.on_ssl_confirm(socket.socket_id)
        return True

    def close(self, socket_id: int) -> bool:
        if socket_id == SOCKET_ERROR_ID:
            return False
        return self.modem.add_command(
            ByteCommand(socket_id, SOCKET_CLOSE_CMD, SOCKET_CONNECTION_TIMEOUT)
        )

    def send_internal(self, socket: GSMSocket, packet: bytes) -> bool:
        return self.modem.add_command(
            SocketStreamWriteCommand(socket.socket_id, packet, SOCKET_WRITE_CMD, SOCKET_CMD_TIMEOUT)
        )

    def set_tcp_no_delay(self, socket: GSMSocket | None) -> bool:
        if socket is None:
            return False
        self.on_tcp_no_delay_confirm(socket.socket_id)
        return True
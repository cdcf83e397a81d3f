"""Socket handling for u-blox modems (USOCR / USOCO / USORD family)."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

from .commands import Byte3Command, ByteCommand, ByteShortCommand, ModemCommand, ULong4Command
from .socket import GSMSocket
from .socket_commands import SocketConnectCommand, SocketCreateCommand, SocketHexWriteCommand
from .socket_manager import (
    SOCKET_BUFFER_SIZE,
    SOCKET_CMD_TIMEOUT,
    SOCKET_CONNECTION_TIMEOUT,
    GSMSocketManager,
)
from .types import (
    ResponseType,
    SocketError,
    event_payload,
    is_event,
    parse_int,
    split_args,
    unquote,
)

UBLOX_MAX_SOCKETS_AMOUNT = 7

SOCKET_CREATE_CMD = "+USOCR"
SOCKET_CONNECT_CMD = "+USOCO"
SOCKET_CONNECT_EVENT = "+UUSOCO"
SOCKET_CONFIG_CMD = "+USOSO"
SOCKET_TYPE_CMD = "+USOSEC"
SOCKET_CLOSE_CMD = "+USOCL"
SOCKET_CLOSE_EVENT = "+UUSOCL"
SOCKET_READ_CMD = "+USORD"
SOCKET_READ_EVENT = "+UUSORD"
SOCKET_WRITE_CMD = "+USOWR"

_TCP_PROTOCOL = 6
_TCP_LEVEL = 6
_OPT_NO_DELAY = 1
_OPT_KEEP_ALIVE = 2


def _payload(cmd: str, response: str) -> str:
    return response[len(cmd) + 2:]


def _decode_hex(text: str, size: int) -> bytes:
    try:
        return bytes.fromhex(text[: size * 2])
    except ValueError as exc:
        raise ValueError(f"invalid hex socket data: {text!r}") from exc


class UbloxSocketManager(GSMSocketManager):
    """Drives sockets on a u-blox modem.

    ``modem`` must offer ``add_command(cmd) -> bool`` and
    ``force_command(cmd) -> bool``; ``gprs`` must offer ``deactivate()``.
    """

    def __init__(
        self, modem: Any, gprs: Any, clock: Callable[[], float] = time.monotonic
    ) -> None:
        super().__init__(modem, gprs, UBLOX_MAX_SOCKETS_AMOUNT, clock)

    def on_gsm_response(
        self, request: ModemCommand, response: str, resp_type: ResponseType
    ) -> bool:
        """Handle a response to one of this manager's commands; False if not ours."""
        if request.cmd == SOCKET_CREATE_CMD:
            if resp_type == ResponseType.DATA:
                min_len = len(SOCKET_CREATE_CMD) + 2
                if len(response) <= min_len:
                    return True
                socket_id = response[min_len:]
                if 0 < len(socket_id) <= 2:
                    request.socket_id = parse_int(socket_id) & 0xFF
            elif resp_type == ResponseType.OK:
                self.on_socket_created(request.socket_id)
            else:
                self.gprs.deactivate()
            return True

        if request.cmd == SOCKET_CONNECT_CMD:
            if resp_type == ResponseType.OK:
                self.on_socket_connection(request.socket_id, SocketError.NONE)
            elif resp_type == ResponseType.ERROR and request.cme_error == 0:
                self.on_socket_connection(request.socket_id, SocketError.FAILED_CONNECT)
            else:
                self.gprs.deactivate()
            return True

        if request.cmd == SOCKET_CONFIG_CMD:
            if resp_type != ResponseType.DATA:
                socket_id = request.value_data & 0xFF
                if resp_type == ResponseType.OK:
                    if request.value_data2 == _TCP_LEVEL and request.value_data3 == _OPT_KEEP_ALIVE:
                        self.on_keep_alive_confirm(socket_id)
                    elif request.value_data2 == _TCP_LEVEL and request.value_data3 == _OPT_NO_DELAY:
                        self.on_tcp_no_delay_confirm(socket_id)
                else:
                    self.on_socket_connection(socket_id, SocketError.FAILED_CONFIGURE_SOCKET)
            return True

        if request.cmd == SOCKET_TYPE_CMD:
            if resp_type != ResponseType.DATA:
                if resp_type == ResponseType.OK:
                    self.on_ssl_confirm(request.byte_data)
                else:
                    self.on_socket_connection(
                        request.byte_data, SocketError.FAILED_CONFIGURE_SOCKET
                    )
            return True

        if request.cmd == SOCKET_READ_CMD:
            if resp_type == ResponseType.DATA:
                args = split_args(_payload(SOCKET_READ_CMD, response), 3)
                size = parse_int(args[1]) & 0xFFFF
                data = _decode_hex(unquote(args[2] or ""), size)
                self.on_socket_data(request.byte_data, data)
            elif resp_type != ResponseType.OK:
                self.close_socket(request.byte_data)
            # On OK nothing: +UUSORD fires again if data is left.
            return True

        if request.cmd == SOCKET_WRITE_CMD:
            if resp_type == ResponseType.OK:
                self.send_next_available_data()
            elif resp_type >= ResponseType.ERROR:
                self.close_socket(request.socket_id)
            return True

        if request.cmd == SOCKET_CLOSE_CMD:
            if resp_type >= ResponseType.OK:
                self.on_socket_closed(request.byte_data)
            return True

        return False

    def on_gsm_event(self, data: str) -> bool:
        """Handle an unsolicited line; False if it is not a socket event."""
        if is_event(SOCKET_CONNECT_EVENT, data):
            args = split_args(event_payload(SOCKET_CONNECT_EVENT, data), 2)
            socket_id = parse_int(args[0]) & 0xFF
            error = parse_int(args[1])
            self.on_socket_connection(
                socket_id, SocketError.NONE if error == 0 else SocketError.FAILED_CONNECT
            )
            return True

        if is_event(SOCKET_CLOSE_EVENT, data):
            socket_text = _payload(SOCKET_CLOSE_EVENT, data)
            if socket_text:
                self.on_socket_closed(parse_int(socket_text) & 0xFF)
            return True

        if is_event(SOCKET_READ_EVENT, data):
            args = split_args(event_payload(SOCKET_READ_EVENT, data), 2)
            socket_id = parse_int(args[0]) & 0xFF
            available = parse_int(args[1]) & 0xFFFF
            if available > 0:
                self.modem.force_command(
                    ByteShortCommand(socket_id, SOCKET_BUFFER_SIZE, SOCKET_READ_CMD)
                )
            return True

        return False

    def connect_socket_internal(self, socket: GSMSocket) -> bool:
        return self.modem.add_command(
            SocketCreateCommand(_TCP_PROTOCOL, SOCKET_CREATE_CMD, SOCKET_CMD_TIMEOUT)
        )

    def connect(self, socket: GSMSocket | None) -> bool:
        if socket is None:
            return False
        return self.modem.add_command(
            SocketConnectCommand(
                socket.socket_id, socket.ip, socket.port, SOCKET_CONNECT_CMD, SOCKET_CONNECTION_TIMEOUT
            )
        )

    def set_keep_alive(self, socket: GSMSocket | None) -> bool:
        if socket is None:
            return False
        return self.modem.add_command(
            ULong4Command(
                socket.socket_id, _TCP_LEVEL, _OPT_KEEP_ALIVE, socket.keep_alive_ms, SOCKET_CONFIG_CMD
            )
        )

    def set_ssl(self, socket: GSMSocket | None) -> bool:
        if socket is None:
            return False
        profile = (int(socket.ssl_type) - 1) & 0xFF
        return self.modem.add_command(Byte3Command(socket.socket_id, 1, profile, SOCKET_TYPE_CMD))

    def close(self, socket_id: int) -> bool:
        return self.modem.add_command(
            ByteCommand(socket_id, SOCKET_CLOSE_CMD, SOCKET_CONNECTION_TIMEOUT)
        )

    def send_internal(self, socket: GSMSocket | None, packet: bytes) -> bool:
        if socket is None:
            return False
        return self.modem.add_command(
            SocketHexWriteCommand(socket.socket_id, packet, SOCKET_WRITE_CMD, SOCKET_CMD_TIMEOUT)
        )

    def set_tcp_no_delay(self, socket: GSMSocket | None) -> bool:
        if socket is None:
            return False
        return self.modem.add_command(
            ULong4Command(socket.socket_id, _TCP_LEVEL, _OPT_NO_DELAY, 1, SOCKET_CONFIG_CMD)
        )
"""AT commands for name resolution and socket handling."""

from __future__ import annotations

from ipaddress import IPv4Address
from typing import BinaryIO, Union

from .commands import (
    MODEM_COMMAND_TIMEOUT,
    ByteCharCommand,
    CharCommand,
    ModemCommand,
    StreamWriteCommand,
)
from .types import SOCKET_ERROR_ID

IPLike = Union[IPv4Address, str, int]

_EXTRA_SIGNS = frozenset({0x03, 0x1A, 0x1B})


def _in_range(value: int, high: int, name: str) -> int:
    if not 0 <= value <= high:
        raise ValueError(f"{name} {value} outside 0..{high}")
    return value


class IPResolveCommand(CharCommand):
    """Resolves a host name; the quoted name is the only parameter."""

    def __init__(self, host_name: str | None, cmd: str | None, timeout: float = MODEM_COMMAND_TIMEOUT) -> None:
        super().__init__(host_name, cmd, timeout, in_quotations=True)
        self.ip_addr = IPv4Address(0)

    def params(self) -> str:
        return super().params()


class IPResolveExtraCommand(ByteCharCommand):
    """Resolves a host name with a leading numeric mode parameter."""

    def __init__(
        self, data: int, host_name: str | None, cmd: str | None, timeout: float = MODEM_COMMAND_TIMEOUT
    ) -> None:
        super().__init__(data, host_name, cmd, timeout)
        self.ip_addr = IPv4Address(0)

    def params(self) -> str:
        return super().params()


class SocketCreateCommand(ModemCommand):
    """Creates a socket of the given protocol type; the modem assigns the id."""

    def __init__(self, socket_type: int, cmd: str | None, timeout: float = MODEM_COMMAND_TIMEOUT) -> None:
        super().__init__(cmd, timeout, is_modifier=True)
        self.socket_type = _in_range(socket_type, 0xFF, "socket_type")
        self.socket_id = SOCKET_ERROR_ID

    def params(self) -> str:
        return str(self.socket_type)


class SocketConnectCommand(ModemCommand):
    """Connects a socket to ``ip:port``."""

    def __init__(
        self,
        socket_id: int,
        ip: IPLike,
        port: int,
        cmd: str | None,
        timeout: float = MODEM_COMMAND_TIMEOUT,
    ) -> None:
        super().__init__(cmd, timeout, is_modifier=True)
        self.socket_id = _in_range(socket_id, 0xFF, "socket_id")
        self.ip = IPv4Address(ip)
        self.port = _in_range(port, 0xFFFF, "port")

    def params(self) -> str:
        return f'{self.socket_id},"{self.ip}",{self.port}'


class SocketConnectCommand2(SocketConnectCommand):
    """Connects a socket, naming the protocol explicitly."""

    def __init__(
        self,
        socket_id: int,
        protocol_type: str | None,
        ip: IPLike,
        port: int,
        cmd: str | None,
        timeout: float = MODEM_COMMAND_TIMEOUT,
    ) -> None:
        super().__init__(socket_id, ip, port, cmd, timeout)
        self.protocol_type = protocol_type

    def params(self) -> str:
        return f'{self.socket_id},"{self.protocol_type or ""}","{self.ip}",{self.port}'


class SocketConnectContextCommand(SocketConnectCommand2):
    """Connects a socket within a PDP context, with local port 0."""

    def __init__(
        self,
        context_id: int,
        socket_id: int,
        protocol_type: str | None,
        ip: IPLike,
        port: int,
        access_mode: int,
        cmd: str | None,
        timeout: float = MODEM_COMMAND_TIMEOUT,
    ) -> None:
        super().__init__(socket_id, protocol_type, ip, port, cmd, timeout)
        self.context_id = _in_range(context_id, 0xFF, "context_id")
        self.access_mode = _in_range(access_mode, 0xFF, "access_mode")

    def params(self) -> str:
        return f"{self.context_id},{super().params()},0,{self.access_mode}"


class SocketHexWriteCommand(ModemCommand):
    """Writes data to a socket as a quoted hexadecimal string."""

    def __init__(self, socket_id: int, data: bytes, cmd: str | None, timeout: float) -> None:
        super().__init__(cmd, timeout, is_modifier=True)
        self.socket_id = _in_range(socket_id, 0xFF, "socket_id")
        self.data = bytes(data)

    def params(self) -> str:
        return f'{self.socket_id},{len(self.data)},"{self.data.hex().upper()}"'


class SocketStreamWriteCommand(StreamWriteCommand):
    """Announces a data length, then streams the raw bytes after the prompt."""

    def __init__(
        self,
        socket_id: int,
        data: bytes,
        cmd: str | None,
        timeout: float,
        trigger: str | None = None,
    ) -> None:
        super().__init__(cmd, timeout)
        self.socket_id = _in_range(socket_id, 0xFF, "socket_id")
        self.data = bytes(data)
        self.trigger = trigger

    def params(self) -> str:
        return f"{self.socket_id},{len(self.data)}"

    def write_content(self, stream: BinaryIO) -> None:
        """Write the payload and terminate it with Ctrl-Z."""
        stream.write(self.data)
        self.end_stream(stream, False)

    def is_extra_sign(self, sign: int) -> bool:
        """Tell whether a byte is one of the stream control characters."""
        return sign in _EXTRA_SIGNS

    def extra_trigger(self) -> str | None:
        return ">" if self.trigger is None else self.trigger
"""AT command descriptions and how their parameters are written."""

from __future__ import annotations

from collections.abc import Iterable
from typing import BinaryIO

# Command timeouts are in seconds.
MODEM_COMMAND_TIMEOUT = 1.0

ESC = 0x1B
CTRL_Z = 0x1A

_BYTE_MAX = 0xFF
_SHORT_MAX = 0xFFFF
_ULONG_MAX = 0xFFFFFFFF
_LONG_MIN = -0x80000000
_LONG_MAX = 0x7FFFFFFF


def _checked(value: int, low: int, high: int, name: str) -> int:
    if not low <= value <= high:
        raise ValueError(f"{name} {value} outside {low}..{high}")
    return value


def _quoted(text: str | None) -> str:
    return f'"{text or ""}"'


class ModemCommand:
    """A single AT command with its flags and response state."""

    def __init__(
        self,
        cmd: str | None,
        timeout: float = MODEM_COMMAND_TIMEOUT,
        is_check: bool = False,
        is_modifier: bool = False,
        in_quotations: bool = False,
        end_semicolon: bool = False,
    ) -> None:
        self.cmd = cmd
        self.timeout = timeout
        self.is_check = is_check
        self.is_modifier = is_modifier
        self.in_quotations = in_quotations
        self.end_semicolon = end_semicolon
        self.has_extra_trigger = False
        self.resp_started = False
        self.cme_error = 0

    @property
    def cmd_len(self) -> int:
        return len(self.cmd) if self.cmd else 0

    def params(self) -> str:
        """Text written after the command's ``=``."""
        return ""

    def extra_trigger(self) -> str | None:
        """Prompt that asks for more input, if the command expects one."""
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.cmd!r}, params={self.params()!r})"


class StreamWriteCommand(ModemCommand):
    """A command followed by raw data, ended with Ctrl-Z or cancelled with ESC."""

    def __init__(self, cmd: str | None, timeout: float) -> None:
        super().__init__(cmd, timeout, is_modifier=True)
        self.has_extra_trigger = True

    def end_stream(self, stream: BinaryIO | None, cancel: bool) -> None:
        if stream is None:
            return
        stream.write(bytes([ESC if cancel else CTRL_Z]))

    def extra_trigger(self) -> str | None:
        return "> "


class ByteCommand(ModemCommand):
    def __init__(self, byte_data: int, cmd: str | None, timeout: float = MODEM_COMMAND_TIMEOUT) -> None:
        super().__init__(cmd, timeout, is_modifier=True)
        self.byte_data = _checked(byte_data, 0, _BYTE_MAX, "byte_data")

    def params(self) -> str:
        return str(self.byte_data)


class Byte2Command(ByteCommand):
    def __init__(
        self, byte_data: int, byte_data2: int, cmd: str | None, timeout: float = MODEM_COMMAND_TIMEOUT
    ) -> None:
        super().__init__(byte_data, cmd, timeout)
        self.byte_data2 = _checked(byte_data2, 0, _BYTE_MAX, "byte_data2")

    def params(self) -> str:
        return f"{super().params()},{self.byte_data2}"


class Byte3Command(Byte2Command):
    def __init__(
        self,
        byte_data: int,
        byte_data2: int,
        byte_data3: int,
        cmd: str | None,
        timeout: float = MODEM_COMMAND_TIMEOUT,
    ) -> None:
        super().__init__(byte_data, byte_data2, cmd, timeout)
        self.byte_data3 = _checked(byte_data3, 0, _BYTE_MAX, "byte_data3")

    def params(self) -> str:
        return f"{super().params()},{self.byte_data3}"


class Byte2CharCommand(Byte2Command):
    def __init__(
        self,
        data1: int,
        data2: int,
        data3: str | None,
        cmd: str | None,
        timeout: float = MODEM_COMMAND_TIMEOUT,
    ) -> None:
        super().__init__(data1, data2, cmd, timeout)
        self.data3 = data3

    def params(self) -> str:
        return f"{super().params()},{_quoted(self.data3)}"


class Byte2Char2Command(Byte2CharCommand):
    def __init__(
        self,
        data1: int,
        data2: int,
        data3: str | None,
        data4: str | None,
        cmd: str | None,
        timeout: float = MODEM_COMMAND_TIMEOUT,
    ) -> None:
        super().__init__(data1, data2, data3, cmd, timeout)
        self.data4 = data4

    def params(self) -> str:
        return f"{super().params()},{_quoted(self.data4)}"


class ByteChar2Command(ByteCommand):
    def __init__(
        self,
        data1: int,
        data2: str | None,
        data3: str | None,
        cmd: str | None,
        timeout: float = MODEM_COMMAND_TIMEOUT,
    ) -> None:
        super().__init__(data1, cmd, timeout)
        self.data2 = data2
        self.data3 = data3

    def params(self) -> str:
        return f"{super().params()},{_quoted(self.data2)},{_quoted(self.data3)}"


class ByteShortCommand(ByteCommand):
    def __init__(
        self, byte_data: int, data2: int, cmd: str | None, timeout: float = MODEM_COMMAND_TIMEOUT
    ) -> None:
        super().__init__(byte_data, cmd, timeout)
        self.data2 = _checked(data2, 0, _SHORT_MAX, "data2")

    def params(self) -> str:
        return f"{super().params()},{self.data2}"


class CharCommand(ModemCommand):
    def __init__(
        self,
        char_data: str | None,
        cmd: str | None,
        timeout: float = MODEM_COMMAND_TIMEOUT,
        in_quotations: bool = False,
        end_semicolon: bool = False,
    ) -> None:
        super().__init__(cmd, timeout, False, True, in_quotations, end_semicolon)
        self.char_data = char_data

    def params(self) -> str:
        return self.char_data or ""


class ByteCharCommand(CharCommand):
    def __init__(
        self, data: int, char_data2: str | None, cmd: str | None, timeout: float = MODEM_COMMAND_TIMEOUT
    ) -> None:
        super().__init__(char_data2, cmd, timeout)
        self.data = _checked(data, 0, _BYTE_MAX, "data")

    def params(self) -> str:
        return f"{self.data},{_quoted(super().params())}"


class ULongCommand(ModemCommand):
    def __init__(self, value_data: int, cmd: str | None, timeout: float = MODEM_COMMAND_TIMEOUT) -> None:
        super().__init__(cmd, timeout, is_modifier=True)
        self.value_data = _checked(value_data, 0, _ULONG_MAX, "value_data")

    def params(self) -> str:
        return str(self.value_data)


class ULong2Command(ULongCommand):
    def __init__(
        self, value_data: int, value_data2: int, cmd: str | None, timeout: float = MODEM_COMMAND_TIMEOUT
    ) -> None:
        super().__init__(value_data, cmd, timeout)
        self.value_data2 = _checked(value_data2, 0, _ULONG_MAX, "value_data2")

    def params(self) -> str:
        return f"{super().params()},{self.value_data2}"


class ULong2StringCommand(ULong2Command):
    def __init__(
        self,
        value_data: int,
        value_data2: int,
        value_data3: str | None,
        cmd: str | None,
        timeout: float = MODEM_COMMAND_TIMEOUT,
    ) -> None:
        super().__init__(value_data, value_data2, cmd, timeout)
        self.value_data3 = value_data3

    def params(self) -> str:
        return f"{super().params()},{_quoted(self.value_data3)}"


class ULong4Command(ULong2Command):
    def __init__(
        self,
        value_data: int,
        value_data2: int,
        value_data3: int,
        value_data4: int,
        cmd: str | None,
        timeout: float = MODEM_COMMAND_TIMEOUT,
    ) -> None:
        super().__init__(value_data, value_data2, cmd, timeout)
        self.value_data3 = _checked(value_data3, 0, _ULONG_MAX, "value_data3")
        self.value_data4 = _checked(value_data4, 0, _ULONG_MAX, "value_data4")

    def params(self) -> str:
        return f"{super().params()},{self.value_data3},{self.value_data4}"


class LongArrayCommand(ModemCommand):
    """A command whose parameters are a comma-separated list of signed integers."""

    def __init__(
        self, values: Iterable[int], cmd: str | None, timeout: float = MODEM_COMMAND_TIMEOUT
    ) -> None:
        super().__init__(cmd, timeout, is_modifier=True)
        self.values = tuple(_checked(v, _LONG_MIN, _LONG_MAX, "value") for v in values)
        if len(self.values) > _BYTE_MAX:
            raise ValueError(f"at most {_BYTE_MAX} values are allowed")

    def params(self) -> str:
        return ",".join(str(v) for v in self.values)
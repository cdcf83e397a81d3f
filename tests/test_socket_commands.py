import io
from ipaddress import IPv4Address

import pytest

from gsmlink.commands import CTRL_Z, ESC
from gsmlink.socket_commands import (
    IPResolveCommand,
    IPResolveExtraCommand,
    SocketConnectCommand,
    SocketConnectCommand2,
    SocketConnectContextCommand,
    SocketCreateCommand,
    SocketHexWriteCommand,
    SocketStreamWriteCommand,
)
from gsmlink.types import SOCKET_ERROR_ID, unquote


def test_ip_resolve_defaults():
    cmd = IPResolveCommand("ac.spinn.ee", "+CDNSGIP")
    assert cmd.params() == "ac.spinn.ee"
    assert cmd.in_quotations is True
    assert cmd.ip_addr == IPv4Address("0.0.0.0")


def test_ip_resolve_extra_params():
    cmd = IPResolveExtraCommand(0, "ac.spinn.ee", "+UDNSRN")
    assert cmd.params() == '0,"ac.spinn.ee"'
    assert cmd.ip_addr == IPv4Address(0)


def test_socket_create():
    cmd = SocketCreateCommand(6, "+USOCR")
    assert cmd.params() == "6"
    assert cmd.socket_id == SOCKET_ERROR_ID
    assert cmd.is_modifier is True


def test_connect2_matches_documented_example():
    cmd = SocketConnectCommand2(0, "TCP", "183.230.174.137", 6031, "+CIPOPEN")
    assert cmd.params() == '0,"TCP","183.230.174.137",6031'


def test_connect_fields():
    cmd = SocketConnectCommand(2, IPv4Address("183.230.174.137"), 6031, "+USOCO")
    assert cmd.params().split(",") == ["2", '"183.230.174.137"', "6031"]
    assert cmd.ip == IPv4Address("183.230.174.137")


def test_connect_context_wraps_connect2():
    inner = SocketConnectCommand2(0, "TCP", "183.230.174.137", 6031, "+CIPOPEN")
    cmd = SocketConnectContextCommand(1, 0, "TCP", "183.230.174.137", 6031, 2, "+QIOPEN")
    assert cmd.params() == f"1,{inner.params()},0,2"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"socket_id": 256, "ip": "1.2.3.4", "port": 80},
        {"socket_id": 0, "ip": "1.2.3.4", "port": 70000},
        {"socket_id": 0, "ip": "not-an-ip", "port": 80},
    ],
)
def test_connect_rejects_bad_values(kwargs):
    with pytest.raises(ValueError):
        SocketConnectCommand(cmd="+USOCO", **kwargs)


def test_hex_write_round_trip():
    data = b"Hello world!"
    cmd = SocketHexWriteCommand(3, data, "+USOWR", 10.0)
    sock, length, payload = cmd.params().split(",", 2)
    assert sock == "3"
    assert int(length) == len(data)
    assert payload.startswith('"') and payload.endswith('"')
    assert bytes.fromhex(unquote(payload)) == data


def test_stream_write_params_and_content():
    data = bytes(range(29))
    cmd = SocketStreamWriteCommand(0, data, "+CIPSEND", 10.0)
    assert cmd.params() == "0,29"
    out = io.BytesIO()
    cmd.write_content(out)
    assert out.getvalue() == data + bytes([CTRL_Z])


def test_stream_write_trigger():
    cmd = SocketStreamWriteCommand(0, b"x", "+CIPSEND", 10.0)
    assert cmd.extra_trigger() == ">"
    assert cmd.has_extra_trigger is True
    custom = SocketStreamWriteCommand(0, b"x", "+QISEND", 10.0, trigger="> ")
    assert custom.extra_trigger() == "> "


def test_stream_cancel_writes_escape():
    cmd = SocketStreamWriteCommand(0, b"x", "+CIPSEND", 10.0)
    out = io.BytesIO()
    cmd.end_stream(out, True)
    assert out.getvalue() == bytes([ESC])


@pytest.mark.parametrize("sign,expected", [(0x03, True), (0x1A, True), (0x1B, True), (0x00, False), (0x41, False)])
def test_is_extra_sign(sign, expected):
    cmd = SocketStreamWriteCommand(0, b"", "+CIPSEND", 10.0)
    assert cmd.is_extra_sign(sign) is expected
# gsmlink

Building blocks for driving a cellular modem over its AT command interface:
command objects that render their own parameters, a socket model with its
connection state machine, and socket managers for SimCom and u-blox modems.
It has no dependencies outside the standard library.

## Modules

- `gsmlink.types`: enums (`RegState`, `NetworkType`, `ThresholdState`,
  `InitState`, `FailState`, `SocketState`, `SocketSSL`, `SocketError`,
  `ResponseType`), the `NetworkStats` and `IncomingSMSInfo` dataclasses, and
  helpers for picking apart modem output: `is_event`, `event_payload`,
  `split_args`, `unquote` and `parse_int`.
- `gsmlink.commands`: `ModemCommand` and the generic commands built on it
  (`ByteCommand`, `Byte2Command`, `Byte3Command`, `Byte2CharCommand`,
  `Byte2Char2Command`, `ByteChar2Command`, `ByteShortCommand`,
  `CharCommand`, `ByteCharCommand`, `ULongCommand`, `ULong2Command`,
  `ULong2StringCommand`, `ULong4Command`, `LongArrayCommand`) and
  `StreamWriteCommand` for commands followed by raw data. Each command holds
  its name, timeout in seconds and flags, and renders the text after `=`
  through `params()`. Numeric arguments outside their range raise
  `ValueError`.
- `gsmlink.socket_commands`: host name resolution (`IPResolveCommand`,
  `IPResolveExtraCommand`) and socket commands (`SocketCreateCommand`,
  `SocketConnectCommand`, `SocketConnectCommand2`,
  `SocketConnectContextCommand`, `SocketHexWriteCommand`,
  `SocketStreamWriteCommand`).
- `gsmlink.sim_commands`: `PinStatusCommand` with `PinState`,
  `SMSSendCommand`, and `SimWriteEntryCommand` with `SimEntryField` for
  phone book writes.
- `gsmlink.socket`: `GSMSocket`, which walks a socket through keep-alive,
  SSL and TCP no-delay configuration before connecting, queues outgoing
  packets (at most 16), and destroys itself through its manager when it has
  not connected in time; call `poll()` to let that timer fire.
- `gsmlink.socket_manager`: `SocketHandler`, `SocketArray` and the abstract
  `GSMSocketManager`, which keeps the socket table, sends one packet at a
  time in round-robin order and forwards notifications to a handler.
- `gsmlink.simcom_sockets` and `gsmlink.ublox_sockets`:
  `SimComSocketManager` and `UbloxSocketManager`, which turn socket requests
  into vendor commands and handle the modem's responses and unsolicited
  lines through `on_gsm_response` and `on_gsm_event`.

## Examples

Rendering a command:

```python
from gsmlink.commands import ULong2Command

cmd = ULong2Command(0, 3, "+UPSDA")
print(cmd.cmd, cmd.params())   # +UPSDA 0,3
```

A socket manager is given an object that queues commands to the modem and
an object for the data connection. The u-blox manager needs
`add_command(cmd)` and `force_command(cmd)` on the first, returning a bool,
and `deactivate()` on the second:

```python
from gsmlink.socket_manager import SocketHandler
from gsmlink.types import ResponseType
from gsmlink.ublox_sockets import UbloxSocketManager


class Modem:
    def __init__(self):
        self.queue = []

    def add_command(self, cmd):
        self.queue.append(cmd)
        return True

    def force_command(self, cmd):
        self.queue.insert(0, cmd)
        return True


class DataConnection:
    def deactivate(self):
        print("data connection dropped")


modem = Modem()
manager = UbloxSocketManager(modem, DataConnection())
manager.set_socket_handler(SocketHandler(data=lambda sock, data: print(data)))

sock = manager.connect_socket("10.0.0.1", 8080)
create = modem.queue.pop()                # +USOCR with params "6"
manager.on_gsm_response(create, "+USOCR: 0", ResponseType.DATA)
manager.on_gsm_response(create, "", ResponseType.OK)
print(modem.queue[-1].cmd, modem.queue[-1].params())   # +USOSO 0,6,2,300000
```

`SocketHandler` takes optional callables (`connected`, `data`, `closed`,
`listening`), or can be subclassed with `on_socket_connected`,
`on_socket_data`, `on_socket_close` and `on_socket_start_listen`
overridden.

The SimCom manager needs `add_command(cmd)`,
`set_expect_fixed_length(length, timeout)` and a writable binary `stream`
attribute on the modem object; it picks socket ids itself instead of asking
the modem for one.

## What it does not do

The package does not open a serial port, queue or time out commands, or
read lines from a modem. Whatever drives the modem must write each command
as `AT<cmd>=<params>`, and pass responses and unsolicited lines to
`on_gsm_response` and `on_gsm_event`. It does not manage network
registration, the packet data (APN) connection, calls or SMS flows; the
SIM and SMS commands are only command objects.

## Running the tests

```
pip install -e .[test]
pytest
```
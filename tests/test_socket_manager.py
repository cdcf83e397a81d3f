from ipaddress import IPv4Address

import pytest

from gsmlink.socket_manager import GSMSocketManager, SocketArray, SocketHandler
from gsmlink.socket import GSMSocket
from gsmlink.types import (
    SOCKET_CLOSE_CONNECT_FAIL_TIMEOUT,
    SOCKET_ERROR_ID,
    SocketError,
    SocketState,
)


class Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class FakeManager(GSMSocketManager):
    def __init__(self, amount=3):
        self.clock = Clock()
        super().__init__(None, None, amount, clock=self.clock)
        self.calls = []
        self.create_ok = True
        self.send_ok = True

    def connect(self, socket):
        self.calls.append(("connect", socket.socket_id))
        return True

    def set_keep_alive(self, socket):
        self.calls.append(("keep_alive", socket.socket_id))
        return True

    def set_tcp_no_delay(self, socket):
        self.calls.append(("no_delay", socket.socket_id))
        return True

    def set_ssl(self, socket):
        self.calls.append(("ssl", socket.socket_id))
        return True

    def close(self, socket_id):
        self.calls.append(("close", socket_id))
        return True

    def send_internal(self, socket, packet):
        self.calls.append(("send", socket.socket_id, packet))
        return self.send_ok

    def connect_socket_internal(self, socket):
        self.calls.append(("create",))
        return self.create_ok


class RecordingHandler(SocketHandler):
    def __init__(self):
        self.events = []

    def on_socket_connected(self, socket):
        self.events.append(("connected", socket.socket_id))

    def on_socket_data(self, socket, data):
        self.events.append(("data", socket.socket_id, data))

    def on_socket_close(self, socket):
        self.events.append(("close", socket.socket_id))


def ready_socket(mgr, socket_id, port):
    sock = GSMSocketManager.connect_socket(mgr, "10.0.0.1", port)
    GSMSocketManager.on_socket_created(mgr, socket_id)
    GSMSocketManager.on_keep_alive_confirm(mgr, socket_id)
    GSMSocketManager.on_tcp_no_delay_confirm(mgr, socket_id)
    GSMSocketManager.on_socket_connection(mgr, socket_id, SocketError.NONE)
    return sock


def test_connect_socket_reuses_address():
    mgr = FakeManager()
    first = GSMSocketManager.connect_socket(mgr, "10.0.0.1", 80)
    second = GSMSocketManager.connect_socket(mgr, IPv4Address("10.0.0.1"), 80)
    assert first is second
    assert len(mgr.sockets) == 1
    assert GSMSocketManager.get_initialising_socket(mgr) is first


def test_connect_socket_internal_failure():
    mgr = FakeManager()
    mgr.create_ok = False
    assert GSMSocketManager.connect_socket(mgr, "10.0.0.1", 80) is None
    assert len(mgr.sockets) == 0


def test_connect_socket_when_full():
    mgr = FakeManager(amount=1)
    created = GSMSocketManager.connect_socket(mgr, "10.0.0.1", 80)
    assert created.port == 80
    assert GSMSocketManager.is_max_created(mgr) is True
    assert GSMSocketManager.connect_socket(mgr, "10.0.0.2", 80) is None


def test_full_connection_flow_notifies_handler():
    mgr = FakeManager()
    handler = RecordingHandler()
    GSMSocketManager.set_socket_handler(mgr, handler)
    sock = ready_socket(mgr, 0, 80)
    assert GSMSocket.is_connected(sock) is True
    assert mgr.calls[1:] == [("keep_alive", 0), ("no_delay", 0), ("connect", 0)]
    assert handler.events == [("connected", 0)]


def test_created_without_waiting_socket_closes_it():
    mgr = FakeManager()
    assert GSMSocketManager.on_socket_created(mgr, 5) is None
    assert mgr.calls == [("close", 5)]


def test_connection_for_unknown_socket():
    mgr = FakeManager()
    GSMSocketManager.on_socket_connection(mgr, 4, SocketError.NONE)
    assert mgr.calls == [("close", 4)]
    mgr.calls.clear()
    GSMSocketManager.on_socket_connection(mgr, SOCKET_ERROR_ID, SocketError.NONE)
    assert mgr.calls == []


def test_send_and_pending_transmission():
    mgr = FakeManager()
    sock = ready_socket(mgr, 0, 80)
    assert GSMSocket.send_data(sock, b"one") is True
    assert mgr.calls[-1] == ("send", 0, b"one")
    assert mgr.pending_transmission == 0
    assert not sock.outgoing
    assert GSMSocket.send_data(sock, b"two") is True
    assert list(sock.outgoing) == [b"two"]
    assert GSMSocketManager.send_next_available_data(mgr) == len(b"two")
    assert mgr.calls[-1] == ("send", 0, b"two")


def test_send_next_available_round_robin():
    mgr = FakeManager()
    first = ready_socket(mgr, 0, 80)
    second = ready_socket(mgr, 1, 81)
    GSMSocket.send_data(first, b"a")
    GSMSocket.send_data(first, b"b")
    GSMSocket.send_data(second, b"c")
    GSMSocketManager.send_next_available_data(mgr)
    assert mgr.calls[-1] == ("send", 1, b"c")
    GSMSocketManager.send_next_available_data(mgr)
    assert mgr.calls[-1] == ("send", 0, b"b")
    assert GSMSocketManager.send_next_available_data(mgr) == 0
    assert mgr.pending_transmission == SOCKET_ERROR_ID


def test_send_internal_failure_keeps_packet():
    mgr = FakeManager()
    sock = ready_socket(mgr, 0, 80)
    mgr.send_ok = False
    assert GSMSocket.send_data(sock, b"data") is True
    assert list(sock.outgoing) == [b"data"]
    assert mgr.pending_transmission == SOCKET_ERROR_ID
    assert GSMSocketManager.send(mgr, None) == 0


def test_socket_closed_by_modem_is_destroyed():
    mgr = FakeManager()
    handler = RecordingHandler()
    GSMSocketManager.set_socket_handler(mgr, handler)
    ready_socket(mgr, 2, 80)
    GSMSocketManager.on_socket_closed(mgr, 2)
    assert GSMSocketManager.get_socket(mgr, 2) is None
    assert handler.events[-1] == ("close", 2)
    assert mgr.calls[-1] == ("close", 2)


def test_close_socket_then_closed_event():
    mgr = FakeManager()
    sock = ready_socket(mgr, 1, 80)
    assert GSMSocketManager.close_socket(mgr, 1) is True
    assert sock.state == SocketState.CLOSING
    closes_before = mgr.calls.count(("close", 1))
    GSMSocketManager.on_socket_closed(mgr, 1)
    assert mgr.calls.count(("close", 1)) == closes_before
    assert GSMSocketManager.close_socket(mgr, 1) is False


def test_on_socket_data_forwards():
    mgr = FakeManager()
    handler = RecordingHandler()
    GSMSocketManager.set_socket_handler(mgr, handler)
    ready_socket(mgr, 0, 80)
    GSMSocketManager.on_socket_data(mgr, 0, b"payload")
    GSMSocketManager.on_socket_data(mgr, 6, b"ignored")
    assert handler.events[-1] == ("data", 0, b"payload")


def test_modem_reboot_clears_everything():
    mgr = FakeManager()
    ready_socket(mgr, 0, 80)
    GSMSocketManager.connect_socket(mgr, "10.0.0.2", 80)
    GSMSocketManager.on_modem_reboot(mgr)
    assert len(mgr.sockets) == 0
    assert mgr.pending_transmission == SOCKET_ERROR_ID


def test_next_available_socket_index():
    mgr = FakeManager(amount=2)
    assert GSMSocketManager.next_available_socket_index(mgr) == 0
    ready_socket(mgr, 0, 80)
    assert GSMSocketManager.next_available_socket_index(mgr) == 1
    ready_socket(mgr, 1, 81)
    assert GSMSocketManager.next_available_socket_index(mgr) == SOCKET_ERROR_ID


def test_close_all_closes_each():
    mgr = FakeManager()
    a = ready_socket(mgr, 0, 80)
    b = ready_socket(mgr, 1, 81)
    GSMSocketManager.close_all(mgr)
    assert a.state == SocketState.CLOSING
    assert b.state == SocketState.CLOSING


def test_failed_socket_destroyed_on_poll():
    mgr = FakeManager()
    sock = GSMSocketManager.connect_socket(mgr, "10.0.0.1", 80)
    GSMSocketManager.on_socket_created(mgr, 0)
    GSMSocketManager.on_socket_connection(mgr, 0, SocketError.FAILED_CONNECT)
    assert GSMSocketManager.get_socket(mgr, 0) is sock
    assert GSMSocket.poll(sock, SOCKET_CLOSE_CONNECT_FAIL_TIMEOUT) is True
    assert GSMSocketManager.get_socket(mgr, 0) is None


def test_debug_lines():
    mgr = FakeManager()
    ready_socket(mgr, 0, 80)
    lines = GSMSocketManager.debug_lines(mgr)
    assert lines[0] == "SH pendTR: 255"
    assert lines[1] == f"1) SH sock: 0->{int(SocketState.READY)}"


def test_socket_array_operations():
    arr = SocketArray(2)
    mgr = FakeManager()
    a = GSMSocket(mgr, "10.0.0.1", 80)
    b = GSMSocket(mgr, "10.0.0.2", 81)
    c = GSMSocket(mgr, "10.0.0.3", 82)
    assert arr.append(a) and arr.append(b)
    assert arr.append(c) is False
    assert arr.peek_by_address("10.0.0.2", 81) is b
    assert arr.peek_by_address("10.0.0.2", 80) is None
    assert arr.peek_initialising_socket() is a
    a.on_socket_created(3)
    assert arr.peek_socket(3) is a
    assert arr.unshift_socket(3) is a
    assert list(arr) == [b]
    assert arr.remove(a) is False


def test_socket_array_requires_positive_size():
    with pytest.raises(ValueError):
        SocketArray(0)
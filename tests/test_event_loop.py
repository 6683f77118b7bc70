import socket
import threading

import pytest

from reactornet.channel import Channel, EventFlag
from reactornet.dispatcher import EventDispatcher
from reactornet.event_loop import EventLoop


class RecordingDispatcher(EventDispatcher):
    name = "recording"

    def __init__(self):
        super().__init__("test")
        self.calls = []

    def add(self, channel):
        self.calls.append(("add", channel.fd))

    def delete(self, channel):
        self.calls.append(("delete", channel.fd))

    def update(self, channel):
        self.calls.append(("update", channel.fd))

    def dispatch(self, timeout):
        return []

    def clear(self):
        self.calls.append(("clear", None))


@pytest.fixture
def pair():
    left, right = socket.socketpair()
    yield left, right
    left.close()
    right.close()


@pytest.fixture
def recording_loop():
    dispatcher = RecordingDispatcher()
    loop = EventLoop(dispatcher=dispatcher)
    yield loop, dispatcher
    loop.close()


@pytest.fixture
def real_loop():
    loop = EventLoop()
    yield loop
    loop.close()


def test_default_name_and_wakeup_channel_registered(recording_loop):
    loop, dispatcher = recording_loop
    assert loop.thread_name == "main thread"
    assert dispatcher.calls == [("add", loop.socket_pair[1].fileno())]
    assert loop.socket_pair[1].fileno() in loop.channel_map


def test_add_registers_channel_once(recording_loop, pair):
    loop, dispatcher = recording_loop
    channel = Channel(pair[1], EventFlag.READ)
    loop.add_channel_event(channel)
    loop.add_channel_event(channel)
    adds = [call for call in dispatcher.calls if call == ("add", pair[1].fileno())]
    assert len(adds) == 1
    assert loop.channel_map.get(pair[1].fileno()) is channel


def test_remove_forgets_channel(recording_loop, pair):
    loop, dispatcher = recording_loop
    channel = Channel(pair[1], EventFlag.READ)
    loop.add_channel_event(channel)
    loop.remove_channel_event(channel)
    assert pair[1].fileno() not in loop.channel_map
    assert dispatcher.calls[-1] == ("delete", pair[1].fileno())


def test_update_of_unknown_channel_is_ignored(recording_loop, pair):
    loop, dispatcher = recording_loop
    before = list(dispatcher.calls)
    loop.update_channel_event(Channel(pair[1], EventFlag.READ))
    assert dispatcher.calls == before


def test_write_enable_updates_dispatcher(recording_loop, pair):
    loop, dispatcher = recording_loop
    channel = Channel(pair[1], EventFlag.READ, loop=loop)
    loop.add_channel_event(channel)
    channel.write_event_enable()
    assert dispatcher.calls[-1] == ("update", pair[1].fileno())
    assert channel.write_event_is_enabled()


def test_channel_event_activate_runs_callbacks(recording_loop, pair):
    loop, _ = recording_loop
    seen = []
    channel = Channel(
        pair[1],
        EventFlag.READ,
        read_callback=lambda data: seen.append(("read", data)),
        write_callback=lambda data: seen.append(("write", data)),
        data="payload",
    )
    loop.add_channel_event(channel)
    assert loop.channel_event_activate(pair[1].fileno(), EventFlag.READ | EventFlag.WRITE) is True
    assert seen == [("read", "payload"), ("write", "payload")]


def test_channel_event_activate_unknown_fd(recording_loop, pair):
    loop, _ = recording_loop
    assert loop.channel_event_activate(pair[0].fileno(), EventFlag.READ) is False
    assert loop.channel_event_activate(-1, EventFlag.READ) is False


def test_same_thread_checks(recording_loop):
    loop, _ = recording_loop
    results = {}

    def probe():
        results["same"] = loop.is_in_same_thread()
        try:
            loop.assert_in_same_thread()
        except RuntimeError:
            results["raised"] = True
        try:
            loop.run()
        except RuntimeError:
            results["run_raised"] = True

    worker = threading.Thread(target=probe)
    worker.start()
    worker.join()
    assert loop.is_in_same_thread() is True
    assert results == {"same": False, "raised": True, "run_raised": True}


def test_run_delivers_read_and_stops(real_loop, pair):
    received = []

    def on_read(sock):
        received.append(sock.recv(16))
        real_loop.stop()

    real_loop.add_channel_event(Channel(pair[1], EventFlag.READ, on_read, None, pair[1]))
    pair[0].sendall(b"hello")
    real_loop.run()
    assert received == [b"hello"]
    assert real_loop.quit is True
    assert pair[1].fileno() in real_loop.channel_map


def test_channel_added_from_other_thread(real_loop, pair):
    received = []

    def on_read(sock):
        received.append(sock.recv(16))
        real_loop.stop()

    def register():
        real_loop.add_channel_event(Channel(pair[1], EventFlag.READ, on_read, None, pair[1]))
        pair[0].sendall(b"ping")

    worker = threading.Thread(target=register)
    worker.start()
    real_loop.run()
    worker.join()
    assert received == [b"ping"]
    assert pair[1].fileno() in real_loop.channel_map


def test_stop_from_other_thread(real_loop):
    timer = threading.Timer(0.1, real_loop.stop)
    timer.start()
    real_loop.run()
    timer.join()
    assert real_loop.quit is True
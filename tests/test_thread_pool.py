import socket
import threading

import pytest

from reactornet.channel import Channel, EventFlag
from reactornet.event_loop import EventLoop
from reactornet.thread_pool import EventLoopThread, ThreadPool


@pytest.fixture
def main_loop():
    loop = EventLoop()
    yield loop
    loop.close()


def test_event_loop_thread_starts_named_loop():
    worker = EventLoopThread(0)
    loop = worker.start()
    try:
        assert loop is worker.loop
        assert loop.thread_name == "Thread-1"
        assert loop.is_in_same_thread() is False
    finally:
        worker.stop()
    assert worker.thread.is_alive() is False


def test_event_loop_thread_cannot_start_twice():
    worker = EventLoopThread(1)
    worker.start()
    try:
        with pytest.raises(RuntimeError):
            worker.start()
    finally:
        worker.stop()


def test_pool_without_threads_uses_main_loop(main_loop):
    pool = ThreadPool(main_loop, 0)
    pool.start()
    assert pool.get_loop() is main_loop
    assert pool.get_loop() is main_loop


def test_get_loop_before_start_raises(main_loop):
    pool = ThreadPool(main_loop, 2)
    with pytest.raises(RuntimeError):
        pool.get_loop()


def test_start_twice_raises(main_loop):
    pool = ThreadPool(main_loop, 0)
    pool.start()
    with pytest.raises(RuntimeError):
        pool.start()


def test_start_from_other_thread_raises(main_loop):
    pool = ThreadPool(main_loop, 0)
    errors = []

    def attempt():
        try:
            pool.start()
        except RuntimeError as exc:
            errors.append(exc)

    worker = threading.Thread(target=attempt)
    worker.start()
    worker.join()
    assert len(errors) == 1
    pool.start()
    assert pool.get_loop() is main_loop


def test_pool_round_robin(main_loop):
    pool = ThreadPool(main_loop, 2)
    pool.start()
    try:
        first, second, third = pool.get_loop(), pool.get_loop(), pool.get_loop()
        assert first is not second
        assert third is first
        assert first is not main_loop
        assert [first.thread_name, second.thread_name] == ["Thread-1", "Thread-2"]
    finally:
        pool.stop()


def test_worker_loop_serves_channel_added_from_main(main_loop):
    pool = ThreadPool(main_loop, 1)
    pool.start()
    left, right = socket.socketpair()
    done = threading.Event()
    received = []

    def on_read(sock):
        received.append((sock.recv(16), threading.current_thread().name))
        done.set()

    try:
        loop = pool.get_loop()
        assert loop.thread_name == "Thread-1"
        assert loop is not main_loop
        loop.add_channel_event(Channel(right, EventFlag.READ, on_read, None, right))
        left.sendall(b"data")
        assert done.wait(5)
        assert received == [(b"data", "Thread-1")]
        assert right.fileno() in loop.channel_map
    finally:
        pool.stop()
        left.close()
        right.close()
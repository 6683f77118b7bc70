"""Worker threads that each run their own event loop."""

from __future__ import annotations

import threading

from .event_loop import EventLoop
from .log import msgx


class EventLoopThread:
    """A thread that creates an event loop and runs it."""

    def __init__(self, index):
        self.thread_name = f"Thread-{index + 1}"
        self.loop = None
        self.thread = None
        self.thread_count = 0
        self._cond = threading.Condition()
        self._error = None

    def _run(self):
        with self._cond:
            try:
                self.loop = EventLoop(self.thread_name)
            except BaseException as exc:
                self._error = exc
                self._cond.notify_all()
                return
            msgx(f"event loop thread init and signal, {self.thread_name}")
            self._cond.notify_all()
        try:
            self.loop.run()
        finally:
            self.loop.close()

    def start(self):
        """Start the thread and return its loop once the loop exists."""
        if self.thread is not None:
            raise RuntimeError(f"{self.thread_name} already started")
        self.thread = threading.Thread(target=self._run, name=self.thread_name, daemon=True)
        self.thread.start()
        with self._cond:
            self._cond.wait_for(lambda: self.loop is not None or self._error is not None)
        if self._error is not None:
            raise RuntimeError(f"{self.thread_name} failed to start") from self._error
        msgx(f"event loop thread started, {self.thread_name}")
        return self.loop

    def stop(self):
        """Stop the loop and wait for the thread to finish."""
        if self.loop is not None:
            self.loop.stop()
        if self.thread is not None:
            self.thread.join()


class ThreadPool:
    """Event loop threads handed out in turn by ``get_loop``.

    With no threads every request gets the main loop.
    """

    def __init__(self, main_loop, thread_number):
        self.main_loop = main_loop
        self.thread_number = thread_number
        self.started = False
        self.position = 0
        self.event_loop_threads = []

    def start(self):
        """Start the worker threads; only from the main loop's thread, only once."""
        if self.started:
            raise RuntimeError("thread pool already started")
        self.main_loop.assert_in_same_thread()
        self.started = True
        if self.thread_number <= 0:
            return
        for index in range(self.thread_number):
            worker = EventLoopThread(index)
            self.event_loop_threads.append(worker)
            worker.start()

    def get_loop(self):
        """The next loop to serve a connection, chosen round robin."""
        if not self.started:
            raise RuntimeError("thread pool not started")
        self.main_loop.assert_in_same_thread()
        if self.thread_number <= 0:
            return self.main_loop
        selected = self.event_loop_threads[self.position].loop
        self.position = (self.position + 1) % self.thread_number
        return selected

    def stop(self):
        """Stop every worker thread."""
        for worker in self.event_loop_threads:
            worker.stop()
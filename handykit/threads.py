"""A blocking task queue and a fixed-size thread pool."""

from __future__ import annotations

import sys
import threading
from collections import deque
from typing import Any, Callable, Deque, List, Optional

WAIT_INFINITE = 2**31 - 1

Task = Callable[[], Any]


class SafeQueue:
    """A thread-safe FIFO queue; capacity 0 means unbounded."""

    WAIT_INFINITE = WAIT_INFINITE

    def __init__(self, capacity: int = 0) -> None:
        self._items: Deque[Any] = deque()
        self._capacity = capacity
        self._exit = False
        self._cond = threading.Condition()

    def push(self, item: Any) -> bool:
        """Add an item; False when the queue is full or has exited."""
        with self._cond:
            if self._exit or (self._capacity and len(self._items) >= self._capacity):
                return False
            self._items.append(item)
            self._cond.notify()
            return True

    def pop_wait(self, wait_ms: int = WAIT_INFINITE, default: Any = None) -> Any:
        """Take the oldest item, waiting up to wait_ms; `default` on timeout or exit."""
        with self._cond:
            self._wait_ready(wait_ms)
            if not self._items:
                return default
            return self._items.popleft()

    def _wait_ready(self, wait_ms: int) -> None:
        ready = lambda: self._exit or bool(self._items)  # noqa: E731
        if ready():
            return
        if wait_ms == WAIT_INFINITE:
            self._cond.wait_for(ready)
        elif wait_ms > 0:
            self._cond.wait_for(ready, timeout=wait_ms / 1000)

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)

    def exit(self) -> None:
        """Refuse new items and wake every waiter."""
        self._exit = True
        with self._cond:
            self._cond.notify_all()

    def exited(self) -> bool:
        return self._exit


class ThreadPool:
    """Worker threads that run queued callables until the pool exits."""

    def __init__(self, threads: int, task_capacity: int = 0, start: bool = True) -> None:
        self._tasks = SafeQueue(task_capacity)
        self._count = threads
        self._threads: List[threading.Thread] = []
        if start:
            self.start()

    def start(self) -> None:
        if self._threads:
            raise RuntimeError("thread pool already started")
        self._threads = [
            threading.Thread(target=self._work, name=f"pool-worker-{i}", daemon=True)
            for i in range(self._count)
        ]
        for thread in self._threads:
            thread.start()

    def _work(self) -> None:
        while not self._tasks.exited():
            task: Optional[Task] = self._tasks.pop_wait()
            if task is not None:
                task()

    def exit(self) -> "ThreadPool":
        self._tasks.exit()
        return self

    def join(self) -> None:
        for thread in self._threads:
            thread.join()

    def add_task(self, task: Task) -> bool:
        """Queue a callable; False when the queue is full or the pool has exited."""
        return self._tasks.push(task)

    def task_size(self) -> int:
        return len(self._tasks)

    def __enter__(self) -> "ThreadPool":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.exit()
        self.join()
        left = self.task_size()
        if left:
            print(f"{left} tasks not processed when thread pool exited", file=sys.stderr)
        return False
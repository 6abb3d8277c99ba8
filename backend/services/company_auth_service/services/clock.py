"""Millisecond wall clock, injectable for tests."""

from collections.abc import Callable
import time

Clock = Callable[[], int]


def system_clock_ms() -> int:
    return time.time_ns() // 1_000_000

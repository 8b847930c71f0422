"""Synthetic TranX-2 traffic for testing consumers without hardware.

Each transponder runs in its own thread and writes a passing roughly
every ``interval`` ms; a further thread writes a fixed noise level every
``noise_interval`` seconds.  All threads share one Writer behind a lock.
"""

from __future__ import annotations

import logging
import threading
import time

import numpy as np

from .codec import MAX_TRANSPONDER_ID, Passing
from .stream import Writer

logger = logging.getLogger(__name__)

_U32 = 1 << 32


def generate_transponders(amount: int, seed: int | None = None) -> list[int]:
    """Draw ``amount`` transponder ids in 0..MAX_TRANSPONDER_ID."""
    rng = np.random.default_rng(seed)
    ids = rng.integers(0, MAX_TRANSPONDER_ID + 1, size=amount, dtype=np.uint32)
    return [int(i) for i in ids]


def lap_ticks(rng: np.random.Generator, interval: int, jitter: int, i: int) -> int:
    """Milliseconds from start until lap ``i`` of one transponder."""
    offset = int(rng.integers(0, jitter + 1)) - jitter // 2
    return max(0, interval * i + offset)


def make_passing(rng: np.random.Generator, transponder_id: int, clock: int,
                 ticks: int) -> Passing:
    hits, strength, prefix, trailing = (
        int(v) for v in (
            rng.integers(5, 15),
            rng.integers(80, 130),
            rng.integers(0, 1 << 16),
            rng.integers(0, 1 << 8),
        )
    )
    return Passing(
        transponder_id=transponder_id,
        passing_ticks=(clock + ticks) % _U32,
        hits=hits,
        strength=strength,
        prefix=prefix,
        trailing=trailing,
    )


class Simulator:
    """Writes simulated passings and noise through a shared Writer."""

    def __init__(self, writer: Writer, transponders: list[int], interval: int,
                 jitter: int = 0, clock: int = 0, seed: int | None = None,
                 noise_interval: float = 5.0, noise_level: int = 2000):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.writer = writer
        self.transponders = transponders
        self.interval = interval
        self.jitter = jitter
        self.clock = clock
        self.noise_interval = noise_interval
        self.noise_level = noise_level
        self._seeds = np.random.SeedSequence(seed).spawn(len(transponders))
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._error: BaseException | None = None

    def _write(self, fn, value) -> None:
        with self._lock:
            fn(value)
            self.writer.flush()

    def _fail(self, exc: BaseException) -> None:
        logger.error("simulator writer failed: %s", exc)
        with self._lock:
            if self._error is None:
                self._error = exc
        self._stop.set()

    def _passings(self, transponder_id: int, seed: np.random.SeedSequence,
                  started: float) -> None:
        rng = np.random.default_rng(seed)
        i = 1
        while True:
            ticks = lap_ticks(rng, self.interval, self.jitter, i)
            delay = started + ticks / 1000.0 - time.monotonic()
            if self._stop.wait(max(0.0, delay)):
                return
            rec = make_passing(rng, transponder_id, self.clock, ticks)
            try:
                self._write(self.writer.write_passing, rec)
            except Exception as exc:
                self._fail(exc)
                return
            i += 1

    def _noise(self) -> None:
        while not self._stop.wait(self.noise_interval):
            try:
                self._write(self.writer.write_noise, self.noise_level)
            except Exception as exc:
                self._fail(exc)
                return

    def run(self, duration: float | None = None) -> None:
        """Run until stop(), ``duration`` seconds, or a write error."""
        started = time.monotonic()
        threads = [threading.Thread(target=self._noise, daemon=True)]
        for tid, seed in zip(self.transponders, self._seeds):
            threads.append(threading.Thread(
                target=self._passings, args=(tid, seed, started), daemon=True))
        logger.info("simulating %d transponders every %d ms",
                    len(self.transponders), self.interval)

        for t in threads:
            t.start()
        try:
            self._stop.wait(duration)
        finally:
            self._stop.set()
            for t in threads:
                t.join()

        if self._error is not None:
            raise self._error

    def stop(self) -> None:
        self._stop.set()

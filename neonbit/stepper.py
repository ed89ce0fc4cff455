# neonbit/stepper.py
"""
Periodic stepper that drives the register while the dashboard is running.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from . import constants as const
from .exceptions import OutOfRangeError

logger = logging.getLogger("Stepper")


def validate_interval_ms(interval_ms: int) -> int:
    if (
        not isinstance(interval_ms, int)
        or isinstance(interval_ms, bool)
        or not const.MIN_INTERVAL_MS <= interval_ms <= const.MAX_INTERVAL_MS
    ):
        raise OutOfRangeError(
            f"Interval must be between {const.MIN_INTERVAL_MS} and "
            f"{const.MAX_INTERVAL_MS} ms",
            value=interval_ms,
        )
    return interval_ms


@dataclass
class RunState:
    running: bool = False
    interval_ms: int = const.DEFAULT_INTERVAL_MS

    def as_dict(self):
        return {"running": self.running, "interval_ms": self.interval_ms}


class Stepper:
    """
    Owned asyncio task that calls `on_tick` once per interval.
    If a tick raises, the stepper halts and `on_halt` receives the error.

    stop() clears the running flag and bumps a generation counter before
    cancelling the task. A tick that wakes up after that sees either the
    flag or the stale generation and returns without stepping, so no step
    ever lands after a stop.
    """

    def __init__(
        self,
        on_tick: Callable[[], object],
        interval_ms: int = const.DEFAULT_INTERVAL_MS,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        on_halt: Optional[Callable[[Exception], object]] = None,
    ):
        self._on_tick = on_tick
        self._on_halt = on_halt
        self._loop = loop
        self.state = RunState(interval_ms=validate_interval_ms(interval_ms))
        self._task: Optional[asyncio.Task] = None
        self._generation = 0
        self.tick_count = 0

    @property
    def running(self) -> bool:
        return self.state.running

    @property
    def interval_ms(self) -> int:
        return self.state.interval_ms

    def set_interval_ms(self, interval_ms: int):
        """New interval applies from the next scheduled tick."""
        self.state.interval_ms = validate_interval_ms(interval_ms)
        logger.debug(f"Interval set to {interval_ms}ms")

    def start(self):
        """Starts ticking. Requires a running event loop."""
        if self.state.running:
            return
        loop = self._loop or asyncio.get_running_loop()
        self._generation += 1
        self.state.running = True
        self._task = loop.create_task(self._run(self._generation))
        logger.info(f"Stepper started ({self.state.interval_ms}ms)")

    def stop(self):
        if not self.state.running and self._task is None:
            return
        self.state.running = False
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        logger.info("Stepper stopped")

    async def wait_stopped(self):
        """Awaits the cancelled task, if any, so callers can shut down cleanly."""
        task = self._task
        self.stop()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    def _is_current(self, generation: int) -> bool:
        return self.state.running and generation == self._generation

    async def _run(self, generation: int):
        try:
            while self._is_current(generation):
                await asyncio.sleep(self.state.interval_ms / 1000.0)
                if not self._is_current(generation):
                    break
                self.tick_count += 1
                self._on_tick()
        except asyncio.CancelledError:
            logger.debug("Stepper task cancelled")
            raise
        except Exception as e:
            logger.error(f"Stepper tick failed: {e}")
            self.state.running = False
            self._generation += 1
            if self._on_halt is not None:
                self._on_halt(e)

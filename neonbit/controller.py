# neonbit/controller.py
"""
Session controller for the NeonBit simulator.

One SegmentController owns the whole model of a running session: the
mode-gated register, the stepper, and the history buffer. It is the single
entry point for commands coming from the dashboard, the HTTP API or the
stepper, and it publishes a RegisterEvent to every listener after each
change. Listeners (tone notifier, dashboard log, JSON output) only observe;
the core never depends on them being present.
"""
import logging
from typing import Any, Callable, Dict, List, Optional

from . import constants as const
from .digit_table import reverse_lookup
from .exporter import build_snapshot
from .history import HistoryBuffer
from .modes import Mode, RegisterState
from .register_model import EventKind, RegisterEvent, RegisterModel
from .stepper import RunState, Stepper

logger = logging.getLogger("SegmentController")

Listener = Callable[[RegisterEvent], Any]


class SegmentController:
    """
    Read accessors and commands for one 7-segment display session.

    Commands that the active mode does not allow are ignored and return
    None (unless the controller is built with ``strict=True``). Out-of-range
    arguments always raise OutOfRangeError.
    """

    def __init__(
        self,
        initial_mode: Mode = Mode.ANIMATION,
        interval_ms: int = const.DEFAULT_INTERVAL_MS,
        history_capacity: int = const.HISTORY_CAPACITY,
        clear_history_on_mode_change: bool = False,
        strict: bool = False,
        loop=None,
    ):
        self.model = RegisterModel(initial_mode, strict=strict)
        self.history = HistoryBuffer(history_capacity)
        self.stepper = Stepper(
            self._on_tick, interval_ms=interval_ms, loop=loop, on_halt=self._on_stepper_halt
        )
        self.clear_history_on_mode_change = clear_history_on_mode_change
        self._listeners: List[Listener] = []

        # The activity strip starts with the power-on value
        self.history.record(self.model.value, self.model.mode)
        logger.info(
            f"SegmentController initialized in {self.model.mode.value} mode, "
            f"interval {interval_ms}ms"
        )

    # -- listeners -----------------------------------------------------

    def add_listener(self, callback: Listener):
        self._listeners.append(callback)

    def remove_listener(self, callback: Listener):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _publish(self, event: Optional[RegisterEvent]) -> Optional[RegisterEvent]:
        if event is None:
            return None
        if event.changes_register:
            self.history.record(event.value, event.mode)
        for callback in list(self._listeners):
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Error in event listener {callback!r}: {e}")
        return event

    def emit(self, kind: EventKind, **detail) -> RegisterEvent:
        """Publishes a non-register event (run state, export) for the current register."""
        event = RegisterEvent(
            kind=kind,
            mode=self.mode,
            value=self.value,
            pattern=self.pattern,
            detail=detail,
        )
        return self._publish(event)

    # -- read accessors ------------------------------------------------

    @property
    def mode(self) -> Mode:
        return self.model.mode

    @property
    def register(self) -> RegisterState:
        return self.model.register

    @property
    def pattern(self) -> str:
        return self.model.pattern

    @property
    def value(self) -> int:
        return self.model.value

    @property
    def run_state(self) -> RunState:
        return RunState(
            running=self.stepper.running, interval_ms=self.stepper.interval_ms
        )

    @property
    def running(self) -> bool:
        return self.stepper.running

    @property
    def interval_ms(self) -> int:
        return self.stepper.interval_ms

    def get_history(self) -> List[float]:
        return self.history.snapshot()

    def get_state(self) -> Dict[str, Any]:
        """Complete, JSON-serializable view of the session."""
        return {
            "mode": self.mode.value,
            "pattern": self.pattern,
            "value": self.value,
            "digit": reverse_lookup(self.pattern),
            "segments": {
                label: bit == "1"
                for label, bit in zip(const.SEGMENT_LABELS, self.pattern)
            },
            "run_state": self.run_state.as_dict(),
            "history": self.get_history(),
        }

    def snapshot(self) -> Dict[str, Any]:
        """Export record: timestamp, mode, decimal and binary."""
        return build_snapshot(self.mode, self.value, self.pattern)

    # -- commands ------------------------------------------------------

    def _halt(self) -> bool:
        """Stops the stepper; True if it was running."""
        was_running = self.stepper.running
        self.stepper.stop()
        return was_running

    def _publish_halt(self, **detail):
        self.emit(
            EventKind.RUN_STATE,
            running=False,
            interval_ms=self.stepper.interval_ms,
            **detail,
        )

    def select_mode(self, mode) -> RegisterEvent:
        # An unknown mode must leave the session untouched
        mode = Mode.parse(mode)
        was_running = self._halt()
        event = self.model.select_mode(mode)
        if self.clear_history_on_mode_change:
            self.history.clear()
        self._publish(event)
        if was_running:
            self._publish_halt()
        return event

    def reset(self) -> RegisterEvent:
        was_running = self._halt()
        event = self._publish(self.model.reset())
        if was_running:
            self._publish_halt()
        return event

    def toggle_bit(self, index: int) -> Optional[RegisterEvent]:
        return self._publish(self.model.toggle_bit(index))

    def set_pattern_from_text(self, raw: str) -> Optional[RegisterEvent]:
        return self._publish(self.model.set_pattern_from_text(raw))

    def step(self) -> Optional[RegisterEvent]:
        return self._publish(self.model.step())

    def navigate(self, direction: int) -> Optional[RegisterEvent]:
        return self._publish(self.model.navigate(direction))

    def select_digit(self, digit: int) -> Optional[RegisterEvent]:
        return self._publish(self.model.select_digit(digit))

    def set_running(self, running: bool) -> Optional[RegisterEvent]:
        """
        Starts or stops the stepper. A no-op in MANUAL mode and when the
        requested state is already active. Starting needs a running loop.
        """
        running = bool(running)
        if running and not self.mode.is_timed:
            logger.debug(f"Ignoring run request in {self.mode.value} mode")
            return None
        if running == self.stepper.running:
            return None
        if running:
            self.stepper.start()
        else:
            self.stepper.stop()
        return self.emit(
            EventKind.RUN_STATE,
            running=running,
            interval_ms=self.stepper.interval_ms,
        )

    def toggle_running(self) -> Optional[RegisterEvent]:
        return self.set_running(not self.stepper.running)

    def set_interval_ms(self, interval_ms: int) -> RunState:
        self.stepper.set_interval_ms(interval_ms)
        return self.run_state

    async def shutdown(self):
        await self.stepper.wait_stopped()

    def _on_stepper_halt(self, error: Exception):
        logger.error(f"Stepper halted after a failed tick: {error}")
        self._publish_halt(error=str(error))

    def _on_tick(self):
        if not self.mode.is_timed:
            # Mode changes stop the stepper; this only guards direct misuse
            self.stepper.stop()
            return
        self.step()

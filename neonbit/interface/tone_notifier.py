"""
Tone-cue notifier.

Maps controller events to short square-wave beep descriptions. Nothing here
produces sound; a cue is handed to an optional sink (a sound backend, a
dashboard indicator, a test) and kept in a small recent-cue log.
"""

import logging
from collections import deque
from dataclasses import asdict, dataclass
from typing import Callable, Deque, Dict, List, Optional

from ..modes import Mode
from ..register_model import EventKind, RegisterEvent

logger = logging.getLogger(__name__)

DEFAULT_DURATION_S = 0.05


@dataclass(frozen=True)
class ToneCue:
    """A single beep: frequency in Hz, duration in seconds."""
    frequency_hz: float
    duration_s: float = DEFAULT_DURATION_S
    kind: str = ""

    def as_dict(self) -> Dict[str, object]:
        return asdict(self)


def cue_for_event(event: RegisterEvent) -> Optional[ToneCue]:
    """Returns the cue for an event, or None for silent events (text input)."""
    kind = event.kind
    if kind is EventKind.STEP:
        if event.mode is Mode.COUNTER:
            return ToneCue(880 + event.value * 20, kind=kind.value)
        return ToneCue(440 + event.value * 4, kind=kind.value)
    if kind is EventKind.TOGGLE_BIT:
        return ToneCue(660, kind=kind.value)
    if kind is EventKind.MODE_CHANGE:
        return ToneCue(1200, 0.1, kind=kind.value)
    if kind is EventKind.NAVIGATE:
        forward = event.detail.get("direction", 1) > 0
        return ToneCue(1000 if forward else 800, kind=kind.value)
    if kind is EventKind.RESET:
        return ToneCue(200, 0.2, kind=kind.value)
    if kind is EventKind.SELECT_DIGIT:
        return ToneCue(400 + event.value * 50, kind=kind.value)
    if kind is EventKind.RUN_STATE:
        return ToneCue(800 if event.detail.get("running") else 200, 0.1, kind=kind.value)
    if kind is EventKind.EXPORT:
        return ToneCue(1500, 0.1, kind=kind.value)
    return None


class ToneNotifier:
    """
    Controller listener that turns events into tone cues.

    Register it with ``controller.add_listener(notifier)``.
    """

    def __init__(
        self,
        sink: Optional[Callable[[ToneCue], object]] = None,
        enabled: bool = True,
        max_recent: int = 20,
    ):
        self.sink = sink
        self.enabled = enabled
        self.recent: Deque[ToneCue] = deque(maxlen=max_recent)

    def __call__(self, event: RegisterEvent) -> Optional[ToneCue]:
        return self.handle(event)

    def handle(self, event: RegisterEvent) -> Optional[ToneCue]:
        if not self.enabled:
            return None
        cue = cue_for_event(event)
        if cue is None:
            return None
        self.recent.append(cue)
        logger.debug(f"Tone cue {cue.frequency_hz:.0f}Hz/{cue.duration_s}s for {event.kind.value}")
        if self.sink is not None:
            self.sink(cue)
        return cue

    def set_enabled(self, enabled: bool):
        self.enabled = bool(enabled)
        logger.info(f"Sound {'enabled' if self.enabled else 'muted'}")

    def toggle(self) -> bool:
        self.set_enabled(not self.enabled)
        return self.enabled

    def recent_cues(self) -> List[ToneCue]:
        return list(self.recent)

# neonbit/register_model.py
"""
Pattern/register model.

Owns the active mode and the current register, and exposes the mutation
operations of the dashboard. Each operation is gated by the active mode and
returns a RegisterEvent describing what changed, or None when the mode does
not allow it. With ``strict=True`` a forbidden operation raises
IllegalOperationForMode instead of being ignored.

Registers are immutable; every mutation swaps in a freshly validated one, so
the pattern and the value always change together.
"""
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Optional

from . import constants as const
from .digit_table import sanitize_bits, to_value
from .exceptions import IllegalOperationForMode, OutOfRangeError
from .modes import (
    AnimationRegister,
    CounterRegister,
    ManualRegister,
    Mode,
    ModeStateMachine,
    RegisterState,
    default_register,
)

logger = logging.getLogger("RegisterModel")


class EventKind(str, Enum):
    STEP = "step"
    TOGGLE_BIT = "toggle_bit"
    TEXT_INPUT = "text_input"
    NAVIGATE = "navigate"
    RESET = "reset"
    SELECT_DIGIT = "select_digit"
    MODE_CHANGE = "mode_change"
    RUN_STATE = "run_state"
    EXPORT = "export"


# Kinds that leave the register untouched
NON_REGISTER_EVENTS = frozenset({EventKind.RUN_STATE, EventKind.EXPORT})


@dataclass(frozen=True)
class RegisterEvent:
    """Description of one state change, published to listeners."""
    kind: EventKind
    mode: Mode
    value: int
    pattern: str
    previous_value: Optional[int] = None
    detail: Dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)

    @property
    def changes_register(self) -> bool:
        return self.kind not in NON_REGISTER_EVENTS

    def as_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "mode": self.mode.value,
            "value": self.value,
            "pattern": self.pattern,
            "previous_value": self.previous_value,
            "detail": dict(self.detail),
            "timestamp": self.timestamp,
        }


class RegisterModel:
    """Mode-gated register operations for one display."""

    def __init__(self, initial_mode: Mode = Mode.ANIMATION, strict: bool = False):
        self.modes = ModeStateMachine(initial_mode)
        self.strict = strict
        self._register: RegisterState = self.modes.default_register()

    # -- accessors -----------------------------------------------------

    @property
    def mode(self) -> Mode:
        return self.modes.mode

    @property
    def register(self) -> RegisterState:
        return self._register

    @property
    def pattern(self) -> str:
        return self._register.pattern

    @property
    def value(self) -> int:
        return self._register.value

    # -- internals -----------------------------------------------------

    def _allowed(self, operation: str, modes: Iterable[Mode]) -> bool:
        if self.mode in modes:
            return True
        if self.strict:
            raise IllegalOperationForMode(operation, mode=self.mode)
        logger.debug(f"Ignoring {operation} in {self.mode.value} mode")
        return False

    def _apply(
        self, kind: EventKind, register: RegisterState, **detail
    ) -> RegisterEvent:
        previous = self._register
        self._register = register
        return RegisterEvent(
            kind=kind,
            mode=self.mode,
            value=register.value,
            pattern=register.pattern,
            previous_value=previous.value,
            detail=detail,
        )

    # -- operations ----------------------------------------------------

    def select_mode(self, mode) -> RegisterEvent:
        previous_mode, new_mode = self.modes.select(mode)
        return self._apply(
            EventKind.MODE_CHANGE,
            default_register(new_mode),
            previous_mode=previous_mode.value,
        )

    def reset(self) -> RegisterEvent:
        logger.info(f"Register reset in {self.mode.value} mode")
        return self._apply(EventKind.RESET, self.modes.default_register())

    def toggle_bit(self, index: int) -> Optional[RegisterEvent]:
        """Flips segment `index` (0 = 'a' ... 6 = 'g'). MANUAL only."""
        if (
            not isinstance(index, int)
            or isinstance(index, bool)
            or not 0 <= index < const.SEGMENT_COUNT
        ):
            raise OutOfRangeError(
                f"Segment index must be between 0 and {const.SEGMENT_COUNT - 1}",
                mode=self.mode,
                value=index,
            )
        if not self._allowed("toggle_bit", (Mode.MANUAL,)):
            return None

        bits = list(self.pattern)
        bits[index] = "0" if bits[index] == "1" else "1"
        return self._apply(
            EventKind.TOGGLE_BIT,
            ManualRegister.from_pattern("".join(bits)),
            index=index,
            segment=const.SEGMENT_LABELS[index],
        )

    def set_pattern_from_text(self, raw: str) -> Optional[RegisterEvent]:
        """
        Loads operator text into the register (MANUAL and ANIMATION).

        In COUNTER mode the sanitized pattern is computed but not applied;
        the counter only ever shows table digits.
        """
        pattern = sanitize_bits(raw)
        if not self._allowed("set_pattern_from_text", (Mode.MANUAL, Mode.ANIMATION)):
            return None

        if self.mode is Mode.ANIMATION:
            register = AnimationRegister.from_value(to_value(pattern))
        else:
            register = ManualRegister.from_pattern(pattern)
        return self._apply(EventKind.TEXT_INPUT, register, raw=raw)

    def step(self) -> Optional[RegisterEvent]:
        """Advances the register by one (ANIMATION mod 128, COUNTER mod 10)."""
        if not self._allowed("step", (Mode.ANIMATION, Mode.COUNTER)):
            return None

        if self.mode is Mode.COUNTER:
            register = CounterRegister.from_digit(
                (self.value + 1) % const.COUNTER_MODULUS
            )
        else:
            register = AnimationRegister.from_value(
                (self.value + 1) % const.ANIMATION_MODULUS
            )
        return self._apply(EventKind.STEP, register)

    def navigate(self, direction: int) -> Optional[RegisterEvent]:
        """Moves the counter one digit forward (+1) or back (-1), wrapping."""
        if direction not in (const.DIRECTION_PREVIOUS, const.DIRECTION_NEXT):
            raise OutOfRangeError(
                "Direction must be -1 or +1", mode=self.mode, value=direction
            )
        if not self._allowed("navigate", (Mode.COUNTER,)):
            return None

        digit = (self.value + direction + const.COUNTER_MODULUS) % const.COUNTER_MODULUS
        return self._apply(
            EventKind.NAVIGATE,
            CounterRegister.from_digit(digit),
            direction=direction,
        )

    def select_digit(self, digit: int) -> Optional[RegisterEvent]:
        # from_digit validates the range before the mode gate runs
        register = CounterRegister.from_digit(digit)
        if not self._allowed("select_digit", (Mode.COUNTER,)):
            return None
        return self._apply(EventKind.SELECT_DIGIT, register)

# neonbit/modes.py
"""
Operating modes and the per-mode register variants.

Each mode has its own immutable register type that enforces the mode's
pattern/value invariant on construction:

- AnimationRegister: value 0-127, pattern is the MSB-first binary of value.
- ManualRegister:    any pattern, value is derived from it.
- CounterRegister:   value 0-9, pattern is the digit table entry.

The ModeStateMachine owns the active mode. Switching is always legal and
always lands on the target mode's default register.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Dict, Tuple, Type

from . import constants as const
from .digit_table import lookup, to_pattern, to_value, validate_pattern
from .exceptions import OutOfRangeError

logger = logging.getLogger("ModeStateMachine")


class Mode(str, Enum):
    """Dashboard operating mode. The string value is the wire format."""
    ANIMATION = "ANIMATION"
    MANUAL = "MANUAL"
    COUNTER = "COUNTER"

    @classmethod
    def parse(cls, name) -> "Mode":
        """Accepts a Mode or a case-insensitive mode name."""
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().upper())
        except ValueError:
            choices = ", ".join(m.value for m in cls)
            raise OutOfRangeError(
                f"Unknown mode, expected one of: {choices}", value=name
            ) from None

    @property
    def is_timed(self) -> bool:
        """True for the modes the stepper may drive."""
        return self in (Mode.ANIMATION, Mode.COUNTER)


@dataclass(frozen=True)
class RegisterState:
    """Base register: a segment pattern and its displayed decimal value."""
    pattern: str
    value: int

    mode: ClassVar[Mode]

    def __post_init__(self):
        validate_pattern(self.pattern)
        self._check_invariant()

    def _check_invariant(self):
        raise NotImplementedError

    def as_dict(self) -> Dict[str, object]:
        return {
            "mode": self.mode.value,
            "pattern": self.pattern,
            "value": self.value,
        }


@dataclass(frozen=True)
class AnimationRegister(RegisterState):
    mode: ClassVar[Mode] = Mode.ANIMATION

    def _check_invariant(self):
        if to_pattern(self.value) != self.pattern:
            raise OutOfRangeError(
                f"Pattern {self.pattern} does not encode value",
                mode=self.mode,
                value=self.value,
            )

    @classmethod
    def from_value(cls, value: int) -> "AnimationRegister":
        return cls(pattern=to_pattern(value), value=value)


@dataclass(frozen=True)
class ManualRegister(RegisterState):
    mode: ClassVar[Mode] = Mode.MANUAL

    def _check_invariant(self):
        if to_value(self.pattern) != self.value:
            raise OutOfRangeError(
                f"Value does not match pattern {self.pattern}",
                mode=self.mode,
                value=self.value,
            )

    @classmethod
    def from_pattern(cls, pattern: str) -> "ManualRegister":
        return cls(pattern=pattern, value=to_value(pattern))


@dataclass(frozen=True)
class CounterRegister(RegisterState):
    mode: ClassVar[Mode] = Mode.COUNTER

    def _check_invariant(self):
        if lookup(self.value) != self.pattern:
            raise OutOfRangeError(
                f"Pattern {self.pattern} is not the table entry for digit",
                mode=self.mode,
                value=self.value,
            )

    @classmethod
    def from_digit(cls, digit: int) -> "CounterRegister":
        return cls(pattern=lookup(digit), value=digit)


REGISTER_TYPES: Dict[Mode, Type[RegisterState]] = {
    Mode.ANIMATION: AnimationRegister,
    Mode.MANUAL: ManualRegister,
    Mode.COUNTER: CounterRegister,
}


def default_register(mode: Mode) -> RegisterState:
    """Reset value for a mode: digit 0 in COUNTER, all segments off otherwise."""
    mode = Mode.parse(mode)
    if mode is Mode.COUNTER:
        return CounterRegister.from_digit(0)
    if mode is Mode.MANUAL:
        return ManualRegister.from_pattern(const.BLANK_PATTERN)
    return AnimationRegister.from_value(0)


class ModeStateMachine:
    """Tracks the active mode. Every transition is legal."""

    def __init__(self, initial_mode: Mode = Mode.ANIMATION):
        self._mode = Mode.parse(initial_mode)
        self.transition_count = 0

    @property
    def mode(self) -> Mode:
        return self._mode

    def select(self, mode) -> Tuple[Mode, Mode]:
        """
        Switches to `mode`.

        Returns:
            (previous_mode, new_mode). Selecting the current mode is still
            a transition and still resets the register.
        """
        new_mode = Mode.parse(mode)
        previous = self._mode
        self._mode = new_mode
        self.transition_count += 1
        logger.info(f"Mode change: {previous.value} -> {new_mode.value}")
        return previous, new_mode

    def default_register(self) -> RegisterState:
        return default_register(self._mode)

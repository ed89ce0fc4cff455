"""
NeonBit 7-Segment Simulator
===========================

A small deterministic model of a single 7-segment display driven by a 7-bit
signal register. It provides the digit table, the three operating modes
(0-127 animation cycle, manual segment editor, 0-9 digit counter), an
asyncio stepper, a rolling history buffer and a session controller, plus
console, HTTP and JSON collaborators that read the model's state.
"""

# Import the constants module and alias it as 'const' for patterned access
from . import constants as const

from .controller import SegmentController
from .digit_table import (
    lookup,
    reverse_lookup,
    sanitize_bits,
    to_pattern,
    to_value,
    truth_table,
    validate_pattern,
)
from .exceptions import (
    ConfigurationError,
    ExportError,
    IllegalOperationForMode,
    NeonBitError,
    OutOfRangeError,
)
from .history import HistoryBuffer
from .modes import (
    AnimationRegister,
    CounterRegister,
    ManualRegister,
    Mode,
    ModeStateMachine,
    RegisterState,
)
from .register_model import EventKind, RegisterEvent, RegisterModel
from .stepper import RunState, Stepper

__version__ = "0.1.0"

__all__ = [
    "const",
    "SegmentController",
    "lookup",
    "reverse_lookup",
    "sanitize_bits",
    "to_pattern",
    "to_value",
    "truth_table",
    "validate_pattern",
    "NeonBitError",
    "OutOfRangeError",
    "IllegalOperationForMode",
    "ConfigurationError",
    "ExportError",
    "HistoryBuffer",
    "Mode",
    "ModeStateMachine",
    "RegisterState",
    "AnimationRegister",
    "ManualRegister",
    "CounterRegister",
    "RegisterModel",
    "RegisterEvent",
    "EventKind",
    "Stepper",
    "RunState",
]

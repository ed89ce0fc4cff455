# neonbit/constants.py
"""
Constants for the NeonBit 7-segment simulator.
Includes the canonical digit table, register limits, scheduler bounds and
other fixed values shared by the core and its interfaces.
"""

# Segment layout
SEGMENT_COUNT = 7
SEGMENT_LABELS = ("a", "b", "c", "d", "e", "f", "g")

# Canonical digit patterns, bit order a..g, most significant bit first.
# Common cathode: '1' lights a segment.
DIGIT_MAPS = {
    0: "1111110",
    1: "0110000",
    2: "1101101",
    3: "1111001",
    4: "0110011",
    5: "1011011",
    6: "1011111",
    7: "1110000",
    8: "1111111",
    9: "1111011",
}

BLANK_PATTERN = "0" * SEGMENT_COUNT

# Register ranges
ANIMATION_MODULUS = 128  # 2 ** SEGMENT_COUNT
COUNTER_MODULUS = 10
MAX_REGISTER_VALUE = ANIMATION_MODULUS - 1
MAX_DIGIT = COUNTER_MODULUS - 1

# Scheduler ("scan frequency") bounds, in milliseconds
DEFAULT_INTERVAL_MS = 250
MIN_INTERVAL_MS = 50
MAX_INTERVAL_MS = 1000
INTERVAL_STEP_MS = 50

# History buffer
HISTORY_CAPACITY = 40
# Scales the 0-9 counter range onto the 0-127 animation range
COUNTER_HISTORY_SCALE = 12.7

# Navigation directions for the digit counter
DIRECTION_PREVIOUS = -1
DIRECTION_NEXT = 1

# Export
EXPORT_FILENAME_PREFIX = "neonbit-state-"
EXPORT_INDENT = 2

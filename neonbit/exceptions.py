# neonbit/exceptions.py
"""
Custom exceptions for the NeonBit simulator.
"""


class NeonBitError(Exception):
    """Base exception class for all NeonBit simulator errors."""
    def __init__(self, message, *args, mode=None, value=None, **kwargs):
        super().__init__(message, *args)
        self.message = message
        self.mode = mode
        self.value = value

    def __str__(self):
        base_message = super().__str__()

        details = []
        if self.mode is not None:
            details.append(f"Mode: {getattr(self.mode, 'value', self.mode)}")
        if self.value is not None:
            details.append(f"Value: {self.value!r}")

        if details:
            return f"{base_message} ({', '.join(details)})"
        return base_message


class OutOfRangeError(NeonBitError, ValueError):
    """A digit, bit index, value, direction or interval is outside its domain."""


class IllegalOperationForMode(NeonBitError):
    """An operation was invoked while the active mode forbids it."""

    def __init__(self, operation, mode=None):
        super().__init__(f"Operation '{operation}' is not allowed", mode=mode)
        self.operation = operation


class ConfigurationError(NeonBitError):
    """Exception for invalid or unreadable simulator configuration."""


class ExportError(NeonBitError):
    """A state snapshot could not be written."""

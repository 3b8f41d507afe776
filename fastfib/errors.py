"""Exceptions and warnings raised by fastfib."""


class FibonacciError(Exception):
    """Base exception class for Fibonacci computation errors."""
    pass


class InvalidArgumentError(FibonacciError, ValueError):
    """Raised when an index is negative or not an integer."""
    pass


class ResourceExhaustedError(FibonacciError, MemoryError):
    """Raised when the host cannot allocate memory for a result.

    Subclasses MemoryError so existing ``except MemoryError`` handlers
    still catch it.
    """
    pass


class ConfigurationError(FibonacciError, ValueError):
    """Raised for invalid configuration values."""
    pass


class LargeIndexWarning(UserWarning):
    """Warning for indices whose result is extremely large."""
    pass

"""Fibonacci membership tests and inverse lookup."""

from __future__ import annotations

import math
import numbers
from typing import Optional

from fastfib.config import Strategy
from fastfib.engine import LOG10_PHI, FastDoublingEngine
from fastfib.errors import InvalidArgumentError


def _require_int(num: object) -> int:
    if isinstance(num, bool) or not isinstance(num, numbers.Integral):
        raise InvalidArgumentError(f"Expected an integer, got {type(num).__name__}")
    return int(num)


def _is_perfect_square(x: int) -> bool:
    if x < 0:
        return False
    root = math.isqrt(x)
    return root * root == x


def is_fibonacci_number(num: int) -> bool:
    """
    Check if a number is in the Fibonacci sequence.

    A non-negative integer is a Fibonacci number if and only if one of
    5*n^2 + 4 or 5*n^2 - 4 is a perfect square. Exact for any size.

    Raises:
        InvalidArgumentError: If num is not an integer
    """
    value = _require_int(num)
    if value < 0:
        return False

    square = 5 * value * value
    return _is_perfect_square(square + 4) or _is_perfect_square(square - 4)


def fibonacci_position(num: int) -> Optional[int]:
    """
    Find the index n such that F(n) == num.

    Returns:
        The index, or None if num is not a Fibonacci number. 1 occurs at
        indices 1 and 2; 1 is returned.

    Examples:
        >>> fibonacci_position(55)
        10
        >>> fibonacci_position(100) is None
        True
    """
    value = _require_int(num)
    if not is_fibonacci_number(value):
        return None
    if value <= 1:
        return value

    # Inverted Binet: n ~ log_phi(num * sqrt(5)). math.log10 accepts big ints.
    # The estimate is within one of the true index for every member >= 2.
    estimate = round((math.log10(value) + math.log10(5) / 2) / LOG10_PHI)
    engine = FastDoublingEngine(
        strategy=Strategy.ITERATIVE, memoize=True, large_index_warning=0, metrics_enabled=False
    )
    for candidate in (estimate, estimate - 1, estimate + 1):
        if engine.compute(candidate) == value:
            return candidate
    return None

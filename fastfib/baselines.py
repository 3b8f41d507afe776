"""
Reference Fibonacci implementations.

Exact but slower formulations kept as correctness oracles for the
fast-doubling engine:

- naive_recursive: the textbook double recursion, exponential time
- linear_iterative: explicit accumulation loop, O(n) additions
- matrix_power: [[1, 1], [1, 0]]^n by repeated squaring, O(log n) matrix
  products (four entries per product, so more work per step than doubling)
"""

from __future__ import annotations

from typing import Tuple

from fastfib.engine import validate_index
from fastfib.errors import InvalidArgumentError

# Beyond this the double recursion takes seconds to minutes
NAIVE_MAX_INDEX = 35

Matrix = Tuple[int, int, int, int]


def naive_recursive(n: int) -> int:
    """Calculate F(n) by double recursion.

    Raises:
        InvalidArgumentError: If n is invalid or above NAIVE_MAX_INDEX
    """
    index = validate_index(n)
    if index > NAIVE_MAX_INDEX:
        raise InvalidArgumentError(
            f"naive_recursive is limited to n <= {NAIVE_MAX_INDEX}, got {index}"
        )
    return _naive(index)


def _naive(n: int) -> int:
    if n <= 1:
        return n
    return _naive(n - 1) + _naive(n - 2)


def linear_iterative(n: int) -> int:
    """
    Calculate F(n) with an explicit loop (O(n) time, O(1) space).

    Args:
        n: Non-negative integer

    Returns:
        The nth Fibonacci number
    """
    index = validate_index(n)
    a, b = 0, 1
    for _ in range(index):
        a, b = b, a + b
    return a


def _matrix_multiply(a: Matrix, b: Matrix) -> Matrix:
    """Multiply two 2x2 matrices represented as row-major tuples."""
    return (
        a[0] * b[0] + a[1] * b[2],  # top-left
        a[0] * b[1] + a[1] * b[3],  # top-right
        a[2] * b[0] + a[3] * b[2],  # bottom-left
        a[2] * b[1] + a[3] * b[3],  # bottom-right
    )


def matrix_power(n: int) -> int:
    """
    Calculate F(n) by matrix exponentiation (O(log n) matrix products).

    [[1, 1], [1, 0]]^n == [[F(n+1), F(n)], [F(n), F(n-1)]]
    """
    index = validate_index(n)
    result: Matrix = (1, 0, 0, 1)  # identity
    base: Matrix = (1, 1, 1, 0)

    power = index
    while power > 0:
        if power & 1:
            result = _matrix_multiply(result, base)
        base = _matrix_multiply(base, base)
        power >>= 1

    return result[1]

"""Classical primality checks used by the prime field generator."""

from __future__ import annotations

import math


def is_prime(n: int) -> bool:
    """Trial division up to sqrt(n); even numbers above 2 are rejected early."""

    if n <= 1:
        return False
    if n == 2:
        return True
    if n % 2 == 0:
        return False

    limit = math.sqrt(n)
    i = 3
    while i <= limit:
        if n % i == 0:
            return False
        i += 2
    return True

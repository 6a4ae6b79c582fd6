"""Session tokens for per-attempt identity rotation."""

from __future__ import annotations

import secrets
import string
from typing import Callable, Protocol

# Takes a bit count, returns a non-negative int with that many random bits.
EntropySource = Callable[[int], int]

_ALPHABET = string.digits + string.ascii_lowercase


class SessionGenerator(Protocol):
    def new_session_token(self) -> str: ...


class RandomSessionGenerator:
    """Renders ``bits`` of entropy as a fixed-width base36 token.

    Not a security token; it only has to look like a new client to the
    upstream proxy gateway.
    """

    def __init__(self, *, entropy: EntropySource = secrets.randbits, bits: int = 48) -> None:
        if bits < 32:
            raise ValueError("session tokens need at least 32 bits of entropy")
        self._entropy = entropy
        self._bits = bits
        self._width = _base36_width(bits)

    def new_session_token(self) -> str:
        value = self._entropy(self._bits)
        chars: list[str] = []
        for _ in range(self._width):
            value, rem = divmod(value, 36)
            chars.append(_ALPHABET[rem])
        return "".join(reversed(chars))


def _base36_width(bits: int) -> int:
    width, ceiling = 0, 1
    while ceiling < 2 ** bits:
        ceiling *= 36
        width += 1
    return width

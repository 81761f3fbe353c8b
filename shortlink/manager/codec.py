"""
Fixed-width Base62 codec for short codes.

Maps a non-negative sequence value to a 6-character code and back:

- Alphabet order is 0-9, a-z, A-Z. The order defines the bijection.
- Codes are left-padded with "0" to CODE_WIDTH.
- Values that need more than CODE_WIDTH symbols raise CapacityExceeded
  (62**6, about 5.68e10 codes). Truncating would silently alias codes.

encode(0) == "000000" is representable but reserved: allocators start at 1,
so the all-zero code is never issued.

Examples:
    >>> encode(1)
    '000001'
    >>> encode(62)
    '000010'
    >>> decode("000010")
    62
"""

from typing import Dict

from ..errors import CapacityExceeded, InvalidCode

ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
BASE = len(ALPHABET)
CODE_WIDTH = 6
CAPACITY = BASE ** CODE_WIDTH

_INDEX: Dict[str, int] = {ch: i for i, ch in enumerate(ALPHABET)}


def encode(num: int) -> str:
    """
    Encode a non-negative integer as a fixed-width Base62 code.

    Raises:
        ValueError: If num is negative.
        CapacityExceeded: If num >= CAPACITY.
    """
    if num < 0:
        raise ValueError("num must be non-negative")
    if num >= CAPACITY:
        raise CapacityExceeded(
            f"Sequence value {num} does not fit in {CODE_WIDTH} Base62 characters "
            f"(capacity {CAPACITY})"
        )
    out = []
    while num > 0:
        num, rem = divmod(num, BASE)
        out.append(ALPHABET[rem])
    return "".join(reversed(out)).rjust(CODE_WIDTH, ALPHABET[0])


def decode(code: str) -> int:
    """
    Decode a Base62 code back to its integer value.

    Padding is harmless: leading "0" symbols contribute nothing.

    Raises:
        InvalidCode: If the code is empty or has a character outside ALPHABET.
    """
    if not code:
        raise InvalidCode("Code must not be empty")
    result = 0
    for ch in code:
        idx = _INDEX.get(ch)
        if idx is None:
            raise InvalidCode(f"Invalid character {ch!r} in code {code!r}")
        result = result * BASE + idx
    return result


def is_valid_code(code: str) -> bool:
    """True when `code` has exactly CODE_WIDTH alphabet characters."""
    return len(code) == CODE_WIDTH and all(ch in _INDEX for ch in code)

from __future__ import annotations

from ..errors import DurationError

_UNITS = (("ms", 1_000), ("us", 1_000_000), ("s", 1))


def parse_duration(text: str) -> float:
    """Parse ``"1s"``, ``"150ms"`` or ``"900us"`` into seconds."""

    text = text.strip()
    if any(char.isspace() for char in text):
        msg = f"the duration {text!r} cannot contain whitespace"
        raise DurationError(msg)
    for suffix, divisor in _UNITS:
        if text.endswith(suffix):
            digits = text[: -len(suffix)]
            if not (digits.isascii() and digits.isdigit()):
                msg = f"the duration {text!r} could not be parsed as an integer"
                raise DurationError(msg)
            return int(digits) / divisor
    msg = f"the duration {text!r} has an unknown unit, must be: s, ms, or us"
    raise DurationError(msg)

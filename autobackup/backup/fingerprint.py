"""Cheap change detection for exported application state."""

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    value = abs(value)
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_DIGITS[remainder])
    return sign + "".join(reversed(digits))


def simple_hash(text: str) -> str:
    """32-bit signed rolling hash (``h * 31 + c``) rendered in base 36.

    Not a content hash: distinct inputs can collide.
    """
    h = 0
    for char in text:
        h = _to_int32((h << 5) - h + ord(char))
    return _to_base36(h)


def fingerprint(
    exported_length: int,
    last_backup_time: int,
    session_count: int,
    message_count: int,
) -> str:
    """Heuristic signature of exported state.

    Two states with the same export length and the same session and message
    counts share a fingerprint, so such a change goes unnoticed.
    """
    return simple_hash(f"{exported_length}-{last_backup_time}-{session_count}-{message_count}")

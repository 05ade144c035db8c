"""Short identifier generation for assets and users."""

import secrets

ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
PART_LENGTH = 3
PART_RANGE = len(ALPHABET) ** PART_LENGTH


def to_base36(value: int) -> str:
    """Render a non-negative integer in base 36.

    Examples:
        >>> to_base36(0)
        '0'
        >>> to_base36(46655)
        'zzz'
    """
    if value < 0:
        raise ValueError(f"Cannot encode negative value {value}")

    digits = []
    while True:
        value, remainder = divmod(value, len(ALPHABET))
        digits.append(ALPHABET[remainder])
        if value == 0:
            break
    return "".join(reversed(digits))


def _random_part() -> str:
    return to_base36(secrets.randbelow(PART_RANGE)).rjust(PART_LENGTH, "0")


def generate_uid() -> str:
    """Generate a short, human-typeable identifier.

    Two independent three-character base-36 parts are concatenated, giving a
    six-character id over ``[0-9a-z]``. Collisions are not checked here.

    Returns:
        Six-character identifier

    Examples:
        >>> uid = generate_uid()
        >>> len(uid)
        6
    """
    return _random_part() + _random_part()

"""Parsing of the public/private visibility flag."""

from typing import Any

from image_repo.errors import ValidationError

DEFAULT_PUBLIC = True

_STRING_VALUES = {"true": True, "false": False}


def parse_public_value(value: Any = None) -> bool:
    """Resolve a requested ``public`` value to a boolean.

    Rules:
        - absent (None): public, not "leave unchanged"
        - bool: itself
        - "true" / "false": the matching bool (exact, lowercase)
        - anything else: rejected

    Raises:
        ValidationError: If value is not one of the accepted forms

    Examples:
        >>> parse_public_value()
        True
        >>> parse_public_value("false")
        False
    """
    if value is None:
        return DEFAULT_PUBLIC
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value in _STRING_VALUES:
        return _STRING_VALUES[value]
    raise ValidationError('Invalid "public" value.')

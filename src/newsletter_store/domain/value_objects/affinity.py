"""SQLite-style column affinity for values bound to emulated statements.

SQLite converts a bound value according to the declared column type before
storing or comparing it. The emulator applies the same conversions so that
both engines store and match the same values.
"""

from __future__ import annotations

from typing import Any


def integer_affinity(value: Any) -> Any:
    """Convert a value for an INTEGER column.

    Integral floats and numeric text become ``int``; anything else is kept
    as given, like SQLite does.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return value
        return int(number) if number.is_integer() else number
    return value


def text_affinity(value: Any) -> Any:
    """Convert a value for a TEXT column. Numbers are stored as their text."""
    if value is None:
        return None
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return value


def collation_key(value: Any) -> tuple[int, Any]:
    """Sort key following SQLite's ordering: NULL, then numbers, then text."""
    if value is None:
        return (0, 0)
    if isinstance(value, (int, float)):
        return (1, value)
    if isinstance(value, str):
        return (2, value)
    return (3, repr(value))

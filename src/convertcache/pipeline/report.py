"""Size delta arithmetic and formatting.

Deltas are kilobyte-scaled: ``(input_size - output_size) / 1000``. A positive
delta means the transform shrank the asset.
"""

import math

_UNITS = ["B", "kB", "MB", "GB", "TB", "PB"]


def compute_delta(original: bytes, converted: bytes) -> float:
    """Kilobyte delta between an input buffer and its converted form."""
    return (len(original) - len(converted)) / 1000


def format_size(kilobytes: float, signed: bool = False) -> str:
    """Render a kilobyte quantity as a human-readable size.

    Uses decimal units and three significant digits.

    Examples:
        format_size(3.0)               -> "3 kB"
        format_size(-1.5, signed=True) -> "-1.5 kB"
        format_size(0.25)              -> "250 B"
    """
    size = kilobytes * 1000
    negative = size < 0
    size = abs(size)

    if signed and size > 0:
        prefix = "-" if negative else "+"
    else:
        prefix = "-" if negative else ""

    if size < 1:
        return f"{prefix}{_trim(size)} B"

    exponent = min(int(math.floor(math.log10(size) / 3)), len(_UNITS) - 1)
    value = size / 1000**exponent
    # 999.7 rounds to 1000, which belongs to the next unit
    if float(_trim(value)) >= 1000 and exponent < len(_UNITS) - 1:
        exponent += 1
        value = size / 1000**exponent
    return f"{prefix}{_trim(value)} {_UNITS[exponent]}"


def _trim(value: float) -> str:
    # 3 significant digits, no trailing zeros
    return f"{float(f'{value:.3g}'):g}"

"""SVG connection paths between practice nodes."""

from typing import Union

from .constants import CURVE_OFFSET_RATIO

Number = Union[int, float]


def _fmt(value: Number) -> str:
    """Integral values without a decimal part: 100.0 -> '100'."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def create_curve_path(x1: Number, y1: Number, x2: Number, y2: Number) -> str:
    """Cubic bezier from (x1, y1) to (x2, y2) with vertical control points."""
    o = abs(y2 - y1) * CURVE_OFFSET_RATIO
    return (
        f"M {_fmt(x1)},{_fmt(y1)} "
        f"C {_fmt(x1)},{_fmt(y1 + o)} {_fmt(x2)},{_fmt(y2 - o)} {_fmt(x2)},{_fmt(y2)}"
    )

"""Geometry helpers for the face crop pipeline.

Pure functions that turn a normalized bounding box into a pixel rectangle.
Nothing here touches pixel data.
"""

from __future__ import annotations

import math
from typing import Tuple

from facematch.interfaces import PixelRect

DEFAULT_CROP_SCALE = 1.8


def clamp(value: int, lo: int, hi: int) -> int:
    """Clamp ``value`` to the closed range ``[lo, hi]``.

    Example:
        >>> clamp(-3, 0, 100)
        0
        >>> clamp(140, 0, 100)
        100
    """
    if value < lo:
        return lo
    if value > hi:
        return hi
    return value


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero.

    Python's built-in ``round`` uses banker's rounding, which would shift
    crop edges by one pixel on exact ``.5`` coordinates.

    Example:
        >>> round_half_away(2.5), round_half_away(-2.5)
        (3, -3)
    """
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def normalize_scale(scale: float) -> float:
    """Return ``scale``, or 1.0 if it is not strictly positive."""
    return scale if scale > 0 else 1.0


def to_pixel_box(
    left: float,
    top: float,
    width: float,
    height: float,
    img_width: int,
    img_height: int,
) -> Tuple[float, float, float, float]:
    """Convert normalized ``(left, top, width, height)`` to pixel floats."""
    return (
        left * img_width,
        top * img_height,
        width * img_width,
        height * img_height,
    )


def expand_about_center(
    left: float,
    top: float,
    width: float,
    height: float,
    scale: float,
) -> Tuple[float, float, float, float]:
    """Scale a pixel box uniformly around its center.

    Args:
        left, top, width, height: Pixel-space box
        scale: Expansion factor (values <= 0 are treated as 1.0)

    Returns:
        ``(x0, y0, x1, y1)`` corners of the expanded box, unrounded.

    Example:
        >>> expand_about_center(25.0, 25.0, 50.0, 50.0, 1.8)
        (5.0, 5.0, 95.0, 95.0)
    """
    scale = normalize_scale(scale)
    cx = left + width / 2.0
    cy = top + height / 2.0
    new_w = width * scale
    new_h = height * scale
    return (
        cx - new_w / 2.0,
        cy - new_h / 2.0,
        cx + new_w / 2.0,
        cy + new_h / 2.0,
    )


def snap_rect(
    x0: float,
    y0: float,
    x1: float,
    y1: float,
    img_width: int,
    img_height: int,
) -> PixelRect:
    """Round float corners and clamp each axis to the image independently.

    The result may be degenerate; callers decide how to handle that.
    """
    return PixelRect(
        x0=clamp(round_half_away(x0), 0, img_width),
        y0=clamp(round_half_away(y0), 0, img_height),
        x1=clamp(round_half_away(x1), 0, img_width),
        y1=clamp(round_half_away(y1), 0, img_height),
    )

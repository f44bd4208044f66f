"""Bounding-box cropping with centered context margin.

The detector's face box is tight around the face. For a thumbnail we want
some context, so the box is scaled around its center (default 1.8x) and then
clamped to the image. Faces near an edge may push the scaled box entirely out
of bounds; in that case the unscaled box is used instead.
"""

from __future__ import annotations

import numpy as np

from facematch.errors import InvalidCropGeometry
from facematch.interfaces import NormalizedBoundingBox, PixelRect
from facematch.logging_config import get_logger
from facematch.utils import (
    DEFAULT_CROP_SCALE,
    expand_about_center,
    snap_rect,
    to_pixel_box,
)

logger = get_logger(__name__)


def compute_crop_rect(
    img_width: int,
    img_height: int,
    bbox: NormalizedBoundingBox,
    scale: float = DEFAULT_CROP_SCALE,
) -> PixelRect:
    """Compute the pixel rectangle to crop for a face bounding box.

    Args:
        img_width: Width of the (orientation-corrected) image in pixels
        img_height: Height of the image in pixels
        bbox: Normalized face bounding box
        scale: Expansion factor around the box center (<= 0 means 1.0)

    Returns:
        Non-degenerate PixelRect inside ``[0, W] x [0, H]``.

    Raises:
        IncompleteGeometry: If the bounding box is missing a field.
        InvalidCropGeometry: If both the scaled and the unscaled rectangles
            are empty after clamping.

    Example:
        >>> box = NormalizedBoundingBox(left=0.25, top=0.25, width=0.5, height=0.5)
        >>> compute_crop_rect(100, 100, box, scale=1.8)
        PixelRect((5, 5)-(95, 95))
    """
    left, top, width, height = to_pixel_box(*bbox.resolve(), img_width, img_height)

    rect = snap_rect(
        *expand_about_center(left, top, width, height, scale),
        img_width,
        img_height,
    )
    if not rect.is_degenerate:
        return rect

    fallback = snap_rect(left, top, left + width, top + height, img_width, img_height)
    if fallback.is_degenerate:
        raise InvalidCropGeometry(
            f"invalid crop rectangle even after fallback: scaled={rect}, "
            f"unscaled={fallback}, image={img_width}x{img_height}"
        )

    logger.debug(f"Scaled crop {rect} is empty, falling back to unscaled {fallback}")
    return fallback


def crop_scaled(
    image: np.ndarray,
    bbox: NormalizedBoundingBox,
    scale: float = DEFAULT_CROP_SCALE,
) -> np.ndarray:
    """Crop the face region, expanded around its center, from an image.

    Pixels are copied one-to-one; there is no resampling.

    Args:
        image: Orientation-corrected image, shape [H, W] or [H, W, C]
        bbox: Normalized face bounding box
        scale: Expansion factor around the box center

    Returns:
        New array holding exactly the crop rectangle's pixels.

    Raises:
        IncompleteGeometry: If the bounding box is missing a field.
        InvalidCropGeometry: If no non-empty rectangle can be derived.
    """
    img_height, img_width = image.shape[:2]
    rect = compute_crop_rect(img_width, img_height, bbox, scale)

    # copy() so the crop owns its buffer instead of viewing the source
    return image[rect.y0 : rect.y1, rect.x0 : rect.x1].copy()

"""Orientation correction for decoded images.

Rekognition reports ``OrientationCorrection`` when the stored pixels are not
upright. Bounding boxes are relative to the upright image, so the pixels have
to be rotated into that frame before any box math.

Coordinate mapping for a source of width W and height H, ``(x, y)`` being a
source pixel:

    ROTATE_90   ->  (H - 1 - y, x)      output is H x W
    ROTATE_180  ->  (W - 1 - x, H - 1 - y)
    ROTATE_270  ->  (y, W - 1 - x)      output is H x W
"""

from __future__ import annotations

from typing import Optional, Union

import cv2
import numpy as np

from facematch.interfaces import OrientationCorrection
from facematch.logging_config import get_logger

logger = get_logger(__name__)

# cv2.rotate always materializes a new contiguous array
_CV2_ROTATIONS = {
    OrientationCorrection.ROTATE_90: cv2.ROTATE_90_CLOCKWISE,
    OrientationCorrection.ROTATE_180: cv2.ROTATE_180,
    OrientationCorrection.ROTATE_270: cv2.ROTATE_90_COUNTERCLOCKWISE,
}


def correct_orientation(
    image: np.ndarray,
    hint: Union[OrientationCorrection, str, None],
) -> np.ndarray:
    """Rotate an image into the frame the detector's bounding box refers to.

    Args:
        image: Decoded image, shape [H, W] or [H, W, C]
        hint: Orientation correction from the detection response. Raw strings
              are accepted; absent or unrecognized values mean no rotation.

    Returns:
        The input array itself for no-op corrections, otherwise a newly
        allocated rotated array. Never fails.

    Example:
        >>> upright = correct_orientation(frame, "ROTATE_90")
        >>> upright.shape[:2] == (frame.shape[1], frame.shape[0])
        True
    """
    orientation = OrientationCorrection.parse(hint)
    rotate_code: Optional[int] = _CV2_ROTATIONS.get(orientation)

    if rotate_code is None:
        return image

    rotated = cv2.rotate(image, rotate_code)
    logger.debug(
        f"Applied {orientation.value}: {image.shape[1]}x{image.shape[0]} -> "
        f"{rotated.shape[1]}x{rotated.shape[0]}"
    )
    return rotated

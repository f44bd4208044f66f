"""Image decode/encode boundary for the crop pipeline.

Raw bytes enter through :func:`decode_image` and leave through
:func:`encode_jpeg`; everything between works on numpy arrays.
"""

from __future__ import annotations

import cv2
import numpy as np

from facematch.errors import DecodeError, EncodingError
from facematch.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_JPEG_QUALITY = 90

# Keep the stored pixel layout; the detector's orientation hint describes it.
_DECODE_FLAGS = cv2.IMREAD_COLOR | cv2.IMREAD_IGNORE_ORIENTATION


def decode_image(data: bytes) -> np.ndarray:
    """Decode image bytes (JPEG, PNG, ...) into a BGR array.

    EXIF orientation is deliberately not applied.

    Args:
        data: Encoded image bytes

    Returns:
        Image array, shape [H, W, 3], dtype uint8.

    Raises:
        DecodeError: If ``data`` is empty or not a recognizable image.
    """
    if not data:
        raise DecodeError("failed to decode image: no data")

    buffer = np.frombuffer(data, dtype=np.uint8)
    try:
        image = cv2.imdecode(buffer, _DECODE_FLAGS)
    except cv2.error as e:
        raise DecodeError(f"failed to decode image: {e}") from e

    if image is None:
        raise DecodeError(
            f"failed to decode image: {len(data)} bytes are not a supported format"
        )

    return image


def encode_jpeg(image: np.ndarray, quality: int = DEFAULT_JPEG_QUALITY) -> bytes:
    """Encode an image as JPEG.

    Args:
        image: BGR or grayscale image array
        quality: JPEG quality, 0-100

    Returns:
        JPEG bytes.

    Raises:
        EncodingError: If the image is empty, the quality is out of range, or
            OpenCV fails to encode.

    Example:
        >>> jpeg = encode_jpeg(face_crop, quality=90)
        >>> jpeg[:2]
        b'\\xff\\xd8'
    """
    if not 0 <= quality <= 100:
        raise EncodingError(f"JPEG quality must be between 0 and 100, got {quality}")
    if image is None or image.size == 0:
        raise EncodingError("failed to encode image: image is empty")

    try:
        ok, encoded = cv2.imencode(".jpg", image, [cv2.IMWRITE_JPEG_QUALITY, int(quality)])
    except cv2.error as e:
        raise EncodingError(f"failed to encode image: {e}") from e

    if not ok:
        raise EncodingError("failed to encode image: encoder returned no data")

    return encoded.tobytes()

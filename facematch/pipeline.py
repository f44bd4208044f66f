"""Face-region extraction: decode, correct orientation, crop, encode."""

from __future__ import annotations

from typing import Union

from facematch.codec import DEFAULT_JPEG_QUALITY, decode_image, encode_jpeg
from facematch.cropper import crop_scaled
from facematch.interfaces import NormalizedBoundingBox, OrientationCorrection
from facematch.logging_config import get_logger
from facematch.orientation import correct_orientation
from facematch.utils import DEFAULT_CROP_SCALE

logger = get_logger(__name__)


def extract_face_crop(
    image_bytes: bytes,
    orientation: Union[OrientationCorrection, str, None],
    bbox: NormalizedBoundingBox,
    scale: float = DEFAULT_CROP_SCALE,
    quality: int = DEFAULT_JPEG_QUALITY,
) -> bytes:
    """Produce a JPEG thumbnail of a detected face.

    Orientation correction runs on the full image first, because the
    bounding box is relative to the upright image.

    Args:
        image_bytes: Encoded source image, as submitted to the detector
        orientation: Detector-reported orientation correction
        bbox: Detector-reported normalized face bounding box
        scale: Context margin factor around the box center
        quality: JPEG quality of the output

    Returns:
        JPEG bytes of the cropped face.

    Raises:
        DecodeError: If ``image_bytes`` is not an image.
        IncompleteGeometry: If ``bbox`` is missing a field.
        InvalidCropGeometry: If no non-empty crop rectangle exists.
        EncodingError: If JPEG encoding fails.

    Example:
        >>> box = NormalizedBoundingBox.from_response(record["Face"]["BoundingBox"])
        >>> thumbnail = extract_face_crop(selfie, response.get("OrientationCorrection"), box)
    """
    source = decode_image(image_bytes)
    upright = correct_orientation(source, orientation)
    face = crop_scaled(upright, bbox, scale)
    encoded = encode_jpeg(face, quality)

    logger.debug(
        f"Extracted face crop: source={source.shape[1]}x{source.shape[0]}, "
        f"orientation={OrientationCorrection.parse(orientation).value}, "
        f"crop={face.shape[1]}x{face.shape[0]}, jpeg={len(encoded)} bytes"
    )
    return encoded

"""facematch: match event photos to a selfie with Amazon Rekognition.

The package indexes faces into per-event Rekognition collections, searches
them with a selfie, and produces an upright, padded crop of the selfie face.
"""

from facematch.codec import decode_image, encode_jpeg
from facematch.config import Config, get_config
from facematch.cropper import compute_crop_rect, crop_scaled
from facematch.errors import (
    CollectionError,
    DecodeError,
    EncodingError,
    FaceCropError,
    FaceDeleteError,
    FaceIndexError,
    FaceListError,
    FaceMatchError,
    FaceSearchError,
    FaceServiceError,
    IncompleteGeometry,
    InvalidCropGeometry,
    NoFaceDetectedError,
)
from facematch.interfaces import (
    FaceService,
    IndexedFace,
    NormalizedBoundingBox,
    OrientationCorrection,
    PixelRect,
    SelfieSearchResult,
)
from facematch.logging_config import get_logger, setup_logging
from facematch.orientation import correct_orientation
from facematch.pipeline import extract_face_crop

__all__ = [
    # Config
    "Config",
    "get_config",
    # Logging
    "setup_logging",
    "get_logger",
    # Data model
    "FaceService",
    "IndexedFace",
    "NormalizedBoundingBox",
    "OrientationCorrection",
    "PixelRect",
    "SelfieSearchResult",
    # Pipeline
    "correct_orientation",
    "compute_crop_rect",
    "crop_scaled",
    "decode_image",
    "encode_jpeg",
    "extract_face_crop",
    # Errors
    "FaceMatchError",
    "FaceCropError",
    "IncompleteGeometry",
    "InvalidCropGeometry",
    "DecodeError",
    "EncodingError",
    "FaceServiceError",
    "CollectionError",
    "FaceIndexError",
    "NoFaceDetectedError",
    "FaceSearchError",
    "FaceDeleteError",
    "FaceListError",
]

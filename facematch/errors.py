"""Exception hierarchy for facematch.

Crop pipeline errors derive from :class:`FaceCropError`; errors raised while
talking to Rekognition derive from :class:`FaceServiceError`. Both share the
:class:`FaceMatchError` base so callers can catch everything in one place.
"""

from __future__ import annotations

from typing import Optional


class FaceMatchError(Exception):
    """Base class for all facematch errors."""

    retryable = False


class FaceCropError(FaceMatchError):
    """Base class for face-region extraction failures.

    ``face_id`` is set when the face was already indexed before cropping
    failed, so the caller can still delete or reuse it.
    """

    face_id: Optional[str] = None


class IncompleteGeometry(FaceCropError):
    """Bounding box is missing one or more of left/top/width/height."""


class InvalidCropGeometry(FaceCropError):
    """Crop rectangle is empty even after falling back to the unscaled box."""


class DecodeError(FaceCropError):
    """Source bytes are not a decodable raster image."""


class EncodingError(FaceCropError):
    """Serializing the cropped face failed."""

    retryable = True


class FaceServiceError(FaceMatchError):
    """Base class for errors returned by the face-recognition service."""


class CollectionError(FaceServiceError):
    """Collection could not be described or created."""


class FaceIndexError(FaceServiceError):
    """IndexFaces call failed."""


class NoFaceDetectedError(FaceServiceError):
    """The service found no face in the submitted image."""


class FaceSearchError(FaceServiceError):
    """Searching the collection failed.

    When raised from a selfie search the selfie has already been indexed and
    cropped, so ``face_id`` and ``cropped_face`` carry those results.
    """

    def __init__(
        self,
        message: str,
        face_id: Optional[str] = None,
        cropped_face: Optional[bytes] = None,
    ):
        super().__init__(message)
        self.face_id = face_id
        self.cropped_face = cropped_face


class FaceDeleteError(FaceServiceError):
    """DeleteFaces call failed."""


class FaceListError(FaceServiceError):
    """ListFaces call failed."""

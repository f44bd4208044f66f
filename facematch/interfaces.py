"""Data structures and interfaces shared across facematch.

The geometry types here are request-scoped: they are built from a single
detection response, consumed by the crop pipeline, and discarded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Optional, Protocol, Tuple, runtime_checkable

from facematch.errors import IncompleteGeometry


class OrientationCorrection(str, Enum):
    """Clockwise rotation the detector reports for the stored image.

    The value must be compensated before the bounding box can be interpreted
    against the decoded pixels.
    """

    NONE = "ROTATE_0"
    ROTATE_90 = "ROTATE_90"
    ROTATE_180 = "ROTATE_180"
    ROTATE_270 = "ROTATE_270"

    @classmethod
    def parse(cls, value: Optional[str]) -> OrientationCorrection:
        """Map a raw response value to a member.

        Absent, empty and unrecognized values all mean "no correction".

        Example:
            >>> OrientationCorrection.parse("ROTATE_90")
            <OrientationCorrection.ROTATE_90: 'ROTATE_90'>
            >>> OrientationCorrection.parse(None)
            <OrientationCorrection.NONE: 'ROTATE_0'>
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.NONE


@dataclass(frozen=True)
class NormalizedBoundingBox:
    """Face bounding box in fractions of image width/height.

    Any field may be None when the service omitted it. Use :meth:`resolve`
    to obtain the four values; it is the single place where an incomplete
    box is rejected.

    Attributes:
        left: Left edge as a fraction of image width
        top: Top edge as a fraction of image height
        width: Box width as a fraction of image width
        height: Box height as a fraction of image height
    """

    left: Optional[float] = None
    top: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None

    @classmethod
    def from_response(cls, raw: Mapping[str, Any]) -> NormalizedBoundingBox:
        """Build from a Rekognition ``BoundingBox`` dict (``Left``, ``Top``, ...)."""

        def _get(key: str) -> Optional[float]:
            value = raw.get(key)
            return None if value is None else float(value)

        return cls(
            left=_get("Left"),
            top=_get("Top"),
            width=_get("Width"),
            height=_get("Height"),
        )

    @property
    def is_complete(self) -> bool:
        """True if all four fields are present."""
        return None not in (self.left, self.top, self.width, self.height)

    def resolve(self) -> Tuple[float, float, float, float]:
        """Return ``(left, top, width, height)``.

        Raises:
            IncompleteGeometry: If any field is missing.
        """
        if not self.is_complete:
            missing = [
                name
                for name in ("left", "top", "width", "height")
                if getattr(self, name) is None
            ]
            raise IncompleteGeometry(
                f"incomplete bounding box: missing {', '.join(missing)}"
            )
        return self.left, self.top, self.width, self.height


@dataclass(frozen=True)
class PixelRect:
    """Integer rectangle in pixel coordinates, half-open on the right/bottom.

    Attributes:
        x0: Left edge (inclusive)
        y0: Top edge (inclusive)
        x1: Right edge (exclusive)
        y1: Bottom edge (exclusive)
    """

    x0: int
    y0: int
    x1: int
    y1: int

    @property
    def width(self) -> int:
        return self.x1 - self.x0

    @property
    def height(self) -> int:
        return self.y1 - self.y0

    @property
    def is_degenerate(self) -> bool:
        """True if the rectangle has zero or negative width or height."""
        return self.width <= 0 or self.height <= 0

    def __repr__(self) -> str:
        return f"PixelRect(({self.x0}, {self.y0})-({self.x1}, {self.y1}))"


@dataclass
class IndexedFace:
    """One face record returned by IndexFaces.

    Attributes:
        face_id: Service-assigned face identifier
        external_image_id: Caller-supplied image identifier
        confidence: Detection confidence (0-100)
        bounding_box: Normalized face box, possibly incomplete
    """

    face_id: str
    external_image_id: Optional[str]
    confidence: Optional[float]
    bounding_box: NormalizedBoundingBox = field(default_factory=NormalizedBoundingBox)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> IndexedFace:
        """Build from an IndexFaces ``FaceRecords`` entry."""
        face = record.get("Face") or {}
        return cls(
            face_id=face["FaceId"],
            external_image_id=face.get("ExternalImageId"),
            confidence=face.get("Confidence"),
            bounding_box=NormalizedBoundingBox.from_response(face.get("BoundingBox") or {}),
        )


@dataclass
class SelfieSearchResult:
    """Outcome of indexing a selfie and searching its collection.

    Attributes:
        face_id: Face id assigned to the indexed selfie
        external_image_ids: Unique ids of images with a matching face,
            in the order the service ranked them
        cropped_face: JPEG bytes of the cropped selfie face
    """

    face_id: str
    external_image_ids: List[str]
    cropped_face: bytes

    def __repr__(self) -> str:
        return (
            f"SelfieSearchResult(face_id='{self.face_id}', "
            f"matches={len(self.external_image_ids)}, "
            f"cropped_face={len(self.cropped_face)} bytes)"
        )


@runtime_checkable
class FaceService(Protocol):
    """Operations the photo-matching application needs from a face backend."""

    def index_face(
        self, image_bytes: bytes, external_image_id: str, collection_id: str
    ) -> List[IndexedFace]:
        """Index every face in an image under ``external_image_id``."""
        ...

    def index_face_from_s3(
        self, bucket: str, key: str, external_image_id: str, collection_id: str
    ) -> List[IndexedFace]:
        """Index faces of an image stored in S3."""
        ...

    def search_and_index_selfie(
        self, selfie_bytes: bytes, collection_id: str
    ) -> SelfieSearchResult:
        """Index a selfie, crop its face, and find matching images."""
        ...

    def search_by_face_id(self, face_id: str, collection_id: str) -> List[str]:
        """Find external image ids whose faces match an indexed face."""
        ...

    def search_from_s3(self, bucket: str, key: str, collection_id: str) -> List[str]:
        """Find external image ids matching the largest face in an S3 image."""
        ...

    def delete_faces(self, face_ids: List[str], collection_id: str) -> List[str]:
        """Delete faces, returning the ids that could not be deleted."""
        ...

    def list_faces(self, collection_id: str) -> List[str]:
        """List every face id in a collection."""
        ...

"""Amazon Rekognition face service.

One collection per event: images are indexed into the event's collection
under a caller-supplied external image id, and a selfie is matched against
the collection by indexing it and searching with its new face id.

Workflow for a selfie:
1. Ensure the collection exists
2. IndexFaces(selfie) -> FaceId, BoundingBox, OrientationCorrection
3. Crop the face from the selfie for display
4. SearchFaces(FaceId) -> matching ExternalImageIds
"""

from __future__ import annotations

import json
import time
import uuid
from typing import Any, Dict, Iterable, List, Mapping, Optional

from botocore.exceptions import ClientError

from facematch.codec import DEFAULT_JPEG_QUALITY
from facematch.errors import (
    CollectionError,
    FaceCropError,
    FaceDeleteError,
    FaceIndexError,
    FaceListError,
    FaceSearchError,
    IncompleteGeometry,
    NoFaceDetectedError,
)
from facematch.interfaces import IndexedFace, NormalizedBoundingBox, SelfieSearchResult
from facematch.logging_config import get_logger
from facematch.pipeline import extract_face_crop
from facematch.utils import DEFAULT_CROP_SCALE

logger = get_logger(__name__)


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "")


def unique_in_order(values: Iterable[str]) -> List[str]:
    """Drop duplicates, keeping the first occurrence of each value."""
    return list(dict.fromkeys(values))


def _external_ids(matches: Iterable[Mapping[str, Any]]) -> List[str]:
    ids = (
        (match.get("Face") or {}).get("ExternalImageId")
        for match in matches
    )
    return unique_in_order(i for i in ids if i is not None)


def select_bounding_box(record: Mapping[str, Any]) -> NormalizedBoundingBox:
    """Pick the bounding box of an IndexFaces face record.

    ``Face.BoundingBox`` is preferred; ``FaceDetail.BoundingBox`` is the
    fallback.

    Raises:
        IncompleteGeometry: If the record carries neither.
    """
    for section in ("Face", "FaceDetail"):
        raw = (record.get(section) or {}).get("BoundingBox")
        if raw is not None:
            return NormalizedBoundingBox.from_response(raw)
    raise IncompleteGeometry("no bounding box returned for indexed face")


class RekognitionFaceService:
    """Index and search faces in per-event Rekognition collections.

    Attributes:
        client: boto3 Rekognition client
        index_delay: Seconds slept before IndexFaces calls on byte images
        search_delay: Seconds slept before SearchFaces, giving a freshly
            indexed face time to become searchable
        crop_scale: Context factor for the selfie face crop
        jpeg_quality: JPEG quality for the selfie face crop

    Example:
        >>> service = RekognitionFaceService(boto3.client("rekognition"))
        >>> service.index_face(photo_bytes, "photo-0001", "event-42")
        >>> result = service.search_and_index_selfie(selfie_bytes, "event-42")
        >>> result.external_image_ids
        ['photo-0001']
    """

    def __init__(
        self,
        client: Any,
        index_delay: float = 0.5,
        search_delay: float = 3.0,
        crop_scale: float = DEFAULT_CROP_SCALE,
        jpeg_quality: int = DEFAULT_JPEG_QUALITY,
    ):
        """Initialize the service.

        Args:
            client: boto3 Rekognition client (``boto3.client("rekognition")``)
            index_delay: Delay before IndexFaces, in seconds
            search_delay: Delay before SearchFaces, in seconds
            crop_scale: Selfie crop expansion factor
            jpeg_quality: Selfie crop JPEG quality (0-100)

        Raises:
            ValueError: If a delay is negative or the quality is out of range.
        """
        if index_delay < 0 or search_delay < 0:
            raise ValueError(
                f"Delays must be >= 0, got index={index_delay}, search={search_delay}"
            )
        if not 0 <= jpeg_quality <= 100:
            raise ValueError(f"JPEG quality must be in [0, 100], got {jpeg_quality}")

        self.client = client
        self.index_delay = index_delay
        self.search_delay = search_delay
        self.crop_scale = crop_scale
        self.jpeg_quality = jpeg_quality

        logger.info(
            f"Initialized RekognitionFaceService with crop_scale={crop_scale}, "
            f"jpeg_quality={jpeg_quality}, delays=({index_delay}s, {search_delay}s)"
        )

    @staticmethod
    def _sleep(seconds: float, reason: str) -> None:
        if seconds > 0:
            logger.debug(f"Delay before {reason} by {seconds} second(s)")
            time.sleep(seconds)

    def ensure_collection(self, collection_id: str) -> None:
        """Create the collection if it does not exist yet.

        A concurrent creator winning the race is not an error.

        Raises:
            CollectionError: If the collection can't be created.
        """
        try:
            self.client.describe_collection(CollectionId=collection_id)
            return
        except ClientError as e:
            logger.info(
                f"Collection {collection_id} not available ({_error_code(e)}), "
                f"creating a new collection"
            )

        try:
            self.client.create_collection(CollectionId=collection_id)
        except ClientError as e:
            if _error_code(e) == "ResourceAlreadyExistsException":
                logger.info(f"Collection {collection_id} already exists, skipping creation")
                return
            logger.error(f"Failed to create collection {collection_id}: {e}")
            raise CollectionError(f"failed to create collection {collection_id}: {e}") from e

        logger.info(f"Collection {collection_id} created successfully")

    def _index(
        self,
        image: Dict[str, Any],
        external_image_id: str,
        collection_id: str,
    ) -> Dict[str, Any]:
        try:
            return self.client.index_faces(
                CollectionId=collection_id,
                Image=image,
                ExternalImageId=external_image_id,
            )
        except ClientError as e:
            logger.error(f"IndexFaces failed for {external_image_id} in {collection_id}: {e}")
            raise FaceIndexError(f"failed to index face: {e}") from e

    @staticmethod
    def _log_records(response: Mapping[str, Any], external_image_id: str) -> List[IndexedFace]:
        faces = []
        for record in response.get("FaceRecords", []):
            if not (record.get("Face") or {}).get("FaceId"):
                logger.warning(f"Skipping face record without FaceId for {external_image_id}")
                continue
            faces.append(IndexedFace.from_record(record))
        logger.info(f"Indexed {len(faces)} face(s) for ExternalImageId: {external_image_id}")
        for face in faces:
            logger.debug(f"FaceId: {face.face_id}, Confidence: {face.confidence}")
        return faces

    def index_face(
        self,
        image_bytes: bytes,
        external_image_id: str,
        collection_id: str,
    ) -> List[IndexedFace]:
        """Index every face found in an image.

        Args:
            image_bytes: Encoded image (JPEG or PNG)
            external_image_id: Id the caller uses to find the image again
            collection_id: Event collection

        Returns:
            One IndexedFace per face the service indexed (may be empty).

        Raises:
            CollectionError: If the collection can't be ensured.
            FaceIndexError: If IndexFaces fails.
        """
        self.ensure_collection(collection_id)
        self._sleep(self.index_delay, "IndexFaces")

        response = self._index({"Bytes": image_bytes}, external_image_id, collection_id)
        return self._log_records(response, external_image_id)

    def index_face_from_s3(
        self,
        bucket: str,
        key: str,
        external_image_id: str,
        collection_id: str,
    ) -> List[IndexedFace]:
        """Index every face of an image stored in S3."""
        self.ensure_collection(collection_id)

        response = self._index(
            {"S3Object": {"Bucket": bucket, "Name": key}},
            external_image_id,
            collection_id,
        )
        return self._log_records(response, external_image_id)

    def search_and_index_selfie(
        self,
        selfie_bytes: bytes,
        collection_id: str,
    ) -> SelfieSearchResult:
        """Index a selfie, crop its face, and search the collection with it.

        The selfie is indexed under ``"<uuid4>_<collection_id>"``.

        Args:
            selfie_bytes: Encoded selfie image
            collection_id: Event collection to search

        Returns:
            SelfieSearchResult with the selfie's face id, the matching
            external image ids and the cropped face JPEG.

        Raises:
            CollectionError: If the collection can't be ensured.
            FaceIndexError: If indexing the selfie fails or the face record
                has no FaceId.
            NoFaceDetectedError: If the selfie contains no face.
            IncompleteGeometry, InvalidCropGeometry, DecodeError, EncodingError:
                If the face crop can't be produced; ``face_id`` is set.
            FaceSearchError: If the search fails; carries ``face_id`` and
                ``cropped_face``.
        """
        self.ensure_collection(collection_id)
        self._sleep(self.index_delay, "IndexFaces")

        external_image_id = f"{uuid.uuid4()}_{collection_id}"
        response = self._index({"Bytes": selfie_bytes}, external_image_id, collection_id)

        records = response.get("FaceRecords") or []
        if not records:
            logger.warning(f"No face detected in selfie for collection {collection_id}")
            raise NoFaceDetectedError("search face failed: no face detected in the image")

        first = records[0]
        face_id = (first.get("Face") or {}).get("FaceId")
        if face_id is None:
            logger.error(f"IndexFaces returned a face record without FaceId for {external_image_id}")
            raise FaceIndexError("indexed face record has no FaceId")
        logger.info(f"Indexed selfie FaceId: {face_id}, ExternalImageId: {external_image_id}")

        try:
            cropped_face = extract_face_crop(
                selfie_bytes,
                response.get("OrientationCorrection"),
                select_bounding_box(first),
                scale=self.crop_scale,
                quality=self.jpeg_quality,
            )
        except FaceCropError as e:
            logger.warning(f"Failed to crop indexed selfie face {face_id}: {e}")
            e.face_id = face_id
            raise

        try:
            matches = self.search_by_face_id(face_id, collection_id)
        except FaceSearchError as e:
            raise FaceSearchError(str(e), face_id=face_id, cropped_face=cropped_face) from e

        return SelfieSearchResult(
            face_id=face_id,
            external_image_ids=matches,
            cropped_face=cropped_face,
        )

    def _describe_for_log(self, collection_id: str) -> None:
        try:
            description = self.client.describe_collection(CollectionId=collection_id)
        except ClientError as e:
            logger.warning(f"Could not describe collection {collection_id}: {e}")
            return
        description.pop("ResponseMetadata", None)
        logger.debug(f"Collection {collection_id}: {json.dumps(description, default=str)}")

    def search_by_face_id(self, face_id: str, collection_id: str) -> List[str]:
        """Find the images whose faces match an already indexed face.

        Args:
            face_id: Face id from a previous IndexFaces call
            collection_id: Collection holding the face

        Returns:
            Unique external image ids in the service's ranking order.

        Raises:
            FaceSearchError: If SearchFaces fails.
        """
        logger.info(f"Searching collection {collection_id} for face id {face_id}")
        self._describe_for_log(collection_id)
        self._sleep(self.search_delay, "SearchFaces")

        try:
            response = self.client.search_faces(CollectionId=collection_id, FaceId=face_id)
        except ClientError as e:
            if _error_code(e) == "InvalidParameterException":
                logger.warning(f"Search face error: invalid parameter for face id {face_id}")
                raise FaceSearchError(f"found this error when search face by id: {e}") from e
            logger.error(f"SearchFaces failed for face id {face_id}: {e}")
            raise FaceSearchError(f"failed to search face by id: {e}") from e

        return _external_ids(response.get("FaceMatches", []))

    def search_from_s3(self, bucket: str, key: str, collection_id: str) -> List[str]:
        """Find the images matching the largest face of an image in S3.

        Raises:
            FaceSearchError: If SearchFacesByImage fails.
        """
        try:
            response = self.client.search_faces_by_image(
                CollectionId=collection_id,
                Image={"S3Object": {"Bucket": bucket, "Name": key}},
            )
        except ClientError as e:
            logger.error(f"SearchFacesByImage failed for s3://{bucket}/{key}: {e}")
            raise FaceSearchError(f"failed to search face by image: {e}") from e

        return _external_ids(response.get("FaceMatches", []))

    def delete_faces(self, face_ids: List[str], collection_id: str) -> List[str]:
        """Delete faces from a collection.

        Returns:
            Face ids the service could not delete.

        Raises:
            FaceDeleteError: If the DeleteFaces call itself fails.
        """
        try:
            response = self.client.delete_faces(CollectionId=collection_id, FaceIds=face_ids)
        except ClientError as e:
            logger.error(f"DeleteFaces failed in {collection_id}: {e}")
            raise FaceDeleteError(f"failed to delete faces: {e}") from e

        unsuccessful = []
        for failure in response.get("UnsuccessfulFaceDeletions", []):
            unsuccessful.append(failure["FaceId"])
            logger.warning(
                f"FaceId: {failure['FaceId']} failed to be deleted because: "
                f"{failure.get('Reasons', [])}"
            )
        return unsuccessful

    def list_faces(self, collection_id: str) -> List[str]:
        """List every face id in a collection, following pagination.

        Raises:
            FaceListError: If ListFaces fails.
        """
        face_ids: List[str] = []
        next_token: Optional[str] = None

        while True:
            kwargs: Dict[str, Any] = {"CollectionId": collection_id}
            if next_token:
                kwargs["NextToken"] = next_token
            try:
                response = self.client.list_faces(**kwargs)
            except ClientError as e:
                logger.error(f"ListFaces failed in {collection_id}: {e}")
                raise FaceListError(f"failed to list faces: {e}") from e

            face_ids.extend(face["FaceId"] for face in response.get("Faces", []))
            next_token = response.get("NextToken")
            if not next_token:
                break

        return face_ids

    def __repr__(self) -> str:
        return (
            f"RekognitionFaceService(crop_scale={self.crop_scale}, "
            f"jpeg_quality={self.jpeg_quality})"
        )

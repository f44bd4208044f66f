"""Face-recognition service backends.

Currently Amazon Rekognition; the operations are described by
:class:`facematch.interfaces.FaceService`.
"""

from facematch.services.rekognition import RekognitionFaceService, select_bounding_box

__all__ = [
    "RekognitionFaceService",
    "select_bounding_box",
]

"""Factory for the face service and its AWS client.

Usage:
    service = create_face_service()            # config from .env
    service = create_face_service(config)      # explicit config
"""

from __future__ import annotations

from typing import Any

import boto3

from facematch.config import Config, get_config
from facematch.logging_config import get_logger
from facematch.services.rekognition import RekognitionFaceService

logger = get_logger(__name__)


def create_rekognition_client(config: Config | None = None) -> Any:
    """Create a boto3 Rekognition client.

    Static credentials are used only when both the access key id and the
    secret are configured; otherwise boto3's default credential chain
    applies (environment, shared config, instance role).

    Args:
        config: Configuration object. If None, loads from .env

    Returns:
        boto3 Rekognition client.
    """
    if config is None:
        config = get_config()

    kwargs = {"region_name": config.aws_region}
    if config.has_static_credentials:
        kwargs["aws_access_key_id"] = config.aws_access_key_id
        kwargs["aws_secret_access_key"] = config.aws_secret_access_key

    logger.info(
        f"Creating Rekognition client in {config.aws_region} "
        f"({'static credentials' if config.has_static_credentials else 'default credential chain'})"
    )
    return boto3.client("rekognition", **kwargs)


def create_face_service(
    config: Config | None = None,
    *,
    client: Any = None,
) -> RekognitionFaceService:
    """Create a RekognitionFaceService wired from configuration.

    Args:
        config: Configuration object. If None, loads from .env
        client: Pre-built Rekognition client (a new one is created if None)

    Returns:
        Ready-to-use face service.

    Example:
        >>> service = create_face_service()
        >>> service.index_face(image_bytes, "photo-0001", "event-42")
    """
    if config is None:
        config = get_config()
    if client is None:
        client = create_rekognition_client(config)

    return RekognitionFaceService(
        client,
        index_delay=config.index_delay,
        search_delay=config.search_delay,
        crop_scale=config.crop_scale,
        jpeg_quality=config.jpeg_quality,
    )

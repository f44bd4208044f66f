"""Configuration for the facematch service.

Settings are read from environment variables, optionally seeded from a
``.env`` file in the working directory, and exposed through a single
:class:`Config` dataclass.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _optional_env(key: str) -> Optional[str]:
    value = os.getenv(key, "").strip()
    return value or None


@dataclass
class Config:
    """Application configuration loaded from environment variables.

    Attributes:
        aws_region: AWS region hosting the Rekognition collections
        aws_access_key_id: Static access key (None = default credential chain)
        aws_secret_access_key: Static secret key (None = default credential chain)
        aws_bucket_name: Default S3 bucket for bucket-based index/search
        crop_scale: Factor applied around the face bbox center before cropping
        jpeg_quality: JPEG quality of the cropped face thumbnail (0-100)
        index_delay: Seconds to wait before each IndexFaces call
        search_delay: Seconds to wait before each SearchFaces call
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    aws_region: str
    aws_access_key_id: Optional[str]
    aws_secret_access_key: Optional[str]
    aws_bucket_name: Optional[str]
    crop_scale: float
    jpeg_quality: int
    index_delay: float
    search_delay: float
    log_level: str

    @classmethod
    def from_env(cls) -> Config:
        """Load configuration from environment variables.

        Returns:
            Config instance with values from environment or defaults.

        Raises:
            ValueError: If an environment variable holds an invalid value.
        """
        aws_region = os.getenv("AWS_REGION", "us-east-1").strip()
        if not aws_region:
            raise ValueError("AWS_REGION must not be empty")

        crop_scale = float(os.getenv("CROP_SCALE", "1.8"))
        if crop_scale <= 0:
            raise ValueError(f"CROP_SCALE must be > 0, got {crop_scale}")

        jpeg_quality = int(os.getenv("JPEG_QUALITY", "90"))
        if not 0 <= jpeg_quality <= 100:
            raise ValueError(f"JPEG_QUALITY must be between 0 and 100, got {jpeg_quality}")

        index_delay = float(os.getenv("INDEX_DELAY", "0.5"))
        if index_delay < 0:
            raise ValueError(f"INDEX_DELAY must be >= 0, got {index_delay}")

        search_delay = float(os.getenv("SEARCH_DELAY", "3.0"))
        if search_delay < 0:
            raise ValueError(f"SEARCH_DELAY must be >= 0, got {search_delay}")

        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        if log_level not in VALID_LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {VALID_LOG_LEVELS}, got {log_level}")

        return cls(
            aws_region=aws_region,
            aws_access_key_id=_optional_env("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=_optional_env("AWS_SECRET_ACCESS_KEY"),
            aws_bucket_name=_optional_env("AWS_BUCKET_NAME"),
            crop_scale=crop_scale,
            jpeg_quality=jpeg_quality,
            index_delay=index_delay,
            search_delay=search_delay,
            log_level=log_level,
        )

    @property
    def has_static_credentials(self) -> bool:
        """True when both halves of a static AWS key pair are configured."""
        return bool(self.aws_access_key_id and self.aws_secret_access_key)

    def __repr__(self) -> str:
        """Return string representation of config (secrets redacted)."""
        return (
            f"Config(\n"
            f"  Region: {self.aws_region},\n"
            f"  Credentials: {'static' if self.has_static_credentials else 'default chain'},\n"
            f"  Bucket: {self.aws_bucket_name or '-'},\n"
            f"  Crop Scale: {self.crop_scale},\n"
            f"  JPEG Quality: {self.jpeg_quality},\n"
            f"  Delays: index={self.index_delay}s search={self.search_delay}s,\n"
            f"  Log Level: {self.log_level}\n"
            f")"
        )


_config: Config | None = None


def get_config() -> Config:
    """Get global config instance, loading it on first use."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config

"""Unit tests for configuration loading and service wiring."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from facematch import factory
from facematch.config import Config
from facematch.services.rekognition import RekognitionFaceService

ENV_KEYS = [
    "AWS_REGION",
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "AWS_BUCKET_NAME",
    "CROP_SCALE",
    "JPEG_QUALITY",
    "INDEX_DELAY",
    "SEARCH_DELAY",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove configuration variables inherited from the shell."""
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults():
    """Test defaults when nothing is set."""
    config = Config.from_env()

    assert config.aws_region == "us-east-1"
    assert config.aws_access_key_id is None
    assert config.aws_bucket_name is None
    assert config.crop_scale == 1.8
    assert config.jpeg_quality == 90
    assert config.index_delay == 0.5
    assert config.search_delay == 3.0
    assert config.log_level == "INFO"
    assert not config.has_static_credentials


def test_values_from_env(monkeypatch):
    """Test environment values override defaults."""
    monkeypatch.setenv("AWS_REGION", "ap-southeast-1")
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "AKIATEST")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "secret")
    monkeypatch.setenv("AWS_BUCKET_NAME", "photos")
    monkeypatch.setenv("CROP_SCALE", "2.0")
    monkeypatch.setenv("JPEG_QUALITY", "75")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = Config.from_env()

    assert config.aws_region == "ap-southeast-1"
    assert config.has_static_credentials
    assert config.aws_bucket_name == "photos"
    assert config.crop_scale == 2.0
    assert config.jpeg_quality == 75
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize(
    "key, value",
    [
        ("CROP_SCALE", "0"),
        ("JPEG_QUALITY", "101"),
        ("INDEX_DELAY", "-1"),
        ("SEARCH_DELAY", "-0.5"),
        ("LOG_LEVEL", "VERBOSE"),
        ("AWS_REGION", "  "),
    ],
)
def test_invalid_values(monkeypatch, key, value):
    """Test out-of-range values raise ValueError."""
    monkeypatch.setenv(key, value)

    with pytest.raises(ValueError):
        Config.from_env()


def test_repr_hides_secrets(monkeypatch):
    """Test the secret key never shows up in repr."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "AKIATEST")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "super-secret")

    assert "super-secret" not in repr(Config.from_env())


def test_create_rekognition_client_default_chain(monkeypatch):
    """Test no explicit keys are passed without static credentials."""
    boto_client = Mock()
    monkeypatch.setattr(factory.boto3, "client", boto_client)

    factory.create_rekognition_client(Config.from_env())

    boto_client.assert_called_once_with("rekognition", region_name="us-east-1")


def test_create_rekognition_client_static_credentials(monkeypatch):
    """Test static keys are forwarded to boto3."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "AKIATEST")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "secret")
    boto_client = Mock()
    monkeypatch.setattr(factory.boto3, "client", boto_client)

    factory.create_rekognition_client(Config.from_env())

    boto_client.assert_called_once_with(
        "rekognition",
        region_name="us-east-1",
        aws_access_key_id="AKIATEST",
        aws_secret_access_key="secret",
    )


def test_create_face_service(monkeypatch):
    """Test the service picks up crop and delay settings."""
    monkeypatch.setenv("CROP_SCALE", "1.5")
    monkeypatch.setenv("JPEG_QUALITY", "80")
    monkeypatch.setenv("SEARCH_DELAY", "0")
    client = Mock()

    service = factory.create_face_service(Config.from_env(), client=client)

    assert isinstance(service, RekognitionFaceService)
    assert service.client is client
    assert service.crop_scale == 1.5
    assert service.jpeg_quality == 80
    assert service.search_delay == 0.0

"""Unit tests for crop geometry helpers."""

from __future__ import annotations

import pytest

from facematch.cropper import compute_crop_rect
from facematch.errors import IncompleteGeometry, InvalidCropGeometry
from facematch.interfaces import NormalizedBoundingBox, PixelRect
from facematch.utils import (
    clamp,
    expand_about_center,
    normalize_scale,
    round_half_away,
    snap_rect,
    to_pixel_box,
)


@pytest.fixture
def centered_bbox():
    """Box covering the central half of the image."""
    return NormalizedBoundingBox(left=0.25, top=0.25, width=0.5, height=0.5)


def test_clamp():
    """Test clamping below, inside and above the range."""
    assert clamp(-5, 0, 100) == 0
    assert clamp(42, 0, 100) == 42
    assert clamp(101, 0, 100) == 100
    assert clamp(0, 0, 100) == 0
    assert clamp(100, 0, 100) == 100


def test_round_half_away():
    """Test halves round away from zero, unlike built-in round()."""
    assert round_half_away(2.5) == 3
    assert round_half_away(3.5) == 4
    assert round_half_away(-2.5) == -3
    assert round_half_away(2.49) == 2
    assert round_half_away(-0.4) == 0
    assert round_half_away(7.0) == 7


def test_normalize_scale():
    """Test non-positive scales fall back to 1.0."""
    assert normalize_scale(1.8) == 1.8
    assert normalize_scale(0.0) == 1.0
    assert normalize_scale(-3.0) == 1.0


def test_to_pixel_box():
    """Test normalized values are scaled by the matching dimension."""
    assert to_pixel_box(0.1, 0.2, 0.5, 0.25, 200, 100) == pytest.approx((20.0, 20.0, 100.0, 25.0))


def test_expand_about_center_keeps_center():
    """Test expansion is symmetric around the box center."""
    x0, y0, x1, y1 = expand_about_center(10.0, 20.0, 40.0, 20.0, 2.0)

    assert (x0 + x1) / 2 == pytest.approx(30.0)
    assert (y0 + y1) / 2 == pytest.approx(30.0)
    assert x1 - x0 == pytest.approx(80.0)
    assert y1 - y0 == pytest.approx(40.0)


def test_snap_rect_clamps_axes_independently():
    """Test each coordinate is clamped to its own axis bound."""
    rect = snap_rect(-10.2, 5.6, 130.0, 49.5, 100, 50)

    assert rect == PixelRect(0, 6, 100, 50)


def test_pixel_rect_properties():
    """Test width, height and degeneracy."""
    rect = PixelRect(10, 20, 40, 30)
    assert rect.width == 30
    assert rect.height == 10
    assert not rect.is_degenerate

    assert PixelRect(10, 10, 10, 20).is_degenerate
    assert PixelRect(10, 30, 20, 20).is_degenerate


def test_crop_rect_unscaled(centered_bbox):
    """Test scale 1.0 yields exactly the detector box."""
    rect = compute_crop_rect(100, 100, centered_bbox, scale=1.0)

    assert rect == PixelRect(25, 25, 75, 75)


def test_crop_rect_scaled(centered_bbox):
    """Test 1.8x expansion around the center of a 50px box."""
    rect = compute_crop_rect(100, 100, centered_bbox, scale=1.8)

    assert rect == PixelRect(5, 5, 95, 95)


def test_crop_rect_default_scale_is_1_8(centered_bbox):
    """Test the default context margin."""
    assert compute_crop_rect(100, 100, centered_bbox) == PixelRect(5, 5, 95, 95)


@pytest.mark.parametrize("scale", [0.0, -1.0])
def test_crop_rect_non_positive_scale_is_noop(centered_bbox, scale):
    """Test scale <= 0 behaves like 1.0."""
    assert compute_crop_rect(100, 100, centered_bbox, scale=scale) == PixelRect(25, 25, 75, 75)


def test_crop_rect_at_edge_clamps():
    """Test a corner face with a large scale is clamped, not rejected."""
    bbox = NormalizedBoundingBox(left=0.0, top=0.0, width=0.1, height=0.1)

    rect = compute_crop_rect(100, 100, bbox, scale=3.0)

    assert rect == PixelRect(0, 0, 20, 20)
    assert not rect.is_degenerate


def test_crop_rect_non_square_image():
    """Test horizontal values use width and vertical values use height."""
    bbox = NormalizedBoundingBox(left=0.5, top=0.5, width=0.25, height=0.25)

    rect = compute_crop_rect(200, 100, bbox, scale=1.0)

    assert rect == PixelRect(100, 50, 150, 75)


def test_crop_rect_falls_back_to_unscaled_box():
    """Test a scaled box that collapses after rounding uses the original box."""
    bbox = NormalizedBoundingBox(left=0.2, top=0.2, width=0.1, height=0.1)

    # 10px box shrunk to 0.1px rounds to an empty rectangle
    rect = compute_crop_rect(100, 100, bbox, scale=0.01)

    assert rect == PixelRect(20, 20, 30, 30)


def test_crop_rect_outside_image_is_invalid():
    """Test a box entirely outside the image fails after fallback."""
    bbox = NormalizedBoundingBox(left=1.5, top=0.5, width=0.1, height=0.1)

    with pytest.raises(InvalidCropGeometry):
        compute_crop_rect(100, 100, bbox, scale=1.8)


def test_crop_rect_zero_size_box_is_invalid():
    """Test a zero-width box has no usable crop at any scale."""
    bbox = NormalizedBoundingBox(left=0.5, top=0.5, width=0.0, height=0.2)

    with pytest.raises(InvalidCropGeometry):
        compute_crop_rect(100, 100, bbox, scale=1.8)


@pytest.mark.parametrize("missing", ["left", "top", "width", "height"])
def test_crop_rect_incomplete_bbox(missing):
    """Test any missing field raises instead of defaulting."""
    values = {"left": 0.25, "top": 0.25, "width": 0.5, "height": 0.5}
    values[missing] = None
    bbox = NormalizedBoundingBox(**values)

    with pytest.raises(IncompleteGeometry, match=missing):
        compute_crop_rect(100, 100, bbox)


def test_bbox_from_response():
    """Test parsing a Rekognition BoundingBox dict."""
    bbox = NormalizedBoundingBox.from_response(
        {"Left": 0.1, "Top": 0.2, "Width": 0.3, "Height": 0.4}
    )

    assert bbox.is_complete
    assert bbox.resolve() == (0.1, 0.2, 0.3, 0.4)


def test_bbox_from_partial_response():
    """Test absent keys become None."""
    bbox = NormalizedBoundingBox.from_response({"Left": 0.1, "Top": 0.2, "Width": 0.3})

    assert bbox.height is None
    assert not bbox.is_complete
    with pytest.raises(IncompleteGeometry):
        bbox.resolve()

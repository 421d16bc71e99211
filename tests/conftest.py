"""
Pytest configuration and shared fixtures for Open Retouch tests.

This module provides shared test fixtures and configuration
used across multiple test modules.
"""

import io

import numpy as np
import pytest
from PIL import Image

from OR_Libs.ImageEditingLib.raster_buffer import RasterBuffer
from OR_Libs.SessionLib.editor_config import EditorConfig
from OR_Libs.SessionLib.editor_session import EditorSession


@pytest.fixture
def sample_rgba_colors():
    """
    Provide the four pixels of a 2x2 test buffer.

    Returns:
        List of (R, G, B, A) tuples, row-major
    """
    return [
        (255, 0, 0, 255),      # Red
        (0, 255, 0, 255),      # Green
        (0, 0, 255, 255),      # Blue
        (255, 255, 255, 255),  # White
    ]


@pytest.fixture
def small_buffer(sample_rgba_colors):
    """2x2 buffer built from sample_rgba_colors."""
    return RasterBuffer.from_colors(2, 2, sample_rgba_colors)


@pytest.fixture
def gradient_buffer():
    """
    Provide a 6x4 buffer where every pixel is distinct.

    Returns:
        RasterBuffer with opaque pixels
    """
    height, width = 4, 6
    data = np.zeros((height, width, 4), dtype=np.uint8)
    for y in range(height):
        for x in range(width):
            data[y, x] = (x * 40, y * 60, (x + y) * 20, 255)
    return RasterBuffer(data)


def make_photo_array(width=64, height=48, seed=0):
    """Noisy RGB array that compresses differently at different qualities."""
    rng = np.random.default_rng(seed)
    xs = np.linspace(0, 255, width)
    ys = np.linspace(0, 255, height)
    base = np.stack(np.meshgrid(xs, ys), axis=-1)
    rgb = np.concatenate([base, base[..., :1]], axis=-1)
    noise = rng.integers(-40, 40, size=rgb.shape)
    return np.clip(rgb + noise, 0, 255).astype(np.uint8)


def encode_array(array, fmt="JPEG", **kwargs):
    out = io.BytesIO()
    Image.fromarray(array).save(out, format=fmt, **kwargs)
    return out.getvalue()


@pytest.fixture
def photo_buffer():
    """64x48 opaque buffer with enough detail for lossy compression tests."""
    rgb = make_photo_array()
    alpha = np.full(rgb.shape[:2] + (1,), 255, dtype=np.uint8)
    return RasterBuffer(np.concatenate([rgb, alpha], axis=-1))


@pytest.fixture
def jpeg_bytes():
    """Encoded 64x48 JPEG."""
    return encode_array(make_photo_array(), "JPEG", quality=95)


@pytest.fixture
def png_bytes(gradient_buffer):
    """Encoded 6x4 PNG of gradient_buffer."""
    return encode_array(gradient_buffer.data, "PNG")


@pytest.fixture
def make_session():
    """
    Factory for EditorSession objects with zero simulated latency.

    Sessions created through the factory are closed after the test.
    """
    sessions = []

    def factory(premium=False, **kwargs):
        kwargs.setdefault("time_unit_seconds", 0)
        session = EditorSession(EditorConfig(premium=premium, **kwargs))
        sessions.append(session)
        return session

    yield factory

    for session in sessions:
        session.close()

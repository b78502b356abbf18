"""
Test configuration and fixtures for palette extraction tests.
"""
import io

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

# Import the main app
from main import app


@pytest.fixture
def test_client():
    """Create test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def reset_metrics():
    """Reset metrics before each test."""
    from app.utils.metrics import reset_metrics
    reset_metrics()


def make_rgba(colors, alpha=255):
    """Build a (1, N, 4) RGBA row from a list of RGB tuples."""
    row = [list(color) + [alpha] for color in colors]
    return np.array([row], dtype=np.uint8)


def encode_png(rgba: np.ndarray) -> bytes:
    """Encode an RGBA (or RGB) array as PNG bytes."""
    buffer = io.BytesIO()
    Image.fromarray(rgba).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def red_blue_png():
    """2x1 image with one pure red and one pure blue pixel."""
    return encode_png(make_rgba([(255, 0, 0), (0, 0, 255)]))


@pytest.fixture
def transparent_png():
    """Fully transparent 16x16 image."""
    return encode_png(np.zeros((16, 16, 4), dtype=np.uint8))


@pytest.fixture
def striped_png():
    """400x200 image with four vertical color stripes of unequal width."""
    img = np.zeros((200, 400, 4), dtype=np.uint8)
    img[..., 3] = 255
    img[:, :160, :3] = (120, 120, 120)   # large dull gray
    img[:, 160:280, :3] = (30, 90, 200)  # blue
    img[:, 280:360, :3] = (230, 40, 40)  # red
    img[:, 360:, :3] = (250, 210, 20)    # yellow
    return encode_png(img)

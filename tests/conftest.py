"""Shared fixtures for the nnfield tests"""
import numpy as np
import pytest

GRAY = (128, 128, 128)
RED = (255, 0, 0)


def make_uniform(width, height, color=GRAY):
    img = np.zeros((height, width, 3), dtype=np.uint8)
    img[:, :] = color
    return img


@pytest.fixture
def noise_image():
    """12x12 RGB noise; every 3x3 patch is unique"""
    rng = np.random.default_rng(1234)
    return rng.integers(0, 256, size=(12, 12, 3), dtype=np.uint8)


@pytest.fixture
def gray_image():
    return make_uniform(10, 10)


@pytest.fixture
def red_dot_image():
    """10x10 gray image with a single red pixel at (x=5, y=5)"""
    img = make_uniform(10, 10)
    img[5, 5] = RED
    return img


def assert_field_invariants(matcher):
    """Offsets stay in the target interior and scores are never stale."""
    R = matcher.radius
    for y in range(R, matcher.height - R):
        for x in range(R, matcher.width - R):
            tx, ty = (int(v) for v in matcher.nnf[y, x])
            assert R <= tx < matcher.target_width - R, (x, y, tx, ty)
            assert R <= ty < matcher.target_height - R, (x, y, tx, ty)
            assert matcher.scores[y, x] == matcher.distance(x, y, tx, ty), (x, y)

# nnfield/config.py
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .errors import InvalidConfiguration

# ======================
# DEFAULTS
# ======================
DEFAULT_RADIUS = 3
DEFAULT_ITERATIONS = 3
# Default seed of the classic Mersenne Twister engine. Runs are reproducible
# unless the caller asks for seed=None.
DEFAULT_SEED = 5489


@dataclass
class MatchConfig:
    radius: int = DEFAULT_RADIUS
    iterations: int = DEFAULT_ITERATIONS
    seed: Optional[int] = DEFAULT_SEED
    max_size: Optional[int] = None

    @property
    def window(self) -> int:
        """Side length of the square comparison patch."""
        return 2 * self.radius + 1

    def validate(self) -> "MatchConfig":
        validate_radius(self.radius)

        if isinstance(self.iterations, bool) or not isinstance(self.iterations, (int, np.integer)):
            raise InvalidConfiguration(f"iterations must be an integer, got {self.iterations!r}")
        if self.iterations < 0:
            raise InvalidConfiguration(f"iterations must be >= 0, got {self.iterations}")

        validate_seed(self.seed)

        if self.max_size is not None and self.max_size < self.window:
            raise InvalidConfiguration(
                f"max_size {self.max_size} cannot hold a {self.window}x{self.window} patch"
            )
        return self


# ======================
# VALIDATION
# ======================
def validate_radius(radius):
    if isinstance(radius, bool) or not isinstance(radius, (int, np.integer)):
        raise InvalidConfiguration(f"radius must be an integer, got {radius!r}")
    if radius < 1:
        raise InvalidConfiguration(f"radius must be >= 1, got {radius}")


def validate_seed(seed):
    if seed is None:
        return
    if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)) or seed < 0:
        raise InvalidConfiguration(f"seed must be a non-negative integer or None, got {seed!r}")


def validate_images(source: np.ndarray, target: np.ndarray, radius: int):
    """
    Check that source and target can be matched with the given radius.

    Both images must be (H, W) or (H, W, C) arrays of an integer dtype with the
    same channel count, and each must hold at least one pixel whose
    (2R+1)x(2R+1) window lies fully inside the image.

    Raises:
        InvalidConfiguration: on any violation.
    """
    validate_radius(radius)

    for name, img in (("source", source), ("target", target)):
        if not isinstance(img, np.ndarray):
            raise InvalidConfiguration(f"{name} must be a numpy array, got {type(img).__name__}")
        if img.ndim not in (2, 3):
            raise InvalidConfiguration(f"{name} must be a 2-D or 3-D array, got shape {img.shape}")
        if not np.issubdtype(img.dtype, np.integer):
            raise InvalidConfiguration(f"{name} must have an integer dtype, got {img.dtype}")

        h, w = img.shape[:2]
        if w < 2 * radius + 1 or h < 2 * radius + 1:
            raise InvalidConfiguration(
                f"{name} of size {w}x{h} has no interior pixel for radius {radius}"
            )

    src_c = source.shape[2] if source.ndim == 3 else 1
    tgt_c = target.shape[2] if target.ndim == 3 else 1
    if src_c != tgt_c:
        raise InvalidConfiguration(
            f"source has {src_c} channels but target has {tgt_c}"
        )

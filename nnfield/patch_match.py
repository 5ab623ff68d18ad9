# nnfield/patch_match.py
import logging

import numpy as np

from .config import DEFAULT_SEED, validate_images, validate_seed
from .distance import patch_distance
from .errors import InvalidConfiguration

logger = logging.getLogger(__name__)


class PatchMatcher:
    """
    Randomized PatchMatch search for a Nearest-Neighbor Field.

    For every interior pixel (x, y) of `source` the matcher keeps a target
    coordinate (x', y') and the patch distance between the two windows.
    Pixels closer than `radius` to a border (the margin) are never
    initialized, updated or used as patch centres.

    State:
        nnf:    (H, W, 2) int64, stored (x', y') per source pixel, -1 in the margin
        scores: (H, W) int64, patch distance at the stored coordinate, -1 in the margin
        rng:    private numpy Generator, advanced on every draw
    """

    def __init__(self, source, target, radius=3, seed=DEFAULT_SEED):
        validate_images(source, target, radius)
        validate_seed(seed)

        self.radius = int(radius)
        self.seed = seed
        self.rng = np.random.default_rng(seed)

        self._squeeze = target.ndim == 2
        self.target_dtype = target.dtype
        # pixel (x, y) is image[y, x]; kept widened so distances never wrap
        self.source = _as_channels(source).astype(np.int64)
        self.target = _as_channels(target).astype(np.int64)

        self.height, self.width = self.source.shape[:2]
        self.target_height, self.target_width = self.target.shape[:2]

        self.nnf = np.full((self.height, self.width, 2), -1, dtype=np.int64)
        self.scores = np.full((self.height, self.width), -1, dtype=np.int64)
        self.iterations_done = 0

        self._initialize()

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "PatchMatcher ready: source %dx%d, target %dx%d, radius %d, seed %s, mean score %.1f",
                self.width, self.height, self.target_width, self.target_height,
                self.radius, self.seed, self.mean_score(),
            )

    # ======================
    # Initialization
    # ======================
    def _initialize(self):
        """Random starting guess for every interior pixel."""
        R = self.radius
        for y in range(R, self.height - R):
            for x in range(R, self.width - R):
                tx = int(self.rng.integers(R, self.target_width - R))
                ty = int(self.rng.integers(R, self.target_height - R))
                self.nnf[y, x] = (tx, ty)
                self.scores[y, x] = self.distance(x, y, tx, ty)

    def distance(self, x, y, tx, ty):
        """Patch distance between source (x, y) and target (tx, ty)."""
        return patch_distance(self.source, x, y, self.target, tx, ty, self.radius)

    def in_target_interior(self, tx, ty):
        R = self.radius
        return R <= tx < self.target_width - R and R <= ty < self.target_height - R

    def in_source_interior(self, x, y):
        R = self.radius
        return R <= x < self.width - R and R <= y < self.height - R

    # ======================
    # Update / propagate / search
    # ======================
    def update(self, x, y, tx, ty):
        """
        Propose (tx, ty) as the match for source pixel (x, y).

        Candidates outside the target interior are ignored. Otherwise the
        stored offset and score are replaced only when the candidate is
        strictly better.

        Returns:
            bool: True if the NNF entry changed.
        """
        tx, ty = int(tx), int(ty)
        if not self.in_target_interior(tx, ty):
            return False

        d = self.distance(x, y, tx, ty)
        if d < self.scores[y, x]:
            self.nnf[y, x] = (tx, ty)
            self.scores[y, x] = d
            return True
        return False

    def propagate(self, x, y, direction):
        """
        Try the offsets of the already visited neighbours of (x, y).

        direction is -1 on a forward sweep (neighbours at x-1 and y-1) and
        +1 on a backward sweep (neighbours at x+1 and y+1).
        """
        if direction not in (-1, 1):
            raise InvalidConfiguration(f"direction must be -1 or +1, got {direction!r}")

        nx = x + direction
        if self.in_source_interior(nx, y):
            tx, ty = self.nnf[y, nx]
            self.update(x, y, tx - direction, ty)

        ny = y + direction
        if self.in_source_interior(x, ny):
            tx, ty = self.nnf[ny, x]
            self.update(x, y, tx, ty - direction)

    def search(self, x, y):
        """
        Exponentially shrinking random search around the current match.

        The window starts at the larger target dimension and halves until it
        drops below one pixel.
        """
        tx, ty = (int(v) for v in self.nnf[y, x])
        r = max(self.target_width, self.target_height)
        while r >= 1:
            ox, oy = self.rng.integers(-r, r + 1, size=2)
            self.update(x, y, tx + ox, ty + oy)
            r >>= 1

    # ======================
    # Iterations
    # ======================
    def iterate(self):
        """One forward sweep followed by one backward sweep."""
        R = self.radius
        for y in range(R, self.height - R):
            for x in range(R, self.width - R):
                self.propagate(x, y, -1)
                self.search(x, y)

        for y in range(self.height - R - 1, R - 1, -1):
            for x in range(self.width - R - 1, R - 1, -1):
                self.propagate(x, y, +1)
                self.search(x, y)

        self.iterations_done += 1

    def run(self, iterations):
        if iterations < 0:
            raise InvalidConfiguration(f"iterations must be >= 0, got {iterations}")

        for i in range(iterations):
            self.iterate()
            logger.info(
                "iteration %d/%d: mean patch score %.1f",
                i + 1, iterations, self.mean_score(),
            )
        return self

    # ======================
    # Results
    # ======================
    def interior_mask(self):
        mask = np.zeros((self.height, self.width), dtype=bool)
        R = self.radius
        mask[R:self.height - R, R:self.width - R] = True
        return mask

    def mean_score(self):
        return float(self.scores[self.interior_mask()].mean())

    def field(self):
        """Copies of (nnf, scores)."""
        return self.nnf.copy(), self.scores.copy()

    def offsets(self):
        """
        NNF as relative displacements (x' - x, y' - y).

        Margin pixels are 0.
        """
        ys, xs = np.mgrid[0:self.height, 0:self.width]
        rel = np.zeros_like(self.nnf)
        mask = self.interior_mask()
        rel[..., 0][mask] = self.nnf[..., 0][mask] - xs[mask]
        rel[..., 1][mask] = self.nnf[..., 1][mask] - ys[mask]
        return rel

    def reconstruct(self):
        """
        Rebuild the source from target pixels at the stored matches.

        Interior pixel (x, y) receives target[y', x']; the margin stays zero.
        """
        out = np.zeros((self.height, self.width, self.target.shape[2]), dtype=self.target_dtype)
        mask = self.interior_mask()
        tx = self.nnf[..., 0][mask]
        ty = self.nnf[..., 1][mask]
        out[mask] = self.target[ty, tx].astype(self.target_dtype)
        if self._squeeze:
            return out[..., 0]
        return out


def _as_channels(img):
    if img.ndim == 2:
        return img[:, :, np.newaxis]
    return img

# nnfield/distance.py
import numpy as np


def patch_window(img, x, y, radius):
    """Return the (2R+1)x(2R+1) window centred on (x, y), widened to int64."""
    return img[y - radius:y + radius + 1, x - radius:x + radius + 1].astype(np.int64, copy=False)


def patch_distance(img_a, xa, ya, img_b, xb, yb, radius):
    """
    Sum of squared differences between two square patches.

    Pixel (x, y) is img[y, x]. Channel values are widened to a signed type
    before subtraction so uint8 inputs cannot wrap around. No bounds checking
    is done: both windows must lie inside their images.

    Args:
        img_a, img_b: (H, W) or (H, W, C) integer images.
        xa, ya: centre of the patch in img_a.
        xb, yb: centre of the patch in img_b.
        radius: patch half-width R.

    Returns:
        int: sum over the window of the squared Euclidean distance between
        channel vectors.
    """
    diff = patch_window(img_a, xa, ya, radius) - patch_window(img_b, xb, yb, radius)
    return int(np.sum(diff * diff))

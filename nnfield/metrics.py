# nnfield/metrics.py
import numpy as np
from skimage.metrics import structural_similarity as ssim


def _crop_interior(img, radius):
    h, w = img.shape[:2]
    return img[radius:h - radius, radius:w - radius]


def compute_metrics(source, output, scores, radius):
    """
    Quality summary of a finished field, computed over the interior only.

    source and output are (H, W, C) images of the same size; scores is the
    per-pixel patch distance array of the matcher.
    """

    # ======================
    # Patch scores
    # ======================
    interior_scores = _crop_interior(scores, radius)
    mean_score = float(interior_scores.mean())
    exact = float(np.mean(interior_scores == 0))

    # ======================
    # SSIM (reconstruction vs source)
    # ======================
    src = _crop_interior(np.asarray(source), radius)
    out = _crop_interior(np.asarray(output), radius)
    if src.ndim == 2:
        src = src[:, :, np.newaxis]
        out = out[:, :, np.newaxis]

    side = min(src.shape[:2])
    win_size = min(7, side if side % 2 == 1 else side - 1)
    if win_size >= 3:
        ssim_score = ssim(
            src.astype(np.float64),
            out.astype(np.float64),
            data_range=255,
            channel_axis=-1,
            win_size=win_size,
        )
        ssim_score = round(float(ssim_score), 4)
    else:
        ssim_score = None

    return {
        "Mean Patch Score": round(mean_score, 4),
        "Exact Matches": round(exact, 4),
        "SSIM (Source)": ssim_score,
    }

# nnfield/pipeline.py
import logging
import os
import time
from dataclasses import dataclass, field
from typing import Dict, Optional

import numpy as np

from .config import MatchConfig, validate_images
from .errors import EncodeFailure
from .io import (
    image_from_bytes,
    image_to_bytes,
    load_image,
    resize_to_max_size,
    save_field,
    save_image,
    to_channels,
)
from .metrics import compute_metrics
from .patch_match import PatchMatcher

logger = logging.getLogger(__name__)


@dataclass
class MatchResult:
    output: np.ndarray
    nnf: np.ndarray
    scores: np.ndarray
    iterations: int
    elapsed: float
    metrics: Dict[str, Optional[float]] = field(default_factory=dict)


def run_patch_match(source_img, target_img, config: Optional[MatchConfig] = None, *, channels=None):
    """
    Runs PatchMatch from source into target and returns a MatchResult:
      - output: source-sized image rebuilt from target pixels (margin is zero)
      - nnf / scores: the final field
      - metrics: quality summary (dict)
    """
    config = (config or MatchConfig()).validate()

    # ======================
    # 1. Channels
    # ======================
    if channels is None:
        channels = source_img.shape[2] if np.ndim(source_img) == 3 else 1
    source = to_channels(source_img, channels)
    target = to_channels(target_img, channels)

    # ======================
    # 2. Resize (aspect-ratio preserved)
    # ======================
    if config.max_size is not None:
        source = resize_to_max_size(source, config.max_size)
        target = resize_to_max_size(target, config.max_size)

    validate_images(source, target, config.radius)

    # ======================
    # 3. Match
    # ======================
    t0 = time.time()
    matcher = PatchMatcher(source, target, radius=config.radius, seed=config.seed)
    matcher.run(config.iterations)
    elapsed = time.time() - t0
    logger.info(
        "matched %dx%d -> %dx%d in %.2fs (%d iterations)",
        matcher.width, matcher.height, matcher.target_width, matcher.target_height,
        elapsed, config.iterations,
    )

    # ======================
    # 4. Reconstruct + metrics
    # ======================
    output = matcher.reconstruct()
    nnf, scores = matcher.field()
    metrics = compute_metrics(source, output, scores, config.radius)

    return MatchResult(
        output=output,
        nnf=nnf,
        scores=scores,
        iterations=matcher.iterations_done,
        elapsed=elapsed,
        metrics=metrics,
    )


def match_files(source_path, target_path, output_path, config: Optional[MatchConfig] = None, channels=3,
                field_path=None):
    """
    Load two images, match them and write the reconstruction to output_path.

    When field_path is given the raw nnf and scores are stored there too. A
    decode or encode failure aborts the whole run and leaves no output file
    behind.
    """
    source = load_image(source_path, channels)
    target = load_image(target_path, channels)
    result = run_patch_match(source, target, config, channels=channels)

    if field_path:
        save_field(field_path, result.nnf, result.scores)
    try:
        save_image(output_path, result.output)
    except EncodeFailure:
        if field_path and os.path.exists(field_path):
            os.remove(field_path)
        raise
    return result


def match_uploads(source_data, target_data, config: Optional[MatchConfig] = None, channels=3):
    """
    Match two encoded images held in memory (e.g. browser uploads).

    Returns:
        (source image, MatchResult, PNG bytes of the output)
    """
    source = image_from_bytes(source_data, channels)
    target = image_from_bytes(target_data, channels)
    result = run_patch_match(source, target, config, channels=channels)
    return source, result, image_to_bytes(result.output)

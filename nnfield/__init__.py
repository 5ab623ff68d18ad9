"""
nnfield
-------

Approximate Nearest-Neighbor Fields between two images with PatchMatch.

    from nnfield import MatchConfig, PatchMatcher

    matcher = PatchMatcher(source, target, radius=3, seed=5489)
    matcher.run(3)
    output = matcher.reconstruct()
"""

from .config import DEFAULT_SEED, MatchConfig, validate_images
from .distance import patch_distance
from .errors import DecodeFailure, EncodeFailure, InvalidConfiguration, NNFError
from .patch_match import PatchMatcher
from .pipeline import MatchResult, match_files, run_patch_match

__all__ = [
    "DEFAULT_SEED",
    "DecodeFailure",
    "EncodeFailure",
    "InvalidConfiguration",
    "MatchConfig",
    "MatchResult",
    "NNFError",
    "PatchMatcher",
    "match_files",
    "patch_distance",
    "run_patch_match",
    "validate_images",
]

__version__ = "0.1.0"

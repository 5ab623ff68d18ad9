"""
Command-line entry point for PatchMatch NNF computation.

Usage (from project root):
> nnfield src0.png src1.png --out dst.png --radius 3 --iters 3
"""
import argparse
import logging
import sys

from .config import DEFAULT_ITERATIONS, DEFAULT_RADIUS, DEFAULT_SEED, MatchConfig
from .errors import NNFError
from .pipeline import match_files


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Compute a PatchMatch nearest-neighbor field from source into target")
    p.add_argument("source", help="Image the field is computed for")
    p.add_argument("target", help="Image the field points into")
    p.add_argument("--out", default="dst.png", help="Where to write the reconstructed image")
    p.add_argument("--radius", type=int, default=DEFAULT_RADIUS, help="Patch half-width (window is 2R+1)")
    p.add_argument("--iters", type=int, default=DEFAULT_ITERATIONS, help="PatchMatch iterations")
    p.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Seed of the random search")
    p.add_argument("--channels", type=int, default=3, help="Channels to decode each image to")
    p.add_argument("--max-size", type=int, default=None, help="Downscale inputs so max(h, w) <= this")
    p.add_argument("--save-nnf", default=None, help="Also store nnf and scores in this .npz file")
    p.add_argument("--verbose", action="store_true", help="Log per-iteration progress")
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    config = MatchConfig(
        radius=args.radius,
        iterations=args.iters,
        seed=args.seed,
        max_size=args.max_size,
    )

    try:
        result = match_files(
            args.source, args.target, args.out, config,
            channels=args.channels, field_path=args.save_nnf,
        )
    except NNFError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(f"Saved result to {args.out} (took {result.elapsed:.1f}s)")
    for name, value in result.metrics.items():
        print(f"  {name}: {value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

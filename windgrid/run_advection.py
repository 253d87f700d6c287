"""
Drive a ParticleAdvector over a vector field file for a number of ticks.

  python -m windgrid.run_advection data/wind.json --ticks 100 --out segments.geojson
"""
import argparse
import json
import logging
import time
from pathlib import Path

from .advector import ParticleAdvector, segments_to_geojson
from .config import AdvectorConfig
from .loaders import load_field
from .vector_field import VectorField


def run_advection(field_path, ticks: int, cfg: AdvectorConfig, seed=None, bounds=None, pace: bool = False):
    """
    Load the field, advance the advector 'ticks' times and collect the
    segments of the last tick.
    """
    field = load_field(field_path)
    if not isinstance(field, VectorField):
        raise ValueError(f"{field_path} does not hold a vector field")
    advector = ParticleAdvector(field, cfg, seed=seed)

    segments = []
    for _ in range(ticks):
        segments = advector.tick(bounds)
        if pace:
            time.sleep(cfg.duration_ms / 1000.0)
    return field, advector, segments


def main(argv=None):
    parser = argparse.ArgumentParser(description="Animate particles over a vector field")
    parser.add_argument("field", help="earth-style u/v JSON (.json / .json.gz)")
    parser.add_argument("--ticks", type=int, default=100)
    parser.add_argument("--paths", type=int, default=AdvectorConfig.paths)
    parser.add_argument("--max-age", type=int, default=AdvectorConfig.max_age)
    parser.add_argument("--velocity-scale", type=float, default=AdvectorConfig.velocity_scale)
    parser.add_argument("--interpolate", action="store_true")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--bbox", type=float, nargs=4, metavar=("MINLON", "MINLAT", "MAXLON", "MAXLAT"))
    parser.add_argument("--pace", action="store_true", help="sleep duration_ms between ticks")
    parser.add_argument("--out", help="write last-tick segments as GeoJSON")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    cfg = AdvectorConfig(
        paths=args.paths,
        max_age=args.max_age,
        velocity_scale=args.velocity_scale,
        interpolate=args.interpolate,
    )

    print("Loading field...")
    field, advector, segments = run_advection(
        args.field, args.ticks, cfg, seed=args.seed, bounds=args.bbox, pace=args.pace
    )
    print("Field:", field)
    print("ticks:", advector.ticks, "particles:", len(advector.particles), "segments:", len(segments))

    if args.out:
        out_path = Path(args.out)
        with out_path.open("w", encoding="utf-8") as f:
            json.dump(segments_to_geojson(segments), f)
        print("Saved:", out_path)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())

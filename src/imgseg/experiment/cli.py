from __future__ import annotations

import argparse
import json
import logging
import time
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from imgseg.api import build_algorithm
from imgseg.engine.config import MODES, SegmentationConfig, SegmentationConfigData
from imgseg.foundation.exceptions import ImgSegError
from imgseg.foundation.logging import configure_imgseg_logging

from .io import ensure_dir, load_image, write_results
from .loader import load_config


def _logger() -> logging.Logger:
    return logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="imgseg",
        description="Segment an image with a multi-objective evolutionary algorithm.",
    )
    parser.add_argument("--image", required=True, help="Path to the input image.")
    parser.add_argument("--config", default=None, help="Path to a run config (YAML/JSON).")
    parser.add_argument("--pop-size", type=int, default=None, help="Override population size.")
    parser.add_argument("--generations", type=int, default=None, help="Override generation count.")
    parser.add_argument("--seed", type=int, default=None, help="RNG seed.")
    parser.add_argument("--mode", choices=MODES, default=None, help="Evolution mode.")
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Evaluate on a thread pool with this many workers.",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Output directory (default: results/<image name>).",
    )
    parser.add_argument(
        "--no-borders",
        action="store_true",
        help="Skip writing border images.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug details.")
    return parser


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {
        "pop_size": args.pop_size,
        "generations": args.generations,
        "mode": args.mode,
    }
    if args.workers is not None:
        overrides["eval_backend"] = "thread"
        overrides["n_workers"] = args.workers
    return overrides


def resolve_config(args: argparse.Namespace) -> SegmentationConfigData:
    overrides = _overrides(args)
    if args.config:
        return load_config(args.config, overrides)
    return SegmentationConfig.from_dict({k: v for k, v in overrides.items() if v is not None})


def run(args: argparse.Namespace) -> Path:
    cfg = resolve_config(args)
    graph = load_image(args.image)
    _logger().info(
        "Segmenting %s (%dx%d) in %s mode: pop_size=%d generations=%d",
        args.image,
        graph.width,
        graph.height,
        cfg.mode,
        cfg.pop_size,
        cfg.generations,
    )
    start = time.perf_counter()
    result = build_algorithm(cfg).run(graph, seed=args.seed)
    elapsed = time.perf_counter() - start

    output_dir = ensure_dir(args.output or Path("results") / Path(args.image).stem)
    write_results(output_dir, result.front, graph, borders=not args.no_borders)
    with (output_dir / "resolved_config.json").open("w", encoding="utf-8") as fh:
        json.dump(cfg.to_dict(), fh, indent=2, sort_keys=True)

    for k, ind in enumerate(result.front[:5], start=1):
        _logger().info(
            "Solution %d - Edge value: %.3f, Connectivity measure: %.3f, Overall deviation: %.3f, Segments: %d",
            k,
            ind.edge_value,
            ind.connectivity_measure,
            ind.overall_deviation,
            ind.n_segments,
        )
    _logger().info("Finished in %.1fs; results in %s", elapsed, output_dir)
    return output_dir


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_imgseg_logging(level=logging.DEBUG if args.verbose else logging.INFO)
    try:
        run(args)
    except (ImgSegError, FileNotFoundError) as exc:
        _logger().error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

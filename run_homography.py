#!/usr/bin/env python3
"""
run_homography.py – Planar homography from point and line correspondences

Loads configuration from configs/default.yaml (or a user-specified file),
solves the DLT system for every scene defined in the config, prints the
estimated homography with its residual, and optionally writes figures to the
results directory.

Usage
-----
    python run_homography.py
    python run_homography.py --config configs/default.yaml
    python run_homography.py --scenes quad
    python run_homography.py --dtype float32 --no-lines --plot
"""

import argparse
import logging
import os
import sys
import time

import numpy as np
import yaml

# Ensure the project root is on the Python path when invoked directly
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from planar_homography.geometry.correspondences import LinePair, PointPair
from planar_homography.geometry.homography import (
    generate_matrix_from_correspondences,
    solve,
)
from planar_homography.utils.config import (
    ensure_output_dirs,
    load_config,
    scene_correspondences,
    validate_scenes,
)
from planar_homography.utils.visualization import (
    save_correspondence_plot,
    save_singular_values,
)

DTYPES = {"float32": np.float32, "float64": np.float64}


# ──────────────────────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────────────────────

def banner(text: str) -> None:
    width = 60
    print("\n" + "─" * width)
    print(f"  {text}")
    print("─" * width)


def format_matrix(H: np.ndarray) -> str:
    rows = ["    [" + "  ".join(f"{v:>14.6g}" for v in row) + " ]" for row in H]
    return "\n".join(rows)


# ──────────────────────────────────────────────────────────────────────────────
# Per-scene solve
# ──────────────────────────────────────────────────────────────────────────────

def run_scene(scene_cfg: dict, dtype, results_dir: str, use_lines: bool,
              plot: bool) -> dict:
    """Solve a single scene and return summary metrics."""
    name = scene_cfg["name"]
    banner(f"Scene: {name}")

    correspondences = scene_correspondences(scene_cfg, use_lines=use_lines)
    point_pairs = [c for c in correspondences if isinstance(c, PointPair)]
    n_lines = sum(isinstance(c, LinePair) for c in correspondences)
    print(f"  Correspondences: {len(point_pairs)} points, {n_lines} lines")

    A = generate_matrix_from_correspondences(correspondences, dtype)
    print(f"  Design matrix  : {A.shape[0]} x {A.shape[1]} ({A.dtype})")

    solution = solve(A)
    rank = solution.numerical_rank()
    print("  Homography (H[2,2] = 1):")
    try:
        print(format_matrix(solution.normalized()))
    except ValueError:
        print(format_matrix(solution.matrix))
    print(f"  Value (σ_min)  : {float(solution.value):.6g}")
    print(f"  Rank           : {rank} / 8")

    metrics = {
        "scene": name,
        "points": len(point_pairs),
        "lines": n_lines,
        "value": float(solution.value),
        "rank": rank,
        "max_error": None,
    }

    if point_pairs:
        src = np.array([[p.p1.x, p.p1.y] for p in point_pairs])
        dst = np.array([[p.p2.x, p.p2.y] for p in point_pairs])
        errors = np.linalg.norm(solution.transform(src) - dst, axis=1)
        for idx, err in enumerate(errors):
            print(f"    point {idx + 1}: reprojection error {err:.3g}")
        metrics["max_error"] = float(errors.max())

    if plot and point_pairs:
        path = save_correspondence_plot(solution, correspondences, name, results_dir)
        save_singular_values(solution, name, results_dir)
        print(f"  Saved figures  → {os.path.dirname(path)}/")

    return metrics


# ──────────────────────────────────────────────────────────────────────────────
# Entry point
# ──────────────────────────────────────────────────────────────────────────────

def parse_args(argv=None):
    p = argparse.ArgumentParser(
        description="Estimate planar homographies from point and line correspondences"
    )
    p.add_argument(
        "--config", default="configs/default.yaml",
        help="Path to YAML configuration file (default: configs/default.yaml)",
    )
    p.add_argument(
        "--scenes", nargs="*", default=None,
        help="Subset of scene names to process (default: all scenes in config)",
    )
    p.add_argument(
        "--dtype", choices=sorted(DTYPES), default=None,
        help="Floating-point precision (default: 'dtype' from config, else float64)",
    )
    p.add_argument(
        "--no-lines", action="store_true",
        help="Ignore line correspondences and solve from points only",
    )
    p.add_argument(
        "--plot", action="store_true",
        help="Save correspondence and spectrum figures to the results directory",
    )
    p.add_argument(
        "--verbose", action="store_true",
        help="Enable debug logging from the solver",
    )
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Load configuration
    if not os.path.exists(args.config):
        print(f"[ERROR] Config file not found: {args.config}")
        sys.exit(1)
    try:
        cfg = load_config(args.config)
        scenes = validate_scenes(cfg)
    except (ValueError, yaml.YAMLError) as exc:
        print(f"[ERROR] {exc}")
        sys.exit(1)

    results_dir = cfg.get("results_dir", "results")

    dtype_name = args.dtype or cfg.get("dtype", "float64")
    if dtype_name not in DTYPES:
        print(f"[ERROR] Unsupported dtype: {dtype_name}")
        sys.exit(1)
    dtype = DTYPES[dtype_name]

    # Optionally restrict to a subset of scenes
    if args.scenes:
        scenes = [s for s in scenes if s["name"] in args.scenes]
        if not scenes:
            print(f"[ERROR] No matching scenes found for: {args.scenes}")
            sys.exit(1)

    if args.plot:
        ensure_output_dirs([s["name"] for s in scenes], base=results_dir)

    use_lines = not args.no_lines

    banner("Planar Homography Estimation (DLT)")
    print(f"  Config  : {args.config}")
    print(f"  Scenes  : {[s['name'] for s in scenes]}")
    print(f"  Lines   : {'enabled' if use_lines else 'disabled'}")
    print(f"  Dtype   : {dtype_name}")

    t0 = time.time()
    all_metrics = []

    for sc in scenes:
        try:
            metrics = run_scene(sc, dtype, results_dir, use_lines, args.plot)
        except (KeyError, TypeError, ValueError) as exc:
            print(f"[ERROR] Malformed scene {sc['name']}: {exc}")
            sys.exit(1)
        all_metrics.append(metrics)

    # ── Summary table ──────────────────────────────────────────────────────
    banner("Results Summary")
    header = f"{'Scene':<10} {'Points':>7} {'Lines':>7} {'Rank':>5} {'Value':>12} {'MaxErr':>12}"
    print(header)
    print("─" * len(header))
    for m in all_metrics:
        err = f"{m['max_error']:.3g}" if m["max_error"] is not None else "–"
        print(f"{m['scene']:<10} {m['points']:>7} {m['lines']:>7} {m['rank']:>5} "
              f"{m['value']:>12.4g} {err:>12}")

    elapsed = time.time() - t0
    print(f"\nSolved {len(all_metrics)} scene(s) in {elapsed:.3f}s")
    return all_metrics


if __name__ == "__main__":
    main()

from __future__ import annotations

import argparse
import logging
import time

from capsim.config import MODES, SimConfig
from capsim.experiment import run_batch
from capsim.stats import plot_coverage_curve, print_summary_table


def build_config(args: argparse.Namespace) -> SimConfig:
    base = SimConfig.from_json(args.config) if args.config else SimConfig()
    return base.with_overrides(
        mode=args.mode,
        beta=args.beta,
        max_range=args.max_range,
        num_transmitters=args.transmitters,
        num_receivers=args.receivers,
        num_trials=args.trials,
        num_threads=args.threads,
        random_seed=args.seed,
        width=args.width,
        height=args.height,
        square_width=args.square_width,
        square_height=args.square_height,
        grid_density=args.grid_density,
        density_root=args.density_root,
        num_bins=args.bins,
        strip_solution_points=True if args.strip else None,
        output_file=args.csv,
        transmitters_file=args.transmitters_file,
        receivers_file=args.receivers_file,
        output_base_path=args.outdir,
        generate_images=True if args.images else None,
    ).validate()


def main():
    ap = argparse.ArgumentParser(description="Receiver placement for capture-effect collision resolution.")
    ap.add_argument("--config", type=str, default=None, help="JSON file with configuration values.")

    ap.add_argument("--mode", type=str, default=None, choices=list(MODES))
    ap.add_argument("--beta", type=float, default=None, help="Capture ratio (0..1).")
    ap.add_argument("--max-range", type=float, default=None, help="Radio range in meters.")
    ap.add_argument("--transmitters", type=int, default=None, help="Number of transmitters per trial.")
    ap.add_argument("--receivers", type=int, default=None, help="Receiver budget.")
    ap.add_argument("--trials", type=int, default=None, help="Number of trials.")
    ap.add_argument("--threads", type=int, default=None, help="Worker threads (< 1: one per CPU).")
    ap.add_argument("--seed", type=int, default=None)

    ap.add_argument("--width", type=float, default=None, help="Field width.")
    ap.add_argument("--height", type=float, default=None, help="Field height.")
    ap.add_argument("--square-width", type=float, default=None, help="Width of the transmitter square.")
    ap.add_argument("--square-height", type=float, default=None, help="Height of the transmitter square.")

    ap.add_argument("--grid-density", type=float, default=None, help="Grid points per meter (grid mode).")
    ap.add_argument("--density-root", type=int, default=None, help="Cells per side (density mode).")
    ap.add_argument("--bins", type=int, default=None, help="Number of score buckets (binned/grid modes).")
    ap.add_argument("--strip", action="store_true", help="Regenerate candidate points after each receiver.")

    ap.add_argument("--csv", type=str, default=None, help="Output statistics CSV.")
    ap.add_argument("--transmitters-file", type=str, default=None, help="Fixed transmitter positions (x y per line).")
    ap.add_argument("--receivers-file", type=str, default=None, help="Where to write placed receivers.")
    ap.add_argument("--outdir", type=str, default=None, help="Base directory for images.")
    ap.add_argument("--images", action="store_true", help="Render one image per placed receiver.")
    ap.add_argument("--plot-curve", type=str, default=None, help="Save the coverage curve to this path.")
    ap.add_argument("--verbose", action="store_true")

    args = ap.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(threadName)s %(name)s: %(message)s")

    try:
        config = build_config(args)
    except (ValueError, OSError) as e:
        raise SystemExit(f"Invalid configuration: {e}")

    print(f"\n{'='*70}")
    print(f"Batch: {config.num_trials} trial(s), {config.num_transmitters} transmitter(s), "
          f"{config.num_receivers} receiver(s)")
    print(f"Mode: {config.mode}, beta={config.beta}, range={config.max_range}, threads={config.workers}")
    print(f"{'='*70}\n")

    t0 = time.time()
    result = run_batch(config)
    dt = time.time() - t0

    print_summary_table(result.stats)
    if args.plot_curve:
        plot_coverage_curve(result.stats, save_path=args.plot_curve)
        print(f"Saved plot -> {args.plot_curve}")

    print(f"Done: {len(result.outcomes)} trial(s), {result.failed} failed, {dt:.2f}s")
    if config.output_file:
        print(f"Wrote: {config.output_file}")


if __name__ == "__main__":
    main()

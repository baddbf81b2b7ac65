from __future__ import annotations

import logging
import os
import random
from dataclasses import dataclass, field
from typing import List, Optional

from .candidates import CandidateSet, density_candidates, disk_candidates, grid_candidates
from .config import SimConfig
from .coverage import coverage_set
from .geometry import Point
from .greedy import Observer, binned_greedy_place, greedy_place
from .instance import Trial, random_transmitters
from .io_positions import load_transmitters, write_receivers
from .simulated_annealing import AnnealingResult, simulated_annealing
from .solution import PlacementResult, Receiver, RoundStats, StopReason, snapshot
from .stats import ExperimentStats, make_stats, write_stats_csv
from .visualization import FieldRenderer
from .workers import TrialFailed, WorkerPool

log = logging.getLogger(__name__)


@dataclass
class TrialOutcome:
    trial_number: int
    ok: bool
    receivers: List[Receiver] = field(default_factory=list)
    rounds: List[RoundStats] = field(default_factory=list)
    stop_reason: Optional[StopReason] = None
    annealing: Optional[AnnealingResult] = None
    error: Optional[str] = None


@dataclass
class BatchResult:
    stats: List[ExperimentStats]
    outcomes: List[TrialOutcome]

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if not o.ok)


def save_directory(config: SimConfig, num_transmitters: int, trial_number: int) -> str:
    name = f"s{config.random_seed}_t{num_transmitters}_x{trial_number}"
    if config.strip_solution_points:
        name += "_S"
    return os.path.join(config.output_base_path, name)


def receivers_path(config: SimConfig, trial_number: int) -> Optional[str]:
    if not config.receivers_file:
        return None
    if config.num_trials <= 1:
        return config.receivers_file
    base, ext = os.path.splitext(config.receivers_file)
    return f"{base}_x{trial_number}{ext}"


def image_observer(renderer: FieldRenderer, out_dir: str) -> Observer:
    """Saves one image per committed receiver as <out_dir>/1<mmm>.png."""
    def observe(m: int, snap) -> None:
        renderer.render(snap, os.path.join(out_dir, f"1{m:03d}.png"))
    return observe


def build_candidates(trial: Trial, config: SimConfig) -> CandidateSet:
    if config.mode == "grid":
        return grid_candidates(trial, config.grid_density)
    if config.mode == "density":
        return density_candidates(trial, config.density_root)
    return disk_candidates(trial, build_adjacency=(config.mode == "annealing"))


def solve(trial: Trial, candidates: CandidateSet, config: SimConfig, workers: WorkerPool,
          stats: Optional[List[ExperimentStats]] = None, observer: Optional[Observer] = None,
          label: str = "") -> PlacementResult:
    """Runs the greedy solver matching the configured mode."""
    if config.mode in ("binned", "grid"):
        return binned_greedy_place(
            trial, candidates, workers, config.num_receivers,
            num_bins=config.num_bins,
            min_rebin_value=config.min_rebin_value,
            stats=stats,
            observer=observer,
            label=label,
        )
    return greedy_place(
        trial, candidates, workers, config.num_receivers,
        prune=True,
        strip_solution_points=(config.mode == "basic" and config.strip_solution_points),
        stats=stats,
        observer=observer,
        label=label,
    )


def run_trial(
    trial_number: int,
    positions: List[Point],
    config: SimConfig,
    workers: WorkerPool,
    stats: Optional[List[ExperimentStats]] = None,
    renderer: Optional[FieldRenderer] = None,
) -> TrialOutcome:
    """
    One transmitter layout, one placement run.

    A failed worker task ends this trial only; statistics recorded by earlier
    rounds stay in `stats`.
    """
    label = str(trial_number)
    trial = Trial.build(positions, config)
    outcome = TrialOutcome(trial_number=trial_number, ok=True)

    observer: Optional[Observer] = None
    if renderer is not None:
        out_dir = save_directory(config, trial.n, trial_number)
        renderer.render(snapshot(trial, trial.disk_ids(), (), ()), os.path.join(out_dir, "1000.png"))
        observer = image_observer(renderer, out_dir)

    try:
        candidates = build_candidates(trial, config)
        log.info("[%s] Generated %d disks, %d solution points.", label, len(trial.disks), len(candidates))

        if config.mode == "annealing":
            res = simulated_annealing(
                trial, candidates, config.num_receivers,
                t_start=config.anneal_t_start,
                t_end=config.anneal_t_end,
                t_step=config.anneal_t_step,
                seed=config.random_seed + trial_number,
            )
            outcome.annealing = res
            all_disks = sorted(trial.disk_ids())
            outcome.receivers = [Receiver(p, coverage_set(trial, p, all_disks)) for p in res.best_state]
            if stats is not None and 0 < config.num_receivers <= len(stats):
                stats[config.num_receivers - 1].add_contention(res.best_energy)
        else:
            result = solve(trial, candidates, config, workers, stats=stats, observer=observer, label=label)
            outcome.receivers = result.receivers
            outcome.rounds = result.rounds
            outcome.stop_reason = result.stop_reason
            if result.stop_reason not in (StopReason.BUDGET, None) and result.size() < config.num_receivers:
                log.info("[%s] Stopped early (%s) after %d/%d receivers.",
                         label, result.stop_reason.value, result.size(), config.num_receivers)
    except TrialFailed as e:
        log.error("[%s] Trial failed: %s", label, e)
        outcome.ok = False
        outcome.error = str(e)
    finally:
        path = receivers_path(config, trial_number)
        if path is not None and outcome.receivers:
            write_receivers(path, outcome.receivers)
        trial.clear()

    return outcome


def run_batch(config: SimConfig, renderer: Optional[FieldRenderer] = None) -> BatchResult:
    """
    Runs config.num_trials trials on a shared worker pool and writes the statistics CSV.

    Transmitters come from config.transmitters_file when set, otherwise they are
    drawn from a single generator seeded with config.random_seed.
    """
    config.validate()
    rng = random.Random(config.random_seed)
    fixed_positions = load_transmitters(config.transmitters_file) if config.transmitters_file else None
    num_tx = len(fixed_positions) if fixed_positions is not None else config.num_transmitters
    stats = make_stats(num_tx, config.num_receivers)
    if renderer is None and config.generate_images:
        renderer = FieldRenderer(config.render_width, config.render_height)

    outcomes: List[TrialOutcome] = []
    workers = WorkerPool(config.workers)
    log.info("Using %d worker thread(s).", workers.num_workers)
    try:
        for trial_number in range(config.num_trials):
            positions = fixed_positions if fixed_positions is not None else random_transmitters(config, rng)
            outcomes.append(run_trial(trial_number, list(positions), config, workers, stats, renderer))
    finally:
        workers.shutdown(timeout=60.0)

    if config.output_file:
        write_stats_csv(config.output_file, stats)
    return BatchResult(stats=stats, outcomes=outcomes)

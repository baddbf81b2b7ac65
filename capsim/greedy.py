from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Sequence, Set

from .binner import Binner
from .candidates import CandidateSet, disk_candidates
from .coverage import best_receiver
from .geometry import Idx, Point
from .instance import Trial
from .solution import (
    FieldSnapshot,
    PlacementResult,
    Receiver,
    RoundStats,
    StopReason,
    captured_collisions,
    round_stats,
    snapshot,
)
from .workers import WorkerPool

if TYPE_CHECKING:
    from .stats import ExperimentStats

log = logging.getLogger(__name__)

Observer = Callable[[int, FieldSnapshot], None]


def split_chunks(points: Sequence[Point], n: int) -> List[List[Point]]:
    """Splits points into at most n contiguous, near-equal, non-empty chunks."""
    n = max(1, min(n, len(points)))
    size, extra = divmod(len(points), n)
    chunks = []
    start = 0
    for i in range(n):
        end = start + size + (1 if i < extra else 0)
        if end > start:
            chunks.append(list(points[start:end]))
        start = end
    return chunks


def pick_best(results: Sequence[Optional[Receiver]]) -> Optional[Receiver]:
    """Max-reduction over chunk results; the earliest chunk wins ties."""
    best: Optional[Receiver] = None
    for r in results:
        if r is None:
            continue
        if best is None or r.size() > best.size():
            best = r
    return best


class _PlacementState:
    """Disk pool and coverage bookkeeping, mutated only by the orchestrating thread."""

    def __init__(self, trial: Trial, stats: Optional[Sequence["ExperimentStats"]],
                 observer: Optional[Observer]):
        self.trial = trial
        self.pool: Set[Idx] = trial.disk_ids()
        self.captured: Dict[Idx, Set[Idx]] = captured_collisions(trial, ())
        self.result = PlacementResult(total_disks=len(self.pool))
        self.stats = stats
        self.observer = observer

    def live_disks(self) -> List[Idx]:
        return sorted(self.pool)

    def commit(self, receiver: Receiver, points: Sequence[Point],
               ranked=None, thresholds=None) -> RoundStats:
        trial = self.trial
        m = len(self.result.receivers)
        self.result.receivers.append(receiver)
        for d in receiver.coverage:
            disk = trial.disks[d]
            self.captured[disk.t1].add(disk.t2)
            trial.transmitters[disk.t1].covered_disks.add(d)
        self.pool.difference_update(receiver.coverage)

        rs = round_stats(trial, self.captured, self.result.total_disks, len(self.pool))
        self.result.rounds.append(rs)
        if self.stats is not None and m < len(self.stats):
            self.stats[m].add_round(rs)
        if self.observer is not None:
            self.observer(m + 1, snapshot(trial, self.pool, points, self.result.receivers,
                                          ranked=ranked, thresholds=thresholds))
        return rs

    def finish(self, reason: StopReason) -> PlacementResult:
        self.result.stop_reason = reason
        return self.result


def greedy_place(
    trial: Trial,
    candidates: CandidateSet,
    workers: WorkerPool,
    num_receivers: int,
    prune: bool = True,
    strip_solution_points: bool = False,
    stats: Optional[Sequence["ExperimentStats"]] = None,
    observer: Optional[Observer] = None,
    label: str = "",
) -> PlacementResult:
    """
    Greedy maximum coverage: each round scores every candidate point in parallel
    and commits a receiver at the point inside the most live capture disks.

    strip_solution_points: regenerate disk-derived candidates from the remaining
    disks after each commit.
    """
    state = _PlacementState(trial, stats, observer)
    points = list(candidates.points)

    while True:
        m = len(state.result.receivers)
        if m >= num_receivers:
            return state.finish(StopReason.BUDGET)
        if not state.pool:
            return state.finish(StopReason.NO_DISKS)
        if not points:
            return state.finish(StopReason.NO_POINTS)

        log.info("[%s] Calculating position for receiver %d.", label, m + 1)
        disk_ids = state.live_disks()
        chunks = split_chunks(points, workers.num_workers)
        log.info("Divided %d points into %d task(s).", len(points), len(chunks))

        t0 = time.time()
        results = workers.submit_all(best_receiver, [(trial, chunk, disk_ids, prune) for chunk in chunks])
        best = pick_best(results)
        log.info("Computed %d comparisons in %.0fms.", len(disk_ids) * len(points), (time.time() - t0) * 1000)

        if best is None:
            log.info("[%s] No remaining point resolves a collision.", label)
            return state.finish(StopReason.NO_COVERAGE)

        points.remove(best.position)
        state.commit(best, points)

        if strip_solution_points:
            points = list(disk_candidates(trial, state.pool).points)
            log.info("[%s] Regenerated %d solution points.", label, len(points))


def binned_greedy_place(
    trial: Trial,
    candidates: CandidateSet,
    workers: WorkerPool,
    num_receivers: int,
    num_bins: int = 50,
    min_rebin_value: int = 2,
    stats: Optional[Sequence["ExperimentStats"]] = None,
    observer: Optional[Observer] = None,
    label: str = "",
) -> PlacementResult:
    """
    Greedy maximum coverage over a score-bucketed index.

    Only the highest occupied bucket is rescored each round; every scored point
    is put back in the bucket matching its new score.
    """
    state = _PlacementState(trial, stats, observer)
    binner = Binner(num_bins, 1, max(1, len(state.pool) // 3))
    binner.place_all(candidates.points, 1)
    highest = 0

    while True:
        m = len(state.result.receivers)
        if m >= num_receivers:
            return state.finish(StopReason.BUDGET)
        if not state.pool:
            return state.finish(StopReason.NO_DISKS)
        if binner.top_bucket() is None:
            log.info("[%s] No more points available in the bins.", label)
            return state.finish(StopReason.NO_POINTS)

        log.info("Bins:\n%s", binner.histogram())
        log.info("[%s] Calculating position for receiver %d.", label, m + 1)

        points = sorted(binner.take_top())
        disk_ids = state.live_disks()
        chunks = split_chunks(points, workers.num_workers)
        log.info("Divided %d points into %d task(s).", len(points), len(chunks))

        t0 = time.time()
        results = workers.submit_all(
            best_receiver,
            [(trial, chunk, disk_ids, False, binner, highest) for chunk in chunks],
        )
        log.info("Computed %d comparisons in %.0fms.", len(disk_ids) * len(points), (time.time() - t0) * 1000)

        best = pick_best(results)
        if best is not None:
            highest = binner.bucket_of(best.size())

        if best is None:
            if highest == 0:
                log.info("[%s] No remaining point resolves a collision.", label)
                return state.finish(StopReason.NO_COVERAGE)
            highest = binner.top_index()
            continue

        # zoom into the active range once the lowest bucket holds the winner
        if highest == 0 and best.size() > min_rebin_value:
            binner.rebin(1, best.size() // 2)

        buckets = binner.buckets() if observer is not None else None
        state.commit(best, points, ranked=buckets, thresholds=binner.thresholds)

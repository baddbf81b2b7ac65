from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Set

from .geometry import CaptureDisk, Idx, Point
from .instance import Transmitter, Trial


@dataclass(frozen=True)
class Receiver:
    position: Point
    coverage: FrozenSet[Idx]    # disks containing the position when it was chosen

    @property
    def x(self) -> float:
        return self.position[0]

    @property
    def y(self) -> float:
        return self.position[1]

    def size(self) -> int:
        return len(self.coverage)


@dataclass(frozen=True)
class RoundStats:
    coverage_ratio: float
    mean_contention: float
    min_contention: float
    max_contention: float


class StopReason(enum.Enum):
    BUDGET = "budget"              # every receiver placed
    NO_DISKS = "no_disks"          # every disk resolved
    NO_POINTS = "no_points"        # candidate set (or top bucket) empty
    NO_COVERAGE = "no_coverage"    # no remaining point resolves anything


@dataclass
class PlacementResult:
    receivers: List[Receiver] = field(default_factory=list)
    rounds: List[RoundStats] = field(default_factory=list)
    total_disks: int = 0
    stop_reason: Optional[StopReason] = None

    def size(self) -> int:
        return len(self.receivers)


@dataclass(frozen=True)
class FieldSnapshot:
    """Read-only view of a trial handed to observers after each round."""
    transmitters: Sequence[Transmitter]
    disks: Sequence[CaptureDisk]
    points: Sequence[Point] = ()
    ranked_points: Optional[Sequence[Set[Point]]] = None
    rank_thresholds: Optional[Sequence[int]] = None
    receivers: Sequence[Receiver] = ()
    receiver_winners: Sequence[int] = ()    # distinct winning transmitters per receiver
    width: float = 0.0
    height: float = 0.0


def captured_collisions(trial: Trial, coverage_sets: Iterable[Iterable[Idx]]) -> Dict[Idx, Set[Idx]]:
    """For every transmitter t1, the set of colliding t2 resolved by the given coverage sets."""
    captured: Dict[Idx, Set[Idx]] = {i: set() for i in range(trial.n)}
    for cov in coverage_sets:
        for d in cov:
            disk = trial.disks[d]
            captured[disk.t1].add(disk.t2)
    return captured


def contentions(n: int, captured: Dict[Idx, Set[Idx]]) -> List[int]:
    # a transmitter never contends with itself, hence n - 1
    return [n - 1 - len(captured[t]) for t in range(n)]


def mean_contention(n: int, captured: Dict[Idx, Set[Idx]]) -> float:
    if n == 0:
        return 0.0
    return sum(c / n for c in contentions(n, captured))


def round_stats(trial: Trial, captured: Dict[Idx, Set[Idx]], total_disks: int, remaining_disks: int) -> RoundStats:
    n = trial.n
    values = contentions(n, captured)
    ratio = (total_disks - remaining_disks) / total_disks if total_disks else 0.0
    return RoundStats(
        coverage_ratio=ratio,
        mean_contention=mean_contention(n, captured),
        min_contention=float(min(values)) if values else 0.0,
        max_contention=float(max(values)) if values else 0.0,
    )


def snapshot(trial: Trial, pool: Iterable[Idx], points: Sequence[Point],
             receivers: Sequence[Receiver], ranked=None, thresholds=None) -> FieldSnapshot:
    return FieldSnapshot(
        transmitters=tuple(trial.transmitters),
        disks=tuple(trial.disks[d] for d in sorted(pool)),
        points=tuple(points),
        ranked_points=ranked,
        rank_thresholds=thresholds,
        receivers=tuple(receivers),
        receiver_winners=tuple(len({trial.disks[d].t1 for d in r.coverage}) for r in receivers),
        width=trial.width,
        height=trial.height,
    )

from __future__ import annotations

from typing import FrozenSet, Iterable, List, Optional, Sequence

from .binner import Binner
from .geometry import CaptureDisk, Idx, Point, dist2
from .instance import Trial
from .solution import Receiver


def covers(trial: Trial, p: Point, disk: CaptureDisk) -> bool:
    # range prefilter before the exact containment test
    r2 = trial.max_range * trial.max_range
    if (dist2(p, trial.position(disk.t1)) > r2
            and dist2(p, trial.position(disk.t2)) > r2):
        return False
    return disk.circle.contains(p)


def coverage_set(trial: Trial, p: Point, disk_ids: Iterable[Idx]) -> FrozenSet[Idx]:
    """Disks of the pool that contain p."""
    disks = trial.disks
    return frozenset(d for d in disk_ids if covers(trial, p, disks[d]))


def best_receiver(
    trial: Trial,
    points: Iterable[Point],
    disk_ids: Sequence[Idx],
    prune: bool = False,
    binner: Optional[Binner] = None,
    desired_bin: int = 0,
) -> Optional[Receiver]:
    """
    Scores a chunk of points against the live disks and returns the best one.

    prune: stop scanning a point once it can no longer beat the best so far.
    binner: every point with a non-zero score is put back at its new score, and
    only points landing in a bucket >= desired_bin may win.
    The first point reaching a given score wins ties.
    """
    disks = trial.disks
    total = len(disk_ids)
    best_point: Optional[Point] = None
    best_cover: List[Idx] = []
    best_size = 0

    for p in points:
        cover: List[Idx] = []
        abandoned = False
        for checked, d in enumerate(disk_ids, start=1):
            if covers(trial, p, disks[d]):
                cover.append(d)
            if prune and len(cover) + (total - checked) < best_size:
                abandoned = True
                break
        if abandoned:
            continue

        size = len(cover)
        if size == 0:
            continue
        if binner is not None:
            bindex = binner.place(p, size)
            if bindex < desired_bin:
                continue
        if size > best_size:
            best_size = size
            best_point = p
            best_cover = cover

    if best_point is None:
        return None
    return Receiver(best_point, frozenset(best_cover))

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set

from .geometry import Idx, Point, PointKey, in_bounds, intersect, point_key
from .instance import Trial

log = logging.getLogger(__name__)

Adjacency = Dict[Point, Set[Point]]


@dataclass
class CandidateSet:
    points: List[Point]                     # sorted, deduplicated
    adjacency: Optional[Adjacency] = None   # only built for annealing

    def __len__(self) -> int:
        return len(self.points)

    def neighbors(self, p: Point) -> Set[Point]:
        if self.adjacency is None:
            return set()
        return self.adjacency.get(p, set())


class _PointAccumulator:
    """Deduplicates points by canonical key and optionally links points sharing a disk."""

    def __init__(self, eps: float, build_adjacency: bool):
        self.eps = eps
        self.points: Dict[PointKey, Point] = {}
        self.adjacency: Optional[Adjacency] = {} if build_adjacency else None
        self.points_in_disk: Dict[Idx, List[Point]] = {}

    def add(self, p: Point, disks: Iterable[Idx] = ()) -> Point:
        key = point_key(p, self.eps)
        p = self.points.setdefault(key, p)
        if self.adjacency is None:
            return p

        neigh = self.adjacency.setdefault(p, set())
        for d in disks:
            group = self.points_in_disk.setdefault(d, [])
            for q in group:
                if q != p:
                    neigh.add(q)
                    self.adjacency[q].add(p)
            group.append(p)
        return p

    def result(self) -> CandidateSet:
        return CandidateSet(points=sorted(self.points.values()), adjacency=self.adjacency)


def disk_candidates(trial: Trial, disk_ids: Optional[Iterable[Idx]] = None,
                    build_adjacency: bool = False) -> CandidateSet:
    """
    Candidate receiver positions derived from capture disks:
      - centres of every disk
      - intersection points of every pair of disks
    Each point must lie inside the field and within range of some transmitter.
    """
    ids = sorted(trial.disk_ids() if disk_ids is None else disk_ids)
    acc = _PointAccumulator(trial.point_epsilon, build_adjacency)

    for d in ids:
        center = trial.disks[d].circle.center
        if in_bounds(center, trial.width, trial.height) and trial.in_range(center):
            acc.add(center, (d,))

    for i, d1 in enumerate(ids):
        disk1 = trial.disks[d1]
        for d2 in ids[i + 1:]:
            points = intersect(disk1, trial.disks[d2], trial.width, trial.height)
            if not points:
                continue
            for p in points:
                if trial.in_range(p):
                    acc.add(p, (d1, d2))

    result = acc.result()
    log.info("Generated %d solution points from %d disks.", len(result), len(ids))
    return result


def grid_candidates(trial: Trial, density: float) -> CandidateSet:
    """Uniform grid with `density` points per meter, kept where some transmitter is in range."""
    nx = int(trial.width * density)
    ny = int(trial.height * density)
    points: List[Point] = []
    for i in range(nx + 1):
        x = i / density
        for j in range(ny + 1):
            p = (x, j / density)
            if trial.in_range(p):
                points.append(p)
    log.info("Generated %d grid points (density %.2f).", len(points), density)
    return CandidateSet(points=sorted(points))


def density_candidates(trial: Trial, density_root: int) -> CandidateSet:
    """Centres of a density_root x density_root partition of the field."""
    cell_w = trial.width / density_root
    cell_h = trial.height / density_root
    points: List[Point] = []
    for i in range(density_root):
        for j in range(density_root):
            p = (i * cell_w + 0.5 * cell_w, j * cell_h + 0.5 * cell_h)
            if trial.in_range(p):
                points.append(p)
    log.info("Generated %d density cells (%dx%d).", len(points), density_root, density_root)
    return CandidateSet(points=sorted(points))

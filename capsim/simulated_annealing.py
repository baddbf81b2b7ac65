from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Sequence

from .candidates import CandidateSet
from .coverage import coverage_set
from .geometry import Idx, Point
from .instance import Trial
from .solution import captured_collisions, mean_contention

log = logging.getLogger(__name__)


@dataclass
class AnnealingResult:
    best_state: List[Point]
    best_energy: float
    initial_energy: float
    iterations: int = 0
    accepted: int = 0

    def size(self) -> int:
        return len(self.best_state)


def initial_state(points: Sequence[Point], k: int) -> List[Point]:
    """k points taken at even strides through the candidate list."""
    if k <= 0 or not points:
        return []
    stride = max(1, len(points) // k)
    state = [points[i] for i in range(stride - 1, len(points), stride)]
    return state[:k]


def transition_probability(energy: float, new_energy: float, temperature: float, t_end: float) -> float:
    """
    (energy / new_energy) ** (t_end - temperature).

    This is not the Metropolis rule exp(-dE / T): the ratio is not clamped and
    exceeds 1 whenever the candidate is better, which is then an unconditional
    acceptance.
    """
    if new_energy == 0.0:
        return math.inf
    return (energy / new_energy) ** (t_end - temperature)


class _CoverageCache:
    """Coverage set of each visited point against the full disk pool, computed on first use."""

    def __init__(self, trial: Trial):
        self.trial = trial
        self.disk_ids = sorted(trial.disk_ids())
        self._cache: Dict[Point, FrozenSet[Idx]] = {}

    def __getitem__(self, p: Point) -> FrozenSet[Idx]:
        cov = self._cache.get(p)
        if cov is None:
            cov = coverage_set(self.trial, p, self.disk_ids)
            self._cache[p] = cov
        return cov

    def energy(self, state: Sequence[Point]) -> float:
        captured = captured_collisions(self.trial, (self[p] for p in state))
        return mean_contention(self.trial.n, captured)


def simulated_annealing(
    trial: Trial,
    candidates: CandidateSet,
    num_receivers: int,
    t_start: float = 1.0,
    t_end: float = 11.0,
    t_step: float = 0.01,
    seed: int = 0,
) -> AnnealingResult:
    """
    Simulated annealing over a fixed-size receiver set.

    Each step moves one receiver to a random neighbour in the candidate
    adjacency graph; the energy is the mean contention over all transmitters.
    The best state ever evaluated is returned, whether or not it was accepted.
    """
    rng = random.Random(seed)
    cache = _CoverageCache(trial)
    neighbors: Dict[Point, List[Point]] = {}

    def random_neighbor(p: Point) -> Optional[Point]:
        options = neighbors.get(p)
        if options is None:
            options = sorted(candidates.neighbors(p))
            neighbors[p] = options
        if not options:
            return None
        return rng.choice(options)

    state = initial_state(candidates.points, num_receivers)
    energy = cache.energy(state)
    result = AnnealingResult(best_state=list(state), best_energy=energy, initial_energy=energy)
    if not state:
        return result

    steps = int(round((t_end - t_start) / t_step))
    for k in range(steps + 1):
        temperature = t_start + k * t_step
        for i in range(len(state)):
            neighbor = random_neighbor(state[i])
            if neighbor is None:
                continue
            possible = list(state)
            possible[i] = neighbor
            possible_energy = cache.energy(possible)
            result.iterations += 1

            if possible_energy < result.best_energy:
                log.debug("Moving mean contention %.5f to %.5f", result.best_energy, possible_energy)
                result.best_state = possible
                result.best_energy = possible_energy

            if (possible_energy < energy
                    or rng.random() < transition_probability(energy, possible_energy, temperature, t_end)):
                state = possible
                energy = possible_energy
                result.accepted += 1

    log.info("Annealing: mean contention %.5f -> %.5f (%d moves, %d accepted).",
             result.initial_energy, result.best_energy, result.iterations, result.accepted)
    return result

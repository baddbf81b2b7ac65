from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import List, Set, Tuple

from .config import SimConfig
from .geometry import CaptureDisk, Circle, Idx, Point, dist2, make_capture_disk

log = logging.getLogger(__name__)


@dataclass
class Transmitter:
    x: float
    y: float
    disks: List[Idx] = field(default_factory=list)           # disks this transmitter wins
    covered_disks: Set[Idx] = field(default_factory=set)     # subset resolved by a receiver

    @property
    def position(self) -> Point:
        return (self.x, self.y)

    @property
    def contention(self) -> int:
        return len(self.disks) - len(self.covered_disks)

    @property
    def capture_ratio(self) -> float:
        if not self.disks:
            return 0.0
        return len(self.covered_disks) / len(self.disks)


@dataclass
class Trial:
    """
    One transmitter layout and every capture disk derived from it.

    Transmitters and disks live in flat lists; disks refer to transmitters by
    index and transmitters keep the indices of the disks they win.
    """
    transmitters: List[Transmitter]
    disks: List[CaptureDisk]
    width: float
    height: float
    max_range: float
    beta: float
    point_epsilon: float = 1e-6

    @property
    def n(self) -> int:
        return len(self.transmitters)

    def position(self, t: Idx) -> Point:
        return self.transmitters[t].position

    def in_range(self, p: Point) -> bool:
        """True if p is strictly within radio range of at least one transmitter."""
        r2 = self.max_range * self.max_range
        for t in self.transmitters:
            if dist2(p, t.position) < r2:
                return True
        return False

    def disk_ids(self) -> Set[Idx]:
        return set(range(len(self.disks)))

    def clear(self) -> None:
        self.disks.clear()
        self.transmitters.clear()

    @staticmethod
    def build(positions: List[Point], config: SimConfig) -> "Trial":
        transmitters = [Transmitter(float(x), float(y)) for (x, y) in positions]
        disks: List[CaptureDisk] = []
        seen_pairs: Set[Tuple[Idx, Idx]] = set()
        seen_circles: Set[Circle] = set()

        for i, t1 in enumerate(transmitters):
            for j, t2 in enumerate(transmitters):
                disk = make_capture_disk(i, j, t1.position, t2.position, config.beta, config.max_range)
                if disk is None:
                    continue
                # same (t1, t2) pair or same circle means the same disk
                if (i, j) in seen_pairs or disk.circle in seen_circles:
                    continue
                seen_pairs.add((i, j))
                seen_circles.add(disk.circle)
                t1.disks.append(len(disks))
                disks.append(disk)

        log.info("Generated %d disks for %d transmitters.", len(disks), len(transmitters))
        return Trial(
            transmitters=transmitters,
            disks=disks,
            width=config.width,
            height=config.height,
            max_range=config.max_range,
            beta=config.beta,
            point_epsilon=config.point_epsilon,
        )


def random_transmitters(config: SimConfig, rng: random.Random) -> List[Point]:
    """Uniform positions inside the transmitter square, centred in the field."""
    x0 = (config.width - config.square_width) * 0.5
    y0 = (config.height - config.square_height) * 0.5
    positions: List[Point] = []
    for _ in range(config.num_transmitters):
        x = x0 + rng.random() * config.square_width
        y = y0 + rng.random() * config.square_height
        positions.append((x, y))
    return positions

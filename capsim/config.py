from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

MODES = ("basic", "binned", "grid", "density", "annealing")


@dataclass(frozen=True)
class SimConfig:
    """Simulation parameters, passed explicitly to every stage of a trial."""
    # Radio model
    beta: float = 0.5                   # capture ratio, 0 < beta < 1
    max_range: float = 40.0             # radio range in meters

    # Layout
    num_transmitters: int = 1
    num_receivers: int = 1
    square_width: float = 100.0         # area where transmitters are drawn
    square_height: float = 100.0
    width: float = 150.0                # field where receivers may go
    height: float = 150.0

    # Batch
    random_seed: int = 0
    num_trials: int = 1
    num_threads: int = 0                # < 1 means one per CPU

    # Solver
    mode: str = "basic"
    grid_density: float = 1.0           # grid points per meter ("grid" mode)
    density_root: int = 35              # cells per side ("density" mode)
    strip_solution_points: bool = False
    num_bins: int = 50
    min_rebin_value: int = 2
    point_epsilon: float = 1e-6

    # Annealing schedule
    anneal_t_start: float = 1.0
    anneal_t_end: float = 11.0
    anneal_t_step: float = 0.01

    # Files
    output_file: str = "results.csv"
    transmitters_file: Optional[str] = None
    receivers_file: Optional[str] = None
    output_base_path: str = "."

    # Rendering
    generate_images: bool = False
    render_width: int = 800
    render_height: int = 600

    @property
    def workers(self) -> int:
        if self.num_threads < 1:
            return os.cpu_count() or 1
        return self.num_threads

    def validate(self) -> "SimConfig":
        if not 0.0 < self.beta < 1.0:
            raise ValueError(f"beta must be in (0, 1), got {self.beta}")
        if self.mode not in MODES:
            raise ValueError(f"Unknown mode: {self.mode} (expected one of {', '.join(MODES)})")
        if self.max_range <= 0:
            raise ValueError(f"max_range must be positive, got {self.max_range}")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Field must have a positive size, got {self.width}x{self.height}")
        if self.num_transmitters < 0 or self.num_receivers < 0:
            raise ValueError("Transmitter and receiver counts cannot be negative")
        if self.num_bins < 1:
            raise ValueError(f"num_bins must be >= 1, got {self.num_bins}")
        if self.grid_density <= 0 or self.density_root < 1:
            raise ValueError("Grid density settings must be positive")
        if self.anneal_t_step <= 0 or self.anneal_t_end < self.anneal_t_start:
            raise ValueError("Annealing schedule must increase from t_start to t_end")
        return self

    def with_overrides(self, **overrides: Any) -> "SimConfig":
        """Returns a copy with every non-None override applied."""
        known = {f.name for f in fields(self)}
        changes = {}
        for k, v in overrides.items():
            if v is None:
                continue
            if k not in known:
                raise ValueError(f"Unknown configuration key: {k}")
            changes[k] = v
        return replace(self, **changes)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "SimConfig":
        return SimConfig().with_overrides(**data)

    @staticmethod
    def from_json(path: str) -> "SimConfig":
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file must hold a JSON object: {path}")
        return SimConfig.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

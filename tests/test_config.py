import json
import os

import pytest

from capsim.config import SimConfig


def test_defaults_are_valid():
    cfg = SimConfig().validate()
    assert cfg.beta == 0.5
    assert cfg.max_range == 40.0
    assert cfg.mode == "basic"
    assert cfg.workers == (os.cpu_count() or 1)


@pytest.mark.parametrize("changes", [
    {"beta": 1.0},
    {"beta": 0.0},
    {"mode": "exhaustive"},
    {"max_range": 0.0},
    {"num_bins": 0},
    {"anneal_t_end": 0.5},
])
def test_invalid_values(changes):
    with pytest.raises(ValueError):
        SimConfig().with_overrides(**changes).validate()


def test_overrides_skip_none():
    cfg = SimConfig().with_overrides(beta=None, num_threads=3)
    assert cfg.beta == 0.5
    assert cfg.workers == 3


def test_unknown_key():
    with pytest.raises(ValueError, match="bogus"):
        SimConfig().with_overrides(bogus=1)


def test_from_json(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"mode": "binned", "num_receivers": 4, "beta": 0.3}), encoding="utf-8")
    cfg = SimConfig.from_json(str(path))
    assert cfg.mode == "binned"
    assert cfg.num_receivers == 4
    assert cfg.beta == 0.3
    assert SimConfig.from_dict(cfg.to_dict()) == cfg


def test_from_json_requires_object(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        SimConfig.from_json(str(path))

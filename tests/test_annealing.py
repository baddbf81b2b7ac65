import math

import pytest

from capsim.candidates import disk_candidates
from capsim.coverage import coverage_set
from capsim.simulated_annealing import initial_state, simulated_annealing, transition_probability
from capsim.solution import captured_collisions, mean_contention


def _energy(trial, state):
    ids = sorted(trial.disk_ids())
    captured = captured_collisions(trial, (coverage_set(trial, p, ids) for p in state))
    return mean_contention(trial.n, captured)


def test_initial_state_strides():
    points = [(float(i), 0.0) for i in range(10)]
    assert initial_state(points, 3) == [(2.0, 0.0), (5.0, 0.0), (8.0, 0.0)]
    assert initial_state(points, 20) == points
    assert initial_state(points, 0) == []
    assert initial_state([], 3) == []


def test_transition_probability():
    assert transition_probability(2.0, 1.0, 10.0, 11.0) == pytest.approx(2.0)
    assert transition_probability(1.0, 2.0, 9.0, 11.0) == pytest.approx(0.25)
    assert transition_probability(1.0, 2.0, 11.0, 11.0) == pytest.approx(1.0)
    assert transition_probability(1.0, 0.0, 5.0, 11.0) == math.inf


def test_annealing_never_worsens(square_trial):
    cs = disk_candidates(square_trial, build_adjacency=True)
    res = simulated_annealing(square_trial, cs, 2, t_start=1.0, t_end=3.0, t_step=0.1, seed=7)
    assert res.size() == 2
    assert res.best_energy <= res.initial_energy
    assert res.initial_energy == pytest.approx(_energy(square_trial, initial_state(cs.points, 2)))
    assert res.best_energy == pytest.approx(_energy(square_trial, res.best_state))
    assert all(p in cs.points for p in res.best_state)
    assert res.iterations > 0
    assert 0 <= res.accepted <= res.iterations


def test_annealing_is_deterministic(square_trial):
    cs = disk_candidates(square_trial, build_adjacency=True)
    a = simulated_annealing(square_trial, cs, 3, t_end=2.0, seed=3)
    b = simulated_annealing(square_trial, cs, 3, t_end=2.0, seed=3)
    assert a.best_state == b.best_state
    assert a.best_energy == b.best_energy


def test_no_receivers_means_full_contention(square_trial):
    cs = disk_candidates(square_trial, build_adjacency=True)
    res = simulated_annealing(square_trial, cs, 0)
    assert res.best_state == []
    assert res.best_energy == pytest.approx(square_trial.n - 1)
    assert res.iterations == 0


def test_isolated_points_stay_put(pair_trial):
    # pair centres share no disk, so neither has a neighbour
    cs = disk_candidates(pair_trial, build_adjacency=True)
    res = simulated_annealing(pair_trial, cs, 1, t_end=1.5)
    assert res.iterations == 0
    assert res.best_state == initial_state(cs.points, 1)


def test_full_schedule_never_worsens(square_trial):
    cs = disk_candidates(square_trial, build_adjacency=True)
    res = simulated_annealing(square_trial, cs, 2, seed=0)
    assert res.iterations > 0
    assert res.best_energy <= res.initial_energy
    assert res.best_energy == pytest.approx(_energy(square_trial, res.best_state))

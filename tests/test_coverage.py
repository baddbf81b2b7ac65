from capsim.binner import Binner
from capsim.candidates import disk_candidates
from capsim.coverage import best_receiver, coverage_set, covers


def test_coverage_set_is_idempotent(square_trial):
    ids = sorted(square_trial.disk_ids())
    for p in disk_candidates(square_trial).points:
        assert coverage_set(square_trial, p, ids) == coverage_set(square_trial, p, ids)


def test_disk_centre_is_covered(square_trial):
    for disk in square_trial.disks:
        assert covers(square_trial, disk.circle.center, disk)


def test_pruning_does_not_change_the_winner(square_trial):
    ids = sorted(square_trial.disk_ids())
    points = disk_candidates(square_trial).points
    plain = best_receiver(square_trial, points, ids, prune=False)
    pruned = best_receiver(square_trial, points, ids, prune=True)
    assert plain is not None
    assert plain == pruned
    assert plain.coverage == coverage_set(square_trial, plain.position, ids)
    assert all(len(coverage_set(square_trial, p, ids)) <= plain.size() for p in points)


def test_first_point_wins_ties(pair_trial):
    ids = sorted(pair_trial.disk_ids())
    points = disk_candidates(pair_trial).points
    best = best_receiver(pair_trial, points, ids)
    assert best.position == points[0]
    assert best.size() == 1


def test_no_coverage_returns_none(pair_trial):
    assert best_receiver(pair_trial, [(5.0, 5.0)], sorted(pair_trial.disk_ids())) is None
    assert best_receiver(pair_trial, [], sorted(pair_trial.disk_ids())) is None


def test_binner_receives_scored_points(square_trial):
    ids = sorted(square_trial.disk_ids())
    points = disk_candidates(square_trial).points
    binner = Binner(10, 1, 12)
    best = best_receiver(square_trial, points, ids, binner=binner)
    scored = [p for p in points if coverage_set(square_trial, p, ids)]
    assert len(binner) == len(scored)
    assert best.position in binner.buckets()[binner.bucket_of(best.size())]

from capsim.candidates import disk_candidates
from capsim.solution import Receiver, snapshot
from capsim.visualization import FieldRenderer


def test_render_layout(square_trial, tmp_path):
    cs = disk_candidates(square_trial)
    snap = snapshot(square_trial, square_trial.disk_ids(), cs.points, [])
    out = tmp_path / "a" / "layout.png"
    FieldRenderer(320, 240).render(snap, save_path=str(out))
    assert out.exists()


def test_render_ranked_points_and_receivers(square_trial, tmp_path):
    cs = disk_candidates(square_trial)
    ids = sorted(square_trial.disk_ids())
    r = Receiver(square_trial.disks[0].circle.center, frozenset({0, 3}))
    ranked = [set(cs.points[:5]), set(), set(cs.points[5:])]
    snap = snapshot(square_trial, ids[1:], cs.points, [r], ranked=ranked, thresholds=[1, 2, 3])
    assert snap.receiver_winners == (len({square_trial.disks[0].t1, square_trial.disks[3].t1}),)

    out = tmp_path / "ranked.png"
    FieldRenderer(320, 240, max_disks=3).render(snap, save_path=str(out), title="ranked")
    assert out.exists()

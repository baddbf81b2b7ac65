from capsim.io_positions import load_receivers, load_transmitters, write_receivers, write_transmitters
from capsim.solution import Receiver


def test_load_transmitters_skips_bad_lines(tmp_path):
    path = tmp_path / "tx.txt"
    path.write_text("10 20\n# comment\nbad line\n\n30,40\n5\n1.5\t2.5 extra\n", encoding="utf-8")
    assert load_transmitters(str(path)) == [(10.0, 20.0), (30.0, 40.0), (1.5, 2.5)]


def test_transmitters_round_trip(tmp_path):
    path = tmp_path / "out" / "tx.txt"
    points = [(1.25, 2.5), (100.0, 0.0)]
    write_transmitters(str(path), points)
    assert load_transmitters(str(path)) == points


def test_receivers_file(tmp_path):
    path = tmp_path / "rx.txt"
    write_receivers(str(path), [Receiver((3.0, 4.0), frozenset({0, 2, 5}))])
    assert path.read_text(encoding="utf-8") == "3.0 4.0 3\n"
    assert load_receivers(str(path)) == [((3.0, 4.0), 3)]


def test_receiver_count_defaults_to_zero(tmp_path):
    path = tmp_path / "rx.txt"
    path.write_text("1 2\n3 4 x\n5 6 7\n", encoding="utf-8")
    assert load_receivers(str(path)) == [((1.0, 2.0), 0), ((5.0, 6.0), 7)]

import math

from capsim.solution import RoundStats
from capsim.stats import (
    CSV_HEADER,
    ExperimentStats,
    Series,
    load_stats_csv,
    make_stats,
    plot_coverage_curve,
    print_summary_table,
    write_stats_csv,
)


def test_series_order_statistics():
    s = Series()
    for v in range(10, 0, -1):
        s.add(v)
    assert s.min() == 1.0
    assert s.max() == 10.0
    assert s.median() == 6.0
    assert s.mean() == 5.5
    assert s.percentile95() == 10.0


def test_empty_series_is_nan():
    s = Series()
    assert len(s) == 0
    for v in (s.min(), s.max(), s.median(), s.mean(), s.percentile95()):
        assert math.isnan(v)


def test_row_format():
    st = ExperimentStats(10, 2)
    st.add_round(RoundStats(0.5, 1.25, 0.0, 3.0))
    st.add_round(RoundStats(0.75, 0.5, 0.0, 2.0))
    row = st.row()
    assert row[:2] == ["10", "2"]
    assert row[2] == "0.5000"
    assert row[4] == "0.6250"
    assert row[6] == "0.7500"
    assert row[7] == "0.00000"
    assert row[11] == "3.00000"
    assert len(row) == len(CSV_HEADER)


def test_csv_round_trip(tmp_path):
    stats = make_stats(5, 3)
    stats[0].add_round(RoundStats(0.4, 2.0, 1.0, 3.0))
    path = tmp_path / "res" / "results.csv"
    write_stats_csv(str(path), stats)

    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "#Tx, #Rx, MinCov, MedCov, MeanCov, P95Cov, MaxCov, " \
        "MinContention, MedContention, MeanContention, P95Contention, MaxContention"
    assert lines[1].startswith("5, 1, 0.4000, ")
    rows = load_stats_csv(str(path))
    assert [r["#Rx"] for r in rows] == [1, 2, 3]
    assert rows[0]["#Tx"] == 5
    assert rows[0]["MeanCov"] == 0.4
    assert math.isnan(rows[1]["MeanCov"])


def test_annealing_contention_only():
    st = ExperimentStats(4, 2)
    st.add_contention(1.5)
    assert len(st.contention) == 1
    assert len(st.coverage) == 0
    assert st.row()[9] == "1.50000"


def test_summary_and_curve(tmp_path, capsys):
    stats = make_stats(3, 2)
    stats[0].add_round(RoundStats(0.5, 1.0, 0.0, 2.0))
    stats[1].add_round(RoundStats(1.0, 0.0, 0.0, 0.0))
    print_summary_table(stats)
    assert "RESULTS SUMMARY" in capsys.readouterr().out

    out = tmp_path / "curve.png"
    plot_coverage_curve(stats, save_path=str(out))
    assert out.exists()

import csv
from pathlib import Path

import run_bulk


def test_cli_writes_result_csv_for_coordinate_rows(tmp_path: Path, capsys):
    source = tmp_path / "routes.csv"
    source.write_text("from_lat,from_lon,to_lat,to_lon,ref\n28.6139,77.2090,15.2993,74.1240,A1\n", encoding="utf-8")
    output_dir = tmp_path / "out"

    exit_code = run_bulk.main([str(source), "--mode", "air", "--output-dir", str(output_dir)])

    assert exit_code == 0
    written = list(output_dir.glob("distance_results_air_*.csv"))
    assert len(written) == 1
    with written[0].open(encoding="utf-8") as handle:
        rows = list(csv.DictReader(handle))
    assert rows[0]["ref"] == "A1"
    assert rows[0]["flight_time_hours"] == "1.9"
    assert "Wrote 1 rows" in capsys.readouterr().out


def test_cli_reports_missing_input(tmp_path: Path, capsys):
    assert run_bulk.main([str(tmp_path / "missing.csv")]) == 1
    assert "not found" in capsys.readouterr().err


def test_cli_reports_file_without_rows(tmp_path: Path, capsys):
    source = tmp_path / "empty.csv"
    source.write_text("from,to\n", encoding="utf-8")

    assert run_bulk.main([str(source)]) == 1
    assert "No valid data" in capsys.readouterr().err

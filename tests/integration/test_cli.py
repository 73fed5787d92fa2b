"""Integration tests for the command line entry point."""

import json
import logging
import pytest
from pathlib import Path

from meditrack.main import build_parser, main


@pytest.fixture(autouse=True)
def restore_root_logger():
    """main() reconfigures the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.integration
class TestCli:

    def test_parser_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_parser_rejects_unknown_period(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["stats", "--period", "yearly"])

    def test_log_then_stats(self, config_file, capsys):
        main(["--config", config_file, "log", "15", "--notes", "breathing",
              "--at", "2024-01-02T07:30:00"])
        main(["--config", config_file, "stats", "--period", "monthly"])

        output = capsys.readouterr().out
        assert "Meditation session saved!" in output
        assert "Total Time" in output
        assert "15m" in output
        assert "2024-01" in output

        data_dir = Path(config_file).parent / "data"
        stored = json.loads((data_dir / "sessions.json").read_text())
        assert stored["sessions"] == [
            {"sessionDateTime": "2024-01-02T07:30:00", "durationSeconds": 900, "notes": "breathing"}
        ]
        assert (data_dir / "logs" / "meditrack.log").exists()

    def test_short_session_not_saved(self, config_file, capsys):
        main(["--config", config_file, "log", "0.1"])

        assert "Session too short" in capsys.readouterr().out

    def test_day_listing(self, config_file, capsys):
        main(["--config", config_file, "log", "12", "--at", "2024-03-01T06:00:00"])
        main(["--config", config_file, "day", "2024-03-01"])

        output = capsys.readouterr().out
        assert "06:00" in output
        assert "12m 0s" in output

    def test_calendar_month(self, config_file, capsys):
        main(["--config", config_file, "log", "12", "--at", "2024-02-10T06:00:00"])
        main(["--config", config_file, "log", "12", "--at", "2024-03-05T06:00:00"])
        main(["--config", config_file, "calendar", "2024-02"])

        output = capsys.readouterr().out
        assert "February 2024" in output
        assert "●10" in output
        assert "2024-02-10  1 session(s), 12m" in output
        assert "2024-03-05" not in output

    def test_parser_rejects_bad_month(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["calendar", "2024-13"])

    def test_export_and_import(self, config_file, temp_data_dir, capsys):
        main(["--config", config_file, "export"])
        assert "No data to export." in capsys.readouterr().out

        main(["--config", config_file, "log", "20", "--at", "2024-03-01T06:00:00"])
        export_dir = Path(temp_data_dir) / "out"
        main(["--config", config_file, "export", "--dir", str(export_dir)])
        exported = list(export_dir.glob("meditation_data_export_*.json"))
        assert len(exported) == 1

        main(["--config", config_file, "import", str(exported[0])])
        assert "1 skipped (duplicates)" in capsys.readouterr().out

    def test_errors_exit_with_status_1(self, config_file, temp_data_dir, capsys):
        bad = Path(temp_data_dir) / "bad.json"
        bad.write_text("{}")

        with pytest.raises(SystemExit) as exc_info:
            main(["--config", config_file, "import", str(bad)])

        assert exc_info.value.code == 1
        assert "Error" in capsys.readouterr().out

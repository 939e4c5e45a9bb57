import pytest
from datetime import datetime, timezone, timedelta
from unittest.mock import AsyncMock, patch
import cli
from config import ENV_VARS, Settings, load_settings
from jobs.scheduler import MonitorSummary
from services.bug_reproducer import PatternResult, ProbeVerdict, ReproductionSummary
from services.exceptions import ConfigurationError
from services.storage_uptime import UptimeStorageService

MOCK_URL = "https://qa-challenge.example.test/api/name-checker"
START = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)

@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "request_logs.db")
    storage = UptimeStorageService(path)
    for offset, status in [(0, 200), (1, 500), (65, 200)]:
        storage.log_request(MOCK_URL, "Ana", status, "body", START + timedelta(seconds=offset))
    return path

# --- Settings ---

def test_default_settings():
    settings = load_settings({})
    assert settings.window_sec == 60
    assert settings.interval_sec == 5
    assert settings.duration_min == 10.0
    assert settings.db_path == "request_logs.db"

def test_settings_from_environment():
    settings = load_settings({"WINDOW_SEC": "300", "DB_PATH": "/tmp/x.db", "DURATION_MIN": "0.5", "API_URL": MOCK_URL})
    assert settings.window_sec == 300
    assert settings.db_path == "/tmp/x.db"
    assert settings.duration_min == 0.5
    assert settings.api_url == MOCK_URL

def test_blank_environment_values_use_defaults():
    assert load_settings({"WINDOW_SEC": "  "}).window_sec == 60

def test_invalid_environment_value():
    with pytest.raises(ConfigurationError) as exc_info:
        load_settings({"WINDOW_SEC": "sixty"})
    assert "window_sec" in str(exc_info.value)

def test_overrides_ignore_missing_flags():
    settings = Settings().with_overrides(window_sec=120, db_path=None)
    assert settings.window_sec == 120
    assert settings.db_path == "request_logs.db"

def test_settings_read_process_environment(monkeypatch):
    monkeypatch.setenv("INTERVAL_SEC", "15")
    assert load_settings(use_dotenv=False).interval_sec == 15

# --- Commands ---

def test_uptime_command(db_path, capsys):
    assert cli.main(["--db", db_path, "uptime"]) == 0
    out = capsys.readouterr().out
    assert "Successful: 2 / 3" in out
    assert "Up Windows: 2 / 2" in out
    assert "HTTP 500: 1 requests (33.33%)" in out

def test_uptime_command_window_from_env(db_path, capsys, monkeypatch):
    monkeypatch.setenv("WINDOW_SEC", "3600")
    assert cli.main(["--db", db_path, "uptime"]) == 0
    assert "Uptime by Time (3600s windows)" in capsys.readouterr().out

def test_uptime_command_invalid_window_exits_non_zero(db_path, capsys):
    assert cli.main(["--db", db_path, "uptime", "--window-sec", "0"]) == 1
    assert "Window size" in capsys.readouterr().out

def test_uptime_command_missing_database(tmp_path, capsys):
    assert cli.main(["--db", str(tmp_path / "missing.db"), "uptime"]) == 1
    assert "Database not found" in capsys.readouterr().out

def test_uptime_command_empty_database(tmp_path, capsys):
    path = str(tmp_path / "empty.db")
    UptimeStorageService(path)
    assert cli.main(["--db", path, "uptime"]) == 0
    assert "No data found in database" in capsys.readouterr().out

def test_configuration_error_exit_code(capsys, monkeypatch):
    monkeypatch.setenv("INTERVAL_SEC", "often")
    assert cli.main(["uptime"]) == 2
    assert "Configuration error" in capsys.readouterr().out

def test_dashboard_command(db_path, tmp_path, capsys):
    output = tmp_path / "index.html"
    assert cli.main(["--db", db_path, "dashboard", "--output", str(output)]) == 0
    html = output.read_text(encoding="utf-8")
    assert "API Monitoring Dashboard" in html
    assert "Dashboard generated" in capsys.readouterr().out

def test_dashboard_command_without_data(tmp_path, capsys):
    path = str(tmp_path / "empty.db")
    UptimeStorageService(path)
    assert cli.main(["--db", path, "dashboard", "--output", str(tmp_path / "index.html")]) == 1
    assert not (tmp_path / "index.html").exists()

def test_monitor_command_wires_settings(tmp_path, capsys):
    names = tmp_path / "names.csv"
    names.write_text("name\nAna\nBob\n", encoding="utf-8")
    db = str(tmp_path / "monitor.db")
    summary = MonitorSummary(requests_made=4, successful=3, elapsed_minutes=0.5)

    with patch("cli.MonitorScheduler") as scheduler_cls:
        scheduler_cls.return_value.run = AsyncMock(return_value=summary)
        code = cli.main([
            "--db", db, "--api-url", MOCK_URL, "monitor",
            "--interval-sec", "2", "--duration-min", "0.5", "--names-file", str(names),
        ])

    assert code == 0
    probe, storage, loaded_names = scheduler_cls.call_args.args
    assert probe.url == MOCK_URL
    assert storage.db_path == db
    assert loaded_names == ["Ana", "Bob"]
    assert scheduler_cls.call_args.kwargs == {"interval_sec": 2, "duration_min": 0.5}
    assert "Total requests made: 4" in capsys.readouterr().out

def test_reproduce_command(capsys):
    with patch("cli.BugReproducer") as reproducer_cls:
        reproducer_cls.return_value.run = AsyncMock(return_value=ReproductionSummary())
        assert cli.main(["--api-url", MOCK_URL, "reproduce", "--no-controls", "--retries", "2"]) == 0

    reproducer_cls.assert_called_once_with(MOCK_URL, timeout=10.0, retries=2)
    bug_patterns, controls = reproducer_cls.return_value.run.await_args.args
    assert "https://example.com" in bug_patterns
    assert controls == []
    assert "Bug reproduced: 0/0 patterns" in capsys.readouterr().out

def test_reproduce_command_prints_curl_and_analysis(capsys):
    summary = ReproductionSummary(bug_results=[
        PatternResult(payload="http://example.io", verdict=ProbeVerdict.REPRODUCED, status_code=500),
        PatternResult(payload="http://Example.Com", verdict=ProbeVerdict.SUCCESS, status_code=200),
    ])
    with patch("cli.BugReproducer") as reproducer_cls:
        reproducer_cls.return_value.run = AsyncMock(return_value=summary)
        assert cli.main(["--api-url", MOCK_URL, "reproduce"]) == 0

    bug_patterns, controls = reproducer_cls.return_value.run.await_args.args
    assert len(bug_patterns) == 18
    assert "http%3A//example.com" in bug_patterns
    assert "http://google.com" in controls

    out = capsys.readouterr().out
    assert "Bug reproduced: 1/2 patterns" in out
    assert "🎯 REPRODUCTION COMMANDS:" in out
    assert f"curl -X POST '{MOCK_URL}' \\" in out
    assert """-d '{"name":"http://example.io"}'""" in out
    assert "📋 BUG ANALYSIS:" in out

def test_monitor_interrupt_reports_recorded_requests(tmp_path, capsys):
    db = str(tmp_path / "monitor.db")
    UptimeStorageService(db).log_request(MOCK_URL, "Ana", 200, "ok", START)

    with patch("cli.MonitorScheduler") as scheduler_cls:
        scheduler_cls.return_value.run = AsyncMock(side_effect=KeyboardInterrupt)
        assert cli.main(["--db", db, "monitor", "--duration-min", "1"]) == 130

    scheduler_cls.return_value.stop.assert_not_called()
    assert f"Monitoring interrupted. 1 requests recorded in {db}" in capsys.readouterr().out

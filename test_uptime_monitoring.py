import pytest
import httpx
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch, MagicMock
from jobs.scheduler import MonitorScheduler
from services.name_loader import load_names
from services.storage_uptime import UptimeStorageService
from services.uptime_checker import NameCheckerProbe, ProbeResult

MOCK_URL = "https://qa-challenge.example.test/api/name-checker"
MOCK_TIMESTAMP = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

def mock_response(status_code, text):
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.elapsed.total_seconds.return_value = 0.25
    return response

class FakeClock:
    """Monotonic clock that only moves when the scheduler sleeps"""

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    async def sleep(self, seconds):
        self.now += seconds

@pytest.fixture
def storage(tmp_path):
    return UptimeStorageService(str(tmp_path / "request_logs.db"))

# --- Probe ---

@pytest.mark.asyncio
async def test_probe_posts_name_as_json():
    with patch("services.uptime_checker.httpx.AsyncClient") as mock_client:
        mock_instance = AsyncMock()
        mock_instance.post.return_value = mock_response(200, '{"valid": true}')
        mock_client.return_value.__aenter__.return_value = mock_instance

        result = await NameCheckerProbe(MOCK_URL, timeout=10).check("Ana")

        mock_instance.post.assert_awaited_once_with(
            MOCK_URL,
            json={"name": "Ana"},
            headers={"Content-Type": "application/json"},
        )
        mock_client.assert_called_once_with(timeout=10)
        assert result.status_code == 200
        assert result.is_success
        assert result.body == '{"valid": true}'
        assert result.response_time == 250
        assert result.error is None

@pytest.mark.asyncio
async def test_probe_keeps_server_errors():
    with patch("services.uptime_checker.httpx.AsyncClient") as mock_client:
        mock_instance = AsyncMock()
        mock_instance.post.return_value = mock_response(500, '{"message":"System is down"}')
        mock_client.return_value.__aenter__.return_value = mock_instance

        result = await NameCheckerProbe(MOCK_URL).check("Ana")
        assert result.status_code == 500
        assert not result.is_success
        assert result.error is None

@pytest.mark.asyncio
async def test_probe_transport_failure_is_status_zero():
    with patch("services.uptime_checker.httpx.AsyncClient") as mock_client:
        mock_instance = AsyncMock()
        mock_instance.post.side_effect = httpx.ReadTimeout("timed out")
        mock_client.return_value.__aenter__.return_value = mock_instance

        result = await NameCheckerProbe(MOCK_URL).check("Ana")
        assert result.status_code == 0
        assert result.body == "Request failed: timed out"
        assert result.error == "timed out"
        assert result.response_time is None

@pytest.mark.asyncio
async def test_probe_connection_error_is_status_zero():
    with patch("services.uptime_checker.httpx.AsyncClient") as mock_client:
        mock_instance = AsyncMock()
        mock_instance.post.side_effect = httpx.ConnectError("DNS resolution failed")
        mock_client.return_value.__aenter__.return_value = mock_instance

        result = await NameCheckerProbe(MOCK_URL).check("Ana")
        assert result.status_code == 0
        assert "DNS" in result.body

# --- Name list ---

def test_load_names(tmp_path):
    path = tmp_path / "names.csv"
    path.write_text("name,notes\nAna,first\n,blank\nMaría José,accent\n", encoding="utf-8")
    assert load_names(str(path)) == ["Ana", "María José"]

def test_load_names_missing_file(tmp_path, capsys):
    assert load_names(str(tmp_path / "missing.csv")) == []
    assert "Could not load CSV file" in capsys.readouterr().out

def test_load_names_without_name_column(tmp_path):
    path = tmp_path / "names.csv"
    path.write_text("first\nAna\n", encoding="utf-8")
    assert load_names(str(path)) == []

# --- Scheduler ---

def make_probe(statuses):
    probe = MagicMock()
    probe.url = MOCK_URL
    results = [
        ProbeResult(status, "ok" if status == 200 else "System is down", None, MOCK_TIMESTAMP)
        for status in statuses
    ]
    probe.check = AsyncMock(side_effect=results)
    return probe

@pytest.mark.asyncio
async def test_scheduler_runs_for_duration_and_rotates_names(storage):
    clock = FakeClock()
    # 1 minute at 20s intervals: requests at t=0, 20, 40
    probe = make_probe([200, 500, 200])
    scheduler = MonitorScheduler(probe, storage, ["Ana", "Bob"], interval_sec=20, duration_min=1, clock=clock)

    with patch("jobs.scheduler.asyncio.sleep", side_effect=clock.sleep) as mock_sleep:
        summary = await scheduler.run()

    assert summary.requests_made == 3
    assert summary.successful == 2
    assert not summary.stopped_early
    assert [call.args[0] for call in probe.check.await_args_list] == ["Ana", "Bob", "Ana"]
    # no sleep after the last request since it would pass the end time
    assert mock_sleep.await_count == 2
    assert storage.count_requests() == 3
    assert [log.name_parameter for log in storage.fetch_recent_requests()] == ["Ana", "Bob", "Ana"]

@pytest.mark.asyncio
async def test_scheduler_persists_status_codes(storage):
    clock = FakeClock()
    probe = make_probe([200, 0])
    scheduler = MonitorScheduler(probe, storage, ["Ana"], interval_sec=30, duration_min=1, clock=clock)

    with patch("jobs.scheduler.asyncio.sleep", side_effect=clock.sleep):
        await scheduler.run()

    assert [outcome.status_code for outcome in storage.fetch_ordered_outcomes()] == [200, 0]

@pytest.mark.asyncio
async def test_scheduler_falls_back_to_default_name(storage, capsys):
    clock = FakeClock()
    probe = make_probe([200])
    scheduler = MonitorScheduler(probe, storage, [], interval_sec=60, duration_min=1, clock=clock)

    with patch("jobs.scheduler.asyncio.sleep", side_effect=clock.sleep):
        summary = await scheduler.run()

    assert summary.requests_made == 1
    probe.check.assert_awaited_once_with("TestName")
    assert "No names loaded" in capsys.readouterr().out

@pytest.mark.asyncio
async def test_scheduler_stop_ends_run_early(storage):
    clock = FakeClock()
    probe = make_probe([200] * 10)
    scheduler = MonitorScheduler(probe, storage, ["Ana"], interval_sec=5, duration_min=10, clock=clock)

    async def stop_after_first(seconds):
        scheduler.stop()
        await clock.sleep(seconds)

    with patch("jobs.scheduler.asyncio.sleep", side_effect=stop_after_first):
        summary = await scheduler.run()

    assert summary.requests_made == 1
    assert summary.stopped_early

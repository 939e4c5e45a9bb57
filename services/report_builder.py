from typing import Optional, Sequence
from models.report import ReportResult, RequestUptime, TimeRange, UptimeReport, WindowUptime
from models.uptime_log import Outcome
from services.exceptions import UptimeError
from services.storage_uptime import UptimeStorageService
from services.uptime_calculator import (
    compute_request_uptime,
    compute_window_uptime,
    summarize_errors,
    validate_window_size,
)

def build_report(
    outcomes: Sequence[Outcome],
    time_range: Optional[TimeRange],
    window_size_seconds: int
) -> UptimeReport:
    """
    Runs the three calculators over one outcome snapshot.
    Raises InvalidWindowSize before any computation.
    """
    window_pct, up_windows, total_windows = compute_window_uptime(outcomes, window_size_seconds)
    request_pct, successful, total = compute_request_uptime(outcomes)

    return UptimeReport(
        time_range=time_range,
        request_uptime=RequestUptime(percentage=request_pct, successful=successful, total=total),
        window_uptime=WindowUptime(
            percentage=window_pct,
            up_windows=up_windows,
            total_windows=total_windows,
            window_size_seconds=window_size_seconds,
        ),
        errors=summarize_errors(outcomes),
    )

def generate_report(store: UptimeStorageService, window_size_seconds: int) -> ReportResult:
    """
    Reads a consistent snapshot from the store and builds the report.
    Uptime errors come back as values; the caller decides how to exit.
    """
    try:
        validate_window_size(window_size_seconds)
        outcomes, time_range = store.read_snapshot()
        report = build_report(outcomes, time_range, window_size_seconds)
    except UptimeError as e:
        return ReportResult(error=str(e), error_type=type(e).__name__)
    return ReportResult(report=report)

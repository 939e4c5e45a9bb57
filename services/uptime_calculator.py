"""
Uptime aggregation over recorded probe outcomes.

Two accounting models are computed from the same outcome sequence:

* request-based uptime: share of individual requests answered with 200
* time-based uptime: share of populated fixed-size windows that saw at
  least one 200

Windows with no outcomes at all are never materialized, so periods where
the monitor was not running do not count as downtime.
"""

import math
from typing import Dict, Iterable, List, Tuple
from models.report import ErrorShare
from models.uptime_log import Outcome, SUCCESS_CODE
from services.exceptions import InvalidWindowSize

DEFAULT_WINDOW_SECONDS = 60

def validate_window_size(window_size_seconds) -> int:
    if isinstance(window_size_seconds, bool) or not isinstance(window_size_seconds, int):
        raise InvalidWindowSize(window_size_seconds)
    if window_size_seconds <= 0:
        raise InvalidWindowSize(window_size_seconds)
    return window_size_seconds

def compute_request_uptime(outcomes: Iterable[Outcome]) -> Tuple[float, int, int]:
    total = 0
    successful = 0
    for outcome in outcomes:
        total += 1
        if outcome.status_code == SUCCESS_CODE:
            successful += 1

    if total == 0:
        return 0.0, 0, 0

    return (successful / total) * 100, successful, total

def window_start(timestamp: float, window_size_seconds: int) -> int:
    return math.floor(timestamp / window_size_seconds) * window_size_seconds

def group_windows(outcomes: Iterable[Outcome], window_size_seconds: int) -> Dict[int, Dict[str, int]]:
    """Bucket outcomes by window start -> {"total": n, "successful": n}"""
    windows: Dict[int, Dict[str, int]] = {}
    for outcome in outcomes:
        key = window_start(outcome.timestamp, window_size_seconds)
        stats = windows.setdefault(key, {"total": 0, "successful": 0})
        stats["total"] += 1
        if outcome.status_code == SUCCESS_CODE:
            stats["successful"] += 1
    return windows

def compute_window_uptime(outcomes: Iterable[Outcome], window_size_seconds: int) -> Tuple[float, int, int]:
    # Validated before touching the input so an empty sequence still rejects a bad size
    validate_window_size(window_size_seconds)

    windows = group_windows(outcomes, window_size_seconds)
    total_windows = len(windows)
    if total_windows == 0:
        return 0.0, 0, 0

    # A window is up when any request in it succeeded
    up_windows = sum(1 for stats in windows.values() if stats["successful"] > 0)
    return (up_windows / total_windows) * 100, up_windows, total_windows

def summarize_errors(outcomes: Iterable[Outcome]) -> Dict[int, int]:
    """Count non-200 outcomes per status code, most frequent first.

    Ties are ordered by status code so output is reproducible. Transport
    failures are reported under code 0.
    """
    counts: Dict[int, int] = {}
    for outcome in outcomes:
        if outcome.status_code == SUCCESS_CODE:
            continue
        counts[outcome.status_code] = counts.get(outcome.status_code, 0) + 1

    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return dict(ordered)

def error_breakdown(errors: Dict[int, int], total_requests: int) -> List[ErrorShare]:
    return [
        ErrorShare(
            status_code=code,
            count=count,
            percentage=(count / total_requests * 100) if total_requests else 0.0,
        )
        for code, count in errors.items()
    ]

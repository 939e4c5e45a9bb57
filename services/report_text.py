from typing import List
from models.report import UptimeReport
from services.uptime_calculator import error_breakdown

def format_uptime_report(report: UptimeReport, db_path: str) -> str:
    window_sec = report.window_uptime.window_size_seconds
    lines: List[str] = [
        "QA Service Uptime Report",
        f"Database: {db_path}",
        f"Time Window: {window_sec} seconds",
        "=" * 50,
    ]

    if not report.has_data:
        lines.append("No data found in database. Run the monitor first.")
        return "\n".join(lines)

    time_range = report.time_range
    lines += [
        "Data Range:",
        f"  Start: {time_range.start.strftime('%Y-%m-%d %H:%M:%S')}",
        f"  End:   {time_range.end.strftime('%Y-%m-%d %H:%M:%S')}",
        f"  Duration: {time_range.duration_minutes:.1f} minutes",
        f"  Total Requests: {time_range.total}",
        "",
    ]

    request = report.request_uptime
    lines += [
        "Uptime by Requests:",
        f"  Successful: {request.successful} / {request.total}",
        f"  Uptime: {request.percentage:.2f}%",
        "",
    ]

    window = report.window_uptime
    lines += [
        f"Uptime by Time ({window_sec}s windows):",
        f"  Up Windows: {window.up_windows} / {window.total_windows}",
        f"  Uptime: {window.percentage:.2f}%",
        "",
    ]

    shares = error_breakdown(report.errors, request.total)
    if shares:
        lines.append("Error Summary:")
        for share in shares:
            lines.append(f"  HTTP {share.status_code}: {share.count} requests ({share.percentage:.2f}%)")
        lines.append("")

    lines += [
        "Summary:",
        f"  Overall Request Success Rate: {request.percentage:.2f}%",
        f"  Overall Time-based Uptime: {window.percentage:.2f}%",
    ]
    return "\n".join(lines)

from datetime import datetime, timezone
from html import escape
from typing import Optional, Tuple
from models.report import UptimeReport
from services.uptime_calculator import error_breakdown

STYLE = """
        * { margin: 0; padding: 0; box-sizing: border-box; }
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            line-height: 1.6;
            color: #333;
            background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
            min-height: 100vh;
        }
        .container { max-width: 1200px; margin: 0 auto; padding: 20px; }
        .header { text-align: center; color: white; margin-bottom: 30px; }
        .header h1 { font-size: 2.5rem; margin-bottom: 10px; text-shadow: 0 2px 4px rgba(0,0,0,0.3); }
        .last-updated { font-size: 0.9rem; opacity: 0.8; margin-top: 10px; }
        .dashboard { display: grid; grid-template-columns: 1fr 1fr; gap: 20px; margin-bottom: 30px; }
        .card {
            background: white;
            border-radius: 12px;
            padding: 25px;
            box-shadow: 0 8px 25px rgba(0,0,0,0.1);
        }
        .card h3 {
            color: #2c3e50;
            margin-bottom: 20px;
            font-size: 1.3rem;
            border-bottom: 2px solid #ecf0f1;
            padding-bottom: 10px;
        }
        .metric { display: flex; justify-content: space-between; align-items: center; padding: 10px 0; }
        .metric-label { font-weight: 500; color: #555; }
        .metric-value { font-weight: 700; font-size: 1.1rem; }
        .uptime-good { color: #27ae60; }
        .uptime-warning { color: #f39c12; }
        .uptime-bad { color: #e74c3c; }
        .status-indicator { display: inline-block; width: 12px; height: 12px; border-radius: 50%; margin-right: 8px; }
        .status-good { background-color: #27ae60; }
        .status-warning { background-color: #f39c12; }
        .status-bad { background-color: #e74c3c; }
        .footer { text-align: center; color: white; opacity: 0.8; margin-top: 40px; }
        @media (max-width: 768px) {
            .container { padding: 15px; }
            .header h1 { font-size: 2rem; }
            .dashboard { grid-template-columns: 1fr; }
        }
"""

def status_class(success_rate: float) -> str:
    if success_rate >= 95:
        return "uptime-good"
    if success_rate >= 80:
        return "uptime-warning"
    return "uptime-bad"

def status_text(success_rate: float) -> str:
    if success_rate >= 95:
        return "Excellent"
    if success_rate >= 90:
        return "Good"
    if success_rate >= 80:
        return "Warning"
    return "Critical"

def _metric(label: str, value: str, css: str = "") -> str:
    css_class = f"metric-value {css}".strip()
    return (
        '<div class="metric">'
        f'<span class="metric-label">{label}</span>'
        f'<span class="{css_class}">{value}</span>'
        '</div>'
    )

def _card(title: str, body: str) -> str:
    return f'<div class="card"><h3>{title}</h3>{body}</div>'

def _rates(report: UptimeReport) -> Tuple[float, int, float]:
    request = report.request_uptime
    failed = request.total - request.successful
    failure_rate = (failed / request.total * 100) if request.total else 0.0
    return round(request.percentage, 2), failed, round(failure_rate, 2)

def render_dashboard(report: UptimeReport, api_url: str, last_updated: Optional[datetime] = None) -> str:
    """
    Renders the monitoring dashboard as a standalone HTML page.
    """
    last_updated = last_updated or datetime.now(timezone.utc)
    success_rate, failed, failure_rate = _rates(report)
    css = status_class(success_rate)
    indicator = css.replace("uptime-", "status-")
    request = report.request_uptime
    window = report.window_uptime
    time_range = report.time_range

    duration = round(time_range.duration_minutes, 1) if time_range else 0.0

    status_card = _card("🎯 Service Status", "".join([
        _metric(f'<span class="status-indicator {indicator}"></span>Overall Status', escape(status_text(success_rate)), css),
        _metric("Uptime", f"{success_rate}%", css),
        _metric("Monitoring Duration", f"{duration} minutes"),
        _metric("Total Requests", str(request.total)),
    ]))

    request_card = _card("📊 Request Statistics", "".join([
        _metric("Successful Requests", str(request.successful), "uptime-good"),
        _metric("Failed Requests", str(failed), "uptime-bad"),
        _metric("Success Rate", f"{success_rate}%", css),
        _metric("Failure Rate", f"{failure_rate}%", "uptime-bad"),
    ]))

    if time_range:
        time_card = _card("⏰ Time Range", "".join([
            _metric("Start Time", time_range.start.strftime("%H:%M:%S")),
            _metric("End Time", time_range.end.strftime("%H:%M:%S")),
            _metric("Date", time_range.start.strftime("%Y-%m-%d")),
            _metric("Duration", f"{duration} min"),
        ]))
    else:
        time_card = _card("⏰ Time Range", _metric("Data", "No requests recorded"))

    window_css = status_class(window.percentage)
    window_card = _card(f"🪟 Time-based Uptime ({window.window_size_seconds}s windows)", "".join([
        _metric("Up Windows", f"{window.up_windows} / {window.total_windows}"),
        _metric("Uptime", f"{window.percentage:.2f}%", window_css),
    ]))

    shares = error_breakdown(report.errors, request.total)
    if shares:
        error_rows = "".join(
            _metric(
                "Transport failures (no response)" if share.status_code == 0 else f"HTTP {share.status_code} Errors",
                f"{share.count} ({share.percentage:.2f}%)",
                "uptime-bad",
            )
            for share in shares
        )
    else:
        error_rows = _metric("Errors", "None recorded", "uptime-good")
    error_card = _card("🚨 Error Summary", error_rows)

    description = f"Live API monitoring results showing {success_rate}% uptime over {duration} minutes"

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>API Monitoring Dashboard</title>
    <meta name="description" content="{escape(description)}">
    <style>{STYLE}</style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1>🔍 API Monitoring Dashboard</h1>
            <div class="last-updated">Last updated: {last_updated.strftime('%Y-%m-%d %H:%M:%S UTC')}</div>
        </div>
        <div class="dashboard">
            {status_card}
            {request_card}
            {time_card}
            {window_card}
            {error_card}
        </div>
        <div class="footer">
            <p>🔄 Automated API Monitoring</p>
            <p>Monitoring endpoint: POST {escape(api_url)}</p>
        </div>
    </div>
</body>
</html>
"""

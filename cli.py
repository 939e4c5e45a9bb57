#!/usr/bin/env python3
"""
Command line entry point.

    uptime-monitor monitor      poll the endpoint and record every response
    uptime-monitor uptime       print the uptime report
    uptime-monitor dashboard    write the HTML dashboard
    uptime-monitor reproduce    probe known bug payloads
    uptime-monitor serve        run the HTTP API
"""

import argparse
import asyncio
import sqlite3
import sys
from typing import List, Optional
from config import Settings, load_settings
from db.sqlite import database_exists
from jobs.scheduler import MonitorScheduler
from services.bug_reproducer import (
    BUG_ANALYSIS,
    DEFAULT_BUG_PATTERNS,
    DEFAULT_CONTROL_PATTERNS,
    SAMPLE_REPRODUCTIONS,
    BugReproducer,
    ProbeVerdict,
    curl_command,
)
from services.dashboard import render_dashboard
from services.exceptions import ConfigurationError
from services.name_loader import load_names
from services.report_builder import generate_report
from services.report_text import format_uptime_report
from services.storage_uptime import UptimeStorageService
from services.uptime_checker import NameCheckerProbe

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="uptime-monitor", description="API uptime monitoring and reporting")
    parser.add_argument("--db", dest="db_path", help="SQLite request log (env DB_PATH)")
    parser.add_argument("--api-url", dest="api_url", help="Endpoint to monitor (env API_URL)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    monitor = subparsers.add_parser("monitor", help="Poll the endpoint and record responses")
    monitor.add_argument("--interval-sec", type=int, help="Seconds between requests (env INTERVAL_SEC)")
    monitor.add_argument("--duration-min", type=float, help="Run length in minutes (env DURATION_MIN)")
    monitor.add_argument("--names-file", help="CSV file with a 'name' column (env NAMES_FILE)")

    uptime = subparsers.add_parser("uptime", help="Print request and time-window uptime")
    uptime.add_argument("--window-sec", type=int, help="Window size in seconds (env WINDOW_SEC)")

    dashboard = subparsers.add_parser("dashboard", help="Write the HTML dashboard")
    dashboard.add_argument("--window-sec", type=int, help="Window size in seconds (env WINDOW_SEC)")
    dashboard.add_argument("--output", dest="output_path", help="HTML file to write (env OUTPUT_PATH)")

    reproduce = subparsers.add_parser("reproduce", help="Probe payloads that trigger the server bug")
    reproduce.add_argument("--patterns-file", help="CSV file with a 'name' column of bug payloads")
    reproduce.add_argument("--retries", type=int, default=3)
    reproduce.add_argument("--no-controls", action="store_true", help="Skip payloads expected to succeed")

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--port", type=int, help="Port to listen on (env PORT)")
    serve.add_argument("--host", default="0.0.0.0")

    return parser

def resolve_settings(args: argparse.Namespace) -> Settings:
    overrides = {
        field: getattr(args, field, None)
        for field in ("db_path", "api_url", "interval_sec", "duration_min", "names_file", "window_sec", "output_path", "port")
    }
    return load_settings().with_overrides(**overrides)

def run_monitor(settings: Settings) -> int:
    print("Starting QA monitoring...")
    print(f"API URL: {settings.api_url}")
    print(f"Duration: {settings.duration_min} minutes")
    print(f"Interval: {settings.interval_sec} seconds")
    print(f"Database: {settings.db_path}")
    print("-" * 50)

    storage = UptimeStorageService(settings.db_path)
    probe = NameCheckerProbe(settings.api_url, timeout=settings.request_timeout)
    scheduler = MonitorScheduler(
        probe,
        storage,
        load_names(settings.names_file),
        interval_sec=settings.interval_sec,
        duration_min=settings.duration_min,
    )
    try:
        summary = asyncio.run(scheduler.run())
    except KeyboardInterrupt:
        print(f"Monitoring interrupted. {storage.count_requests()} requests recorded in {settings.db_path}")
        return 130

    print(f"Total requests made: {summary.requests_made}")
    print(f"Duration: {summary.elapsed_minutes:.1f} minutes")
    return 0

def run_uptime(settings: Settings) -> int:
    if not database_exists(settings.db_path):
        print(f"Database not found: {settings.db_path}")
        print("Run the monitor first to generate monitoring data")
        return 1

    result = generate_report(UptimeStorageService(settings.db_path, create=False), settings.window_sec)
    if not result.ok:
        print(f"Error: {result.error}")
        return 1

    print(format_uptime_report(result.report, settings.db_path))
    return 0

def run_dashboard(settings: Settings) -> int:
    print("Generating dashboard...")
    if not database_exists(settings.db_path):
        print(f"Database not found: {settings.db_path}")
        print("Run the monitor first to generate monitoring data")
        return 1

    result = generate_report(UptimeStorageService(settings.db_path, create=False), settings.window_sec)
    if not result.ok:
        print(f"Error generating dashboard: {result.error}")
        return 1

    report = result.report
    if not report.has_data:
        print("No monitoring data found in database")
        return 1

    with open(settings.output_path, "w", encoding="utf-8") as handle:
        handle.write(render_dashboard(report, settings.api_url))

    request = report.request_uptime
    print(f"Dashboard generated: {settings.output_path}")
    print(f"Results: {request.percentage:.2f}% success rate ({request.successful}/{request.total} requests)")
    return 0

def run_reproduce(settings: Settings, args: argparse.Namespace) -> int:
    bug_patterns = load_names(args.patterns_file) if args.patterns_file else list(DEFAULT_BUG_PATTERNS)
    if not bug_patterns:
        print("No bug patterns to probe")
        return 1
    controls = [] if args.no_controls else list(DEFAULT_CONTROL_PATTERNS)

    print("🚨 NAME CHECKER BUG REPRODUCTION")
    print("=" * 70)
    reproducer = BugReproducer(settings.api_url, timeout=settings.request_timeout, retries=args.retries)
    summary = asyncio.run(reproducer.run(bug_patterns, controls))

    print("=" * 70)
    print("SUMMARY:")
    print(f"  Bug reproduced: {summary.reproduced_count}/{len(summary.bug_results)} patterns")
    print(f"  Reproduction rate: {summary.reproduction_rate}%")
    print()

    reproduced = [r.payload for r in summary.bug_results if r.verdict == ProbeVerdict.REPRODUCED]
    print("🎯 REPRODUCTION COMMANDS:")
    for payload in (reproduced or SAMPLE_REPRODUCTIONS)[:2]:
        print(curl_command(settings.api_url, payload))
        print()

    if not args.patterns_file:
        print("📋 BUG ANALYSIS:")
        for line in BUG_ANALYSIS:
            print(f"  {line}")
    return 0

def run_serve(settings: Settings, host: str) -> int:
    import uvicorn
    from main import create_app
    uvicorn.run(create_app(settings), host=host, port=settings.port)
    return 0

def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = resolve_settings(args)
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        return 2

    try:
        if args.command == "monitor":
            return run_monitor(settings)
        if args.command == "uptime":
            return run_uptime(settings)
        if args.command == "dashboard":
            return run_dashboard(settings)
        if args.command == "reproduce":
            return run_reproduce(settings, args)
        return run_serve(settings, args.host)
    except sqlite3.Error as e:
        print(f"Database error: {e}")
        return 1

if __name__ == "__main__":
    sys.exit(main())

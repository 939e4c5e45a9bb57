import sqlite3
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import HTMLResponse
from typing import List, Optional
from config import Settings
from models.report import ErrorShare, UptimeReport
from models.uptime_log import RequestLog
from services.dashboard import render_dashboard
from services.exceptions import InvalidWindowSize, UnparseableTimestamp
from services.report_builder import generate_report
from services.storage_uptime import UptimeStorageService
from services.uptime_calculator import error_breakdown

router = APIRouter(tags=["Uptime Monitoring"])

def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_storage(settings: Settings = Depends(get_settings)) -> UptimeStorageService:
    return UptimeStorageService(settings.db_path, create=False)

def _load_report(storage: UptimeStorageService, window_sec: int) -> UptimeReport:
    try:
        result = generate_report(storage, window_sec)
    except sqlite3.Error as e:
        print(f"❌ Database error while building report: {e}")
        raise HTTPException(status_code=500, detail=f"Database error: {e}")

    if not result.ok:
        status_code = 400 if result.error_type == InvalidWindowSize.__name__ else 500
        raise HTTPException(status_code=status_code, detail=result.error)
    return result.report

# 📊 Full uptime report
@router.get("/uptime/report", response_model=UptimeReport)
async def get_uptime_report(
    window_sec: Optional[int] = Query(None, description="Window size in seconds"),
    settings: Settings = Depends(get_settings),
    storage: UptimeStorageService = Depends(get_storage)
):
    """Request-based and time-window uptime over every recorded request"""
    return _load_report(storage, window_sec if window_sec is not None else settings.window_sec)

# 🚨 Error breakdown
@router.get("/uptime/errors", response_model=List[ErrorShare])
async def get_error_summary(
    settings: Settings = Depends(get_settings),
    storage: UptimeStorageService = Depends(get_storage)
):
    """Non-200 responses grouped by status code, with their share of all requests"""
    report = _load_report(storage, settings.window_sec)
    return error_breakdown(report.errors, report.request_uptime.total)

# 📜 Recent requests
@router.get("/requests", response_model=List[RequestLog])
async def get_recent_requests(
    limit: int = Query(50, ge=1, le=500),
    storage: UptimeStorageService = Depends(get_storage)
):
    """Most recent probe requests, newest first"""
    try:
        return storage.fetch_recent_requests(limit)
    except (sqlite3.Error, UnparseableTimestamp) as e:
        print(f"❌ Error fetching request logs: {e}")
        raise HTTPException(status_code=500, detail=str(e))

# 🌐 HTML dashboard
@router.get("/dashboard", response_class=HTMLResponse, include_in_schema=False)
async def get_dashboard(
    settings: Settings = Depends(get_settings),
    storage: UptimeStorageService = Depends(get_storage)
):
    report = _load_report(storage, settings.window_sec)
    if not report.has_data:
        return HTMLResponse(
            "<!DOCTYPE html><html><body><h1>No monitoring data found</h1>"
            "<p>Run the monitor first to collect requests.</p></body></html>",
            status_code=404,
        )
    return HTMLResponse(render_dashboard(report, settings.api_url))

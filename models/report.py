from pydantic import BaseModel, Field
from datetime import datetime, timezone
from typing import Dict, Optional

class TimeRange(BaseModel):
    start: datetime
    end: datetime
    total: int = Field(..., description="Number of recorded requests")

    @property
    def duration_minutes(self) -> float:
        return (self.end - self.start).total_seconds() / 60.0

class RequestUptime(BaseModel):
    percentage: float = 0.0
    successful: int = 0
    total: int = 0

class WindowUptime(BaseModel):
    percentage: float = 0.0
    up_windows: int = 0
    total_windows: int = 0
    window_size_seconds: int

class ErrorShare(BaseModel):
    status_code: int
    count: int
    percentage: float = Field(..., description="Share of all requests, not of errors")

class UptimeReport(BaseModel):
    time_range: Optional[TimeRange] = None
    request_uptime: RequestUptime
    window_uptime: WindowUptime
    errors: Dict[int, int] = Field(default_factory=dict)
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def has_data(self) -> bool:
        return self.time_range is not None and self.time_range.total > 0

class ReportResult(BaseModel):
    """Either a report or the reason it could not be built"""
    report: Optional[UptimeReport] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.report is not None and self.error is None

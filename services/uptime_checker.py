import httpx
from datetime import datetime, timezone
from typing import Optional
from models.uptime_log import SUCCESS_CODE, TRANSPORT_FAILURE_CODE

class ProbeResult:
    def __init__(self, status_code: int, body: str, error: Optional[str], timestamp: datetime, response_time: Optional[int] = None):
        self.status_code = status_code  # 0 when no response was received
        self.body = body
        self.error = error  # transport error message, if any
        self.timestamp = timestamp
        self.response_time = response_time  # in milliseconds

    @property
    def is_success(self) -> bool:
        return self.status_code == SUCCESS_CODE

class NameCheckerProbe:
    """POSTs a name to the checker endpoint and records what came back"""

    def __init__(self, url: str, timeout: float = 10.0):
        self.url = url
        self.timeout = timeout  # seconds

    async def check(self, name: str) -> ProbeResult:
        start = datetime.now(timezone.utc)
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.url,
                    json={"name": name},
                    headers={"Content-Type": "application/json"},
                )
                elapsed_ms = int(response.elapsed.total_seconds() * 1000)
                return ProbeResult(response.status_code, response.text, None, start, elapsed_ms)
        except httpx.HTTPError as e:
            message = str(e) or type(e).__name__
            return ProbeResult(TRANSPORT_FAILURE_CODE, f"Request failed: {message}", message, start)

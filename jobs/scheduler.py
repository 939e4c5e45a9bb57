import asyncio
import time
from datetime import datetime
from typing import Callable, List
from pydantic import BaseModel
from services.storage_uptime import UptimeStorageService
from services.uptime_checker import NameCheckerProbe

FALLBACK_NAMES = ["TestName"]

class MonitorSummary(BaseModel):
    requests_made: int
    successful: int
    elapsed_minutes: float
    stopped_early: bool = False

class MonitorScheduler:
    def __init__(
        self,
        probe: NameCheckerProbe,
        storage: UptimeStorageService,
        names: List[str],
        interval_sec: int = 5,
        duration_min: float = 10.0,
        clock: Callable[[], float] = time.monotonic
    ):
        self.probe = probe
        self.storage = storage
        if not names:
            print("⚠️ No names loaded from seed file, using fallback name")
            names = list(FALLBACK_NAMES)
        self.names = names
        self.interval_sec = interval_sec
        self.duration_sec = duration_min * 60
        self._clock = clock
        self._running = False

    async def run(self) -> MonitorSummary:
        self._running = True
        start = self._clock()
        end = start + self.duration_sec
        request_count = 0
        successful = 0

        print(f"🔄 Monitoring {self.probe.url} every {self.interval_sec}s for {self.duration_sec / 60:.1f} minutes")

        while self._running and self._clock() < end:
            name = self.names[request_count % len(self.names)]
            succeeded = await self._run_once(name)
            request_count += 1
            if succeeded:
                successful += 1

            # No further request fits before the end time
            if self._clock() + self.interval_sec >= end:
                break
            if self._running:
                await asyncio.sleep(self.interval_sec)

        stopped_early = not self._running
        self._running = False
        elapsed = (self._clock() - start) / 60

        print(f"✅ Monitoring completed: {request_count} requests in {elapsed:.1f} minutes")
        return MonitorSummary(
            requests_made=request_count,
            successful=successful,
            elapsed_minutes=round(elapsed, 1),
            stopped_early=stopped_early,
        )

    async def _run_once(self, name: str) -> bool:
        print(f"{datetime.now().strftime('%H:%M:%S')} - Testing name: '{name}'")
        result = await self.probe.check(name)
        self.storage.log_request(self.probe.url, name, result.status_code, result.body, result.timestamp)
        symbol = "✓" if result.is_success else "✗"
        print(f"  {symbol} Status: {result.status_code} - {(result.body or '')[:50]}")
        return result.is_success

    def stop(self):
        self._running = False
        print("⛔ Monitor stopped.")

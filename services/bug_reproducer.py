import httpx
import asyncio
import json
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field

DEFAULT_BUG_MARKER = "Unexpected server error"
DEFAULT_TRANSIENT_MARKER = "System is down"

# URLs with a lowercase "example" domain trip the checker's URL handling
DEFAULT_BUG_PATTERNS = [
    "https://example.com",
    "http://example.com",
    "http://example.org",
    "http://example.net",
    "http://test.example",
    "http://example.test",
    "http://example.co",
    "http://example.io",
    "http://examples.com",
    "http://myexample.com",
    "http://example123.com",
    "http://www.example.com",
    "http://api.example.com",
    "ftp://example.com",
    "http://example%2Ecom",
    "http%3A//example.com",
    "http://placeholder.com",
    "http://Example.Com",
]

DEFAULT_CONTROL_PATTERNS = [
    "http://s.com",
    "http://test.com",
    "http://google.com",
    "http://EXAMPLE.COM",
    "file://example.com",
    "Ana",
]

# Payloads shown as ready-to-run curl commands after a run
SAMPLE_REPRODUCTIONS = ["https://example.com", "http://example.org"]

BUG_ANALYSIS = [
    "Pattern: URLs containing 'example' (case-sensitive) in domain",
    "Trigger: Server-side URL validation/filtering logic",
    "Error: Unhandled exception during 'example' domain processing",
    "Protocols: HTTP, HTTPS, FTP (not file://, mailto:// etc.)",
    "Case: Lowercase 'example' triggers bug, 'EXAMPLE' works fine",
]

class ProbeVerdict(str, Enum):
    REPRODUCED = "reproduced"
    INTERMITTENT = "intermittent"
    SUCCESS = "success"
    OTHER = "other"
    ERROR = "error"

class PatternResult(BaseModel):
    payload: str
    verdict: ProbeVerdict
    status_code: Optional[int] = None
    attempts: int = 1
    detail: Optional[str] = None

class ReproductionSummary(BaseModel):
    bug_results: List[PatternResult] = Field(default_factory=list)
    control_results: List[PatternResult] = Field(default_factory=list)

    @property
    def reproduced_count(self) -> int:
        return sum(1 for result in self.bug_results if result.verdict == ProbeVerdict.REPRODUCED)

    @property
    def reproduction_rate(self) -> float:
        if not self.bug_results:
            return 0.0
        return round(self.reproduced_count / len(self.bug_results) * 100, 1)

class BugReproducer:
    """
    Sends candidate payloads to the name checker and tells a reproducible
    server bug apart from the endpoint's intermittent outages.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        retries: int = 3,
        retry_delay: float = 0.5,
        pause: float = 0.1,
        bug_marker: str = DEFAULT_BUG_MARKER,
        transient_marker: str = DEFAULT_TRANSIENT_MARKER
    ):
        self.url = url
        self.timeout = timeout
        self.retries = max(1, retries)
        self.retry_delay = retry_delay  # seconds between attempts on transient failures
        self.pause = pause  # seconds between payloads
        self.bug_marker = bug_marker
        self.transient_marker = transient_marker

    async def probe(self, payload: str) -> PatternResult:
        status = None
        for attempt in range(1, self.retries + 1):
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.url, json={"name": payload})
            except httpx.HTTPError as e:
                return PatternResult(payload=payload, verdict=ProbeVerdict.ERROR, attempts=attempt, detail=str(e) or type(e).__name__)

            status = response.status_code
            body = response.text or ""

            if status == 500 and self.bug_marker in body:
                return PatternResult(payload=payload, verdict=ProbeVerdict.REPRODUCED, status_code=status, attempts=attempt)
            if status == 500 and self.transient_marker in body:
                if attempt < self.retries:
                    await asyncio.sleep(self.retry_delay)
                    continue
                return PatternResult(
                    payload=payload,
                    verdict=ProbeVerdict.INTERMITTENT,
                    status_code=status,
                    attempts=attempt,
                    detail=f"Intermittent error after {attempt} attempts",
                )
            if status == 200:
                return PatternResult(payload=payload, verdict=ProbeVerdict.SUCCESS, status_code=status, attempts=attempt)
            return PatternResult(payload=payload, verdict=ProbeVerdict.OTHER, status_code=status, attempts=attempt)

        return PatternResult(payload=payload, verdict=ProbeVerdict.OTHER, status_code=status, attempts=self.retries)

    async def run(self, bug_patterns: List[str], control_patterns: Optional[List[str]] = None) -> ReproductionSummary:
        summary = ReproductionSummary()

        print("📍 BUG PATTERNS (should fail):")
        for payload in bug_patterns:
            result = await self.probe(payload)
            summary.bug_results.append(result)
            print(describe(result))
            await asyncio.sleep(self.pause)

        if control_patterns:
            print("📍 NON-BUG PATTERNS (should work):")
            for payload in control_patterns:
                result = await self.probe(payload)
                summary.control_results.append(result)
                print(describe(result))
                await asyncio.sleep(self.pause)

        return summary

VERDICT_ICONS = {
    ProbeVerdict.REPRODUCED: "🚨",
    ProbeVerdict.INTERMITTENT: "⚠️ ",
    ProbeVerdict.SUCCESS: "✅",
    ProbeVerdict.OTHER: "❓",
    ProbeVerdict.ERROR: "❌",
}

def describe(result: PatternResult) -> str:
    icon = VERDICT_ICONS[result.verdict]
    if result.verdict == ProbeVerdict.REPRODUCED:
        outcome = "BUG REPRODUCED"
    elif result.verdict == ProbeVerdict.INTERMITTENT:
        outcome = result.detail
    elif result.verdict == ProbeVerdict.SUCCESS:
        outcome = "Success"
    elif result.verdict == ProbeVerdict.ERROR:
        outcome = f"Error: {result.detail}"
    else:
        outcome = f"Other ({result.status_code})"
    return f"{icon} {result.payload.ljust(30)} → {outcome}"

def curl_command(url: str, payload: str) -> str:
    body = json.dumps({"name": payload}, separators=(",", ":"))
    return "\n".join([
        f"curl -X POST '{url}' \\",
        "  -H 'Content-Type: application/json' \\",
        f"  -d '{body}'",
    ])

import sqlite3
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from db.sqlite import REQUEST_LOGS_TABLE, connection, initialize_database, read_transaction
from models.report import TimeRange
from models.uptime_log import Outcome, RequestLog, format_timestamp, parse_timestamp

MAX_RESPONSE_TEXT = 1000

def truncate_body(body: str, limit: int = MAX_RESPONSE_TEXT) -> str:
    if body is None:
        return ""
    return body[:limit] + "..." if len(body) > limit else body

class UptimeStorageService:
    """Append-only request log backed by SQLite"""

    def __init__(self, db_path: str, create: bool = True):
        self.db_path = db_path
        if create:
            initialize_database(db_path)

    # --- LOGGING ---

    def log_request(
        self,
        url: str,
        name: str,
        status: int,
        body: str,
        timestamp: Optional[datetime] = None
    ) -> int:
        timestamp = timestamp or datetime.now(timezone.utc)
        with connection(self.db_path) as conn:
            cursor = conn.execute(
                f"INSERT INTO {REQUEST_LOGS_TABLE} (url, name_parameter, response_status, response_text, timestamp) "
                "VALUES (?, ?, ?, ?, ?)",
                (url, name, status, truncate_body(body), format_timestamp(timestamp)),
            )
            return cursor.lastrowid

    # --- READS ---

    def fetch_ordered_outcomes(self) -> List[Outcome]:
        with connection(self.db_path) as conn:
            return self._ordered_outcomes(conn)

    def fetch_time_range(self) -> Optional[TimeRange]:
        with connection(self.db_path) as conn:
            return self._time_range(conn)

    def read_snapshot(self) -> Tuple[List[Outcome], Optional[TimeRange]]:
        """Outcomes and time range read from the same snapshot"""
        with read_transaction(self.db_path) as conn:
            outcomes = self._ordered_outcomes(conn)
            time_range = self._time_range(conn)
        return outcomes, time_range

    def fetch_recent_requests(self, limit: int = 50) -> List[RequestLog]:
        with connection(self.db_path) as conn:
            parsed = self._parsed_rows(
                conn, "id, url, name_parameter, response_status, response_text, timestamp"
            )

        logs = []
        for ts, row in reversed(parsed[-limit:]):
            data = dict(row)
            data["timestamp"] = datetime.fromtimestamp(ts, timezone.utc)
            logs.append(RequestLog(**data))
        return logs

    def count_requests(self) -> int:
        with connection(self.db_path) as conn:
            return conn.execute(f"SELECT COUNT(*) FROM {REQUEST_LOGS_TABLE}").fetchone()[0]

    # --- QUERIES ---

    def _parsed_rows(self, conn: sqlite3.Connection, columns: str) -> List[Tuple[float, sqlite3.Row]]:
        rows = conn.execute(f"SELECT {columns} FROM {REQUEST_LOGS_TABLE}").fetchall()
        # A single malformed timestamp fails the whole read
        parsed = [(parse_timestamp(row["timestamp"], row["id"]), row) for row in rows]
        # Stored text may mix layouts and offsets, so order by the parsed instant
        parsed.sort(key=lambda item: (item[0], item[1]["id"]))
        return parsed

    def _ordered_outcomes(self, conn: sqlite3.Connection) -> List[Outcome]:
        return [
            Outcome(timestamp=ts, status_code=row["response_status"])
            for ts, row in self._parsed_rows(conn, "id, response_status, timestamp")
        ]

    def _time_range(self, conn: sqlite3.Connection) -> Optional[TimeRange]:
        parsed = self._parsed_rows(conn, "id, timestamp")
        if not parsed:
            return None

        return TimeRange(
            start=datetime.fromtimestamp(parsed[0][0], timezone.utc),
            end=datetime.fromtimestamp(parsed[-1][0], timezone.utc),
            total=len(parsed),
        )

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime, timezone
from typing import Optional, Union
from services.exceptions import UnparseableTimestamp

SUCCESS_CODE = 200
TRANSPORT_FAILURE_CODE = 0  # no HTTP response was received

def parse_timestamp(value: Union[str, int, float, datetime], row_id: Optional[int] = None) -> float:
    """Convert a stored timestamp to epoch seconds.

    Naive values (SQLite CURRENT_TIMESTAMP) are UTC.
    """
    if isinstance(value, bool):
        raise UnparseableTimestamp(value, row_id)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, str):
        try:
            moment = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            raise UnparseableTimestamp(value, row_id) from None
    else:
        raise UnparseableTimestamp(value, row_id)

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.timestamp()

def format_timestamp(moment: datetime) -> str:
    """Format a datetime the way SQLite's CURRENT_TIMESTAMP does (UTC)"""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%d %H:%M:%S")

class Outcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: float = Field(..., description="Epoch seconds of the probe attempt")
    status_code: int = Field(..., description="HTTP status, 0 for transport failures")

    @property
    def is_success(self) -> bool:
        return self.status_code == SUCCESS_CODE

class RequestLog(BaseModel):
    id: Optional[int] = None
    url: str
    name_parameter: str
    response_status: int
    response_text: str
    timestamp: datetime

    def to_outcome(self) -> Outcome:
        return Outcome(timestamp=parse_timestamp(self.timestamp, self.id), status_code=self.response_status)

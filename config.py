import os
from typing import Mapping, Optional
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError
from services.exceptions import ConfigurationError

DEFAULT_API_URL = "https://qa-challenge-nine.vercel.app/api/name-checker"

# env var -> settings field
ENV_VARS = {
    "API_URL": "api_url",
    "DB_PATH": "db_path",
    "INTERVAL_SEC": "interval_sec",
    "DURATION_MIN": "duration_min",
    "WINDOW_SEC": "window_sec",
    "NAMES_FILE": "names_file",
    "OUTPUT_PATH": "output_path",
    "REQUEST_TIMEOUT": "request_timeout",
    "PORT": "port",
}

class Settings(BaseModel):
    api_url: str = DEFAULT_API_URL
    db_path: str = "request_logs.db"
    interval_sec: int = Field(5, description="Seconds between probe requests", ge=0)
    duration_min: float = Field(10.0, description="How long a monitoring run lasts", gt=0)
    # Not range-checked here: the calculators reject non-positive sizes themselves
    window_sec: int = Field(60, description="Availability window size in seconds")
    names_file: str = "data/seed_names.csv"
    output_path: str = "index.html"
    request_timeout: float = Field(10.0, description="Read timeout for probe requests", gt=0)
    port: int = 8080

    def with_overrides(self, **overrides) -> "Settings":
        values = self.model_dump()
        values.update({key: value for key, value in overrides.items() if value is not None})
        return build_settings(values)

def build_settings(values: Mapping) -> Settings:
    try:
        return Settings(**values)
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err.get("loc"))
        raise ConfigurationError(f"Invalid configuration for {fields}: {e}") from e

def load_settings(environ: Optional[Mapping[str, str]] = None, use_dotenv: bool = True) -> Settings:
    """Build settings from environment variables (and a .env file when present)"""
    if environ is None:
        if use_dotenv:
            load_dotenv()
        environ = os.environ

    values = {}
    for env_name, field_name in ENV_VARS.items():
        raw = environ.get(env_name)
        if raw is not None and raw.strip() != "":
            values[field_name] = raw.strip()
    return build_settings(values)

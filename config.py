import os
from datetime import date
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Max origins tested per (item, container) first-fit scan; 0 = unbounded
    scan_limit: int = int(os.getenv("SCAN_LIMIT", "0"))

    export_filename: str = os.getenv("EXPORT_FILENAME", "cargo_arrangement.csv")
    # Mission date used for expiry checks; defaults to today
    start_date: Optional[date] = None

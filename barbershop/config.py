# barbershop/config.py

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# SQLite database (file-based) unless overridden
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./barbershop.db")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Scheduling grid and default working window (barbers without their own hours)
SLOT_MINUTES = int(os.getenv("SLOT_MINUTES", "15"))
DEFAULT_DAY_START = os.getenv("DEFAULT_DAY_START", "08:00")
DEFAULT_DAY_END = os.getenv("DEFAULT_DAY_END", "21:00")
# 0=Mon ... 6=Sun
DEFAULT_WORKING_DAYS = [
    int(day) for day in os.getenv("DEFAULT_WORKING_DAYS", "0,1,2,3,4,5").split(",") if day.strip()
]

# Upper bound for the conflict-check-and-commit critical section
LOCK_TIMEOUT_SECONDS = float(os.getenv("LOCK_TIMEOUT_SECONDS", "5"))

# Reads (availability, search, dashboard) are retried; commits never are
READ_RETRY_ATTEMPTS = int(os.getenv("READ_RETRY_ATTEMPTS", "3"))

SEARCH_DEFAULT_LIMIT = int(os.getenv("SEARCH_DEFAULT_LIMIT", "100"))
SEARCH_MAX_LIMIT = int(os.getenv("SEARCH_MAX_LIMIT", "500"))

SEED_CATALOG = os.getenv("SEED_CATALOG", "false").lower() == "true"

shop_settings = {
    "slot_minutes": SLOT_MINUTES,
    "day_start": DEFAULT_DAY_START,
    "day_end": DEFAULT_DAY_END,
    "working_days": DEFAULT_WORKING_DAYS,
    "lock_timeout_seconds": LOCK_TIMEOUT_SECONDS,
}

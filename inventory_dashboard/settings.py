import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")


def _get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# --- Path Configuration ---
INPUT_DIR = BASE_DIR / os.getenv("INPUT_DIR", "input")
INPUT_FILENAME = os.getenv("INPUT_FILENAME", "inventory.csv")

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_DIR = BASE_DIR / os.getenv("LOG_DIR", "logs")
LOG_FILENAME = os.getenv("LOG_FILENAME", "inventory_dashboard.log")
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", str(5 * 1024 * 1024)))
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "3"))

# --- Remote Forecasting Service ---
FORECAST_API_URL = os.getenv("FORECAST_API_URL", "http://localhost:5000")
FORECAST_TIMEOUT_SECONDS = float(os.getenv("FORECAST_TIMEOUT_SECONDS", "10"))
USE_REMOTE_FORECAST = _get_bool("USE_REMOTE_FORECAST", True)

# --- Batch Processing ---
MAX_WORKERS = int(os.getenv("MAX_WORKERS", "8"))

# --- Shared Business Logic ---
# Defaults are the fixed analytics constants; override only on purpose.
FORECAST_HORIZON_DAYS = int(os.getenv("FORECAST_HORIZON_DAYS", "7"))
FORECAST_TREND_DAMPING = float(os.getenv("FORECAST_TREND_DAMPING", "0.1"))
MIN_FORECAST_HISTORY = int(os.getenv("MIN_FORECAST_HISTORY", "7"))

TREND_WINDOW = int(os.getenv("TREND_WINDOW", "7"))
TREND_UP_FACTOR = float(os.getenv("TREND_UP_FACTOR", "1.1"))
TREND_DOWN_FACTOR = float(os.getenv("TREND_DOWN_FACTOR", "0.9"))

LOW_STOCK_DAYS = float(os.getenv("LOW_STOCK_DAYS", "3"))
OVERSTOCK_DAYS = float(os.getenv("OVERSTOCK_DAYS", "30"))

# Placeholder unit price used for the inventory value KPI.
UNIT_VALUE = float(os.getenv("UNIT_VALUE", "10"))

# Days of supply suggested by the reorder recommendations.
REORDER_DAYS_LOW_STOCK = 7
REORDER_DAYS_TRENDING_UP = 5

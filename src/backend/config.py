"""
Application configuration and constants.
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# API configuration
API_VERSION = "1.0.0"
API_TITLE = "Vault Allocation API"
API_DESCRIPTION = "Adaptive savings-vault allocation engine with fair cent distribution"

# CORS configuration
CORS_ORIGINS: List[str] = ["*"]  # In production, replace with specific origins
CORS_CREDENTIALS = True
CORS_METHODS = ["*"]
CORS_HEADERS = ["*"]

# Storage
DATA_DIR = Path(__file__).parent.parent.parent / "data"
DATABASE_URL = os.getenv("ALLOCATION_DB_URL", f"sqlite:///{DATA_DIR / 'allocations.db'}")

# Allocation defaults
DEFAULT_SAFE_BUFFER_PERCENT = float(os.getenv("DEFAULT_SAFE_BUFFER_PERCENT", "0.45"))
DEFAULT_MIN_BUFFER_PERCENT = float(os.getenv("DEFAULT_MIN_BUFFER_PERCENT", "0.35"))
DEFAULT_MAX_ALLOCATION_PERCENT = float(os.getenv("DEFAULT_MAX_ALLOCATION_PERCENT", "0.65"))
DEFAULT_RAMP_WINDOW_MONTHS = 3
DEFAULT_SAVING_TAX_RATE = float(os.getenv("DEFAULT_SAVING_TAX_RATE", "0.05"))

# Engine thresholds
COMMIT_THRESHOLD = 0.5  # currency units; smaller grants are suppressed
CRITICAL_URGENCY = 15.0
HIGH_URGENCY = 8.0
MODERATE_URGENCY = 4.0
MAX_FLOW_URGENCY = 30.0
DEFAULT_URGENCY = 0.5

# Adaptive buffer
UNDER_BUDGET_RATIO = 0.80
OVER_BUDGET_RATIO = 1.20
LOW_BALANCE_RATIO = 0.5
HIGH_BALANCE_RATIO = 2.0

# History sources
SOURCE_SMART_ALLOCATION = "SMART_ALLOCATION"
SOURCE_SAVING_TAX = "SAVING_TAX"
SOURCE_INCOME = "INCOME"

# Logging configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

"""
config.py
=========
Environment-driven settings for the Doctor Picker backend.
Values can be placed in a local .env file.
"""

import os
from dotenv import load_dotenv

load_dotenv()

# Local catalog database (SQLite file)
DB_PATH = os.getenv("PICKER_DB", "data/picker.db")

# Upstream reference data sources. Unset means "read the local catalog".
CITIES_URL = os.getenv("PICKER_CITIES_URL") or None
SPECIALTIES_URL = os.getenv("PICKER_SPECIALTIES_URL") or None
DOCTORS_URL = os.getenv("PICKER_DOCTORS_URL") or None

# Seconds before a remote reference fetch gives up
FETCH_TIMEOUT = float(os.getenv("PICKER_FETCH_TIMEOUT", "5"))

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("PICKER_CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("PICKER_LOG_LEVEL", "INFO").upper()

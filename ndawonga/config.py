"""Central configuration for the Ndawonga site API.

Runtime knobs live on the typed `Settings` object (Pydantic BaseSettings) so
the API can be built from explicit values in tests. Static data the services
share (default pricing table, chat reply texts) stays as module constants.
"""

from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv, find_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables once for the whole app
load_dotenv(find_dotenv())

# Paths
PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))  # repo root
DATA_DIR = os.path.join(PROJECT_ROOT, ".data")


class Settings(BaseSettings):
    """Runtime settings for the API and services.

    Values are loaded from environment variables and optional .env files.
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    APP_NAME: str = "Ndawonga Construction API"
    APP_VERSION: str = "1.0.0"
    ENV: str = "dev"

    # Persistence
    DB_PATH: str = os.path.join(DATA_DIR, "ndawonga.sqlite3")

    # Optional JSON file overriding the default pricing data below
    PRICING_TABLE_PATH: Optional[str] = None

    # Chat
    DEFAULT_SESSION_ID: str = "web-session"
    SESSION_HEADER: str = "x-session-id"
    TENDER_REPLY_LIMIT: int = 5

    # HTTP / logging
    CORS_ORIGINS: str = "*"
    LOG_LEVEL: str = "INFO"
    REQUEST_LOGS: bool = True

    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


# --- Pricing defaults (ZAR per m²) --- #
DEFAULT_CATEGORY = "Other"
DEFAULT_COMPLEXITY = "medium"

BASE_RATES = {
    "Road Construction": 950.0,
    "Bulk Earthworks": 450.0,
    "Water & Sanitation": 700.0,
    "Waste Management": 550.0,
    "Other": 600.0,
}

COMPLEXITY_MULTIPLIERS = {
    "low": 0.9,
    "medium": 1.0,
    "high": 1.25,
}

# Fixed contingency surcharge applied to every estimate
CONTINGENCY_RATE = 0.12

# Upper bound on a usable project area (m²); larger inputs are clamped to it
MAX_AREA_SQ_M = 1e9

# --- Chat replies --- #
GREETING_REPLY = (
    "Hi! I'm the Ndawonga assistant. Ask about tenders, projects, certificates, "
    "or request a quote."
)
PROJECTS_REPLY = "You can view our projects on the Projects page or request a quote there."
CERTIFICATES_REPLY = (
    "Certificates are in the Documents area. For official copies submit a contact request."
)
NO_TENDERS_REPLY = "No active tenders currently."
TENDERS_HEADER = "Current tenders:"
MISSING_CLOSING_DATE = "N/A"

CERTIFICATE_KEYWORDS = ("bbbee", "certificate", "cidb")

import os
import sys
from pathlib import Path
from dotenv import load_dotenv

# Load .env FIRST before anything else
BASE_DIR = Path.cwd()
load_dotenv(BASE_DIR / ".env")


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class Settings:
    BASE_DIR: Path = BASE_DIR
    APP_NAME: str = "Session Scheduler"
    DEBUG: bool = _flag("DEBUG", "false")

    # FastAPI
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))
    CORS_ORIGINS: list = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()
    LOG_FILE: str = os.getenv("LOG_FILE", "")

    # Google Calendar / Drive
    GOOGLE_CREDENTIALS_FILE: str = str(BASE_DIR / os.getenv("GOOGLE_CREDENTIALS_FILE", "credentials.json"))
    GOOGLE_TOKEN_FILE: str = str(BASE_DIR / os.getenv("GOOGLE_TOKEN_FILE", "token.json"))
    GOOGLE_SCOPES: list = [
        "https://www.googleapis.com/auth/calendar",
        "https://www.googleapis.com/auth/drive.readonly",
    ]
    MOCK_CALENDAR: bool = _flag("MOCK_CALENDAR", "true")

    # Meeting pairing: "zoom" embeds a Zoom meeting in the event description,
    # "google_meet" lets Calendar attach its own Meet conference.
    PAIRING_STRATEGY: str = os.getenv("PAIRING_STRATEGY", "zoom").lower()

    # Zoom server-to-server OAuth app
    ZOOM_ACCOUNT_ID: str = os.getenv("ZOOM_ACCOUNT_ID", "")
    ZOOM_CLIENT_ID: str = os.getenv("ZOOM_CLIENT_ID", "")
    ZOOM_CLIENT_SECRET: str = os.getenv("ZOOM_CLIENT_SECRET", "")
    ZOOM_TIMEOUT_SECONDS: float = float(os.getenv("ZOOM_TIMEOUT_SECONDS", "15"))
    MOCK_ZOOM: bool = _flag("MOCK_ZOOM", "true")

    RECORDING_LOOKUP_WORKERS: int = int(os.getenv("RECORDING_LOOKUP_WORKERS", "4"))

    # Mock calendar organizer
    SENDER_EMAIL: str = os.getenv("SENDER_EMAIL", "")


settings = Settings()

# Debug print on import
if settings.DEBUG:
    print(f"[CONFIG] PAIRING     = {settings.PAIRING_STRATEGY}", file=sys.stderr)
    print(f"[CONFIG] SENDER_EMAIL= {settings.SENDER_EMAIL}", file=sys.stderr)
    print(f"[CONFIG] MOCK_CAL    = {settings.MOCK_CALENDAR}", file=sys.stderr)
    print(f"[CONFIG] MOCK_ZOOM   = {settings.MOCK_ZOOM}", file=sys.stderr)
    print(f"[CONFIG] CREDENTIALS = {settings.GOOGLE_CREDENTIALS_FILE}", file=sys.stderr)

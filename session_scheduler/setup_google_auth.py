"""
One-time Google OAuth setup for the session scheduler.

Authorizes Calendar (events + organizer lookup) and read-only Drive (Meet
recordings), writes token.json, then checks the token by reading the
organizer's primary calendar.

Usage:
    session-scheduler-auth
"""

import os
import sys

from google_auth_oauthlib.flow import InstalledAppFlow

from session_scheduler.config import settings
from session_scheduler.errors import SchedulerError
from session_scheduler.services.calendar_service import CalendarService, load_credentials

# Fix Windows console encoding
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")


def _authorize(credentials_file: str, token_file: str, scopes: list[str]) -> None:
    print("[INFO] Opening browser for Google sign-in...")
    print("       Grant calendar access, and Drive read access for Meet recordings.")
    flow = InstalledAppFlow.from_client_secrets_file(credentials_file, scopes)
    creds = flow.run_local_server(port=0)
    with open(token_file, "w") as f:
        f.write(creds.to_json())
    print(f"[OK] Token saved to: {token_file}")


def _existing_token_works(token_file: str, scopes: list[str]) -> bool:
    if not os.path.exists(token_file):
        return False
    try:
        load_credentials(token_file, scopes)
    except SchedulerError as exc:
        print(f"[WARN] {exc.message}")
        return False
    return True


def main():
    print("=" * 60)
    print("  Session Scheduler: Google OAuth Setup")
    print("=" * 60)
    print(f"  Credentials file: {settings.GOOGLE_CREDENTIALS_FILE}")
    print(f"  Token file:       {settings.GOOGLE_TOKEN_FILE}")
    print(f"  Scopes:           {', '.join(settings.GOOGLE_SCOPES)}")
    print()

    if _existing_token_works(settings.GOOGLE_TOKEN_FILE, settings.GOOGLE_SCOPES):
        print("[OK] Existing token is valid.")
    elif not os.path.exists(settings.GOOGLE_CREDENTIALS_FILE):
        print("[ERROR] OAuth client file not found. Download it from Google Cloud Console:")
        print("        https://console.cloud.google.com/apis/credentials")
        sys.exit(1)
    else:
        _authorize(settings.GOOGLE_CREDENTIALS_FILE, settings.GOOGLE_TOKEN_FILE, settings.GOOGLE_SCOPES)

    try:
        organizer = CalendarService.from_token_file(settings.GOOGLE_TOKEN_FILE, settings.GOOGLE_SCOPES).get_organizer()
    except SchedulerError as exc:
        print(f"[ERROR] Token written but Calendar rejected it: {exc.message}")
        sys.exit(1)

    print(f"[OK] Sessions will be created on the calendar of {organizer['email']}.")
    print("     Set MOCK_CALENDAR=false in your .env file to use it.")


if __name__ == "__main__":
    main()

"""Configuration for Job Status Tracker."""

from dotenv import load_dotenv
from pathlib import Path

load_dotenv(Path(__file__).parent / ".env")

import os

BASE_DIR = Path(__file__).parent
CREDENTIALS_PATH = BASE_DIR / "credentials.json"
TOKEN_PATH = BASE_DIR / "token.json"
DATABASE_PATH = BASE_DIR / "applications.db"
ERRORS_LOG_PATH = BASE_DIR / "errors.log"

SHEETS_SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive.file",
]

DEFAULT_STATUS_COLOR = "#3b82f6"

# Shipped board. Restore-defaults brings the collection back to exactly this.
DEFAULT_STATUSES = [
    {"id": "wishlist", "name": "Wishlist", "color": "#4A90E2", "order": 0, "is_default": True, "is_system": True},
    {"id": "applied", "name": "Applied", "color": "#F5A623", "order": 1, "is_default": False, "is_system": True},
    {"id": "interview", "name": "Interview", "color": "#7ED321", "order": 2, "is_default": False, "is_system": True},
    {"id": "rejected", "name": "Rejected", "color": "#D0021B", "order": 3, "is_default": False, "is_system": True},
]

MIGRATION_LOG_LIMIT = 100


def get_database_path() -> Path:
    override = os.environ.get("TRACKER_DATABASE_PATH", "").strip()
    return Path(override) if override else DATABASE_PATH


def get_google_token() -> str:
    return os.environ.get("GOOGLE_TOKEN", "").strip()


def get_spreadsheet_id() -> str:
    return os.environ.get("SPREADSHEET_ID", "").strip()


def save_spreadsheet_id_to_env(spreadsheet_id: str) -> None:
    env_path = BASE_DIR / ".env"
    lines = []
    key_found = False
    if env_path.exists():
        with open(env_path) as f:
            for line in f:
                if line.strip().startswith("SPREADSHEET_ID="):
                    lines.append(f"SPREADSHEET_ID={spreadsheet_id}\n")
                    key_found = True
                else:
                    lines.append(line)
    if not key_found:
        lines.append(f"SPREADSHEET_ID={spreadsheet_id}\n")
    with open(env_path, "w") as f:
        f.writelines(lines)

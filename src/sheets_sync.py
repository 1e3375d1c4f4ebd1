"""Google Sheets export - 2 tabs: Board (jobs by status), Statuses."""

import json
from typing import Optional

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

import config
from src import workflow

BOARD_SHEET_ID = 0
STATUSES_SHEET_ID = 1
UNKNOWN_STATUS_COLOR = "#FFFFFF"


def get_sheets_credentials():
    """Get or refresh credentials. Env token first, then token.json, then first-time browser flow."""
    creds = None
    token_json = config.get_google_token()

    if token_json:
        try:
            creds = Credentials.from_authorized_user_info(json.loads(token_json), config.SHEETS_SCOPES)
        except ValueError:
            creds = None

    if not creds and config.TOKEN_PATH.exists():
        creds = Credentials.from_authorized_user_file(str(config.TOKEN_PATH), config.SHEETS_SCOPES)

    if not creds and config.CREDENTIALS_PATH.exists():
        flow = InstalledAppFlow.from_client_secrets_file(
            str(config.CREDENTIALS_PATH), config.SHEETS_SCOPES
        )
        creds = flow.run_local_server(port=0)

        # Save token for next run
        with open(config.TOKEN_PATH, "w") as f:
            f.write(creds.to_json())

    if creds and creds.expired and creds.refresh_token:
        creds.refresh(Request())

    return creds


def get_sheets_service():
    """Build Sheets API service."""
    creds = get_sheets_credentials()
    if not creds:
        raise ValueError(
            "No credentials for Sheets API. Put credentials.json next to config.py "
            "or set GOOGLE_TOKEN."
        )
    return build("sheets", "v4", credentials=creds)


def create_new_spreadsheet(title: str = "Job Status Board", service=None) -> str:
    """Create new Google Sheet, return spreadsheet ID."""
    service = service or get_sheets_service()

    spreadsheet = {
        "properties": {"title": title},
        "sheets": [
            {"properties": {"sheetId": BOARD_SHEET_ID, "title": "Board", "gridProperties": {"frozenRowCount": 1}}},
            {"properties": {"sheetId": STATUSES_SHEET_ID, "title": "Statuses", "gridProperties": {"frozenRowCount": 1}}},
        ],
    }

    sheet = service.spreadsheets().create(body=spreadsheet).execute()
    return sheet["spreadsheetId"]


def hex_to_rgb(hex_str: str) -> tuple[float, float, float]:
    """'#4A90E2' -> (r, g, b) in 0-1. Anything unparseable is white."""
    hex_str = (hex_str or "").lstrip("#")
    if len(hex_str) == 3:
        hex_str = "".join(c * 2 for c in hex_str)
    try:
        return tuple(int(hex_str[i:i+2], 16) / 255 for i in (0, 2, 4))
    except ValueError:
        return (1.0, 1.0, 1.0)


def _background_request(sheet_id: int, row_idx: int, hex_color: str, column: Optional[int] = None) -> dict:
    r, g, b = hex_to_rgb(hex_color)
    cell_range = {"sheetId": sheet_id, "startRowIndex": row_idx, "endRowIndex": row_idx + 1}
    if column is not None:
        cell_range.update({"startColumnIndex": column, "endColumnIndex": column + 1})
    return {
        "repeatCell": {
            "range": cell_range,
            "cell": {"userEnteredFormat": {"backgroundColor": {"red": r, "green": g, "blue": b}}},
            "fields": "userEnteredFormat.backgroundColor",
        }
    }


def _reset_background_request(sheet_id: int, start_column: int, end_column: int) -> dict:
    """Clear background colour from row 2 down, so rows emptied by a shrinking board go blank."""
    return {
        "repeatCell": {
            "range": {
                "sheetId": sheet_id,
                "startRowIndex": 1,
                "startColumnIndex": start_column,
                "endColumnIndex": end_column,
            },
            "cell": {"userEnteredFormat": {}},
            "fields": "userEnteredFormat.backgroundColor",
        }
    }


def _replace_values(service, spreadsheet_id: str, range_name: str, rows: list[list]) -> None:
    service.spreadsheets().values().clear(
        spreadsheetId=spreadsheet_id, range=range_name,
    ).execute()
    service.spreadsheets().values().update(
        spreadsheetId=spreadsheet_id, range=range_name,
        valueInputOption="USER_ENTERED", body={"values": rows},
    ).execute()


def board_rows(statuses: list[dict], jobs: list[dict]) -> tuple[list[list], list[str]]:
    """
    Rows for the Board tab plus the colour of each data row.
    Jobs are grouped by status order; jobs on an unknown status go last.
    """
    ordered = workflow.sort_statuses(statuses)
    position = {s["id"]: i for i, s in enumerate(ordered)}
    by_id = {s["id"]: s for s in ordered}

    sorted_jobs = sorted(
        jobs,
        key=lambda j: (position.get(j.get("status"), len(ordered)), (j.get("company") or "").lower()),
    )
    rows = [["Company", "Position", "Status", "Date Applied", "Notes"]]
    colors = []
    for job in sorted_jobs:
        status = by_id.get(job.get("status"))
        rows.append([
            job.get("company", ""),
            job.get("position", ""),
            status["name"] if status else job.get("status", ""),
            job.get("date_applied") or "",
            job.get("notes") or "",
        ])
        colors.append(status["color"] if status else UNKNOWN_STATUS_COLOR)
    return rows, colors


def status_rows(statuses: list[dict]) -> list[list]:
    rows = [["Order", "Id", "Name", "Color", "Default", "System"]]
    for status in workflow.sort_statuses(statuses):
        rows.append([
            status["order"],
            status["id"],
            status["name"],
            status["color"],
            "Yes" if status["is_default"] else "No",
            "Yes" if status["is_system"] else "No",
        ])
    return rows


def sync_board(spreadsheet_id: str, statuses: list[dict], jobs: list[dict], service=None) -> None:
    """Write both tabs and colour Board rows by their status colour."""
    service = service or get_sheets_service()

    rows, colors = board_rows(statuses, jobs)
    _replace_values(service, spreadsheet_id, "Board!A1:E", rows)

    s_rows = status_rows(statuses)
    _replace_values(service, spreadsheet_id, "Statuses!A1:F", s_rows)

    # Resets go first; batchUpdate applies requests in order
    color_requests = [
        _reset_background_request(BOARD_SHEET_ID, 0, 5),
        _reset_background_request(STATUSES_SHEET_ID, 3, 4),
    ]
    color_requests.extend(
        _background_request(BOARD_SHEET_ID, i + 1, color) for i, color in enumerate(colors)
    )
    color_requests.extend(
        _background_request(STATUSES_SHEET_ID, i + 1, row[3], column=3) for i, row in enumerate(s_rows[1:])
    )
    service.spreadsheets().batchUpdate(
        spreadsheetId=spreadsheet_id, body={"requests": color_requests},
    ).execute()


def get_sheet_url(spreadsheet_id: str) -> str:
    """Get view URL for the sheet."""
    return f"https://docs.google.com/spreadsheets/d/{spreadsheet_id}"


def get_excel_download_url(spreadsheet_id: str) -> str:
    """Get Excel download URL."""
    return f"https://docs.google.com/spreadsheets/d/{spreadsheet_id}/export?format=xlsx"

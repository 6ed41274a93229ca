import logging
import os
from functools import lru_cache

from dotenv import load_dotenv
from google.oauth2 import service_account
from googleapiclient.discovery import build

load_dotenv()

logger = logging.getLogger(__name__)

SPREADSHEET_ID = os.getenv("SPREADSHEET_ID")
SHEET_RANGE = os.getenv("SHEET_RANGE", "Sheet1!A:F")
SERVICE_ACCOUNT_EMAIL = os.getenv("GOOGLE_SERVICE_ACCOUNT_EMAIL")
PRIVATE_KEY = os.getenv("GOOGLE_PRIVATE_KEY", "")
SLOT_CAPACITY = int(os.getenv("SLOT_CAPACITY", "40"))

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
TOKEN_URI = "https://oauth2.googleapis.com/token"


def build_credentials(client_email: str, private_key: str):
    if not client_email or not private_key:
        raise RuntimeError("Missing GOOGLE_SERVICE_ACCOUNT_EMAIL/GOOGLE_PRIVATE_KEY in env")
    info = {
        "client_email": client_email,
        # keys pasted into .env usually carry escaped newlines
        "private_key": private_key.replace("\\n", "\n"),
        "token_uri": TOKEN_URI,
    }
    return service_account.Credentials.from_service_account_info(info, scopes=SCOPES)


class SheetRowStore:
    """Append-only view of one spreadsheet range.

    Rows come back as lists of strings, in sheet order. The Sheets API drops
    trailing empty cells, so a row may be shorter than the range is wide.
    The API client is built on first use, so a misconfigured deployment
    still answers validation errors without touching the network.
    """

    def __init__(self, spreadsheet_id, sheet_range: str = SHEET_RANGE, service=None):
        self.spreadsheet_id = spreadsheet_id
        self.sheet_range = sheet_range
        self._service = service

    @property
    def service(self):
        if self._service is None:
            if not self.spreadsheet_id:
                raise RuntimeError("Missing SPREADSHEET_ID in env")
            credentials = build_credentials(SERVICE_ACCOUNT_EMAIL, PRIVATE_KEY)
            self._service = build("sheets", "v4", credentials=credentials, cache_discovery=False)
            logger.info("Sheets client ready for %s (%s)", self.spreadsheet_id, self.sheet_range)
        return self._service

    def get_rows(self) -> list[list[str]]:
        result = self.service.spreadsheets().values().get(
            spreadsheetId=self.spreadsheet_id,
            range=self.sheet_range,
        ).execute()
        rows = result.get("values", [])
        if not isinstance(rows, list):
            raise ValueError(f"Unexpected values payload from Sheets API: {type(rows).__name__}")
        return rows

    def append_row(self, row: list[str]) -> None:
        self.service.spreadsheets().values().append(
            spreadsheetId=self.spreadsheet_id,
            range=self.sheet_range,
            valueInputOption="RAW",
            body={"values": [row]},
        ).execute()


@lru_cache(maxsize=1)
def get_row_store() -> SheetRowStore:
    return SheetRowStore(SPREADSHEET_ID, SHEET_RANGE)

import logging
import re
import time
from typing import Dict, List, Optional

import requests

from photoslurp.config import DEFAULT_TIMEOUT
from photoslurp.errors import AuthFailure, NetworkError, RateLimited, StoreFailure
from photoslurp.retry import call_with_retry

logger = logging.getLogger(__name__)

SHEETS_URL = "https://sheets.googleapis.com/v4/spreadsheets"

RATE_LIMIT_REASONS = ("RATE_LIMIT_EXCEEDED", "rateLimitExceeded", "userRateLimitExceeded")


def get_headers(token: str) -> dict:
    """
    Return headers for authorized requests to the Sheets API.
    """
    return {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json"
    }


def column_letter(index: int) -> str:
    """
    0-based column index -> A1 column letters (0 -> A, 25 -> Z, 26 -> AA).
    """
    letters = ""
    index += 1
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def row_from_range(a1_range: str) -> Optional[int]:
    """
    'Sheet1!A7:K7' -> 7. None if the range has no row number.
    """
    match = re.search(r"![A-Z]+(\d+)", a1_range) or re.match(r"[A-Z]+(\d+)", a1_range)
    return int(match.group(1)) if match else None


def check_response(resp):
    """
    Map an HTTP response onto the error taxonomy. Returns parsed JSON on success.
    """
    if resp.status_code == 200:
        return resp.json() if resp.text else {}
    if resp.status_code == 401:
        raise AuthFailure(f"Sheets API unauthorized: {resp.text}")
    if resp.status_code == 429:
        raise RateLimited(f"Sheets API rate limit: {resp.text}")
    if resp.status_code == 403:
        if any(reason in resp.text for reason in RATE_LIMIT_REASONS):
            raise RateLimited(f"Sheets API quota exceeded: {resp.text}")
        raise StoreFailure(f"Permission denied on spreadsheet: {resp.text}")
    if resp.status_code == 404:
        raise StoreFailure(f"Spreadsheet not found: {resp.text}")
    if resp.status_code >= 500:
        raise NetworkError(f"Sheets API error {resp.status_code}: {resp.text}")
    raise StoreFailure(f"Sheets API error {resp.status_code}: {resp.text}")


class SheetsClient:
    """
    Minimal Sheets v4 values client. Every call goes through call_with_retry,
    so an expired token is refreshed and the identical request repeated.
    """

    def __init__(self, spreadsheet_id: str, token_supplier, worksheet: str = None,
                 session=None, timeout=DEFAULT_TIMEOUT, sleep=time.sleep):
        self.spreadsheet_id = spreadsheet_id
        self.token_supplier = token_supplier
        self.worksheet = worksheet
        self.timeout = timeout
        self.sleep = sleep
        self._session = session

    @property
    def session(self):
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def qualify(self, a1_range: str) -> str:
        """Prefix a range with the worksheet name; no prefix means the first sheet."""
        if self.worksheet:
            return f"'{self.worksheet}'!{a1_range}"
        return a1_range

    def _send(self, method: str, path: str, params=None, body=None):
        url = f"{SHEETS_URL}/{self.spreadsheet_id}{path}"
        headers = get_headers(self.token_supplier.get_token())
        try:
            resp = self.session.request(method, url, headers=headers, params=params,
                                        json=body, timeout=self.timeout)
        except requests.RequestException as e:
            raise NetworkError(f"Sheets API request failed: {e}") from e
        return check_response(resp)

    def _request(self, method: str, path: str, params=None, body=None, idempotent=True):
        return call_with_retry(
            lambda: self._send(method, path, params=params, body=body),
            token_supplier=self.token_supplier,
            idempotent=idempotent,
            sleep=self.sleep,
            description=f"{method} {path}",
        )

    def get_values(self, a1_range: str, major_dimension: str = "ROWS") -> List[List[str]]:
        data = self._request(
            "GET",
            f"/values/{self.qualify(a1_range)}",
            params={"majorDimension": major_dimension},
        )
        return data.get("values", [])

    def read_column(self, letter: str) -> List[str]:
        """
        Every cell of one column, row 1 first. Blank cells come back as "",
        trailing blanks are dropped by the API.
        """
        values = self.get_values(f"{letter}:{letter}", major_dimension="COLUMNS")
        return list(values[0]) if values else []

    def read_cell(self, a1_cell: str) -> str:
        values = self.get_values(a1_cell)
        if values and values[0]:
            return values[0][0]
        return ""

    def update_values(self, a1_range: str, rows: List[List[str]]):
        return self._request(
            "PUT",
            f"/values/{self.qualify(a1_range)}",
            params={"valueInputOption": "RAW"},
            body={"range": self.qualify(a1_range), "values": rows},
        )

    def batch_update_values(self, updates: Dict[str, List[List[str]]]):
        body = {
            "valueInputOption": "RAW",
            "data": [
                {"range": self.qualify(a1_range), "values": rows}
                for a1_range, rows in updates.items()
            ],
        }
        return self._request("POST", "/values:batchUpdate", body=body)

    def append_values(self, a1_range: str, rows: List[List[str]]) -> Optional[int]:
        """
        Append after the last row of the table; the API picks the row.
        Returns the first row number written, if reported.
        A lost response raises NetworkError without a resend; the caller
        has to check whether the row landed.
        """
        data = self._request(
            "POST",
            f"/values/{self.qualify(a1_range)}:append",
            params={"valueInputOption": "RAW", "insertDataOption": "INSERT_ROWS"},
            body={"values": rows},
            idempotent=False,
        )
        updated_range = data.get("updates", {}).get("updatedRange", "")
        return row_from_range(updated_range)

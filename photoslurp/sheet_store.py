import logging
import time
from typing import Dict, List, Optional

from photoslurp.config import HEADERS, MAX_BACKOFF_ATTEMPTS
from photoslurp.errors import NetworkError, StoreFailure
from photoslurp.local_store import TabularStore
from photoslurp.models import PhotoRecord
from photoslurp.sheets_api import column_letter

logger = logging.getLogger(__name__)

URL_INDEX = HEADERS.index("url")
URL_COLUMN = column_letter(URL_INDEX)
USABLE_TAG_COLUMN = column_letter(HEADERS.index("usable_tag"))
LAST_COLUMN = column_letter(len(HEADERS) - 1)


def row_range(row: int) -> str:
    return f"A{row}:{LAST_COLUMN}{row}"


class SpreadsheetStore(TabularStore):
    """
    Read-modify-write sync into a Google Spreadsheet, one record at a time.

    Only the url column is scanned to find an existing row, and only the
    usable_tag cell of that row is read back, so a large sheet is never
    downloaded whole. Existing rows are rewritten in place, new rows are
    appended and the API picks their position.

    A non-empty usable_tag in the sheet always wins over the harvested one;
    that column belongs to the humans curating the sheet.

    update_batch_size > 1 buffers in-place updates and writes them in one
    batchUpdate call. debug=True performs every read and skips every write.
    """

    def __init__(self, client, debug: bool = False, update_batch_size: int = 1,
                 cache_columns: bool = True, sleep=time.sleep):
        self.client = client
        self.debug = debug
        self.update_batch_size = update_batch_size
        self.cache_columns = cache_columns
        self.sleep = sleep
        self._urls: Optional[List[str]] = None
        self._pending: Dict[int, List[str]] = {}
        self.rows_updated = 0
        self.rows_appended = 0

    # -----------------------------
    # READS
    # -----------------------------

    def header(self) -> List[str]:
        current = self.client.get_values(f"A1:{LAST_COLUMN}1")
        current = current[0] if current else []
        if not any(current):
            print("Spreadsheet is empty, writing header row.")
            if not self.debug:
                self.client.update_values(row_range(1), [list(HEADERS)])
            return list(HEADERS)
        if current[:len(HEADERS)] != HEADERS:
            raise StoreFailure(
                f"Spreadsheet header {current} does not match expected columns {HEADERS}"
            )
        return current

    def _url_column(self) -> List[str]:
        if self._urls is None or not self.cache_columns:
            self._urls = self.client.read_column(URL_COLUMN)
        return self._urls

    def find(self, source_url: str) -> Optional[int]:
        urls = self._url_column()
        # row 1 is the header
        for index, value in enumerate(urls[1:], start=2):
            if value == source_url:
                return index
        return None

    def stored_usable_tag(self, row: int) -> str:
        if row in self._pending:
            return self._pending[row][HEADERS.index("usable_tag")]
        return self.client.read_cell(f"{USABLE_TAG_COLUMN}{row}")

    # -----------------------------
    # WRITES
    # -----------------------------

    def upsert(self, record: PhotoRecord):
        row = self.find(record.source_url)
        if row is not None:
            existing = self.stored_usable_tag(row)
            if existing:
                record.usable_tag = existing
            self._update(row, record.to_row())
        else:
            self._append(record.to_row())

    def _update(self, row: int, values: List[str]):
        if self.debug:
            logger.info("Debug mode, not updating row %d", row)
            return
        self._pending[row] = values
        self.rows_updated += 1
        if len(self._pending) >= self.update_batch_size:
            self._write_pending()

    def _append(self, values: List[str]):
        url = values[URL_INDEX]
        if self.debug:
            logger.info("Debug mode, not appending %s", url)
            return
        failures = 0
        while True:
            try:
                row = self.client.append_values(row_range(1), [values])
                break
            except NetworkError as e:
                # the append may have landed before the response was lost
                failures += 1
                if failures >= MAX_BACKOFF_ATTEMPTS:
                    raise
                delay = failures ** 2
                logger.warning("Append of %s may not have landed (%s), checking again in %ds",
                               url, e, delay)
                self.sleep(delay)
                self._urls = None
                existing = self.find(url)
                if existing is not None:
                    logger.info("%s already landed at row %d", url, existing)
                    self.rows_appended += 1
                    return

        self.rows_appended += 1
        if self._urls is not None and self.cache_columns:
            if row is None:
                # position unknown, rescan next time
                self._urls = None
            else:
                while len(self._urls) < row:
                    self._urls.append("")
                self._urls[row - 1] = url

    def _write_pending(self):
        if not self._pending:
            return
        # taken off the buffer first so a failed write is never sent twice
        pending, self._pending = self._pending, {}
        if len(pending) == 1:
            (row, values), = pending.items()
            self.client.update_values(row_range(row), [values])
        else:
            self.client.batch_update_values(
                {row_range(row): [values] for row, values in pending.items()}
            )

    def flush(self):
        self._write_pending()

    def abort(self):
        if self._pending:
            logger.warning("Dropping %d buffered row updates after a failed sync",
                           len(self._pending))
        self._pending = {}

import abc
import csv
import datetime
import logging
from pathlib import Path
from typing import List, Optional

from photoslurp.config import CSV_PREFIX, HEADERS
from photoslurp.models import PhotoRecord

logger = logging.getLogger(__name__)


class TabularStore(abc.ABC):
    """
    Where harvested records end up. Rows are appended or updated in place,
    never deleted.
    """

    @abc.abstractmethod
    def header(self) -> List[str]:
        """Make sure the header row exists and return it."""

    @abc.abstractmethod
    def find(self, source_url: str) -> Optional[int]:
        """1-based row number of the row holding source_url, or None."""

    @abc.abstractmethod
    def upsert(self, record: PhotoRecord):
        pass

    @abc.abstractmethod
    def flush(self):
        pass

    def close(self):
        self.flush()

    def abort(self):
        """Release resources after a failed sync without writing anything more."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None or issubclass(exc_type, KeyboardInterrupt):
            self.close()
        else:
            self.abort()


def unique_filename(path: Path) -> Path:
    """
    If 'path' already exists, append (1), (2), etc. until we find a free name.
    """
    if not path.exists():
        return path
    base = path.stem
    ext = path.suffix
    counter = 1
    while True:
        new_name = f"{base}({counter}){ext}"
        new_path = path.with_name(new_name)
        if not new_path.exists():
            return new_path
        counter += 1


def csv_path(output_dir: Path, now: datetime.datetime = None) -> Path:
    """
    photoslurp-YYYY-MM-DD-<epoch>.csv, made unique if a run in the same
    second already claimed the name.
    """
    now = now or datetime.datetime.now()
    name = f"{CSV_PREFIX}-{now.strftime('%Y-%m-%d')}-{int(now.timestamp())}.csv"
    return unique_filename(Path(output_dir) / name)


class CsvStore(TabularStore):
    """
    Append-only observation log. Every upsert is a new line; nothing is
    deduplicated. In debug mode no file is created at all.
    """

    def __init__(self, output_dir=".", debug: bool = False, now: datetime.datetime = None):
        self.debug = debug
        self.path = None
        self._file = None
        self._writer = None
        self.rows_written = 0
        if not debug:
            output_dir = Path(output_dir)
            output_dir.mkdir(parents=True, exist_ok=True)
            self.path = csv_path(output_dir, now)
            self._file = open(self.path, "w", newline="")
            self._writer = csv.writer(self._file)
            self._writer.writerow(HEADERS)
            print(f"Writing to {self.path}")

    def header(self) -> List[str]:
        return list(HEADERS)

    def find(self, source_url: str) -> Optional[int]:
        return None

    def upsert(self, record: PhotoRecord):
        if self.debug:
            logger.debug("Debug mode, not writing %s", record.source_url)
            return
        self._writer.writerow(record.to_row())
        self.rows_written += 1

    def flush(self):
        if self._file is not None:
            self._file.flush()

    def close(self):
        if self._file is not None:
            self._file.close()
            self._file = None

    def abort(self):
        # rows already handed to the writer were committed, so keep them
        self.close()

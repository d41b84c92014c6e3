from __future__ import annotations

import csv
import datetime

from photoslurp.config import HEADERS
from photoslurp.local_store import CsvStore, csv_path, unique_filename
from photoslurp.models import PhotoRecord, ProviderName

NOW = datetime.datetime(2015, 3, 1, 12, 0, 0)


def make_record(url, license="CC BY"):
    return PhotoRecord(
        provider=ProviderName.FLICKR,
        tag="morganfire01",
        taken_at=datetime.datetime(2015, 2, 28, 9, 15),
        username="alice",
        source_url=url,
        license=license,
    )


def read_rows(path):
    with open(path, newline="") as f:
        return list(csv.reader(f))


class TestCsvPath:
    def test_name_embeds_date_and_start_time(self, tmp_path) -> None:
        path = csv_path(tmp_path, NOW)
        assert path.name == f"photoslurp-2015-03-01-{int(NOW.timestamp())}.csv"

    def test_collisions_get_a_suffix(self, tmp_path) -> None:
        first = csv_path(tmp_path, NOW)
        first.write_text("taken")
        second = csv_path(tmp_path, NOW)
        assert second != first
        assert second.name.endswith("(1).csv")

    def test_unique_filename_counts_up(self, tmp_path) -> None:
        (tmp_path / "a.csv").write_text("")
        (tmp_path / "a(1).csv").write_text("")
        assert unique_filename(tmp_path / "a.csv").name == "a(2).csv"


class TestCsvStore:
    def test_header_and_rows(self, tmp_path) -> None:
        with CsvStore(tmp_path, now=NOW) as store:
            store.upsert(make_record("http://x/1"))
        rows = read_rows(store.path)
        assert rows[0] == HEADERS
        assert rows[1][HEADERS.index("license")] == "CC BY"
        assert rows[1][HEADERS.index("datetime")] == "2015-02-28T09:15:00"

    def test_append_only_keeps_duplicates(self, tmp_path) -> None:
        with CsvStore(tmp_path, now=NOW) as store:
            assert store.find("http://x/1") is None
            store.upsert(make_record("http://x/1"))
            store.upsert(make_record("http://x/1"))
        assert len(read_rows(store.path)) == 3
        assert store.rows_written == 2

    def test_two_runs_never_collide(self, tmp_path) -> None:
        with CsvStore(tmp_path, now=NOW) as first:
            first.upsert(make_record("http://x/1"))
        with CsvStore(tmp_path, now=NOW) as second:
            second.upsert(make_record("http://x/2"))
        assert first.path != second.path
        assert len(read_rows(first.path)) == 2

    def test_debug_creates_no_file(self, tmp_path) -> None:
        with CsvStore(tmp_path, debug=True, now=NOW) as store:
            store.upsert(make_record("http://x/1"))
        assert store.path is None
        assert list(tmp_path.iterdir()) == []

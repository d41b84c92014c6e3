from __future__ import annotations

import datetime

from photoslurp.config import HEADERS
from photoslurp.models import PhotoRecord, ProviderName


class TestPhotoRecord:
    def test_row_follows_header_order(self) -> None:
        record = PhotoRecord(
            provider=ProviderName.FLICKR,
            tag="morganfire01",
            taken_at=datetime.datetime(2015, 3, 1, 12, 30),
            username="alice",
            source_url="http://x/1",
            image_url="http://img/o.jpg",
            image_url_m="http://img/c.jpg",
            image_url_s="http://img/m.jpg",
            license="CC BY",
            title="sunset",
        )
        row = dict(zip(HEADERS, record.to_row()))
        assert row == {
            "provider": "Flickr",
            "tag": "morganfire01",
            "datetime": "2015-03-01T12:30:00",
            "username": "alice",
            "usable_tag": "",
            "image_url": "http://img/o.jpg",
            "url": "http://x/1",
            "image_url_s": "http://img/m.jpg",
            "image_url_m": "http://img/c.jpg",
            "license": "CC BY",
            "title": "sunset",
        }

    def test_missing_urls_become_empty_cells(self) -> None:
        record = PhotoRecord(
            provider=ProviderName.TWITTER,
            tag="t",
            taken_at=datetime.datetime(2015, 3, 1),
            username=None,
            source_url="http://x/2",
        )
        row = record.to_row()
        assert len(row) == len(HEADERS)
        assert row[HEADERS.index("image_url")] == ""
        assert row[HEADERS.index("license")] == "all rights reserved"

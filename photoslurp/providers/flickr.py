import datetime

from photoslurp.errors import ProviderFailure, RecordSkipped
from photoslurp.licenses import decode_license
from photoslurp.models import PhotoRecord, ProviderName
from photoslurp.providers.base import Provider

REST_URL = "https://api.flickr.com/services/rest/"
EXTRAS = "url_o,url_l,url_m,url_c,owner_name,date_taken,license"


def parse_date_taken(value: str) -> datetime.datetime:
    """
    Flickr reports 'YYYY-MM-DD HH:MM:SS' in the photographer's local time.
    Unknown dates come back as '0000-00-00 00:00:00', which won't parse.
    """
    try:
        return datetime.datetime.strptime(value, "%Y-%m-%d %H:%M:%S")
    except (TypeError, ValueError):
        raise RecordSkipped(f"unparseable date_taken {value!r}")


class FlickrProvider(Provider):
    name = ProviderName.FLICKR
    page_size = 500

    def pages(self, tag):
        page = 1
        while True:
            data = self.get_json(REST_URL, params={
                "method": "flickr.photos.search",
                "api_key": self.key,
                "tags": tag,
                "per_page": self.page_size,
                "page": page,
                "extras": EXTRAS,
                "format": "json",
                "nojsoncallback": 1,
            })
            if data.get("stat") != "ok":
                raise ProviderFailure(
                    str(self), f"search failed ({data.get('code')}): {data.get('message')}"
                )
            photos = data.get("photos", {})
            yield photos.get("photo", [])

            if page >= int(photos.get("pages", 0)):
                break
            page += 1

    def to_record(self, photo, tag):
        return PhotoRecord(
            provider=self.name,
            tag=tag,
            taken_at=parse_date_taken(photo.get("datetaken")),
            username=photo.get("ownername", ""),
            source_url=f"http://flickr.com/photos/{photo['owner']}/{photo['id']}",
            image_url=photo.get("url_o") or photo.get("url_l"),
            image_url_m=photo.get("url_c"),
            image_url_s=photo.get("url_m"),
            license=decode_license(photo.get("license")),
            title=photo.get("title", ""),
        )

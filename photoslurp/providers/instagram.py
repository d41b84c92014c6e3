import datetime
import logging
from urllib.parse import quote

from photoslurp.errors import ProviderFailure, RecordSkipped
from photoslurp.licenses import DEFAULT_LICENSE
from photoslurp.models import PhotoRecord, ProviderName
from photoslurp.providers.base import Provider

logger = logging.getLogger(__name__)

API_URL = "https://api.instagram.com/v1"


class InstagramProvider(Provider):
    name = ProviderName.INSTAGRAM
    page_size = 33

    def pages(self, tag):
        url = f"{API_URL}/tags/{quote(tag, safe='')}/media/recent"
        params = {"client_id": self.key, "count": self.page_size}
        while url:
            try:
                data = self.get_json(url, params=params)
            except ProviderFailure as e:
                if e.status_code == 400 and "OAuth" not in str(e):
                    logger.warning("Instagram request failed for '%s': %s", tag, e)
                    return
                raise
            yield data.get("data", [])

            # next_url already carries client_id and the max_tag_id cursor
            url = data.get("pagination", {}).get("next_url")
            params = None

    def to_record(self, photo, tag):
        created_time = photo.get("created_time")
        if not created_time:
            raise RecordSkipped("no created_time")
        images = photo["images"]
        caption = photo.get("caption")
        return PhotoRecord(
            provider=self.name,
            tag=tag,
            taken_at=datetime.datetime.fromtimestamp(int(created_time), tz=datetime.timezone.utc),
            username=photo["user"]["username"],
            source_url=photo["link"],
            image_url=images["standard_resolution"]["url"],
            image_url_m=images["standard_resolution"]["url"],
            image_url_s=images["low_resolution"]["url"],
            license=DEFAULT_LICENSE,
            title=caption["text"] if caption else "Untitled",
        )

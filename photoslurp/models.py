import datetime
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from photoslurp.licenses import DEFAULT_LICENSE


class ProviderName(str, Enum):
    TWITTER = "Twitter"
    FLICKR = "Flickr"
    INSTAGRAM = "Instagram"


@dataclass
class PhotoRecord:
    """
    One harvested photo observation, normalized across providers.
    source_url is the dedup key; usable_tag is the human-curated gate.
    """
    provider: ProviderName
    tag: str
    taken_at: datetime.datetime
    username: str
    source_url: str
    image_url: Optional[str] = None
    image_url_m: Optional[str] = None
    image_url_s: Optional[str] = None
    license: str = DEFAULT_LICENSE
    title: str = ""
    usable_tag: str = ""

    def to_row(self) -> List[str]:
        """Values in HEADERS order."""
        return [
            self.provider.value,
            self.tag,
            self.taken_at.isoformat(),
            self.username or "",
            self.usable_tag or "",
            self.image_url or "",
            self.source_url,
            self.image_url_s or "",
            self.image_url_m or "",
            self.license,
            self.title or "",
        ]

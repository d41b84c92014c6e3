import datetime
from urllib.parse import parse_qs

import requests

from photoslurp.errors import NetworkError, ProviderFailure, RecordSkipped
from photoslurp.licenses import DEFAULT_LICENSE
from photoslurp.models import PhotoRecord, ProviderName
from photoslurp.providers.base import Provider

API_URL = "https://api.twitter.com/1.1"
TOKEN_URL = "https://api.twitter.com/oauth2/token"

SIZES = ("large", "medium", "small")


def parse_created_at(value: str) -> datetime.datetime:
    """'Wed Aug 27 13:08:45 +0000 2008' -> aware datetime."""
    return datetime.datetime.strptime(value, "%a %b %d %H:%M:%S %z %Y")


class TwitterProvider(Provider):
    """
    Recent tweets with attached photos, via the v1.1 standard search API
    with an application-only bearer token.
    """

    name = ProviderName.TWITTER
    page_size = 100

    def authorize(self, session):
        try:
            resp = session.post(
                TOKEN_URL,
                auth=(self.key, self.secret),
                data={"grant_type": "client_credentials"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise NetworkError(f"{self} token request failed: {e}") from e
        if resp.status_code != 200:
            raise ProviderFailure(str(self), f"could not get a bearer token: {resp.text}",
                                  status_code=resp.status_code)
        token = resp.json().get("access_token")
        if not token:
            raise ProviderFailure(str(self), "token response had no access_token")
        session.headers["Authorization"] = f"Bearer {token}"

    def pages(self, tag):
        params = {
            "q": f"{tag} -rt",
            "result_type": "recent",
            "count": self.page_size,
            "include_entities": "true",
        }
        while True:
            data = self.get_json(f"{API_URL}/search/tweets.json", params=params)
            yield data.get("statuses", [])

            next_results = data.get("search_metadata", {}).get("next_results")
            if not next_results:
                break
            # next_results is a ready-made query string carrying max_id
            params = {k: v[0] for k, v in parse_qs(next_results.lstrip("?")).items()}

    def to_record(self, tweet, tag):
        entities = tweet.get("extended_entities") or tweet.get("entities") or {}
        media = entities.get("media") or []
        if not media:
            raise RecordSkipped("tweet has no media")
        photo = media[0]

        sizes = photo.get("sizes", {})
        max_size = next((size for size in SIZES if size in sizes), None)
        if max_size is None:
            raise RecordSkipped("no reasonable image size")

        media_url = photo.get("media_url_https") or photo["media_url"]
        user = tweet["user"]
        return PhotoRecord(
            provider=self.name,
            tag=tag,
            taken_at=parse_created_at(tweet["created_at"]),
            username=user.get("name") or user["screen_name"],
            source_url=f"https://twitter.com/{user['screen_name']}/status/{tweet['id_str']}",
            image_url=f"{media_url}:{max_size}",
            image_url_m=f"{media_url}:medium",
            image_url_s=f"{media_url}:small",
            license=DEFAULT_LICENSE,
            title=tweet.get("full_text") or tweet.get("text", ""),
        )

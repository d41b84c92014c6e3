import abc
import logging
import time
from typing import Iterator, List, Optional

import requests

from photoslurp.config import DEFAULT_TIMEOUT
from photoslurp.errors import NetworkError, ProviderFailure, RateLimited, RecordSkipped
from photoslurp.models import PhotoRecord, ProviderName
from photoslurp.retry import call_with_retry

logger = logging.getLogger(__name__)


class Provider(abc.ABC):
    """
    One external photo source. search(tag) is a lazy, single-pass generator
    of PhotoRecord that walks every result page.

    The HTTP client is created on first use and reused for the life of the
    instance, so build one provider per process and hand it to the syncer.
    """

    name: ProviderName
    page_size = 100

    def __init__(self, key: str, secret: str = None, session=None,
                 timeout=DEFAULT_TIMEOUT, sleep=time.sleep):
        self.key = key
        self.secret = secret
        self.timeout = timeout
        self.sleep = sleep
        self._client = session
        self._authorized = False

    def __str__(self):
        return self.name.value

    @property
    def client(self):
        if self._client is None:
            self._client = requests.Session()
        if not self._authorized:
            self.authorize(self._client)
            self._authorized = True
        return self._client

    def authorize(self, session):
        """Hook for providers that need a handshake before searching."""

    @abc.abstractmethod
    def pages(self, tag: str) -> Iterator[List[dict]]:
        """Yield raw result items, one list per API page."""

    @abc.abstractmethod
    def to_record(self, item: dict, tag: str) -> Optional[PhotoRecord]:
        """Normalize one raw item. Raise RecordSkipped for items to drop."""

    def search(self, tag: str) -> Iterator[PhotoRecord]:
        try:
            for items in self.pages(tag):
                for item in items:
                    try:
                        record = self.to_record(item, tag)
                    except (RecordSkipped, KeyError, TypeError, ValueError) as e:
                        logger.debug("%s: skipping item for '%s': %s", self, tag, e)
                        continue
                    if record is None or record.taken_at is None:
                        logger.debug("%s: skipping undated item for '%s'", self, tag)
                        continue
                    yield record
        except (RateLimited, NetworkError) as e:
            raise ProviderFailure(str(self), f"giving up on '{tag}': {e}") from e

    # -----------------------------
    # HTTP
    # -----------------------------

    def check_response(self, resp) -> dict:
        if resp.status_code == 200:
            return resp.json()
        if resp.status_code == 429:
            raise RateLimited(f"{self} rate limit: {resp.text}")
        if resp.status_code >= 500:
            raise NetworkError(f"{self} error {resp.status_code}: {resp.text}")
        raise ProviderFailure(str(self), f"request failed {resp.status_code}: {resp.text}",
                              status_code=resp.status_code)

    def get_json(self, url: str, params: dict = None) -> dict:
        def send():
            try:
                resp = self.client.get(url, params=params, timeout=self.timeout)
            except requests.RequestException as e:
                raise NetworkError(f"{self} request failed: {e}") from e
            return self.check_response(resp)

        return call_with_retry(send, sleep=self.sleep, description=f"{self} search")

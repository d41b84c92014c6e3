import logging
from dataclasses import dataclass, field
from typing import List

from photoslurp.errors import ProviderFailure
from photoslurp.models import PhotoRecord

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    records: int = 0
    failed_providers: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed_providers


def progress_line(record: PhotoRecord) -> str:
    return "".join([
        record.provider.value.ljust(10),
        record.tag.ljust(15),
        record.taken_at.isoformat().ljust(30),
        (record.username or "").ljust(30),
        (record.image_url or "").ljust(70),
        record.source_url,
    ])


class PhotoSlurp:
    """
    Orchestrates a harvest run:
     - every provider
     - every tag
     - one upsert per record, strictly in order, into a single store

    A provider that fails is reported and skipped; store errors end the run.
    """

    def __init__(self, providers, store, tags, auto_approve: bool = False):
        self.providers = list(providers)
        self.store = store
        self.tags = list(tags)
        self.auto_approve = auto_approve

    def run(self) -> SyncResult:
        result = SyncResult()
        self.store.header()
        try:
            for provider in self.providers:
                print()
                try:
                    for tag in self.tags:
                        result.records += self.sync_tag(provider, tag)
                except ProviderFailure as e:
                    logger.error("Provider %s failed: %s", provider, e)
                    result.failed_providers.append(str(provider))
                self.store.flush()
        except KeyboardInterrupt:
            # stopped between records, buffered updates are still good
            self.store.flush()
            raise
        return result

    def sync_tag(self, provider, tag: str) -> int:
        count = 0
        for record in provider.search(tag):
            if self.auto_approve and not record.usable_tag:
                record.usable_tag = tag
            print(progress_line(record))
            self.store.upsert(record)
            count += 1
        return count

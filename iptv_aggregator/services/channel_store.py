"""
Channel Store

In-memory mapping from canonical channel name to every distinct stream
source contributed by the subscriptions of one aggregation run.
"""
import logging
from collections.abc import Iterable, Iterator
from dataclasses import replace
from typing import Optional

from iptv_aggregator.services.alias_service import AliasTable
from iptv_aggregator.services.channel_types import ChannelRecord
from iptv_aggregator.utils.collation import collation_key


logger = logging.getLogger(__name__)


class ChannelStore:
    """
    Canonical name -> ordered list of ChannelRecord.

    Every stored record carries its key as `name`, and URLs are unique
    within one channel's list. Not thread-safe: insert from a single task
    after all fetches have settled.
    """

    def __init__(self, aliases: Optional[AliasTable] = None) -> None:
        self.aliases = aliases or AliasTable()
        self._channels: dict[str, list[ChannelRecord]] = {}

    def __len__(self) -> int:
        return len(self._channels)

    def __contains__(self, name: object) -> bool:
        return name in self._channels

    def __iter__(self) -> Iterator[str]:
        return iter(self._channels)

    def get(self, name: str) -> list[ChannelRecord] | None:
        return self._channels.get(name)

    def items(self):
        return self._channels.items()

    @property
    def stream_count(self) -> int:
        return sum(len(sources) for sources in self._channels.values())

    def add_channel(self, record: Optional[ChannelRecord]) -> bool:
        """
        Insert one record under its canonical name

        Args:
            record: Parsed record; ignored if None or missing name/url

        Returns:
            True if stored, False if ignored or a duplicate URL
        """
        if record is None or not record.name or not record.url:
            return False

        canonical_name = self.aliases.resolve(record.name)
        sources = self._channels.setdefault(canonical_name, [])

        if any(existing.url == record.url for existing in sources):
            logger.debug("Skipping duplicate source for %s: %s", canonical_name, record.url)
            return False

        sources.append(replace(record, name=canonical_name))
        return True

    def add_channels(self, records: Iterable[ChannelRecord]) -> int:
        """Insert many records, returning how many were stored"""
        return sum(1 for record in records if self.add_channel(record))

    def sorted_items(self) -> list[tuple[str, list[ChannelRecord]]]:
        """Channels ordered by locale-aware collation of their canonical names"""
        return sorted(self._channels.items(), key=lambda item: collation_key(item[0]))

"""
Subscription Service

Downloads every configured subscription concurrently and parses each body
into channel records. A failed subscription yields no records and never
affects the others.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

import httpx

from iptv_aggregator.services.channel_types import ChannelRecord
from iptv_aggregator.services.playlist_parser_service import is_m3u_content, parse_subscription
from iptv_aggregator.utils.logging_helpers import sanitize_url_for_logging


logger = logging.getLogger(__name__)

FETCH_TIMEOUT_SECONDS = 10.0
REQUEST_HEADERS = {"User-Agent": "Mozilla/5.0"}


@dataclass(slots=True)
class SubscriptionSummary:
    index: int
    source_url: str
    sanitized_url: str
    started_at: datetime
    completed_at: datetime
    status: Literal["success", "failed"]
    content_format: Literal["m3u", "txt"] | None = None
    status_code: int | None = None
    error: str | None = None
    channels: list[ChannelRecord] = field(default_factory=list)

    @property
    def channels_parsed(self) -> int:
        return len(self.channels)

    @property
    def duration_seconds(self) -> float:
        return max(0.0, (self.completed_at - self.started_at).total_seconds())

    def to_dict(self) -> dict:
        payload = {
            "source_index": self.index,
            "source_url": self.sanitized_url,
            "status": self.status,
            "format": self.content_format,
            "channels_parsed": self.channels_parsed,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat(),
            "duration_seconds": self.duration_seconds,
        }
        if self.status_code is not None:
            payload["status_code"] = self.status_code
        if self.error:
            payload["error"] = self.error
        return payload


async def download_subscription(client: httpx.AsyncClient, url: str) -> str:
    """
    Download one subscription body

    Raises:
        httpx.HTTPError: On transport errors, timeouts and non-2xx responses
    """
    response = await client.get(url)
    response.raise_for_status()
    return response.text


async def process_subscription(
    client: httpx.AsyncClient,
    semaphore: asyncio.Semaphore,
    index: int,
    total: int,
    source_url: str,
) -> SubscriptionSummary:
    """
    Download and parse a single subscription

    Never raises for download or parse problems; failures are reported in
    the returned summary with an empty channel list.
    """
    sanitized_url = sanitize_url_for_logging(source_url)
    started_at = datetime.now(timezone.utc)

    async with semaphore:
        logger.info("[Subscription %s/%s] Fetching %s", index, total, sanitized_url)
        try:
            # httpx timeouts apply per read; this bounds the whole download
            content = await asyncio.wait_for(
                download_subscription(client, source_url),
                FETCH_TIMEOUT_SECONDS,
            )
            loop = asyncio.get_running_loop()
            channels = await loop.run_in_executor(None, parse_subscription, content)
        except Exception as exc:
            status_code = None
            if isinstance(exc, httpx.HTTPStatusError):
                status_code = exc.response.status_code
            logger.error(
                "[Subscription %s] Failed to fetch %s: %s: %s (HTTP status: %s)",
                index,
                sanitized_url,
                type(exc).__name__,
                exc,
                status_code or "n/a",
            )
            return SubscriptionSummary(
                index=index,
                source_url=source_url,
                sanitized_url=sanitized_url,
                started_at=started_at,
                completed_at=datetime.now(timezone.utc),
                status="failed",
                status_code=status_code,
                error=str(exc) or type(exc).__name__,
            )

    content_format = "m3u" if is_m3u_content(content) else "txt"
    if channels:
        logger.info(
            "[Subscription %s/%s] Parsed %s channels (%s) from %s",
            index,
            total,
            len(channels),
            content_format,
            sanitized_url,
        )
    else:
        logger.warning("[Subscription %s] Returned no channels: %s", index, sanitized_url)

    return SubscriptionSummary(
        index=index,
        source_url=source_url,
        sanitized_url=sanitized_url,
        started_at=started_at,
        completed_at=datetime.now(timezone.utc),
        status="success",
        content_format=content_format,
        channels=channels,
    )


async def fetch_subscriptions(
    urls: Sequence[str],
    *,
    max_concurrency: int | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[SubscriptionSummary]:
    """
    Fetch all subscriptions concurrently and wait for every one to settle

    Args:
        urls: Subscription URLs
        max_concurrency: Upper bound on simultaneous downloads (default: all)
        transport: Optional httpx transport, mainly for tests

    Returns:
        One summary per URL, ordered by position in `urls`
    """
    sources = [url for url in urls if url]
    if not sources:
        logger.warning("No subscription URLs configured - nothing to fetch")
        return []

    semaphore = asyncio.Semaphore(max(1, max_concurrency or len(sources)))

    async with httpx.AsyncClient(
        timeout=FETCH_TIMEOUT_SECONDS,
        headers=REQUEST_HEADERS,
        follow_redirects=True,
        transport=transport,
    ) as client:
        tasks = [
            asyncio.create_task(process_subscription(client, semaphore, index, len(sources), url))
            for index, url in enumerate(sources, start=1)
        ]
        summaries = await asyncio.gather(*tasks)

    summaries.sort(key=lambda summary: summary.index)
    return summaries

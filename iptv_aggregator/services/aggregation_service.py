"""
Aggregation Service

Coordinates one aggregation run: load source tables, fetch subscriptions,
merge into the channel store and write the playlists.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

import httpx

from iptv_aggregator.config import AggregationPaths, settings
from iptv_aggregator.services.alias_service import AliasTable, load_aliases
from iptv_aggregator.services.channel_store import ChannelStore
from iptv_aggregator.services.config_validator_service import validate_source_configs
from iptv_aggregator.services.errors import AggregationError
from iptv_aggregator.services.export_service import render_playlist, render_txt
from iptv_aggregator.services.source_loader_service import (
    load_epg_urls,
    load_logos,
    load_subscription_urls,
)
from iptv_aggregator.services.subscription_service import SubscriptionSummary, fetch_subscriptions
from iptv_aggregator.services.template_service import load_template
from iptv_aggregator.utils.file_operations import write_text_files
from iptv_aggregator.utils.logging_helpers import (
    log_run_end,
    log_run_start,
    log_section_end,
    log_section_start,
    log_store_summary,
)


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SourceTables:
    epg_urls: list[str] = field(default_factory=list)
    logos: dict[str, str] = field(default_factory=dict)
    aliases: AliasTable = field(default_factory=AliasTable)


class AggregationPipeline:
    """Coordinates load, fetch, merge, and export stages for one run."""

    def __init__(
        self,
        paths: AggregationPaths,
        *,
        max_concurrency: int | None = None,
        validate: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.paths = paths
        self._concurrency = max_concurrency
        self._validate = validate
        self._transport = transport

    async def run(self) -> dict:
        started_at = datetime.now(timezone.utc)

        if self._validate:
            self._check_sources()

        tables = self._load_tables()

        urls = load_subscription_urls(self.paths.subscribe)
        if urls is None:
            raise AggregationError(f"Subscription file not found: {self.paths.subscribe}")

        log_section_start(logger, "subscription fetch")
        summaries = await fetch_subscriptions(
            urls,
            max_concurrency=self._concurrency,
            transport=self._transport,
        )
        log_section_end(logger, "subscription fetch")

        store = self._merge(tables.aliases, summaries)
        outputs_written = await self._export(store, tables)

        return self._build_result(started_at, store, summaries, outputs_written)

    def _check_sources(self) -> None:
        summary = validate_source_configs(self.paths)
        if summary.has_errors:
            raise AggregationError(
                f"Config validation failed with {len(summary.errors)} error(s): "
                + "; ".join(summary.errors[:5])
            )

    def _load_tables(self) -> SourceTables:
        return SourceTables(
            epg_urls=load_epg_urls(self.paths.epg),
            logos=load_logos(self.paths.logo),
            aliases=load_aliases(self.paths.alias),
        )

    def _merge(self, aliases: AliasTable, summaries: list[SubscriptionSummary]) -> ChannelStore:
        store = ChannelStore(aliases)
        for summary in summaries:
            if summary.status != "success":
                continue
            stored = store.add_channels(summary.channels)
            logger.debug(
                "[Subscription %s] Stored %s of %s parsed sources",
                summary.index,
                stored,
                summary.channels_parsed,
            )

        log_store_summary(logger, len(store), store.stream_count)
        return store

    async def _export(self, store: ChannelStore, tables: SourceTables) -> bool:
        if not len(store):
            logger.warning("Aggregation produced no channels - keeping existing output files")
            return False

        log_section_start(logger, "playlist export")
        template = load_template(self.paths.template)
        m3u_content = render_playlist(store, template, epg_urls=tables.epg_urls, logos=tables.logos)
        txt_content = render_txt(store)

        await write_text_files({self.paths.m3u_output: m3u_content, self.paths.txt_output: txt_content})
        logger.info(f"Wrote {self.paths.m3u_output} and {self.paths.txt_output}")
        log_section_end(logger, "playlist export")
        return True

    def _build_result(
        self,
        started_at: datetime,
        store: ChannelStore,
        summaries: list[SubscriptionSummary],
        outputs_written: bool,
    ) -> dict:
        successes = sum(1 for summary in summaries if summary.status == "success")
        failures = sum(1 for summary in summaries if summary.status == "failed")

        return {
            "status": "success",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "started_at": started_at.isoformat(),
            "channel_count": len(store),
            "stream_count": store.stream_count,
            "subscriptions_processed": len(summaries),
            "subscriptions_succeeded": successes,
            "subscriptions_failed": failures,
            "outputs_written": outputs_written,
            "subscription_details": [summary.to_dict() for summary in summaries],
        }


async def run_aggregation(
    paths: AggregationPaths | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict:
    """
    Main entry point for one aggregation run.

    Returns:
        Dictionary with run statistics, or {"error": ...} on failure.
    """
    log_run_start(logger)
    pipeline = AggregationPipeline(
        paths or AggregationPaths.from_settings(settings),
        max_concurrency=settings.subscription_max_concurrency,
        validate=settings.validate_before_run,
        transport=transport,
    )
    try:
        result = await pipeline.run()
    except AggregationError as exc:
        logger.error("Aggregation aborted: %s", exc)
        return {"error": str(exc)}
    except OSError as exc:
        logger.error("Aggregation failed on file access: %s", exc, exc_info=True)
        return {"error": str(exc)}
    except Exception as exc:  # Catch-all to ensure API stability
        logger.error("Unexpected error during aggregation: %s", exc, exc_info=True)
        return {"error": str(exc)}

    log_run_end(logger)
    return result

"""
Export Service

Renders the channel store into M3U and TXT playlists.

Attribute values are embedded verbatim between double quotes. Upstream
data containing `"` produces a malformed attribute; nothing is escaped.
"""
import logging
from collections.abc import Mapping, Sequence
from typing import Optional

from iptv_aggregator.services.channel_store import ChannelStore
from iptv_aggregator.services.channel_types import ChannelRecord, TemplateCategory
from iptv_aggregator.services.template_service import CATEGORY_MARKER, find_channel_objects


logger = logging.getLogger(__name__)

M3U_HEADER = "#EXTM3U"


def render_playlist(
    store: ChannelStore,
    template: Optional[Sequence[TemplateCategory]],
    *,
    epg_urls: Sequence[str] = (),
    logos: Mapping[str, str] | None = None,
) -> str:
    """Render the template export, or the default export when there is no template"""
    if not template:
        return render_m3u(store, epg_urls=epg_urls, logos=logos)
    return render_m3u_with_template(store, template, epg_urls=epg_urls, logos=logos)


def render_m3u_with_template(
    store: ChannelStore,
    template: Sequence[TemplateCategory],
    *,
    epg_urls: Sequence[str] = (),
    logos: Mapping[str, str] | None = None,
) -> str:
    """
    Render channels in template order, grouped under template categories

    Only channels matched by a template entry are emitted. Every matched
    source is written so players can switch between sources.

    Args:
        store: Aggregated channels
        template: Ordered categories
        epg_urls: EPG URLs for the x-tvg-url header
        logos: Fallback logos keyed by channel name

    Returns:
        Playlist text
    """
    logos = logos or {}
    lines = _header_lines(epg_urls)
    matched_total = 0

    for category in template:
        lines.append("")
        lines.append(f"{category.title}{CATEGORY_MARKER}")

        for channel_name in category.channels:
            sources = find_channel_objects(store, channel_name)
            if not sources:
                logger.debug(f"No sources matched template channel '{channel_name}'")
                continue

            for record in sources:
                lines.extend(
                    _entry_lines(
                        record,
                        display_name=channel_name,
                        tvg_name=record.tvg_name or channel_name,
                        tvg_logo=record.tvg_logo or logos.get(channel_name, ""),
                        group_title=category.title,
                    )
                )
                matched_total += 1

    logger.info(f"Rendered template playlist: {len(template)} categories, {matched_total} streams")
    return _join(lines)


def render_m3u(
    store: ChannelStore,
    *,
    epg_urls: Sequence[str] = (),
    logos: Mapping[str, str] | None = None,
) -> str:
    """Render every stored channel sorted by canonical name"""
    logos = logos or {}
    lines = _header_lines(epg_urls)

    for name, sources in store.sorted_items():
        for record in sources:
            lines.extend(
                _entry_lines(
                    record,
                    display_name=name,
                    tvg_name=record.tvg_name or name,
                    tvg_logo=record.tvg_logo or logos.get(name, ""),
                    group_title=record.group_title,
                )
            )

    logger.info(f"Rendered default playlist: {len(store)} channels, {store.stream_count} streams")
    return _join(lines)


def render_txt(store: ChannelStore) -> str:
    """Render `name,url` lines, one per stream source"""
    lines = [
        f"{name},{record.url}"
        for name, sources in store.sorted_items()
        for record in sources
    ]
    return _join(lines)


def _header_lines(epg_urls: Sequence[str]) -> list[str]:
    lines = [M3U_HEADER]
    if epg_urls:
        lines.append(f'{M3U_HEADER} x-tvg-url="{",".join(epg_urls)}"')
    return lines


def _entry_lines(
    record: ChannelRecord,
    *,
    display_name: str,
    tvg_name: str,
    tvg_logo: str,
    group_title: str,
) -> list[str]:
    attributes = (
        ("tvg-name", tvg_name),
        ("tvg-logo", tvg_logo),
        ("group-title", group_title),
        ("tvg-id", record.tvg_id),
    )
    rendered = "".join(f' {key}="{value}"' for key, value in attributes if value)
    return [f"#EXTINF:{record.duration}{rendered},{display_name}", record.url]


def _join(lines: list[str]) -> str:
    return "".join(f"{line}\n" for line in lines)

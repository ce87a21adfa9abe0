import logging
import re
from typing import Optional

from iptv_aggregator.services.channel_types import ChannelRecord

logger = logging.getLogger(__name__)

EXTINF_PREFIX = "#EXTINF:"
EXTM3U_MARKER = "#EXTM3U"
GENRE_MARKER = "#genre#"

_EXTINF_PATTERN = re.compile(r"^#EXTINF:([+-]?\d+)(.*),(.+)$")
_ATTRIBUTE_PATTERNS = {
    "tvg_name": re.compile(r'tvg-name="([^"]*)"'),
    "tvg_logo": re.compile(r'tvg-logo="([^"]*)"'),
    "group_title": re.compile(r'group-title="([^"]*)"'),
    "tvg_id": re.compile(r'tvg-id="([^"]*)"'),
}


def is_m3u_content(content: str) -> bool:
    """Return True when the text looks like an M3U playlist"""
    return EXTM3U_MARKER in content or EXTINF_PREFIX in content


def parse_subscription(content: str) -> list[ChannelRecord]:
    """
    Parse raw subscription text, picking the grammar from its content

    Args:
        content: Raw subscription body

    Returns:
        Parsed channel records in source order (possibly empty)
    """
    if is_m3u_content(content):
        logger.debug("Detected M3U subscription content")
        return parse_m3u(content)

    logger.debug("Detected delimited text subscription content")
    return parse_txt(content)


def parse_m3u(content: str) -> list[ChannelRecord]:
    """
    Parse M3U playlist text with full #EXTINF attributes

    A header is sealed by the next non-blank, non-comment line, which
    becomes its stream URL. Headers without a URL are dropped.

    Args:
        content: Playlist text

    Returns:
        List of ChannelRecord in source order
    """
    channels: list[ChannelRecord] = []
    pending: Optional[dict] = None
    dropped = 0

    for raw_line in content.split("\n"):
        line = raw_line.strip()
        if not line:
            continue

        if line.startswith(EXTINF_PREFIX):
            if pending is not None:
                dropped += 1
            pending = _parse_extinf(line)
            if pending is None:
                logger.debug("Skipping malformed #EXTINF line: %s", line[:120])
            continue

        if line.startswith("#"):
            continue

        if pending is not None:
            channels.append(ChannelRecord(url=line, **pending))
            pending = None

    if pending is not None:
        dropped += 1

    if dropped:
        logger.debug("Dropped %s #EXTINF header(s) without a stream URL", dropped)

    return channels


def parse_txt(content: str) -> list[ChannelRecord]:
    """
    Parse `name,url` lines

    Only the first comma splits, so URLs containing commas are kept whole.
    Category lines (`title,#genre#`) are skipped.
    """
    channels: list[ChannelRecord] = []

    for raw_line in content.split("\n"):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        name, separator, url = line.partition(",")
        if not separator:
            continue

        name = name.strip()
        url = url.strip()
        if not name or not url or url == GENRE_MARKER:
            continue

        channels.append(ChannelRecord(name=name, url=url))

    return channels


def _parse_extinf(line: str) -> Optional[dict]:
    """Parse a single #EXTINF header into ChannelRecord keyword arguments"""
    match = _EXTINF_PATTERN.match(line)
    if not match:
        return None

    display_name = match.group(3).strip()
    if not display_name:
        return None

    try:
        duration = int(match.group(1))
    except ValueError:
        # digit count beyond the interpreter's int conversion limit
        return None

    attributes = match.group(2).strip()
    fields = {
        "name": display_name,
        "duration": duration,
        "raw_attributes": attributes,
    }
    for key, pattern in _ATTRIBUTE_PATTERNS.items():
        attr_match = pattern.search(attributes)
        fields[key] = attr_match.group(1) if attr_match else ""

    return fields

"""
Source Loader Service

Loads the flat, line-oriented source lists: subscriptions, EPG URLs and logos.
"""
import logging
from pathlib import Path

from iptv_aggregator.utils.file_operations import iter_entries, read_source_lines


logger = logging.getLogger(__name__)


def load_url_list(file_path: Path) -> list[str] | None:
    """
    Load one URL per line, ignoring blank and `#` lines

    Returns:
        URLs in file order, or None if the file does not exist
    """
    lines = read_source_lines(file_path)
    if lines is None:
        return None
    return list(iter_entries(lines))


def load_subscription_urls(subscribe_file: Path) -> list[str] | None:
    """Load subscription URLs; None means the subscription file is missing"""
    urls = load_url_list(subscribe_file)
    if urls is None:
        logger.error(f"Subscription file not found: {subscribe_file}")
        return None

    logger.info(f"Loaded {len(urls)} subscription URLs from {subscribe_file}")
    return urls


def load_epg_urls(epg_file: Path) -> list[str]:
    """Load EPG URLs; a missing file means no EPG header in the playlist"""
    urls = load_url_list(epg_file)
    if urls is None:
        logger.info(f"EPG file not found, skipping: {epg_file}")
        return []

    logger.info(f"Loaded {len(urls)} EPG URLs from {epg_file}")
    return urls


def load_logos(logo_file: Path) -> dict[str, str]:
    """
    Load `channelName,logoURL` lines into a name -> logo mapping

    Only the first two fields are used. Lines with fewer fields are skipped.
    """
    lines = read_source_lines(logo_file)
    if lines is None:
        logger.info(f"Logo file not found, skipping: {logo_file}")
        return {}

    logos: dict[str, str] = {}
    for line in iter_entries(lines):
        parts = [part.strip() for part in line.split(",")]
        if len(parts) < 2:
            logger.warning(f"Logo line is missing a logo URL, skipping: {line}")
            continue
        logos[parts[0]] = parts[1]

    logger.info(f"Loaded {len(logos)} channel logos from {logo_file}")
    return logos

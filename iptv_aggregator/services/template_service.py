"""
Template Service

Loads the category template and resolves template channel names against
the channel store at export time.
"""
import logging
import re
from pathlib import Path
from typing import Optional

from iptv_aggregator.services.channel_store import ChannelStore
from iptv_aggregator.services.channel_types import ChannelRecord, TemplateCategory
from iptv_aggregator.utils.file_operations import read_source_lines


logger = logging.getLogger(__name__)

CATEGORY_MARKER = ",#genre#"

_WHITESPACE_PATTERN = re.compile(r"\s+")


def parse_template(lines: list[str]) -> list[TemplateCategory]:
    """
    Build template categories from stripped template lines

    Structural problems are logged as errors and the offending entry is
    dropped; parsing always continues.
    """
    categories: list[TemplateCategory] = []
    current: Optional[TemplateCategory] = None

    for line_number, line in enumerate(lines, start=1):
        if not line:
            continue

        if CATEGORY_MARKER in line:
            current = TemplateCategory(title=line.replace(CATEGORY_MARKER, "", 1).strip())
            if current.title:
                categories.append(current)
            else:
                logger.error(f"Template line {line_number}: empty category title, dropping category")
            continue

        if line.startswith("#"):
            continue

        if current is None:
            logger.error(f"Template line {line_number}: channel without a category, ignoring: {line}")
            continue

        current.channels.append(line)

    return categories


def load_template(template_file: Path) -> Optional[list[TemplateCategory]]:
    """
    Load the export template

    Returns:
        Categories in file order, or None if the file is missing or defines
        no categories (the default export is used instead)
    """
    lines = read_source_lines(template_file)
    if lines is None:
        logger.warning(f"Template file not found, using default ordering: {template_file}")
        return None

    categories = parse_template(lines)
    if not categories:
        logger.warning(f"Template defines no categories, using default ordering: {template_file}")
        return None

    channel_total = sum(len(category.channels) for category in categories)
    logger.info(
        f"Loaded template with {len(categories)} categories and {channel_total} channels from {template_file}"
    )
    return categories


def find_channel_objects(store: ChannelStore, template_name: str) -> list[ChannelRecord]:
    """
    Find every stored source for a template channel name

    Tiers, first non-empty result wins:
        1. exact key
        2. case-insensitive key, first in store order
        3. containment either way after lower-casing and removing
           whitespace; all matching keys contribute, in store order

    Args:
        store: Aggregated channels
        template_name: Channel name as written in the template

    Returns:
        Matching records (empty if nothing matches)
    """
    exact = store.get(template_name)
    if exact:
        return list(exact)

    lower_template = template_name.lower()
    for name, sources in store.items():
        if name.lower() == lower_template:
            return list(sources)

    normalized_template = _normalize(template_name)
    matched: list[ChannelRecord] = []
    for name, sources in store.items():
        normalized_name = _normalize(name)
        if normalized_template in normalized_name or normalized_name in normalized_template:
            matched.extend(sources)

    return matched


def _normalize(name: str) -> str:
    return _WHITESPACE_PATTERN.sub("", name.lower())

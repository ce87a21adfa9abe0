"""
Shared dataclasses used across the aggregation pipeline.
"""
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True)
class ChannelRecord:
    """One stream source for one channel, as parsed from a subscription."""
    name: str
    url: str
    duration: int = -1
    tvg_name: str = ""
    tvg_logo: str = ""
    group_title: str = ""
    tvg_id: str = ""
    raw_attributes: str = ""


@dataclass(slots=True)
class TemplateCategory:
    """Ordered channel names listed under one template category."""
    title: str
    channels: list[str] = field(default_factory=list)


__all__ = ["ChannelRecord", "TemplateCategory"]

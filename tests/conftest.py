from __future__ import annotations

from pathlib import Path

import pytest

from iptv_aggregator.config import AggregationPaths
from iptv_aggregator.services.run_coordinator import reset_run_coordinator


@pytest.fixture(autouse=True)
def fresh_coordinator():
    reset_run_coordinator()
    yield
    reset_run_coordinator()


@pytest.fixture()
def paths(tmp_path: Path) -> AggregationPaths:
    source_dir = tmp_path / "source"
    source_dir.mkdir()
    output_dir = tmp_path / "output"
    return AggregationPaths(
        subscribe=source_dir / "subscribe.txt",
        alias=source_dir / "alias.txt",
        logo=source_dir / "logo.txt",
        template=source_dir / "template.txt",
        epg=source_dir / "epg.txt",
        m3u_output=output_dir / "output.m3u",
        txt_output=output_dir / "output.txt",
    )

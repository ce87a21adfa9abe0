from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from iptv_aggregator.utils.file_operations import iter_entries, read_source_lines, write_text_files


def test_read_source_lines_strips_and_keeps_blank_lines(tmp_path: Path) -> None:
    source = tmp_path / "source.txt"
    source.write_text("\ufeff first \r\n\n# note\nsecond\n", encoding="utf-8")

    lines = read_source_lines(source)

    assert lines == ["first", "", "# note", "second"]
    assert list(iter_entries(lines)) == ["first", "second"]
    assert read_source_lines(tmp_path / "missing.txt") is None


def test_write_text_files_creates_output_directory(tmp_path: Path) -> None:
    m3u = tmp_path / "output" / "output.m3u"
    txt = tmp_path / "output" / "output.txt"

    written = asyncio.run(write_text_files({m3u: "#EXTM3U\n", txt: "A,http://a.example/1\n"}))

    assert written == [m3u, txt]
    assert m3u.read_text(encoding="utf-8") == "#EXTM3U\n"
    assert txt.read_text(encoding="utf-8") == "A,http://a.example/1\n"
    assert sorted(path.name for path in m3u.parent.iterdir()) == ["output.m3u", "output.txt"]


def test_failed_write_keeps_previous_files(tmp_path: Path) -> None:
    m3u = tmp_path / "output.m3u"
    txt = tmp_path / "output.txt"
    m3u.write_text("previous\n", encoding="utf-8")
    (tmp_path / "output.txt.tmp").mkdir()

    with pytest.raises(OSError):
        asyncio.run(write_text_files({m3u: "#EXTM3U\n", txt: "A,http://a.example/1\n"}))

    assert m3u.read_text(encoding="utf-8") == "previous\n"
    assert not (tmp_path / "output.m3u.tmp").exists()
    assert not txt.exists()

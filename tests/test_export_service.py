from __future__ import annotations

from iptv_aggregator.services.channel_store import ChannelStore
from iptv_aggregator.services.channel_types import ChannelRecord, TemplateCategory
from iptv_aggregator.services.export_service import (
    render_m3u,
    render_m3u_with_template,
    render_playlist,
    render_txt,
)

LOGOS = {"CCTV1": "http://logo.example/cctv1.png"}


def _sample_store() -> ChannelStore:
    store = ChannelStore()
    store.add_channels(
        [
            ChannelRecord(name="湖南卫视", url="http://a.example/hunan", group_title="卫视"),
            ChannelRecord(name="CCTV1", url="http://a.example/1", tvg_id="cctv1", group_title="Source Group"),
            ChannelRecord(name="CCTV1", url="http://b.example/1", tvg_logo="http://own.example/logo.png"),
        ]
    )
    return store


def test_template_export_groups_by_category_with_epg_header() -> None:
    template = [
        TemplateCategory(title="卫视", channels=["湖南卫视"]),
        TemplateCategory(title="央视", channels=["CCTV1", "Missing Channel"]),
    ]

    playlist = render_m3u_with_template(
        _sample_store(),
        template,
        epg_urls=["http://epg.example/a.xml", "http://epg.example/b.xml"],
        logos=LOGOS,
    )

    assert playlist == (
        "#EXTM3U\n"
        '#EXTM3U x-tvg-url="http://epg.example/a.xml,http://epg.example/b.xml"\n'
        "\n"
        "卫视,#genre#\n"
        '#EXTINF:-1 tvg-name="湖南卫视" group-title="卫视",湖南卫视\n'
        "http://a.example/hunan\n"
        "\n"
        "央视,#genre#\n"
        '#EXTINF:-1 tvg-name="CCTV1" tvg-logo="http://logo.example/cctv1.png" group-title="央视" tvg-id="cctv1",CCTV1\n'
        "http://a.example/1\n"
        '#EXTINF:-1 tvg-name="CCTV1" tvg-logo="http://own.example/logo.png" group-title="央视",CCTV1\n'
        "http://b.example/1\n"
    )


def test_template_export_uses_template_name_for_display() -> None:
    store = ChannelStore()
    store.add_channel(ChannelRecord(name="CCTV1 HD", url="http://a.example/1hd", tvg_name="CCTV-1 高清"))

    playlist = render_m3u_with_template(store, [TemplateCategory(title="央视", channels=["cctv1"])])

    assert '#EXTINF:-1 tvg-name="CCTV-1 高清" group-title="央视",cctv1\n' in playlist
    assert "x-tvg-url" not in playlist


def test_default_export_sorts_channels_and_keeps_source_groups() -> None:
    playlist = render_m3u(_sample_store(), logos=LOGOS)

    assert playlist == (
        "#EXTM3U\n"
        '#EXTINF:-1 tvg-name="CCTV1" tvg-logo="http://logo.example/cctv1.png" group-title="Source Group" tvg-id="cctv1",CCTV1\n'
        "http://a.example/1\n"
        '#EXTINF:-1 tvg-name="CCTV1" tvg-logo="http://own.example/logo.png",CCTV1\n'
        "http://b.example/1\n"
        '#EXTINF:-1 tvg-name="湖南卫视" group-title="卫视",湖南卫视\n'
        "http://a.example/hunan\n"
    )


def test_missing_or_empty_template_falls_back_to_default_export() -> None:
    store = _sample_store()
    expected = render_m3u(store, epg_urls=["http://epg.example/a.xml"])

    assert render_playlist(store, None, epg_urls=["http://epg.example/a.xml"]) == expected
    assert render_playlist(store, [], epg_urls=["http://epg.example/a.xml"]) == expected


def test_txt_export_lists_every_source() -> None:
    assert render_txt(_sample_store()) == (
        "CCTV1,http://a.example/1\n"
        "CCTV1,http://b.example/1\n"
        "湖南卫视,http://a.example/hunan\n"
    )


def test_empty_store_renders_header_only() -> None:
    assert render_m3u(ChannelStore()) == "#EXTM3U\n"
    assert render_txt(ChannelStore()) == ""

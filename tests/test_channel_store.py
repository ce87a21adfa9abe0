from __future__ import annotations

from iptv_aggregator.services.alias_service import AliasTable
from iptv_aggregator.services.channel_store import ChannelStore
from iptv_aggregator.services.channel_types import ChannelRecord
from iptv_aggregator.utils.collation import collation_key


def test_duplicate_url_is_stored_once() -> None:
    store = ChannelStore()
    record = ChannelRecord(name="CCTV1", url="http://a.example/1")

    assert store.add_channel(record) is True
    assert store.add_channel(record) is False
    assert store.add_channel(ChannelRecord(name="CCTV1", url="http://a.example/1", group_title="Other")) is False

    assert store.get("CCTV1") == [record]
    assert store.stream_count == 1


def test_sources_keep_arrival_order_and_case_sensitive_urls() -> None:
    store = ChannelStore()

    stored = store.add_channels(
        [
            ChannelRecord(name="News", url="http://a.example/News"),
            ChannelRecord(name="News", url="http://a.example/news"),
            ChannelRecord(name="News", url="http://b.example/news"),
        ]
    )

    assert stored == 3
    assert [record.url for record in store.get("News")] == [
        "http://a.example/News",
        "http://a.example/news",
        "http://b.example/news",
    ]


def test_records_are_stored_under_canonical_name() -> None:
    store = ChannelStore(AliasTable.from_lines(["CCTV1,cctv-1,CCTV 1"]))
    original = ChannelRecord(name="cctv-1", url="http://a.example/1", tvg_name="CCTV-1")

    store.add_channel(original)
    store.add_channel(ChannelRecord(name="CCTV 1", url="http://b.example/1"))

    assert list(store) == ["CCTV1"]
    assert "cctv-1" not in store
    assert [record.name for record in store.get("CCTV1")] == ["CCTV1", "CCTV1"]
    assert store.get("CCTV1")[0].tvg_name == "CCTV-1"
    assert original.name == "cctv-1"


def test_incomplete_records_are_ignored() -> None:
    store = ChannelStore()

    assert store.add_channel(None) is False
    assert store.add_channel(ChannelRecord(name="", url="http://a.example/x")) is False
    assert store.add_channel(ChannelRecord(name="Nameless URL", url="")) is False
    assert len(store) == 0


def test_collation_orders_digits_latin_then_pinyin() -> None:
    names = ["湖南卫视", "CCTV2", "北京卫视", "cctv10", "CCTV1", "1频道"]

    assert sorted(names, key=collation_key) == ["1频道", "CCTV1", "cctv10", "CCTV2", "北京卫视", "湖南卫视"]


def test_collation_breaks_case_ties_lowercase_first() -> None:
    assert sorted(["B", "b", "a"], key=collation_key) == ["a", "b", "B"]
    assert collation_key("b") < collation_key("B")


def test_sorted_items_do_not_depend_on_insertion_order() -> None:
    names = ["湖南卫视", "CCTV2", "北京卫视", "CCTV1"]
    forward = ChannelStore()
    backward = ChannelStore()
    for index, name in enumerate(names):
        forward.add_channel(ChannelRecord(name=name, url=f"http://a.example/{index}"))
    for index, name in enumerate(reversed(names)):
        backward.add_channel(ChannelRecord(name=name, url=f"http://a.example/{index}"))

    assert [name for name, _ in forward.sorted_items()] == [name for name, _ in backward.sorted_items()]
    assert [name for name, _ in forward.sorted_items()] == ["CCTV1", "CCTV2", "北京卫视", "湖南卫视"]


def test_collation_sorts_accented_and_full_width_letters_with_base_letter() -> None:
    names = ["f", "é", "Ａ", "b", "ｃ", "２", "3"]

    assert sorted(names, key=collation_key) == ["２", "3", "Ａ", "b", "ｃ", "é", "f"]

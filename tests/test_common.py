import pytest

from anifeed.utils import format_file_size, normalize_torrent_hash, resolve_torrent_hash, to_camel

HEX_HASH = "c12fe1c06bba254a9dc9f519b335aa7c1367a88a"
# 同一个 info hash 的 base32 形式
BASE32_HASH = "YEX6DQDLXISUVHOJ6UM3GNNKPQJWPKEK"


def test_to_camel():
    assert to_camel("latest_published_at") == "latestPublishedAt"
    assert to_camel("title") == "title"


@pytest.mark.parametrize("size, expected", [
    (None, ""),
    (0, "0 B"),
    (512, "512 B"),
    (1536, "1.5 KB"),
    (1610612736, "1.5 GB"),
    (1099511627776, "1 TB"),
])
def test_format_file_size(size, expected):
    assert format_file_size(size) == expected


def test_normalize_torrent_hash():
    assert normalize_torrent_hash(HEX_HASH) == HEX_HASH.upper()
    assert normalize_torrent_hash(BASE32_HASH) == HEX_HASH.upper()
    assert normalize_torrent_hash("not-a-hash") is None
    assert normalize_torrent_hash("") is None


@pytest.mark.parametrize("sources", [
    (HEX_HASH, None, None),
    ("", f"magnet:?xt=urn:btih:{HEX_HASH}&dn=x", None),
    ("", f"magnet:?xt=urn:btih:{BASE32_HASH}", None),
    ("", None, f"https://mikanani.me/Download/20241001/{HEX_HASH}.torrent"),
    ("", f"magnet:%3Fxt%3Durn%3Abtih%3A{HEX_HASH}", None),
])
def test_resolve_torrent_hash(sources):
    assert resolve_torrent_hash(*sources) == HEX_HASH.upper()


def test_resolve_torrent_hash_without_identity():
    assert resolve_torrent_hash("", None, "https://example.com/file.torrent") is None

import json

import pytest

from adblock_updater.registry import (
    DEFAULT_SET,
    REGIONS_SET,
    CatalogError,
    ListDescriptor,
    get_list_set,
    load_catalog,
    parse_catalog,
)


def test_bundled_catalog_has_default_and_regions():
    catalog = load_catalog()

    default_lists = get_list_set(catalog, DEFAULT_SET)
    regions = get_list_set(catalog, REGIONS_SET)

    assert default_lists
    assert regions
    assert all(d.url.startswith("https://") for d in default_lists + regions)
    assert all(d.langs for d in regions)
    assert len({d.uuid for d in regions}) == len(regions)


def test_parse_catalog_preserves_order_and_fields():
    catalog = parse_catalog({
        "default": [
            {"uuid": "A", "url": "https://lists.example/a.txt"},
            {"uuid": "B", "url": "https://lists.example/b.txt", "title": "B list"},
        ],
        "regions": [
            {"uuid": "R1", "url": "http://lists.example/r1.txt", "langs": ["de", "at"]},
            {"uuid": "R2", "url": "http://lists.example/r2.txt", "langs": "fr", "transform": "hosts"},
        ],
    })

    assert [d.uuid for d in catalog["default"]] == ["A", "B"]
    assert catalog["default"][1].title == "B list"
    assert catalog["default"][0].langs == ()
    assert catalog["regions"][0] == ListDescriptor(
        url="http://lists.example/r1.txt", uuid="R1", langs=("de", "at"),
    )
    assert catalog["regions"][1].langs == ("fr",)
    assert catalog["regions"][1].transform == "hosts"


def test_load_catalog_from_file(tmp_path):
    path = tmp_path / "lists.json"
    path.write_text(json.dumps({"default": [], "regions": []}), encoding="utf-8")

    assert load_catalog(path) == {"default": [], "regions": []}


@pytest.mark.parametrize("entry, message", [
    ({"url": "https://lists.example/a.txt"}, "missing 'uuid'"),
    ({"uuid": "A"}, "missing 'url'"),
    ({"uuid": "A", "url": "ftp://lists.example/a.txt"}, "not an HTTP(S) URL"),
    ({"uuid": "../escape", "url": "https://lists.example/a.txt"}, "directory name"),
    ({"uuid": "A", "url": "https://lists.example/a.txt", "transform": "nope"}, "unknown transform"),
    ({"uuid": "A", "url": "https://lists.example/a.txt", "langs": [1]}, "'langs'"),
    ("https://lists.example/a.txt", "expected an object"),
])
def test_invalid_entries_are_rejected(entry, message):
    with pytest.raises(CatalogError, match=message.replace("(", r"\(").replace(")", r"\)")):
        parse_catalog({"regions": [entry]})


def test_duplicate_uuid_in_a_set_is_rejected():
    entry = {"uuid": "R1", "url": "https://lists.example/r1.txt"}
    with pytest.raises(CatalogError, match="duplicate uuid R1"):
        parse_catalog({"regions": [entry, entry]})


def test_top_level_must_be_an_object():
    with pytest.raises(CatalogError):
        parse_catalog([{"uuid": "A", "url": "https://lists.example/a.txt"}])


def test_missing_and_malformed_catalog_files(tmp_path):
    with pytest.raises(CatalogError, match="not found"):
        load_catalog(tmp_path / "missing.json")

    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(CatalogError, match="Invalid JSON"):
        load_catalog(bad)


def test_unknown_list_set():
    with pytest.raises(CatalogError, match="Unknown list set: regions"):
        get_list_set({"default": []}, "regions")

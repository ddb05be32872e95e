#!/usr/bin/env python3
"""
registry.py - Filter List Catalog

Loads the catalog of filter lists the updater builds data files for. The
catalog is a JSON object keyed by list-set name:

    {
      "default": [{"uuid": "...", "url": "https://..."}, ...],
      "regions": [{"uuid": "...", "url": "https://...", "langs": ["de"]}, ...]
    }

Every entry needs a "url" and a "uuid". Optional keys are "langs" (regional
lists), "title" and "transform" (a name from transforms.TRANSFORMS).

A copy of the catalog ships in data/lists.json and is used when no other
catalog file is given.

Usage:
    python -m adblock_updater.registry [--catalog lists.json]
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import NamedTuple
from urllib.parse import urlparse

from adblock_updater.transforms import TRANSFORMS


DEFAULT_SET = "default"
REGIONS_SET = "regions"

BUNDLED_CATALOG = Path(__file__).parent / "data" / "lists.json"


class CatalogError(Exception):
    """The list catalog could not be loaded or is malformed."""


class ListDescriptor(NamedTuple):
    """One filter list from the catalog."""
    url: str
    uuid: str
    langs: tuple[str, ...] = ()
    title: str = ""
    transform: str | None = None


def _is_http_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _is_safe_uuid(uuid: str) -> bool:
    # The uuid becomes a directory and file name component
    if uuid in (".", ".."):
        return False
    return "/" not in uuid and "\\" not in uuid


def parse_entry(set_name: str, index: int, entry: object) -> ListDescriptor:
    """Validate one catalog entry and turn it into a ListDescriptor."""
    where = f"{set_name}[{index}]"
    if not isinstance(entry, dict):
        raise CatalogError(f"{where}: expected an object, got {type(entry).__name__}")

    url = entry.get("url")
    uuid = entry.get("uuid")
    if not isinstance(url, str) or not url:
        raise CatalogError(f"{where}: missing 'url'")
    if not isinstance(uuid, str) or not uuid:
        raise CatalogError(f"{where}: missing 'uuid'")
    if not _is_http_url(url):
        raise CatalogError(f"{where}: not an HTTP(S) URL: {url}")
    if not _is_safe_uuid(uuid):
        raise CatalogError(f"{where}: uuid cannot be used as a directory name: {uuid}")

    langs = entry.get("langs") or []
    if isinstance(langs, str):
        langs = [langs]
    if not isinstance(langs, list) or not all(isinstance(lang, str) for lang in langs):
        raise CatalogError(f"{where}: 'langs' must be a list of strings")

    transform = entry.get("transform")
    if transform is not None and transform not in TRANSFORMS:
        raise CatalogError(f"{where}: unknown transform '{transform}'")

    return ListDescriptor(
        url=url,
        uuid=uuid,
        langs=tuple(langs),
        title=str(entry.get("title") or ""),
        transform=transform,
    )


def parse_catalog(data: object) -> dict[str, list[ListDescriptor]]:
    """Turn decoded catalog JSON into list sets, preserving entry order."""
    if not isinstance(data, dict):
        raise CatalogError("catalog must be a JSON object keyed by list-set name")

    catalog: dict[str, list[ListDescriptor]] = {}
    for set_name, entries in data.items():
        if not isinstance(entries, list):
            raise CatalogError(f"{set_name}: expected a list of entries")

        descriptors = []
        seen: set[str] = set()
        for i, entry in enumerate(entries):
            descriptor = parse_entry(set_name, i, entry)
            if descriptor.uuid in seen:
                raise CatalogError(f"{set_name}: duplicate uuid {descriptor.uuid}")
            seen.add(descriptor.uuid)
            descriptors.append(descriptor)
        catalog[set_name] = descriptors

    return catalog


def load_catalog(path: str | Path | None = None) -> dict[str, list[ListDescriptor]]:
    """Load a catalog file, or the bundled catalog when path is None."""
    catalog_path = Path(path) if path is not None else BUNDLED_CATALOG
    try:
        with open(catalog_path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise CatalogError(f"Catalog file not found: {catalog_path}") from None
    except json.JSONDecodeError as e:
        raise CatalogError(f"Invalid JSON in {catalog_path}: {e}") from e
    except OSError as e:
        raise CatalogError(f"Could not read {catalog_path}: {e}") from e

    return parse_catalog(data)


def get_list_set(catalog: dict[str, list[ListDescriptor]], name: str) -> list[ListDescriptor]:
    """Return the named list set in catalog order."""
    try:
        return list(catalog[name])
    except KeyError:
        raise CatalogError(f"Unknown list set: {name}") from None


def main() -> int:
    """Print the catalog contents."""
    parser = argparse.ArgumentParser(description="Show the filter list catalog")
    parser.add_argument("--catalog", help="Path to a catalog JSON file (default: bundled)")
    args = parser.parse_args()

    try:
        catalog = load_catalog(args.catalog)
    except CatalogError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    for set_name, descriptors in catalog.items():
        print(f"{set_name} ({len(descriptors)} lists)")
        for d in descriptors:
            langs = f" [{','.join(d.langs)}]" if d.langs else ""
            print(f"   {d.uuid}{langs} {d.title or d.url}")

    return 0


if __name__ == "__main__":
    sys.exit(main())

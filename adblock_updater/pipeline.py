#!/usr/bin/env python3
"""
pipeline.py

Main pipeline for building ad-block DAT files.

Usage:
    python -m adblock_updater [--catalog lists.json] [--output-root build]

Pipeline stages:
1. Default list: fetch every default list concurrently, join them in catalog
   order, compile, write default/rs-ABPFilterParserData.dat
2. Regions (only if stage 1 succeeded): for each regional list in turn,
   fetch, compile, write <uuid>/rs-<uuid>.dat

Any failure stops the run and nothing already written is removed. With
--keep-going a failing region is recorded and the remaining regions are
still built; the run then reports which regions failed.
"""
from __future__ import annotations

import argparse
import asyncio
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import NamedTuple

import aiohttp

from adblock_updater.compiler import CompileError, CompileStats, compile_with_stats
from adblock_updater.downloader import (
    DEFAULT_TIMEOUT,
    FetchError,
    create_session,
    fetch_all,
    fetch_list,
)
from adblock_updater.registry import (
    DEFAULT_SET,
    REGIONS_SET,
    CatalogError,
    ListDescriptor,
    get_list_set,
    load_catalog,
)
from adblock_updater.transforms import transform_for
from adblock_updater.writer import (
    DEFAULT_DAT_FILENAME,
    DEFAULT_OUTPUT_ROOT,
    DEFAULT_SUBDIR,
    region_filename,
    write_data_file,
)


VERBOSE_LOGGING = False  # Default for --verbose: per-file compile stats

# Errors that end a run (or, with keep_going, a single region)
PIPELINE_ERRORS = (FetchError, CompileError, CatalogError, OSError)


class RegionOutcome(NamedTuple):
    """Result of building one regional data file."""
    uuid: str
    url: str
    path: Path | None = None
    error: str | None = None


@dataclass
class PipelineResult:
    """Outcome of a whole run. main() maps ok to the exit code."""
    ok: bool
    default_path: Path | None = None
    regions: list[RegionOutcome] = field(default_factory=list)
    error: str | None = None

    @property
    def failed_regions(self) -> list[RegionOutcome]:
        return [r for r in self.regions if r.error is not None]


def _print_stats(path: Path, stats: CompileStats, verbose: bool) -> None:
    if verbose:
        print(f"   {path}: {stats.rule_lines:,} rules, {stats.output_bytes:,} bytes")


async def build_default(
    session: aiohttp.ClientSession,
    descriptors: list[ListDescriptor],
    root: str | Path = DEFAULT_OUTPUT_ROOT,
    timeout: float | None = DEFAULT_TIMEOUT,
    verbose: bool = VERBOSE_LOGGING,
) -> Path:
    """Stage 1: build the default data file from every default list."""
    bodies = await fetch_all(session, descriptors, timeout)
    data, stats = compile_with_stats(bodies)
    path = await write_data_file(data, DEFAULT_DAT_FILENAME, DEFAULT_SUBDIR, root)
    _print_stats(path, stats, verbose)
    return path


async def build_region(
    session: aiohttp.ClientSession,
    descriptor: ListDescriptor,
    root: str | Path = DEFAULT_OUTPUT_ROOT,
    timeout: float | None = DEFAULT_TIMEOUT,
    verbose: bool = VERBOSE_LOGGING,
) -> Path:
    """Build the data file for one regional list."""
    print(f"{','.join(descriptor.langs)} {descriptor.url}...")
    body = await fetch_list(session, descriptor.url, transform_for(descriptor), timeout)
    data, stats = compile_with_stats([body])
    path = await write_data_file(data, region_filename(descriptor.uuid), descriptor.uuid, root)
    _print_stats(path, stats, verbose)
    return path


async def build_regions(
    session: aiohttp.ClientSession,
    descriptors: list[ListDescriptor],
    root: str | Path = DEFAULT_OUTPUT_ROOT,
    timeout: float | None = DEFAULT_TIMEOUT,
    keep_going: bool = False,
    verbose: bool = VERBOSE_LOGGING,
) -> list[RegionOutcome]:
    """
    Stage 2: build one data file per region, one region at a time.

    Without keep_going the first failure propagates and later regions are
    not attempted. With keep_going the failure is recorded in that region's
    outcome and the next region is built.
    """
    print("Processing per region list updates...")
    outcomes = []
    for descriptor in descriptors:
        try:
            path = await build_region(session, descriptor, root, timeout, verbose)
        except PIPELINE_ERRORS as e:
            if not keep_going:
                raise
            print(f"   ⚠️  {descriptor.uuid}: {e}", file=sys.stderr)
            outcomes.append(RegionOutcome(descriptor.uuid, descriptor.url, error=str(e)))
            continue
        outcomes.append(RegionOutcome(descriptor.uuid, descriptor.url, path=path))
    return outcomes


async def run(
    catalog: dict[str, list[ListDescriptor]],
    root: str | Path = DEFAULT_OUTPUT_ROOT,
    timeout: float | None = DEFAULT_TIMEOUT,
    keep_going: bool = False,
    skip_regions: bool = False,
    verbose: bool = VERBOSE_LOGGING,
) -> PipelineResult:
    """
    Run both stages and return the outcome instead of raising.

    Stage 2 only starts once stage 1 has written the default data file.
    """
    result = PipelineResult(ok=False)
    try:
        default_lists = get_list_set(catalog, DEFAULT_SET)
        regions = [] if skip_regions else get_list_set(catalog, REGIONS_SET)

        async with create_session(timeout) as session:
            result.default_path = await build_default(session, default_lists, root, timeout, verbose)
            if not skip_regions:
                result.regions = await build_regions(session, regions, root, timeout, keep_going, verbose)
    except PIPELINE_ERRORS as e:
        result.error = str(e)
        return result

    failed = result.failed_regions
    if failed:
        result.error = f"{len(failed)} of {len(result.regions)} regions failed"
        return result

    result.ok = True
    return result


def print_summary(result: PipelineResult) -> None:
    """Print which regions failed under --keep-going."""
    failed = result.failed_regions
    if not failed:
        return
    built = len(result.regions) - len(failed)
    print(f"\n📊 Regions built: {built}/{len(result.regions)}")
    for outcome in failed:
        print(f"   - {outcome.uuid} ({outcome.url}): {outcome.error}")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Build ad-block DAT files from filter lists")
    parser.add_argument("--catalog", help="List catalog JSON file (default: bundled catalog)")
    parser.add_argument("--output-root", default=DEFAULT_OUTPUT_ROOT, help="Directory to write ad-block-updater/ into")
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT, help="Request timeout in seconds (0 = none)")
    parser.add_argument("--keep-going", action="store_true", help="Build the remaining regions when one fails")
    parser.add_argument("--skip-regions", action="store_true", help="Only build the default data file")
    parser.add_argument("--verbose", action="store_true", help="Print compile statistics per data file")

    args = parser.parse_args(argv)
    verbose = args.verbose or VERBOSE_LOGGING

    start_time = time.time()
    try:
        catalog = load_catalog(args.catalog)
    except CatalogError as e:
        print(f"Something went wrong, aborting: {e}", file=sys.stderr)
        return 1

    result = asyncio.run(run(
        catalog,
        args.output_root,
        args.timeout,
        keep_going=args.keep_going,
        skip_regions=args.skip_regions,
        verbose=verbose,
    ))

    print_summary(result)
    if not result.ok:
        print(f"Something went wrong, aborting: {result.error}", file=sys.stderr)
        return 1

    if verbose:
        print(f"⏱️  Total time: {time.time() - start_time:.1f}s")
    print("Thank you for updating the data files, don't forget to upload them too!")
    return 0


if __name__ == "__main__":
    sys.exit(main())

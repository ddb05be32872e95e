#!/usr/bin/env python3
"""
downloader.py - Async Filter List Downloader

Fetches filter lists over HTTP with aiohttp. A single failure is final: there
are no retries and no cached fallback, the caller decides what a failure
means for the run.

Usage:
    python -m adblock_updater.downloader URL [URL ...] [--timeout 30]
"""
from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Callable, Iterable

import aiohttp

from adblock_updater import __version__
from adblock_updater.transforms import transform_for


# Default configuration
DEFAULT_TIMEOUT = 30
DEFAULT_CONCURRENCY = 8

USER_AGENT = f"adblock-updater/{__version__}"


class FetchError(Exception):
    """A filter list could not be fetched."""

    def __init__(self, url: str, message: str):
        super().__init__(message)
        self.url = url


class TransportError(FetchError):
    """DNS, connection or timeout failure before a response arrived."""

    def __init__(self, url: str, reason: str):
        super().__init__(url, f"Request error for URL {url}: {reason}")
        self.reason = reason


class BadStatusError(FetchError):
    """The server answered with something other than 200."""

    def __init__(self, url: str, status: int):
        super().__init__(url, f"Error status code {status} returned for URL: {url}")
        self.status = status


def _client_timeout(timeout: float | None) -> aiohttp.ClientTimeout:
    # 0 or None means wait forever
    return aiohttp.ClientTimeout(total=timeout or None)


def create_session(
    timeout: float | None = DEFAULT_TIMEOUT,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> aiohttp.ClientSession:
    """Create the shared client session with connection pooling."""
    connector = aiohttp.TCPConnector(limit=concurrency, limit_per_host=2)
    return aiohttp.ClientSession(
        connector=connector,
        timeout=_client_timeout(timeout),
        headers={"User-Agent": USER_AGENT},
    )


def decode_body(content: bytes) -> str:
    """Decode a list body as UTF-8, dropping a leading BOM."""
    return content.decode("utf-8-sig", errors="replace")


async def fetch_list(
    session: aiohttp.ClientSession,
    url: str,
    transform: Callable[[str], str] | None = None,
    timeout: float | None = DEFAULT_TIMEOUT,
) -> str:
    """
    Fetch a single filter list and return its text.

    Raises:
        TransportError: the request failed before a response arrived
        BadStatusError: the response status was not 200
    """
    try:
        async with session.get(
            url,
            timeout=_client_timeout(timeout),
            allow_redirects=True,
        ) as response:
            if response.status != 200:
                raise BadStatusError(url, response.status)
            content = await response.read()
    except asyncio.TimeoutError:
        raise TransportError(url, "timed out") from None
    except aiohttp.ClientError as e:
        raise TransportError(url, str(e) or type(e).__name__) from e

    body = decode_body(content)
    if transform is not None:
        body = transform(body)
    return body


async def fetch_all(
    session: aiohttp.ClientSession,
    descriptors: Iterable,
    timeout: float | None = DEFAULT_TIMEOUT,
) -> list[str]:
    """
    Fetch every list concurrently and return bodies in descriptor order.

    Each descriptor's transform (if any) is applied to its body. The first
    failure (in descriptor order) propagates once every request has finished.
    """
    tasks = []
    for descriptor in descriptors:
        print(f"{descriptor.url}...")
        tasks.append(fetch_list(session, descriptor.url, transform_for(descriptor), timeout))

    # gather keeps argument order, not completion order
    results = await asyncio.gather(*tasks, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return list(results)


async def _fetch_urls(urls: list[str], timeout: float | None) -> list[tuple[str, str | None, str | None]]:
    results = []
    async with create_session(timeout) as session:
        bodies = await asyncio.gather(
            *(fetch_list(session, url, timeout=timeout) for url in urls),
            return_exceptions=True,
        )
    for url, body in zip(urls, bodies):
        if isinstance(body, FetchError):
            results.append((url, None, str(body)))
        elif isinstance(body, BaseException):
            raise body
        else:
            results.append((url, body, None))
    return results


def main() -> int:
    """Fetch the given URLs and report line counts."""
    parser = argparse.ArgumentParser(description="Fetch filter lists and report their size")
    parser.add_argument("urls", nargs="+", help="Filter list URLs")
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT, help="Request timeout in seconds (0 = none)")

    args = parser.parse_args()

    print(f"🔄 Fetching {len(args.urls)} lists...")
    results = asyncio.run(_fetch_urls(args.urls, args.timeout))

    failed = 0
    for url, body, error in results:
        if error is not None:
            failed += 1
            print(f"   - {url}: {error}", file=sys.stderr)
        else:
            print(f"   {url}: {len(body.splitlines()):,} lines")

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())

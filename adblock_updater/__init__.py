"""
adblock_updater package - Ad-block DAT File Updater

Modules:
    registry: Load the list catalog (default and per-region filter lists)
    transforms: Per-list text transforms, looked up by name
    downloader: Fetch filter lists over HTTP with aiohttp
    compiler: Compile rule text with the adblock engine and serialize it
    writer: Write serialized data files under build/ad-block-updater/
    pipeline: Main two-phase pipeline and command-line entry point
"""

__version__ = "1.0.0"

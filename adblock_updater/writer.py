"""
writer.py - DAT File Writer

Writes serialized engines to the layout the updater publishes:

    <root>/ad-block-updater/default/rs-ABPFilterParserData.dat
    <root>/ad-block-updater/<uuid>/rs-<uuid>.dat

Directories are created as needed; existing files are overwritten.
"""
from __future__ import annotations

from pathlib import Path

import aiofiles
import aiofiles.os


DEFAULT_OUTPUT_ROOT = "build"
OUTPUT_DIR = "ad-block-updater"

DEFAULT_SUBDIR = "default"
DEFAULT_DAT_FILENAME = "rs-ABPFilterParserData.dat"


def region_filename(uuid: str) -> str:
    """DAT filename for a regional list."""
    return f"rs-{uuid}.dat"


def output_path(root: str | Path, subdir: str, filename: str) -> Path:
    return Path(root) / OUTPUT_DIR / subdir / filename


async def ensure_dirs(root: str | Path, subdir: str) -> Path:
    """Create root, root/ad-block-updater and its subdir, one level at a time."""
    path = Path(root)
    for part in (OUTPUT_DIR, subdir):
        await aiofiles.os.makedirs(path, exist_ok=True)
        path = path / part
    await aiofiles.os.makedirs(path, exist_ok=True)
    return path


async def write_data_file(
    buffer: bytes,
    filename: str,
    subdir: str,
    root: str | Path = DEFAULT_OUTPUT_ROOT,
) -> Path:
    """
    Write buffer to <root>/ad-block-updater/<subdir>/<filename>.

    The buffer goes to a .tmp file first and is moved into place once
    complete, so a failed write never replaces an existing data file.
    Returns the written path. OSError (permissions, disk full) propagates.
    """
    directory = await ensure_dirs(root, subdir)
    path = directory / filename
    temp_path = path.with_suffix(".tmp")
    try:
        async with aiofiles.open(temp_path, "wb") as f:
            await f.write(buffer)
        await aiofiles.os.replace(temp_path, path)
    except OSError:
        try:
            await aiofiles.os.remove(temp_path)
        except FileNotFoundError:
            pass
        raise
    return path

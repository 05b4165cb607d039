"""
Star Cache

Binary cache of the parsed star table, so that multi-hundred-thousand-line
catalogs are parsed only once.

File layout (little endian):
    header:  int32 version, int32 catalog mask, int32 record count
    records: count x (float32 vmag, bmag, ascension, declination, parallax)

A cache written by another format version or for another set of catalogs is
a plain miss: the caller re-parses the catalogs and writes a fresh cache.
"""

from __future__ import annotations
import logging
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

import numpy as np

from catalogs.records import STAR_DTYPE, CatalogType, catalog_mask, empty_star_table, freeze

logger = logging.getLogger("starfield.cache")

# Increase this if the cache format changed and is incompatible now.
# This will force a reload.
CACHE_VERSION = 3

DEFAULT_CACHE_FILE = "star_cache.dat"

HEADER_FORMAT = "<iii"
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)
RECORD_SIZE = STAR_DTYPE.itemsize


@dataclass(frozen=True)
class CacheHeader:
    version: int
    catalog_mask: int
    count: int

    def pack(self) -> bytes:
        return struct.pack(HEADER_FORMAT, self.version, self.catalog_mask, self.count)

    @classmethod
    def unpack(cls, data: bytes) -> "CacheHeader":
        version, mask, count = struct.unpack_from(HEADER_FORMAT, data, 0)
        return cls(version=version, catalog_mask=mask, count=count)


def read_cache_header(path: str | Path) -> Optional[CacheHeader]:
    """Header of an existing cache file, None if missing or truncated."""
    try:
        with open(path, "rb") as f:
            data = f.read(HEADER_SIZE)
    except OSError:
        return None
    if len(data) < HEADER_SIZE:
        return None
    return CacheHeader.unpack(data)


def write_star_cache(table: np.ndarray, catalogs: Iterable[CatalogType],
                     path: str | Path) -> bool:
    """
    Serialize a star table.

    Args:
        table: Star table (STAR_DTYPE)
        catalogs: Catalogs the table was built from
        path: Cache file

    Returns:
        True on success. Failure to write is logged, never raised.
    """
    path = Path(path)
    header = CacheHeader(CACHE_VERSION, catalog_mask(catalogs), len(table))
    payload = header.pack() + np.ascontiguousarray(table, dtype=STAR_DTYPE).tobytes()

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            f.write(payload)
    except OSError as e:
        logger.error("Failed to write binary star data: Cannot open file '%s' for writing! (%s)",
                     path, e)
        return False

    logger.info("Writing %d stars (%d bytes) into '%s'.", len(table), len(payload), path)
    return True


def read_star_cache(catalogs: Iterable[CatalogType],
                    path: str | Path) -> Optional[np.ndarray]:
    """
    Load a star table from the cache.

    Returns:
        Read-only star table, or None on a cache miss (no file, other
        version, other catalog set, truncated file)
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError:
        logger.debug("No star cache at '%s'.", path)
        return None

    if len(data) < HEADER_SIZE:
        logger.warning("Star cache '%s' is truncated, ignoring it.", path)
        return None

    header = CacheHeader.unpack(data)

    if header.version != CACHE_VERSION:
        logger.info("Star cache '%s' has version %d (expected %d), reloading catalogs.",
                    path, header.version, CACHE_VERSION)
        return None

    expected_mask = catalog_mask(catalogs)
    if header.catalog_mask != expected_mask:
        logger.info("Star cache '%s' was built from other catalogs (mask %#x, expected %#x), "
                    "reloading catalogs.", path, header.catalog_mask, expected_mask)
        return None

    if header.count < 0 or len(data) < HEADER_SIZE + header.count * RECORD_SIZE:
        logger.warning("Star cache '%s' announces %d stars but is too short, ignoring it.",
                       path, header.count)
        return None

    if header.count == 0:
        return empty_star_table()

    table = np.frombuffer(data, dtype=STAR_DTYPE, count=header.count, offset=HEADER_SIZE).copy()
    logger.info("Read a total of %d stars from cache '%s'.", len(table), path)
    return freeze(table)

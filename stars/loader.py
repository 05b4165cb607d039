"""
Star Loader

Cache first, catalogs second:

  1. Try the binary star cache.
  2. On a miss, parse every configured catalog (Hipparcos first, so that
     Tycho/Tycho2 can leave out stars Hipparcos already provides).
  3. Write a fresh cache if anything was loaded.

Catalog combination rules
-------------------------
  Tycho + Tycho2     Tycho2 is skipped (Tycho already loaded)
  Gaia + anything    Gaia is skipped; it is only used on its own
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Dict, Mapping

import numpy as np

from catalogs.parser import read_catalog
from catalogs.records import CatalogType, empty_star_table, freeze

from .cache import DEFAULT_CACHE_FILE, read_star_cache, write_star_cache

logger = logging.getLogger("starfield.loader")


def resolve_catalogs(catalogs: Mapping[CatalogType, str | Path]) -> Dict[CatalogType, Path]:
    """
    Apply the combination rules to the configured catalogs.

    Returns:
        Catalogs to parse, in CatalogType order
    """
    active: Dict[CatalogType, Path] = {}
    for catalog_type in sorted(catalogs):
        path = Path(catalogs[catalog_type])

        if catalog_type == CatalogType.TYCHO2 and CatalogType.TYCHO in catalogs:
            logger.warning("Failed to load Tycho2 catalog: Tycho already loaded!")
            continue

        if catalog_type == CatalogType.GAIA and len(catalogs) > 1:
            logger.warning("Failed to load Gaia catalog: it cannot be combined with other catalogs!")
            continue

        active[catalog_type] = path
    return active


def parse_catalogs(catalogs: Mapping[CatalogType, str | Path]) -> np.ndarray:
    """Parse the configured catalogs (no cache involved) into one star table."""
    hipparcos_loaded = CatalogType.HIPPARCOS in catalogs

    tables = []
    for catalog_type, path in resolve_catalogs(catalogs).items():
        table = read_catalog(catalog_type, path, hipparcos_loaded=hipparcos_loaded)
        if table is not None and len(table):
            tables.append(table)

    if not tables:
        return empty_star_table()
    return freeze(np.concatenate(tables))


def load_stars(catalogs: Mapping[CatalogType, str | Path],
               cache_path: str | Path = DEFAULT_CACHE_FILE) -> np.ndarray:
    """
    Load the star table for the configured catalogs.

    Args:
        catalogs: CatalogType -> catalog file
        cache_path: Star cache file

    Returns:
        Read-only star table; empty if nothing could be loaded
    """
    stars = read_star_cache(catalogs.keys(), cache_path)
    if stars is not None:
        return stars

    stars = parse_catalogs(catalogs)

    if len(stars):
        write_star_cache(stars, catalogs.keys(), cache_path)
    else:
        logger.warning("Loaded no stars! Stars will not work properly.")

    return stars

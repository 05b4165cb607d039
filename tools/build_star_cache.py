#!/usr/bin/env python3
"""
Build (or inspect) the binary star cache ahead of time.

Parses the given catalogs with the same rules as the renderer and writes the
cache file, so the first start of the preview does not have to parse
hundreds of thousands of catalog lines.

Usage:
    python tools/build_star_cache.py --hipparcos data/hip_main.dat --tycho data/tyc_main.dat
    python tools/build_star_cache.py --cache star_cache.dat --info
"""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Dict, List, Optional

from catalogs.records import CatalogType
from stars import (
    CACHE_VERSION,
    DEFAULT_CACHE_FILE,
    build_vertex_table,
    load_stars,
    read_cache_header,
)

_CATALOG_OPTIONS = {
    "hipparcos": CatalogType.HIPPARCOS,
    "tycho":     CatalogType.TYCHO,
    "tycho2":    CatalogType.TYCHO2,
    "gaia":      CatalogType.GAIA,
}


def _mask_names(mask: int) -> str:
    names = [t.name for t in CatalogType if mask & (1 << int(t))]
    return "+".join(names) or "none"


def _info(cache: Path) -> int:
    header = read_cache_header(cache)
    if header is None:
        print(f"[cache] {cache}: missing or truncated")
        return 1

    status = "ok" if header.version == CACHE_VERSION else f"stale (expected v{CACHE_VERSION})"
    print(f"[cache] {cache}  version={header.version} ({status})  "
          f"catalogs={_mask_names(header.catalog_mask)}  stars={header.count:,}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser()
    for name in _CATALOG_OPTIONS:
        ap.add_argument(f"--{name}", metavar="FILE")
    ap.add_argument("--cache", default=DEFAULT_CACHE_FILE)
    ap.add_argument("--info", action="store_true", help="print the cache header and exit")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")

    cache = Path(args.cache)
    if args.info:
        return _info(cache)

    catalogs: Dict[CatalogType, str] = {}
    for name, catalog_type in _CATALOG_OPTIONS.items():
        path = getattr(args, name)
        if path:
            catalogs[catalog_type] = path

    if not catalogs:
        ap.error("at least one catalog is required")

    stars = load_stars(catalogs, cache)
    if len(stars) == 0:
        return 1

    vertices = build_vertex_table(stars)
    print(f"[stars] {cache}  stars={len(stars):,}  "
          f"mag={vertices.min_magnitude:.2f}..{vertices.max_magnitude:.2f}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

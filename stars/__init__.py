"""
Stars module — catalog ingestion, star cache and render table.

Usage:
    from stars import load_stars, build_vertex_table
    stars = load_stars({CatalogType.HIPPARCOS: "hip_main.dat"}, "star_cache.dat")
    vertices = build_vertex_table(stars)
"""

from .cache import (
    CACHE_VERSION,
    DEFAULT_CACHE_FILE,
    CacheHeader,
    read_cache_header,
    read_star_cache,
    write_star_cache,
)
from .loader import load_stars, parse_catalogs, resolve_catalogs
from .vertex_table import VertexTable, build_vertex_table

__all__ = [
    "CACHE_VERSION",
    "DEFAULT_CACHE_FILE",
    "CacheHeader",
    "read_cache_header",
    "read_star_cache",
    "write_star_cache",
    "load_stars",
    "parse_catalogs",
    "resolve_catalogs",
    "VertexTable",
    "build_vertex_table",
]

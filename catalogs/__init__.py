"""
Catalogs module — star catalog records and flat-text catalog parsing.
"""

from .records import (
    ABSENT,
    COLUMN_MAPPING,
    STAR_DTYPE,
    CatalogColumn,
    CatalogType,
    StarRecord,
    catalog_mask,
)
from .parser import parse_catalog_lines, read_catalog

__all__ = [
    "ABSENT",
    "COLUMN_MAPPING",
    "STAR_DTYPE",
    "CatalogColumn",
    "CatalogType",
    "StarRecord",
    "catalog_mask",
    "parse_catalog_lines",
    "read_catalog",
]

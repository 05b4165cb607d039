from __future__ import annotations

import pytest

from catalogs.records import COLUMN_MAPPING, DELIMITERS, MIN_TOKENS, CatalogColumn, CatalogType


def make_line(catalog_type: CatalogType, vmag="5.0", bmag="5.65", ra="90.0", dec="0.0",
              plx="", hip="") -> str:
    """One catalog line with the given fields at their mapped token positions."""
    mapping = COLUMN_MAPPING[catalog_type]
    width = max(MIN_TOKENS, max(mapping) + 1)
    tokens = ["x"] * width

    values = {
        CatalogColumn.VMAG: vmag,
        CatalogColumn.BMAG: bmag,
        CatalogColumn.PARALLAX: plx,
        CatalogColumn.ASCENSION: ra,
        CatalogColumn.DECLINATION: dec,
        CatalogColumn.HIP_ID: hip,
    }
    for column, value in values.items():
        index = mapping[column]
        if index >= 0:
            tokens[index] = str(value)
    return DELIMITERS[catalog_type].join(tokens) + "\n"


@pytest.fixture
def write_catalog(tmp_path):
    """Write catalog lines to a file under tmp_path and return its path."""
    def _write(name: str, lines) -> str:
        path = tmp_path / name
        path.write_text("".join(lines), encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture
def cache_path(tmp_path):
    return tmp_path / "star_cache.dat"

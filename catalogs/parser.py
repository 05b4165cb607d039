"""
Catalog Parser

Reads one flat-text star catalog (Hipparcos, Tycho, Tycho2 or a Gaia CSV
export) into a star table.

Each line is split on the catalog delimiter and the logical columns are
picked via COLUMN_MAPPING. Column values are then sanitized in bulk with
pandas: anything that does not parse as a finite number becomes NaN and
the row is dropped (a bad parallax becomes 0 instead). Lines that are too
short, unparsable, or already covered by Hipparcos are skipped silently;
only a file that cannot be opened is an error.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from .records import (
    ABSENT, DELIMITERS, MIN_TOKENS, REQUIRED_COLUMNS, STAR_DTYPE, COLUMN_MAPPING,
    CatalogColumn, CatalogType, empty_star_table, freeze,
)

logger = logging.getLogger("starfield.catalogs")

PROGRESS_EVERY = 100_000

# Any leading integer counts as a HIP number, trailing text is ignored
_INTEGER_PATTERN = r"^\s*[+-]?\d+"

_COLUMN_NAMES = [c.name.lower() for c in CatalogColumn]


def _pick(tokens: List[str], index: int) -> str:
    if index == ABSENT or index >= len(tokens):
        return ""
    return tokens[index]


def _tokenize(catalog_type: CatalogType, lines: Iterable[str]) -> List[Tuple[str, ...]]:
    delimiter = DELIMITERS[catalog_type]
    columns = COLUMN_MAPPING[catalog_type]

    rows = []
    for line_no, line in enumerate(lines, start=1):
        tokens = line.rstrip("\r\n").split(delimiter)
        if len(tokens) >= MIN_TOKENS:
            rows.append(tuple(_pick(tokens, idx) for idx in columns))

        if line_no % PROGRESS_EVERY == 0:
            logger.debug("Scanned %d lines, %d candidate rows so far...", line_no, len(rows))
    return rows


def parse_catalog_lines(catalog_type: CatalogType, lines: Iterable[str],
                        hipparcos_loaded: bool = False) -> np.ndarray:
    """
    Parse catalog text lines into a read-only star table.

    Args:
        catalog_type: Layout of the lines
        lines: Raw text lines (with or without line endings)
        hipparcos_loaded: Hipparcos is configured as well; stars carrying a
                          HIP number are then left to the Hipparcos catalog

    Returns:
        Star table (STAR_DTYPE) in line order
    """
    rows = _tokenize(catalog_type, lines)
    if not rows:
        return empty_star_table()

    df = pd.DataFrame(rows, columns=_COLUMN_NAMES, dtype=object)

    # --- de-duplication against Hipparcos ---
    skip_hip = (
        hipparcos_loaded
        and catalog_type != CatalogType.HIPPARCOS
        and COLUMN_MAPPING[catalog_type][CatalogColumn.HIP_ID] != ABSENT
    )
    if skip_hip:
        in_hipparcos = df["hip_id"].astype(str).str.match(_INTEGER_PATTERN)
        df = df[~in_hipparcos.fillna(False).astype(bool)]

    # --- sanitize ---
    values = pd.DataFrame(index=df.index)
    for column in CatalogColumn:
        if column == CatalogColumn.HIP_ID:
            continue
        name = column.name.lower()
        numeric = pd.to_numeric(df[name].astype(str).str.strip(), errors="coerce").astype(np.float64)
        # inf and nan tokens are parse failures too
        values[name] = numeric.where(np.isfinite(numeric))

    required = [c.name.lower() for c in REQUIRED_COLUMNS]
    values = values.dropna(subset=required)
    values["parallax"] = values["parallax"].fillna(0.0)

    # --- coordinate normalization (renderer convention) ---
    ascension = np.radians(450.0 - values["ascension"].to_numpy(np.float64))
    declination = np.radians(values["declination"].to_numpy(np.float64))

    table = np.empty(len(values), dtype=STAR_DTYPE)
    table["vmag"] = values["vmag"].to_numpy(np.float32)
    table["bmag"] = values["bmag"].to_numpy(np.float32)
    table["ascension"] = ascension.astype(np.float32)
    table["declination"] = declination.astype(np.float32)
    table["parallax"] = values["parallax"].to_numpy(np.float32)
    return freeze(table)


def read_catalog(catalog_type: CatalogType, path: str | Path,
                 hipparcos_loaded: bool = False) -> Optional[np.ndarray]:
    """
    Read a catalog file.

    Returns:
        Star table, or None when the file cannot be opened or read
    """
    path = Path(path)
    logger.info("Reading star catalog '%s'.", path)

    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            table = parse_catalog_lines(catalog_type, f, hipparcos_loaded)
    except OSError as e:
        logger.error("Failed to load stars: Cannot open catalog file '%s': %s", path, e)
        return None

    logger.info("Read a total of %d stars from %s.", len(table), catalog_type.name)
    return table

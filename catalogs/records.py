"""
Star Records

Normalized star record and the static per-catalog column layout.

The in-memory star set is a numpy structured array (STAR_DTYPE). Its layout
is the cache record layout as well, so loading a cache is a single
frombuffer() call. StarRecord is the frozen per-row view used where a single
star is handled.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Iterable, List, Tuple

import numpy as np


class CatalogType(IntEnum):
    """
    Supported catalogs. The integer value is the bit used in the cache mask.

    Hipparcos and Tycho:  http://cdsarc.u-strasbg.fr/viz-bin/Cat?cat=I%2F239
    Tycho2:               http://cdsarc.u-strasbg.fr/cgi-bin/myqcat3?I/259/
    Gaia:                 comma separated export, see COLUMN_MAPPING
    """
    HIPPARCOS = 0
    TYCHO = 1
    TYCHO2 = 2
    GAIA = 3


class CatalogColumn(IntEnum):
    """Logical columns read from every catalog"""
    VMAG = 0         # visual magnitude
    BMAG = 1         # blue magnitude
    PARALLAX = 2     # trigonometric parallax (mas)
    ASCENSION = 3    # right ascension (deg)
    DECLINATION = 4  # declination (deg)
    HIP_ID = 5       # hipparcos number (cross-reference)


ABSENT = -1

# A data row has at least this many tokens; shorter lines are headers or noise
MIN_TOKENS = 13

# Token index of each CatalogColumn, in CatalogColumn order
COLUMN_MAPPING: Dict[CatalogType, Tuple[int, ...]] = {
    CatalogType.HIPPARCOS: (34, 32, 11, 8, 9, 31),
    CatalogType.TYCHO:     (34, 32, 11, 8, 9, 31),
    CatalogType.TYCHO2:    (19, 17, ABSENT, 2, 3, 23),
    # source_id, ra, ra_error, dec, dec_error, pmra, pmdec,
    # phot_g_mean_mag, phot_bp_mean_mag, phot_rp_mean_mag, bp_rp, ...
    CatalogType.GAIA:      (7, 8, ABSENT, 1, 3, ABSENT),
}

DELIMITERS: Dict[CatalogType, str] = {
    CatalogType.HIPPARCOS: "|",
    CatalogType.TYCHO:     "|",
    CatalogType.TYCHO2:    "|",
    CatalogType.GAIA:      ",",
}

REQUIRED_COLUMNS = (
    CatalogColumn.VMAG,
    CatalogColumn.BMAG,
    CatalogColumn.ASCENSION,
    CatalogColumn.DECLINATION,
)

STAR_DTYPE = np.dtype([
    ("vmag",        "<f4"),
    ("bmag",        "<f4"),
    ("ascension",   "<f4"),   # radians, renderer convention
    ("declination", "<f4"),   # radians
    ("parallax",    "<f4"),   # mas, 0 = unknown
])


def catalog_mask(catalogs: Iterable[CatalogType]) -> int:
    """Bitmask identifying a set of catalogs (one bit per CatalogType)."""
    mask = 0
    for catalog_type in set(catalogs):
        mask |= 1 << int(catalog_type)
    return mask


@dataclass(frozen=True, slots=True)
class StarRecord:
    vmag: float
    bmag: float
    ascension: float
    declination: float
    parallax: float = 0.0

    @property
    def color_index(self) -> float:
        """B-V colour index"""
        return self.bmag - self.vmag

    @classmethod
    def from_row(cls, row) -> "StarRecord":
        return cls(
            vmag=float(row["vmag"]),
            bmag=float(row["bmag"]),
            ascension=float(row["ascension"]),
            declination=float(row["declination"]),
            parallax=float(row["parallax"]),
        )


def empty_star_table() -> np.ndarray:
    return freeze(np.zeros(0, dtype=STAR_DTYPE))


def freeze(table: np.ndarray) -> np.ndarray:
    """Mark a star table read-only. Stars are never mutated after loading."""
    table.setflags(write=False)
    return table


def records_to_table(records: Iterable[StarRecord]) -> np.ndarray:
    rows = [(r.vmag, r.bmag, r.ascension, r.declination, r.parallax) for r in records]
    return freeze(np.array(rows, dtype=STAR_DTYPE))


def table_to_records(table: np.ndarray) -> List[StarRecord]:
    return [StarRecord.from_row(row) for row in table]

"""
Spectral Colour & Distance

Maps photometric and parallax fields of a star to a display colour and a
distance in parsecs.

Colours come from a fixed table sampled along the B-V colour index from
-0.4 to 2.0, values from http://www.vendian.org/mncharity/dir3/starcolor/details.html
"""

from __future__ import annotations
from typing import Tuple

import numpy as np

COLOR_INDEX_MIN = -0.4
COLOR_INDEX_MAX = 2.0

# Stars without a usable parallax are placed in the deep field
FALLBACK_DISTANCE_PC = 100_000.0

_SPECTRAL_HEX = (
    0x9bb2ff, 0x9eb5ff, 0xa3b9ff, 0xaabfff, 0xb2c5ff, 0xbbccff, 0xc4d2ff, 0xccd8ff,
    0xd3ddff, 0xdae2ff, 0xdfe5ff, 0xe4e9ff, 0xe9ecff, 0xeeefff, 0xf3f2ff, 0xf8f6ff,
    0xfef9ff, 0xfff9fb, 0xfff7f5, 0xfff5ef, 0xfff3ea, 0xfff1e5, 0xffefe0, 0xffeddb,
    0xffebd6, 0xffe8ce, 0xffe6ca, 0xffe5c6, 0xffe3c3, 0xffe2bf, 0xffe0bb, 0xffdfb8,
    0xffddb4, 0xffdbb0, 0xffdaad, 0xffd8a9, 0xffd6a5, 0xffd29c, 0xffd096, 0xffcc8f,
    0xffc885, 0xffc178, 0xffb765, 0xffa94b, 0xff9523, 0xff7b00, 0xff5200,
)


def _hex_to_rgb(value: int) -> Tuple[float, float, float]:
    return (((value >> 16) & 0xFF) / 255.0,
            ((value >> 8) & 0xFF) / 255.0,
            (value & 0xFF) / 255.0)


SPECTRAL_COLORS = np.array([_hex_to_rgb(h) for h in _SPECTRAL_HEX], dtype=np.float32)
SPECTRAL_COLORS.setflags(write=False)

# Spacing between table entries on the normalized [0, 1] colour index.
# Deliberately 1/(N-1) rather than a fixed 0.05 step, so the whole table is
# reachable and B-V 2.0 lands on the last entry.
COLOR_STEP = 1.0 / (len(SPECTRAL_COLORS) - 1)


def spectral_bucket(bmag, vmag):
    """
    Table index for a blue/visual magnitude pair.

    Works on scalars and numpy arrays alike. The colour index is clamped to
    [-0.4, 2.0] before lookup, so both ends of the range map to the first and
    last table entries.
    """
    bv = np.clip(np.asarray(bmag, dtype=np.float64) - np.asarray(vmag, dtype=np.float64),
                 COLOR_INDEX_MIN, COLOR_INDEX_MAX)
    normalized = (bv - COLOR_INDEX_MIN) / (COLOR_INDEX_MAX - COLOR_INDEX_MIN)
    bucket = np.floor(normalized / COLOR_STEP + 0.5).astype(np.int64)
    bucket = np.clip(bucket, 0, len(SPECTRAL_COLORS) - 1)
    if bucket.ndim == 0:
        return int(bucket)
    return bucket


def spectral_color(bmag: float, vmag: float) -> Tuple[float, float, float]:
    r, g, b = SPECTRAL_COLORS[spectral_bucket(bmag, vmag)]
    return float(r), float(g), float(b)


def spectral_colors(bmag: np.ndarray, vmag: np.ndarray) -> np.ndarray:
    """(N, 3) float32 colours for arrays of magnitudes"""
    return SPECTRAL_COLORS[spectral_bucket(bmag, vmag)]


def distance_parsec(parallax_mas: float) -> float:
    if parallax_mas > 0.0:
        return 1000.0 / parallax_mas
    return FALLBACK_DISTANCE_PC


def distances_parsec(parallax_mas: np.ndarray) -> np.ndarray:
    """Vectorized distance_parsec()"""
    plx = np.asarray(parallax_mas, dtype=np.float64)
    dist = np.full(plx.shape, FALLBACK_DISTANCE_PC, dtype=np.float64)
    known = plx > 0.0
    dist[known] = 1000.0 / plx[known]
    return dist


def star_color_and_distance(record) -> Tuple[Tuple[float, float, float], float]:
    """Colour and distance (pc) of a single StarRecord"""
    return spectral_color(record.bmag, record.vmag), distance_parsec(record.parallax)

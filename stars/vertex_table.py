"""
Vertex Table

Flat float32 array consumed by the star shaders, seven floats per star:

    declination, ascension, distance (pc), R, G, B, absolute magnitude

The magnitude is converted to an absolute magnitude here, once, using the
parallax distance. The vertex stage turns it back into an apparent magnitude
for the current observer position (see rendering/shaders.py).
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from core.photometry import absolute_magnitude
from core.spectral import distances_parsec, spectral_colors

logger = logging.getLogger("starfield.vertex_table")

FLOATS_PER_VERTEX = 7
FLOAT_SIZE = 4

# (shader location, component count, offset in floats)
ATTRIBUTES: List[Tuple[int, int, int]] = [
    (0, 2, 0),   # inDir: declination, ascension
    (1, 1, 2),   # inDist
    (2, 3, 3),   # inColor
    (3, 1, 6),   # inAbsMagnitude
]


@dataclass(frozen=True)
class VertexTable:
    data: np.ndarray                 # (N, 7) float32, read-only
    min_magnitude: float = 0.0       # brightest visual magnitude loaded
    max_magnitude: float = 0.0       # faintest visual magnitude loaded

    def __len__(self) -> int:
        return self.data.shape[0]

    @property
    def directions(self) -> np.ndarray:
        return self.data[:, 0:2]

    @property
    def distances(self) -> np.ndarray:
        return self.data[:, 2]

    @property
    def colors(self) -> np.ndarray:
        return self.data[:, 3:6]

    @property
    def magnitudes(self) -> np.ndarray:
        return self.data[:, 6]

    @property
    def stride_bytes(self) -> int:
        return FLOATS_PER_VERTEX * FLOAT_SIZE

    @property
    def attribute_layout(self) -> List[Tuple[int, int, int]]:
        """(location, components, byte offset) per vertex attribute"""
        return [(loc, n, offset * FLOAT_SIZE) for loc, n, offset in ATTRIBUTES]

    def as_bytes(self) -> bytes:
        return self.data.tobytes()


def build_vertex_table(stars: np.ndarray) -> VertexTable:
    """
    Build the render table for a star table (STAR_DTYPE), keeping star order.
    """
    n = len(stars)
    data = np.empty((n, FLOATS_PER_VERTEX), dtype=np.float32)
    if n == 0:
        data.setflags(write=False)
        return VertexTable(data)

    vmag = stars["vmag"].astype(np.float64)
    dist = distances_parsec(stars["parallax"])

    data[:, 0] = stars["declination"]
    data[:, 1] = stars["ascension"]
    data[:, 2] = dist
    data[:, 3:6] = spectral_colors(stars["bmag"], stars["vmag"])
    data[:, 6] = absolute_magnitude(vmag, dist)
    data.setflags(write=False)

    table = VertexTable(
        data=data,
        min_magnitude=float(vmag.min()),
        max_magnitude=float(vmag.max()),
    )
    logger.debug("Built %d star vertices, magnitudes %.2f..%.2f",
                 n, table.min_magnitude, table.max_magnitude)
    return table

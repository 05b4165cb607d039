"""
Photometry helpers

Python counterparts of the magnitude formulas in the star shaders, plus the
magnitude -> size/opacity scaling used when stars are drawn on the CPU.

    apparent = absolute + 5 * log10(d / 10pc)
    luminance = K * 10^(-0.4 * (m + 2.5 * log10(solid_angle * sr_to_arcsec2)))

(surface brightness formula, https://en.wikipedia.org/wiki/Surface_brightness)
"""

from __future__ import annotations
import math

import numpy as np

LUMINANCE_CALIBRATION = 10.8e4
STERADIANS_TO_SQUARE_ARCSECS = 4.25e10


def apparent_magnitude(absolute_mag, distance_pc):
    return absolute_mag + 5.0 * np.log10(np.asarray(distance_pc, dtype=np.float64) / 10.0)


def absolute_magnitude(visual_mag, distance_pc):
    return visual_mag - 5.0 * np.log10(np.asarray(distance_pc, dtype=np.float64) / 10.0)


def surface_brightness(apparent_mag: float, solid_angle: float) -> float:
    """Magnitude per square arcsecond of a star spread over solid_angle (sr)"""
    return apparent_mag + 2.5 * math.log10(solid_angle * STERADIANS_TO_SQUARE_ARCSECS)


def magnitude_to_luminance(apparent_mag: float, solid_angle: float) -> float:
    return LUMINANCE_CALIBRATION * 10.0 ** (-0.4 * surface_brightness(apparent_mag, solid_angle))


def magnitude_scale(magnitudes, loaded_min: float, loaded_max: float,
                    exponent: float = 1.0) -> np.ndarray:
    """
    Map magnitudes to [0, 1]: 1 for the brightest loaded star, 0 for the faintest.

    An exponent above one exaggerates bright stars, which makes a dense star
    field easier to read.
    """
    mags = np.asarray(magnitudes, dtype=np.float64)
    span = loaded_max - loaded_min
    if span <= 0.0:
        return np.ones(mags.shape, dtype=np.float64)
    t = np.clip((loaded_max - mags) / span, 0.0, 1.0)
    return t ** max(exponent, 1.0)


def lerp(lo: float, hi: float, t):
    return lo + (hi - lo) * t

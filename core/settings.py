"""
Star Settings

File paths and renderer tunables for the star field. Read from a JSON file
whose keys follow the plugin configuration section:

    {
      "stars": {
        "hipparcosCatalog": "data/hip_main.dat",
        "tychoCatalog": "data/tyc_main.dat",
        "starTexture": "data/star.png",
        "cacheFile": "star_cache.dat",
        "drawMode": "smooth_disc",
        "enableHDR": false
      }
    }
"""

from __future__ import annotations
import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping

from catalogs.records import CatalogType
from rendering.shader_variants import DrawMode
from stars.cache import DEFAULT_CACHE_FILE

# JSON key -> catalog
CATALOG_KEYS = {
    "hipparcosCatalog": CatalogType.HIPPARCOS,
    "tychoCatalog":     CatalogType.TYCHO,
    "tycho2Catalog":    CatalogType.TYCHO2,
    "gaiaCatalog":      CatalogType.GAIA,
}

# JSON key -> StarSettings attribute (floats)
_FLOAT_KEYS = {
    "minMagnitude":    "min_magnitude",
    "maxMagnitude":    "max_magnitude",
    "minSize":         "min_size",
    "maxSize":         "max_size",
    "minOpacity":      "min_opacity",
    "maxOpacity":      "max_opacity",
    "scalingExponent": "scaling_exponent",
    "solidAngle":      "solid_angle",
    "luminanceBoost":  "luminance_boost",
}

# JSON key -> StarSettings attribute (file paths)
_PATH_KEYS = {
    "starTexture":        "star_texture",
    "backgroundTexture1": "background_texture1",
    "backgroundTexture2": "background_texture2",
    "cacheFile":          "cache_file",
}

# JSON key -> StarSettings attribute (booleans)
_BOOL_KEYS = {
    "enableHDR":           "enable_hdr",
    "enableCelestialGrid": "enable_celestial_grid",
    "enableStarFigures":   "enable_star_figures",
}


class SettingsError(ValueError):
    """Configuration value of the wrong type or unknown name"""


@dataclass
class StarSettings:
    """Everything the star pipeline reads from the outside"""
    # Sources
    catalogs: Dict[CatalogType, str] = field(default_factory=dict)
    star_texture: str = ""
    background_texture1: str = ""        # celestial grid
    background_texture2: str = ""        # star figures
    cache_file: str = DEFAULT_CACHE_FILE

    # Magnitude window (stars outside are not drawn)
    min_magnitude: float = -5.0
    max_magnitude: float = 15.0

    # Appearance of faintest -> brightest loaded star
    min_size: float = 0.1
    max_size: float = 3.0
    min_opacity: float = 0.7
    max_opacity: float = 1.0
    scaling_exponent: float = 4.0

    solid_angle: float = 0.05 * 0.0001   # sr
    enable_hdr: bool = False
    draw_mode: DrawMode = DrawMode.SMOOTH_DISC
    luminance_boost: float = 0.0

    # Overlay layers
    enable_celestial_grid: bool = False
    enable_star_figures: bool = False

    @property
    def luminance_multiplier(self) -> float:
        return math.exp(self.luminance_boost)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StarSettings":
        settings = cls()

        for key, catalog_type in CATALOG_KEYS.items():
            value = data.get(key)
            if value is None:
                continue
            settings.catalogs[catalog_type] = _expect_str(key, value)

        for key, attr in _PATH_KEYS.items():
            if data.get(key) is not None:
                setattr(settings, attr, _expect_str(key, data[key]))

        for key, attr in _FLOAT_KEYS.items():
            if key in data:
                setattr(settings, attr, _expect_float(key, data[key]))

        for key, attr in _BOOL_KEYS.items():
            if key in data:
                if not isinstance(data[key], bool):
                    raise SettingsError(f"{key}: expected a boolean, got {data[key]!r}")
                setattr(settings, attr, data[key])

        if "drawMode" in data:
            try:
                settings.draw_mode = DrawMode(data["drawMode"])
            except ValueError:
                modes = ", ".join(m.value for m in DrawMode)
                raise SettingsError(f"drawMode: unknown mode {data['drawMode']!r} ({modes})") from None

        return settings


def _expect_str(key: str, value: Any) -> str:
    if not isinstance(value, str):
        raise SettingsError(f"{key}: expected a string, got {value!r}")
    return value


def _expect_float(key: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SettingsError(f"{key}: expected a number, got {value!r}")
    return float(value)


def load_settings(path: str | Path) -> StarSettings:
    """
    Read settings from a JSON file.

    Relative catalog, texture and cache paths are resolved against the
    directory of the settings file.
    """
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise SettingsError(f"{path.name}: expected a JSON object")
    section = data.get("stars", data)
    if not isinstance(section, dict):
        raise SettingsError(f"{path.name}: 'stars' must be a JSON object")

    settings = StarSettings.from_dict(section)

    base = path.resolve().parent
    settings.catalogs = {t: str(base / p) for t, p in settings.catalogs.items()}
    for attr in _PATH_KEYS.values():
        value = getattr(settings, attr)
        if value:
            setattr(settings, attr, str(base / value))
    return settings

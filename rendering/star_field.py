"""
Star Field

Per-frame entry point for the scene graph. The host calls draw() once per
frame with the current matrices; the result tells the graphics backend which
program to bind, which uniforms to set and how to blend. Nothing here talks
to the graphics API directly.

Brightness is derived every frame from the settings:

    intensity  = 1 with HDR, else the approximate scene brightness
    multiplier = intensity * exp(luminance boost)

Two optional textured layers (celestial grid, star figures) are drawn behind
the stars with the background program of the same shader variant.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from core.settings import StarSettings
from stars.vertex_table import VertexTable

from .shader_variants import DrawMode, ShaderVariantSelector
from .shaders import BACKGROUND_QUAD

# RGB and base alpha of the overlay layers
CELESTIAL_GRID_COLOR = (0.5, 0.8, 1.0, 0.3)
STAR_FIGURES_COLOR = (0.5, 1.0, 0.8, 0.3)

# Layer alpha relative to the star multiplier in HDR mode
HDR_BACKGROUND_SCALE = 0.001


@dataclass
class FrameContext:
    """Matrices and viewport of the frame being drawn"""
    model_view: np.ndarray                   # 4x4
    projection: np.ndarray                   # 4x4
    viewport: Tuple[int, int] = (1280, 720)  # width, height in pixels
    scene_brightness: float = 1.0            # approximate, ignored with HDR


@dataclass
class BackgroundLayer:
    name: str
    texture: str
    color: Tuple[float, float, float, float]  # uColor, alpha already scaled


@dataclass
class DrawResult:
    program: Any
    uniforms: Dict[str, Any] = field(default_factory=dict)
    vertex_count: int = 0
    primitive: str = "points"
    point_size: Optional[float] = None
    blend: str = "additive"                  # "additive" or "alpha"
    smooth_points: bool = False

    # Drawn first, one triangle strip over background_vertices per layer
    background_program: Any = None
    background_vertices: Tuple[float, ...] = BACKGROUND_QUAD
    background_uniforms: Dict[str, Any] = field(default_factory=dict)
    backgrounds: List[BackgroundLayer] = field(default_factory=list)


@dataclass(frozen=True)
class Bounds:
    min: Tuple[float, float, float]
    max: Tuple[float, float, float]


# Stars surround the observer; never cull them
UNBOUNDED = Bounds(
    min=(float(np.finfo(np.float32).min),) * 3,
    max=(float(np.finfo(np.float32).max),) * 3,
)


class StarField:
    """
    Draws a configurable star background.

    Stars can be limited by magnitude and their size, texture and brightness
    adjusted. Draw mode and HDR changes recompile the shader lazily.
    """

    def __init__(self, vertices: VertexTable, settings: Optional[StarSettings] = None,
                 selector: Optional[ShaderVariantSelector] = None):
        self.vertices = vertices
        self.settings = settings or StarSettings()
        self.selector = selector or ShaderVariantSelector(
            draw_mode=self.settings.draw_mode,
            enable_hdr=self.settings.enable_hdr,
        )

    # -----------------------------------------------------------------------
    # Settings forwarded to the selector
    # -----------------------------------------------------------------------

    def set_draw_mode(self, mode: DrawMode) -> None:
        self.settings.draw_mode = mode
        self.selector.set_draw_mode(mode)

    def set_enable_hdr(self, value: bool) -> None:
        self.settings.enable_hdr = bool(value)
        self.selector.set_enable_hdr(value)

    # -----------------------------------------------------------------------
    # Brightness
    # -----------------------------------------------------------------------

    def intensity(self, scene_brightness: float = 1.0) -> float:
        return 1.0 if self.settings.enable_hdr else float(scene_brightness)

    def luminance_multiplier(self, scene_brightness: float = 1.0) -> float:
        return self.intensity(scene_brightness) * self.settings.luminance_multiplier

    def background_layers(self, scene_brightness: float = 1.0) -> List[BackgroundLayer]:
        """Overlay layers that are enabled, have a texture and are not fully transparent."""
        intensity = self.intensity(scene_brightness)
        if self.settings.enable_hdr:
            scale = HDR_BACKGROUND_SCALE * self.luminance_multiplier(scene_brightness)
        else:
            scale = 1.0

        candidates = [
            ("celestial_grid", self.settings.background_texture1,
             self.settings.enable_celestial_grid, CELESTIAL_GRID_COLOR),
            ("star_figures", self.settings.background_texture2,
             self.settings.enable_star_figures, STAR_FIGURES_COLOR),
        ]

        layers = []
        for name, texture, enabled, (r, g, b, a) in candidates:
            alpha = a * intensity * (1.0 if enabled else 0.0)
            if not texture or alpha == 0.0:
                continue
            layers.append(BackgroundLayer(name, texture, (r, g, b, alpha * scale)))
        return layers

    # -----------------------------------------------------------------------
    # Scene graph interface
    # -----------------------------------------------------------------------

    def draw(self, frame: FrameContext) -> DrawResult:
        program = self.selector.current_program()
        mode = self.selector.draw_mode

        model_view = np.asarray(frame.model_view, dtype=np.float32)
        projection = np.asarray(frame.projection, dtype=np.float32)

        uniforms = {
            "uMatMV": model_view,
            "uMatP": projection,
            "uInvMV": np.linalg.inv(model_view),
            "uInvP": np.linalg.inv(projection),
            "uResolution": (float(frame.viewport[0]), float(frame.viewport[1])),
            "uStarTexture": 0,
            "uMinMagnitude": self.settings.min_magnitude,
            "uMaxMagnitude": self.settings.max_magnitude,
            "uSolidAngle": self.settings.solid_angle,
            "uLuminanceMultiplicator": self.luminance_multiplier(frame.scene_brightness),
        }

        result = DrawResult(
            program=program,
            uniforms=uniforms,
            vertex_count=len(self.vertices),
        )
        if mode.is_point:
            result.point_size = 0.5
        if mode == DrawMode.SMOOTH_POINT:
            result.blend = "alpha"
            result.smooth_points = True

        result.backgrounds = self.background_layers(frame.scene_brightness)
        if result.backgrounds:
            result.background_program = self.selector.background_program()
            result.background_uniforms = self._background_uniforms(model_view, projection)
        return result

    @staticmethod
    def _background_uniforms(model_view: np.ndarray, projection: np.ndarray) -> Dict[str, Any]:
        # Rotation only; the layers sit at infinity
        rotation = model_view.copy()
        rotation[:3, 3] = 0.0
        return {
            "uInvMVP": np.linalg.inv(projection @ rotation),
            "uInvMV": np.linalg.inv(rotation),
            "uBackgroundTexture": 0,
        }

    def bounding_volume(self) -> Bounds:
        return UNBOUNDED

"""
Shader Variant Selection

The star program depends on two settings: the draw mode and HDR. Changing
either only marks the selector dirty; the program is (re)built on the next
render call, on the render thread, and then memoized per
(draw_mode, enable_hdr) so switching back and forth does not recompile.

Compilation itself is delegated to a callable supplied by the graphics
backend. Without one, the assembled ShaderSources are used as the "program".
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from . import shaders

logger = logging.getLogger("starfield.shaders")


class DrawMode(Enum):
    """How a single star is drawn"""
    POINT = "point"
    SMOOTH_POINT = "smooth_point"
    DISC = "disc"
    SMOOTH_DISC = "smooth_disc"
    SPRITE = "sprite"

    @property
    def define(self) -> str:
        return f"DRAWMODE_{self.name}"

    @property
    def is_point(self) -> bool:
        """One-pixel footprint (no geometry stage)"""
        return self in (DrawMode.POINT, DrawMode.SMOOTH_POINT)


class ShaderState(Enum):
    CLEAN = "clean"
    DIRTY = "dirty"


@dataclass(frozen=True)
class VariantKey:
    draw_mode: DrawMode
    enable_hdr: bool


@dataclass(frozen=True)
class ShaderSources:
    key: VariantKey
    vertex: str
    fragment: str
    geometry: Optional[str] = None

    @property
    def stages(self) -> Dict[str, str]:
        out = {"vertex": self.vertex}
        if self.geometry is not None:
            out["geometry"] = self.geometry
        out["fragment"] = self.fragment
        return out


def variant_defines(key: VariantKey) -> str:
    defines = shaders.GLSL_VERSION
    if key.enable_hdr:
        defines += "#define ENABLE_HDR\n"
    defines += f"#define {key.draw_mode.define}\n"
    return defines


def build_shader_sources(key: VariantKey) -> ShaderSources:
    """Assemble the stage sources of one variant."""
    prefix = variant_defines(key) + shaders.STARS_SNIPPETS

    if key.draw_mode.is_point:
        return ShaderSources(
            key=key,
            vertex=prefix + shaders.STARS_VERT_ONE_PIXEL,
            fragment=prefix + shaders.STARS_FRAG_ONE_PIXEL,
        )
    return ShaderSources(
        key=key,
        vertex=prefix + shaders.STARS_VERT,
        geometry=prefix + shaders.STARS_GEOM,
        fragment=prefix + shaders.STARS_FRAG,
    )


def build_background_sources(key: VariantKey) -> ShaderSources:
    """Assemble the background layer program built alongside a star variant."""
    defines = variant_defines(key)
    return ShaderSources(
        key=key,
        vertex=defines + shaders.BACKGROUND_VERT,
        fragment=defines + shaders.BACKGROUND_FRAG,
    )


def _no_compile(sources: ShaderSources) -> ShaderSources:
    return sources


class ShaderVariantSelector:
    """
    Clean/Dirty state machine around the star program.

    Must only be used from the render thread.
    """

    def __init__(self, compile_program: Optional[Callable[[ShaderSources], Any]] = None,
                 draw_mode: DrawMode = DrawMode.SMOOTH_DISC, enable_hdr: bool = False):
        self._compile = compile_program or _no_compile
        self._draw_mode = draw_mode
        self._enable_hdr = enable_hdr

        # Starts dirty: nothing is compiled before the first frame
        self._state = ShaderState.DIRTY
        # key -> (star program, background program)
        self._variants: Dict[VariantKey, Tuple[Any, Any]] = {}
        self._program: Any = None
        self._background: Any = None
        self.compile_count = 0

    # -----------------------------------------------------------------------
    # Settings
    # -----------------------------------------------------------------------

    @property
    def draw_mode(self) -> DrawMode:
        return self._draw_mode

    def set_draw_mode(self, value: DrawMode) -> None:
        if self._draw_mode != value:
            self._draw_mode = value
            self._state = ShaderState.DIRTY

    @property
    def enable_hdr(self) -> bool:
        return self._enable_hdr

    def set_enable_hdr(self, value: bool) -> None:
        value = bool(value)
        if self._enable_hdr != value:
            self._enable_hdr = value
            self._state = ShaderState.DIRTY

    @property
    def key(self) -> VariantKey:
        return VariantKey(self._draw_mode, self._enable_hdr)

    @property
    def state(self) -> ShaderState:
        return self._state

    @property
    def is_dirty(self) -> bool:
        return self._state is ShaderState.DIRTY

    # -----------------------------------------------------------------------
    # Render thread
    # -----------------------------------------------------------------------

    def current_program(self) -> Any:
        """Star program for the current settings. Called once per frame."""
        if self._state is ShaderState.DIRTY:
            key = self.key
            programs = self._variants.get(key)
            if programs is None:
                programs = (
                    self._compile(build_shader_sources(key)),
                    self._compile(build_background_sources(key)),
                )
                self._variants[key] = programs
                self.compile_count += 1
                logger.debug("Compiled star shader variant %s (hdr=%s)",
                             key.draw_mode.value, key.enable_hdr)
            self._program, self._background = programs
            self._state = ShaderState.CLEAN
        return self._program

    def background_program(self) -> Any:
        """Background program of the current variant, rebuilt in the same step."""
        self.current_program()
        return self._background

    def invalidate(self) -> None:
        """Forget every compiled variant, e.g. after the graphics context was lost."""
        self._variants.clear()
        self._program = None
        self._background = None
        self._state = ShaderState.DIRTY

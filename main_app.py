"""
Star Field Preview - Main Application

Loads the configured catalogs through the star pipeline (cache first) and
shows the resulting vertex table in a pygame window:
- CPU perspective projection of the vertex table
- Size / opacity scaled over the loaded magnitude range
- Draw mode and HDR switches driving the shader variant selector
- Click a star to inspect it

Usage:
    python main_app.py settings.json

Controls
--------
  Arrows / drag    Look around
  Scroll / +/-     Zoom (FOV)
  1..5             Draw mode: point, smooth point, disc, smooth disc, sprite
  H                Toggle HDR
  G / F            Toggle celestial grid / star figures layer
  ESC              Quit
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import numpy as np
import pygame
from scipy.spatial import cKDTree

from core.coords import clamp, look_rotation, perspective, project_to_screen, star_positions
from core.photometry import apparent_magnitude, lerp, magnitude_scale
from core.settings import SettingsError, StarSettings, load_settings
from rendering.shader_variants import DrawMode
from rendering.star_field import FrameContext, StarField
from stars import build_vertex_table, load_stars

# Window settings
WIDTH, HEIGHT = 1280, 800
FPS = 60
TITLE = "Star Field Preview"

_DRAW_MODE_KEYS = {
    pygame.K_1: DrawMode.POINT,
    pygame.K_2: DrawMode.SMOOTH_POINT,
    pygame.K_3: DrawMode.DISC,
    pygame.K_4: DrawMode.SMOOTH_DISC,
    pygame.K_5: DrawMode.SPRITE,
}

logger = logging.getLogger("starfield.preview")


class StarFieldPreview:
    """
    Preview application

    Owns the star field and the view state, runs the pygame loop.
    """

    def __init__(self, settings: StarSettings):
        pygame.init()
        self.screen = pygame.display.set_mode((WIDTH, HEIGHT), pygame.RESIZABLE)
        pygame.display.set_caption(TITLE)
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("monospace", 14)

        self.settings = settings
        stars = load_stars(settings.catalogs, settings.cache_file)
        self.vertices = build_vertex_table(stars)
        self.star_field = StarField(self.vertices, settings)
        self.sprite = self._load_sprite(settings.star_texture)

        # Unit sphere positions; depth does not matter for the preview
        self._sky = star_positions(self.vertices.directions, np.ones(len(self.vertices)))
        self._apparent = apparent_magnitude(self.vertices.magnitudes, self.vertices.distances)
        t = magnitude_scale(self._apparent, self.vertices.min_magnitude,
                            self.vertices.max_magnitude, settings.scaling_exponent)
        self._radius = lerp(settings.min_size, settings.max_size, t)
        self._opacity = lerp(settings.min_opacity, settings.max_opacity, t)

        # View
        self.yaw = 0.0
        self.pitch = 0.0
        self.fov = 70.0
        self.dragging = False

        # Picking
        self._screen_xy = np.zeros((0, 2))
        self._screen_idx = np.zeros(0, dtype=np.int64)
        self._tree: Optional[cKDTree] = None
        self.selected: Optional[int] = None

        self.running = True
        print(f"\n{TITLE}")
        print("=" * 60)
        print(f"Stars loaded: {len(self.vertices):,}")
        print("=" * 60)

    def _load_sprite(self, path: str) -> Optional[pygame.Surface]:
        if not path or not Path(path).exists():
            return None
        try:
            return pygame.image.load(path).convert_alpha()
        except pygame.error as e:
            logger.error("Failed to load star texture '%s': %s", path, e)
            return None

    # -----------------------------------------------------------------------
    # Loop
    # -----------------------------------------------------------------------

    def run(self):
        while self.running:
            self.clock.tick(FPS)
            for event in pygame.event.get():
                self.handle_event(event)

            self.render(self.screen)
            pygame.display.flip()

        pygame.quit()

    def handle_event(self, event: pygame.event.Event):
        if event.type == pygame.QUIT:
            self.running = False
        elif event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                self.running = False
            elif event.key in _DRAW_MODE_KEYS:
                self.star_field.set_draw_mode(_DRAW_MODE_KEYS[event.key])
            elif event.key == pygame.K_h:
                self.star_field.set_enable_hdr(not self.settings.enable_hdr)
            elif event.key == pygame.K_g:
                self.settings.enable_celestial_grid = not self.settings.enable_celestial_grid
            elif event.key == pygame.K_f:
                self.settings.enable_star_figures = not self.settings.enable_star_figures
            elif event.key == pygame.K_LEFT:
                self.yaw -= 5.0
            elif event.key == pygame.K_RIGHT:
                self.yaw += 5.0
            elif event.key == pygame.K_UP:
                self.pitch = clamp(self.pitch + 5.0, -89.0, 89.0)
            elif event.key == pygame.K_DOWN:
                self.pitch = clamp(self.pitch - 5.0, -89.0, 89.0)
            elif event.key in (pygame.K_PLUS, pygame.K_EQUALS):
                self.fov = clamp(self.fov * 0.8, 1.0, 120.0)
            elif event.key == pygame.K_MINUS:
                self.fov = clamp(self.fov * 1.25, 1.0, 120.0)
        elif event.type == pygame.MOUSEWHEEL:
            self.fov = clamp(self.fov * (0.9 if event.y > 0 else 1.1), 1.0, 120.0)
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            self.dragging = True
            self._pick(event.pos)
        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            self.dragging = False
        elif event.type == pygame.MOUSEMOTION and self.dragging:
            dx, dy = event.rel
            scale = self.fov / self.screen.get_height()
            self.yaw -= dx * scale
            self.pitch = clamp(self.pitch + dy * scale, -89.0, 89.0)
        elif event.type == pygame.VIDEORESIZE:
            self.screen = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)

    def _pick(self, pos):
        if self._tree is None:
            return
        dist, i = self._tree.query(pos)
        self.selected = int(self._screen_idx[i]) if dist < 8.0 else None

    # -----------------------------------------------------------------------
    # Draw
    # -----------------------------------------------------------------------

    def render(self, surface: pygame.Surface):
        W, H = surface.get_size()
        surface.fill((0, 0, 8))

        model_view = look_rotation(self.yaw, self.pitch)
        projection = perspective(self.fov, W / max(1, H))
        result = self.star_field.draw(FrameContext(model_view, projection, (W, H)))

        xy, inside = project_to_screen(self._sky, model_view, projection, W, H)
        in_range = ((self._apparent >= self.settings.min_magnitude)
                    & (self._apparent <= self.settings.max_magnitude))
        visible = np.nonzero(inside & in_range)[0]

        self._screen_idx = visible
        self._screen_xy = xy[visible]
        self._tree = cKDTree(self._screen_xy) if visible.size else None

        mode = self.star_field.selector.draw_mode
        gain = result.uniforms["uLuminanceMultiplicator"]
        if not self.settings.enable_hdr:
            gain = min(gain, 1.0)

        for i in visible:
            r, g, b = self.vertices.colors[i]
            a = min(1.0, self._opacity[i] * gain)
            color = (int(r * 255 * a), int(g * 255 * a), int(b * 255 * a))
            px = (int(xy[i, 0]), int(xy[i, 1]))
            if mode.is_point:
                surface.set_at(px, color)
            elif mode == DrawMode.SPRITE and self.sprite is not None:
                size = max(1, int(self._radius[i] * 4))
                sprite = pygame.transform.smoothscale(self.sprite, (size, size))
                sprite.fill(color + (255,), special_flags=pygame.BLEND_RGBA_MULT)
                surface.blit(sprite, (px[0] - size // 2, px[1] - size // 2),
                             special_flags=pygame.BLEND_ADD)
            else:
                pygame.draw.circle(surface, color, px, max(1, int(round(self._radius[i]))))

        if self.selected is not None and self.selected in set(visible.tolist()):
            px = (int(xy[self.selected, 0]), int(xy[self.selected, 1]))
            pygame.draw.circle(surface, (255, 255, 0), px, int(self._radius[self.selected]) + 5, 1)

        self._draw_hud(surface, visible.size, result)

    def _draw_hud(self, surface: pygame.Surface, visible: int, result):
        selector = self.star_field.selector
        lines = [
            f"Stars {visible:,}/{len(self.vertices):,}   FOV {self.fov:.1f}°",
            f"Mode {selector.draw_mode.value}   HDR {'on' if selector.enable_hdr else 'off'}"
            f"   variants compiled {selector.compile_count}",
        ]
        stages = getattr(result.program, "stages", None)
        if stages:
            lines.append("Stages " + " + ".join(stages))
        if result.backgrounds:
            lines.append("Layers " + ", ".join(layer.name for layer in result.backgrounds))
        if self.selected is not None:
            i = self.selected
            lines.append(f"Selected #{i}: m={self._apparent[i]:.2f}  "
                         f"d={self.vertices.distances[i]:,.1f} pc")

        y = 8
        for text in lines:
            surface.blit(self.font.render(text, True, (175, 255, 175)), (8, y))
            y += 18


def main():
    """Entry point"""
    logging.basicConfig(level=logging.INFO,
                        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(2)

    try:
        settings = load_settings(sys.argv[1])
    except SettingsError as e:
        print(f"Invalid settings: {e}")
        sys.exit(1)
    except (OSError, ValueError) as e:
        print(f"Cannot read settings '{sys.argv[1]}': {e}")
        sys.exit(1)

    try:
        StarFieldPreview(settings).run()
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        pygame.quit()
        sys.exit(0)


if __name__ == "__main__":
    main()

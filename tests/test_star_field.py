import numpy as np
import pytest

from catalogs.records import StarRecord, records_to_table
from core.coords import look_rotation, perspective
from core.settings import StarSettings
from rendering.shader_variants import DrawMode, ShaderVariantSelector
from rendering.star_field import UNBOUNDED, FrameContext, StarField
from stars.vertex_table import build_vertex_table


@pytest.fixture
def vertices():
    return build_vertex_table(records_to_table([
        StarRecord(5.0, 5.65, 1.0, 0.0, 100.0),
        StarRecord(2.0, 2.1, 2.0, 0.5, 0.0),
    ]))


@pytest.fixture
def frame():
    return FrameContext(look_rotation(30.0, 10.0), perspective(60.0, 16 / 9), (1600, 900))


def test_uniforms(vertices, frame):
    settings = StarSettings(luminance_boost=2.0, solid_angle=1e-5)
    result = StarField(vertices, settings).draw(frame)

    u = result.uniforms
    assert result.vertex_count == 2
    assert u["uStarTexture"] == 0
    assert u["uResolution"] == (1600.0, 900.0)
    assert u["uMinMagnitude"] == -5.0
    assert u["uMaxMagnitude"] == 15.0
    assert u["uSolidAngle"] == 1e-5
    assert u["uLuminanceMultiplicator"] == pytest.approx(np.exp(2.0))
    np.testing.assert_allclose(u["uInvMV"] @ u["uMatMV"], np.eye(4), atol=1e-5)
    np.testing.assert_allclose(u["uInvP"] @ u["uMatP"], np.eye(4), atol=1e-4)


def test_disc_mode_is_additive(vertices, frame):
    result = StarField(vertices, StarSettings(draw_mode=DrawMode.DISC)).draw(frame)
    assert result.blend == "additive"
    assert result.point_size is None
    assert not result.smooth_points


def test_point_mode(vertices, frame):
    result = StarField(vertices, StarSettings(draw_mode=DrawMode.POINT)).draw(frame)
    assert result.point_size == 0.5
    assert result.blend == "additive"


def test_smooth_point_mode_blends(vertices, frame):
    result = StarField(vertices, StarSettings(draw_mode=DrawMode.SMOOTH_POINT)).draw(frame)
    assert result.point_size == 0.5
    assert result.blend == "alpha"
    assert result.smooth_points


def test_mode_switch_recompiles_on_next_draw(vertices, frame):
    selector = ShaderVariantSelector()
    field = StarField(vertices, StarSettings(), selector)
    field.draw(frame)

    field.set_draw_mode(DrawMode.SPRITE)
    field.set_enable_hdr(True)
    assert selector.is_dirty
    program = field.draw(frame).program

    assert selector.compile_count == 2
    assert program.geometry is not None
    assert "#define ENABLE_HDR" in program.fragment
    assert field.settings.draw_mode is DrawMode.SPRITE


def test_never_culled(vertices):
    bounds = StarField(vertices).bounding_volume()
    assert bounds is UNBOUNDED
    assert bounds.min[0] < -1e38 and bounds.max[0] > 1e38


def test_multiplier_follows_settings_changes(vertices, frame):
    settings = StarSettings()
    field = StarField(vertices, settings)
    assert field.draw(frame).uniforms["uLuminanceMultiplicator"] == pytest.approx(1.0)

    settings.luminance_boost = 2.0
    assert field.draw(frame).uniforms["uLuminanceMultiplicator"] == pytest.approx(np.exp(2.0))


def test_scene_brightness_scales_multiplier_without_hdr(vertices):
    field = StarField(vertices, StarSettings(luminance_boost=1.0))
    frame = FrameContext(np.eye(4), perspective(60.0, 1.0), scene_brightness=0.25)
    assert field.draw(frame).uniforms["uLuminanceMultiplicator"] == pytest.approx(0.25 * np.e)


def test_scene_brightness_is_ignored_with_hdr(vertices):
    field = StarField(vertices, StarSettings(luminance_boost=1.0, enable_hdr=True))
    frame = FrameContext(np.eye(4), perspective(60.0, 1.0), scene_brightness=0.25)
    assert field.draw(frame).uniforms["uLuminanceMultiplicator"] == pytest.approx(np.e)


def test_no_background_layers_by_default(vertices, frame):
    result = StarField(vertices).draw(frame)
    assert result.backgrounds == []
    assert result.background_program is None


def test_layer_needs_texture_and_switch(vertices, frame):
    enabled_without_texture = StarSettings(enable_celestial_grid=True)
    texture_but_disabled = StarSettings(background_texture1="grid.png")
    assert StarField(vertices, enabled_without_texture).draw(frame).backgrounds == []
    assert StarField(vertices, texture_but_disabled).draw(frame).backgrounds == []


def test_background_layers_without_hdr(vertices):
    settings = StarSettings(background_texture1="grid.png", background_texture2="figures.png",
                            enable_celestial_grid=True, enable_star_figures=True)
    frame = FrameContext(look_rotation(10.0, 5.0), perspective(60.0, 1.0), scene_brightness=0.5)

    result = StarField(vertices, settings).draw(frame)

    assert [layer.name for layer in result.backgrounds] == ["celestial_grid", "star_figures"]
    assert result.backgrounds[0].texture == "grid.png"
    assert result.backgrounds[0].color == pytest.approx((0.5, 0.8, 1.0, 0.3 * 0.5))
    assert result.backgrounds[1].color == pytest.approx((0.5, 1.0, 0.8, 0.3 * 0.5))
    assert result.background_program.fragment.count("uBackgroundTexture") >= 1
    assert len(result.background_vertices) == 8


def test_background_alpha_follows_multiplier_with_hdr(vertices, frame):
    settings = StarSettings(background_texture2="figures.png", enable_star_figures=True,
                            enable_hdr=True, luminance_boost=3.0)
    layer, = StarField(vertices, settings).draw(frame).backgrounds
    assert layer.color[3] == pytest.approx(0.3 * 0.001 * np.exp(3.0))


def test_background_uniforms_ignore_translation(vertices):
    settings = StarSettings(background_texture1="grid.png", enable_celestial_grid=True)
    rotation = look_rotation(20.0, -10.0)
    moved = rotation.copy()
    moved[:3, 3] = (5.0, -2.0, 7.0)
    projection = perspective(60.0, 1.0)

    u = StarField(vertices, settings).draw(FrameContext(moved, projection)).background_uniforms

    np.testing.assert_allclose(u["uInvMV"], np.linalg.inv(rotation), atol=1e-5)
    np.testing.assert_allclose(u["uInvMVP"] @ (projection @ rotation), np.eye(4), atol=1e-3)

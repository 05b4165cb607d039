import pytest

from rendering import DrawMode, ShaderState, ShaderVariantSelector
from rendering.shader_variants import (
    VariantKey,
    build_background_sources,
    build_shader_sources,
    variant_defines,
)


class FakeCompiler:
    def __init__(self):
        self.calls = []

    def __call__(self, sources):
        self.calls.append(sources.key)
        return ("program", sources.key)


@pytest.fixture
def compiler():
    return FakeCompiler()


@pytest.mark.parametrize("mode", list(DrawMode))
def test_defines(mode):
    text = variant_defines(VariantKey(mode, True))
    assert text.startswith("#version 330\n")
    assert "#define ENABLE_HDR" in text
    assert f"#define DRAWMODE_{mode.name}" in text


def test_no_hdr_define_without_hdr():
    assert "ENABLE_HDR" not in variant_defines(VariantKey(DrawMode.DISC, False))


@pytest.mark.parametrize("mode", [DrawMode.POINT, DrawMode.SMOOTH_POINT])
def test_point_modes_have_no_geometry_stage(mode):
    sources = build_shader_sources(VariantKey(mode, False))
    assert sources.geometry is None
    assert list(sources.stages) == ["vertex", "fragment"]


@pytest.mark.parametrize("mode", [DrawMode.DISC, DrawMode.SMOOTH_DISC, DrawMode.SPRITE])
def test_billboard_modes_have_geometry_stage(mode):
    sources = build_shader_sources(VariantKey(mode, False))
    assert sources.geometry is not None
    assert "EmitVertex" in sources.geometry
    assert list(sources.stages) == ["vertex", "geometry", "fragment"]


def test_every_stage_carries_the_defines():
    sources = build_shader_sources(VariantKey(DrawMode.SPRITE, True))
    for code in sources.stages.values():
        assert "#define DRAWMODE_SPRITE" in code
        assert "#define ENABLE_HDR" in code


def test_starts_dirty_and_compiles_on_first_frame(compiler):
    selector = ShaderVariantSelector(compiler)
    assert selector.state is ShaderState.DIRTY
    assert compiler.calls == []

    program = selector.current_program()
    assert program == ("program", VariantKey(DrawMode.SMOOTH_DISC, False))
    assert selector.state is ShaderState.CLEAN
    assert selector.compile_count == 1


def test_clean_frames_do_not_recompile(compiler):
    selector = ShaderVariantSelector(compiler)
    for _ in range(5):
        selector.current_program()
    assert selector.compile_count == 1


def test_setting_same_value_keeps_clean(compiler):
    selector = ShaderVariantSelector(compiler, draw_mode=DrawMode.DISC)
    selector.current_program()
    selector.set_draw_mode(DrawMode.DISC)
    selector.set_enable_hdr(False)
    assert not selector.is_dirty


def test_change_marks_dirty_until_next_frame(compiler):
    selector = ShaderVariantSelector(compiler)
    selector.current_program()

    selector.set_enable_hdr(True)
    assert selector.is_dirty
    assert selector.compile_count == 1

    selector.current_program()
    assert not selector.is_dirty
    assert compiler.calls[-1] == VariantKey(DrawMode.SMOOTH_DISC, True)


def test_several_changes_compile_once(compiler):
    selector = ShaderVariantSelector(compiler)
    selector.current_program()

    selector.set_draw_mode(DrawMode.POINT)
    selector.set_draw_mode(DrawMode.SPRITE)
    selector.set_enable_hdr(True)
    selector.current_program()

    assert selector.compile_count == 2
    assert compiler.calls[-1] == VariantKey(DrawMode.SPRITE, True)


def test_switching_back_reuses_compiled_variant(compiler):
    selector = ShaderVariantSelector(compiler)
    first = selector.current_program()

    selector.set_draw_mode(DrawMode.POINT)
    selector.current_program()
    selector.set_draw_mode(DrawMode.SMOOTH_DISC)

    assert selector.current_program() is first
    assert selector.compile_count == 2


def test_invalidate_forces_recompile(compiler):
    selector = ShaderVariantSelector(compiler)
    selector.current_program()
    selector.invalidate()
    assert selector.is_dirty
    selector.current_program()
    assert selector.compile_count == 2


def test_default_program_is_sources():
    selector = ShaderVariantSelector(draw_mode=DrawMode.POINT)
    program = selector.current_program()
    assert program.key == VariantKey(DrawMode.POINT, False)
    assert program.geometry is None


def test_background_program_is_built_with_the_variant(compiler):
    selector = ShaderVariantSelector(compiler, enable_hdr=True)
    background = selector.background_program()

    assert background == ("program", VariantKey(DrawMode.SMOOTH_DISC, True))
    assert compiler.calls == [VariantKey(DrawMode.SMOOTH_DISC, True)] * 2
    assert selector.compile_count == 1


def test_background_program_follows_switches():
    selector = ShaderVariantSelector()
    first = selector.background_program()
    selector.set_enable_hdr(True)
    second = selector.background_program()

    assert "#define ENABLE_HDR" not in first.fragment
    assert "#define ENABLE_HDR" in second.fragment
    assert selector.background_program() is second


def test_background_sources():
    sources = build_background_sources(VariantKey(DrawMode.POINT, False))
    assert sources.geometry is None
    assert sources.vertex.startswith("#version 330\n")
    assert "#define DRAWMODE_POINT" in sources.fragment
    assert "uInvMVP" in sources.vertex

import numpy as np
import pytest

from catalogs.records import StarRecord, records_to_table
from core.spectral import FALLBACK_DISTANCE_PC, SPECTRAL_COLORS
from stars.vertex_table import FLOATS_PER_VERTEX, build_vertex_table


@pytest.fixture
def vertices():
    return build_vertex_table(records_to_table([
        StarRecord(5.0, 5.65, 1.5, 0.25, 100.0),
        StarRecord(-1.0, -1.4, 0.5, -0.75, 500.0),
        StarRecord(12.0, 14.0, 3.0, 1.0, 0.0),
    ]))


def test_layout(vertices):
    assert vertices.data.shape == (3, FLOATS_PER_VERTEX)
    assert vertices.data.dtype == np.float32
    assert vertices.stride_bytes == 28
    assert vertices.attribute_layout == [(0, 2, 0), (1, 1, 8), (2, 3, 12), (3, 1, 24)]
    assert len(vertices.as_bytes()) == 3 * 28


def test_direction_is_declination_then_ascension(vertices):
    np.testing.assert_allclose(vertices.directions[0], [0.25, 1.5])


def test_distances(vertices):
    np.testing.assert_allclose(vertices.distances, [10.0, 2.0, FALLBACK_DISTANCE_PC])


def test_colors(vertices):
    np.testing.assert_array_equal(vertices.colors[0], SPECTRAL_COLORS[20])
    np.testing.assert_array_equal(vertices.colors[1], SPECTRAL_COLORS[0])
    np.testing.assert_array_equal(vertices.colors[2], SPECTRAL_COLORS[46])


def test_absolute_magnitudes(vertices):
    # at 10 pc absolute == visual; at 2 pc a star is intrinsically fainter
    assert vertices.magnitudes[0] == pytest.approx(5.0)
    assert vertices.magnitudes[1] == pytest.approx(-1.0 - 5.0 * np.log10(0.2), rel=1e-5)
    assert vertices.magnitudes[2] == pytest.approx(12.0 - 20.0, rel=1e-5)


def test_loaded_magnitude_range(vertices):
    assert vertices.min_magnitude == pytest.approx(-1.0)
    assert vertices.max_magnitude == pytest.approx(12.0)


def test_read_only(vertices):
    with pytest.raises(ValueError):
        vertices.data[0, 0] = 1.0


def test_empty():
    table = build_vertex_table(records_to_table([]))
    assert len(table) == 0
    assert table.data.shape == (0, FLOATS_PER_VERTEX)
    assert table.min_magnitude == table.max_magnitude == 0.0

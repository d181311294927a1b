"""
Tests for palettes and escape-time coloring.
"""
import numpy as np
import pytest

from fractal_animator.core.math_functions import ComplexPlane, FractalIterator
from fractal_animator.rendering.coloring import ColorRGB, ColoringEngine, Palette


@pytest.fixture
def engine():
    return ColoringEngine()


def test_color_components_validated():
    with pytest.raises(ValueError):
        ColorRGB(1.5, 0, 0)


def test_palette_needs_two_colors():
    with pytest.raises(ValueError):
        Palette([(0, 0, 0)])
    with pytest.raises(ValueError):
        Palette([(0, 0, 0), 'red'])


def test_indices_span_palette():
    palette = Palette([(0, 0, 0), (1, 1, 1)]).resample(50)
    counts = np.array([[1, 60], [30, 59]])
    indices = palette.indices_for(counts, max_iter=60)

    assert indices[0, 0] == 0
    assert indices[0, 1] == 49
    assert 0 < indices[1, 0] < 49


def test_indices_clamped():
    palette = Palette([(0, 0, 0), (1, 1, 1)]).resample(10)
    indices = palette.indices_for(np.array([-5, 0, 1, 200]), max_iter=20)
    assert list(indices) == [0, 0, 0, 9]


def test_single_iteration_budget_maps_to_top():
    palette = Palette([(0, 0, 0), (1, 1, 1)])
    assert list(palette.indices_for(np.array([1, 1]), max_iter=1)) == [1, 1]


def test_non_escaping_cells_get_top_color(engine):
    palette = engine.get_palette('inferno', 50)
    c = ComplexPlane(-2, 2, -2, 2, 41).create_complex_array()
    result = FractalIterator(30).mandelbrot_iteration(c)

    rgb = palette.colorize(result.iterations, result.max_iter)
    top = palette.to_array()[-1]

    assert rgb.shape == (41, 41, 3)
    assert rgb.dtype == np.uint8
    assert np.all(rgb[~result.escaped] == top)


def test_resample_keeps_endpoints():
    palette = Palette([(0, 0, 0), (1, 0, 0), (1, 1, 1)]).resample(7)
    assert len(palette) == 7
    assert palette.colors[0].to_tuple() == (0, 0, 0)
    assert palette.colors[-1].to_tuple() == (1, 1, 1)
    assert palette.colors[3].to_tuple() == (1, 0, 0)


@pytest.mark.parametrize('name', ['inferno', 'viridis', 'hot', 'ocean'])
def test_get_palette_size(engine, name):
    assert len(engine.get_palette(name, 50)) == 50
    assert len(engine.get_palette(name, 8)) == 8


def test_inferno_runs_dark_to_bright(engine):
    palette = engine.get_palette('inferno', 50).to_array().astype(int)
    assert palette[0].sum() < palette[-1].sum()


def test_unknown_palette(engine):
    with pytest.raises(ValueError, match='Unknown color palette'):
        engine.get_palette('no-such-palette')
    with pytest.raises(ValueError):
        Palette.from_matplotlib('no-such-colormap')


def test_palette_size_validated(engine):
    with pytest.raises(ValueError):
        engine.get_palette('hot', 1)


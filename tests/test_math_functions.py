"""
Tests for the complex grid and the escape-time iterator.
"""
import numpy as np
import pytest

from fractal_animator.core.math_functions import ComplexPlane, FractalIterator


def _cell(plane, value):
    """Index of the grid cell holding exactly `value`."""
    grid = plane.create_complex_array()
    i, j = np.argwhere(grid == value)[0]
    return i, j


class TestComplexPlane:

    def test_shape_follows_resolution(self):
        plane = ComplexPlane(-2, 1, -1, 1, 30, 20)
        assert plane.create_complex_array().shape == (30, 20)
        assert plane.shape == (30, 20)

    def test_shared_resolution(self):
        plane = ComplexPlane(-2, 2, -2, 2, 17)
        assert plane.create_complex_array().shape == (17, 17)

    def test_samples_include_both_endpoints(self):
        plane = ComplexPlane(0.34, 0.38, -1.0, 1.0, 11, 5)
        x = plane.real_axis()
        y = plane.imag_axis()
        assert x[0] == 0.34 and x[-1] == 0.38
        assert y[0] == -1.0 and y[-1] == 1.0
        assert np.allclose(np.diff(x), 0.004)

    def test_cell_is_real_sample_plus_imaginary_sample(self):
        plane = ComplexPlane(-2, 2, -1, 1, 5, 3)
        grid = plane.create_complex_array()
        x, y = plane.real_axis(), plane.imag_axis()
        for i in range(5):
            for j in range(3):
                assert grid[i, j] == complex(x[i], y[j])

    def test_grid_is_read_only(self):
        grid = ComplexPlane(-2, 2, -2, 2, 4).create_complex_array()
        with pytest.raises(ValueError):
            grid[0, 0] = 1j

    def test_extent(self):
        assert ComplexPlane(-2, 1, -1.5, 1.5, 4).extent == (-2.0, 1.0, -1.5, 1.5)

    @pytest.mark.parametrize('width,height', [(0, 10), (10, 0), (-3, 10), (10, -1)])
    def test_non_positive_resolution_rejected(self, width, height):
        with pytest.raises(ValueError):
            ComplexPlane(-2, 2, -2, 2, width, height)

    @pytest.mark.parametrize('bounds', [(1, -1, -1, 1), (-1, 1, 1, -1), (0, 0, -1, 1)])
    def test_inverted_bounds_rejected(self, bounds):
        with pytest.raises(ValueError):
            ComplexPlane(*bounds, 10)


class TestFractalIterator:

    def test_invalid_budget_rejected(self):
        with pytest.raises(ValueError):
            FractalIterator(max_iter=0)
        with pytest.raises(ValueError):
            FractalIterator(max_iter=10, escape_radius=0)

    def test_counts_within_budget(self):
        plane = ComplexPlane(-2, 2, -2, 2, 41)
        for result in (FractalIterator(25).mandelbrot_iteration(plane.create_complex_array()),
                       FractalIterator(25).julia_iteration(plane.create_complex_array(),
                                                           -0.8 + 0.156j)):
            assert result.iterations.min() >= 1
            assert result.iterations.max() <= 25
            assert result.iterations.shape == plane.shape
            assert result.escaped.shape == plane.shape

    def test_never_escaped_cells_hold_max_iter(self):
        plane = ComplexPlane(-2, 2, -2, 2, 41)
        result = FractalIterator(30).mandelbrot_iteration(plane.create_complex_array())
        assert np.all(result.iterations[~result.escaped] == 30)
        assert result.max_iter == 30

    def test_origin_never_escapes(self):
        plane = ComplexPlane(-2, 2, -2, 2, 5)
        i, j = _cell(plane, 0j)
        result = FractalIterator(50).mandelbrot_iteration(plane.create_complex_array())
        assert not result.escaped[i, j]
        assert result.iterations[i, j] == 50

    @pytest.mark.parametrize('max_iter', [2, 3, 10, 100])
    def test_two_escapes_on_second_iteration(self, max_iter):
        plane = ComplexPlane(-2, 2, -2, 2, 5)
        i, j = _cell(plane, 2 + 0j)
        result = FractalIterator(max_iter).mandelbrot_iteration(plane.create_complex_array())
        assert result.escaped[i, j]
        assert result.iterations[i, j] == 2

    def test_escape_count_independent_of_larger_budget(self):
        c = ComplexPlane(-2, 1, -1.5, 1.5, 60).create_complex_array()
        small = FractalIterator(20).mandelbrot_iteration(c)
        large = FractalIterator(80).mandelbrot_iteration(c)

        assert np.array_equal(small.iterations[small.escaped], large.iterations[small.escaped])
        assert np.all(large.escaped[small.escaped])

    def test_julia_escape_count_independent_of_larger_budget(self):
        z = ComplexPlane(-2, 2, -2, 2, 60).create_complex_array()
        small = FractalIterator(15).julia_iteration(z, -0.4 + 0.6j)
        large = FractalIterator(60).julia_iteration(z, -0.4 + 0.6j)
        assert np.array_equal(small.iterations[small.escaped], large.iterations[small.escaped])

    def test_mandelbrot_symmetric_about_real_axis(self):
        # 65 samples over [-1, 1] step by 1/32, so the imaginary samples are exact mirrors
        plane = ComplexPlane(-2, 0.5, -1, 1, 80, 65)
        y = plane.imag_axis()
        assert np.array_equal(y, -y[::-1])

        result = FractalIterator(40).mandelbrot_iteration(plane.create_complex_array())
        assert np.array_equal(result.iterations, result.iterations[:, ::-1])

    def test_julia_starts_from_grid_cell(self):
        plane = ComplexPlane(-3, 3, -3, 3, 7)
        grid = plane.create_complex_array()
        result = FractalIterator(20).julia_iteration(grid, 0j)

        # With k = 0 the orbit is z0^(2^n): inside the unit disk it never escapes
        inside = np.abs(grid) <= 1
        assert np.all(~result.escaped[inside])
        i, j = _cell(plane, 3 + 0j)
        assert result.iterations[i, j] == 1
        i, j = _cell(plane, 2 + 0j)
        assert result.iterations[i, j] == 1

    def test_all_cells_escaping_at_once(self):
        z = ComplexPlane(10, 11, 10, 11, 8).create_complex_array()
        result = FractalIterator(100).julia_iteration(z, 0.25)
        assert result.escaped.all()
        assert np.all(result.iterations == 1)
        assert result.escaped_fraction == 1.0

    def test_input_grid_not_modified(self):
        plane = ComplexPlane(-2, 2, -2, 2, 10)
        grid = plane.create_complex_array()
        before = grid.copy()
        FractalIterator(10).julia_iteration(grid, -0.8 + 0.156j)
        FractalIterator(10).mandelbrot_iteration(grid)
        assert np.array_equal(grid, before)

    def test_empty_grid_rejected(self):
        with pytest.raises(ValueError):
            FractalIterator(10).mandelbrot_iteration(np.zeros((0, 0), dtype=complex))

    def test_orbits_seeded_at_cell_escape_one_iteration_earlier(self):
        c = np.array([[2, 0.3, -1.5 + 0.5j]], dtype=complex)
        from_zero = FractalIterator(50).mandelbrot_iteration(c)
        from_cell = FractalIterator(50).mandelbrot_iteration(c, z0=c)

        assert from_zero.iterations.tolist() == [[2, 12, 3]]
        assert from_cell.iterations.tolist() == [[1, 11, 2]]

    def test_cell_seed_shifts_every_late_escape(self):
        c = ComplexPlane(-2, 1, -1.5, 1.5, 50).create_complex_array()
        from_zero = FractalIterator(40).mandelbrot_iteration(c)
        from_cell = FractalIterator(40).mandelbrot_iteration(c, z0=c)

        late = from_zero.escaped & (from_zero.iterations >= 2)
        assert np.array_equal(from_cell.iterations[late], from_zero.iterations[late] - 1)

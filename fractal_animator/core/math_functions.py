"""
Core mathematical functions for escape-time fractal iteration.

This module provides the sampling grid over the complex plane and the
escape-time iteration shared by the Mandelbrot and Julia renderers.
"""

import numpy as np
from typing import Tuple, Optional
import logging

logger = logging.getLogger(__name__)


class ComplexPlane:
    """Represents a sampled region of the complex plane."""

    def __init__(self, xmin: float, xmax: float, ymin: float, ymax: float,
                 width: int, height: Optional[int] = None):
        """
        Initialize complex plane bounds and resolution.

        Args:
            xmin, xmax: Real axis bounds (both included in the samples)
            ymin, ymax: Imaginary axis bounds (both included in the samples)
            width: Number of samples along the real axis
            height: Number of samples along the imaginary axis (defaults to width)
        """
        if height is None:
            height = width

        if width <= 0 or height <= 0:
            raise ValueError("Resolution must be positive")
        if xmin >= xmax or ymin >= ymax:
            raise ValueError("Invalid bounds: min values must be less than max values")

        self.xmin = float(xmin)
        self.xmax = float(xmax)
        self.ymin = float(ymin)
        self.ymax = float(ymax)
        self.width = int(width)
        self.height = int(height)

    @property
    def shape(self) -> Tuple[int, int]:
        """Grid shape as (real samples, imaginary samples)."""
        return (self.width, self.height)

    @property
    def extent(self) -> Tuple[float, float, float, float]:
        """Bounds as (xmin, xmax, ymin, ymax), the order matplotlib expects."""
        return (self.xmin, self.xmax, self.ymin, self.ymax)

    def real_axis(self) -> np.ndarray:
        """Linearly spaced samples of the real axis."""
        return np.linspace(self.xmin, self.xmax, self.width)

    def imag_axis(self) -> np.ndarray:
        """Linearly spaced samples of the imaginary axis."""
        return np.linspace(self.ymin, self.ymax, self.height)

    def create_complex_array(self) -> np.ndarray:
        """
        Create the complex grid for the entire plane.

        Cell (i, j) holds real_axis()[i] + 1j * imag_axis()[j], so rows run
        along the real axis and columns along the imaginary axis.

        Returns:
            Read-only 2D complex128 array of shape (width, height)
        """
        grid = np.add.outer(self.real_axis(), 1j * self.imag_axis())
        grid.flags.writeable = False
        return grid

    def __repr__(self) -> str:
        return (f"ComplexPlane(xmin={self.xmin}, xmax={self.xmax}, ymin={self.ymin}, "
                f"ymax={self.ymax}, width={self.width}, height={self.height})")


class IterationResult:
    """Container for escape-time iteration results."""

    def __init__(self, iterations: np.ndarray, escaped: np.ndarray, max_iter: int,
                 final_values: Optional[np.ndarray] = None):
        """
        Initialize iteration result.

        Args:
            iterations: Escape iteration per cell, max_iter where the cell never escaped
            escaped: Boolean array indicating which cells escaped within budget
            max_iter: Iteration budget the result was computed with
            final_values: Last complex value of each orbit
        """
        self.iterations = iterations
        self.escaped = escaped
        self.max_iter = max_iter
        self.final_values = final_values
        self.shape = iterations.shape

    @property
    def escaped_fraction(self) -> float:
        """Fraction of cells that escaped within the budget."""
        if self.escaped.size == 0:
            return 0.0
        return float(np.count_nonzero(self.escaped)) / self.escaped.size


class FractalIterator:
    """Escape-time iteration for quadratic recurrences z -> z^2 + p."""

    def __init__(self, max_iter: int = 100, escape_radius: float = 2.0):
        """
        Initialize fractal iterator.

        Args:
            max_iter: Maximum number of iterations
            escape_radius: Magnitude beyond which an orbit counts as escaped
        """
        if max_iter <= 0:
            raise ValueError("max_iter must be positive")
        if escape_radius <= 0:
            raise ValueError("escape_radius must be positive")

        self.max_iter = int(max_iter)
        self.escape_radius = float(escape_radius)

    def mandelbrot_iteration(self, c: np.ndarray, z0: Optional[np.ndarray] = None) -> IterationResult:
        """
        Compute Mandelbrot set iterations.

        Args:
            c: Complex parameter grid
            z0: Initial z values (defaults to zeros)

        Returns:
            IterationResult with iteration counts and escape information
        """
        if z0 is None:
            z = np.zeros(c.shape, dtype=np.complex128)
        else:
            z = np.array(z0, dtype=np.complex128)

        return self._escape_time(z, np.asarray(c, dtype=np.complex128))

    def julia_iteration(self, z: np.ndarray, k: complex) -> IterationResult:
        """
        Compute Julia set iterations.

        Args:
            z: Initial complex values (the grid)
            k: Julia set constant

        Returns:
            IterationResult with iteration counts and escape information
        """
        z = np.array(z, dtype=np.complex128)
        p = np.full(z.shape, complex(k), dtype=np.complex128)
        return self._escape_time(z, p)

    def _escape_time(self, z: np.ndarray, p: np.ndarray) -> IterationResult:
        """Run z -> z^2 + p on every cell that has not escaped yet."""
        if z.size == 0:
            raise ValueError("Cannot iterate over an empty grid")
        if z.shape != p.shape:
            raise ValueError(f"Shape mismatch: z {z.shape} vs parameter {p.shape}")

        iterations = np.zeros(z.shape, dtype=np.int32)
        escaped = np.zeros(z.shape, dtype=bool)

        for i in range(1, self.max_iter + 1):
            active = ~escaped
            z[active] = z[active] * z[active] + p[active]

            # First escape wins; escaped cells are never revisited
            newly_escaped = active & (np.abs(z) > self.escape_radius)
            iterations[newly_escaped] = i
            escaped |= newly_escaped

            if escaped.all():
                logger.debug(f"All cells escaped after {i} iterations")
                break

        # Never-escaped cells take the top of the range
        iterations[iterations == 0] = self.max_iter

        return IterationResult(iterations, escaped, self.max_iter, z)

"""
Main API classes for fractal generation.

This module provides the high-level interface for static renders, combining
the grid, the escape-time iterator, the palette and the image writers.
"""

import numpy as np
from typing import Optional
from pathlib import Path
import logging
import time

from .core.fractal_types import FractalRegistry, FractalType
from .core.math_functions import FractalIterator, ComplexPlane, IterationResult
from .io.config import RenderConfig
from .rendering.coloring import ColoringEngine, Palette
from .rendering.image_output import ImageExporter, RenderMetadata
from .rendering.plotting import plot_fractal

logger = logging.getLogger(__name__)


class FractalRenderer:
    """Renders a single Mandelbrot or Julia image."""

    def __init__(self, config: Optional[RenderConfig] = None):
        """
        Initialize fractal renderer.

        Args:
            config: Rendering configuration (uses defaults if None)
        """
        self.config = config or RenderConfig()
        self.config.validate()

        self.coloring_engine = ColoringEngine()
        self.image_exporter = ImageExporter()

        logger.info(f"FractalRenderer initialized: {self.config.width}x{self.config.height}, "
                    f"max_iterations={self.config.max_iterations}")

    def create_fractal(self, name: str, **params) -> FractalType:
        """
        Build a registered fractal, filling in the configured Mandelbrot seed.

        An explicit `seed` in `params` wins over the configuration.
        """
        if name.lower() == 'mandelbrot':
            params.setdefault('seed', self.config.mandelbrot_seed)
        return FractalRegistry.create_fractal(name, **params)

    def create_plane(self) -> ComplexPlane:
        return ComplexPlane(*self.config.bounds, self.config.width, self.config.height)

    def compute(self, fractal: FractalType) -> IterationResult:
        """Iteration counts for `fractal` over the configured plane."""
        iterator = FractalIterator(
            max_iter=self.config.max_iterations,
            escape_radius=self.config.escape_radius,
        )
        return fractal.compute(self.create_plane(), iterator)

    def render(self, fractal: FractalType, output_path: Optional[Path] = None) -> np.ndarray:
        """
        Render fractal to a colored grid, optionally saving it.

        Args:
            fractal: Fractal type to render
            output_path: Optional output file path

        Returns:
            uint8 RGB array of shape (width, height, 3), indexed like the complex grid
        """
        start_time = time.time()
        logger.info(f"Starting render: {fractal.name} fractal")

        result = self.compute(fractal)
        palette = self.coloring_engine.get_palette(self.config.color_palette,
                                                   self.config.palette_size)
        rgb_grid = palette.colorize(result.iterations, result.max_iter)

        if output_path:
            self._save_image(rgb_grid, result, palette, Path(output_path),
                             time.time() - start_time, fractal)

        logger.info(f"Render complete: {time.time() - start_time:.2f}s "
                    f"({result.escaped_fraction:.1%} of cells escaped)")
        return rgb_grid

    def _save_image(self, rgb_grid: np.ndarray, result: IterationResult, palette: Palette,
                    output_path: Path, render_time: float, fractal: FractalType) -> None:
        """Save either the raw colored grid or an axis-labelled plot."""
        if self.config.raw:
            metadata = None
            if self.config.save_metadata:
                metadata = RenderMetadata(
                    fractal_type=fractal.name,
                    bounds=self.config.bounds,
                    resolution=(self.config.width, self.config.height),
                    max_iterations=self.config.max_iterations,
                    escape_radius=self.config.escape_radius,
                    color_palette=self.config.color_palette,
                    palette_size=self.config.palette_size,
                    render_time_seconds=render_time,
                    fractal_parameters=fractal.parameters.to_dict(),
                )
            self.image_exporter.save_image(rgb_grid, output_path, metadata)
            return

        plot_fractal(result, palette, self.config.bounds, output_path,
                     title=fractal.title,
                     size_px=(self.config.plot_px, self.config.plot_px),
                     dpi=self.config.dpi)

    def update_config(self, **kwargs) -> None:
        """Update configuration parameters and re-validate."""
        for key, value in kwargs.items():
            if not hasattr(self.config, key):
                raise ValueError(f"Unknown configuration parameter: {key}")
            setattr(self.config, key, value)
        self.config.validate()

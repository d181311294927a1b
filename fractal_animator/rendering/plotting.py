"""
Plotted output: axis-labelled static images and two-panel animation frames.

Figures are built on matplotlib's object API with the Agg canvas, so
rendering never touches pyplot's global figure state.
"""

import numpy as np
from typing import Optional, Tuple
from pathlib import Path
import logging

from matplotlib.figure import Figure
from matplotlib.backends.backend_agg import FigureCanvasAgg

from ..core.fractal_types import format_complex
from ..core.math_functions import IterationResult
from .coloring import Palette

logger = logging.getLogger(__name__)

Extent = Tuple[float, float, float, float]


def _draw_panel(ax, rgb_grid: np.ndarray, extent: Extent, title: Optional[str] = None,
                show_axes: bool = False) -> None:
    """Draw a colored (real, imag, 3) grid with the imaginary axis vertical."""
    ax.imshow(rgb_grid.transpose(1, 0, 2), origin='lower', extent=extent,
              interpolation='nearest', aspect='auto')
    if title:
        ax.set_title(title)
    if show_axes:
        ax.set_xlabel("Re")
        ax.set_ylabel("Im")
    else:
        ax.set_axis_off()


def plot_fractal(result: IterationResult, palette: Palette, extent: Extent,
                 output_path: Path, title: Optional[str] = None,
                 size_px: Tuple[int, int] = (800, 800), dpi: int = 100) -> Path:
    """
    Save an axis-labelled plot of one iteration-count grid.

    Args:
        result: Iteration counts to plot
        palette: Discrete palette to color with
        extent: (xmin, xmax, ymin, ymax) of the sampled plane
        output_path: Image file to write
        title: Optional plot title
        size_px: Figure size in pixels (width, height)
        dpi: Figure resolution

    Returns:
        The path written
    """
    output_path = Path(output_path)

    fig = Figure(figsize=(size_px[0] / dpi, size_px[1] / dpi), dpi=dpi)
    FigureCanvasAgg(fig)
    ax = fig.add_subplot(1, 1, 1)
    _draw_panel(ax, palette.colorize(result.iterations, result.max_iter), extent,
                title=title, show_axes=True)
    fig.tight_layout()
    fig.savefig(output_path, dpi=dpi)

    logger.info(f"Saved plot: {output_path}")
    return output_path


def frame_path(directory: Path, index: int, total: int = 0) -> Path:
    """
    Name of the 1-based frame `index` inside `directory`.

    Indices are zero-padded to at least three digits (more when `total`
    needs them) so a lexicographic listing is in playback order.
    """
    if index < 1:
        raise ValueError("Frame index must be >= 1")
    digits = max(3, len(str(total)))
    return Path(directory) / f"frame_{index:0{digits}d}.png"


class FrameRenderer:
    """Renders the static Mandelbrot panel next to a Julia panel."""

    def __init__(self, palette: Palette, panel_px: int = 600, dpi: int = 100):
        """
        Initialize the frame renderer.

        Args:
            palette: Discrete palette shared by both panels
            panel_px: Width and height of each square panel in pixels
            dpi: Figure resolution
        """
        if panel_px <= 0:
            raise ValueError("panel_px must be positive")
        if dpi <= 0:
            raise ValueError("dpi must be positive")

        self.palette = palette
        self.panel_px = panel_px
        self.dpi = dpi

    @property
    def image_size(self) -> Tuple[int, int]:
        """Frame size in pixels (width, height)."""
        return (2 * self.panel_px, self.panel_px)

    def render_frame(self, mandelbrot: IterationResult, julia: IterationResult,
                     k: complex, path: Path, extent: Extent) -> Path:
        """
        Render one animation frame and write it to `path`.

        Args:
            mandelbrot: Static Mandelbrot counts (left panel)
            julia: Julia counts for this frame (right panel)
            k: Julia parameter shown in the right panel title
            path: PNG file to write
            extent: (xmin, xmax, ymin, ymax) of the sampled plane

        Returns:
            The path written
        """
        if mandelbrot.shape != julia.shape:
            raise ValueError(f"Panel shapes differ: {mandelbrot.shape} vs {julia.shape}")

        path = Path(path)
        width, height = self.image_size

        fig = Figure(figsize=(width / self.dpi, height / self.dpi), dpi=self.dpi)
        FigureCanvasAgg(fig)
        left, right = fig.subplots(1, 2)
        fig.subplots_adjust(left=0.01, right=0.99, bottom=0.02, top=0.92, wspace=0.04)

        _draw_panel(left, self.palette.colorize(mandelbrot.iterations, mandelbrot.max_iter),
                    extent, title="Mandelbrot")
        _draw_panel(right, self.palette.colorize(julia.iterations, julia.max_iter),
                    extent, title=f"Julia, k = {format_complex(k)}")

        fig.savefig(path, dpi=self.dpi)
        return path

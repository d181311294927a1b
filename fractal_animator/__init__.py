"""
Mandelbrot and Julia set rendering and animation.

This library computes escape-time iteration counts over a sampled region of
the complex plane, colors them with a discrete palette, and writes either a
single image or an animated GIF in which a Julia set's parameter travels
around a circle next to a static Mandelbrot set.

Example usage:
    >>> from fractal_animator import FractalRenderer, RenderConfig, MandelbrotSet
    >>> renderer = FractalRenderer(RenderConfig(width=400, height=400))
    >>> image = renderer.render(MandelbrotSet(), "mandelbrot.png")

    >>> from fractal_animator import AnimationSequencer, AnimationConfig
    >>> AnimationSequencer(AnimationConfig(frames=30)).run()
"""

__version__ = "1.0.0"

from fractal_animator.core.math_functions import ComplexPlane, FractalIterator, IterationResult
from fractal_animator.core.fractal_types import MandelbrotSet, JuliaSet, FractalRegistry
from fractal_animator.rendering.coloring import ColoringEngine, Palette
from fractal_animator.rendering.image_output import ImageExporter
from fractal_animator.rendering.plotting import FrameRenderer
from fractal_animator.tools.animation import (
    AnimationSequencer,
    CircularTrajectory,
    EncoderUnavailableError,
    GifEncoder,
)
from fractal_animator.io.config import ConfigManager, RenderConfig, AnimationConfig

from fractal_animator.api import FractalRenderer

__all__ = [
    "FractalRenderer",
    "RenderConfig",
    "AnimationConfig",
    "ComplexPlane",
    "FractalIterator",
    "IterationResult",
    "MandelbrotSet",
    "JuliaSet",
    "FractalRegistry",
    "ColoringEngine",
    "Palette",
    "ImageExporter",
    "FrameRenderer",
    "AnimationSequencer",
    "CircularTrajectory",
    "GifEncoder",
    "EncoderUnavailableError",
    "ConfigManager",
]

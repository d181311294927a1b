"""
Animation of a Julia set whose parameter travels around a circle.

Each frame shows the Mandelbrot set (computed once, shared by every frame)
next to the Julia set for the current parameter. Frames are written as
numbered PNGs and then assembled into a GIF.
"""

import math
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Sequence
import logging

import numpy as np
from PIL import Image

try:
    import imageio.v2 as imageio
    IMAGEIO_AVAILABLE = True
except ImportError:
    IMAGEIO_AVAILABLE = False

from ..core.fractal_types import format_complex, mandelbrot_start
from ..core.math_functions import ComplexPlane, FractalIterator, IterationResult
from ..io.config import AnimationConfig, ENCODERS
from ..rendering.coloring import ColoringEngine
from ..rendering.plotting import FrameRenderer, frame_path

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, complex], None]


class EncoderUnavailableError(RuntimeError):
    """The requested GIF encoder cannot be used in this environment."""


class CircularTrajectory:
    """Evenly spaced points on a circle, one per animation frame."""

    def __init__(self, center: complex, radius: float, frames: int):
        """
        Args:
            center: Circle center
            radius: Circle radius
            frames: Number of points; point `frames` coincides with point 0
        """
        if frames <= 0:
            raise ValueError("frames must be positive")
        if radius < 0:
            raise ValueError("radius must not be negative")

        self.center = complex(center)
        self.radius = float(radius)
        self.frames = int(frames)

    def angle(self, index: int) -> float:
        return 2 * math.pi * index / self.frames

    def point(self, index: int) -> complex:
        """Parameter for frame `index` (0-based)."""
        theta = self.angle(index)
        return self.center + self.radius * complex(math.cos(theta), math.sin(theta))

    def __len__(self) -> int:
        return self.frames

    def __iter__(self) -> Iterator[complex]:
        for index in range(self.frames):
            yield self.point(index)


class GifEncoder:
    """Assembles an ordered list of images into a looping GIF."""

    def __init__(self, backend: str = 'imageio'):
        if backend not in ENCODERS:
            raise ValueError(f"Unknown encoder '{backend}'. Available: {', '.join(ENCODERS)}")
        self.backend = backend

    def available(self) -> bool:
        if self.backend == 'imageio':
            return IMAGEIO_AVAILABLE
        return True

    def require(self) -> None:
        """Raise EncoderUnavailableError with an install hint if unusable."""
        if not self.available():
            raise EncoderUnavailableError(
                f"GIF encoder '{self.backend}' is not available. "
                "Install it with 'pip install imageio' or use --encoder pillow"
            )

    def encode(self, paths: Sequence[Path], output: Path, delay: float) -> Path:
        """
        Write `paths`, in the given order, as an animated GIF.

        Args:
            paths: Frame images in playback order
            output: GIF file to write
            delay: Display time of each frame in seconds

        Returns:
            The path written
        """
        self.require()
        if not paths:
            raise ValueError("No frames to encode")
        if delay <= 0:
            raise ValueError("Frame delay must be positive")

        output = Path(output)
        output.parent.mkdir(parents=True, exist_ok=True)

        if self.backend == 'imageio':
            self._encode_imageio(paths, output, delay)
        else:
            self._encode_pillow(paths, output, delay)

        logger.info(f"Encoded {len(paths)} frames with {self.backend}: {output}")
        return output

    def _encode_imageio(self, paths: Sequence[Path], output: Path, delay: float) -> None:
        # The GIF plugin takes per-frame durations in milliseconds
        with imageio.get_writer(str(output), mode='I', duration=delay * 1000, loop=0) as writer:
            for path in paths:
                writer.append_data(imageio.imread(str(path))[..., :3])

    def _encode_pillow(self, paths: Sequence[Path], output: Path, delay: float) -> None:
        frames = []
        for path in paths:
            with Image.open(path) as img:
                frames.append(img.convert('RGB'))

        frames[0].save(
            output,
            save_all=True,
            append_images=frames[1:],
            optimize=False,
            duration=int(round(delay * 1000)),
            loop=0,
        )


class AnimationSequencer:
    """Drives the per-frame Julia computation, frame rendering and encoding."""

    def __init__(self, config: Optional[AnimationConfig] = None,
                 encoder: Optional[GifEncoder] = None):
        """
        Args:
            config: Animation settings (defaults if None); validated here
            encoder: GIF encoder (built from config.encoder if None)
        """
        self.config = config or AnimationConfig()
        self.config.validate()

        self.plane = ComplexPlane(*self.config.bounds, self.config.resolution)
        self.trajectory = CircularTrajectory(self.config.k_center, self.config.k_radius,
                                             self.config.frames)
        self.encoder = encoder or GifEncoder(self.config.encoder)

        palette = ColoringEngine().get_palette(self.config.color_palette,
                                               self.config.palette_size)
        self.renderer = FrameRenderer(palette, self.config.panel_px, self.config.dpi)

        self._mandelbrot_iterator = FractalIterator(self.config.mandelbrot_iterations,
                                                    self.config.escape_radius)
        self._julia_iterator = FractalIterator(self.config.julia_iterations,
                                               self.config.escape_radius)
        self._grid: Optional[np.ndarray] = None
        self._mandelbrot: Optional[IterationResult] = None

    @property
    def grid(self) -> np.ndarray:
        if self._grid is None:
            self._grid = self.plane.create_complex_array()
        return self._grid

    @property
    def mandelbrot(self) -> IterationResult:
        """Mandelbrot counts, computed on first use and reused by every frame."""
        if self._mandelbrot is None:
            logger.info(f"Computing Mandelbrot panel ({self.plane.width}x{self.plane.height}, "
                        f"{self.config.mandelbrot_iterations} iterations)")
            z0 = mandelbrot_start(self.grid, self.config.mandelbrot_seed)
            self._mandelbrot = self._mandelbrot_iterator.mandelbrot_iteration(self.grid, z0)
            self._mandelbrot.iterations.flags.writeable = False
        return self._mandelbrot

    def compute_julia(self, k: complex) -> IterationResult:
        """Julia counts over the shared grid for parameter `k`."""
        return self._julia_iterator.julia_iteration(self.grid, k)

    def render_frames(self, directory: Path,
                      progress_callback: Optional[ProgressCallback] = None) -> List[Path]:
        """
        Render every frame into `directory`.

        Returns:
            Frame paths in trajectory order
        """
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)

        total = len(self.trajectory)
        paths = []
        for index, k in enumerate(self.trajectory):
            julia = self.compute_julia(k)
            path = frame_path(directory, index + 1, total)
            self.renderer.render_frame(self.mandelbrot, julia, k, path, self.plane.extent)
            paths.append(path)

            logger.info(f"Rendered frame {index + 1}/{total}  (k = {format_complex(k)})")
            if progress_callback:
                progress_callback(index + 1, total, k)

        return paths

    def run(self, progress_callback: Optional[ProgressCallback] = None) -> Path:
        """
        Render all frames and write the GIF.

        Returns:
            Absolute path of the written GIF
        """
        # Fail before spending time on frames nobody can encode
        self.encoder.require()

        if self.config.frame_dir:
            frame_dir = Path(self.config.frame_dir)
            owns_frame_dir = False
        else:
            frame_dir = Path(tempfile.mkdtemp(prefix="julia_frames_"))
            owns_frame_dir = True

        paths = self.render_frames(frame_dir, progress_callback)
        output = self.encoder.encode(paths, Path(self.config.output), self.config.frame_delay)
        logger.info(f"Wrote GIF to: {output.resolve()}")

        if not self.config.keep_frames:
            self._cleanup(paths, frame_dir if owns_frame_dir else None)

        return output.resolve()

    def _cleanup(self, paths: Sequence[Path], directory: Optional[Path]) -> None:
        if directory is not None:
            shutil.rmtree(directory, ignore_errors=True)
            return
        for path in paths:
            try:
                path.unlink()
            except OSError as e:
                logger.warning(f"Could not remove frame {path}: {e}")

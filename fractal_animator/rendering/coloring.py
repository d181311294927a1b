"""
Palette management and escape-time coloring.

A palette is an ordered list of discrete colors. Iteration counts are mapped
linearly onto palette indices, so 1 picks the first color and max_iter (which
also covers cells that never escaped) picks the last one.
"""

import numpy as np
from typing import Dict, List, Tuple, Union
from dataclasses import dataclass
import logging

import matplotlib

logger = logging.getLogger(__name__)

DEFAULT_PALETTE = 'inferno'
DEFAULT_PALETTE_SIZE = 50


@dataclass(frozen=True)
class ColorRGB:
    """RGB color representation, components in [0, 1]."""
    r: float
    g: float
    b: float

    def __post_init__(self):
        """Validate RGB values."""
        for component in (self.r, self.g, self.b):
            if not 0 <= component <= 1:
                raise ValueError("RGB components must be between 0 and 1")

    def to_tuple(self) -> Tuple[float, float, float]:
        """Convert to RGB tuple."""
        return (self.r, self.g, self.b)

    def to_uint8_tuple(self) -> Tuple[int, int, int]:
        """Convert to 8-bit RGB tuple."""
        return (int(round(self.r * 255)), int(round(self.g * 255)), int(round(self.b * 255)))


class Palette:
    """Ordered sequence of discrete colors."""

    def __init__(self, colors: List[Union[ColorRGB, Tuple[float, float, float]]],
                 name: str = "Custom"):
        """
        Initialize color palette.

        Args:
            colors: Colors in palette order
            name: Human-readable name for the palette
        """
        self.name = name
        self.colors = []

        for color in colors:
            if isinstance(color, ColorRGB):
                self.colors.append(color)
            elif isinstance(color, (tuple, list)) and len(color) == 3:
                self.colors.append(ColorRGB(*color))
            else:
                raise ValueError(f"Invalid color format: {color}")

        if len(self.colors) < 2:
            raise ValueError("Palette must contain at least 2 colors")

    def __len__(self) -> int:
        return len(self.colors)

    def to_array(self) -> np.ndarray:
        """Palette as an (n, 3) uint8 array."""
        return np.array([c.to_uint8_tuple() for c in self.colors], dtype=np.uint8)

    def resample(self, n_colors: int) -> 'Palette':
        """
        Build an n-color palette by linear interpolation between these colors.

        Args:
            n_colors: Number of colors in the new palette
        """
        if n_colors < 2:
            raise ValueError("Palette must contain at least 2 colors")

        anchors = np.array([c.to_tuple() for c in self.colors])
        positions = np.linspace(0.0, 1.0, len(anchors))
        t = np.linspace(0.0, 1.0, n_colors)
        channels = [np.interp(t, positions, anchors[:, ch]) for ch in range(3)]
        colors = [tuple(float(np.clip(channels[ch][i], 0.0, 1.0)) for ch in range(3))
                  for i in range(n_colors)]
        return Palette(colors, name=self.name)

    def indices_for(self, iterations: np.ndarray, max_iter: int) -> np.ndarray:
        """
        Map iteration counts onto palette indices.

        Counts are normalized over [1, max_iter] and scaled linearly onto
        [0, len(palette) - 1]; anything outside is clamped.
        """
        if max_iter <= 0:
            raise ValueError("max_iter must be positive")

        counts = np.asarray(iterations, dtype=np.float64)
        if max_iter == 1:
            normalized = np.ones_like(counts)
        else:
            normalized = (counts - 1.0) / (max_iter - 1)

        indices = np.rint(normalized * (len(self.colors) - 1)).astype(np.intp)
        return np.clip(indices, 0, len(self.colors) - 1)

    def colorize(self, iterations: np.ndarray, max_iter: int) -> np.ndarray:
        """
        Color an iteration-count grid.

        Returns:
            uint8 RGB array with shape iterations.shape + (3,)
        """
        return self.to_array()[self.indices_for(iterations, max_iter)]

    @classmethod
    def from_matplotlib(cls, cmap_name: str, n_samples: int = DEFAULT_PALETTE_SIZE) -> 'Palette':
        """Create palette by sampling a matplotlib colormap."""
        try:
            cmap = matplotlib.colormaps[cmap_name]
        except KeyError:
            raise ValueError(f"Unknown matplotlib colormap '{cmap_name}'")

        rgba = cmap(np.linspace(0.0, 1.0, n_samples))
        colors = [(float(r), float(g), float(b)) for r, g, b, _ in rgba]
        return cls(colors, name=cmap_name)


class ColoringEngine:
    """Registry of named palettes and escape-time coloring."""

    MATPLOTLIB_PALETTES = ('inferno', 'viridis', 'plasma', 'magma', 'cividis', 'twilight')

    def __init__(self):
        """Initialize coloring engine with built-in palettes."""
        self.palettes = self._create_builtin_palettes()

    def _create_builtin_palettes(self) -> Dict[str, Palette]:
        """Create built-in anchor palettes, resampled on request."""
        palettes = {}

        palettes['hot'] = Palette([
            ColorRGB(0, 0, 0),      # Black
            ColorRGB(1, 0, 0),      # Red
            ColorRGB(1, 1, 0),      # Yellow
            ColorRGB(1, 1, 1),      # White
        ], name="hot")

        palettes['cool'] = Palette([
            ColorRGB(0, 0, 0),      # Black
            ColorRGB(0, 0, 1),      # Blue
            ColorRGB(0, 1, 1),      # Cyan
            ColorRGB(1, 1, 1),      # White
        ], name="cool")

        palettes['gray'] = Palette([
            ColorRGB(0, 0, 0),
            ColorRGB(1, 1, 1),
        ], name="gray")

        palettes['fire'] = Palette([
            ColorRGB(0, 0, 0),          # Black
            ColorRGB(0.5, 0, 0),        # Dark red
            ColorRGB(1, 0, 0),          # Red
            ColorRGB(1, 0.5, 0),        # Orange
            ColorRGB(1, 1, 0),          # Yellow
            ColorRGB(1, 1, 1),          # White
        ], name="fire")

        palettes['ocean'] = Palette([
            ColorRGB(0, 0, 0.2),        # Deep blue
            ColorRGB(0, 0, 0.8),        # Blue
            ColorRGB(0, 0.5, 1),        # Light blue
            ColorRGB(0, 1, 1),          # Cyan
            ColorRGB(0.5, 1, 1),        # Light cyan
            ColorRGB(1, 1, 1),          # White
        ], name="ocean")

        return palettes

    def get_palette(self, name: str = DEFAULT_PALETTE,
                    size: int = DEFAULT_PALETTE_SIZE) -> Palette:
        """
        Get an n-color palette by name.

        Args:
            name: Built-in or matplotlib palette name
            size: Number of discrete colors
        """
        if size < 2:
            raise ValueError("Palette size must be at least 2")

        if name in self.palettes:
            return self.palettes[name].resample(size)
        if name in self.MATPLOTLIB_PALETTES:
            return Palette.from_matplotlib(name, size)

        available = ', '.join(self.list_palettes())
        raise ValueError(f"Unknown color palette '{name}'. Available: {available}")

    def list_palettes(self) -> List[str]:
        """Get list of available color palettes."""
        return list(self.palettes.keys()) + list(self.MATPLOTLIB_PALETTES)

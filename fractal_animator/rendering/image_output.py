"""
Raw image export for fractal renders.

Writes one pixel per grid cell, oriented with the real axis running left to
right and the imaginary axis bottom to top, and embeds the render parameters
as JSON so an image can be traced back to the settings that produced it.
"""

import numpy as np
from typing import Dict, Any, Optional, Tuple
from pathlib import Path
from dataclasses import dataclass, asdict, field
import json
import logging
from datetime import datetime

from PIL import Image, PngImagePlugin

from .. import __version__

logger = logging.getLogger(__name__)


@dataclass
class RenderMetadata:
    """Metadata for fractal renders."""

    fractal_type: str
    bounds: Tuple[float, float, float, float]  # xmin, xmax, ymin, ymax
    resolution: Tuple[int, int]  # real samples, imaginary samples
    max_iterations: int
    escape_radius: float
    color_palette: str
    palette_size: int

    render_time_seconds: float = 0.0
    timestamp: str = ""
    software_version: str = __version__
    fractal_parameters: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Set default timestamp if not provided."""
        if not self.timestamp:
            self.timestamp = datetime.now().isoformat()
        self.bounds = tuple(self.bounds)
        self.resolution = tuple(self.resolution)

    def to_dict(self) -> Dict[str, Any]:
        """Convert metadata to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RenderMetadata':
        """Create metadata from dictionary."""
        return cls(**data)

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> 'RenderMetadata':
        """Create metadata from JSON string."""
        return cls.from_dict(json.loads(json_str))


def grid_to_image_array(grid_rgb: np.ndarray) -> np.ndarray:
    """
    Reorient a (real, imag, 3) colored grid into (rows, cols, 3) image order.

    Rows become the imaginary axis with the largest value at the top.
    """
    if grid_rgb.ndim != 3 or grid_rgb.shape[2] != 3:
        raise ValueError(f"Expected colored grid (W, H, 3), got {grid_rgb.shape}")
    return np.ascontiguousarray(np.flipud(grid_rgb.transpose(1, 0, 2)))


class ImageExporter:
    """Pixel-exact image export with metadata support."""

    def __init__(self):
        """Initialize image exporter."""
        self.supported_formats = {
            '.png': self._save_png,
            '.jpg': self._save_jpeg,
            '.jpeg': self._save_jpeg,
        }

    def save_image(self, grid_rgb: np.ndarray, filepath: Path,
                   metadata: Optional[RenderMetadata] = None,
                   quality: int = 95) -> Path:
        """
        Save a colored grid to file with metadata.

        Args:
            grid_rgb: Colored grid (real samples, imaginary samples, 3), uint8
            filepath: Output file path
            metadata: Render metadata to embed
            quality: JPEG quality (1-100)

        Returns:
            The path written
        """
        filepath = Path(filepath)
        suffix = filepath.suffix.lower()

        if suffix not in self.supported_formats:
            supported = ', '.join(self.supported_formats.keys())
            raise ValueError(f"Unsupported format '{suffix}'. Supported: {supported}")

        image_array = grid_to_image_array(self._prepare_array(grid_rgb))
        pil_image = Image.fromarray(image_array)

        save_method = self.supported_formats[suffix]
        save_method(pil_image, filepath, metadata, quality)

        logger.info(f"Saved image: {filepath} ({pil_image.size[0]}x{pil_image.size[1]})")
        return filepath

    def _prepare_array(self, grid_rgb: np.ndarray) -> np.ndarray:
        """Convert to 8-bit, assuming 0-1 floats or 0-255 integers."""
        if grid_rgb.dtype == np.uint8:
            return grid_rgb
        if np.issubdtype(grid_rgb.dtype, np.floating):
            return (np.clip(grid_rgb, 0.0, 1.0) * 255).astype(np.uint8)
        return np.clip(grid_rgb, 0, 255).astype(np.uint8)

    def _save_png(self, pil_image: Image.Image, filepath: Path,
                  metadata: Optional[RenderMetadata], quality: int) -> None:
        """Save as PNG with metadata text chunks."""
        pnginfo = PngImagePlugin.PngInfo()

        if metadata:
            pnginfo.add_text("Title", f"Fractal: {metadata.fractal_type}")
            pnginfo.add_text("Software", f"fractal-animator v{metadata.software_version}")
            pnginfo.add_text("Creation Time", metadata.timestamp)
            pnginfo.add_text("FractalMetadata", metadata.to_json())

        pil_image.save(filepath, "PNG", pnginfo=pnginfo)

    def _save_jpeg(self, pil_image: Image.Image, filepath: Path,
                   metadata: Optional[RenderMetadata], quality: int) -> None:
        """Save as JPEG, metadata goes to a companion JSON file."""
        pil_image.save(filepath, "JPEG", quality=quality, optimize=True)

        if metadata:
            json_path = filepath.with_suffix('.json')
            json_path.write_text(metadata.to_json())
            logger.info(f"Saved metadata: {json_path}")

    def extract_metadata_from_image(self, filepath: Path) -> Optional[RenderMetadata]:
        """
        Extract fractal metadata from a saved image.

        Args:
            filepath: Path to image file

        Returns:
            Extracted metadata or None
        """
        filepath = Path(filepath)

        with Image.open(filepath) as img:
            text = getattr(img, 'text', {})
            if 'FractalMetadata' in text:
                return RenderMetadata.from_json(text['FractalMetadata'])

        json_path = filepath.with_suffix('.json')
        if filepath.suffix.lower() in ('.jpg', '.jpeg') and json_path.exists():
            return RenderMetadata.from_json(json_path.read_text())

        return None

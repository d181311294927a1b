"""
Configuration management for static renders and animations.

Settings come from dataclass defaults, optionally replaced by a named preset,
then by a YAML or JSON file, then by command-line overrides. Every config is
validated before any computation starts.
"""

import json
from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union
import logging

import yaml

from ..core.fractal_types import MANDELBROT_SEEDS

logger = logging.getLogger(__name__)

Bounds = Tuple[float, float, float, float]

ENCODERS = ('imageio', 'pillow')


def _check_bounds(bounds) -> List[str]:
    if len(bounds) != 4:
        return ["bounds must be (xmin, xmax, ymin, ymax)"]
    xmin, xmax, ymin, ymax = bounds
    if xmin >= xmax or ymin >= ymax:
        return ["Invalid bounds: min values must be less than max"]
    return []


class _ConfigMixin:
    """Dictionary conversion and validation shared by the config dataclasses."""

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, tuple):
                data[key] = list(value)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown {cls.__name__} keys: {', '.join(sorted(unknown))}")

        values = dict(data)
        if 'bounds' in values:
            values['bounds'] = tuple(float(v) for v in values['bounds'])
        return cls(**values)

    def type_errors(self) -> List[str]:
        """Settings whose value does not match the declared int/float/str/bool type."""
        errors = []
        for f in fields(self):
            value = getattr(self, f.name)
            if f.type is bool:
                ok = isinstance(value, bool)
            elif f.type is int:
                ok = isinstance(value, int) and not isinstance(value, bool)
            elif f.type is float:
                ok = isinstance(value, (int, float)) and not isinstance(value, bool)
            elif f.type is str:
                ok = isinstance(value, str)
            else:
                continue
            if not ok:
                errors.append(f"{f.name} must be of type {f.type.__name__}, got {value!r}")
        return errors

    def value_errors(self) -> List[str]:
        """Range checks; only called once every setting has the right type."""
        return []

    def errors(self) -> List[str]:
        return self.type_errors() or self.value_errors()

    def validate(self) -> None:
        """Raise ValueError listing every invalid setting."""
        errors = self.errors()
        if errors:
            raise ValueError("; ".join(errors))


@dataclass
class RenderConfig(_ConfigMixin):
    """Configuration for a single static render."""

    width: int = 800
    height: int = 800
    bounds: Bounds = (-2.0, 2.0, -2.0, 2.0)  # xmin, xmax, ymin, ymax

    max_iterations: int = 60
    escape_radius: float = 2.0
    mandelbrot_seed: str = 'zero'  # 'zero' or 'cell' (orbit starts at c)

    color_palette: str = 'inferno'
    palette_size: int = 50

    # Plotted output size; ignored for raw output
    plot_px: int = 800
    dpi: int = 100
    raw: bool = False
    save_metadata: bool = True

    def value_errors(self) -> List[str]:
        errors = []
        if self.width <= 0 or self.height <= 0:
            errors.append("Width and height must be positive")
        if self.max_iterations <= 0:
            errors.append("max_iterations must be positive")
        if self.escape_radius <= 0:
            errors.append("escape_radius must be positive")
        if self.mandelbrot_seed not in MANDELBROT_SEEDS:
            errors.append(f"mandelbrot_seed must be one of: {', '.join(MANDELBROT_SEEDS)}")
        if self.palette_size < 2:
            errors.append("palette_size must be at least 2")
        if self.plot_px <= 0 or self.dpi <= 0:
            errors.append("plot_px and dpi must be positive")
        errors.extend(_check_bounds(self.bounds))
        return errors


@dataclass
class AnimationConfig(_ConfigMixin):
    """Configuration for the Mandelbrot + rotating Julia animation."""

    resolution: int = 500
    bounds: Bounds = (-2.0, 2.0, -2.0, 2.0)

    mandelbrot_iterations: int = 50
    julia_iterations: int = 60
    escape_radius: float = 2.0
    mandelbrot_seed: str = 'zero'

    frames: int = 60
    fps: float = 20.0

    color_palette: str = 'inferno'
    palette_size: int = 50

    # The Julia parameter circles k_center at distance k_radius
    k_center_real: float = -0.8
    k_center_imag: float = 0.156
    k_radius: float = 0.35

    panel_px: int = 600
    dpi: int = 100

    output: str = 'julia_animation.gif'
    frame_dir: Optional[str] = None
    keep_frames: bool = False
    encoder: str = 'imageio'

    @property
    def k_center(self) -> complex:
        return complex(self.k_center_real, self.k_center_imag)

    @property
    def frame_delay(self) -> float:
        """Display time of one frame in seconds."""
        return 1.0 / self.fps

    def value_errors(self) -> List[str]:
        errors = []
        if self.resolution <= 0:
            errors.append("resolution must be positive")
        if self.mandelbrot_iterations <= 0 or self.julia_iterations <= 0:
            errors.append("Iteration budgets must be positive")
        if self.escape_radius <= 0:
            errors.append("escape_radius must be positive")
        if self.mandelbrot_seed not in MANDELBROT_SEEDS:
            errors.append(f"mandelbrot_seed must be one of: {', '.join(MANDELBROT_SEEDS)}")
        if self.frames <= 0:
            errors.append("frames must be positive")
        if self.fps <= 0:
            errors.append("fps must be positive")
        if self.palette_size < 2:
            errors.append("palette_size must be at least 2")
        if self.k_radius < 0:
            errors.append("k_radius must not be negative")
        if self.panel_px <= 0 or self.dpi <= 0:
            errors.append("panel_px and dpi must be positive")
        if not self.output:
            errors.append("output path must not be empty")
        if self.encoder not in ENCODERS:
            errors.append(f"encoder must be one of: {', '.join(ENCODERS)}")
        errors.extend(_check_bounds(self.bounds))
        return errors


# Presets hold partial overrides per section
BUILTIN_PRESETS: Dict[str, Dict[str, Any]] = {
    'default': {
        '_description': 'Full-size render and 60-frame animation',
        'render': {},
        'animation': {},
    },
    'preview': {
        '_description': 'Small and fast, for checking settings',
        'render': {'width': 200, 'height': 200, 'plot_px': 400},
        'animation': {'resolution': 120, 'frames': 12, 'panel_px': 200},
    },
    'zoom': {
        '_description': 'Close-up of the Mandelbrot boundary near 0.36+0.36i, orbits seeded at c',
        'render': {
            'width': 1200, 'height': 1200,
            'bounds': [0.34, 0.38, 0.34, 0.38],
            'max_iterations': 60,
            'mandelbrot_seed': 'cell',
        },
        'animation': {},
    },
    'hires': {
        '_description': 'Larger panels and a smoother animation',
        'render': {'width': 1600, 'height': 1600, 'plot_px': 1600, 'max_iterations': 200},
        'animation': {'resolution': 800, 'frames': 120, 'fps': 30, 'panel_px': 800,
                      'julia_iterations': 120, 'mandelbrot_iterations': 100},
    },
}


class ConfigManager:
    """Loads, validates and exports configuration files."""

    SECTIONS = {'render': RenderConfig, 'animation': AnimationConfig}

    def __init__(self, presets: Optional[Dict[str, Dict[str, Any]]] = None):
        self.presets = dict(BUILTIN_PRESETS)
        if presets:
            self.presets.update(presets)

    def load_config(self, path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
        """
        Load a configuration dictionary from YAML or JSON.

        Without a path, returns an empty configuration (defaults only) that
        still lists the built-in presets.
        """
        if path is None:
            return {'presets': dict(self.presets)}

        path = Path(path)
        text = path.read_text(encoding='utf-8')

        if path.suffix.lower() == '.json':
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Configuration root must be a mapping: {path}")

        file_presets = data.get('presets', {})
        data['presets'] = {**self.presets, **file_presets}

        logger.debug(f"Loaded configuration from {path}")
        return data

    def list_presets(self, config_dict: Optional[Dict[str, Any]] = None) -> List[str]:
        """Names of the presets available in the given (or built-in) configuration."""
        if config_dict is None:
            return list(self.presets.keys())
        return list(config_dict.get('presets', {}).keys())

    def _section(self, config_dict: Dict[str, Any], section: str,
                 preset: Optional[str]) -> Dict[str, Any]:
        values: Dict[str, Any] = {}
        if preset:
            presets = config_dict.get('presets', self.presets)
            if preset not in presets:
                available = ', '.join(presets.keys())
                raise ValueError(f"Unknown preset '{preset}'. Available: {available}")
            values.update(presets[preset].get(section, {}))
        values.update(config_dict.get(section) or {})
        return values

    def create_render_config(self, config_dict: Dict[str, Any],
                             preset: Optional[str] = None) -> RenderConfig:
        config = RenderConfig.from_dict(self._section(config_dict, 'render', preset))
        config.validate()
        return config

    def create_animation_config(self, config_dict: Dict[str, Any],
                                preset: Optional[str] = None) -> AnimationConfig:
        config = AnimationConfig.from_dict(self._section(config_dict, 'animation', preset))
        config.validate()
        return config

    def validate_config(self, config_dict: Dict[str, Any]) -> List[str]:
        """
        Check every section and preset of a configuration dictionary.

        Returns:
            Human-readable error messages; empty when the configuration is valid
        """
        errors = []

        for section, config_class in self.SECTIONS.items():
            try:
                config = config_class.from_dict(config_dict.get(section) or {})
            except (TypeError, ValueError) as e:
                errors.append(f"{section}: {e}")
                continue
            errors.extend(f"{section}: {message}" for message in config.errors())

        for name, preset in config_dict.get('presets', {}).items():
            for section, config_class in self.SECTIONS.items():
                try:
                    config = config_class.from_dict(preset.get(section, {}))
                except (TypeError, ValueError) as e:
                    errors.append(f"preset '{name}' {section}: {e}")
                    continue
                errors.extend(f"preset '{name}' {section}: {message}"
                              for message in config.errors())

        return errors

    def export_config_template(self, path: Union[str, Path]) -> Path:
        """Write the default configuration as YAML (or JSON for .json paths)."""
        path = Path(path)
        data = {
            'render': RenderConfig().to_dict(),
            'animation': AnimationConfig().to_dict(),
        }

        if path.suffix.lower() == '.json':
            path.write_text(json.dumps(data, indent=2), encoding='utf-8')
        else:
            header = "# fractal-animator configuration\n# Any key left out keeps its default.\n"
            path.write_text(header + yaml.safe_dump(data, sort_keys=False), encoding='utf-8')

        logger.info(f"Wrote configuration template: {path}")
        return path


def load_config_from_args(config_file: Optional[str] = None,
                          preset: Optional[str] = None) -> Tuple[RenderConfig, AnimationConfig]:
    """
    Build both configs from an optional file and an optional preset name.

    Returns:
        Tuple of (render_config, animation_config)
    """
    manager = ConfigManager()
    config_dict = manager.load_config(config_file)
    return (manager.create_render_config(config_dict, preset),
            manager.create_animation_config(config_dict, preset))

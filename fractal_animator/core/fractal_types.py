"""
Fractal type definitions and parameter management.

This module defines the Mandelbrot and Julia sets as configurable classes
sharing one interface, so renderers can treat them interchangeably.
"""

import numpy as np
from typing import Dict, Any, Optional
from abc import ABC, abstractmethod
from dataclasses import dataclass
import logging

from .math_functions import FractalIterator, IterationResult, ComplexPlane

logger = logging.getLogger(__name__)

MANDELBROT_SEEDS = ('zero', 'cell')


@dataclass
class FractalParameters:
    """Base class for fractal parameters with validation."""

    def validate(self) -> None:
        """Validate parameter values."""
        pass

    def to_dict(self) -> Dict[str, Any]:
        """Convert parameters to dictionary."""
        return {k: v for k, v in self.__dict__.items() if not k.startswith('_')}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FractalParameters':
        """Create parameters from dictionary."""
        return cls(**data)


class FractalType(ABC):
    """Abstract base class for fractal types."""

    def __init__(self, name: str, parameters: FractalParameters):
        """
        Initialize fractal type.

        Args:
            name: Human-readable name for the fractal
            parameters: Fractal-specific parameters
        """
        self.name = name
        self.parameters = parameters
        self.parameters.validate()

    @abstractmethod
    def compute(self, plane: ComplexPlane, iterator: FractalIterator) -> IterationResult:
        """
        Compute escape-time iterations for the given complex plane.

        Args:
            plane: Complex plane definition
            iterator: Fractal iterator instance

        Returns:
            IterationResult containing iteration data
        """
        pass

    @property
    def title(self) -> str:
        """Short plot title."""
        return self.name

    def get_description(self) -> str:
        """Get a description of this fractal type."""
        return f"{self.name} fractal"


def _check_numeric(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be numeric")


def format_complex(value: complex, digits: int = 4) -> str:
    """Format a complex number with a fixed number of significant digits, e.g. -0.8+0.156i."""
    value = complex(value)
    return f"{value.real:.{digits}g}{value.imag:+.{digits}g}i"


@dataclass
class MandelbrotParameters(FractalParameters):
    """Parameters for Mandelbrot set generation."""

    z0_real: float = 0.0
    z0_imag: float = 0.0
    # 'zero': orbits start at z0; 'cell': orbits start at c itself
    seed: str = 'zero'

    def validate(self) -> None:
        """Validate Mandelbrot parameters."""
        _check_numeric("z0_real", self.z0_real)
        _check_numeric("z0_imag", self.z0_imag)
        if self.seed not in MANDELBROT_SEEDS:
            raise ValueError(f"seed must be one of: {', '.join(MANDELBROT_SEEDS)}")
        if self.seed == 'cell' and self.z0 != 0:
            raise ValueError("z0 only applies to the 'zero' seed")

    @property
    def z0(self) -> complex:
        """Orbit starting point as a complex number."""
        return complex(self.z0_real, self.z0_imag)


def mandelbrot_start(c: np.ndarray, seed: str = 'zero', z0: complex = 0j) -> Optional[np.ndarray]:
    """
    Initial orbit values for a Mandelbrot grid.

    Returns None for the plain zero start, which lets the iterator allocate
    its own zeros. With the 'cell' seed every orbit starts at its own c, so
    each count is one lower than with the zero start.
    """
    if seed == 'cell':
        return c
    if seed != 'zero':
        raise ValueError(f"seed must be one of: {', '.join(MANDELBROT_SEEDS)}")
    if z0 != 0:
        return np.full(c.shape, z0, dtype=np.complex128)
    return None


class MandelbrotSet(FractalType):
    """Mandelbrot set: c is the grid cell, z starts at z0 (or at c)."""

    def __init__(self, parameters: Optional[MandelbrotParameters] = None):
        if parameters is None:
            parameters = MandelbrotParameters()
        super().__init__("Mandelbrot", parameters)

    def compute(self, plane: ComplexPlane, iterator: FractalIterator) -> IterationResult:
        """Compute Mandelbrot set iterations."""
        c = plane.create_complex_array()
        z0 = mandelbrot_start(c, self.parameters.seed, self.parameters.z0)
        return iterator.mandelbrot_iteration(c, z0)

    def get_description(self) -> str:
        """Get description of Mandelbrot set."""
        start = 'c' if self.parameters.seed == 'cell' else format_complex(self.parameters.z0)
        return ("Mandelbrot set: z_{n+1} = z_n^2 + c, where c is the complex coordinate "
                "and z_0 = " + start)


@dataclass
class JuliaParameters(FractalParameters):
    """Parameters for Julia set generation."""

    c_real: float = -0.8
    c_imag: float = 0.156

    def validate(self) -> None:
        """Validate Julia parameters."""
        _check_numeric("c_real", self.c_real)
        _check_numeric("c_imag", self.c_imag)

    @property
    def c(self) -> complex:
        """Get the Julia constant as a complex number."""
        return complex(self.c_real, self.c_imag)

    @classmethod
    def from_complex(cls, k: complex) -> 'JuliaParameters':
        k = complex(k)
        return cls(c_real=k.real, c_imag=k.imag)


class JuliaSet(FractalType):
    """Julia set: the grid cell is z_0, the constant k is fixed."""

    def __init__(self, parameters: Optional[JuliaParameters] = None):
        if parameters is None:
            parameters = JuliaParameters()
        super().__init__("Julia", parameters)

    def compute(self, plane: ComplexPlane, iterator: FractalIterator) -> IterationResult:
        """Compute Julia set iterations."""
        z = plane.create_complex_array()
        return iterator.julia_iteration(z, self.parameters.c)

    @property
    def title(self) -> str:
        return f"Julia, k = {format_complex(self.parameters.c)}"

    def get_description(self) -> str:
        """Get description of Julia set."""
        return (f"Julia set: z_{{n+1}} = z_n^2 + k, where k = {format_complex(self.parameters.c)} "
                "and z_0 is the complex coordinate")


class FractalRegistry:
    """Registry for managing available fractal types."""

    _fractals: Dict[str, type] = {
        'mandelbrot': MandelbrotSet,
        'julia': JuliaSet,
    }

    _parameters: Dict[str, type] = {
        'mandelbrot': MandelbrotParameters,
        'julia': JuliaParameters,
    }

    @classmethod
    def get(cls, name: str) -> type:
        """
        Get a fractal class by name.

        Args:
            name: Fractal identifier

        Returns:
            Fractal class
        """
        fractal_class = cls._fractals.get(name.lower())
        if fractal_class is None:
            available = ', '.join(cls._fractals.keys())
            raise ValueError(f"Unknown fractal type '{name}'. Available: {available}")
        return fractal_class

    @classmethod
    def list_fractals(cls) -> Dict[str, str]:
        """Get a dictionary of available fractals and their descriptions."""
        return {name: fractal_class().get_description()
                for name, fractal_class in cls._fractals.items()}

    @classmethod
    def create_fractal(cls, name: str, **kwargs) -> FractalType:
        """
        Create a fractal instance with the given parameters.

        Args:
            name: Fractal type name
            **kwargs: Parameters for the fractal

        Returns:
            Configured fractal instance
        """
        fractal_class = cls.get(name)
        if not kwargs:
            return fractal_class()

        param_class = cls._parameters[name.lower()]
        return fractal_class(param_class(**kwargs))


# Predefined interesting Julia set constants
JULIA_PRESETS = {
    'lightning': JuliaParameters(c_real=-0.8, c_imag=0.156),
    'dragon': JuliaParameters(c_real=-0.75, c_imag=0.1),
    'spiral': JuliaParameters(c_real=-0.4, c_imag=0.6),
    'dendrite': JuliaParameters(c_real=-0.235125, c_imag=0.827215),
    'rabbit': JuliaParameters(c_real=-0.123, c_imag=0.745),
    'airplane': JuliaParameters(c_real=-1.25, c_imag=0.0),
    'san_marco': JuliaParameters(c_real=-0.75, c_imag=0.0),
    'siegel_disk': JuliaParameters(c_real=-0.391, c_imag=-0.587),
}


def parse_julia_constant(value: str) -> JuliaParameters:
    """
    Parse a Julia constant given as a preset name or as "real,imag".

    Raises:
        ValueError: If the value is neither
    """
    if value in JULIA_PRESETS:
        return JULIA_PRESETS[value]

    parts = [part.strip() for part in value.split(',')]
    if len(parts) != 2:
        raise ValueError(f"Invalid Julia constant '{value}'. Use 'real,imag' or a preset name")
    return JuliaParameters(c_real=float(parts[0]), c_imag=float(parts[1]))

"""
Command-line interface for fractal rendering and animation.

This module exposes static Mandelbrot/Julia renders, the rotating Julia
animation, and helpers for working with configuration files.
"""

import click
import sys
from pathlib import Path
from typing import Tuple
import logging
import time

from .. import __version__
from ..api import FractalRenderer
from ..core.fractal_types import (FractalRegistry, JULIA_PRESETS, MANDELBROT_SEEDS,
                                  format_complex, parse_julia_constant)
from ..io.config import ConfigManager, load_config_from_args, ENCODERS
from ..rendering.coloring import ColoringEngine
from ..tools.animation import AnimationSequencer, GifEncoder

logger = logging.getLogger(__name__)


def _fail(ctx, error: Exception) -> None:
    click.echo(f"Error: {error}", err=True)
    if ctx.obj.get('verbose'):
        import traceback
        traceback.print_exc()
    sys.exit(1)


def _parse_floats(value: str, count: int, label: str, example: str) -> Tuple[float, ...]:
    try:
        parts = tuple(float(x.strip()) for x in value.split(','))
    except ValueError:
        raise click.BadParameter(f"Invalid {label} format. Use '{example}'")
    if len(parts) != count:
        raise click.BadParameter(f"Invalid {label} format. Use '{example}'")
    return parts


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--config', type=click.Path(exists=True), help='Configuration file path')
@click.option('--preset', help='Configuration preset to use')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress most output')
@click.pass_context
def main(ctx, version, config, preset, verbose, quiet):
    """
    Fractal Animator - Mandelbrot and Julia set images and animations.

    Render single escape-time images, or an animated GIF in which a Julia
    set's parameter circles a point while the Mandelbrot set stays fixed.
    """
    if quiet:
        logging.basicConfig(level=logging.ERROR)
    elif verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    else:
        logging.basicConfig(level=logging.INFO,
                            format='%(levelname)s: %(message)s')

    if version:
        click.echo(f"Fractal Animator v{__version__}")
        click.echo(f"Python: {sys.version}")
        for backend in ENCODERS:
            status = 'Available' if GifEncoder(backend).available() else 'Not available'
            click.echo(f"GIF encoder {backend}: {status}")

        if ctx.invoked_subcommand is None:
            sys.exit(0)

    ctx.ensure_object(dict)
    ctx.obj['config_file'] = config
    ctx.obj['preset'] = preset
    ctx.obj['verbose'] = verbose


@main.command()
@click.argument('fractal_type', type=click.Choice(['mandelbrot', 'julia']))
@click.argument('output', type=click.Path())
@click.option('--width', '-w', type=int, help='Samples along the real axis')
@click.option('--height', '-h', type=int, help='Samples along the imaginary axis')
@click.option('--bounds', type=str, help='Complex plane bounds: "xmin,xmax,ymin,ymax"')
@click.option('--max-iter', type=int, help='Maximum iterations')
@click.option('--palette', help='Color palette name')
@click.option('--palette-size', type=int, help='Number of palette colors')
@click.option('--julia-c', type=str, help='Julia constant (real,imag) or preset name')
@click.option('--seed', type=click.Choice(list(MANDELBROT_SEEDS)),
              help="Mandelbrot orbit start: 'zero' or the cell value 'cell'")
@click.option('--raw', is_flag=True,
              help='Write one pixel per sample instead of a labelled plot')
@click.pass_context
def render(ctx, fractal_type, output, width, height, bounds, max_iter, palette,
           palette_size, julia_c, seed, raw):
    """
    Render a single fractal image.

    FRACTAL_TYPE: Type of fractal (mandelbrot, julia)
    OUTPUT: Output image file path
    """
    try:
        render_config, _ = load_config_from_args(ctx.obj.get('config_file'),
                                                 ctx.obj.get('preset'))

        overrides = {
            'width': width,
            'height': height,
            'max_iterations': max_iter,
            'color_palette': palette,
            'palette_size': palette_size,
            'mandelbrot_seed': seed,
            'raw': raw or None,
        }
        if bounds:
            overrides['bounds'] = _parse_floats(bounds, 4, 'bounds', 'xmin,xmax,ymin,ymax')

        if julia_c and fractal_type != 'julia':
            raise click.BadParameter("--julia-c only applies to the julia fractal")
        if seed and fractal_type != 'mandelbrot':
            raise click.BadParameter("--seed only applies to the mandelbrot fractal")

        fractal_params = {}
        if julia_c:
            fractal_params = parse_julia_constant(julia_c).to_dict()
            if julia_c in JULIA_PRESETS:
                click.echo(f"Using Julia preset: {julia_c}")

        renderer = FractalRenderer(render_config)
        renderer.update_config(**{k: v for k, v in overrides.items() if v is not None})
        fractal = renderer.create_fractal(fractal_type, **fractal_params)

        click.echo(f"Rendering {fractal_type} fractal...")
        start_time = time.time()
        renderer.render(fractal, Path(output))

        click.echo(f"Render complete: {time.time() - start_time:.2f}s")
        click.echo(f"Saved: {output}")

    except Exception as e:
        _fail(ctx, e)


@main.command()
@click.argument('output', type=click.Path(), required=False)
@click.option('--frames', type=int, help='Number of animation frames')
@click.option('--fps', type=float, help='Frames per second of the GIF')
@click.option('--resolution', type=int, help='Grid samples per axis')
@click.option('--center', type=str, help='Center of the Julia parameter circle "real,imag"')
@click.option('--radius', type=float, help='Radius of the Julia parameter circle')
@click.option('--mandelbrot-iter', type=int, help='Maximum iterations for the Mandelbrot panel')
@click.option('--julia-iter', type=int, help='Maximum iterations for the Julia panel')
@click.option('--panel-px', type=int, help='Pixel size of each square panel')
@click.option('--palette', help='Color palette name')
@click.option('--frame-dir', type=click.Path(), help='Directory for the PNG frames')
@click.option('--keep-frames', is_flag=True, help='Keep PNG frames after encoding')
@click.option('--encoder', type=click.Choice(list(ENCODERS)), help='GIF encoder to use')
@click.option('--seed', type=click.Choice(list(MANDELBROT_SEEDS)),
              help="Mandelbrot orbit start: 'zero' or the cell value 'cell'")
@click.pass_context
def animate(ctx, output, frames, fps, resolution, center, radius, mandelbrot_iter,
            julia_iter, panel_px, palette, frame_dir, keep_frames, encoder, seed):
    """
    Animate a Julia set next to the Mandelbrot set and save it as a GIF.

    OUTPUT: GIF file path (default: julia_animation.gif)
    """
    try:
        _, animation_config = load_config_from_args(ctx.obj.get('config_file'),
                                                    ctx.obj.get('preset'))

        overrides = {
            'output': output,
            'frames': frames,
            'fps': fps,
            'resolution': resolution,
            'k_radius': radius,
            'mandelbrot_iterations': mandelbrot_iter,
            'julia_iterations': julia_iter,
            'panel_px': panel_px,
            'color_palette': palette,
            'frame_dir': frame_dir,
            'keep_frames': keep_frames or None,
            'encoder': encoder,
            'mandelbrot_seed': seed,
        }
        if center:
            overrides['k_center_real'], overrides['k_center_imag'] = \
                _parse_floats(center, 2, 'center', 'real,imag')

        for key, value in overrides.items():
            if value is not None:
                setattr(animation_config, key, value)

        sequencer = AnimationSequencer(animation_config)

        click.echo(f"Creating {animation_config.frames} frame animation...")
        click.echo(f"k circles {format_complex(animation_config.k_center)} "
                   f"at radius {animation_config.k_radius}")

        def progress_callback(frame_num, total_frames, k):
            if ctx.obj.get('verbose'):
                click.echo(f"Frame {frame_num}/{total_frames}: k = {format_complex(k)}")

        start_time = time.time()
        gif_path = sequencer.run(progress_callback)

        click.echo(f"Animation complete: {time.time() - start_time:.2f}s")
        click.echo(f"GIF saved to: {gif_path}")

    except Exception as e:
        _fail(ctx, e)


@main.command()
@click.option('--output', '-o', type=click.Path(), default='config_template.yaml',
              help='Output file path (.yaml or .json)')
@click.pass_context
def init_config(ctx, output):
    """
    Create a configuration template file.
    """
    try:
        output_path = Path(output)
        if not output_path.suffix:
            output_path = output_path.with_suffix('.yaml')

        ConfigManager().export_config_template(output_path)
        click.echo(f"Configuration template created: {output_path}")

    except Exception as e:
        _fail(ctx, e)


@main.command()
@click.pass_context
def list_presets(ctx):
    """List available configuration presets."""
    try:
        manager = ConfigManager()
        config_dict = manager.load_config(ctx.obj.get('config_file'))
        presets = manager.list_presets(config_dict)

        click.echo("Available presets:")
        for preset in presets:
            click.echo(f"  {preset}")

            if ctx.obj.get('verbose'):
                preset_config = config_dict['presets'][preset]
                if '_description' in preset_config:
                    click.echo(f"    Description: {preset_config['_description']}")
                for section in ('render', 'animation'):
                    for key, value in preset_config.get(section, {}).items():
                        click.echo(f"    {section}.{key}: {value}")

    except Exception as e:
        _fail(ctx, e)


@main.command()
@click.pass_context
def list_fractals(ctx):
    """List available fractal types and Julia presets."""
    try:
        click.echo("Available fractal types:")
        for name, description in FractalRegistry.list_fractals().items():
            click.echo(f"  {name}")
            if ctx.obj.get('verbose'):
                click.echo(f"    {description}")

        click.echo("\nJulia set presets:")
        for name, params in JULIA_PRESETS.items():
            click.echo(f"  {name}: k = {format_complex(params.c)}")

    except Exception as e:
        _fail(ctx, e)


@main.command()
@click.pass_context
def list_palettes(ctx):
    """List available color palettes."""
    try:
        click.echo("Available color palettes:")
        for palette in ColoringEngine().list_palettes():
            click.echo(f"  {palette}")

    except Exception as e:
        _fail(ctx, e)


@main.command()
@click.argument('config_file', type=click.Path(exists=True))
@click.pass_context
def validate_config(ctx, config_file):
    """Validate a configuration file."""
    try:
        manager = ConfigManager()
        errors = manager.validate_config(manager.load_config(config_file))

    except Exception as e:
        click.echo(f"Error validating config: {e}", err=True)
        if ctx.obj.get('verbose'):
            import traceback
            traceback.print_exc()
        sys.exit(1)

    if errors:
        click.echo(f"Configuration file has errors: {config_file}")
        for error in errors:
            click.echo(f"  Error: {error}")
        sys.exit(1)

    click.echo(f"Configuration file is valid: {config_file}")


if __name__ == '__main__':
    main()

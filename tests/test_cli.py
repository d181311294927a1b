"""
Tests for the command-line interface.
"""
import pytest
import yaml
from click.testing import CliRunner
from PIL import Image

from fractal_animator.cli.main import main
from fractal_animator.rendering.image_output import ImageExporter
from fractal_animator.tools import animation


@pytest.fixture
def runner():
    return CliRunner()


def test_version(runner):
    result = runner.invoke(main, ['--version'])
    assert result.exit_code == 0
    assert 'Fractal Animator v' in result.output


def test_render_raw(runner, tmp_path):
    output = tmp_path / 'mandel.png'
    result = runner.invoke(main, ['render', 'mandelbrot', str(output),
                                  '-w', '40', '-h', '30', '--max-iter', '20', '--raw'])
    assert result.exit_code == 0, result.output
    with Image.open(output) as img:
        assert img.size == (40, 30)


def test_render_julia_plot(runner, tmp_path):
    output = tmp_path / 'julia.png'
    result = runner.invoke(main, ['--preset', 'preview', 'render', 'julia', str(output),
                                  '--julia-c', 'rabbit', '-w', '30', '-h', '30'])
    assert result.exit_code == 0, result.output
    assert 'Using Julia preset: rabbit' in result.output
    assert output.exists()


def test_render_bad_bounds(runner, tmp_path):
    result = runner.invoke(main, ['render', 'mandelbrot', str(tmp_path / 'x.png'),
                                  '--bounds', '1,2,3'])
    assert result.exit_code == 1
    assert 'Error:' in result.output


def test_render_bad_julia_constant(runner, tmp_path):
    result = runner.invoke(main, ['render', 'julia', str(tmp_path / 'x.png'),
                                  '--julia-c', 'not-a-preset'])
    assert result.exit_code == 1


def test_render_rejects_julia_constant_for_mandelbrot(runner, tmp_path):
    output = tmp_path / 'x.png'
    result = runner.invoke(main, ['render', 'mandelbrot', str(output), '--julia-c', 'rabbit'])
    assert result.exit_code == 1
    assert '--julia-c only applies to the julia fractal' in result.output
    assert not output.exists()


def test_render_rejects_seed_for_julia(runner, tmp_path):
    result = runner.invoke(main, ['render', 'julia', str(tmp_path / 'x.png'), '--seed', 'cell'])
    assert result.exit_code == 1


@pytest.mark.parametrize('options,seed', [
    ([], 'zero'),
    (['--seed', 'cell'], 'cell'),
])
def test_render_records_seed(runner, tmp_path, options, seed):
    output = tmp_path / 'mandel.png'
    result = runner.invoke(main, ['render', 'mandelbrot', str(output), '-w', '12', '-h', '12',
                                  '--max-iter', '10', '--raw'] + options)
    assert result.exit_code == 0, result.output

    metadata = ImageExporter().extract_metadata_from_image(output)
    assert metadata.fractal_parameters['seed'] == seed


def test_zoom_preset_seeds_at_cell(runner, tmp_path):
    output = tmp_path / 'zoom.png'
    result = runner.invoke(main, ['--preset', 'zoom', 'render', 'mandelbrot', str(output),
                                  '-w', '12', '-h', '12', '--raw'])
    assert result.exit_code == 0, result.output
    assert ImageExporter().extract_metadata_from_image(output).fractal_parameters['seed'] == 'cell'


def test_animate(runner, tmp_path):
    output = tmp_path / 'anim.gif'
    result = runner.invoke(main, ['animate', str(output), '--frames', '3',
                                  '--resolution', '12', '--panel-px', '50',
                                  '--mandelbrot-iter', '8', '--julia-iter', '8',
                                  '--center', '-0.75,0.1', '--radius', '0.2',
                                  '--encoder', 'pillow'])
    assert result.exit_code == 0, result.output
    assert 'k circles -0.75+0.1i at radius 0.2' in result.output
    with Image.open(output) as gif:
        assert gif.n_frames == 3
        assert gif.size == (100, 50)


def test_animate_keeps_frames(runner, tmp_path):
    frame_dir = tmp_path / 'frames'
    result = runner.invoke(main, ['animate', str(tmp_path / 'anim.gif'), '--frames', '2',
                                  '--resolution', '10', '--panel-px', '40',
                                  '--frame-dir', str(frame_dir), '--keep-frames',
                                  '--encoder', 'pillow'])
    assert result.exit_code == 0, result.output
    assert sorted(p.name for p in frame_dir.iterdir()) == ['frame_001.png', 'frame_002.png']


def test_animate_invalid_frames(runner, tmp_path):
    result = runner.invoke(main, ['animate', str(tmp_path / 'anim.gif'), '--frames', '0'])
    assert result.exit_code == 1
    assert 'frames must be positive' in result.output


def test_animate_missing_encoder(runner, tmp_path, monkeypatch):
    monkeypatch.setattr(animation, 'IMAGEIO_AVAILABLE', False)
    result = runner.invoke(main, ['animate', str(tmp_path / 'anim.gif'), '--frames', '2',
                                  '--resolution', '10', '--encoder', 'imageio'])
    assert result.exit_code == 1
    assert 'pip install imageio' in result.output


def test_config_file_and_validation(runner, tmp_path):
    template = tmp_path / 'settings.yaml'
    result = runner.invoke(main, ['init-config', '-o', str(template)])
    assert result.exit_code == 0, result.output

    result = runner.invoke(main, ['validate-config', str(template)])
    assert result.exit_code == 0
    assert 'is valid' in result.output

    broken = tmp_path / 'broken.yaml'
    broken.write_text(yaml.safe_dump({'animation': {'frames': 0}}))
    result = runner.invoke(main, ['validate-config', str(broken)])
    assert result.exit_code == 1
    assert 'frames must be positive' in result.output


@pytest.mark.parametrize('command,expected', [
    ('list-palettes', 'inferno'),
    ('list-fractals', 'lightning: k = -0.8+0.156i'),
    ('list-presets', 'zoom'),
])
def test_listings(runner, command, expected):
    result = runner.invoke(main, [command])
    assert result.exit_code == 0
    assert expected in result.output

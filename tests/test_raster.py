"""Tests for the raster renderer and icon compositing."""

import pytest

from qrwidget import IconSpec, PillowIconLoader, RenderConfig, layout, render_raster
from qrwidget.errors import IconWarning, RenderError


def _sample(handle, matrix):
    """Dark/light state read back from the centre pixel of every module."""
    pixels = handle.pixels()
    lay = handle.layout
    half = lay.module_px // 2
    grid = []
    for r in range(matrix.side):
        row = []
        for c in range(matrix.side):
            x, y = lay.module_origin(r, c)
            row.append(bool(pixels[y + half, x + half][0] < 128))
        grid.append(row)
    return grid


def _expected(matrix):
    return [list(row) for row in matrix.rows]


def test_grid_round_trips(url_matrix, config):
    handle = render_raster(url_matrix, layout(url_matrix, config), config)
    assert handle.is_ready
    assert handle.size == 160
    assert handle.image().size == (160, 160)
    assert _sample(handle, url_matrix) == _expected(url_matrix)
    assert handle.warnings == []


def test_transparent_background_margin(url_matrix):
    config = RenderConfig(size_px=160)
    handle = render_raster(url_matrix, layout(url_matrix, config), config)
    assert tuple(handle.pixels()[0, 0]) == (0, 0, 0, 0)
    assert tuple(handle.pixels()[7, 7]) == (0, 0, 0, 255)


def test_png_and_data_url(url_matrix, config):
    handle = render_raster(url_matrix, layout(url_matrix, config), config)
    assert handle.to_png().startswith(b'\x89PNG\r\n\x1a\n')
    assert handle.data_url().startswith('data:image/png;base64,')


def test_icon_is_composited(url_matrix, config, red_icon_url, inline_executor):
    lay = layout(url_matrix, config, IconSpec(src=red_icon_url))
    handle = render_raster(url_matrix, lay, config, executor=inline_executor)
    assert handle.wait(1)
    assert handle.icon_applied
    assert handle.warnings == []
    assert tuple(handle.pixels()[80, 80]) == (255, 0, 0, 255)
    # Outside the icon the grid is untouched
    top_left = _sample(handle, url_matrix)[0][:7]
    assert top_left == [True] * 7


def test_icon_opacity(url_matrix, config, red_icon_url, inline_executor):
    lay = layout(url_matrix, config, IconSpec(src=red_icon_url, opacity=0.5))
    handle = render_raster(url_matrix, lay, config, executor=inline_executor)
    r, g, b, a = handle.pixels()[80, 80]
    assert r == 255 and a == 255
    assert 120 <= g <= 135 and 120 <= b <= 135


def test_failed_icon_keeps_full_grid(url_matrix, config, failing_loader, inline_executor):
    lay = layout(url_matrix, config, IconSpec(src="https://example.org/missing.png"))
    handle = render_raster(url_matrix, lay, config, loader=failing_loader, executor=inline_executor)
    assert handle.wait(1)
    assert not handle.icon_applied
    assert _sample(handle, url_matrix) == _expected(url_matrix)
    assert len(handle.warnings) == 1
    warning = handle.warnings[0]
    assert isinstance(warning, IconWarning)
    assert warning.code == "icon_load_failed"
    assert warning.src == "https://example.org/missing.png"


def test_grid_is_available_before_icon_loads(url_matrix, config, red_icon_url, deferred_executor):
    lay = layout(url_matrix, config, IconSpec(src=red_icon_url, excavate=False))
    handle = render_raster(url_matrix, lay, config, executor=deferred_executor)
    assert not handle.is_ready
    assert not handle.wait(0)
    assert _sample(handle, url_matrix) == _expected(url_matrix)

    seen = []
    handle.add_done_callback(seen.append)
    deferred_executor.run_all()
    assert seen == [handle]
    assert handle.icon_applied


def test_stale_icon_is_discarded(url_matrix, config, red_icon_url, deferred_executor):
    lay = layout(url_matrix, config, IconSpec(src=red_icon_url))
    handle = render_raster(url_matrix, lay, config, executor=deferred_executor, is_current=lambda: False)
    deferred_executor.run_all()
    assert handle.is_ready
    assert handle.stale
    assert not handle.icon_applied
    assert handle.warnings == []
    assert tuple(handle.pixels()[80, 80]) != (255, 0, 0, 255)
    # Only the icon is dropped, the excavated modules come back
    assert _sample(handle, url_matrix) == _expected(url_matrix)


def test_too_small_surface(url_matrix):
    config = RenderConfig(size_px=20)
    with pytest.raises(RenderError):
        render_raster(url_matrix, layout(url_matrix, config), config)


class TestPillowIconLoader:

    def test_data_url(self, red_icon_url):
        image = PillowIconLoader().load(red_icon_url)
        assert image.mode == 'RGBA'
        assert image.size == (40, 40)

    def test_raw_bytes(self, red_png):
        assert PillowIconLoader().load(red_png).size == (40, 40)

    def test_file_path(self, tmp_path, red_png):
        path = tmp_path / "logo.png"
        path.write_bytes(red_png)
        assert PillowIconLoader().load(str(path)).getpixel((0, 0)) == (255, 0, 0, 255)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            PillowIconLoader().load(str(tmp_path / "nope.png"))

    def test_malformed_data_url(self):
        with pytest.raises(ValueError):
            PillowIconLoader().load("data:image/png;base64")

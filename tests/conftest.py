"""pytest configuration and fixtures for qrwidget tests."""

import base64
from concurrent.futures import Executor, Future
from io import BytesIO

import pytest
from PIL import Image

from qrwidget import ErrorCorrectionLevel, QRCodeGenerator, RenderConfig, encode


class InlineExecutor(Executor):
    """Runs submitted work immediately in the calling thread."""

    def submit(self, fn, *args, **kwargs):
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as ex:
            future.set_exception(ex)
        return future


class DeferredExecutor(Executor):
    """Queues submitted work until run_all() is called."""

    def __init__(self):
        self.pending = []

    def submit(self, fn, *args, **kwargs):
        future = Future()
        self.pending.append((future, fn, args, kwargs))
        return future

    def run_all(self):
        pending, self.pending = self.pending, []
        for future, fn, args, kwargs in pending:
            try:
                future.set_result(fn(*args, **kwargs))
            except Exception as ex:
                future.set_exception(ex)


class FailingLoader:
    """Icon loader that always fails, like a broken image URL."""

    def __init__(self):
        self.calls = []

    def load(self, src):
        self.calls.append(src)
        raise OSError(f"cannot load {src}")


def _png_bytes(color=(255, 0, 0, 255), size=(40, 40)) -> bytes:
    buf = BytesIO()
    Image.new('RGBA', size, color).save(buf, format='PNG')
    return buf.getvalue()


@pytest.fixture
def red_png():
    return _png_bytes()


@pytest.fixture
def red_icon_url(red_png):
    """Opaque red 40x40 PNG as a data URL."""
    return "data:image/png;base64," + base64.b64encode(red_png).decode('ascii')


@pytest.fixture
def inline_executor():
    return InlineExecutor()


@pytest.fixture
def deferred_executor():
    return DeferredExecutor()


@pytest.fixture
def failing_loader():
    return FailingLoader()


@pytest.fixture
def url_matrix():
    """'https://example.org' at level M: version 2, 25x25 modules."""
    return encode("https://example.org", ErrorCorrectionLevel.M)


@pytest.fixture
def config():
    return RenderConfig(size_px=160, foreground_color="#000000", background_color="#ffffff")


@pytest.fixture
def qr_generator(inline_executor):
    return QRCodeGenerator(executor=inline_executor)


@pytest.fixture
def client():
    """Flask test client for the host application."""
    from app import app as flask_app
    flask_app.config['TESTING'] = True
    flask_app.config['QR_ICON_TIMEOUT'] = 5.0
    with flask_app.test_client() as test_client:
        yield test_client

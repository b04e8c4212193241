"""
Pytest fixtures for album tests.
"""

import io
import os
import uuid
from typing import Dict, Optional
from urllib.parse import urlencode
from wsgiref.headers import Headers
from wsgiref.util import setup_testing_defaults

import pytest
from PIL import Image


def make_image_bytes(size=(100, 100), color='red', fmt='JPEG', mode='RGB') -> bytes:
    img = Image.new(mode, size, color=color)
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


class WsgiResponse:
    def __init__(self, status: str, headers, body: bytes):
        self.status_code = int(status.split()[0])
        # Case-insensitive, as header names are on the wire.
        self.headers = Headers(list(headers))
        self.body = body

    def json(self):
        import json
        return json.loads(self.body.decode('utf-8'))


class WsgiClient:
    """Calls a WSGI application in-process."""

    def __init__(self, app):
        self.app = app

    def request(
        self,
        method: str,
        path: str,
        query: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
        body: bytes = b'',
        content_type: Optional[str] = None
    ) -> WsgiResponse:
        environ = {}
        setup_testing_defaults(environ)
        environ['REQUEST_METHOD'] = method
        environ['PATH_INFO'] = path
        environ['QUERY_STRING'] = urlencode(query or {})
        environ['wsgi.input'] = io.BytesIO(body)
        environ['CONTENT_LENGTH'] = str(len(body))
        if content_type:
            environ['CONTENT_TYPE'] = content_type
        for name, value in (headers or {}).items():
            environ['HTTP_' + name.upper().replace('-', '_')] = value

        captured = {}

        def start_response(status, response_headers, exc_info=None):
            captured['status'] = status
            captured['headers'] = response_headers

        result = self.app(environ, start_response)
        try:
            body_out = b''.join(result)
        finally:
            if hasattr(result, 'close'):
                result.close()
        return WsgiResponse(captured['status'], captured['headers'], body_out)

    def get(self, path, query=None, headers=None) -> WsgiResponse:
        return self.request('GET', path, query=query, headers=headers)

    def post_file(self, path, field, filename, data, part_content_type=None) -> WsgiResponse:
        boundary = uuid.uuid4().hex
        part_headers = f'Content-Disposition: form-data; name="{field}"; filename="{filename}"\r\n'
        if part_content_type:
            part_headers += f'Content-Type: {part_content_type}\r\n'
        body = (
            f'--{boundary}\r\n{part_headers}\r\n'.encode('utf-8')
            + data
            + f'\r\n--{boundary}--\r\n'.encode('utf-8')
        )
        return self.request(
            'POST', path, body=body,
            content_type=f'multipart/form-data; boundary={boundary}',
        )


@pytest.fixture
def logger():
    """Fixture providing a logger."""
    import logging
    return logging.getLogger('test')


@pytest.fixture
def image_root(tmp_path):
    """Fixture providing an empty image root."""
    root = tmp_path / 'photos'
    root.mkdir()
    return root


@pytest.fixture
def write_image(image_root):
    """Fixture returning a helper that writes an image into the root."""
    def _write(name, size=(100, 100), color='red', fmt='JPEG', mode='RGB'):
        path = image_root / name
        path.write_bytes(make_image_bytes(size, color, fmt, mode))
        return path
    return _write


@pytest.fixture
def config(image_root):
    """Fixture providing a configuration rooted at image_root."""
    from album.config import AlbumConfig

    cfg = AlbumConfig(image_root=str(image_root), placeholder_workers=2)
    cfg.ensure_dirs()
    return cfg


@pytest.fixture
def store(config, logger):
    """Fixture providing the cache store for config."""
    from album.cache_store import DiskCacheStore
    return DiskCacheStore(config.cache_dir, logger=logger)


@pytest.fixture
def transformer(logger):
    from album.transform import ImageTransformer
    return ImageTransformer(logger=logger)


@pytest.fixture
def generator(config, store, transformer, logger):
    """Fixture providing a generator over the real Pillow transformer."""
    from album.generator import DerivedImageGenerator
    return DerivedImageGenerator(
        image_root=config.image_root,
        store=store,
        transformer=transformer,
        logger=logger,
    )


@pytest.fixture
def make_client(generator, logger):
    """Fixture returning a factory of in-process clients for a configuration."""
    from album.web import make_app
    apps = []

    def _make(cfg):
        app = make_app(cfg, generator=generator, logger=logger)
        apps.append(app)
        return WsgiClient(app)
    yield _make

    for app in apps:
        app.close()


@pytest.fixture
def client(config, make_client):
    """Fixture providing an in-process client for the Bottle app."""
    return make_client(config)


def bump_mtime(path, seconds=10):
    """Move a file's mtime forward so its cache keys change."""
    st = os.stat(path)
    new_ns = st.st_mtime_ns + seconds * 1_000_000_000
    os.utime(path, ns=(st.st_atime_ns, new_ns))


@pytest.fixture
def image_bytes():
    """Fixture returning the in-memory image factory."""
    return make_image_bytes


@pytest.fixture
def touch_later():
    """Fixture returning the mtime bump helper."""
    return bump_mtime

"""
Bottle application exposing the photo album API under /api.
"""

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from functools import wraps
from mimetypes import guess_type
from typing import Dict, Optional
from urllib.parse import quote

from bottle import Bottle, HTTPResponse, request

from .cache_store import DiskCacheStore
from .config import AlbumConfig
from .errors import AlbumError, BadRequest, NotFound
from .fingerprint import stat_source
from .generator import DerivedImageGenerator
from .inflight import InFlightRegistry
from .lister import DirectoryLister
from .models import Page, PageItem
from .queries import ImageQuery, ListingQuery, ThumbQuery
from .transform import ImageTransformer
from .uploads import UploadStore
from .validator import CachePolicy, cache_headers, compute_validator, is_fresh

# Room for multipart boundaries and part headers on top of the file itself.
MULTIPART_OVERHEAD = 64 * 1024


def json_error(status: int, message: str) -> HTTPResponse:
    return HTTPResponse(
        body=json.dumps({'error': message}),
        status=status,
        headers={'Content-Type': 'application/json'},
    )


def not_modified(etag: str) -> HTTPResponse:
    return HTTPResponse(status=304, headers={'ETag': etag})


class ExecutorPlugin:
    """Ties a worker pool to the app: Bottle.close() shuts it down."""
    name = 'executor'
    api = 2

    def __init__(self, executor: ThreadPoolExecutor):
        self.executor = executor

    def apply(self, callback, route):
        return callback

    def close(self) -> None:
        self.executor.shutdown(wait=False)


def json_errors(logger: logging.Logger):
    """Decorate a view function to answer errors as {"error": message}."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except HTTPResponse:
                raise
            except AlbumError as e:
                if e.status >= 500:
                    logger.exception(f"{func.__name__} failed: {e.message}")
                else:
                    logger.info(f"{func.__name__} rejected ({e.status}): {e.message}")
                return json_error(e.status, e.message)
            except Exception as e:
                logger.exception(f"{func.__name__} failed: {e}")
                return json_error(500, str(e))
        return wrapper
    return decorator


def query_params() -> Dict[str, str]:
    """Current query string as a plain dict of UTF-8 decoded values."""
    return {key: request.query.getunicode(key) for key in request.query.keys()}


def make_app(
    config: AlbumConfig,
    generator: Optional[DerivedImageGenerator] = None,
    logger: Optional[logging.Logger] = None
) -> Bottle:
    """
    Wire the components for config into a Bottle application.

    Args:
        config: Server configuration
        generator: Optional pre-built generator (tests inject one)
        logger: Optional logger instance
    """
    logger = logger or logging.getLogger(__name__)
    config.ensure_dirs()

    if generator is None:
        generator = DerivedImageGenerator(
            image_root=config.image_root,
            store=DiskCacheStore(config.cache_dir, logger=logger),
            transformer=ImageTransformer(logger=logger),
            registry=InFlightRegistry(logger=logger),
            logger=logger,
        )
    lister = DirectoryLister(config.image_root, logger=logger)
    uploads = UploadStore(config.image_root, config.max_upload_bytes, logger=logger)
    placeholder_pool = ThreadPoolExecutor(
        max_workers=config.placeholder_workers,
        thread_name_prefix='placeholder',
    )

    app = Bottle()
    app.install(ExecutorPlugin(placeholder_pool))

    def thumb_url(name: str) -> str:
        return f"/api/thumb?name={quote(name, safe='')}&w={config.default_thumb_width}"

    def placeholder_or_none(name: str) -> Optional[str]:
        try:
            return generator.get_placeholder(name)
        except Exception as e:
            logger.warning(f"Placeholder unavailable for {name}: {e}")
            return None

    @app.get('/api/photo-album')
    @json_errors(logger)
    def photo_album():
        query = ListingQuery.from_params(query_params())
        listing = lister.list_page(query.sort_by, query.order, query.page, query.limit)
        placeholders = placeholder_pool.map(placeholder_or_none, listing.names)
        items = [
            PageItem(name=name, placeholder=placeholder, thumbUrl=thumb_url(name))
            for name, placeholder in zip(listing.names, placeholders)
        ]
        logger.debug(f"Listing page {listing.page}/{listing.total_pages} ({len(items)} items)")
        return Page(
            page=listing.page,
            limit=listing.limit,
            total=listing.total,
            totalPages=listing.total_pages,
            items=items,
        ).to_dict()

    @app.get('/api/thumb')
    @json_errors(logger)
    def thumb():
        query = ThumbQuery.from_params(query_params(), default_width=config.default_thumb_width)
        key, etag = generator.thumbnail_entry(query.name, query.width)
        if is_fresh(request.get_header('If-None-Match'), etag):
            return not_modified(etag)
        return HTTPResponse(
            body=generator.read_entry(key),
            headers=cache_headers(generator.store.content_type, etag, CachePolicy.DERIVED_MAX_AGE),
        )

    @app.get('/api/image')
    @json_errors(logger)
    def image():
        query = ImageQuery.from_params(query_params())
        source = stat_source(config.image_root, query.name)
        etag = compute_validator(source.size, source.mtime_ms)
        if is_fresh(request.get_header('If-None-Match'), etag):
            return not_modified(etag)

        mimetype, _ = guess_type(source.path)
        try:
            body = open(source.path, 'rb')
        except FileNotFoundError:
            raise NotFound(f"File {query.name} not found")
        return HTTPResponse(
            body=body,
            headers=cache_headers(
                mimetype or 'application/octet-stream',
                etag,
                CachePolicy.ORIGINAL_MAX_AGE,
                content_length=source.size,
            ),
        )

    @app.post('/api/upload')
    @json_errors(logger)
    def upload():
        if request.content_length > config.max_upload_bytes + MULTIPART_OVERHEAD:
            raise BadRequest(f"File too large: limit is {config.max_upload_bytes} bytes")

        upload_file = request.files.get('image')
        if upload_file is None:
            raise BadRequest("No file uploaded")

        upload_file.file.seek(0)
        filename = uploads.save(upload_file.file, upload_file.raw_filename, upload_file.content_type)
        try:
            generator.get_placeholder(filename)
        except Exception as e:
            logger.warning(f"Uploaded {filename} but could not render its placeholder: {e}")

        return {
            'message': 'Upload successful',
            'filename': filename,
            'thumbUrl': thumb_url(filename),
        }

    return app

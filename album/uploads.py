"""
UploadStore - Validates and stores uploaded originals in the image root.
"""

import logging
import os
import random
import re
import tempfile
import time
from mimetypes import guess_type
from typing import BinaryIO, Optional

from .errors import BadRequest, UnsupportedMediaType

_SAFE_EXTENSION = re.compile(r'^\.[A-Za-z0-9]{1,10}$')


class UploadStore:
    """
    Stores uploads under generated names.

    Nothing is written to the image root unless the payload passes the MIME
    and size checks; accepted files appear in the root only once complete.
    """

    CHUNK_SIZE = 64 * 1024

    def __init__(
        self,
        image_root: str,
        max_bytes: int,
        logger: Optional[logging.Logger] = None
    ):
        self.image_root = image_root
        self.max_bytes = max_bytes
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def resolve_mimetype(original_filename: str, content_type: Optional[str]) -> Optional[str]:
        """Declared part type first, else a guess from the extension."""
        if content_type:
            return content_type.split(';')[0].strip().lower()
        mimetype, _ = guess_type(original_filename or '')
        return mimetype

    @staticmethod
    def generate_name(original_filename: str) -> str:
        _, ext = os.path.splitext(original_filename or '')
        if not _SAFE_EXTENSION.match(ext):
            ext = ''
        return f"{int(time.time() * 1000)}-{random.randint(0, 10 ** 9)}{ext}"

    def check(self, original_filename: str, content_type: Optional[str]) -> None:
        mimetype = self.resolve_mimetype(original_filename, content_type)
        if not mimetype or not mimetype.startswith('image/'):
            raise UnsupportedMediaType(f"Unsupported media type for upload: {mimetype or 'unknown'}")

    def save(self, stream: BinaryIO, original_filename: str, content_type: Optional[str]) -> str:
        """
        Copy stream into the image root.

        Returns:
            The stored file name

        Raises:
            UnsupportedMediaType: the payload is not an image
            BadRequest: the payload exceeds the size ceiling
        """
        self.check(original_filename, content_type)

        filename = self.generate_name(original_filename)
        fd, tmp_path = tempfile.mkstemp(dir=self.image_root, prefix='.upload-', suffix='.tmp')
        try:
            written = 0
            with os.fdopen(fd, 'wb') as out:
                for chunk in iter(lambda: stream.read(self.CHUNK_SIZE), b''):
                    written += len(chunk)
                    if written > self.max_bytes:
                        raise BadRequest(f"File too large: limit is {self.max_bytes} bytes")
                    out.write(chunk)
            os.replace(tmp_path, os.path.join(self.image_root, filename))
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

        self.logger.info(f"Stored upload {original_filename!r} as {filename} ({written} bytes)")
        return filename

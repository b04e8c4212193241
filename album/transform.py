"""
ImageTransformer - Pillow-backed resizing, blurring and JPEG encoding.
"""

import io
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image, ImageFilter, ImageOps


THUMBNAIL = 'thumbnail'
PLACEHOLDER = 'placeholder'


@dataclass(frozen=True)
class TransformSpec:
    """
    Describes one derived image.

    Attributes:
        kind: 'thumbnail' or 'placeholder'
        width: Target width in pixels
        quality: JPEG quality
        blur: Apply a blur after resizing
        upscale: Allow output wider than the source
    """
    kind: str
    width: int
    quality: int
    blur: bool = False
    upscale: bool = False

    MIN_WIDTH = 16
    MAX_WIDTH = 2000
    THUMB_QUALITY = 70
    PLACEHOLDER_WIDTH = 16
    PLACEHOLDER_QUALITY = 40

    @classmethod
    def thumbnail(cls, width: int) -> 'TransformSpec':
        width = max(cls.MIN_WIDTH, min(cls.MAX_WIDTH, int(width)))
        return cls(kind=THUMBNAIL, width=width, quality=cls.THUMB_QUALITY)

    @classmethod
    def placeholder(cls) -> 'TransformSpec':
        return cls(
            kind=PLACEHOLDER,
            width=cls.PLACEHOLDER_WIDTH,
            quality=cls.PLACEHOLDER_QUALITY,
            blur=True,
            upscale=True,
        )

    def key_params(self) -> Tuple:
        """Parameters that go into the cache key."""
        if self.kind == THUMBNAIL:
            return (self.kind, self.width)
        return (self.kind,)


class ImageTransformer:
    """
    Renders derived images from source files using Pillow.
    """

    BLUR_RADIUS = 1

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def render(self, source_path: str, spec: TransformSpec) -> bytes:
        """
        Produce the encoded bytes for spec from the image at source_path.

        Raises whatever Pillow raises for unreadable input.
        """
        with Image.open(source_path) as img:
            img = self.auto_orient(img)
            img = self.resize(img, spec.width, no_upscale=not spec.upscale)
            if spec.blur:
                img = self.blur(img)
            return self.encode_jpeg(img, spec.quality)

    def auto_orient(self, img: Image.Image) -> Image.Image:
        """Apply the EXIF orientation tag to the pixels."""
        return ImageOps.exif_transpose(img)

    def resize(self, img: Image.Image, width: int, no_upscale: bool = True) -> Image.Image:
        """Scale to width, preserving aspect ratio."""
        src_width, src_height = img.size
        if no_upscale and src_width <= width:
            return img
        height = max(1, round(src_height * width / src_width))
        return img.resize((width, height), Image.Resampling.LANCZOS)

    def blur(self, img: Image.Image) -> Image.Image:
        return img.filter(ImageFilter.GaussianBlur(self.BLUR_RADIUS))

    def encode_jpeg(self, img: Image.Image, quality: int) -> bytes:
        output = io.BytesIO()
        self._convert_color_mode(img).save(output, format='JPEG', quality=quality, optimize=True)
        return output.getvalue()

    def _convert_color_mode(self, img: Image.Image) -> Image.Image:
        """Flatten transparency onto white; JPEG has no alpha channel."""
        if img.mode == 'P':
            img = img.convert('RGBA')
        if img.mode == 'LA':
            img = img.convert('RGBA')
        if img.mode == 'RGBA':
            background = Image.new('RGB', img.size, (255, 255, 255))
            background.paste(img, mask=img.split()[-1])
            return background
        if img.mode != 'RGB':
            return img.convert('RGB')
        return img

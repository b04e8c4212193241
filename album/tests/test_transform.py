"""Tests for TransformSpec and ImageTransformer."""

import io
import pytest
from PIL import Image

from album.transform import ImageTransformer, TransformSpec, PLACEHOLDER, THUMBNAIL


class TestTransformSpec:
    """Tests for TransformSpec construction."""

    def test_thumbnail_defaults(self):
        spec = TransformSpec.thumbnail(400)

        assert spec.kind == THUMBNAIL
        assert spec.width == 400
        assert spec.quality == 70
        assert spec.blur is False
        assert spec.upscale is False

    @pytest.mark.parametrize('requested,expected', [(1, 16), (16, 16), (2000, 2000), (5000, 2000), (-3, 16)])
    def test_thumbnail_width_clamped(self, requested, expected):
        assert TransformSpec.thumbnail(requested).width == expected

    def test_placeholder(self):
        spec = TransformSpec.placeholder()

        assert spec.kind == PLACEHOLDER
        assert spec.width == 16
        assert spec.quality == 40
        assert spec.blur is True

    def test_key_params(self):
        assert TransformSpec.thumbnail(300).key_params() == ('thumbnail', 300)
        assert TransformSpec.placeholder().key_params() == ('placeholder',)


class TestImageTransformer:
    """Tests for ImageTransformer class."""

    def _render(self, transformer, write_image, spec, **image_kwargs):
        path = write_image('source.img', **image_kwargs)
        data = transformer.render(str(path), spec)
        return Image.open(io.BytesIO(data))

    def test_thumbnail_is_jpeg(self, transformer, write_image):
        result = self._render(transformer, write_image, TransformSpec.thumbnail(50))

        assert result.format == 'JPEG'
        assert result.size == (50, 50)

    def test_maintains_aspect_ratio(self, transformer, write_image):
        result = self._render(transformer, write_image, TransformSpec.thumbnail(50), size=(200, 100))

        assert result.size == (50, 25)

    def test_never_upscales_thumbnail(self, transformer, write_image):
        result = self._render(transformer, write_image, TransformSpec.thumbnail(400), size=(100, 60))

        assert result.size == (100, 60)

    def test_placeholder_always_16_wide(self, transformer, write_image):
        small = self._render(transformer, write_image, TransformSpec.placeholder(), size=(8, 8))
        assert small.size == (16, 16)

        large = self._render(transformer, write_image, TransformSpec.placeholder(), size=(320, 160))
        assert large.size == (16, 8)

    def test_transparent_png_flattened(self, transformer, write_image):
        result = self._render(
            transformer, write_image, TransformSpec.thumbnail(50),
            fmt='PNG', mode='RGBA', color=(255, 0, 0, 128),
        )

        assert result.mode == 'RGB'

    def test_auto_orient(self, transformer, image_root):
        """Test that the EXIF orientation tag is applied before resizing."""
        img = Image.new('RGB', (200, 100), color='blue')
        exif = Image.Exif()
        exif[0x0112] = 6
        path = image_root / 'rotated.jpg'
        img.save(path, format='JPEG', exif=exif)

        data = transformer.render(str(path), TransformSpec.thumbnail(50))

        assert Image.open(io.BytesIO(data)).size == (50, 100)

    def test_invalid_image(self, transformer, image_root):
        path = image_root / 'broken.jpg'
        path.write_bytes(b'not an image')

        with pytest.raises(Exception):
            transformer.render(str(path), TransformSpec.thumbnail(50))

    def test_missing_file(self, transformer, image_root):
        with pytest.raises(FileNotFoundError):
            transformer.render(str(image_root / 'missing.jpg'), TransformSpec.thumbnail(50))

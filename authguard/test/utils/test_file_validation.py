# Para Rodar o Script:
# pytest authguard/test/utils/test_file_validation.py -v

import re

import pytest
from PIL import features

from authguard.domain.exceptions import SecurityViolation
from authguard.shared.utils.file_validation import (
    FileSecurityValidator,
    generate_secure_filename,
    get_file_extension,
)
from authguard.shared.utils.messages_utils import get_message
from authguard.test.helpers import make_image_bytes


@pytest.fixture
def file_validator() -> FileSecurityValidator:
    return FileSecurityValidator()


@pytest.fixture(scope="module")
def jpeg_bytes() -> bytes:
    return make_image_bytes(800, 600, "JPEG")


@pytest.fixture(scope="module")
def png_bytes() -> bytes:
    return make_image_bytes(64, 48, "PNG")


def assert_rejected(callable_, *args, message_key=None, **message_kwargs):
    with pytest.raises(SecurityViolation) as exc:
        callable_(*args)
    if message_key:
        assert exc.value.message == get_message(message_key, **message_kwargs)


class TestAccepted:

    def test_well_formed_jpeg(self, file_validator, jpeg_bytes):
        assert len(jpeg_bytes) < 1024 * 1024

        descriptor = file_validator.validate(jpeg_bytes, "image/jpeg", "holiday.jpg")

        assert descriptor.width == 800
        assert descriptor.height == 600
        assert descriptor.image_format == "JPEG"
        assert descriptor.extension == ".jpg"
        assert descriptor.content_type == "image/jpeg"
        assert descriptor.size == len(jpeg_bytes)
        assert descriptor.filename == "holiday.jpg"

    def test_png_with_uppercase_extension(self, file_validator, png_bytes):
        descriptor = file_validator.validate(png_bytes, "image/png", "SCREEN.PNG")
        assert descriptor.extension == ".png"
        assert descriptor.image_format == "PNG"

    def test_image_jpg_alias_and_jpeg_extension(self, file_validator, jpeg_bytes):
        descriptor = file_validator.validate(jpeg_bytes, "IMAGE/JPG", "photo.jpeg")
        assert descriptor.content_type == "image/jpg"

    @pytest.mark.skipif(not features.check("webp"), reason="Pillow built without WebP support")
    def test_webp(self, file_validator):
        data = make_image_bytes(32, 32, "WEBP")
        assert file_validator.validate(data, "image/webp", "sticker.webp").image_format == "WEBP"


class TestSize:

    def test_four_mib_file_is_rejected(self, file_validator):
        data = b"\xff" * (4 * 1024 * 1024)
        assert_rejected(file_validator.validate, data, "image/jpeg", "big.jpg",
                        message_key="file_too_large", max_mb=3)

    def test_empty_file(self, file_validator):
        assert_rejected(file_validator.validate, b"", "image/png", "empty.png", message_key="file_empty")

    def test_dimensions_over_limit(self, jpeg_bytes):
        small_limit = FileSecurityValidator(max_width=640, max_height=480)
        assert_rejected(small_limit.validate, jpeg_bytes, "image/jpeg", "wide.jpg",
                        message_key="file_image_too_large", max_width=640, max_height=480)


class TestNameAndType:

    @pytest.mark.parametrize("filename", ["../../etc/passwd.png", "..\\boot.png", "dir/photo.png", "a\0.png"])
    def test_unsafe_filenames(self, file_validator, png_bytes, filename):
        assert_rejected(file_validator.validate, png_bytes, "image/png", filename, message_key="file_invalid_name")

    @pytest.mark.parametrize("filename", [None, "", "   "])
    def test_missing_filename(self, file_validator, png_bytes, filename):
        assert_rejected(file_validator.validate, png_bytes, "image/png", filename, message_key="file_invalid_name")

    def test_filename_too_long(self, file_validator, png_bytes):
        assert_rejected(file_validator.validate, png_bytes, "image/png", "a" * 252 + ".png",
                        message_key="file_name_too_long", max=255)

    @pytest.mark.parametrize("filename", ["CON.png", "nul.jpg", "Com1.png", "LPT9.webp"])
    def test_reserved_names(self, file_validator, filename):
        assert_rejected(file_validator.validate_filename, filename, message_key="file_reserved_name")

    @pytest.mark.parametrize("filename", ["anim.gif", "vector.svg", "script.php", "noextension", "photo.png.exe"])
    def test_extension_not_allowed(self, file_validator, png_bytes, filename):
        assert_rejected(file_validator.validate, png_bytes, "image/png", filename,
                        message_key="file_invalid_extension")

    @pytest.mark.parametrize("content_type", [None, "", "application/octet-stream", "image/png", "text/html"])
    def test_content_type_must_match_extension(self, file_validator, jpeg_bytes, content_type):
        assert_rejected(file_validator.validate, jpeg_bytes, content_type, "photo.jpg",
                        message_key="file_invalid_content_type")


class TestContent:

    def test_non_image_bytes_named_png(self, file_validator):
        data = b"MZ\x90\x00 definitely not an image " * 20
        assert_rejected(file_validator.validate, data, "image/png", "innocent.png", message_key="file_invalid_image")

    def test_html_polyglot_named_jpg(self, file_validator):
        data = b"<html><script>alert(1)</script></html>"
        assert_rejected(file_validator.validate, data, "image/jpeg", "x.jpg", message_key="file_invalid_image")

    def test_png_content_declared_as_jpeg(self, file_validator, png_bytes):
        assert_rejected(file_validator.validate, png_bytes, "image/jpeg", "spoof.jpg",
                        message_key="file_invalid_image")

    def test_truncated_image(self, file_validator, jpeg_bytes):
        assert_rejected(file_validator.validate, jpeg_bytes[:len(jpeg_bytes) // 2], "image/jpeg", "cut.jpg",
                        message_key="file_invalid_image")


class TestFilenames:

    @pytest.mark.parametrize("filename, expected", [
        ("photo.JPG", ".jpg"),
        ("archive.tar.png", ".png"),
        ("noext", ""),
        ("", ""),
        (None, ""),
    ])
    def test_get_file_extension(self, filename, expected):
        assert get_file_extension(filename) == expected

    def test_generate_secure_filename(self):
        name = generate_secure_filename("My Holiday Photo.PNG", 42)
        assert re.fullmatch(r"42_\d{13}_[0-9a-f]{8}\.png", name)

    def test_generated_names_do_not_collide(self):
        names = {generate_secure_filename("a.jpg", 1) for _ in range(200)}
        assert len(names) == 200

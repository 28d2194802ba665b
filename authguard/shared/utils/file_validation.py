# authguard/shared/utils/file_validation.py

"""
Security validation of uploaded images.

Runs before anything is written to storage: size, file name, extension,
declared content type and the decoded content itself (anti-spoofing and a
bound on pixel dimensions for later processing).
"""

import io
import logging
import time
import uuid
import warnings
from typing import Dict, FrozenSet, Optional

from PIL import Image, UnidentifiedImageError

from authguard.domain.exceptions import SecurityViolation
from authguard.domain.models.upload import UploadedFileDescriptor
from authguard.shared.utils.input_validation import InputSanitizer
from authguard.shared.utils.messages_utils import DEFAULT_LANGUAGE, get_message

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE = 3 * 1024 * 1024
DEFAULT_MAX_IMAGE_DIMENSION = 4096
MAX_FILENAME_LENGTH = 255

# Extensão -> tipos MIME aceitos
ALLOWED_CONTENT_TYPES: Dict[str, FrozenSet[str]] = {
    ".jpg": frozenset({"image/jpeg", "image/jpg"}),
    ".jpeg": frozenset({"image/jpeg", "image/jpg"}),
    ".png": frozenset({"image/png"}),
    ".webp": frozenset({"image/webp"}),
}

# Tipo MIME -> formato reportado pelo Pillow
CONTENT_TYPE_FORMATS: Dict[str, str] = {
    "image/jpeg": "JPEG",
    "image/jpg": "JPEG",
    "image/png": "PNG",
    "image/webp": "WEBP",
}

RESERVED_NAMES = frozenset(
    ["CON", "PRN", "AUX", "NUL"]
    + [f"COM{i}" for i in range(1, 10)]
    + [f"LPT{i}" for i in range(1, 10)]
)


def get_file_extension(filename: Optional[str]) -> str:
    """Lower-cased extension including the dot, "" when there is none."""
    if not filename:
        return ""
    last_dot = filename.rfind(".")
    if last_dot == -1:
        return ""
    return filename[last_dot:].lower()


def generate_secure_filename(original_filename: str, user_id: int) -> str:
    """
    Collision-resistant storage name: ``{user_id}_{epoch_ms}_{8 hex}{ext}``.

    The original name only contributes its (already validated) extension.
    """
    extension = get_file_extension(original_filename)
    timestamp = int(time.time() * 1000)
    suffix = uuid.uuid4().hex[:8]
    return f"{user_id}_{timestamp}_{suffix}{extension}"


class FileSecurityValidator:
    """
    Validates uploaded image files.

    Usage:
        validator = FileSecurityValidator(max_file_size=3 * 1024 * 1024)
        descriptor = validator.validate(data, "image/png", "photo.png")
    """

    def __init__(
            self,
            max_file_size: int = DEFAULT_MAX_FILE_SIZE,
            max_width: int = DEFAULT_MAX_IMAGE_DIMENSION,
            max_height: int = DEFAULT_MAX_IMAGE_DIMENSION,
            language: str = DEFAULT_LANGUAGE,
    ):
        self.max_file_size = max_file_size
        self.max_width = max_width
        self.max_height = max_height
        self.language = language

    def validate(self, data: bytes, declared_mime: Optional[str],
                 original_filename: Optional[str]) -> UploadedFileDescriptor:
        """
        Validate an upload.

        Args:
            data: Raw file bytes
            declared_mime: Content type sent by the client
            original_filename: File name sent by the client

        Returns:
            UploadedFileDescriptor for the accepted file

        Raises:
            SecurityViolation: On the first failing check.
        """
        if not data:
            self._fail("file_empty", original_filename)

        size = len(data)
        if size > self.max_file_size:
            self._fail("file_too_large", original_filename, max_mb=self.max_file_size // (1024 * 1024))

        if original_filename is None or not original_filename.strip():
            self._fail("file_invalid_name", original_filename)

        extension = get_file_extension(original_filename)
        if extension not in ALLOWED_CONTENT_TYPES:
            self._fail("file_invalid_extension", original_filename)

        content_type = (declared_mime or "").strip().lower()
        if content_type not in ALLOWED_CONTENT_TYPES[extension]:
            self._fail("file_invalid_content_type", original_filename)

        self.validate_filename(original_filename)

        width, height, image_format = self._validate_image_content(data, content_type, original_filename)

        logger.debug(f"Upload accepted: {InputSanitizer.snippet(original_filename)} ({size} bytes, {width}x{height})")

        return UploadedFileDescriptor(
            size=size,
            content_type=content_type,
            filename=original_filename,
            extension=extension,
            width=width,
            height=height,
            image_format=image_format,
        )

    def validate_filename(self, filename: str) -> None:
        """
        Reject path traversal, NUL bytes, over-long names and reserved device names.
        """
        if ".." in filename or "/" in filename or "\\" in filename:
            self._fail("file_invalid_name", filename)

        if "\0" in filename:
            self._fail("file_invalid_name", filename)

        if len(filename) > MAX_FILENAME_LENGTH:
            self._fail("file_name_too_long", filename, max=MAX_FILENAME_LENGTH)

        last_dot = filename.rfind(".")
        stem = filename[:last_dot] if last_dot != -1 else filename
        if stem.upper() in RESERVED_NAMES:
            self._fail("file_reserved_name", filename)

    def _validate_image_content(self, data: bytes, content_type: str, filename: str):
        expected_format = CONTENT_TYPE_FORMATS[content_type]
        try:
            with warnings.catch_warnings():
                # DecompressionBombWarning vira erro
                warnings.simplefilter("error", Image.DecompressionBombWarning)
                with Image.open(io.BytesIO(data)) as image:
                    # Header only so far: size and format are known before pixel data is read
                    if image.format != expected_format:
                        logger.warning(
                            f"Content type spoofing: declared {content_type}, decoded {image.format} "
                            f"for {InputSanitizer.snippet(filename)}"
                        )
                        self._fail("file_invalid_image", filename)

                    width, height = image.size
                    if width > self.max_width or height > self.max_height:
                        self._fail(
                            "file_image_too_large", filename,
                            max_width=self.max_width, max_height=self.max_height,
                        )

                    image.load()
                    return width, height, image.format
        except SecurityViolation:
            raise
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError,
                Image.DecompressionBombError, Image.DecompressionBombWarning) as e:
            logger.warning(f"Image decoding failed for {InputSanitizer.snippet(filename or '')}: {e}")
            raise SecurityViolation(get_message("file_invalid_image", self.language), original_error=e)

    def _fail(self, message_key: str, filename: Optional[str], **kwargs) -> None:
        logger.warning(f"Upload rejected [{message_key}]: {InputSanitizer.snippet(filename or '')}")
        raise SecurityViolation(get_message(message_key, self.language, **kwargs))

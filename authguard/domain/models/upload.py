# authguard/domain/models/upload.py

from dataclasses import dataclass


@dataclass(frozen=True)
class UploadedFileDescriptor:
    """
    Result of a successful upload validation.

    Only exists between validation and the storage writer; it is not an
    entity and is never persisted as such.
    """

    size: int
    content_type: str
    filename: str
    extension: str
    width: int
    height: int
    image_format: str

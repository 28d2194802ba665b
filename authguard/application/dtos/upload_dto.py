# authguard/application/dtos/upload_dto.py

from pydantic import Field

from authguard.application.dtos.base_dto import CustomBaseModel


class UploadValidationOutput(CustomBaseModel):
    """
    Result of a successful image validation.

    ``stored_filename`` is the generated storage name; the client-supplied name
    is never used as a path.
    """
    filename: str = Field(..., description="Original file name as sent by the client.")
    stored_filename: str = Field(..., description="Generated storage name: {user_id}_{epoch_ms}_{hex}{ext}.")
    content_type: str
    extension: str
    size: int = Field(..., description="File size in bytes.")
    width: int
    height: int
    image_format: str

# authguard/adapters/inbound/api/v1/endpoints/upload_endpoint.py

"""
Image upload validation endpoint.

Validates an uploaded image before anything is stored and returns the
generated storage name.
"""

import logging

from fastapi import APIRouter, Depends, File, UploadFile, status
from starlette.concurrency import run_in_threadpool

from authguard.adapters.configuration.container import SecurityContainer
from authguard.adapters.inbound.api.deps import get_container, get_current_identity
from authguard.application.dtos.upload_dto import UploadValidationOutput
from authguard.domain.models.token import TokenClaims
from authguard.shared.utils.error_responses import upload_errors
from authguard.shared.utils.file_validation import generate_secure_filename

# Configurar logger
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/uploads",
    tags=["Uploads"],
    responses={404: {"description": "Not found"}}
)


@router.post(
    "/images/validate",
    response_model=UploadValidationOutput,
    status_code=status.HTTP_200_OK,
    summary="Validate an image upload",
    description="Checks size, file name, extension, declared content type and the decoded image. "
                "Requires authentication.",
    responses=upload_errors,
)
async def validate_image_upload(
        file: UploadFile = File(...),
        claims: TokenClaims = Depends(get_current_identity),
        container: SecurityContainer = Depends(get_container),
):
    """
    Valida o arquivo enviado.

    At most max_file_size + 1 bytes are read, enough to detect an oversized file.
    """
    validator = container.file_validator
    data = await file.read(validator.max_file_size + 1)

    # Pillow decoding is CPU bound
    descriptor = await run_in_threadpool(validator.validate, data, file.content_type, file.filename)

    stored_filename = generate_secure_filename(descriptor.filename, claims.user_id)
    logger.info(
        f"Upload validated for user_id={claims.user_id}: {stored_filename} "
        f"({descriptor.size} bytes, {descriptor.width}x{descriptor.height})"
    )

    return UploadValidationOutput(
        filename=descriptor.filename,
        stored_filename=stored_filename,
        content_type=descriptor.content_type,
        extension=descriptor.extension,
        size=descriptor.size,
        width=descriptor.width,
        height=descriptor.height,
        image_format=descriptor.image_format,
    )

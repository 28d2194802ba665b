# authguard/shared/utils/messages_utils.py

"""
Multilingual messages for validation feedback.

Messages returned to API callers for sanitizer and upload violations. They
never echo the offending input back.
"""

from typing import Dict

DEFAULT_LANGUAGE = "en"

# Dicionário principal de mensagens
MESSAGES: Dict[str, Dict[str, str]] = {
    # Rich text / search keywords
    "text_forbidden_pattern": {
        "en": "Input contains forbidden content.",
        "ko": "허용되지 않는 문자가 포함되어 있습니다.",
    },
    "text_too_long": {
        "en": "Input is too long (maximum {max} characters).",
        "ko": "입력값이 너무 깁니다. (최대 {max}자)",
    },
    "search_forbidden_keyword": {
        "en": "Search keyword is not allowed.",
        "ko": "허용되지 않는 검색어입니다.",
    },
    "search_forbidden_chars": {
        "en": "Search keyword contains forbidden characters.",
        "ko": "허용되지 않는 문자가 포함되어 있습니다.",
    },

    # Uploads
    "file_empty": {
        "en": "Uploaded file is empty.",
        "ko": "파일이 비어있습니다.",
    },
    "file_too_large": {
        "en": "File must be at most {max_mb}MB.",
        "ko": "파일 크기는 {max_mb}MB 이하여야 합니다.",
    },
    "file_invalid_name": {
        "en": "Invalid file name.",
        "ko": "허용되지 않는 파일명입니다.",
    },
    "file_name_too_long": {
        "en": "File name is too long (maximum {max} characters).",
        "ko": "파일명이 너무 깁니다.",
    },
    "file_reserved_name": {
        "en": "File name is reserved.",
        "ko": "예약된 파일명입니다.",
    },
    "file_invalid_extension": {
        "en": "File type not allowed (JPG, PNG and WebP only).",
        "ko": "허용되지 않는 파일 형식입니다. (JPG, PNG, WebP만 허용)",
    },
    "file_invalid_content_type": {
        "en": "Declared content type is not allowed for this file.",
        "ko": "허용되지 않는 파일 형식입니다.",
    },
    "file_invalid_image": {
        "en": "File content is not a valid image of the declared type.",
        "ko": "유효하지 않은 이미지 파일입니다.",
    },
    "file_image_too_large": {
        "en": "Image dimensions are too large (maximum {max_width}x{max_height}).",
        "ko": "이미지 크기가 너무 큽니다. (최대 {max_width}x{max_height})",
    },
}


def get_message(key: str, language: str = DEFAULT_LANGUAGE, **kwargs) -> str:
    """
    Recupera uma mensagem formatada baseada na chave e no idioma.

    Args:
        key (str): Message key.
        language (str): Desired language ('en', 'ko').
        kwargs: Values interpolated into the message.

    Returns:
        str: Final message.
    """
    try:
        template = MESSAGES[key][language]
    except KeyError:
        # Fallback to the default language
        template = MESSAGES.get(key, {}).get(DEFAULT_LANGUAGE, f"[Message not found: {key}]")

    return template.format(**kwargs)

# authguard/shared/utils/input_validation.py

"""
Input sanitization for write paths.

The XSS and SQL keyword checks are signature heuristics, not parsers. They are
a defense-in-depth layer in front of storage; the data-access layer must still
use parameterized queries, and passing these checks says nothing about the
safety of building SQL by string concatenation.
"""

import html
import ipaddress
import logging
import re
from typing import Optional

import regex

from authguard.domain.exceptions import MalformedTokenError, SecurityViolation
from authguard.shared.utils.messages_utils import DEFAULT_LANGUAGE, get_message

logger = logging.getLogger(__name__)


class InputSanitizer:
    """
    Validation and sanitization of user input.

    Rich text is checked against the XSS and SQL keyword signatures and
    HTML-encoded; search keywords are checked against the SQL keyword signature
    and a character allow-list, then LIKE-escaped. Also hosts the small request hygiene helpers
    (IP address, user agent, token shape, security event logging).
    """

    # ─────────────────────────────────────────────────────────────
    # Constantes de limites
    MAX_RICH_TEXT_LENGTH = 10_000
    MAX_SEARCH_KEYWORD_LENGTH = 100
    MAX_USER_AGENT_LENGTH = 512
    LOG_SNIPPET_LENGTH = 50

    # ─────────────────────────────────────────────────────────────
    # Expressões Regulares

    # XSS signature (searched anywhere, case-insensitive, dot matches newline):
    # - opening <script> tag
    # - javascript: URIs
    # - inline event handlers (onclick=, onerror =, ...)
    # - <iframe, <object, <embed
    XSS_PATTERN = re.compile(
        r"<\s*script\b|javascript\s*:|\bon\w+\s*=|<\s*iframe|<\s*object|<\s*embed",
        flags=re.IGNORECASE | re.DOTALL
    )

    # SQL keywords as whole words
    SQL_INJECTION_PATTERN = re.compile(
        r"\b(SELECT|INSERT|UPDATE|DELETE|DROP|CREATE|ALTER|EXEC|UNION|SCRIPT)\b",
        flags=re.IGNORECASE
    )

    # Search keyword allow-list:
    # - \p{L}: letters of any script
    # - \p{M}: combining marks
    # - 0-9, whitespace
    # - punctuation: - _ . , ! ? ( ) [ ] %
    SEARCH_ALLOWED_PATTERN = regex.compile(
        r"^[\p{L}\p{M}0-9\s\-_.,!?()\[\]%]*$",
        flags=regex.UNICODE
    )

    # Compact token segment: base64url alphabet, no padding
    TOKEN_SEGMENT_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

    # Control characters removed from log snippets
    LOG_UNSAFE_CHARS = re.compile(r"[\x00-\x1f\x7f]")

    USER_AGENT_UNSAFE_CHARS = re.compile(r"[<>\"'&]")

    # ─────────────────────────────────────────────────────────────
    # Rich text and search keywords

    @classmethod
    def sanitize_rich_text(cls, text: Optional[str], max_length: Optional[int] = None,
                           language: str = DEFAULT_LANGUAGE) -> str:
        """
        Trim, reject script-injection and SQL keyword signatures and HTML-encode.

        Returns:
            The HTML-encoded form of the trimmed input ("" for None or blank).

        Raises:
            SecurityViolation: Over ``max_length``, XSS signature or SQL keyword found.
        """
        if text is None or not text.strip():
            return ""

        if not max_length:
            max_length = cls.MAX_RICH_TEXT_LENGTH

        trimmed = text.strip()

        if len(trimmed) > max_length:
            cls._reject("TEXT_TOO_LONG", trimmed, get_message("text_too_long", language, max=max_length))

        if cls.XSS_PATTERN.search(trimmed):
            cls._reject("XSS_ATTEMPT", trimmed, get_message("text_forbidden_pattern", language))

        if cls.SQL_INJECTION_PATTERN.search(trimmed):
            cls._reject("SQL_INJECTION_ATTEMPT", trimmed, get_message("text_forbidden_pattern", language))

        return html.escape(trimmed, quote=True)

    @classmethod
    def sanitize_search_keyword(cls, keyword: Optional[str], language: str = DEFAULT_LANGUAGE) -> str:
        """
        Normalize a search keyword for a LIKE query.

        Empty input yields "". The keyword is trimmed and truncated to 100
        characters before any check.

        Raises:
            SecurityViolation: SQL keyword found or character outside the allow-list.
        """
        if keyword is None or not keyword.strip():
            return ""

        keyword = keyword.strip()[:cls.MAX_SEARCH_KEYWORD_LENGTH]

        if cls.SQL_INJECTION_PATTERN.search(keyword):
            cls._reject("SQL_INJECTION_ATTEMPT", keyword, get_message("search_forbidden_keyword", language))

        if not cls.SEARCH_ALLOWED_PATTERN.match(keyword):
            cls._reject("FORBIDDEN_SEARCH_CHARS", keyword, get_message("search_forbidden_chars", language))

        return cls.escape_like_pattern(keyword)

    @staticmethod
    def escape_like_pattern(text: str) -> str:
        """
        Escape LIKE metacharacters with a backslash.

        Not idempotent: apply exactly once per query construction.
        """
        return (
            text.replace("\\", "\\\\")
            .replace("%", "\\%")
            .replace("_", "\\_")
            .replace("[", "\\[")
            .replace("]", "\\]")
        )

    # ─────────────────────────────────────────────────────────────
    # Request hygiene

    @staticmethod
    def sanitize_ip_address(ip_address: Optional[str]) -> str:
        """Normalized IPv4/IPv6 text, "unknown" when missing, "invalid" otherwise."""
        if ip_address is None or not ip_address.strip():
            return "unknown"

        try:
            return str(ipaddress.ip_address(ip_address.strip()))
        except ValueError:
            logger.warning(f"Invalid IP address: {InputSanitizer.snippet(ip_address)}")
            return "invalid"

    @classmethod
    def sanitize_user_agent(cls, user_agent: Optional[str]) -> str:
        if user_agent is None or not user_agent.strip():
            return "unknown"
        return cls.USER_AGENT_UNSAFE_CHARS.sub("", user_agent[:cls.MAX_USER_AGENT_LENGTH])

    @classmethod
    def validate_token_format(cls, token: Optional[str]) -> None:
        """
        Check the compact shape header.payload.signature before decoding.

        Raises:
            MalformedTokenError: Empty token, wrong segment count or non base64url segment.
        """
        if not isinstance(token, str) or not token.strip():
            raise MalformedTokenError("Token is empty.")

        parts = token.split(".")
        if len(parts) != 3:
            raise MalformedTokenError(f"Token has {len(parts)} segments, expected 3.")

        if not all(cls.TOKEN_SEGMENT_PATTERN.match(part) for part in parts):
            raise MalformedTokenError("Token segment is not base64url encoded.")

    @classmethod
    def rate_limit_key(cls, ip_address: Optional[str], endpoint: str) -> str:
        return f"rate_limit:{cls.sanitize_ip_address(ip_address)}:{endpoint}"

    @classmethod
    def snippet(cls, text: str, length: Optional[int] = None) -> str:
        """Truncated, control-character-free excerpt safe to write to a log."""
        return cls.LOG_UNSAFE_CHARS.sub("?", text[:length or cls.LOG_SNIPPET_LENGTH])

    @classmethod
    def log_security_event(cls, event_type: str, details: str,
                           ip_address: Optional[str] = None, user_id: Optional[int] = None) -> None:
        logger.warning(
            f"Security event - type: {event_type}, details: {cls.snippet(details, 200)}, "
            f"IP: {cls.sanitize_ip_address(ip_address)}, user: {user_id}"
        )

    @classmethod
    def _reject(cls, event_type: str, text: str, message: str) -> None:
        logger.warning(f"{event_type} detected: {cls.snippet(text)}")
        raise SecurityViolation(message)

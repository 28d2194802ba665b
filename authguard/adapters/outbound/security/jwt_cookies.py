# authguard/adapters/outbound/security/jwt_cookies.py

"""
Token transport over HTTP.

Reads tokens from the ``Authorization: Bearer`` header or from HTTP-only
cookies, and writes/clears those cookies with fixed secure attributes.
"""

import logging
from typing import Optional

from fastapi import Request, Response

from authguard.domain.models.token import TokenType

# Configurar logger
logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "access_token"
REFRESH_TOKEN_COOKIE = "refresh_token"
BEARER_PREFIX = "Bearer "

COOKIE_NAMES = {
    TokenType.access: ACCESS_TOKEN_COOKIE,
    TokenType.refresh: REFRESH_TOKEN_COOKIE,
}


class CookieTransport:
    """
    Extracts and stores tokens.

    Cookies are always written with ``HttpOnly``, ``Secure``, ``Path=/`` and
    ``SameSite=Strict``; ``Max-Age`` equals the matching token TTL.
    """

    cookie_path = "/"
    cookie_samesite = "strict"

    def __init__(self, access_ttl_seconds: int, refresh_ttl_seconds: int, cookie_domain: Optional[str] = None):
        self._max_age = {
            TokenType.access: access_ttl_seconds,
            TokenType.refresh: refresh_ttl_seconds,
        }
        self.cookie_domain = cookie_domain

    @staticmethod
    def get_bearer_token(request: Request) -> Optional[str]:
        """Token from ``Authorization: Bearer <token>``; None when absent or empty."""
        authorization = request.headers.get("Authorization")
        if authorization and authorization.startswith(BEARER_PREFIX):
            token = authorization[len(BEARER_PREFIX):].strip()
            if token:
                return token
        return None

    def extract_token(self, request: Request, cookie_name: str = ACCESS_TOKEN_COOKIE) -> Optional[str]:
        """
        Extrai o token da requisição.

        The bearer header wins over the cookie.

        Args:
            request: FastAPI Request
            cookie_name: Cookie read when there is no bearer token

        Returns:
            Raw token or None if not found
        """
        token = self.get_bearer_token(request)
        if token:
            return token
        return self.get_token_from_cookie(request, cookie_name)

    @staticmethod
    def get_token_from_cookie(request: Request, cookie_name: str = ACCESS_TOKEN_COOKIE) -> Optional[str]:
        token = request.cookies.get(cookie_name)
        return token or None

    def set_token_cookie(self, response: Response, token: str, token_type: TokenType) -> None:
        """
        Define o cookie do token.

        Args:
            response: FastAPI Response
            token: Signed token
            token_type: Selects the cookie name and its Max-Age
        """
        token_type = TokenType(token_type)
        response.set_cookie(
            key=COOKIE_NAMES[token_type],
            value=token,
            max_age=self._max_age[token_type],
            path=self.cookie_path,
            domain=self.cookie_domain,
            secure=True,
            httponly=True,  # Protege contra XSS
            samesite=self.cookie_samesite,
        )

    def clear_token_cookies(self, response: Response) -> None:
        """
        Remove os cookies de access e refresh (valor vazio, Max-Age=0).
        """
        for cookie_name in COOKIE_NAMES.values():
            response.set_cookie(
                key=cookie_name,
                value="",
                max_age=0,
                path=self.cookie_path,
                domain=self.cookie_domain,
                secure=True,
                httponly=True,
                samesite=self.cookie_samesite,
            )
        logger.debug("Token cookies cleared")

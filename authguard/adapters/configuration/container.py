# authguard/adapters/configuration/container.py

"""
Component wiring.

Builds every component once from a Settings instance. The FastAPI app keeps the
result on ``app.state.security``.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from authguard.adapters.configuration.config import RevocationBackend, Settings
from authguard.adapters.outbound.persistence.database import build_engine, init_db
from authguard.adapters.outbound.security.jwt_config import SecretKeyProvider
from authguard.adapters.outbound.security.jwt_cookies import CookieTransport
from authguard.adapters.outbound.security.revocation import InMemoryRevocationGate, SqlRevocationGate
from authguard.adapters.outbound.security.token_issuer import TokenIssuer
from authguard.adapters.outbound.security.token_validator import TokenValidator
from authguard.application.ports.outbound.revocation_gate_port import IRevocationGate
from authguard.application.use_cases.auth_use_cases import RefreshCoordinator
from authguard.shared.utils.file_validation import FileSecurityValidator

logger = logging.getLogger(__name__)


@dataclass
class SecurityContainer:
    settings: Settings
    key_provider: SecretKeyProvider
    revocation_gate: IRevocationGate
    issuer: TokenIssuer
    validator: TokenValidator
    refresh_coordinator: RefreshCoordinator
    cookie_transport: CookieTransport
    file_validator: FileSecurityValidator


def build_revocation_gate(settings: Settings, clock: Callable[[], float] = time.time) -> IRevocationGate:
    if settings.REVOCATION_BACKEND == RevocationBackend.database:
        engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)
        init_db(engine)
        logger.info("Using database revocation store")
        return SqlRevocationGate.from_engine(engine)

    logger.info(
        f"Using in-memory revocation store (max {settings.REVOCATION_MEMORY_MAX_ENTRIES} entries, "
        "not shared between processes)"
    )
    return InMemoryRevocationGate(max_entries=settings.REVOCATION_MEMORY_MAX_ENTRIES, clock=clock)


def build_container(
        settings: Settings,
        clock: Callable[[], float] = time.time,
        revocation_gate: Optional[IRevocationGate] = None,
) -> SecurityContainer:
    """
    Build all components.

    The signing key is derived here so a bad secret fails at startup with
    ConfigurationError instead of on the first request.
    """
    key_provider = SecretKeyProvider(settings.JWT_SECRET)
    key_provider.get_signing_key()

    if revocation_gate is None:
        revocation_gate = build_revocation_gate(settings, clock)

    issuer = TokenIssuer(
        key_provider=key_provider,
        issuer=settings.JWT_ISSUER,
        audience=settings.JWT_AUDIENCE,
        access_ttl_seconds=settings.access_token_ttl_seconds,
        refresh_ttl_seconds=settings.refresh_token_ttl_seconds,
        clock=clock,
    )
    validator = TokenValidator(
        key_provider=key_provider,
        issuer=settings.JWT_ISSUER,
        audience=settings.JWT_AUDIENCE,
        revocation_gate=revocation_gate,
        clock=clock,
    )

    return SecurityContainer(
        settings=settings,
        key_provider=key_provider,
        revocation_gate=revocation_gate,
        issuer=issuer,
        validator=validator,
        refresh_coordinator=RefreshCoordinator(
            issuer=issuer,
            validator=validator,
            revocation_gate=revocation_gate,
            rotate_refresh_tokens=settings.JWT_ROTATE_REFRESH_TOKENS,
        ),
        cookie_transport=CookieTransport(
            access_ttl_seconds=settings.access_token_ttl_seconds,
            refresh_ttl_seconds=settings.refresh_token_ttl_seconds,
            cookie_domain=settings.COOKIE_DOMAIN,
        ),
        file_validator=FileSecurityValidator(
            max_file_size=settings.UPLOAD_MAX_FILE_SIZE,
            max_width=settings.UPLOAD_MAX_IMAGE_WIDTH,
            max_height=settings.UPLOAD_MAX_IMAGE_HEIGHT,
        ),
    )

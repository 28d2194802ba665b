# authguard/test/conftest.py

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from authguard.adapters.configuration.config import Settings
from authguard.adapters.outbound.security.jwt_config import SecretKeyProvider
from authguard.adapters.outbound.security.jwt_cookies import CookieTransport
from authguard.adapters.outbound.security.revocation import InMemoryRevocationGate
from authguard.adapters.outbound.security.token_issuer import TokenIssuer
from authguard.adapters.outbound.security.token_validator import TokenValidator
from authguard.application.use_cases.auth_use_cases import RefreshCoordinator
from authguard.main import create_app
from authguard.test.helpers import ACCESS_TTL_SECONDS, REFRESH_TTL_SECONDS, TEST_SECRET, FakeClock


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        ENVIRONMENT="testing",
        LOG_LEVEL="DEBUG",
        JWT_SECRET=TEST_SECRET,
        JWT_ACCESS_TOKEN_EXPIRATION_MS=ACCESS_TTL_SECONDS * 1000,
        JWT_REFRESH_TOKEN_EXPIRATION_MS=REFRESH_TTL_SECONDS * 1000,
    )


@pytest.fixture
def key_provider() -> SecretKeyProvider:
    return SecretKeyProvider(TEST_SECRET)


@pytest.fixture
def revocation_gate(clock) -> InMemoryRevocationGate:
    return InMemoryRevocationGate(max_entries=1000, clock=clock)


@pytest.fixture
def issuer(key_provider, settings, clock) -> TokenIssuer:
    return TokenIssuer(
        key_provider=key_provider,
        issuer=settings.JWT_ISSUER,
        audience=settings.JWT_AUDIENCE,
        access_ttl_seconds=ACCESS_TTL_SECONDS,
        refresh_ttl_seconds=REFRESH_TTL_SECONDS,
        clock=clock,
    )


@pytest.fixture
def validator(key_provider, settings, revocation_gate, clock) -> TokenValidator:
    return TokenValidator(
        key_provider=key_provider,
        issuer=settings.JWT_ISSUER,
        audience=settings.JWT_AUDIENCE,
        revocation_gate=revocation_gate,
        clock=clock,
    )


@pytest.fixture
def coordinator(issuer, validator, revocation_gate) -> RefreshCoordinator:
    return RefreshCoordinator(issuer=issuer, validator=validator, revocation_gate=revocation_gate)


@pytest.fixture
def cookie_transport() -> CookieTransport:
    return CookieTransport(access_ttl_seconds=ACCESS_TTL_SECONDS, refresh_ttl_seconds=REFRESH_TTL_SECONDS)


@pytest.fixture
def app(settings, clock):
    return create_app(settings, clock=clock)


@pytest_asyncio.fixture
async def async_client(app):
    # https: cookies are Secure and httpx only sends them back over https
    async with AsyncClient(transport=ASGITransport(app=app), base_url="https://testserver") as client:
        yield client


@pytest.fixture
def app_issuer(app) -> TokenIssuer:
    """Issuer wired into the running app (same key, clock and TTLs)."""
    return app.state.security.issuer

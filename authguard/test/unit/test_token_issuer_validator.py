# Para Rodar o Script:
# pytest authguard/test/unit/test_token_issuer_validator.py -v

import base64
import json
import logging
from datetime import datetime, timezone

import pytest
from jose import jwt

from authguard.adapters.outbound.security.jwt_config import SecretKeyProvider
from authguard.adapters.outbound.security.token_issuer import TokenIssuer
from authguard.adapters.outbound.security.token_validator import TokenValidator
from authguard.domain.exceptions import (
    ClaimsMismatchError,
    ExpiredTokenError,
    MalformedTokenError,
    PrematureTokenError,
    SignatureError,
    TokenRevokedError,
    UnsupportedTokenError,
)
from authguard.domain.models.token import DEFAULT_ROLE, TokenType
from authguard.test.helpers import (
    ACCESS_TTL_SECONDS,
    FIXED_NOW,
    REFRESH_TTL_SECONDS,
    TEST_IP,
    TickingClock,
    forge_token,
)


def _payload(issuer, **overrides):
    payload = {
        "sub": "alice",
        "iss": issuer.issuer,
        "aud": issuer.audience,
        "iat": FIXED_NOW,
        "nbf": FIXED_NOW,
        "exp": FIXED_NOW + 60,
        "userId": 42,
        "userAccount": "alice",
        "tokenType": "access",
        "ipAddress": TEST_IP,
        "jti": "test-jti",
    }
    payload.update(overrides)
    return payload


class TestRoundTrip:

    @pytest.mark.parametrize("token_type", [TokenType.access, TokenType.refresh])
    def test_issue_then_validate(self, issuer, validator, token_type):
        token = issuer.issue(42, "alice", token_type, TEST_IP)

        claims = validator.validate(token, TEST_IP)

        assert claims.user_id == 42
        assert claims.user_account == "alice"
        assert claims.subject == "alice"
        assert claims.token_type is token_type
        assert claims.ip_address == TEST_IP
        assert claims.role == DEFAULT_ROLE

    def test_claims_follow_configuration(self, issuer, validator, settings):
        claims = validator.parse(issuer.issue_access_token(1, "bob", TEST_IP, role="ADMIN"))

        assert claims.issuer == settings.JWT_ISSUER
        assert claims.audience == settings.JWT_AUDIENCE
        assert claims.issued_at == FIXED_NOW
        assert claims.not_before == FIXED_NOW
        assert claims.expires_at == FIXED_NOW + ACCESS_TTL_SECONDS
        assert claims.role == "ADMIN"

    def test_header_uses_hs512(self, issuer):
        header = jwt.get_unverified_header(issuer.issue_access_token(1, "bob", TEST_IP))
        assert header["alg"] == "HS512"

    def test_jti_is_unique_and_url_safe(self, issuer, validator):
        jtis = {validator.parse(issuer.issue_access_token(1, "bob", TEST_IP)).jti for _ in range(50)}

        assert len(jtis) == 50
        for jti in jtis:
            # 32 bytes em base64url sem padding
            assert len(jti) == 43
            assert "=" not in jti and "+" not in jti and "/" not in jti

    def test_missing_ip_is_recorded_as_unknown(self, issuer, validator):
        claims = validator.parse(issuer.issue_access_token(1, "bob", None))
        assert claims.ip_address == "unknown"

    def test_token_pair(self, issuer, validator):
        pair = issuer.issue_token_pair(7, "carol", TEST_IP)

        assert validator.parse(pair.access_token).token_type is TokenType.access
        assert validator.parse(pair.refresh_token).token_type is TokenType.refresh
        assert pair.expires_at == datetime.fromtimestamp(FIXED_NOW + ACCESS_TTL_SECONDS, tz=timezone.utc)


    def test_token_pair_expiry_matches_access_token(self, key_provider, settings):
        # cada leitura do relógio avança um segundo
        ticking = TickingClock()
        issuer = TokenIssuer(
            key_provider=key_provider,
            issuer=settings.JWT_ISSUER,
            audience=settings.JWT_AUDIENCE,
            access_ttl_seconds=ACCESS_TTL_SECONDS,
            refresh_ttl_seconds=REFRESH_TTL_SECONDS,
            clock=ticking,
        )

        pair = issuer.issue_token_pair(7, "carol", TEST_IP)

        access = jwt.get_unverified_claims(pair.access_token)
        refresh = jwt.get_unverified_claims(pair.refresh_token)
        assert pair.expires_at == datetime.fromtimestamp(access["exp"], tz=timezone.utc)
        assert access["iat"] == refresh["iat"] == FIXED_NOW


class TestExpiry:

    def test_token_is_invalid_at_exp(self, issuer, validator, clock):
        token = issuer.issue_access_token(1, "bob", TEST_IP)
        clock.advance(ACCESS_TTL_SECONDS)

        with pytest.raises(ExpiredTokenError):
            validator.parse(token)
        assert validator.is_valid(token) is False

    def test_token_is_valid_one_second_before_exp(self, issuer, validator, clock):
        token = issuer.issue_access_token(1, "bob", TEST_IP)
        clock.advance(ACCESS_TTL_SECONDS - 1)

        assert validator.is_valid(token) is True

    def test_not_before_in_the_future(self, issuer, validator, key_provider):
        payload = _payload(issuer, nbf=FIXED_NOW + 30)
        token = jwt.encode(payload, key_provider.get_signing_key(), algorithm="HS512")

        with pytest.raises(PrematureTokenError):
            validator.parse(token)


class TestRejection:

    def test_tampered_signature(self, issuer, validator):
        token = issuer.issue_access_token(1, "bob", TEST_IP)
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[:-4] + ("AAAA" if signature[-4:] != "AAAA" else "BBBB")])

        with pytest.raises(SignatureError):
            validator.parse(tampered)

    def test_tampered_payload(self, issuer, validator):
        token = issuer.issue_access_token(1, "bob", TEST_IP)
        header, _, signature = token.split(".")
        forged_payload = base64.urlsafe_b64encode(
            json.dumps(_payload(issuer, userId=1, role="ADMIN")).encode()
        ).rstrip(b"=").decode()

        with pytest.raises(SignatureError):
            validator.parse(".".join([header, forged_payload, signature]))

    def test_token_signed_with_another_key(self, issuer, settings, revocation_gate, clock):
        other_key = SecretKeyProvider(base64.b64encode(b"z" * 64).decode())
        other_validator = TokenValidator(
            key_provider=other_key,
            issuer=settings.JWT_ISSUER,
            audience=settings.JWT_AUDIENCE,
            revocation_gate=revocation_gate,
            clock=clock,
        )

        with pytest.raises(SignatureError):
            other_validator.parse(issuer.issue_access_token(1, "bob", TEST_IP))

    @pytest.mark.parametrize("token", [
        "",
        "abc",
        "a.b",
        "a.b.c.d",
        "a.b!.c",
    ])
    def test_structurally_malformed(self, validator, token):
        with pytest.raises(MalformedTokenError):
            validator.parse(token)

    def test_header_that_is_not_json(self, validator):
        with pytest.raises(MalformedTokenError):
            validator.parse("bm90LWpzb24.e30.c2ln")

    def test_alg_none_is_unsupported(self, issuer, validator):
        token = forge_token({"alg": "none", "typ": "JWT"}, _payload(issuer))

        with pytest.raises(UnsupportedTokenError):
            validator.parse(token)

    def test_alg_none_without_signature_is_rejected(self, issuer, validator):
        token = forge_token({"alg": "none", "typ": "JWT"}, _payload(issuer), signature="")

        with pytest.raises(MalformedTokenError):
            validator.parse(token)

    def test_hs256_is_unsupported(self, issuer, validator, key_provider):
        token = jwt.encode(_payload(issuer), key_provider.get_signing_key(), algorithm="HS256")

        with pytest.raises(UnsupportedTokenError):
            validator.parse(token)

    def test_missing_claim(self, issuer, validator, key_provider):
        payload = _payload(issuer)
        del payload["userId"]
        token = jwt.encode(payload, key_provider.get_signing_key(), algorithm="HS512")

        with pytest.raises(MalformedTokenError):
            validator.parse(token)

    def test_unknown_token_type(self, issuer, validator, key_provider):
        token = jwt.encode(_payload(issuer, tokenType="admin"), key_provider.get_signing_key(), algorithm="HS512")

        with pytest.raises(MalformedTokenError):
            validator.parse(token)

    def test_issuer_mismatch(self, issuer, validator, key_provider):
        token = jwt.encode(_payload(issuer, iss="someone-else"), key_provider.get_signing_key(), algorithm="HS512")

        with pytest.raises(ClaimsMismatchError):
            validator.parse(token)

    def test_audience_mismatch(self, issuer, validator, key_provider):
        token = jwt.encode(_payload(issuer, aud="other-app"), key_provider.get_signing_key(), algorithm="HS512")

        with pytest.raises(ClaimsMismatchError):
            validator.parse(token)

    def test_is_valid_never_raises(self, validator):
        assert validator.is_valid("garbage") is False
        assert validator.is_valid("") is False


class TestIpBinding:

    def test_ip_mismatch_is_logged_not_rejected(self, issuer, validator, caplog):
        token = issuer.issue_access_token(1, "bob", TEST_IP)

        with caplog.at_level(logging.WARNING):
            claims = validator.validate(token, "198.51.100.7")
            assert validator.is_valid(token, "198.51.100.7") is True

        assert claims.user_id == 1
        assert "TOKEN_IP_MISMATCH" in caplog.text

    def test_raw_token_never_logged(self, issuer, validator, clock, caplog):
        token = issuer.issue_access_token(1, "bob", TEST_IP)
        clock.advance(ACCESS_TTL_SECONDS)

        with caplog.at_level(logging.DEBUG):
            validator.is_valid(token)

        assert token not in caplog.text


class TestRevocation:

    def test_revoked_token_is_rejected(self, issuer, validator, revocation_gate):
        token = issuer.issue_access_token(1, "bob", TEST_IP)
        claims = validator.parse(token)

        revocation_gate.revoke(claims.jti, claims.expires_at_datetime)

        with pytest.raises(TokenRevokedError):
            validator.validate(token)
        assert validator.is_valid(token) is False
        # parse ignora a revogação
        assert validator.parse(token).jti == claims.jti

    def test_revocation_only_targets_that_jti(self, issuer, validator, revocation_gate):
        first = issuer.issue_access_token(1, "bob", TEST_IP)
        second = issuer.issue_access_token(1, "bob", TEST_IP)
        claims = validator.parse(first)

        revocation_gate.revoke(claims.jti, claims.expires_at_datetime)

        assert validator.is_valid(first) is False
        assert validator.is_valid(second) is True


def test_ttl_per_token_type(key_provider):
    issuer = TokenIssuer(key_provider, "iss", "aud", access_ttl_seconds=10, refresh_ttl_seconds=20)
    assert issuer.ttl_seconds(TokenType.access) == 10
    assert issuer.ttl_seconds("refresh") == 20

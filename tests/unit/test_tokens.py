"""Unit tests for JWT token issuance and verification."""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from userdir.kernel.errors import ValidationError
from userdir.kernel.identity.tokens import JWTTokenService, parse_duration

CLAIM = {"user_id": "3f6c1a4e-0000-4000-8000-000000000001", "email": "a@b.com"}


class TestIssueAndVerify:
    """Round trips and rejection cases."""

    def test_round_trip_recovers_claim(self, token_service):
        """verify(issue(claim)) returns exactly the claim."""
        token = token_service.issue(CLAIM)
        assert token_service.verify(token) == CLAIM

    def test_token_carries_issuer_and_expiry(self, token_service):
        token = token_service.issue(CLAIM)
        payload = jwt.get_unverified_claims(token)

        assert payload["iss"] == "userdir"
        lifetime = payload["exp"] - payload["iat"]
        assert lifetime == 3600

    def test_default_lifetime_is_24_hours(self):
        service = JWTTokenService()
        payload = jwt.get_unverified_claims(service.issue(CLAIM))
        assert payload["exp"] - payload["iat"] == 24 * 3600

    def test_expired_token(self, token_service):
        """Expired tokens verify as None."""
        token = token_service.issue(CLAIM, expires_delta=timedelta(seconds=-5))
        assert token_service.verify(token) is None

    def test_different_secret(self, token_service):
        """A token signed with another secret is rejected."""
        other = JWTTokenService(secret_key="another-secret", expires_in="1h")
        assert token_service.verify(other.issue(CLAIM)) is None

    def test_wrong_issuer(self, token_service):
        other = JWTTokenService(secret_key=token_service.secret_key, issuer="someone-else")
        assert token_service.verify(other.issue(CLAIM)) is None

    def test_missing_issuer(self, token_service):
        exp = datetime.now(timezone.utc) + timedelta(hours=1)
        token = jwt.encode({**CLAIM, "exp": exp}, token_service.secret_key, algorithm="HS256")
        assert token_service.verify(token) is None

    def test_missing_expiry(self, token_service):
        token = jwt.encode({**CLAIM, "iss": "userdir"}, token_service.secret_key, algorithm="HS256")
        assert token_service.verify(token) is None

    def test_tampered_token(self, token_service):
        token = token_service.issue(CLAIM)
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[::-1]])
        assert token_service.verify(tampered) is None

    @pytest.mark.parametrize("token", [None, "", "abc", "a.b.c", 42])
    def test_malformed_tokens(self, token_service, token):
        """Verification never raises."""
        assert token_service.verify(token) is None

    def test_verify_is_repeatable(self, token_service):
        token = token_service.issue(CLAIM)
        assert token_service.verify(token) == token_service.verify(token)

    @pytest.mark.parametrize("claim", [{}, None, "user", ["user_id"], 7])
    def test_issue_rejects_invalid_claims(self, token_service, claim):
        with pytest.raises(ValidationError):
            token_service.issue(claim)

    def test_issue_rejects_reserved_names(self, token_service):
        with pytest.raises(ValidationError):
            token_service.issue({"user_id": "1", "exp": 0})

    @pytest.mark.parametrize("name", ["aud", "sub", "nbf", "jti"])
    def test_issue_rejects_registered_names(self, token_service, name):
        """Registered claims jose checks on decode could never verify."""
        with pytest.raises(ValidationError):
            token_service.issue({"user_id": "u", name: "web"})

    @pytest.mark.parametrize(
        "claim",
        [{"tag": "web"}, {"user_id": "u", "ids": [1, 2]}, {"nested": {"a": 1}}],
    )
    def test_round_trip_for_structured_claims(self, token_service, claim):
        assert token_service.verify(token_service.issue(claim)) == claim

    def test_issue_rejects_unencodable_values(self, token_service):
        with pytest.raises(ValidationError):
            token_service.issue({"user_id": "u", "when": datetime(2020, 1, 1)})

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            JWTTokenService(secret_key="")


class TestExtractFromAuthHeader:
    """Tests for Authorization header parsing."""

    def test_bearer(self, token_service):
        assert token_service.extract_from_auth_header("Bearer abc") == "abc"

    @pytest.mark.parametrize(
        "header",
        [None, "", "abc", "Basic abc", "bearer abc", "Bearer", "BEARER abc", "Token abc"],
    )
    def test_rejected_headers(self, token_service, header):
        assert token_service.extract_from_auth_header(header) is None

    def test_keeps_everything_after_prefix(self, token_service):
        assert token_service.extract_from_auth_header("Bearer a.b c") == "a.b c"


class TestParseDuration:
    """Tests for token lifetime parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("24h", timedelta(hours=24)),
            ("30m", timedelta(minutes=30)),
            ("7d", timedelta(days=7)),
            ("45s", timedelta(seconds=45)),
            ("90", timedelta(seconds=90)),
            (120, timedelta(seconds=120)),
            (timedelta(minutes=5), timedelta(minutes=5)),
        ],
    )
    def test_valid(self, value, expected):
        assert parse_duration(value) == expected

    @pytest.mark.parametrize("value", ["", "soon", "10w", "-5m", "0h", 0, -1, 1.5, None, True])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_duration(value)

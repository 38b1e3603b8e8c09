"""Tests for CredentialHasher and TokenIssuer."""

import jwt
import pytest
from datetime import datetime, timedelta, timezone

from restacademy.auth.jwt import TokenIssuer
from restacademy.auth.passwords import CredentialHasher
from restacademy.services.exceptions import InvalidToken

# Must match the values used by the hasher/token_issuer fixtures.
TEST_HASH_ROUNDS = 1000
TEST_JWT_SECRET = "test-secret-key"


class TestCredentialHasher:
    def test_hash_and_verify(self, hasher):
        digest = hasher.hash("supersecurepassword")

        assert digest != "supersecurepassword"
        assert hasher.verify("supersecurepassword", digest) is True
        assert hasher.verify("incorrect", digest) is False

    def test_same_input_hashes_differently(self, hasher):
        first = hasher.hash("password123")
        second = hasher.hash("password123")

        assert first != second
        assert hasher.verify("password123", first)
        assert hasher.verify("password123", second)

    def test_digest_embeds_scheme_and_rounds(self, hasher):
        digest = hasher.hash("password123")
        assert digest.startswith(f"$pbkdf2-sha256${TEST_HASH_ROUNDS}$")

    @pytest.mark.parametrize("digest", ["", "not-a-hash", "$pbkdf2-sha256$broken"])
    def test_malformed_digest_never_verifies(self, hasher, digest):
        assert hasher.verify("password123", digest) is False

    def test_digest_from_other_rounds_still_verifies(self):
        digest = CredentialHasher(rounds=TEST_HASH_ROUNDS).hash("password123")
        assert CredentialHasher(rounds=TEST_HASH_ROUNDS * 2).verify("password123", digest)

    def test_dummy_verify_does_not_raise(self, hasher):
        hasher.dummy_verify()


class TestTokenIssuer:
    def test_issue_then_verify(self, token_issuer):
        token = token_issuer.issue("jane@test.com")
        assert token_issuer.verify(token) == "jane@test.com"

    def test_token_claims(self, token_issuer):
        token = token_issuer.issue("jane@test.com")
        payload = jwt.decode(token, TEST_JWT_SECRET, algorithms=["HS256"])

        assert payload["sub"] == "jane@test.com"
        assert payload["exp"] - payload["iat"] == 24 * 3600

    def test_expired_token_rejected(self, expired_token_issuer, token_issuer):
        token = expired_token_issuer.issue("jane@test.com")
        with pytest.raises(InvalidToken):
            token_issuer.verify(token)

    def test_negative_ttl_expires_immediately(self):
        issuer = TokenIssuer(secret=TEST_JWT_SECRET, ttl=timedelta(seconds=-1))
        with pytest.raises(InvalidToken):
            issuer.verify(issuer.issue("jane@test.com"))

    def test_tampered_token_rejected(self, token_issuer):
        token = token_issuer.issue("jane@test.com")
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[::-1]])

        with pytest.raises(InvalidToken):
            token_issuer.verify(tampered)

    def test_wrong_secret_rejected(self, token_issuer):
        other = TokenIssuer(secret="some-other-secret")
        with pytest.raises(InvalidToken):
            token_issuer.verify(other.issue("jane@test.com"))

    @pytest.mark.parametrize("token", ["", "abc", "a.b.c"])
    def test_malformed_token_rejected(self, token_issuer, token):
        with pytest.raises(InvalidToken):
            token_issuer.verify(token)

    def test_token_without_subject_rejected(self, token_issuer):
        now = datetime.now(timezone.utc)
        token = jwt.encode({"iat": now, "exp": now + timedelta(hours=1)}, TEST_JWT_SECRET, algorithm="HS256")
        with pytest.raises(InvalidToken):
            token_issuer.verify(token)

    def test_empty_secret_not_allowed(self):
        with pytest.raises(ValueError):
            TokenIssuer(secret="")

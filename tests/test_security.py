from datetime import timedelta

import pytest
from jose import jwt

from app.core.errors import TokenBadSignature, TokenExpired, TokenMalformed
from app.core.security import TokenService


def _tamper_signature(token: str) -> str:
    header, body, signature = token.split(".")
    i = len(signature) // 2
    replacement = "A" if signature[i] != "A" else "B"
    return ".".join([header, body, signature[:i] + replacement + signature[i + 1:]])


class TestPasswordHasher:
    def test_verify_accepts_correct_password(self, hasher):
        digest = hasher.hash("secret1")
        assert hasher.verify("secret1", digest) is True

    def test_hash_is_salted_and_not_plaintext(self, hasher):
        first = hasher.hash("secret1")
        second = hasher.hash("secret1")
        assert first != second
        assert "secret1" not in first

    def test_flipped_plaintext_byte_fails(self, hasher):
        digest = hasher.hash("secret1")
        assert hasher.verify("secret2", digest) is False
        assert hasher.verify("Secret1", digest) is False

    def test_flipped_digest_byte_fails(self, hasher):
        digest = hasher.hash("secret1")
        i = len(digest) - 10
        replacement = "." if digest[i] != "." else "/"
        assert hasher.verify("secret1", digest[:i] + replacement + digest[i + 1:]) is False

    def test_every_byte_counts_past_the_bcrypt_input_limit(self, hasher):
        digest = hasher.hash("a" * 72 + "X")

        assert hasher.verify("a" * 72 + "X", digest) is True
        assert hasher.verify("a" * 72 + "Y", digest) is False
        assert hasher.verify("a" * 72, digest) is False

    @pytest.mark.parametrize("digest", ["", None, "not-a-bcrypt-hash"])
    def test_unusable_digest_fails_without_raising(self, hasher, digest):
        assert hasher.verify("secret1", digest) is False


class TestTokenService:
    identity = {"username": "alice", "roles": ["EMPLOYEE", "MANAGER"]}

    def test_issued_token_validates_immediately(self, token_service):
        issued = token_service.issue(self.identity)

        result = token_service.validate(issued.token)

        assert result.ok is True
        assert result.reason is None
        assert result.claims["sub"] == "alice"

    def test_claims_carry_subject_roles_and_timestamps(self, token_service, clock):
        issued = token_service.issue(self.identity)
        claims = jwt.get_unverified_claims(issued.token)

        assert claims["sub"] == "alice"
        assert claims["roles"] == ["EMPLOYEE", "MANAGER"]
        assert claims["iat"] == int(clock().timestamp())
        assert claims["exp"] - claims["iat"] == 24 * 3600
        assert claims["jti"]
        assert issued.expires_at == clock() + timedelta(hours=24)

    def test_subject_and_roles_extraction(self, token_service):
        token = token_service.issue(self.identity).token

        assert token_service.subject_of(token) == "alice"
        assert token_service.roles_of(token) == {"EMPLOYEE", "MANAGER"}

    def test_roles_of_accepts_comma_encoded_claim(self):
        token = jwt.encode({"sub": "bob", "roles": "ADMIN,EMPLOYEE", "exp": 9999999999}, "k", algorithm="HS256")
        assert TokenService.roles_of(token) == {"ADMIN", "EMPLOYEE"}

    def test_token_expires_once_clock_passes_expiry(self, token_service, clock):
        token = token_service.issue(self.identity).token

        clock.advance(hours=23, minutes=59)
        assert token_service.validate(token).ok is True

        clock.advance(minutes=1)
        result = token_service.validate(token)
        assert result.ok is False
        assert result.reason == "expired"
        with pytest.raises(TokenExpired):
            token_service.decode(token)

    def test_tampered_signature_is_a_signature_failure(self, token_service):
        token = _tamper_signature(token_service.issue(self.identity).token)

        result = token_service.validate(token)

        assert result.ok is False
        assert result.reason == "bad_signature"
        with pytest.raises(TokenBadSignature):
            token_service.decode(token)

    def test_token_signed_with_other_secret_is_rejected(self, token_service, clock):
        other = TokenService(secret_key="someone-else", algorithm="HS256", ttl=timedelta(hours=1), clock=clock)
        token = other.issue(self.identity).token

        assert token_service.validate(token).reason == "bad_signature"

    def test_tampered_claims_break_the_signature(self, token_service):
        header, _, signature = token_service.issue(self.identity).token.split(".")
        forged_body = jwt.encode({"sub": "mallory", "roles": ["ADMIN"], "exp": 9999999999}, "x").split(".")[1]

        result = token_service.validate(".".join([header, forged_body, signature]))

        assert result.reason == "bad_signature"

    @pytest.mark.parametrize("token", ["", "this-is-not-a-jwt-token", "invalid.token.here", "a.b"])
    def test_malformed_token(self, token_service, token):
        result = token_service.validate(token)

        assert result.ok is False
        assert result.reason == "malformed"

    def test_token_without_subject_is_malformed(self, token_service):
        token = jwt.encode({"roles": ["ADMIN"], "exp": 9999999999}, "unit-secret", algorithm="HS256")

        with pytest.raises(TokenMalformed):
            token_service.decode(token)

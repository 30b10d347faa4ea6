from __future__ import annotations

from datetime import timedelta
from uuid import uuid4

import pytest

from ibadgram.db.models import User
from ibadgram.exceptions import TokenValidationError
from ibadgram.security.passwords import PasswordHash, PasswordHasher
from ibadgram.security.tokens import COMPLETE_ACCOUNT_SCOPE, FULL_ACCESS_SCOPE, TokenService

pytestmark = pytest.mark.unit


def _user() -> User:
    return User(id=uuid4(), firstname="Alice", lastname="Smith", email="alice@gmail.com")


def test_salt_is_sixty_four_hex_characters() -> None:
    salt = PasswordHasher.generate_salt()

    assert len(salt) == 64
    int(salt, 16)


def test_password_round_trip() -> None:
    hasher = PasswordHasher(iterations=1000)
    salt = hasher.generate_salt()

    encoded = hasher.hash_password("correct-horse", salt)

    assert encoded.startswith("pbkdf2_sha256$1000$")
    assert hasher.verify_password("correct-horse", salt, encoded) is True
    assert hasher.verify_password("wrong-horse", salt, encoded) is False
    assert hasher.verify_password("correct-horse", hasher.generate_salt(), encoded) is False


def test_verify_rejects_malformed_hash() -> None:
    hasher = PasswordHasher(iterations=1000)

    assert hasher.verify_password("secret", "salt", "garbage") is False
    assert hasher.verify_password("secret", "salt", "") is False


def test_password_hash_parse_rejects_invalid_format() -> None:
    with pytest.raises(ValueError):
        PasswordHash.parse("invalid-format")


def test_empty_signing_key_is_rejected() -> None:
    with pytest.raises(RuntimeError):
        TokenService(signing_key="", issuer="i", audience="a")


def test_access_token_claims(token_service: TokenService) -> None:
    user = _user()

    token = token_service.generate_access_token(user, "alice")
    claims = token_service.decode_access_token(token, required_scope=FULL_ACCESS_SCOPE)

    assert claims["sub"] == str(user.id)
    assert claims["name"] == "Alice Smith"
    assert claims["unique_name"] == "alice"


def test_temporary_token_is_scoped(token_service: TokenService) -> None:
    token = token_service.generate_temporary_access_token(_user())

    assert token_service.decode_access_token(token, COMPLETE_ACCOUNT_SCOPE)["scope"] == COMPLETE_ACCOUNT_SCOPE
    with pytest.raises(TokenValidationError):
        token_service.decode_access_token(token, FULL_ACCESS_SCOPE)


def test_expired_token_is_rejected(token_service: TokenService) -> None:
    token = token_service.generate_access_token(_user(), ttl=timedelta(seconds=-5))

    with pytest.raises(TokenValidationError, match="expired"):
        token_service.decode_access_token(token)


def test_foreign_signature_is_rejected(token_service: TokenService) -> None:
    other = TokenService(
        signing_key="another-signing-key-with-enough-length-0123456789abcdef",
        issuer=token_service.issuer,
        audience=token_service.audience,
    )

    with pytest.raises(TokenValidationError):
        token_service.decode_access_token(other.generate_access_token(_user()))


def test_refresh_token_rotation_replaces_value(token_service: TokenService) -> None:
    user = _user()
    access_token = token_service.generate_access_token(user)
    record = token_service.generate_refresh_token(user, access_token, device_id="phone")
    original = record.token

    token_service.update_refresh_token(record, token_service.generate_access_token(user))

    assert len(original) == 128
    assert record.token != original
    assert record.device_id == "phone"
    assert record.is_active() is True
    assert record.expires_at - record.created_at == token_service.refresh_token_ttl

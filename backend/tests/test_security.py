from datetime import timedelta

import pytest

from userbff.core.security import (
    TokenError,
    create_access_token,
    decode_access_token,
)


def test_password_hash_is_one_way(hasher):
    hashed = hasher.hash("password123")

    assert hashed != "password123"
    assert hasher.verify("password123", hashed)
    assert not hasher.verify("password124", hashed)


def test_access_token_round_trip(settings):
    token = create_access_token("5b1f0c4e-4d1a-4c1e-9d7a-3f1f2b8c9a10", settings)

    claims = decode_access_token(token, settings)

    assert claims["sub"] == "5b1f0c4e-4d1a-4c1e-9d7a-3f1f2b8c9a10"
    assert claims["exp"] - claims["iat"] == settings.access_token_expire_minutes * 60


def test_expired_token_is_rejected(settings):
    token = create_access_token("someone", settings, expires_delta=timedelta(seconds=-5))

    with pytest.raises(TokenError):
        decode_access_token(token, settings)


def test_token_signed_with_other_secret_is_rejected(settings):
    other = settings.model_copy(update={"jwt_secret_key": "other-secret"})
    token = create_access_token("someone", other)

    with pytest.raises(TokenError):
        decode_access_token(token, settings)

from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt

from shared.config.settings import get_settings


def _secret_key() -> str:
    secret = get_settings().jwt_secret_key
    if not secret:
        raise ValueError("FATAL ERROR: JWT_SECRET_KEY is not set in the environment!")
    return secret


def create_access_token(data: dict, expires_delta: timedelta = None) -> str:
    """Creates a JWT access token with a UTC expiration."""
    settings = get_settings()
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)

    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, _secret_key(), algorithm=settings.jwt_algorithm)


def verify_access_token(token: str) -> dict | None:
    """Decodes and verifies the JWT. Returns payload if valid, None if invalid/expired."""
    try:
        return jwt.decode(token, _secret_key(), algorithms=[get_settings().jwt_algorithm])
    except JWTError:
        return None

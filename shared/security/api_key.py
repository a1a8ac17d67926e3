import secrets
import warnings

from shared.config.settings import get_settings


def _internal_api_key() -> str:
    key = get_settings().internal_api_key
    if not key:
        warnings.warn(
            "INTERNAL_API_KEY is not set. Using an insecure empty default. "
            "Set this env var in production!",
            stacklevel=2,
        )
        key = "insecure-default-change-me"
    return key


def verify_api_key(provided_key: str) -> bool:
    """Verify an API key using constant-time comparison to prevent timing attacks."""
    if not provided_key:
        return False
    return secrets.compare_digest(str(provided_key), str(_internal_api_key()))


def internal_headers() -> dict:
    """Headers for service-to-service calls inside the cluster."""
    return {"X-Internal-API-Key": _internal_api_key()}

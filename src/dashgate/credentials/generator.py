"""
Tenant API key generation.

Format: {prefix}{token}
- prefix identifies the issuer in logs and secret scanners (default ``dgk_``)
- token is 32 bytes from ``secrets`` (256 bits), URL-safe base64 without padding
"""

import secrets

DEFAULT_PREFIX = "dgk_"
TOKEN_BYTES = 32


def generate_api_key(prefix: str = DEFAULT_PREFIX) -> str:
    """Generate a new plaintext API key."""
    return f"{prefix}{secrets.token_urlsafe(TOKEN_BYTES)}"

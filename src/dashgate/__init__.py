"""dashgate: tenant API-key authorization for hosted dashboards."""

from dashgate.access.authorizer import (
    AuthorizationReason,
    AuthorizationResult,
    PermissionAuthorizer,
)
from dashgate.client import TenantAdminClient
from dashgate.credentials.generator import generate_api_key
from dashgate.credentials.hasher import ApiKeyHasher

__all__ = [
    "ApiKeyHasher",
    "AuthorizationReason",
    "AuthorizationResult",
    "PermissionAuthorizer",
    "TenantAdminClient",
    "generate_api_key",
]
__version__ = "0.1.0"

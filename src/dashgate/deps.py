"""Dependency injection singletons for dashgate."""

from dashgate.access.authorizer import PermissionAuthorizer
from dashgate.common.config import get_settings
from dashgate.common.database import DatabaseManager
from dashgate.credentials.hasher import ApiKeyHasher
from dashgate.tenants.service import TenantService
from dashgate.tenants.store import TenantStore

_db: DatabaseManager | None = None
_hasher: ApiKeyHasher | None = None
_store: TenantStore | None = None
_tenants: TenantService | None = None
_authorizer: PermissionAuthorizer | None = None


def get_db() -> DatabaseManager:
    global _db
    if _db is None:
        _db = DatabaseManager(get_settings())
    return _db


def get_hasher() -> ApiKeyHasher:
    global _hasher
    if _hasher is None:
        _hasher = ApiKeyHasher.from_settings(get_settings())
    return _hasher


def get_store() -> TenantStore:
    global _store
    if _store is None:
        _store = TenantStore()
    return _store


def get_tenant_service() -> TenantService:
    global _tenants
    if _tenants is None:
        _tenants = TenantService(
            get_hasher(),
            store=get_store(),
            key_prefix=get_settings().api_key_prefix,
        )
    return _tenants


def get_authorizer() -> PermissionAuthorizer:
    global _authorizer
    if _authorizer is None:
        settings = get_settings()
        _authorizer = PermissionAuthorizer(
            get_hasher(),
            store=get_store(),
            header_name=settings.api_key_header,
            query_param=settings.api_key_query_param,
        )
    return _authorizer


def reset_singletons() -> None:
    """Reset all singletons (for testing)."""
    global _db, _hasher, _store, _tenants, _authorizer
    _db = None
    _hasher = None
    _store = None
    _tenants = None
    _authorizer = None

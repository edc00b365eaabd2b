"""Pydantic schemas for tenant administration endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field


class TenantCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    short_code: str = Field(..., min_length=1, max_length=100)


class TenantResponse(BaseModel):
    id: int
    name: str
    short_code: str
    created_at: datetime
    last_modified_at: datetime

    model_config = {"from_attributes": True}


class TenantCreateResponse(TenantResponse):
    """Includes the raw API keys; only returned once, at creation time."""
    generated_api_keys: list[str]


class ApiKeyResponse(BaseModel):
    """Key metadata. The hash is never exposed."""
    id: int
    index: int
    is_active: bool
    created_at: datetime
    last_modified_at: datetime


class TenantDetailResponse(TenantResponse):
    api_keys: list[ApiKeyResponse]
    dashboards: list[str]


class RegenerateKeyResponse(BaseModel):
    """Includes the raw API key; only returned once."""
    key_index: int
    new_api_key: str


class DashboardPermissionCreate(BaseModel):
    dashboard_uid: str = Field(..., min_length=1, max_length=255)


class DashboardPermissionResponse(BaseModel):
    id: int
    tenant_id: int
    dashboard_uid: str
    created_at: datetime
    last_modified_at: datetime

    model_config = {"from_attributes": True}

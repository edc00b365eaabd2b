"""
TenantAdminClient SDK: sync client for the dashgate admin API.

Used by provisioning scripts and operator tooling to create tenants, rotate
their keys, and manage dashboard grants.
"""

import json
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

import httpx


@dataclass
class ClientTenant:
    """Tenant info returned by the SDK."""

    id: int
    name: str
    short_code: str
    created_at: Optional[datetime] = None
    last_modified_at: Optional[datetime] = None
    dashboards: list[str] = field(default_factory=list)


@dataclass
class ClientCreateTenantResult:
    """Result of create_tenant(). ``api_keys`` is only ever returned here."""

    success: bool
    tenant: Optional[ClientTenant] = None
    api_keys: list[str] = field(default_factory=list)
    code: str = ""
    message: str = ""


@dataclass
class ClientRegenerateKeyResult:
    """Result of regenerate_key()."""

    success: bool
    key_index: int = -1
    api_key: Optional[str] = None
    code: str = ""
    message: str = ""


@dataclass
class ClientGrantResult:
    """Result of grant_dashboard()."""

    success: bool
    dashboard_uid: str = ""
    code: str = ""
    message: str = ""


class TenantAdminClient:
    """
    Synchronous HTTP client for dashgate administration.

    Can be wrapped in async by consumers; designed for simplicity in sync contexts.
    """

    def __init__(
        self,
        server_url: str = "http://localhost:8080",
        admin_api_key: Optional[str] = None,
        api_prefix: str = "/api",
        timeout: int = 30,
        max_retries: int = 3,
        retry_backoff_base: float = 0.5,
    ):
        self.server_url = server_url.rstrip("/")
        self.admin_api_key = admin_api_key
        self.api_prefix = api_prefix.rstrip("/")
        self.max_retries = max_retries
        self.retry_backoff_base = retry_backoff_base
        self._http = httpx.Client(
            base_url=self.server_url,
            timeout=timeout,
        )

    def _admin_headers(self) -> dict[str, str]:
        headers = {}
        if self.admin_api_key:
            headers["X-Admin-Api-Key"] = self.admin_api_key
        return headers

    def _request(
        self,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Central HTTP method with retry and structured error handling.

        Retries on:
        - httpx.TimeoutException
        - 5xx status codes
        - 429 (rate limit)

        No retry on other 4xx errors.

        Returns parsed JSON on success, or structured error dict on failure.
        """
        kwargs.setdefault("headers", self._admin_headers())
        last_error = None
        for attempt in range(self.max_retries):
            try:
                resp = getattr(self._http, method)(f"{self.api_prefix}{path}", **kwargs)
                if resp.status_code >= 500 or resp.status_code == 429:
                    last_error = f"HTTP {resp.status_code}"
                    if attempt < self.max_retries - 1:
                        time.sleep(self.retry_backoff_base * (2 ** attempt))
                        continue
                    return {
                        "error": f"Server error: {resp.status_code}",
                        "code": "SERVER_ERROR",
                    }
                if resp.status_code >= 400:
                    return {
                        "error": self._error_detail(resp),
                        "code": "CLIENT_ERROR",
                        "status_code": resp.status_code,
                    }
                if resp.status_code == 204:
                    return {}
                return resp.json()
            except httpx.TimeoutException:
                last_error = "timeout"
                if attempt < self.max_retries - 1:
                    time.sleep(self.retry_backoff_base * (2 ** attempt))
                    continue
            except httpx.HTTPError as e:
                last_error = str(e)
                if attempt < self.max_retries - 1:
                    time.sleep(self.retry_backoff_base * (2 ** attempt))
                    continue
            except json.JSONDecodeError:
                return {"error": "Invalid JSON response", "code": "JSON_ERROR"}

        return {"error": f"All {self.max_retries} retries exhausted: {last_error}", "code": "CONNECTION_ERROR"}

    @staticmethod
    def _error_detail(resp: Any) -> str:
        try:
            detail = resp.json().get("detail", "")
        except (json.JSONDecodeError, AttributeError):
            return f"Client error: {resp.status_code}"
        if isinstance(detail, dict):
            return detail.get("message", "")
        return str(detail) or f"Client error: {resp.status_code}"

    @staticmethod
    def _parse_tenant(data: dict) -> ClientTenant:
        def _ts(value: Any) -> Optional[datetime]:
            if not value:
                return None
            try:
                return datetime.fromisoformat(value)
            except (ValueError, TypeError):
                return None

        return ClientTenant(
            id=data.get("id", 0),
            name=data.get("name", ""),
            short_code=data.get("short_code", ""),
            created_at=_ts(data.get("created_at")),
            last_modified_at=_ts(data.get("last_modified_at")),
            dashboards=data.get("dashboards", []),
        )

    # ── Tenants ──

    def create_tenant(self, name: str, short_code: str) -> ClientCreateTenantResult:
        data = self._request("post", "/tenants", json={"name": name, "short_code": short_code})
        if "error" in data:
            return ClientCreateTenantResult(
                success=False, code=data.get("code", ""), message=data["error"],
            )
        return ClientCreateTenantResult(
            success=True,
            tenant=self._parse_tenant(data),
            api_keys=data.get("generated_api_keys", []),
        )

    def list_tenants(self) -> list[ClientTenant]:
        data = self._request("get", "/tenants")
        if isinstance(data, dict):
            return []
        return [self._parse_tenant(t) for t in data]

    def get_tenant(self, tenant_id: int) -> Optional[ClientTenant]:
        data = self._request("get", f"/tenants/{tenant_id}")
        if "error" in data:
            return None
        return self._parse_tenant(data)

    def delete_tenant(self, tenant_id: int) -> bool:
        data = self._request("delete", f"/tenants/{tenant_id}")
        return "error" not in data

    # ── API keys ──

    def regenerate_key(self, tenant_id: int, key_index: int) -> ClientRegenerateKeyResult:
        data = self._request("post", f"/tenants/{tenant_id}/regenerateKey/{key_index}")
        if "error" in data:
            return ClientRegenerateKeyResult(
                success=False, key_index=key_index,
                code=data.get("code", ""), message=data["error"],
            )
        return ClientRegenerateKeyResult(
            success=True,
            key_index=data.get("key_index", key_index),
            api_key=data.get("new_api_key"),
        )

    def set_key_active(self, tenant_id: int, key_index: int, active: bool) -> bool:
        action = "activate" if active else "deactivate"
        data = self._request("post", f"/tenants/{tenant_id}/keys/{key_index}/{action}")
        return "error" not in data and data.get("is_active") == active

    # ── Dashboard permissions ──

    def grant_dashboard(self, tenant_id: int, dashboard_uid: str) -> ClientGrantResult:
        data = self._request(
            "post", f"/tenants/{tenant_id}/dashboards",
            json={"dashboard_uid": dashboard_uid},
        )
        if "error" in data:
            return ClientGrantResult(
                success=False, dashboard_uid=dashboard_uid,
                code=data.get("code", ""), message=data["error"],
            )
        return ClientGrantResult(success=True, dashboard_uid=data.get("dashboard_uid", dashboard_uid))

    def list_dashboards(self, tenant_id: int) -> list[str]:
        data = self._request("get", f"/tenants/{tenant_id}/dashboards")
        if isinstance(data, dict):
            return []
        return [p.get("dashboard_uid", "") for p in data]

    def revoke_dashboard(self, tenant_id: int, dashboard_uid: str) -> bool:
        data = self._request("delete", f"/tenants/{tenant_id}/dashboards/{dashboard_uid}")
        return "error" not in data

    # ── Lifecycle ──

    def close(self) -> None:
        """Close the HTTP client."""
        self._http.close()

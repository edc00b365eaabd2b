"""Tests for client.py: TenantAdminClient SDK with resilience."""

import json
from unittest.mock import MagicMock, patch

import httpx

from dashgate.client import (
    ClientCreateTenantResult,
    ClientTenant,
    TenantAdminClient,
)


def _mock_response(data, status_code: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = data
    return resp


def _client(**kwargs) -> TenantAdminClient:
    client = TenantAdminClient(admin_api_key="admin-key", **kwargs)
    client._http = MagicMock()
    return client


TENANT_JSON = {
    "id": 1,
    "name": "Acme",
    "short_code": "ACME",
    "created_at": "2026-01-01T00:00:00+00:00",
    "last_modified_at": "2026-01-01T00:00:00+00:00",
}


class TestTenantAdminClientInit:
    def test_defaults(self):
        client = TenantAdminClient()
        assert client.server_url == "http://localhost:8080"
        assert client.admin_api_key is None
        assert client.api_prefix == "/api"
        assert client.max_retries == 3
        assert client._admin_headers() == {}
        client.close()

    def test_custom_params(self):
        client = TenantAdminClient(
            server_url="http://custom:9090/",
            admin_api_key="admin-key",
            api_prefix="/v2/",
            timeout=10,
            max_retries=5,
        )
        assert client.server_url == "http://custom:9090"
        assert client.api_prefix == "/v2"
        assert client.max_retries == 5
        assert client._admin_headers() == {"X-Admin-Api-Key": "admin-key"}
        client.close()


class TestCreateTenant:
    def test_success_returns_keys(self):
        client = _client()
        client._http.post.return_value = _mock_response(
            {**TENANT_JSON, "generated_api_keys": ["dgk_one", "dgk_two"]}, status_code=201,
        )

        result = client.create_tenant("Acme", "ACME")
        assert isinstance(result, ClientCreateTenantResult)
        assert result.success is True
        assert result.tenant.name == "Acme"
        assert result.tenant.created_at.year == 2026
        assert result.api_keys == ["dgk_one", "dgk_two"]

        args, kwargs = client._http.post.call_args
        assert args[0] == "/api/tenants"
        assert kwargs["json"] == {"name": "Acme", "short_code": "ACME"}
        assert kwargs["headers"] == {"X-Admin-Api-Key": "admin-key"}
        client.close()

    def test_conflict(self):
        client = _client()
        client._http.post.return_value = _mock_response(
            {"detail": {"message": "Tenant name already exists", "field": "name"}},
            status_code=409,
        )

        result = client.create_tenant("Acme", "ACME")
        assert result.success is False
        assert result.code == "CLIENT_ERROR"
        assert result.message == "Tenant name already exists"
        assert result.api_keys == []
        client.close()


class TestTenantQueries:
    def test_list_tenants(self):
        client = _client()
        client._http.get.return_value = _mock_response([TENANT_JSON, {**TENANT_JSON, "id": 2}])

        tenants = client.list_tenants()
        assert [t.id for t in tenants] == [1, 2]
        assert all(isinstance(t, ClientTenant) for t in tenants)
        client.close()

    def test_list_tenants_error_returns_empty(self):
        client = _client()
        client._http.get.return_value = _mock_response({"detail": "Invalid admin API key"}, 403)
        assert client.list_tenants() == []
        client.close()

    def test_get_tenant(self):
        client = _client()
        client._http.get.return_value = _mock_response(
            {**TENANT_JSON, "api_keys": [], "dashboards": ["dash-1"]}
        )
        tenant = client.get_tenant(1)
        assert tenant.dashboards == ["dash-1"]
        assert client._http.get.call_args[0][0] == "/api/tenants/1"
        client.close()

    def test_get_tenant_not_found(self):
        client = _client()
        client._http.get.return_value = _mock_response({"detail": "Tenant not found"}, 404)
        assert client.get_tenant(99) is None
        client.close()

    def test_delete_tenant(self):
        client = _client()
        client._http.delete.return_value = _mock_response(None, status_code=204)
        assert client.delete_tenant(1) is True
        client._http.delete.return_value = _mock_response({"detail": "Tenant not found"}, 404)
        assert client.delete_tenant(1) is False
        client.close()


class TestParseTenant:
    def test_invalid_timestamp(self):
        tenant = TenantAdminClient._parse_tenant({**TENANT_JSON, "created_at": "not-a-date"})
        assert tenant.created_at is None
        assert tenant.last_modified_at is not None

    def test_missing_fields(self):
        tenant = TenantAdminClient._parse_tenant({})
        assert tenant.id == 0
        assert tenant.dashboards == []


class TestKeys:
    def test_regenerate_key(self):
        client = _client()
        client._http.post.return_value = _mock_response(
            {"key_index": 1, "new_api_key": "dgk_fresh"}
        )
        result = client.regenerate_key(1, 1)
        assert result.success is True
        assert result.api_key == "dgk_fresh"
        assert client._http.post.call_args[0][0] == "/api/tenants/1/regenerateKey/1"
        client.close()

    def test_regenerate_key_bad_index(self):
        client = _client()
        client._http.post.return_value = _mock_response(
            {"detail": "key_index must be between 0 and 1"}, status_code=400,
        )
        result = client.regenerate_key(1, 5)
        assert result.success is False
        assert result.api_key is None
        assert "key_index" in result.message
        client.close()

    def test_set_key_active(self):
        client = _client()
        client._http.post.return_value = _mock_response({"id": 3, "index": 0, "is_active": False})
        assert client.set_key_active(1, 0, False) is True
        assert client._http.post.call_args[0][0] == "/api/tenants/1/keys/0/deactivate"
        client.close()


class TestDashboards:
    def test_grant(self):
        client = _client()
        client._http.post.return_value = _mock_response(
            {"id": 1, "tenant_id": 1, "dashboard_uid": "dash-42"}, status_code=201,
        )
        result = client.grant_dashboard(1, "dash-42")
        assert result.success is True
        assert result.dashboard_uid == "dash-42"
        client.close()

    def test_grant_duplicate(self):
        client = _client()
        client._http.post.return_value = _mock_response(
            {"detail": {"message": "Permission already exists", "field": "dashboard_uid"}},
            status_code=409,
        )
        result = client.grant_dashboard(1, "DASH-42")
        assert result.success is False
        assert result.message == "Permission already exists"
        client.close()

    def test_list_and_revoke(self):
        client = _client()
        client._http.get.return_value = _mock_response(
            [{"id": 1, "tenant_id": 1, "dashboard_uid": "dash-42"}]
        )
        client._http.delete.return_value = _mock_response(None, status_code=204)
        assert client.list_dashboards(1) == ["dash-42"]
        assert client.revoke_dashboard(1, "dash-42") is True
        assert client._http.delete.call_args[0][0] == "/api/tenants/1/dashboards/dash-42"
        client.close()


# ── Resilience ──


class TestRetryOnTimeout:
    @patch("dashgate.client.time.sleep")
    def test_retry_on_timeout(self, mock_sleep):
        client = _client(max_retries=3)
        client._http.post.side_effect = httpx.TimeoutException("timeout")

        result = client.create_tenant("Acme", "ACME")
        assert result.success is False
        assert result.code == "CONNECTION_ERROR"
        assert client._http.post.call_count == 3
        assert mock_sleep.call_count == 2
        client.close()


class TestNoRetryOn4xx:
    def test_no_retry_on_404(self):
        client = _client(max_retries=3)
        client._http.get.return_value = _mock_response({}, status_code=404)

        result = client._request("get", "/tenants/1")
        assert result["code"] == "CLIENT_ERROR"
        assert result["status_code"] == 404
        assert client._http.get.call_count == 1  # no retry
        client.close()


class TestRetryOn5xxAnd429:
    @patch("dashgate.client.time.sleep")
    def test_retry_on_500(self, mock_sleep):
        client = _client(max_retries=3)
        client._http.get.return_value = _mock_response({}, status_code=500)

        result = client._request("get", "/tenants")
        assert result["code"] == "SERVER_ERROR"
        assert client._http.get.call_count == 3
        client.close()

    @patch("dashgate.client.time.sleep")
    def test_recovers_after_429(self, mock_sleep):
        client = _client(max_retries=3)
        client._http.get.side_effect = [
            _mock_response({}, status_code=429),
            _mock_response([TENANT_JSON]),
        ]

        assert len(client.list_tenants()) == 1
        assert client._http.get.call_count == 2
        mock_sleep.assert_called_once_with(0.5)
        client.close()


class TestRetriesExhausted:
    @patch("dashgate.client.time.sleep")
    def test_all_retries_exhausted(self, mock_sleep):
        client = _client(max_retries=2)
        client._http.post.side_effect = httpx.ConnectError("refused")

        result = client._request("post", "/tenants")
        assert result["code"] == "CONNECTION_ERROR"
        assert "2 retries exhausted" in result["error"]
        client.close()


class TestJsonDecodeError:
    def test_json_decode_error(self):
        client = _client()
        mock_resp = MagicMock()
        mock_resp.status_code = 200
        mock_resp.json.side_effect = json.JSONDecodeError("err", "", 0)
        client._http.get.return_value = mock_resp

        result = client._request("get", "/tenants")
        assert result["code"] == "JSON_ERROR"
        client.close()

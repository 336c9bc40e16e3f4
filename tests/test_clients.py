import pytest
import json
import os
import sys

import httpx

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tools.errors import ConfigurationError, CrmReadError, CrmWriteError, ProviderError
from tools.hubspot import HubSpotClient
from tools.kickbox import KickboxClient
from tools.settings import Settings


class TestKickboxClient:
    """Test the Kickbox verify call."""

    def setup_method(self):
        """Set up test fixtures."""
        self.requests = []

    def _client(self, handler):
        def record(request):
            self.requests.append(request)
            return handler(request)
        return KickboxClient("kb_test", transport=httpx.MockTransport(record))

    def test_verify_success(self):
        """Test the request shape and the returned body."""
        client = self._client(lambda request: httpx.Response(200, json={"result": "deliverable", "success": True}))

        data = client.verify("jane+test@example.com")

        assert data["result"] == "deliverable"
        request = self.requests[0]
        assert request.method == "GET"
        assert request.url.host == "api.kickbox.com"
        assert request.url.path == "/v2/verify"
        assert request.url.params["email"] == "jane+test@example.com"
        assert request.url.params["apikey"] == "kb_test"

    def test_error_field_is_provider_error(self):
        """Test an `error` field in a 200 response is a failure."""
        client = self._client(lambda request: httpx.Response(200, json={"success": False, "error": "invalid_email"}))

        with pytest.raises(ProviderError) as exc_info:
            client.verify("nope")

        assert "invalid_email" in str(exc_info.value)

    def test_non_2xx_is_provider_error(self):
        """Test HTTP errors from Kickbox are raised."""
        client = self._client(lambda request: httpx.Response(403, text="Forbidden"))

        with pytest.raises(ProviderError) as exc_info:
            client.verify("jane@example.com")

        assert "403" in str(exc_info.value)

    def test_transport_failure_is_provider_error(self):
        """Test connection problems are raised as provider errors."""
        def fail(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = self._client(fail)

        with pytest.raises(ProviderError):
            client.verify("jane@example.com")

    def test_non_json_body_is_provider_error(self):
        client = self._client(lambda request: httpx.Response(200, text="<html>maintenance</html>"))

        with pytest.raises(ProviderError):
            client.verify("jane@example.com")


class TestHubSpotClient:
    """Test the HubSpot contact read and update calls."""

    def setup_method(self):
        """Set up test fixtures."""
        self.requests = []

    def _client(self, handler):
        def record(request):
            self.requests.append(request)
            return handler(request)
        return HubSpotClient("pat_test", transport=httpx.MockTransport(record))

    def test_get_contact(self):
        """Test properties are requested and returned."""
        client = self._client(lambda request: httpx.Response(
            200, json={"id": "101", "properties": {"email": "jane@example.com", "hs_object_id": "101"}}
        ))

        properties = client.get_contact("101", ["email", "hs_object_id"])

        assert properties["email"] == "jane@example.com"
        request = self.requests[0]
        assert request.url.path == "/crm/v3/objects/contacts/101"
        assert request.url.params["properties"] == "email,hs_object_id"
        assert request.headers["Authorization"] == "Bearer pat_test"

    def test_get_contact_not_found(self):
        """Test read failures keep HubSpot's status and message."""
        client = self._client(lambda request: httpx.Response(404, json={"status": "error", "message": "Object not found"}))

        with pytest.raises(CrmReadError) as exc_info:
            client.get_contact("999", ["email"])

        assert exc_info.value.status_code == 404
        assert "Object not found" in exc_info.value.message

    def test_update_contact(self):
        """Test the patch is sent as a properties object."""
        client = self._client(lambda request: httpx.Response(200, json={"id": "101", "properties": {}}))

        client.update_contact("101", {"kickbox_result": "deliverable", "kickbox_free": "true"})

        request = self.requests[0]
        assert request.method == "PATCH"
        assert request.url.path == "/crm/v3/objects/contacts/101"
        assert json.loads(request.content) == {
            "properties": {"kickbox_result": "deliverable", "kickbox_free": "true"}
        }

    def test_update_contact_failure(self):
        """Test update failures are raised as CRM write errors."""
        client = self._client(lambda request: httpx.Response(400, json={"message": "Property values were not valid"}))

        with pytest.raises(CrmWriteError) as exc_info:
            client.update_contact("101", {"kickbox_result": "deliverable"})

        assert exc_info.value.status_code == 400
        assert "Property values were not valid" in exc_info.value.message

    def test_get_contact_html_body(self):
        """Test a 200 reply that is not JSON is a CRM read error."""
        client = self._client(lambda request: httpx.Response(200, text="<html>ok</html>"))

        with pytest.raises(CrmReadError):
            client.get_contact("101", ["email"])

    def test_get_contact_unexpected_shape(self):
        """Test JSON that is not a contact object is a CRM read error."""
        client = self._client(lambda request: httpx.Response(200, json=["101"]))

        with pytest.raises(CrmReadError):
            client.get_contact("101", ["email"])

        client = self._client(lambda request: httpx.Response(200, json={"id": "101", "properties": "email"}))

        with pytest.raises(CrmReadError):
            client.get_contact("101", ["email"])

    def test_update_contact_html_body(self):
        """Test a successful update does not depend on the response body."""
        client = self._client(lambda request: httpx.Response(200, text="<html>ok</html>"))

        assert client.update_contact("101", {"kickbox_result": "deliverable"}) is None
        assert self.requests[0].method == "PATCH"

    def test_update_contact_transport_failure(self):
        def fail(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client = self._client(fail)

        with pytest.raises(CrmWriteError):
            client.update_contact("101", {})


class TestSettings:
    """Test configuration loading."""

    def test_from_env(self, monkeypatch):
        """Test the primary variable names."""
        monkeypatch.setenv("KICKBOX_API_KEY", "kb_env")
        monkeypatch.setenv("HUBSPOT_ACCESS_TOKEN", "pat_env")

        settings = Settings.from_env()

        assert settings.kickbox_api_key == "kb_env"
        assert settings.hubspot_access_token == "pat_env"
        assert settings.kickbox_base_url == "https://api.kickbox.com/v2"

    def test_from_env_secret_names(self, monkeypatch):
        """Test the HubSpot project secret names are accepted."""
        monkeypatch.delenv("KICKBOX_API_KEY", raising=False)
        monkeypatch.delenv("HUBSPOT_ACCESS_TOKEN", raising=False)
        monkeypatch.setenv("kickbox", "kb_secret")
        monkeypatch.setenv("private_app", "pat_secret")

        settings = Settings.from_env()

        assert settings.kickbox_api_key == "kb_secret"
        assert settings.hubspot_access_token == "pat_secret"

    def test_require(self):
        """Test missing secrets raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            Settings(hubspot_access_token="pat").require()

        with pytest.raises(ConfigurationError):
            Settings(kickbox_api_key="kb").require()

        assert Settings(hubspot_access_token="pat").require(kickbox=False)


if __name__ == "__main__":
    # Run tests
    pytest.main([__file__, "-v"])

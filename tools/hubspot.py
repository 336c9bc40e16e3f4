import httpx
from typing import Dict, Any, List, Optional
from loguru import logger

from tools.errors import CrmReadError, CrmWriteError
from tools.settings import DEFAULT_HUBSPOT_BASE_URL


def _error_message(response: httpx.Response) -> str:
    """Pull HubSpot's error message out of a failed response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return body["message"]
    return response.text or f"HTTP {response.status_code}"


class HubSpotClient:
    """HubSpot CRM contacts client (CRM v3 objects API)."""

    def __init__(self, access_token: str, base_url: str = DEFAULT_HUBSPOT_BASE_URL,
                 transport: Optional[httpx.BaseTransport] = None):
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.transport = transport

    def _get_headers(self) -> Dict[str, str]:
        """Get headers for HubSpot API requests."""
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json"
        }

    def get_contact(self, contact_id: str, properties: List[str]) -> Dict[str, Any]:
        """
        Fetch selected properties of one contact.

        Args:
            contact_id: HubSpot contact (object) id
            properties: Property names to read

        Returns:
            Mapping of property name to value; HubSpot stores every value as a string
        """
        try:
            with httpx.Client(transport=self.transport) as client:
                response = client.get(
                    f"{self.base_url}/crm/v3/objects/contacts/{contact_id}",
                    headers=self._get_headers(),
                    params={"properties": ",".join(properties)}
                )
        except httpx.HTTPError as e:
            logger.error(f"Error fetching contact {contact_id} from HubSpot: {e}")
            raise CrmReadError(f"Failed to fetch contact from HubSpot: {e}") from e

        if response.is_error:
            message = _error_message(response)
            logger.error(f"HubSpot contact read failed ({response.status_code}): {message}")
            raise CrmReadError(
                f"Failed to fetch contact from HubSpot: {message}",
                status_code=response.status_code
            )

        try:
            body = response.json()
        except ValueError as e:
            logger.error(f"HubSpot returned a non-JSON body for contact {contact_id}: {response.text}")
            raise CrmReadError("HubSpot returned an unreadable contact response") from e

        if not isinstance(body, dict):
            raise CrmReadError("HubSpot returned an unexpected contact response shape")
        properties = body.get("properties")
        if properties is None:
            return {}
        if not isinstance(properties, dict):
            raise CrmReadError("HubSpot returned an unexpected contact response shape")
        return properties

    def update_contact(self, contact_id: str, properties: Dict[str, str]) -> None:
        """Update properties on an existing contact. The response body is not read."""
        try:
            with httpx.Client(transport=self.transport) as client:
                response = client.patch(
                    f"{self.base_url}/crm/v3/objects/contacts/{contact_id}",
                    headers=self._get_headers(),
                    json={"properties": properties}
                )
        except httpx.HTTPError as e:
            logger.error(f"Error updating HubSpot contact {contact_id}: {e}")
            raise CrmWriteError(f"Failed to update HubSpot contact: {e}") from e

        if response.is_error:
            message = _error_message(response)
            logger.error(f"HubSpot contact update failed ({response.status_code}): {message}")
            raise CrmWriteError(
                f"Failed to update HubSpot contact: {message}",
                status_code=response.status_code
            )

        logger.info(f"Successfully updated HubSpot contact {contact_id}")

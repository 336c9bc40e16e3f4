import httpx
from typing import Dict, Any, Optional
from loguru import logger

from tools.errors import ProviderError
from tools.settings import DEFAULT_KICKBOX_BASE_URL


class KickboxClient:
    """Kickbox single-email verification client."""

    def __init__(self, api_key: str, base_url: str = DEFAULT_KICKBOX_BASE_URL,
                 transport: Optional[httpx.BaseTransport] = None):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.transport = transport

    def verify(self, email: str) -> Dict[str, Any]:
        """
        Verify one email address.

        Args:
            email: Address to verify

        Returns:
            Raw Kickbox response body

        Raises:
            ProviderError: transport failure, non-2xx status, unreadable body,
                or a body carrying an `error` field
        """
        try:
            with httpx.Client(transport=self.transport) as client:
                response = client.get(
                    f"{self.base_url}/verify",
                    params={"email": email, "apikey": self.api_key}
                )
        except httpx.HTTPError as e:
            logger.error(f"Error during Kickbox API call: {e}")
            raise ProviderError(f"Failed to verify email with Kickbox: {e}") from e

        if not response.is_success:
            logger.error(f"Kickbox API responded with status: {response.status_code}, body: {response.text}")
            raise ProviderError(
                f"Kickbox API responded with status: {response.status_code} - {response.text}"
            )

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Kickbox returned a non-JSON body: {response.text}")
            raise ProviderError("Kickbox API returned an unreadable response") from e

        if not isinstance(data, dict):
            raise ProviderError("Kickbox API returned an unexpected response shape")

        logger.info(f"Kickbox raw result for {email}: {data}")

        if data.get("error"):
            logger.error(f"Kickbox returned an error: {data['error']}")
            raise ProviderError(f"Kickbox API error: {data['error']}")

        return data

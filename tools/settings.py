import os
from dataclasses import dataclass
from typing import Optional
from loguru import logger

from tools.errors import ConfigurationError

DEFAULT_KICKBOX_BASE_URL = "https://api.kickbox.com/v2"
DEFAULT_HUBSPOT_BASE_URL = "https://api.hubapi.com"


@dataclass(frozen=True)
class Settings:
    """Secrets and endpoints for one deployment of the verifier."""
    kickbox_api_key: Optional[str] = None
    hubspot_access_token: Optional[str] = None
    kickbox_base_url: str = DEFAULT_KICKBOX_BASE_URL
    hubspot_base_url: str = DEFAULT_HUBSPOT_BASE_URL
    log_file: str = "logs/app.log"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from environment variables.

        The HubSpot project secret names (`kickbox`, `private_app`) are accepted
        as fallbacks so the same secrets work when deployed next to the app.
        """
        return cls(
            kickbox_api_key=os.getenv("KICKBOX_API_KEY") or os.getenv("kickbox"),
            hubspot_access_token=os.getenv("HUBSPOT_ACCESS_TOKEN") or os.getenv("private_app"),
            kickbox_base_url=os.getenv("KICKBOX_BASE_URL", DEFAULT_KICKBOX_BASE_URL),
            hubspot_base_url=os.getenv("HUBSPOT_BASE_URL", DEFAULT_HUBSPOT_BASE_URL),
            log_file=os.getenv("LOG_FILE", "logs/app.log"),
        )

    def require(self, kickbox: bool = True, hubspot: bool = True) -> "Settings":
        """Raise ConfigurationError if a needed secret is missing."""
        if kickbox and not self.kickbox_api_key:
            logger.error("Kickbox API key not configured")
            raise ConfigurationError("Kickbox API key not configured.")
        if hubspot and not self.hubspot_access_token:
            logger.error("HubSpot access token not configured")
            raise ConfigurationError("HubSpot Access Token not configured.")
        return self

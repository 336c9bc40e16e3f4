from typing import Optional, Any


class VerificationError(Exception):
    """Base class for every failure surfaced to an invocation context."""

    code = "verification_error"
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None, result: Any = None):
        super().__init__(message)
        self.message = message
        if status_code:
            self.status_code = status_code
        # Canonical result already in hand when the failure happened (CRM write only)
        self.result = result

    def to_dict(self):
        return {"error": self.code, "message": self.message}


class ConfigurationError(VerificationError):
    """A required secret is missing. Needs operator action."""

    code = "configuration_error"
    status_code = 500


class ValidationError(VerificationError):
    """The caller left out a required input field."""

    code = "validation_error"
    status_code = 400


class ProviderError(VerificationError):
    """Kickbox call failed: transport error, non-2xx, or an `error` field in the body."""

    code = "provider_error"
    status_code = 502


class CrmReadError(VerificationError):
    code = "crm_read_error"
    status_code = 502


class CrmWriteError(VerificationError):
    code = "crm_write_error"
    status_code = 502

from dataclasses import dataclass
from typing import TypedDict, Optional, Dict, Any

from graph.result import VerificationResult
from tools.errors import VerificationError


@dataclass(frozen=True)
class VerificationRequest:
    """What an invocation context asks the pipeline to verify."""
    contact_id: Optional[str] = None
    email: Optional[str] = None
    require_email: bool = False       # caller must supply the email itself


class VerificationState(TypedDict, total=False):
    """State shape for the verification workflow."""
    request: VerificationRequest
    contact_id: Optional[str]
    email: Optional[str]             # supplied by caller or read from the contact
    raw: Dict[str, Any]              # Kickbox response body
    result: VerificationResult       # canonical result
    patch: Dict[str, str]            # HubSpot property update
    error: Optional[VerificationError]

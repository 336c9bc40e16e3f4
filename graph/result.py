"""
Kickbox result normalization and HubSpot property mapping.

Kickbox answers with native JSON types, while HubSpot hands every property
back as a string. Both shapes go through the same `normalize` so a result read
back from the CRM compares equal to the one that was written.
"""

import math
from dataclasses import dataclass, fields
from datetime import datetime, timezone
from typing import Dict, Any, Optional

BOOLEAN_FIELDS = ("disposable", "accept_all", "role", "free", "success")

# canonical field -> HubSpot contact property
PROPERTY_MAP = {
    "result": "kickbox_result",
    "reason": "kickbox_reason",
    "disposable": "kickbox_disposable",
    "accept_all": "kickbox_accept_all",
    "role": "kickbox_role",
    "free": "kickbox_free",
    "sendex": "kickbox_sendex",
    "did_you_mean": "kickbox_did_you_mean",
    "success": "kickbox_success",
    "email_normalized": "kickbox_email_normalized",
    "verified_at": "kickbox_verification_date",
}


@dataclass(frozen=True)
class VerificationResult:
    """Canonical, typed outcome of one Kickbox verification."""
    result: str
    reason: Optional[str]
    disposable: bool
    accept_all: bool
    role: bool
    free: bool
    success: bool
    sendex: float
    did_you_mean: Optional[str]
    email_normalized: Optional[str]
    verified_at: Optional[str]

    def as_output_fields(self) -> Dict[str, Any]:
        """kickbox_* keys with native values, for function and workflow responses."""
        return {PROPERTY_MAP[f.name]: getattr(self, f.name) for f in fields(self)}


def iso_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC with millisecond precision, e.g. 2024-05-01T10:00:00.000Z"""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_timestamp() -> str:
    return iso_timestamp(datetime.now(timezone.utc))


def coerce_bool(value: Any) -> bool:
    """
    Coerce a flag that may arrive as a native boolean (Kickbox) or as the
    string "true"/"false" (HubSpot properties). Anything else is False.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return False


def parse_sendex(value: Any) -> float:
    """Parse the Sendex score; 0.0 when it cannot be read. Range is not enforced."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0.0
    return score if math.isfinite(score) else 0.0


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def normalize(raw: Dict[str, Any], verified_at: Optional[str] = None) -> VerificationResult:
    """
    Convert a raw Kickbox response into a VerificationResult.

    Never raises: missing or malformed fields fall back to defaults. Responses
    carrying an `error` field must be rejected before calling this.

    Args:
        raw: Kickbox response body (or an equivalent dict of string values)
        verified_at: Timestamp to record; defaults to now

    Returns:
        Immutable canonical result
    """
    raw = raw if isinstance(raw, dict) else {}

    return VerificationResult(
        result=_optional_str(raw.get("result")) or "",
        reason=_optional_str(raw.get("reason")),
        sendex=parse_sendex(raw.get("sendex")),
        did_you_mean=_optional_str(raw.get("did_you_mean")),
        email_normalized=_optional_str(raw.get("email")),
        verified_at=verified_at or utc_timestamp(),
        **{name: coerce_bool(raw.get(name)) for name in BOOLEAN_FIELDS}
    )


def _to_property_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def to_property_patch(result: VerificationResult) -> Dict[str, str]:
    """
    Build the HubSpot property update for a result.

    Fields with no value are left out so a partial result never clears data
    already stored on the contact. False, 0.0 and "" are kept.
    """
    patch = {}
    for name, prop in PROPERTY_MAP.items():
        value = getattr(result, name)
        if value is None:
            continue
        patch[prop] = _to_property_value(value)
    return patch

from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, Any, Optional

from graph.result import VerificationResult, PROPERTY_MAP, iso_timestamp, normalize

# Properties the contact card reads
CARD_PROPERTIES = ["email", "hs_object_id", *PROPERTY_MAP.values()]

STATUS_VARIANTS = {
    "deliverable": "success",
    "undeliverable": "danger",
    "risky": "warning",
    "unknown": "neutral",
}


def _verification_date(value: Any) -> Optional[str]:
    """Stored dates may be ISO strings or epoch milliseconds."""
    if value in (None, ""):
        return None
    try:
        millis = float(value)
    except (TypeError, ValueError):
        return str(value)
    try:
        return iso_timestamp(datetime.fromtimestamp(millis / 1000, tz=timezone.utc))
    except (OverflowError, OSError, ValueError):
        return str(value)


def from_kickbox_fields(fields: Dict[str, Any]) -> Optional[VerificationResult]:
    """
    Rebuild a VerificationResult from kickbox_* keyed values.

    Works on HubSpot contact properties (all strings) and on a verify-email
    response body (native values) alike. Returns None when nothing was verified yet.
    """
    if not fields or not fields.get("kickbox_result"):
        return None

    raw = {}
    for name, prop in PROPERTY_MAP.items():
        value = fields.get(prop)
        raw[name] = None if value == "" else value
    raw["email"] = raw.pop("email_normalized")
    verified_at = _verification_date(raw.pop("verified_at"))

    result = normalize(raw, verified_at=verified_at)
    # Never stamp a stored result with today's date
    return result if verified_at else replace(result, verified_at=None)


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def display_fields(result: VerificationResult) -> Dict[str, Any]:
    """Card rendering of a result. A missing reason shows as "N/A" here only."""
    status = result.result or ""
    sendex = min(max(result.sendex, 0.0), 1.0)
    return {
        "status": status.upper(),
        "status_variant": STATUS_VARIANTS.get(status.lower(), "default"),
        "reason": result.reason.replace("_", " ") if result.reason else "N/A",
        "sendex_percent": f"{sendex * 100:.2f}",
        "success": _yes_no(result.success),
        "disposable": _yes_no(result.disposable),
        "accept_all": _yes_no(result.accept_all),
        "role": _yes_no(result.role),
        "free": _yes_no(result.free),
        "did_you_mean": result.did_you_mean,
        "verification_date": result.verified_at,
        "verified_email": result.email_normalized,
    }


def build_card(properties: Dict[str, Any]) -> Dict[str, Any]:
    """Side-panel card view model for a contact's stored properties."""
    email = properties.get("email") or None
    object_id = properties.get("hs_object_id") or None

    errors = []
    if not email:
        errors.append("No email found for this contact. Cannot verify.")
    if not object_id:
        errors.append("Could not load contact ID. Cannot verify.")

    result = from_kickbox_fields(properties)
    return {
        "contact_email": email or "No email found.",
        "contact_id": object_id or "N/A",
        "can_verify": not errors,
        "error": " ".join(errors) or None,
        "verification": display_fields(result) if result else None,
    }

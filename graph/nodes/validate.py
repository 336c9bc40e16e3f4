from graph.state import VerificationState
from tools.errors import ValidationError
from loguru import logger

def validate(state: VerificationState) -> VerificationState:
    """Reject requests missing a contact id (or an email the caller had to supply)."""
    request = state["request"]
    contact_id = str(request.contact_id).strip() if request.contact_id is not None else ""
    email = str(request.email or "").strip()

    if not contact_id:
        logger.error("Verification request is missing a contact ID")
        state["error"] = ValidationError("Contact ID is required.")
        return state

    if request.require_email and not email:
        logger.error(f"Verification request for contact {contact_id} is missing an email")
        state["error"] = ValidationError("Missing 'email' or 'contactId' in request.")
        return state

    state["contact_id"] = contact_id
    state["email"] = email or None
    logger.info(f"Verification requested for contact {contact_id}")
    return state

from graph.state import VerificationState
from tools.errors import CrmReadError, ValidationError
from loguru import logger

def resolve_email(state: VerificationState, hubspot) -> VerificationState:
    """Read the contact's email from HubSpot when the caller did not pass one."""
    contact_id = state["contact_id"]

    try:
        properties = hubspot.get_contact(contact_id, ["email"])
    except CrmReadError as e:
        logger.error(f"Email lookup failed for contact {contact_id}: {e}")
        state["error"] = e
        return state

    email = (properties.get("email") or "").strip()
    if not email:
        logger.warning(f"Contact {contact_id} has no email, skipping Kickbox verification")
        state["error"] = ValidationError(f"Contact {contact_id} has no email. No verification performed.")
        return state

    logger.info(f"Fetched email for contact {contact_id}: {email}")
    state["email"] = email
    return state

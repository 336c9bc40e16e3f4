from graph.state import VerificationState
from tools.errors import CrmWriteError
from loguru import logger

def update_crm(state: VerificationState, hubspot) -> VerificationState:
    """Write the property patch onto the HubSpot contact."""
    contact_id = state["contact_id"]

    try:
        hubspot.update_contact(contact_id, state["patch"])
    except CrmWriteError as e:
        logger.error(f"Could not store Kickbox results on contact {contact_id}: {e}")
        # Verification succeeded; keep the result on the error for partial reporting
        e.result = state["result"]
        state["error"] = e
        return state

    logger.info(f"Stored Kickbox results on contact {contact_id}")
    return state

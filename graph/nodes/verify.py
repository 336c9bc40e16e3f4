from graph.state import VerificationState
from tools.errors import ProviderError
from loguru import logger

def call_provider(state: VerificationState, kickbox) -> VerificationState:
    """Verify the email with Kickbox."""
    email = state["email"]
    logger.info(f"Calling Kickbox for contact {state['contact_id']}: {email}")

    try:
        state["raw"] = kickbox.verify(email)
    except ProviderError as e:
        logger.error(f"Kickbox verification failed for {email}: {e}")
        state["error"] = e

    return state

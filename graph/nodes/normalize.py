from graph.state import VerificationState
from graph.result import normalize as normalize_result, to_property_patch
from loguru import logger

def normalize(state: VerificationState) -> VerificationState:
    """Turn the raw Kickbox body into the canonical result."""
    state["result"] = normalize_result(state["raw"])
    logger.info(f"Kickbox result for {state['email']}: {state['result'].result or 'unknown'}")
    return state

def build_patch(state: VerificationState) -> VerificationState:
    """Project the canonical result onto kickbox_* contact properties."""
    state["patch"] = to_property_patch(state["result"])
    return state

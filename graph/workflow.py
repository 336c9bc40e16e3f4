from typing import Optional
from loguru import logger
from langgraph.graph import StateGraph, START, END

from graph.state import VerificationState, VerificationRequest
from graph.nodes.validate import validate
from graph.nodes.resolve_email import resolve_email
from graph.nodes.verify import call_provider
from graph.nodes.normalize import normalize, build_patch
from graph.nodes.update_crm import update_crm
from tools.settings import Settings
from tools.kickbox import KickboxClient
from tools.hubspot import HubSpotClient

FAILED = "failed"


def _continue_to(target: str):
    """Edge condition: go to `target`, or stop once a node has recorded an error."""
    def decide(state: VerificationState) -> str:
        if state.get("error"):
            return FAILED
        return target
    return decide


def build_workflow(kickbox, hubspot):
    """Build the single-contact verification workflow."""
    workflow = StateGraph(VerificationState)

    def _resolve_email(state: VerificationState) -> VerificationState:
        return resolve_email(state, hubspot)

    def _call_provider(state: VerificationState) -> VerificationState:
        return call_provider(state, kickbox)

    def _update_crm(state: VerificationState) -> VerificationState:
        return update_crm(state, hubspot)

    # Add nodes
    workflow.add_node("validate", validate)
    workflow.add_node("resolve_email", _resolve_email)
    workflow.add_node("call_provider", _call_provider)
    workflow.add_node("normalize", normalize)
    workflow.add_node("build_patch", build_patch)
    workflow.add_node("update_crm", _update_crm)

    workflow.add_edge(START, "validate")

    # Skip the contact lookup when the caller already supplied the email
    def after_validate(state: VerificationState) -> str:
        if state.get("error"):
            return FAILED
        return "call_provider" if state.get("email") else "resolve_email"

    workflow.add_conditional_edges(
        "validate",
        after_validate,
        {"resolve_email": "resolve_email", "call_provider": "call_provider", FAILED: END}
    )
    workflow.add_conditional_edges(
        "resolve_email", _continue_to("call_provider"), {"call_provider": "call_provider", FAILED: END}
    )
    workflow.add_conditional_edges(
        "call_provider", _continue_to("normalize"), {"normalize": "normalize", FAILED: END}
    )
    workflow.add_edge("normalize", "build_patch")
    workflow.add_edge("build_patch", "update_crm")
    workflow.add_edge("update_crm", END)

    return workflow.compile()


class VerificationPipeline:
    """
    One configured verifier: Kickbox and HubSpot clients plus the compiled workflow.

    Secrets are checked here, before any request is looked at.
    """

    def __init__(self, settings: Settings, kickbox: Optional[KickboxClient] = None,
                 hubspot: Optional[HubSpotClient] = None):
        settings.require()
        self.settings = settings
        self.kickbox = kickbox or KickboxClient(settings.kickbox_api_key, settings.kickbox_base_url)
        self.hubspot = hubspot or HubSpotClient(settings.hubspot_access_token, settings.hubspot_base_url)
        self.graph = build_workflow(self.kickbox, self.hubspot)

    def run(self, request: VerificationRequest) -> VerificationState:
        """Run one verification; failures come back in state["error"]."""
        logger.info(f"Starting verification workflow for contact: {request.contact_id}")
        return self.graph.invoke({"request": request, "error": None})

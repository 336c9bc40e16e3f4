"""
Invocation contexts for the verification workflow.

The same workflow runs behind four HubSpot entry points. They differ only in
how the contact id / email are pulled from the incoming payload and how the
outcome is handed back; each context below owns exactly those two concerns.
"""

import json
from typing import Dict, Any, Optional, Callable
from loguru import logger

from graph.state import VerificationRequest, VerificationState
from graph.workflow import VerificationPipeline
from tools.errors import VerificationError, CrmWriteError
from tools.settings import Settings


def _first(*values):
    for value in values:
        if value not in (None, ""):
            return value
    return None


class InvocationContext:
    """Input-resolution and output-formatting strategy for one entry point."""

    kind = ""

    def resolve_request(self, payload: Dict[str, Any]) -> VerificationRequest:
        raise NotImplementedError

    def on_success(self, state: VerificationState) -> Any:
        raise NotImplementedError

    def on_failure(self, error: VerificationError) -> Any:
        raise NotImplementedError


class UiActionContext(InvocationContext):
    """CRM card button: the card already knows the email and contact id."""

    kind = "ui_action"
    success_message = "Email verified and contact updated successfully!"

    def resolve_request(self, payload: Dict[str, Any]) -> VerificationRequest:
        params = (payload or {}).get("parameters") or {}
        return VerificationRequest(
            contact_id=_first(params.get("contactId")),
            email=params.get("email"),
            require_email=True
        )

    def on_success(self, state: VerificationState) -> Dict[str, Any]:
        body = {"message": self.success_message, **state["result"].as_output_fields()}
        return {"statusCode": 200, "body": json.dumps(body)}

    def on_failure(self, error: VerificationError) -> Dict[str, Any]:
        body = error.to_dict()
        # Verified but not stored: hand the result back so it is not lost
        if isinstance(error, CrmWriteError) and error.result is not None:
            body["verification"] = error.result.as_output_fields()
            body["persisted"] = False
        return {"statusCode": error.status_code, "body": json.dumps(body)}


class DirectCallContext(UiActionContext):
    """Serverless function called with a contact id; the email is looked up if absent."""

    kind = "direct_call"

    def resolve_request(self, payload: Dict[str, Any]) -> VerificationRequest:
        params = (payload or {}).get("parameters") or {}
        return VerificationRequest(
            contact_id=_first(params.get("contactId"), params.get("objectId")),
            email=params.get("email")
        )


class WorkflowActionContext(InvocationContext):
    """Custom code action on an auto-enrolled workflow. Failure is raised, not returned."""

    kind = "workflow_action"

    def resolve_request(self, payload: Dict[str, Any]) -> VerificationRequest:
        obj = (payload or {}).get("object") or {}
        return VerificationRequest(contact_id=_first(obj.get("objectId")))

    def on_success(self, state: VerificationState) -> Dict[str, Any]:
        result = state["result"]
        output_fields = {
            **result.as_output_fields(),
            # objectId exactly as the workflow event carried it
            "verifiedContactId": state["request"].contact_id,
            "verifiedEmail": state["email"],
        }
        return {
            "outputFields": output_fields,
            "message": f"Email verified for contact {state['contact_id']} ({state['email']}). Result: {result.result}"
        }

    def on_failure(self, error: VerificationError) -> Any:
        raise error


class InputFieldActionContext(WorkflowActionContext):
    """Workflow action with input fields; completion is reported through a callback."""

    kind = "workflow_input_action"

    def __init__(self, callback: Callable[[Dict[str, Any]], Any]):
        self.callback = callback

    def resolve_request(self, payload: Dict[str, Any]) -> VerificationRequest:
        payload = payload or {}
        inputs = payload.get("inputFields") or {}
        obj = payload.get("object") or {}
        return VerificationRequest(
            contact_id=_first(inputs.get("contactId"), inputs.get("hs_object_id"), obj.get("objectId")),
            email=_first(inputs.get("email"))
        )

    def on_success(self, state: VerificationState) -> Any:
        response = super().on_success(state)
        return self.callback({"success": True, **response})

    def on_failure(self, error: VerificationError) -> Any:
        return self.callback({"success": False, "message": error.message})


CONTEXTS = {
    UiActionContext.kind: UiActionContext,
    DirectCallContext.kind: DirectCallContext,
    WorkflowActionContext.kind: WorkflowActionContext,
    InputFieldActionContext.kind: InputFieldActionContext,
}


def get_context(kind: str, callback: Optional[Callable] = None) -> InvocationContext:
    """Look up the context for an invocation kind."""
    if kind not in CONTEXTS:
        raise ValueError(f"Unknown invocation context: {kind}")
    if kind == InputFieldActionContext.kind:
        if callback is None:
            raise ValueError("workflow_input_action needs a completion callback")
        return InputFieldActionContext(callback)
    return CONTEXTS[kind]()


def invoke(kind: str, payload: Dict[str, Any], settings: Optional[Settings] = None, kickbox=None, hubspot=None,
           callback: Optional[Callable] = None, pipeline: Optional[VerificationPipeline] = None) -> Any:
    """
    Run one verification for the given invocation context.

    Args:
        kind: One of CONTEXTS
        payload: Incoming event/parameters as HubSpot sends them
        settings: Secrets and endpoints
        kickbox: Optional Kickbox client (built from settings when omitted)
        hubspot: Optional HubSpot client (built from settings when omitted)
        callback: Completion callback, required for workflow_input_action
        pipeline: Pipeline built once at startup; when omitted one is built from settings

    Returns:
        The context-shaped response
    """
    context = get_context(kind, callback)

    if pipeline is None:
        try:
            pipeline = VerificationPipeline(settings or Settings(), kickbox=kickbox, hubspot=hubspot)
        except VerificationError as e:
            logger.error(f"{context.kind} aborted: {e}")
            return context.on_failure(e)

    state = pipeline.run(context.resolve_request(payload))

    if state.get("error"):
        logger.error(f"{context.kind} failed: {state['error']}")
        return context.on_failure(state["error"])

    logger.info(f"{context.kind} completed for contact {state['contact_id']}")
    return context.on_success(state)

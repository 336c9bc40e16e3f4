import os
import time
from typing import Dict, Any
from fastapi import FastAPI, Request, Body
from fastapi.responses import JSONResponse
from loguru import logger
from dotenv import load_dotenv

# Import our modules
from graph.contexts import invoke
from graph.card import CARD_PROPERTIES, build_card
from graph.workflow import VerificationPipeline
from tools.errors import VerificationError, ConfigurationError
from tools.hubspot import HubSpotClient
from tools.settings import Settings

# Load environment variables
load_dotenv()
settings = Settings.from_env()

# Configure logging
logger.add(settings.log_file, rotation="1 day", retention="7 days", level="INFO")


def load_pipeline(settings: Settings):
    """Build the verification pipeline once; None when secrets are missing."""
    try:
        return VerificationPipeline(settings)
    except ConfigurationError as e:
        logger.warning(f"Verification pipeline not ready: {e}")
        return None


# Initialize workflow
pipeline = load_pipeline(settings)

# Initialize FastAPI app
app = FastAPI(
    title="Kickbox Email Verification for HubSpot",
    description="Verifies contact emails with Kickbox and stores the results on HubSpot contacts",
    version="1.0.0"
)


@app.post("/functions/verify-email")
def verify_email(payload: Dict[str, Any] = Body(default={})):
    """
    Verify button on the contact card.

    Expected payload:
    {
        "parameters": {"email": "jane@example.com", "contactId": "101"}
    }
    """
    contact_id = (payload.get('parameters') or {}).get('contactId', 'unknown')
    logger.info(f"verify-email called for contact: {contact_id}")
    return invoke("ui_action", payload, settings, pipeline=pipeline)


@app.post("/functions/verify-contact")
def verify_contact(payload: Dict[str, Any] = Body(default={})):
    """Verify a contact by id; the email is read from HubSpot when not passed."""
    return invoke("direct_call", payload, settings, pipeline=pipeline)


@app.post("/functions/get-contact-data")
def get_contact_data(payload: Dict[str, Any] = Body(default={})):
    """Return email and name of a contact."""
    object_id = (payload.get("parameters") or {}).get("objectId")

    if not object_id:
        return {"statusCode": 400, "body": {"error": "Object ID is required"}}

    try:
        settings.require(kickbox=False)
        hubspot = HubSpotClient(settings.hubspot_access_token, settings.hubspot_base_url)
        properties = hubspot.get_contact(str(object_id), ["email", "firstname", "lastname"])
    except VerificationError as e:
        logger.error(f"Failed to fetch contact data: {e}")
        return {"statusCode": 500, "body": {"error": "Failed to fetch contact data", "details": e.message}}

    return {
        "statusCode": 200,
        "body": {
            "email": properties.get("email"),
            "firstname": properties.get("firstname"),
            "lastname": properties.get("lastname")
        }
    }


@app.post("/workflows/verify-email")
def workflow_verify_email(payload: Dict[str, Any] = Body(default={})):
    """
    Custom code action for auto-enrolled workflows.

    Expected payload:
    {
        "object": {"objectId": 101, "objectType": "CONTACT"}
    }
    """
    return invoke("workflow_action", payload, settings, pipeline=pipeline)


@app.post("/workflows/verify-email-input")
def workflow_verify_email_input(payload: Dict[str, Any] = Body(default={})):
    """Workflow action with input fields; returns the completion payload."""
    completions = []
    invoke("workflow_input_action", payload, settings, callback=completions.append, pipeline=pipeline)
    return completions[-1]


@app.get("/cards/contacts/{contact_id}")
def contact_card(contact_id: str):
    """Card view model built from the contact's stored kickbox_* properties."""
    settings.require(kickbox=False)
    hubspot = HubSpotClient(settings.hubspot_access_token, settings.hubspot_base_url)
    properties = hubspot.get_contact(contact_id, CARD_PROPERTIES)
    return build_card(properties)


@app.get("/health")
def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "version": "1.0.0",
        "services": {
            "kickbox": "configured" if settings.kickbox_api_key else "missing_api_key",
            "hubspot": "configured" if settings.hubspot_access_token else "missing_access_token"
        }
    }


# Error handlers
@app.exception_handler(VerificationError)
async def verification_exception_handler(request: Request, exc: VerificationError):
    if isinstance(exc, ConfigurationError):
        logger.error(f"Configuration error: {exc}")
    else:
        logger.error(f"Verification failed: {exc}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={"status": "error", "message": "Internal server error"}
    )


if __name__ == "__main__":
    import uvicorn

    # Create logs directory if it doesn't exist
    os.makedirs(os.path.dirname(settings.log_file) or ".", exist_ok=True)

    logger.info("Starting Kickbox Email Verification for HubSpot")

    uvicorn.run(
        "app:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )

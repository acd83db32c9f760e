"""Azure Function App for compose stack deployments."""

import json
import logging

import azure.functions as func
from pydantic import ValidationError

from config import settings
from models.errors import DeploymentErrorKind, StackDeploymentError, classify_error
from models.requests import DeploymentRequest, DeploymentResponse
from services.deployment_service import DeploymentService

app = func.FunctionApp()

# Configure logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@app.function_name(name="deploy")
@app.route(route="deploy", methods=["POST"], auth_level=func.AuthLevel.FUNCTION)
async def deploy_function(req: func.HttpRequest) -> func.HttpResponse:
    """Deploy a compose stack from a Git repository."""
    logger.info("Deploy function triggered")

    try:
        req_body = req.get_json()
    except ValueError:
        req_body = None
    if not req_body or not isinstance(req_body, dict):
        return func.HttpResponse(
            json.dumps({"error": "Request body must be a JSON object"}),
            status_code=400,
            headers={"Content-Type": "application/json"},
        )

    try:
        deployment_request = DeploymentRequest(**req_body)
    except ValidationError as e:
        logger.error(f"Validation error: {e.error_count()} invalid field(s)")
        return func.HttpResponse(
            json.dumps({"error": "Validation error", "fields": [err["loc"] for err in e.errors()]}),
            status_code=400,
            headers={"Content-Type": "application/json"},
        )

    deployment_service = DeploymentService(settings)
    try:
        result = await deployment_service.deploy(deployment_request)
    except (StackDeploymentError, OSError) as e:
        kind = classify_error(e)
        logger.error(f"Deployment failed: {kind.value}")
        result = DeploymentResponse(success=False, message="Deployment failed", error_kind=kind)
    except Exception as e:
        logger.error(f"Unexpected error: {e!s}")
        return func.HttpResponse(
            json.dumps({"error": "Internal server error"}),
            status_code=500,
            headers={"Content-Type": "application/json"},
        )

    status_code = 200
    if not result.success:
        status_code = 400 if result.error_kind == DeploymentErrorKind.INVALID_REPOSITORY_ADDRESS else 500

    return func.HttpResponse(
        result.model_dump_json(),
        status_code=status_code,
        headers={"Content-Type": "application/json"},
    )


@app.function_name(name="health")
@app.route(route="health", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint."""
    return func.HttpResponse(
        json.dumps({"status": "healthy", "service": "stack-deploy-function"}),
        status_code=200,
        headers={"Content-Type": "application/json"},
    )

"""
FastAPI main application.

This is the interface between the external provision controller and the
provisioner: one call per Provision or Delete. Retries are the controller's
business; every error response says whether a retry can help.
"""

import uuid
from typing import Any, Dict, Tuple

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from oslo_log import log as logging

from cephfs_provisioner import __version__
from cephfs_provisioner.api.models import (
    DeleteResponse,
    ErrorResponse,
    IdentityResponse,
    ProvisionCreate,
    VolumeDelete,
    VolumeResponse,
)
from cephfs_provisioner.api.services import provision_service
from cephfs_provisioner.provisioner import exceptions

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}

app = FastAPI(
    title="CephFS Provisioner API",
    description="Dynamic CephFS volume provisioning for Kubernetes",
    version=__version__,
)
LOG = logging.getLogger(__name__)


def _error_status(exc: exceptions.CephFSProvisionerException) -> Tuple[int, str]:
    if isinstance(exc, exceptions.ProvisionValidationError):
        return 400, "VALIDATION_ERROR"
    if isinstance(exc, exceptions.OwnershipNotFound):
        return 409, "OWNERSHIP_NOT_FOUND"
    if isinstance(exc, exceptions.DependencyError):
        return 503, "DEPENDENCY_ERROR"
    if isinstance(exc, exceptions.AgentError):
        return 502, "AGENT_ERROR"
    return 500, "PROVISIONER_ERROR"


@app.exception_handler(exceptions.CephFSProvisionerException)
async def provisioner_exception_handler(
    request: Request, exc: exceptions.CephFSProvisionerException
) -> JSONResponse:
    """Map provisioner errors to HTTP responses."""
    request_id = str(uuid.uuid4())
    status_code, code = _error_status(exc)
    LOG.warning(
        "Request failed (request_id=%s, path=%s): %s", request_id, request.url.path, exc
    )
    return JSONResponse(
        status_code=status_code,
        content={
            "request_id": request_id,
            "status": "error",
            "error": {
                "code": code,
                "message": str(exc),
                "retryable": exc.retryable,
                "details": {"type": type(exc).__name__},
            },
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler."""
    request_id = str(uuid.uuid4())
    LOG.exception("Unhandled error (request_id=%s, path=%s)", request_id, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "request_id": request_id,
            "status": "error",
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "Internal server error",
                "retryable": True,
                "details": {},
            },
        },
    )


@app.post("/v1/volumes", response_model=VolumeResponse, status_code=201, responses=ERROR_RESPONSES)
def provision_volume(data: ProvisionCreate) -> Dict[str, Any]:
    """
    Provision a volume for a claim.
    """
    request_id = str(uuid.uuid4())
    result = provision_service.provision(data)
    return {"request_id": request_id, "status": "ok", "data": result}


@app.post("/v1/volumes/delete", response_model=DeleteResponse, responses=ERROR_RESPONSES)
def delete_volume(data: VolumeDelete) -> Dict[str, Any]:
    """
    Delete the share behind a volume.

    A volume owned by another provisioner instance is answered with
    status "ignored"; the controller must not retry it.
    """
    request_id = str(uuid.uuid4())
    result = provision_service.delete(data.manifest)
    if result.ignored:
        return {
            "request_id": request_id,
            "status": "ignored",
            "data": {"deleted": False, "reason": result.reason},
        }
    return {"request_id": request_id, "status": "ok", "data": {"deleted": True}}


@app.get("/v1/identity", response_model=IdentityResponse)
def get_identity() -> Dict[str, Any]:
    """
    Return the provisioner name and this instance's identity.
    """
    request_id = str(uuid.uuid4())
    return {"request_id": request_id, "status": "ok", "data": provision_service.identity()}

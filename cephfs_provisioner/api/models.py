"""
Pydantic models for API requests and responses.
"""

import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

# RFC 1123 subdomain (PersistentVolume names) and label (namespaces)
_SUBDOMAIN_RE = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$")
_LABEL_RE = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")


class ProvisionCreate(BaseModel):
    """Request model for provisioning a volume for a claim."""

    pv_name: str = Field(..., description="Name of the PersistentVolume to create", min_length=1, max_length=253)
    namespace: str = Field(..., description="Namespace of the claim", min_length=1, max_length=63)
    capacity: str = Field(..., description="Requested storage (e.g., 1Gi)", min_length=1)
    parameters: Dict[str, str] = Field(default_factory=dict, description="StorageClass parameters")
    selector: Optional[Dict[str, Any]] = Field(None, description="Claim selector (not supported)")
    reclaim_policy: str = Field("Delete", description="Reclaim policy for the volume")
    storage_class: Optional[str] = Field(None, description="StorageClass name")
    pvc_name: Optional[str] = Field(None, description="Claim name")

    @field_validator("pv_name")
    def validate_pv_name(cls, v: str) -> str:
        if not _SUBDOMAIN_RE.match(v):
            raise ValueError("pv_name must be a lowercase RFC 1123 subdomain")
        return v

    @field_validator("namespace")
    def validate_namespace(cls, v: str) -> str:
        if not _LABEL_RE.match(v):
            raise ValueError("namespace must be a lowercase RFC 1123 label")
        return v

    @field_validator("reclaim_policy")
    def validate_reclaim_policy(cls, v: str) -> str:
        if v not in ("Delete", "Retain", "Recycle"):
            raise ValueError("reclaim_policy must be one of Delete, Retain, Recycle")
        return v


class Volume(BaseModel):
    """Provisioned volume response model."""

    name: str
    capacity: str
    reclaim_policy: str
    monitors: List[str]
    export_path: str
    granted_user: str
    secret_name: str
    secret_namespace: Optional[str] = None
    storage_class: Optional[str] = None
    annotations: Dict[str, str]
    access_modes: List[str]
    owner_identity: Optional[str] = None
    share_name: Optional[str] = None


class ProvisionResult(BaseModel):
    """Provisioned volume and the PersistentVolume to publish for it."""

    volume: Volume
    manifest: Dict[str, Any]


class VolumeDelete(BaseModel):
    """Request model for deleting a volume."""

    manifest: Dict[str, Any] = Field(..., description="PersistentVolume object")


class VolumeResponse(BaseModel):
    """Response model for provisioning."""

    request_id: str
    status: str
    data: ProvisionResult


class DeleteResponse(BaseModel):
    """Response model for deletion; status is "ok" or "ignored"."""

    request_id: str
    status: str
    data: dict


class IdentityResponse(BaseModel):
    """Response model for the provisioner identity."""

    request_id: str
    status: str
    data: dict


class ErrorDetail(BaseModel):
    code: str
    message: str
    retryable: bool
    details: dict = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    request_id: str
    status: str = "error"
    error: ErrorDetail

"""Data model for the CephFS provisioner.

Request, connection and descriptor types are immutable; a descriptor renders
to (and is parsed back from) a Kubernetes PersistentVolume manifest.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .exceptions import InvalidVolume

PROVISIONER_ID_ANNOTATION = "cephFSProvisionerIdentity"
SHARE_ANNOTATION = "cephShare"
STORAGE_CLASS_ANNOTATION = "volume.beta.kubernetes.io/storage-class"
PROVISIONED_BY_ANNOTATION = "pv.kubernetes.io/provisioned-by"

ACCESS_MODES: Tuple[str, ...] = ("ReadWriteOnce", "ReadOnlyMany", "ReadWriteMany")


@dataclass(frozen=True)
class ProvisionRequest:
    """A claim to be satisfied with a new CephFS share.

    Attributes:
        pv_name: Name of the PersistentVolume to create (chosen by the caller)
        namespace: Namespace of the claim; the share secret is created here
        capacity: Requested storage quantity (e.g., "1Gi"), copied as-is
        parameters: Storage class parameters (the configuration bundle)
        selector: Claim selector; must be None
        reclaim_policy: Reclaim policy to publish on the volume
        storage_class: Storage class name, recorded for later deletion
        pvc_name: Claim name, used for logging only
    """

    pv_name: str
    namespace: str
    capacity: str
    parameters: Dict[str, str] = field(default_factory=dict)
    selector: Optional[Dict[str, Any]] = None
    reclaim_policy: str = "Delete"
    storage_class: Optional[str] = None
    pvc_name: Optional[str] = None


@dataclass(frozen=True)
class StorageClass:
    name: str
    provisioner: str = ""
    parameters: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class SecretReference:
    namespace: str
    name: str


@dataclass(frozen=True)
class ClusterConnection:
    """Everything needed to talk to the Ceph cluster as admin."""

    cluster: str
    admin_id: str
    admin_secret: str
    monitors: Tuple[str, ...]

    def __repr__(self) -> str:
        return (
            f"ClusterConnection(cluster={self.cluster!r}, admin_id={self.admin_id!r}, "
            f"monitors={list(self.monitors)!r})"
        )


@dataclass(frozen=True)
class ClusterParameters:
    """Validated configuration bundle, before the admin secret is fetched."""

    cluster: str
    admin_id: str
    monitors: Tuple[str, ...]
    secret_ref: SecretReference

    def connect(self, admin_secret: str) -> ClusterConnection:
        return ClusterConnection(
            cluster=self.cluster,
            admin_id=self.admin_id,
            admin_secret=admin_secret,
            monitors=self.monitors,
        )


@dataclass(frozen=True)
class AllocationResult:
    """Output of the allocation agent's create mode."""

    path: str
    user: str
    secret: str

    def __repr__(self) -> str:
        return f"AllocationResult(path={self.path!r}, user={self.user!r})"


@dataclass(frozen=True)
class VolumeDescriptor:
    """A provisioned CephFS share as published to the cluster.

    Ownership (provisioner identity and share name) lives in ``annotations``
    so that it survives the round trip through the PersistentVolume object.
    """

    name: str
    capacity: str
    reclaim_policy: str
    monitors: Tuple[str, ...]
    export_path: str
    granted_user: str
    secret_name: str
    secret_namespace: Optional[str] = None
    storage_class: Optional[str] = None
    annotations: Dict[str, str] = field(default_factory=dict)
    access_modes: Tuple[str, ...] = ACCESS_MODES

    @property
    def owner_identity(self) -> Optional[str]:
        return self.annotations.get(PROVISIONER_ID_ANNOTATION)

    @property
    def share_name(self) -> Optional[str]:
        return self.annotations.get(SHARE_ANNOTATION)

    @property
    def class_name(self) -> Optional[str]:
        """Storage class reference, annotation first."""
        return self.annotations.get(STORAGE_CLASS_ANNOTATION) or self.storage_class

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "capacity": self.capacity,
            "reclaim_policy": self.reclaim_policy,
            "monitors": list(self.monitors),
            "export_path": self.export_path,
            "granted_user": self.granted_user,
            "secret_name": self.secret_name,
            "secret_namespace": self.secret_namespace,
            "storage_class": self.storage_class,
            "annotations": dict(self.annotations),
            "access_modes": list(self.access_modes),
            "owner_identity": self.owner_identity,
            "share_name": self.share_name,
        }

    def to_manifest(self) -> Dict[str, Any]:
        """Render as a v1 PersistentVolume."""
        secret_ref: Dict[str, str] = {"name": self.secret_name}
        if self.secret_namespace:
            secret_ref["namespace"] = self.secret_namespace

        spec: Dict[str, Any] = {
            "persistentVolumeReclaimPolicy": self.reclaim_policy,
            "accessModes": list(self.access_modes),
            # Kernel CephFS does not enforce quota; capacity is informational.
            "capacity": {"storage": self.capacity},
            "cephfs": {
                "monitors": list(self.monitors),
                "path": self.export_path,
                "user": self.granted_user,
                "secretRef": secret_ref,
            },
        }
        if self.storage_class:
            spec["storageClassName"] = self.storage_class

        return {
            "apiVersion": "v1",
            "kind": "PersistentVolume",
            "metadata": {
                "name": self.name,
                "annotations": dict(self.annotations),
            },
            "spec": spec,
        }

    @classmethod
    def from_manifest(cls, manifest: Dict[str, Any]) -> "VolumeDescriptor":
        """Parse a v1 PersistentVolume with a CephFS source.

        Raises:
            InvalidVolume: If the manifest has no name or no CephFS source
        """
        metadata = manifest.get("metadata") or {}
        spec = manifest.get("spec") or {}
        name = metadata.get("name")
        if not name:
            raise InvalidVolume(volume="<unnamed>", details="metadata.name is required")

        cephfs = spec.get("cephfs")
        if not isinstance(cephfs, dict):
            raise InvalidVolume(volume=name, details="not a CephFS volume")

        secret_ref = cephfs.get("secretRef") or {}
        return cls(
            name=name,
            capacity=str((spec.get("capacity") or {}).get("storage", "")),
            reclaim_policy=spec.get("persistentVolumeReclaimPolicy", "Delete"),
            monitors=tuple(cephfs.get("monitors") or ()),
            export_path=cephfs.get("path", ""),
            granted_user=cephfs.get("user", ""),
            secret_name=secret_ref.get("name", ""),
            secret_namespace=secret_ref.get("namespace"),
            storage_class=spec.get("storageClassName"),
            annotations=dict(metadata.get("annotations") or {}),
            access_modes=tuple(spec.get("accessModes") or ACCESS_MODES),
        )


class Ownership(str, Enum):
    """Result of checking a volume's ownership stamp."""

    OWNED = "owned"
    NOT_FOUND = "not_found"
    NOT_MINE = "not_mine"


class DeleteOutcome(str, Enum):
    DELETED = "deleted"
    IGNORED = "ignored"


@dataclass(frozen=True)
class DeleteResult:
    """Outcome of a delete request that did not fail.

    IGNORED means the volume belongs to another provisioner instance; the
    controller must treat it as terminal and not retry.
    """

    outcome: DeleteOutcome
    reason: Optional[str] = None

    @property
    def ignored(self) -> bool:
        return self.outcome == DeleteOutcome.IGNORED

    @classmethod
    def deleted(cls) -> "DeleteResult":
        return cls(DeleteOutcome.DELETED)

    @classmethod
    def ignore(cls, reason: str) -> "DeleteResult":
        return cls(DeleteOutcome.IGNORED, reason)


